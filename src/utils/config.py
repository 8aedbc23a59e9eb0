"""Configuration loader and validator for the quality kit.

Loads settings from configs/config.yaml and provides typed access
to all configuration sections via dataclasses.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "configs" / "config.yaml"

DEFAULT_BASE_TYPE = "Illuminate\\Http\\Resources\\Json\\JsonResource"
DEFAULT_MODEL_NAMESPACE = "App\\Models"
DEFAULT_RESOURCE_SUFFIX = "Resource"

_DEFAULT_PATHS = [
    "app",
    "bootstrap",
    "config",
    "public",
    "resources",
    "routes",
    "tests",
]
_DEFAULT_EXCLUDES = ["vendor", "node_modules", "storage", ".git"]


@dataclass
class ResourceRuleConfig:
    """Configuration for the API resource ``@mixin`` rule."""

    base_type: str = DEFAULT_BASE_TYPE
    model_namespace: str = DEFAULT_MODEL_NAMESPACE
    resource_suffix: str = DEFAULT_RESOURCE_SUFFIX


@dataclass
class RulesConfig:
    """Configuration for the set of rewrite rules."""

    enabled: list[str] = field(default_factory=lambda: ["add_api_resource_phpdoc"])
    api_resource_phpdoc: ResourceRuleConfig = field(default_factory=ResourceRuleConfig)


@dataclass
class ParserConfig:
    """Configuration for source file discovery."""

    extensions: list[str] = field(default_factory=lambda: [".php"])
    exclude_patterns: list[str] = field(default_factory=lambda: list(_DEFAULT_EXCLUDES))


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None


@dataclass
class AppConfig:
    """Top-level application configuration."""

    rules: RulesConfig = field(default_factory=RulesConfig)
    paths: list[str] = field(default_factory=lambda: list(_DEFAULT_PATHS))
    parser: ParserConfig = field(default_factory=ParserConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _build_rules_config(data: dict) -> RulesConfig:
    """Build a RulesConfig from a dictionary.

    Args:
        data: Dictionary with the enabled rule names and per-rule settings.

    Returns:
        A configured RulesConfig instance.
    """
    resource_data = data.get("api_resource_phpdoc", {}) or {}
    return RulesConfig(
        enabled=data.get("enabled", ["add_api_resource_phpdoc"]),
        api_resource_phpdoc=ResourceRuleConfig(
            base_type=resource_data.get("base_type", DEFAULT_BASE_TYPE),
            model_namespace=resource_data.get(
                "model_namespace", DEFAULT_MODEL_NAMESPACE
            ),
            resource_suffix=resource_data.get(
                "resource_suffix", DEFAULT_RESOURCE_SUFFIX
            ),
        ),
    )


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Load application configuration from a YAML file.

    Reads the YAML config file and constructs a fully typed AppConfig
    object. Falls back to defaults for any missing values.

    Args:
        config_path: Path to the YAML config file. If None, uses the
            default path at configs/config.yaml.

    Returns:
        A fully populated AppConfig instance.

    Raises:
        yaml.YAMLError: If the config file contains invalid YAML.
    """
    path = Path(config_path) if config_path else _DEFAULT_CONFIG_PATH

    if not path.exists():
        logger.warning("Config file not found at %s, using defaults", path)
        return AppConfig()

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    logger.info("Loaded configuration from %s", path)

    parser_data = raw.get("parser", {})
    parser_config = ParserConfig(
        extensions=parser_data.get("extensions", [".php"]),
        exclude_patterns=parser_data.get("exclude_patterns", list(_DEFAULT_EXCLUDES)),
    )

    logging_data = raw.get("logging", {})
    logging_config = LoggingConfig(
        level=logging_data.get("level", "INFO"),
        format=logging_data.get(
            "format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ),
        file=logging_data.get("file"),
    )

    return AppConfig(
        rules=_build_rules_config(raw.get("rules", {})),
        paths=raw.get("paths", list(_DEFAULT_PATHS)),
        parser=parser_config,
        logging=logging_config,
    )
