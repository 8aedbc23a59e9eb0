"""Registry of the rewrite rules the kit ships with."""

import logging
from typing import Callable

from src.rules.api_resource_phpdoc import AddApiResourcePhpDocRule
from src.rules.base import Rule
from src.rules.resolvers import ClassHierarchyTypeResolver
from src.utils.config import RulesConfig

logger = logging.getLogger(__name__)

RuleFactory = Callable[[RulesConfig, ClassHierarchyTypeResolver], Rule]

AVAILABLE_RULES: dict[str, RuleFactory] = {
    AddApiResourcePhpDocRule.name: lambda config, resolver: AddApiResourcePhpDocRule(
        config=config.api_resource_phpdoc, type_resolver=resolver
    ),
}

RULE_DESCRIPTIONS: dict[str, str] = {
    AddApiResourcePhpDocRule.name: AddApiResourcePhpDocRule.description,
}


def build_rules(
    config: RulesConfig, type_resolver: ClassHierarchyTypeResolver
) -> list[Rule]:
    """Instantiate the enabled rules in configured order.

    Args:
        config: Rules section of the application config.
        type_resolver: Shared hierarchy resolver the engine keeps filled.

    Returns:
        The rule instances, in the order they are listed in the config.

    Raises:
        ValueError: If an enabled rule name is not registered.
    """
    rules: list[Rule] = []
    for rule_name in config.enabled:
        factory = AVAILABLE_RULES.get(rule_name)
        if factory is None:
            raise ValueError(
                f"Unknown rule '{rule_name}'. "
                f"Available: {', '.join(sorted(AVAILABLE_RULES))}"
            )
        rules.append(factory(config, type_resolver))
    logger.debug("Enabled rules: %s", ", ".join(r.name for r in rules))
    return rules
