"""CLI commands for the Laravel Quality Kit.

Provides the Click-based command group 'quality-kit' with subcommands
for applying rewrite rules, previewing what they would change, and
listing the available rules.
"""

import json
import logging
from pathlib import Path
from typing import Optional

import click

from src import __version__
from src.engine.rule_engine import RuleEngine
from src.parsers.php_parser import PhpParser
from src.rules.registry import AVAILABLE_RULES, RULE_DESCRIPTIONS
from src.utils.config import AppConfig, load_config
from src.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def _default_paths(config: AppConfig) -> list[str]:
    """Return the configured project paths that exist in the working directory."""
    return [p for p in config.paths if Path(p).exists()]


def _build_engine(config: AppConfig) -> RuleEngine:
    """Create a rule engine, turning config mistakes into usage errors."""
    try:
        return RuleEngine(config=config)
    except ValueError as e:
        raise click.UsageError(str(e)) from e


@click.group()
@click.version_option(version=__version__, prog_name="quality-kit")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to a config.yaml file.",
)
@click.option("-v", "--verbose", count=True, help="Increase log verbosity.")
@click.pass_context
def kit(ctx: click.Context, config_path: Optional[str], verbose: int) -> None:
    """Laravel Quality Kit — static-analysis helpers for Laravel code."""
    config = load_config(config_path)
    setup_logging(
        level=config.logging.level,
        log_format=config.logging.format,
        log_file=config.logging.file,
        verbosity=verbose,
    )
    ctx.obj = config


@kit.command()
@click.argument("paths", nargs=-1, type=click.Path(exists=True))
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show the changes as a diff without writing any file.",
)
@click.pass_obj
def process(config: AppConfig, paths: tuple[str, ...], dry_run: bool) -> None:
    """Apply the enabled rules to PHP files.

    Rewrites files in place. Without PATHS, processes the configured
    project directories that exist in the current directory.
    """
    targets = list(paths) or _default_paths(config)
    if not targets:
        raise click.UsageError("No paths given and none of the configured paths exist.")

    engine = _build_engine(config)
    results = engine.process_paths(targets, dry_run=dry_run)
    changed = [r for r in results if r.changed]
    skipped = [r for r in results if r.skipped]

    for result in changed:
        if dry_run:
            click.echo(result.diff(), nl=False)
        else:
            click.echo(f"  Updated: {result.file_path} ({len(result.changes)} changes)")

    for result in skipped:
        click.echo(f"  Skipped (syntax errors): {result.file_path}", err=True)

    verb = "would change" if dry_run else "changed"
    click.echo(f"Processed {len(results)} files, {len(changed)} {verb}")


@kit.command()
@click.argument("path", type=click.Path(exists=True))
@click.option("--json", "as_json", is_flag=True, help="Emit machine-readable JSON.")
@click.pass_obj
def scan(config: AppConfig, path: str, as_json: bool) -> None:
    """List class declarations and the annotations the rules would add.

    Reads the files under PATH without modifying them.
    """
    engine = _build_engine(config)
    parser = PhpParser()
    modules = []
    for file_path in engine.collect_files([path]):
        try:
            modules.append(parser.parse_file(str(file_path)))
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Skipping %s: %s", file_path, e)

    # Index everything first so cross-file parents resolve
    for module in modules:
        engine.index_module(module)

    report = []
    for module in modules:
        for entry in engine.scan_module(module):
            item = entry.node.to_dict()
            item["pending_rules"] = entry.rules
            item["proposed_doc_block"] = (
                entry.updated.doc_block.text
                if entry.updated and entry.updated.doc_block
                else None
            )
            report.append(item)

    if as_json:
        click.echo(json.dumps(report, indent=2))
        return

    for item in report:
        location = f"{item['file_path']}:{item['line_number']}"
        name = item["fqcn"] or "class@anonymous"
        if item["pending_rules"]:
            click.echo(f"  {location} {name}: {', '.join(item['pending_rules'])}")
        else:
            click.echo(f"  {location} {name}: up to date")
    pending = sum(1 for item in report if item["pending_rules"])
    click.echo(f"Found {len(report)} classes, {pending} need changes")


@kit.command()
@click.pass_obj
def rules(config: AppConfig) -> None:
    """List the available rules and whether each is enabled."""
    for rule_name in sorted(AVAILABLE_RULES):
        marker = "*" if rule_name in config.rules.enabled else " "
        click.echo(f"{marker} {rule_name}: {RULE_DESCRIPTIONS[rule_name]}")
