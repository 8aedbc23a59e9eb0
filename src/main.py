"""Entry point for the Laravel Quality Kit.

Delegates to the Click command group, which loads configuration and
sets up logging before running a subcommand.
"""

from src.cli.commands import kit


def main() -> None:
    """Launch the CLI."""
    kit(prog_name="quality-kit")


if __name__ == "__main__":
    main()
