"""DocForge CLI entry point."""

import logging
import os

import click


@click.group()
@click.option(
    "--log-level",
    default=lambda: os.environ.get("DOCFORGE_LOG_LEVEL", "WARNING"),
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level (default: $DOCFORGE_LOG_LEVEL or WARNING).",
)
def cli(log_level: str):
    """DocForge — document schemas and lifecycle hooks CLI."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Register subcommand groups
from docforge.cli.hooks_cmd import hooks  # noqa: E402
from docforge.cli.schema_cmd import schema  # noqa: E402

cli.add_command(schema)
cli.add_command(hooks)
