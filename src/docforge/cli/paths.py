"""Shared path resolution for CLI commands."""

from pathlib import Path

import click


def resolve_schema_path(path: Path | None) -> Path:
    """Return the schema directory: --path if given, else ./schemas."""
    return path if path is not None else Path.cwd() / "schemas"


path_option = click.option(
    "--path",
    "schema_path",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Schema directory (default: ./schemas).",
)
