"""Hook CLI commands — list and check hook references in schema files."""

import importlib
from pathlib import Path

import click

from docforge.cli.paths import path_option, resolve_schema_path
from docforge.hooks.registry import HookRegistry
from docforge.schema.loader import SchemaLoader


def _load(schema_path: Path | None) -> SchemaLoader:
    schema_path = resolve_schema_path(schema_path)
    if not schema_path.exists():
        click.echo(f"Error: Schema directory not found at {schema_path}", err=True)
        raise SystemExit(1)
    loader = SchemaLoader(schema_path)
    loader.load_all()
    return loader


@click.group()
def hooks():
    """Hook commands."""
    pass


@hooks.command("list")
@path_option
@click.option("--schema", "schema_name", default=None, help="Only show this schema.")
def list_cmd(schema_path: Path | None, schema_name: str | None):
    """Show the hooks each schema declares, in execution order."""
    loader = _load(schema_path)
    names = [schema_name] if schema_name else loader.list_schemas()

    for name in names:
        config = loader.get_config(name)
        if config is None:
            click.echo(f"Error: Schema '{name}' not found", err=True)
            raise SystemExit(1)

        click.echo(click.style(name, bold=True))
        if not config.hook_names():
            click.echo("  (no hooks)")
            continue
        for phase in ("pre", "post"):
            for operation, hook_list in config.hooks.get(phase, {}).items():
                joined = ", ".join(h.name for h in hook_list)
                click.echo(f"  {phase} {operation}: {joined}")


@hooks.command()
@path_option
@click.option(
    "--module",
    "modules",
    multiple=True,
    help="Module that registers hooks with @hook (repeatable).",
)
def check(schema_path: Path | None, modules: tuple[str, ...]):
    """Check that every hook referenced by a schema is registered."""
    for module in modules:
        try:
            importlib.import_module(module)
        except ImportError as e:
            click.echo(click.style(f"Cannot import {module}: {e}", fg="red"), err=True)
            raise SystemExit(1)

    loader = _load(schema_path)
    missing = loader.unresolved_hooks()
    if missing:
        for name in missing:
            click.echo(click.style(f"  ✗ {name} is not registered", fg="red"))
        click.echo(click.style(f"\n{len(missing)} unregistered hook(s)", fg="red", bold=True))
        raise SystemExit(1)

    count = len(HookRegistry.list_registered())
    click.echo(click.style(f"All hooks resolved ({count} registered).", fg="green", bold=True))
