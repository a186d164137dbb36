"""Schema CLI commands — validate YAML schema definitions."""

from pathlib import Path

import click

from docforge.cli.paths import path_option, resolve_schema_path
from docforge.schema.loader import SchemaLoader
from docforge.schema.validator import validate_schema_dir


@click.group()
def schema():
    """Schema commands."""
    pass


@schema.command()
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Treat warnings as errors.",
)
@path_option
def validate(strict: bool, schema_path: Path | None):
    """Validate schema YAML files against the JSON Schema."""
    schema_path = resolve_schema_path(schema_path)
    if not schema_path.exists():
        click.echo(f"Error: Schema directory not found at {schema_path}", err=True)
        raise SystemExit(1)

    issues = validate_schema_dir(schema_path, strict=strict)
    errors = [i for i in issues if i.severity == "error"]
    warnings = [i for i in issues if i.severity == "warning"]

    for issue in issues:
        colour = "red" if issue.severity == "error" else "yellow"
        click.echo(click.style(str(issue), fg=colour))

    if errors:
        click.echo(
            click.style(
                f"\n{len(errors)} schema error(s) found"
                + (f", {len(warnings)} warning(s)" if warnings else ""),
                fg="red",
                bold=True,
            )
        )
        raise SystemExit(1)

    if warnings:
        click.echo(click.style(f"{len(warnings)} warning(s) found.", fg="yellow"))

    # Semantic validation: references between schemas must resolve
    loader = SchemaLoader(schema_path)
    try:
        loader.load_all()
        built = loader.build_all(strict=False)
    except Exception as e:
        click.echo(click.style(f"\nSemantic validation failed: {e}", fg="red"), err=True)
        raise SystemExit(1)

    click.echo(f"\nLoaded {len(built)} schemas:")
    for name in sorted(built):
        config = loader.get_config(name)
        click.echo(
            f"  ✓ {name} ({len(config.fields)} fields, {len(config.hook_names())} hooks)"
        )

    click.echo(click.style("\nAll schemas are valid.", fg="green", bold=True))
