"""Schema snapshot validation command."""

from pathlib import Path

import typer
from pydantic import ValidationError

from cli.commands.schema import YAML_SUFFIXES, load_schema_file
from cli.output import error_message, success_message, warning_message
from schemadump.errors import SchemaError
from schemadump.ordering import process_tables

SCHEMA_SUFFIXES = (".json", *YAML_SUFFIXES)


def validate_schema_file(schema_path: Path) -> bool:
    """Validate a single schema file.

    The snapshot is parsed, repaired and ordered in memory; the file itself is
    never modified.

    Args:
        schema_path: Path to schema file

    Returns:
        True if the schema can be ordered without errors, False otherwise
    """
    try:
        tables = load_schema_file(schema_path)
        result = process_tables(tables)
    except ValidationError as e:
        error_message(f"Validation failed for {schema_path.name}:")
        for error in e.errors():
            location = " -> ".join(str(loc) for loc in error["loc"])
            typer.secho(f"  • {location}: {error['msg']}", fg=typer.colors.RED, err=True)
        return False
    except SchemaError as e:
        error_message(f"Broken reference in {schema_path.name}: {e}")
        return False
    except ValueError as e:
        error_message(str(e))
        return False

    for warning in result.warnings:
        warning_message(warning)

    if result.errors:
        error_message(f"{len(result.errors)} dependency error(s) in {schema_path.name}:")
        for error in result.errors:
            typer.secho(f"  • {error}", fg=typer.colors.RED, err=True)
        return False

    success_message(
        f"Valid schema: {schema_path.name} ({len(result.sorted)} tables, {len(result.warnings)} repair(s))"
    )
    return True


def validate(
    path: Path = typer.Argument(
        ...,
        help="Path to schema file or directory",
        exists=True,
        resolve_path=True,
    ),
    recursive: bool = typer.Option(False, "--recursive", "-r", help="Recursively validate all schemas in directory"),
) -> None:
    """Validate schema snapshot files.

    Examples:
        # Validate single schema
        schemadump validate schema.json

        # Validate all schemas in directory
        schemadump validate schemas/ --recursive
    """
    if path.is_file():
        if not validate_schema_file(path):
            raise typer.Exit(1)
        return

    prefix = "**/" if recursive else ""
    schema_files = sorted(
        schema_file for suffix in SCHEMA_SUFFIXES for schema_file in path.glob(f"{prefix}*{suffix}")
    )

    if not schema_files:
        error_message(f"No schema files found in {path}", hint="Use --recursive to search subdirectories")
        raise typer.Exit(1)

    typer.echo(f"Validating {len(schema_files)} schema(s)...\n")

    invalid_count = 0
    for schema_file in schema_files:
        if not validate_schema_file(schema_file):
            invalid_count += 1
        typer.echo()

    typer.secho("─" * 50, dim=True)
    if invalid_count:
        error_message(f"{invalid_count} of {len(schema_files)} schema(s) failed validation")
        raise typer.Exit(1)
    success_message(f"All {len(schema_files)} schema(s) are valid")
