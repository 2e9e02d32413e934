"""Output formatting utilities for CLI."""

import json
from pathlib import Path
from typing import Any

import typer
import yaml
from rich.console import Console
from rich.syntax import Syntax

console = Console()


def format_json(data: dict[str, Any], pretty: bool = False) -> str:
    """Format data as JSON.

    Args:
        data: Data to format
        pretty: Whether to pretty-print with indentation

    Returns:
        JSON string
    """
    if pretty:
        return json.dumps(data, indent=2, ensure_ascii=False)
    return json.dumps(data, ensure_ascii=False)


def format_yaml(data: dict[str, Any]) -> str:
    """Format data as YAML."""
    result = yaml.dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)
    return str(result) if result is not None else ""


def write_output(text: str, output_path: Path | None, lexer: str) -> None:
    """Write text to a file, or highlight it on the terminal.

    Args:
        text: Rendered output
        output_path: Output file path (None = stdout)
        lexer: Syntax highlighting lexer (json, yaml, javascript)
    """
    if output_path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text, encoding="utf-8")
        success_message(f"Written to {output_path}")
    else:
        console.print(Syntax(text, lexer, theme="monokai", line_numbers=False))


def output_schema(
    schema_json: str,
    output_path: Path | None = None,
    output_format: str = "json",
    pretty: bool = False,
) -> None:
    """Output a schema dump to file or stdout.

    Args:
        schema_json: Schema as JSON string
        output_path: Output file path (None = stdout)
        output_format: Output format (json or yaml)
        pretty: Whether to pretty-print JSON
    """
    schema_data = json.loads(schema_json)

    match output_format:
        case "yaml":
            write_output(format_yaml(schema_data), output_path, "yaml")
        case "json":
            write_output(format_json(schema_data, pretty=pretty), output_path, "json")
        case _:
            typer.secho(f"✗ Error: Unknown output format: {output_format}", fg=typer.colors.RED, err=True)
            raise typer.Exit(1)


def error_message(message: str, hint: str | None = None) -> None:
    """Print error message.

    Args:
        message: Error message
        hint: Optional hint for user
    """
    typer.secho(f"✗ Error: {message}", fg=typer.colors.RED, err=True)
    if hint:
        typer.secho(f"  Hint: {hint}", fg=typer.colors.YELLOW, err=True)


def warning_message(message: str) -> None:
    typer.secho(f"! {message}", fg=typer.colors.YELLOW, err=True)


def success_message(message: str) -> None:
    """Print success message."""
    typer.secho(f"✓ {message}", fg=typer.colors.GREEN)
