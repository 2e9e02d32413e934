"""Config file commands."""

import typer

from cli.config import get_config_path, init_config, load_config, save_config, validate_config
from cli.output import error_message, format_yaml, success_message
from schemadump.sources.database import sanitize_connection_string

app = typer.Typer(help="Manage the schemadump config file")


@app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite an existing config file"),
) -> None:
    """Create a config file with default values."""
    try:
        path = init_config(force=force)
    except FileExistsError as e:
        error_message(str(e), hint="Use --force to overwrite it")
        raise typer.Exit(1) from e
    success_message(f"Config written to {path}")


@app.command("show")
def config_show() -> None:
    """Show the current config, with passwords masked."""
    try:
        config = load_config()
    except ValueError as e:
        error_message(str(e), hint=f"Fix or remove {get_config_path()}")
        raise typer.Exit(1) from e

    data = config.model_dump(by_alias=True)
    data["connections"] = {name: sanitize_connection_string(c) for name, c in config.connections.items()}
    typer.echo(format_yaml(data))

    for problem in validate_config(config):
        error_message(problem)


@app.command("add-connection")
def config_add_connection(
    name: str = typer.Argument(..., help="Name used as @name on the command line"),
    connection_string: str = typer.Argument(..., help="Database connection string"),
) -> None:
    """Store a named connection string."""
    try:
        config = load_config()
    except ValueError as e:
        error_message(str(e))
        raise typer.Exit(1) from e

    config.connections[name] = connection_string
    path = save_config(config)
    success_message(f"Connection '{name}' saved to {path}")
