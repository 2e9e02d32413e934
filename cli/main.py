"""Main entry point for schemadump CLI tool."""

import logging

import typer

from cli import __version__
from cli.commands import config, schema
from cli.commands.validate import validate

# Create main app
app = typer.Typer(
    name="schemadump",
    help="Extract database schemas in foreign key dependency order",
    no_args_is_help=True,
    add_completion=False,
)

# Add subcommands
app.command(name="extract")(schema.extract)
app.command(name="knex")(schema.knex)
app.command(name="order")(schema.order)
app.command(name="validate")(validate)
app.add_typer(config.app, name="config")


def version_callback(show_version: bool) -> None:
    """Show version and exit."""
    if show_version:
        typer.echo(f"schemadump version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log extraction and ordering details"),
) -> None:
    """Extract database schemas in foreign key dependency order.

    Examples:

        # Dump a MySQL schema, tables ordered by foreign keys
        schemadump extract mysql://root@localhost/shop --type mysql --output schema.json

        # Render a knex migration
        schemadump knex @shop --type mysql --output migrations/0001_initial.js

        # Repair and order an existing dump
        schemadump order schema.json --pretty

        # Check a dump for foreign key cycles and dangling references
        schemadump validate schema.json

    For detailed help on each command:
        schemadump extract --help
        schemadump config --help
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


if __name__ == "__main__":
    app()
