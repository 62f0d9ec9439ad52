"""
Module that contains the command line app.

Commands load the domain from a configuration file (`.blogapp.toml`, `blogapp.toml`,
or the `[tool.blogapp]` section of `pyproject.toml`) found at `--config`.
"""

import logging

import typer
from rich import print
from typing_extensions import Annotated

from blogapp.domain import Domain
from blogapp.exceptions import ConfigurationError
from blogapp.utils.logging import configure_logging

logger = logging.getLogger(__name__)

# `no_args_is_help=True` will show the help message when no arguments are passed
app = typer.Typer(no_args_is_help=True)
db_app = typer.Typer(no_args_is_help=True)
app.add_typer(db_app, name="db")


def version_callback(value: bool):
    if value:
        from blogapp import __version__

        typer.echo(f"BlogApp {__version__}")
        raise typer.Exit()


def load_domain(path: str) -> Domain:
    try:
        domain = Domain.from_path(path)
    except ConfigurationError as exc:
        msg = f"Error loading BlogApp configuration: {exc.args[0]}"
        print(msg)
        logger.error(msg)
        raise typer.Abort()

    configure_logging(config=domain.config["logging"])
    return domain


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            help="Show version information", callback=version_callback, is_eager=True
        ),
    ] = False,
):
    """
    BlogApp CLI
    """


@db_app.callback()
def db_callback():
    """Manage the database tables of Posts and Comments."""


@db_app.command()
def setup(
    config: Annotated[str, typer.Option(help="Path to look for configuration")] = ".",
) -> None:
    """Create the `posts` and `comments` tables."""
    domain = load_domain(config)
    with domain.domain_context():
        domain.setup_database()

    print("Database tables created successfully.")


@db_app.command()
def drop(
    config: Annotated[str, typer.Option(help="Path to look for configuration")] = ".",
    yes: Annotated[
        bool, typer.Option("--yes", "-y", help="Skip confirmation prompt")
    ] = False,
) -> None:
    """Drop the `posts` and `comments` tables."""
    if not yes:
        confirmed = typer.confirm("This will drop all database tables. Are you sure?")
        if not confirmed:
            raise typer.Abort()

    domain = load_domain(config)
    with domain.domain_context():
        domain.drop_database()

    print("Database tables dropped successfully.")


@app.command()
def serve(
    config: Annotated[str, typer.Option(help="Path to look for configuration")] = ".",
    host: Annotated[str, typer.Option()] = "127.0.0.1",
    port: Annotated[int, typer.Option()] = 5000,
    debug: Annotated[bool, typer.Option()] = False,
):
    """Serve the HTTP endpoints with the Flask development server"""
    from blogapp.api.flask import create_app

    domain = load_domain(config)
    flask_app = create_app(domain)

    logger.info(f"Serving {domain} on http://{host}:{port}")
    flask_app.run(host=host, port=port, debug=debug)
