"""Main entry point for the clinic relay CLI."""

from typing import Annotated

import typer
from rich.console import Console

from clinicrelay.core._version import __version__

from .commands.auth import app as auth_app
from .commands.serve import serve


console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"clinicrelay {__version__}")
        raise typer.Exit()


app = typer.Typer(
    rich_markup_mode="rich",
    add_completion=False,
    no_args_is_help=True,
    pretty_exceptions_enable=False,
)


@app.callback()
def app_main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Relay voice-assistant tool calls to the clinic-management API."""


app.command(name="serve")(serve)
app.add_typer(auth_app)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
