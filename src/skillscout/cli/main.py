"""skillscout CLI main entry point.

Defines the Typer application and registers the command groups.
"""

from typing import Annotated

import typer

from skillscout import __version__
from skillscout.cli.commands import registry, request
from skillscout.cli.formatters import console

app = typer.Typer(
    name="skillscout",
    help="skillscout - skill discovery and selection",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(registry.app, name="registry")
app.add_typer(request.app, name="request")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]skillscout[/] version [green]{__version__}[/]")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """skillscout - skill discovery and selection.

    Inspects skill roots and shows how requests are matched, resolved
    and assembled into a context payload.

    Use [bold cyan]skillscout COMMAND --help[/] for command-specific help.
    """


__all__ = ["app", "main"]
