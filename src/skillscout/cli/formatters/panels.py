"""Rich panels for one-off messages.

Panels keep a consistent border and title color per severity.
"""

from rich.markup import escape
from rich.panel import Panel

from skillscout.cli.formatters import console


def _panel(message: str, title: str, theme_style: str, color: str) -> Panel:
    return Panel(
        f"[{theme_style}]{escape(message)}[/]",
        title=f"[bold {color}]{title}[/]",
        border_style=color,
        expand=False,
    )


def print_info(message: str, title: str = "Info") -> None:
    """Print an info message in a blue panel."""
    console.print(_panel(message, title, "info", "blue"))


def print_warning(message: str, title: str = "Warning") -> None:
    """Print a warning message in a yellow panel."""
    console.print(_panel(message, title, "warning", "yellow"))


def print_error(message: str, title: str = "Error") -> None:
    """Print an error message in a red panel."""
    console.print(_panel(message, title, "error", "red"))


__all__ = ["print_info", "print_warning", "print_error"]
