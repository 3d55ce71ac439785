"""Rich formatters for CLI output.

Provides the shared Console instance used by every command.

Semantic Colors:
- green: success
- yellow: warning
- red: error
- blue: info
"""

from rich.console import Console
from rich.theme import Theme

SKILLSCOUT_THEME = Theme(
    {
        "success": "green",
        "warning": "yellow",
        "error": "red",
        "info": "blue",
        "muted": "dim",
        "highlight": "bold cyan",
    }
)

console = Console(theme=SKILLSCOUT_THEME)

__all__ = ["console", "SKILLSCOUT_THEME"]
