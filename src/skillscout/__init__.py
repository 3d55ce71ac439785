"""skillscout - skill discovery and selection engine.

Loads skill descriptors from project and user roots, matches free-text
requests against them, and assembles the chosen skills' instructions into
a bounded payload for a host agent.

Example:
    # Using CLI
    skillscout request resolve "Deploy this application to AWS"

    # Using Python
    from skillscout.skills import SkillEngine
"""

__version__ = "0.1.0"

__all__ = ["__version__", "main"]


def main() -> None:
    """Entry point for the skillscout CLI."""
    from skillscout.cli.main import app

    app()
