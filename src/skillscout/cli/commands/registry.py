"""Registry inspection commands.

Show what the loader found: visible skills, shadowed skills, duplicate
identifiers and skipped entries.
"""

from typing import Annotated

import typer
from rich.markup import escape

from skillscout.cli.context import (
    ConfigOption,
    ProjectRootOption,
    UserRootOption,
    VerboseOption,
    build_engine,
)
from skillscout.cli.formatters import console
from skillscout.cli.formatters.panels import print_error, print_info, print_warning
from skillscout.cli.formatters.tables import create_table, descriptor_table, print_table
from skillscout.core.types import Scope

app = typer.Typer(
    name="registry",
    help="Inspect the loaded skill registry.",
    no_args_is_help=True,
)


@app.command("list")
def list_skills(
    config: ConfigOption = None,
    user_root: UserRootOption = None,
    project_root: ProjectRootOption = None,
    verbose: VerboseOption = False,
    shadowed: Annotated[
        bool,
        typer.Option("--shadowed", help="Also list skills hidden by a project skill."),
    ] = False,
) -> None:
    """List visible skills, ordered by identifier."""
    engine = build_engine(config, user_root, project_root, verbose=verbose)
    snapshot = engine.snapshot

    if not len(snapshot):
        print_info("No skills found.")
        return

    print_table(descriptor_table(snapshot.visible, title=f"Skills ({len(snapshot)})"))
    if shadowed and snapshot.shadowed():
        print_table(descriptor_table(snapshot.shadowed(), title="Shadowed"))


@app.command("show")
def show_skill(
    identifier: Annotated[str, typer.Argument(help="Skill identifier.")],
    scope: Annotated[
        Scope | None,
        typer.Option("--scope", "-s", help="Look up a specific scope instead of the visible one."),
    ] = None,
    config: ConfigOption = None,
    user_root: UserRootOption = None,
    project_root: ProjectRootOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Show one skill's descriptor."""
    engine = build_engine(config, user_root, project_root, verbose=verbose)
    snapshot = engine.snapshot
    if scope is None:
        descriptor = snapshot.lookup(identifier)
    else:
        descriptor = snapshot.lookup_scoped(identifier, scope)

    if descriptor is None:
        print_error(f"Skill not found: {identifier}")
        raise typer.Exit(1)

    table = create_table(descriptor.identifier, show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Scope", descriptor.scope.value)
    table.add_row("Description", escape(descriptor.description))
    table.add_row("Source", str(descriptor.source))
    table.add_row("Capabilities", ", ".join(descriptor.capabilities) or "-")
    table.add_row("Keywords", ", ".join(descriptor.keywords) or "-")
    table.add_row("Group", descriptor.group or "-")
    table.add_row("Version", descriptor.version or "-")
    print_table(table)


@app.command("diagnostics")
def diagnostics(
    config: ConfigOption = None,
    user_root: UserRootOption = None,
    project_root: ProjectRootOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Report skipped entries and duplicate identifiers."""
    engine = build_engine(config, user_root, project_root, verbose=verbose)
    snapshot = engine.snapshot

    if not snapshot.warnings and not snapshot.conflicts:
        print_info(f"{len(snapshot)} skills loaded, no problems found.")
        return

    if snapshot.warnings:
        table = create_table(f"Skipped entries ({len(snapshot.warnings)})")
        table.add_column("Path")
        table.add_column("Problem")
        for warning in snapshot.warnings:
            table.add_row(str(warning.path or ""), escape(warning.message))
        print_table(table)

    for conflict in snapshot.conflicts:
        print_warning(
            f"{conflict.message}\nkept:    {conflict.kept}\ndropped: {conflict.dropped}",
            title="Duplicate",
        )

    console.print(f"[muted]{len(snapshot)} skills visible[/]")
