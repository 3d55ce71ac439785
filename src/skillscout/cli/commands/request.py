"""Request commands: run the matcher, resolver and assembler on a request.

Usage:
    skillscout request match "deploy this to aws"
    skillscout request resolve "use aws-deploy to ship it"
    skillscout request assemble "deploy this to aws" --budget 4000
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
from skillscout.cli.formatters.panels import print_info, print_warning
from skillscout.cli.formatters.tables import candidate_table, decision_table, print_table
from skillscout.skills.engine import SkillEngine

app = typer.Typer(
    name="request",
    help="Match, resolve and assemble skills for a request.",
    no_args_is_help=True,
)

RequestArgument = Annotated[str, typer.Argument(help="Request text to evaluate.")]


@app.command("match")
def match(
    request: RequestArgument,
    config: ConfigOption = None,
    user_root: UserRootOption = None,
    project_root: ProjectRootOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Rank skills against a request. Explicit mentions are starred."""
    engine = build_engine(config, user_root, project_root, verbose=verbose)
    candidates = engine.match(request)
    if not candidates:
        print_info("No skill scored above the threshold.")
        return
    print_table(candidate_table(candidates))


@app.command("resolve")
def resolve(
    request: RequestArgument,
    config: ConfigOption = None,
    user_root: UserRootOption = None,
    project_root: ProjectRootOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Show which skills would activate and which were suppressed."""
    engine = build_engine(config, user_root, project_root, verbose=verbose)
    decision = engine.resolve(request)
    if decision.is_empty:
        print_info("No skill activated.")
        return
    print_table(decision_table(decision))


@app.command("assemble")
def assemble(
    request: RequestArgument,
    budget: Annotated[
        int | None,
        typer.Option("--budget", "-b", min=1, help="Override the payload budget in characters."),
    ] = None,
    raw: Annotated[
        bool,
        typer.Option("--raw", help="Print only the payload text."),
    ] = False,
    config: ConfigOption = None,
    user_root: UserRootOption = None,
    project_root: ProjectRootOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Assemble the payload that would be handed to the host."""
    engine = build_engine(config, user_root, project_root, verbose=verbose)
    if budget is not None:
        engine = _with_budget(engine, budget)

    decision, payload = engine.activate(request)
    if raw:
        if payload.text:
            typer.echo(payload.text)
        return

    if decision.is_empty:
        print_info("No skill activated.")
        return

    print_table(decision_table(decision))
    for error in payload.errors:
        print_warning(error.message, title=f"Assembly: {error.identifier}")

    status = "truncated" if payload.truncated else "complete"
    console.print(
        f"[highlight]{len(payload.text)}[/] chars, {status}, "
        f"{payload.dropped_blocks} blocks dropped"
    )
    if payload.capabilities:
        console.print(f"Capabilities: {escape(', '.join(payload.capabilities))}")
    if payload.text:
        console.rule()
        console.print(payload.text, markup=False, highlight=False)


def _with_budget(engine: SkillEngine, budget: int) -> SkillEngine:
    """Rebuild the engine around the same registry with a different budget."""
    assembler = engine.config.assembler.model_copy(update={"budget_chars": budget})
    config = engine.config.model_copy(update={"assembler": assembler})
    return SkillEngine(config, registry=engine.registry)
