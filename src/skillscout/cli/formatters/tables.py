"""Rich tables for registry and request diagnostics."""

from collections.abc import Sequence

from rich.markup import escape
from rich.table import Table

from skillscout.cli.formatters import console
from skillscout.skills.models import ActivationDecision, MatchCandidate, SkillDescriptor


def create_table(title: str | None = None, *, show_header: bool = True) -> Table:
    """Create a Rich Table with consistent skillscout styling."""
    return Table(
        title=title,
        show_header=show_header,
        border_style="blue",
        header_style="bold cyan",
        row_styles=["", "dim"],
    )


def descriptor_table(descriptors: Sequence[SkillDescriptor], title: str = "Skills") -> Table:
    """One row per descriptor: identifier, scope, group, capabilities, description."""
    table = create_table(title)
    table.add_column("Identifier", style="cyan", no_wrap=True)
    table.add_column("Scope")
    table.add_column("Group")
    table.add_column("Capabilities")
    table.add_column("Description")
    for d in descriptors:
        table.add_row(
            d.identifier,
            d.scope.value,
            d.group or "",
            ", ".join(d.capabilities),
            escape(d.description),
        )
    return table


def candidate_table(candidates: Sequence[MatchCandidate], title: str = "Candidates") -> Table:
    """Ranked candidates with score and matched terms."""
    table = create_table(title)
    table.add_column("#", justify="right")
    table.add_column("Identifier", style="cyan", no_wrap=True)
    table.add_column("Score", justify="right")
    table.add_column("Scope")
    table.add_column("Matched terms")
    for rank, c in enumerate(candidates, start=1):
        identifier = f"{c.identifier} *" if c.explicit else c.identifier
        table.add_row(
            str(rank),
            identifier,
            f"{c.score:.4f}",
            c.descriptor.scope.value,
            ", ".join(c.matched_terms),
        )
    return table


def decision_table(decision: ActivationDecision, title: str = "Activation") -> Table:
    """Activated skills with reasons, then suppressed candidates."""
    table = create_table(title)
    table.add_column("Identifier", style="cyan", no_wrap=True)
    table.add_column("Status")
    table.add_column("Reason")
    table.add_column("Score", justify="right")
    for a in decision.activations:
        score = "" if a.score is None else f"{a.score:.4f}"
        table.add_row(a.identifier, "[success]active[/]", a.reason.value, score)
    for s in decision.suppressed:
        table.add_row(s.identifier, "[muted]suppressed[/]", escape(s.reason), f"{s.score:.4f}")
    return table


def print_table(table: Table) -> None:
    console.print(table)


__all__ = [
    "create_table",
    "descriptor_table",
    "candidate_table",
    "decision_table",
    "print_table",
]
