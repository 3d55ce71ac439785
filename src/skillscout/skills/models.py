"""Data model for skill discovery and selection.

Descriptors are created at load time and replaced wholesale on reload.
Candidates, decisions and payloads are created per request and discarded
after use. Every record here is immutable.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from skillscout.core.errors import AssemblyError, FileSystemError, ParseError
from skillscout.core.types import Scope

LoadWarning = FileSystemError | ParseError


@dataclass(frozen=True)
class SkillDescriptor:
    """Metadata record for one skill, excluding its instructional body.

    Attributes:
        identifier: Unique within a scope
        description: Free text, the primary matching signal
        scope: Registry tier the skill was loaded from
        source: The skill directory
        document: Primary document; the body is read from it lazily
        last_modified: mtime of the primary document
        capabilities: Opaque capability tokens passed through to the host
        keywords: Per-skill high-signal terms
        group: Mutual-exclusion group declared by the skill itself
        version: Optional version string from the header
    """

    identifier: str
    description: str
    scope: Scope
    source: Path
    document: Path
    last_modified: float
    capabilities: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()
    group: str | None = None
    version: str | None = None

    @property
    def key(self) -> tuple[str, Scope]:
        """(identifier, scope): uniquely identifies a descriptor."""
        return (self.identifier, self.scope)


@dataclass(frozen=True)
class LoadResult:
    """Output of one loader pass.

    Attributes:
        descriptors: Valid descriptors in root scan order
        warnings: Entries that were skipped and why
        readable_roots: Roots that could be listed
    """

    descriptors: tuple[SkillDescriptor, ...] = ()
    warnings: tuple[LoadWarning, ...] = ()
    readable_roots: tuple[Path, ...] = ()


@dataclass(frozen=True)
class MatchCandidate:
    """A descriptor scored against one request.

    Attributes:
        descriptor: The scored skill
        score: Length-normalised relevance score
        matched_terms: Request terms that hit the skill, sorted
        explicit: True when the request names the identifier literally
    """

    descriptor: SkillDescriptor
    score: float
    matched_terms: tuple[str, ...] = ()
    explicit: bool = False

    @property
    def identifier(self) -> str:
        return self.descriptor.identifier


class ActivationReason(str, Enum):
    """Why a skill was activated."""

    EXPLICIT_MENTION = "explicit_mention"
    TOP_SCORE = "top_score"
    GROUP_LEADER = "group_leader"
    CO_ACTIVATED = "co_activated"


@dataclass(frozen=True)
class Activation:
    """One activated skill within a decision."""

    descriptor: SkillDescriptor
    reason: ActivationReason
    score: float | None = None
    group: str | None = None

    @property
    def identifier(self) -> str:
        return self.descriptor.identifier


@dataclass(frozen=True)
class Suppression:
    """A qualifying candidate that was not activated."""

    identifier: str
    reason: str
    score: float


@dataclass(frozen=True)
class ActivationDecision:
    """Ordered skills chosen for a single request.

    An empty decision is the explicit "no skill" state, not an error.
    """

    request: str
    activations: tuple[Activation, ...] = ()
    suppressed: tuple[Suppression, ...] = ()

    @classmethod
    def empty(cls, request: str = "") -> ActivationDecision:
        """The no-match state."""
        return cls(request=request)

    @property
    def is_empty(self) -> bool:
        return not self.activations

    @property
    def identifiers(self) -> list[str]:
        return [activation.identifier for activation in self.activations]


@dataclass(frozen=True)
class AssembledPayload:
    """Instructional text plus declared capabilities for one activation.

    Attributes:
        text: Packed text, never longer than the configured budget
        capabilities: Order-preserving union of activated skills' capabilities
        identifiers: Activated skills in decision order
        truncated: True when at least one block did not fit the budget
        dropped_blocks: Number of content blocks left out
        errors: Recoverable per-skill failures (missing body, unreadable reference)
    """

    text: str = ""
    capabilities: tuple[str, ...] = ()
    identifiers: tuple[str, ...] = ()
    truncated: bool = False
    dropped_blocks: int = 0
    errors: tuple[AssemblyError, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.identifiers
