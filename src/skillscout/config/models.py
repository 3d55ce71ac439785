"""Pydantic models for skillscout configuration.

All configuration validation happens through these models.

Classes:
    RootConfig: One skill root location and its scope
    LoaderConfig: Descriptor loader settings
    MatcherConfig: Lexical scorer weights and threshold
    ResolverConfig: Mutual-exclusion groups and activation limits
    AssemblerConfig: Payload budget and block classification
    EngineConfig: Top-level configuration combining all sections
"""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator

from skillscout.core.types import Scope
from skillscout.observability.logging import LoggingConfig

DEFAULT_DOMAIN_KEYWORDS: tuple[str, ...] = (
    "api",
    "aws",
    "azure",
    "cloud",
    "database",
    "docker",
    "frontend",
    "gcp",
    "kubernetes",
    "security",
    "testing",
)

DEFAULT_EXAMPLE_HEADINGS: tuple[str, ...] = (
    "example",
    "examples",
    "usage example",
    "usage examples",
    "worked example",
    "worked examples",
    "sample",
    "samples",
)


class RootConfig(BaseModel, frozen=True):
    """A directory holding one sub-directory per skill.

    Attributes:
        path: Root directory (``~`` is expanded)
        scope: Registry tier of every skill found under this root
    """

    path: Path
    scope: Scope

    @field_validator("path")
    @classmethod
    def expand_user(cls, v: Path) -> Path:
        """Expand ``~`` so roots from YAML behave like shell paths."""
        return v.expanduser()


class LoaderConfig(BaseModel, frozen=True):
    """Descriptor loader configuration.

    Attributes:
        primary_document: File name of the metadata-and-instructions document
        max_document_bytes: Larger primary documents are skipped with a warning
        reference_suffixes: Suffixes of secondary documents the assembler may read
    """

    primary_document: str = Field(default="SKILL.md", min_length=1)
    max_document_bytes: int = Field(default=1_000_000, ge=1)
    reference_suffixes: tuple[str, ...] = (".md",)


class MatcherConfig(BaseModel, frozen=True):
    """Lexical matcher configuration.

    Attributes:
        threshold: Minimum length-normalised score for a candidate to be kept
        base_weight: Contribution of a request term found in the description
        identifier_multiplier: Multiplier for terms that are part of the identifier
        keyword_multiplier: Multiplier for domain keywords and per-skill keywords
        domain_keywords: Category terms treated as high-signal for every skill
        extra_stop_words: Words dropped in addition to the built-in stop list
    """

    threshold: float = Field(default=0.04, ge=0.0)
    base_weight: float = Field(default=1.0, gt=0.0)
    identifier_multiplier: float = Field(default=2.0, ge=1.0)
    keyword_multiplier: float = Field(default=1.5, ge=1.0)
    domain_keywords: tuple[str, ...] = DEFAULT_DOMAIN_KEYWORDS
    extra_stop_words: tuple[str, ...] = ()

    @field_validator("domain_keywords", "extra_stop_words")
    @classmethod
    def lowercase_terms(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Normalise configured terms the same way request text is."""
        return tuple(term.strip().lower() for term in v if term.strip())


class ResolverConfig(BaseModel, frozen=True):
    """Precedence and conflict resolver configuration.

    Attributes:
        exclusion_groups: Group name -> identifiers; at most one member of a
            group activates through ranking. Overrides a skill's own ``group``.
        max_activations: Upper bound on skills activated through ranking
        co_activation_ratio: A secondary candidate must score at least this
            fraction of the top score to co-activate (0 disables the check)
    """

    exclusion_groups: dict[str, tuple[str, ...]] = Field(default_factory=dict)
    max_activations: int = Field(default=3, ge=1)
    co_activation_ratio: float = Field(default=0.0, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def check_disjoint_groups(self) -> "ResolverConfig":
        """An identifier may belong to a single exclusion group."""
        seen: dict[str, str] = {}
        for group, members in self.exclusion_groups.items():
            for identifier in members:
                if identifier in seen and seen[identifier] != group:
                    msg = (
                        f"Skill '{identifier}' is in exclusion groups "
                        f"'{seen[identifier]}' and '{group}'"
                    )
                    raise ValueError(msg)
                seen[identifier] = group
        return self

    def group_of(self, identifier: str) -> str | None:
        """Return the configured group of ``identifier``, if any."""
        for group, members in self.exclusion_groups.items():
            if identifier in members:
                return group
        return None


class AssemblerConfig(BaseModel, frozen=True):
    """Context assembler configuration.

    Attributes:
        budget_chars: Hard upper bound on the assembled payload text
        include_references: Whether secondary reference documents are packed
        example_headings: ``##`` headings (case-insensitive) marking worked examples
        example_prefixes: Heading prefixes that also mark worked examples;
            empty to match ``example_headings`` only
    """

    budget_chars: int = Field(default=24_000, ge=1)
    include_references: bool = True
    example_headings: tuple[str, ...] = DEFAULT_EXAMPLE_HEADINGS
    example_prefixes: tuple[str, ...] = ("example",)

    @field_validator("example_headings", "example_prefixes")
    @classmethod
    def lowercase_headings(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(h.strip().lower() for h in v if h.strip())


def default_roots() -> list[RootConfig]:
    """User root first, project root second: later roots take precedence."""
    return [
        RootConfig(path=Path.home() / ".claude" / "skills", scope=Scope.USER),
        RootConfig(path=Path(".claude") / "skills", scope=Scope.PROJECT),
    ]


class EngineConfig(BaseModel, frozen=True):
    """Top-level skillscout configuration.

    Attributes:
        roots: Ordered root locations, lowest precedence first
        loader: Descriptor loader settings
        matcher: Matcher settings
        resolver: Resolver settings
        assembler: Assembler settings
        logging: Logging settings
    """

    roots: list[RootConfig] = Field(default_factory=default_roots)
    loader: LoaderConfig = Field(default_factory=LoaderConfig)
    matcher: MatcherConfig = Field(default_factory=MatcherConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    assembler: AssemblerConfig = Field(default_factory=AssemblerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_config_dir() -> Path:
    """Return the skillscout configuration directory (~/.skillscout/)."""
    return Path.home() / ".skillscout"
