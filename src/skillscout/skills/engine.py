"""Skill engine: the API exposed to the host runtime.

    engine = SkillEngine(load_config())
    engine.reload()
    decision = engine.resolve("Deploy this application to AWS")
    payload = engine.assemble(decision)

Data flows one way: loader -> registry -> matcher -> resolver -> assembler.
Request-path calls read one snapshot for their whole duration and degrade
to the empty result on unexpected failure instead of raising.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import uuid

import structlog

from skillscout.config.models import EngineConfig
from skillscout.observability.logging import bind_context, unbind_context
from skillscout.skills.assembler import ContextAssembler
from skillscout.skills.loader import DescriptorLoader
from skillscout.skills.matcher import LexicalMatcher, Matcher
from skillscout.skills.models import ActivationDecision, AssembledPayload, MatchCandidate
from skillscout.skills.registry import RegistrySnapshot, SkillRegistry
from skillscout.skills.resolver import ConflictResolver

log = structlog.get_logger()


class SkillEngine:
    """Skill discovery and selection engine.

    The matcher is an injected strategy; any ``Matcher`` implementation
    can replace the default lexical scorer.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        *,
        matcher: Matcher | None = None,
        registry: SkillRegistry | None = None,
    ) -> None:
        """Wire the pipeline. Call ``reload()`` before serving requests.

        Args:
            config: Engine configuration; defaults if omitted.
            matcher: Matching strategy; LexicalMatcher if omitted.
            registry: Pre-built registry; one over ``config.roots`` if omitted.
        """
        self._config = config or EngineConfig()
        self._registry = registry or SkillRegistry(
            self._config.roots, DescriptorLoader(self._config.loader)
        )
        self._matcher: Matcher = matcher or LexicalMatcher(self._config.matcher)
        self._resolver = ConflictResolver(self._config.resolver)
        self._assembler = ContextAssembler(self._config.assembler, self._config.loader)

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def registry(self) -> SkillRegistry:
        return self._registry

    @property
    def snapshot(self) -> RegistrySnapshot:
        return self._registry.snapshot

    def reload(self) -> RegistrySnapshot:
        """Rescan skill roots and publish a new snapshot.

        Raises:
            RegistryError: If no root is readable (startup-level failure).
        """
        return self._registry.reload()

    def match(self, request: str) -> list[MatchCandidate]:
        """Rank skills for ``request``; empty on failure."""
        snapshot = self._registry.snapshot
        with _request_context(snapshot):
            try:
                return self._matcher.match(request, snapshot)
            except Exception:
                log.exception("skills.engine.match_failed")
                return []

    def resolve(self, request: str) -> ActivationDecision:
        """Decide which skills activate for ``request``; empty on failure."""
        snapshot = self._registry.snapshot
        with _request_context(snapshot):
            try:
                candidates = self._matcher.match(request, snapshot)
                return self._resolver.resolve(candidates, request, snapshot)
            except Exception:
                log.exception("skills.engine.resolve_failed")
                return ActivationDecision.empty(request)

    def assemble(self, decision: ActivationDecision) -> AssembledPayload:
        """Build the payload for ``decision``; empty on failure."""
        snapshot = self._registry.snapshot
        with _request_context(snapshot):
            try:
                return self._assembler.assemble(decision, snapshot)
            except Exception:
                log.exception("skills.engine.assemble_failed")
                return AssembledPayload()

    def activate(self, request: str) -> tuple[ActivationDecision, AssembledPayload]:
        """Resolve and assemble against one snapshot."""
        snapshot = self._registry.snapshot
        with _request_context(snapshot):
            try:
                candidates = self._matcher.match(request, snapshot)
                decision = self._resolver.resolve(candidates, request, snapshot)
                return decision, self._assembler.assemble(decision, snapshot)
            except Exception:
                log.exception("skills.engine.activate_failed")
                return ActivationDecision.empty(request), AssembledPayload()


@contextmanager
def _request_context(snapshot: RegistrySnapshot) -> Iterator[None]:
    """Bind request_id and generation into the log context for one request."""
    bind_context(request_id=f"req_{uuid.uuid4().hex[:12]}", generation=snapshot.generation)
    try:
        yield
    finally:
        unbind_context("request_id", "generation")
