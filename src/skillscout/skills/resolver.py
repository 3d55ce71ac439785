"""Precedence and conflict resolver.

Turns ranked candidates into an activation decision:

- A request that names skill identifiers activates exactly those skills,
  in order of first mention, regardless of score.
- Otherwise the top candidate activates. Further candidates may
  co-activate, but never two members of the same mutual-exclusion group.
- No qualifying candidate gives the empty decision.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from skillscout.config.models import ResolverConfig
from skillscout.core.text import find_mention
from skillscout.skills.matcher import rank_key
from skillscout.skills.models import (
    Activation,
    ActivationDecision,
    ActivationReason,
    MatchCandidate,
    SkillDescriptor,
    Suppression,
)
from skillscout.skills.registry import RegistrySnapshot

log = structlog.get_logger()


class ConflictResolver:
    """Apply explicit-mention overrides and mutual-exclusion groups."""

    def __init__(self, config: ResolverConfig | None = None) -> None:
        self._config = config or ResolverConfig()

    @property
    def config(self) -> ResolverConfig:
        return self._config

    def group_of(self, descriptor: SkillDescriptor) -> str | None:
        """Exclusion group of a skill; configured groups override the header."""
        return self._config.group_of(descriptor.identifier) or descriptor.group

    def explicit_mentions(self, request: str, snapshot: RegistrySnapshot) -> list[SkillDescriptor]:
        """Visible skills whose identifier appears literally in ``request``."""
        found: list[tuple[int, str, SkillDescriptor]] = []
        for descriptor in snapshot:
            offset = find_mention(request, descriptor.identifier)
            if offset >= 0:
                found.append((offset, descriptor.identifier, descriptor))
        found.sort(key=lambda item: (item[0], item[1]))
        return [descriptor for _, _, descriptor in found]

    def resolve(
        self,
        candidates: Sequence[MatchCandidate],
        request: str,
        snapshot: RegistrySnapshot,
    ) -> ActivationDecision:
        """Decide which skills activate for ``request``.

        Args:
            candidates: Matcher output for ``request``.
            request: The request text, checked for explicit mentions.
            snapshot: Snapshot the candidates were produced from.

        Returns:
            The decision; empty when nothing qualifies.
        """
        mentioned = self.explicit_mentions(request, snapshot)
        if mentioned:
            scores = {c.identifier: c.score for c in candidates}
            activations = tuple(
                Activation(
                    descriptor=descriptor,
                    reason=ActivationReason.EXPLICIT_MENTION,
                    score=scores.get(descriptor.identifier),
                    group=self.group_of(descriptor),
                )
                for descriptor in mentioned
            )
            log.info(
                "skills.resolver.explicit_mention",
                activated=[a.identifier for a in activations],
            )
            return ActivationDecision(request=request, activations=activations)

        if not candidates:
            log.info("skills.resolver.no_match")
            return ActivationDecision.empty(request)

        ranked = sorted(candidates, key=rank_key)
        top_score = ranked[0].score
        activations_list: list[Activation] = []
        suppressed: list[Suppression] = []
        taken_groups: dict[str, str] = {}

        for candidate in ranked:
            group = self.group_of(candidate.descriptor)
            if group is not None and group in taken_groups:
                suppressed.append(
                    Suppression(candidate.identifier, f"group:{group}", candidate.score)
                )
                log.info(
                    "skills.resolver.group_suppressed",
                    identifier=candidate.identifier,
                    group=group,
                    leader=taken_groups[group],
                )
                continue

            if activations_list:
                if len(activations_list) >= self._config.max_activations:
                    suppressed.append(
                        Suppression(candidate.identifier, "max_activations", candidate.score)
                    )
                    continue
                if candidate.score < top_score * self._config.co_activation_ratio:
                    suppressed.append(
                        Suppression(candidate.identifier, "co_activation_ratio", candidate.score)
                    )
                    continue

            if not activations_list:
                reason = ActivationReason.TOP_SCORE
            elif group is not None:
                reason = ActivationReason.GROUP_LEADER
            else:
                reason = ActivationReason.CO_ACTIVATED

            activations_list.append(
                Activation(
                    descriptor=candidate.descriptor,
                    reason=reason,
                    score=candidate.score,
                    group=group,
                )
            )
            if group is not None:
                taken_groups[group] = candidate.identifier

        log.info(
            "skills.resolver.decided",
            activated=[a.identifier for a in activations_list],
            suppressed=[s.identifier for s in suppressed],
        )
        return ActivationDecision(
            request=request,
            activations=tuple(activations_list),
            suppressed=tuple(suppressed),
        )
