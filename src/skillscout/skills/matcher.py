"""Term index and lexical matcher.

Scoring is a transparent weighted term overlap:

1. The request and every description are casefolded, stripped of
   punctuation, tokenised, and filtered through a fixed stop-word set.
2. Each distinct request term found in a skill's description or identifier
   contributes ``base_weight``, multiplied by ``identifier_multiplier`` when
   the term is part of the identifier or by ``keyword_multiplier`` when it is
   a domain/per-skill keyword (the larger multiplier applies). Identifier
   terms are indexed alongside description terms, so a request term that
   only appears in the identifier still scores with the identifier
   multiplier.
3. The sum is divided by the description's token count.
4. Candidates scoring below ``threshold`` are discarded.
5. Ordering: score descending, then explicit identifier mention, then scope
   precedence (project first), then identifier.

Anything that satisfies the ``Matcher`` protocol can replace
``LexicalMatcher``, e.g. an embedding-similarity backend.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import structlog

from skillscout.config.models import MatcherConfig
from skillscout.core.text import STOP_WORDS, find_mention, identifier_terms, tokenize
from skillscout.skills.models import MatchCandidate, SkillDescriptor
from skillscout.skills.registry import RegistrySnapshot

log = structlog.get_logger()

_SCORE_PRECISION = 6


@runtime_checkable
class Matcher(Protocol):
    """Strategy that scores a request against every visible skill."""

    def match(self, request: str, snapshot: RegistrySnapshot) -> list[MatchCandidate]:
        """Return candidates above threshold, best first."""
        ...


@dataclass(frozen=True)
class IndexedSkill:
    """Pre-tokenised view of one descriptor."""

    descriptor: SkillDescriptor
    description_terms: frozenset[str]
    identifier_terms: frozenset[str]
    keyword_terms: frozenset[str]
    length: int


class TermIndex:
    """Inverted index over the visible descriptors of one snapshot.

    Built once per snapshot and read concurrently without locking.
    """

    def __init__(self, snapshot: RegistrySnapshot, config: MatcherConfig) -> None:
        self._snapshot = snapshot
        self._stop_words = STOP_WORDS | frozenset(config.extra_stop_words)
        domain = frozenset(
            term for keyword in config.domain_keywords for term in tokenize(keyword, self._stop_words)
        )

        entries: list[IndexedSkill] = []
        postings: dict[str, list[int]] = defaultdict(list)
        for position, descriptor in enumerate(snapshot.visible):
            description_tokens = tokenize(descriptor.description, self._stop_words)
            own_keywords = frozenset(
                term
                for keyword in descriptor.keywords
                for term in tokenize(keyword, self._stop_words)
            )
            entry = IndexedSkill(
                descriptor=descriptor,
                description_terms=frozenset(description_tokens),
                identifier_terms=identifier_terms(descriptor.identifier) - self._stop_words,
                keyword_terms=domain | own_keywords,
                length=max(1, len(description_tokens)),
            )
            entries.append(entry)
            for term in sorted(entry.description_terms | entry.identifier_terms):
                postings[term].append(position)

        self._entries = tuple(entries)
        self._postings = {term: tuple(positions) for term, positions in postings.items()}

    @property
    def snapshot(self) -> RegistrySnapshot:
        return self._snapshot

    @property
    def entries(self) -> tuple[IndexedSkill, ...]:
        return self._entries

    @property
    def stop_words(self) -> frozenset[str]:
        return self._stop_words

    def postings(self, term: str) -> tuple[int, ...]:
        """Positions of the entries whose description or identifier holds ``term``."""
        return self._postings.get(term, ())

    def __len__(self) -> int:
        return len(self._entries)


class LexicalMatcher:
    """Deterministic weighted-term-overlap matcher.

    The index for the most recently seen snapshot is cached; a new
    snapshot (after reload) triggers a rebuild on first use.
    """

    def __init__(self, config: MatcherConfig | None = None) -> None:
        self._config = config or MatcherConfig()
        self._index: TermIndex | None = None

    @property
    def config(self) -> MatcherConfig:
        return self._config

    def index_for(self, snapshot: RegistrySnapshot) -> TermIndex:
        """Return the term index for ``snapshot``, building it if needed."""
        index = self._index
        if index is None or index.snapshot is not snapshot:
            index = TermIndex(snapshot, self._config)
            self._index = index
            log.debug(
                "skills.matcher.index_built",
                generation=snapshot.generation,
                skills=len(index),
            )
        return index

    def term_weight(self, term: str, entry: IndexedSkill) -> float:
        """Weight contributed by ``term`` to ``entry``'s raw score."""
        multiplier = 1.0
        if term in entry.identifier_terms:
            multiplier = max(multiplier, self._config.identifier_multiplier)
        if term in entry.keyword_terms:
            multiplier = max(multiplier, self._config.keyword_multiplier)
        return self._config.base_weight * multiplier

    def match(self, request: str, snapshot: RegistrySnapshot) -> list[MatchCandidate]:
        """Score ``request`` against every visible skill in ``snapshot``.

        Args:
            request: Free-text user request.
            snapshot: Registry snapshot to match against.

        Returns:
            Candidates at or above the threshold, best first. Empty when
            nothing overlaps.
        """
        index = self.index_for(snapshot)
        terms = sorted(set(tokenize(request, index.stop_words)))
        if not terms:
            return []

        raw: dict[int, float] = defaultdict(float)
        hits: dict[int, list[str]] = defaultdict(list)
        for term in terms:
            for position in index.postings(term):
                raw[position] += self.term_weight(term, index.entries[position])
                hits[position].append(term)

        candidates: list[MatchCandidate] = []
        for position, total in raw.items():
            entry = index.entries[position]
            score = round(total / entry.length, _SCORE_PRECISION)
            if score <= 0.0 or score < self._config.threshold:
                continue
            candidates.append(
                MatchCandidate(
                    descriptor=entry.descriptor,
                    score=score,
                    matched_terms=tuple(hits[position]),
                    explicit=find_mention(request, entry.descriptor.identifier) >= 0,
                )
            )

        candidates.sort(key=rank_key)
        log.debug(
            "skills.matcher.scored",
            terms=len(terms),
            overlapping=len(raw),
            candidates=[(c.identifier, c.score) for c in candidates],
        )
        return candidates


def rank_key(candidate: MatchCandidate) -> tuple[float, bool, int, str]:
    """Sort key: score desc, explicit mention, scope precedence, identifier."""
    return (
        -candidate.score,
        not candidate.explicit,
        -candidate.descriptor.scope.rank,
        candidate.identifier,
    )
