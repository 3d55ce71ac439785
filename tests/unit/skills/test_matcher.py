"""Unit tests for skillscout.skills.matcher module.

Catalog descriptions (token counts after stop-word removal):
    aws-architect    7  design aws infrastructure cloud architecture scalable deployments
    gcp-architect    7  design gcp infrastructure cloud architecture google cloud
    react-expert     7  build react components hooks frontend state management
    security-expert  8  review security posture iam policies cloud security controls
"""

from collections.abc import Callable
from pathlib import Path

import pytest

from skillscout.config.models import MatcherConfig, RootConfig
from skillscout.core.types import Scope
from skillscout.skills.matcher import LexicalMatcher, Matcher, TermIndex, rank_key
from skillscout.skills.models import MatchCandidate, SkillDescriptor
from skillscout.skills.registry import RegistrySnapshot, SkillRegistry


def _ids(candidates: list[MatchCandidate]) -> list[str]:
    return [c.identifier for c in candidates]


class TestTermIndex:
    """Test TermIndex construction."""

    def test_entries_follow_visible_order(self, catalog_snapshot: RegistrySnapshot) -> None:
        index = TermIndex(catalog_snapshot, MatcherConfig())
        assert [e.descriptor.identifier for e in index.entries] == [
            "aws-architect",
            "gcp-architect",
            "react-expert",
            "security-expert",
        ]
        assert len(index) == 4

    def test_postings(self, catalog_snapshot: RegistrySnapshot) -> None:
        index = TermIndex(catalog_snapshot, MatcherConfig())
        assert index.postings("cloud") == (0, 1, 3)
        assert index.postings("expert") == (2, 3)
        assert index.postings("missing") == ()

    def test_length_counts_repeated_tokens(self, catalog_snapshot: RegistrySnapshot) -> None:
        index = TermIndex(catalog_snapshot, MatcherConfig())
        lengths = {e.descriptor.identifier: e.length for e in index.entries}
        assert lengths == {
            "aws-architect": 7,
            "gcp-architect": 7,
            "react-expert": 7,
            "security-expert": 8,
        }

    def test_keyword_terms_include_domain_and_own_keywords(self) -> None:
        descriptor = SkillDescriptor(
            identifier="pdf",
            description="Read PDF files.",
            scope=Scope.USER,
            source=Path("/pdf"),
            document=Path("/pdf/SKILL.md"),
            last_modified=0.0,
            keywords=("Documents",),
        )
        index = TermIndex(RegistrySnapshot.build([descriptor]), MatcherConfig(domain_keywords=("aws",)))
        assert index.entries[0].keyword_terms == frozenset({"aws", "documents"})


class TestLexicalMatcherScoring:
    """Test score computation against the catalog."""

    def test_aws_request_matches_only_aws(self, catalog_snapshot: RegistrySnapshot) -> None:
        candidates = LexicalMatcher().match("Deploy this application to AWS", catalog_snapshot)

        (candidate,) = candidates
        assert candidate.identifier == "aws-architect"
        assert candidate.score == pytest.approx(2.0 / 7, abs=1e-6)
        assert candidate.matched_terms == ("aws",)
        assert candidate.explicit is False

    def test_weighted_overlap(self, catalog_snapshot: RegistrySnapshot) -> None:
        request = "Design secure cloud infrastructure on AWS with proper security"
        candidates = LexicalMatcher().match(request, catalog_snapshot)

        assert _ids(candidates) == ["aws-architect", "gcp-architect", "security-expert"]
        scores = [c.score for c in candidates]
        assert scores == pytest.approx([5.5 / 7, 3.5 / 7, 3.5 / 8], abs=1e-6)
        assert candidates[0].matched_terms == ("aws", "cloud", "design", "infrastructure")

    def test_identifier_terms_score_without_description_hit(
        self, catalog_snapshot: RegistrySnapshot
    ) -> None:
        candidates = LexicalMatcher().match("expert advice", catalog_snapshot)

        assert _ids(candidates) == ["react-expert", "security-expert"]
        assert [c.score for c in candidates] == pytest.approx([2.0 / 7, 2.0 / 8], abs=1e-6)

    def test_explicit_mention_flag(self, catalog_snapshot: RegistrySnapshot) -> None:
        candidates = LexicalMatcher().match("ask security-expert about iam", catalog_snapshot)

        assert _ids(candidates) == ["security-expert", "react-expert"]
        assert candidates[0].explicit is True
        assert candidates[0].score == pytest.approx(5.0 / 8, abs=1e-6)
        assert candidates[1].explicit is False

    def test_larger_multiplier_applies_once(self, catalog_snapshot: RegistrySnapshot) -> None:
        """'aws' is both identifier term and domain keyword: 2.0, not 3.0."""
        matcher = LexicalMatcher()
        entry = matcher.index_for(catalog_snapshot).entries[0]
        assert matcher.term_weight("aws", entry) == 2.0
        assert matcher.term_weight("cloud", entry) == 1.5
        assert matcher.term_weight("design", entry) == 1.0

    def test_repeated_request_terms_count_once(self, catalog_snapshot: RegistrySnapshot) -> None:
        once = LexicalMatcher().match("aws", catalog_snapshot)
        many = LexicalMatcher().match("aws AWS aws!", catalog_snapshot)
        assert [c.score for c in once] == [c.score for c in many]


class TestLexicalMatcherEdgeCases:
    """Test empty and below-threshold results."""

    def test_no_overlap_gives_empty(self, catalog_snapshot: RegistrySnapshot) -> None:
        assert LexicalMatcher().match("bake sourdough bread", catalog_snapshot) == []

    def test_stop_words_only_gives_empty(self, catalog_snapshot: RegistrySnapshot) -> None:
        assert LexicalMatcher().match("can you do this for me", catalog_snapshot) == []

    def test_empty_registry(self) -> None:
        assert LexicalMatcher().match("deploy to aws", RegistrySnapshot.build(())) == []

    def test_below_threshold_dropped(
        self, tmp_path: Path, write_skill: Callable[..., Path]
    ) -> None:
        filler = " ".join(f"filler{i}" for i in range(29))
        write_skill(tmp_path, "tf", {"name": "tf", "description": f"terraform {filler}"})
        snapshot = SkillRegistry([RootConfig(path=tmp_path, scope=Scope.USER)]).reload()

        assert LexicalMatcher().match("terraform", snapshot) == []
        relaxed = LexicalMatcher(MatcherConfig(threshold=0.01)).match("terraform", snapshot)
        assert relaxed[0].score == pytest.approx(1.0 / 30, abs=1e-6)

    def test_extra_stop_words(self, catalog_snapshot: RegistrySnapshot) -> None:
        assert LexicalMatcher().match("cloud", catalog_snapshot) != []
        matcher = LexicalMatcher(MatcherConfig(extra_stop_words=("cloud",)))
        assert matcher.match("cloud", catalog_snapshot) == []

    def test_non_ascii_descriptions(
        self, tmp_path: Path, write_skill: Callable[..., Path]
    ) -> None:
        write_skill(tmp_path, "docs-zh", {"name": "docs-zh", "description": "编写 技术 文档"})
        write_skill(tmp_path, "ml", {"name": "ml", "description": "Naïve Bayes classifiers"})
        snapshot = SkillRegistry([RootConfig(path=tmp_path, scope=Scope.USER)]).reload()

        (candidate,) = LexicalMatcher().match("需要 技术 支持", snapshot)
        assert candidate.identifier == "docs-zh"
        assert candidate.score == pytest.approx(1.0 / 3, abs=1e-6)
        assert candidate.matched_terms == ("技术",)

        assert LexicalMatcher().match("na ve", snapshot) == []
        assert _ids(LexicalMatcher().match("naive or naïve", snapshot)) == ["ml"]


class TestOrdering:
    """Test deterministic ordering and tie-breaks."""

    def test_same_input_same_output(self, catalog_snapshot: RegistrySnapshot) -> None:
        request = "Design secure cloud infrastructure on AWS with proper security"
        assert LexicalMatcher().match(request, catalog_snapshot) == LexicalMatcher().match(
            request, catalog_snapshot
        )

    def test_equal_scores_order_by_identifier(self, catalog_snapshot: RegistrySnapshot) -> None:
        candidates = LexicalMatcher().match("architecture", catalog_snapshot)
        assert _ids(candidates) == ["aws-architect", "gcp-architect"]
        assert candidates[0].score == candidates[1].score

    def test_project_scope_breaks_score_ties(
        self, tmp_path: Path, write_skill: Callable[..., Path]
    ) -> None:
        meta = {"description": "Deploy kubernetes clusters."}
        write_skill(tmp_path / "user", "b", {"name": "b-skill", **meta})
        write_skill(tmp_path / "project", "c", {"name": "c-skill", **meta})
        snapshot = SkillRegistry(
            [
                RootConfig(path=tmp_path / "user", scope=Scope.USER),
                RootConfig(path=tmp_path / "project", scope=Scope.PROJECT),
            ]
        ).reload()

        candidates = LexicalMatcher().match("deploy kubernetes", snapshot)

        assert _ids(candidates) == ["c-skill", "b-skill"]
        assert candidates[0].score == pytest.approx(2.5 / 3, abs=1e-6)

    def test_rank_key_prefers_explicit_on_tie(self, catalog_snapshot: RegistrySnapshot) -> None:
        aws = catalog_snapshot.lookup("aws-architect")
        gcp = catalog_snapshot.lookup("gcp-architect")
        plain = MatchCandidate(descriptor=aws, score=0.5)
        named = MatchCandidate(descriptor=gcp, score=0.5, explicit=True)

        assert sorted([plain, named], key=rank_key) == [named, plain]


class TestIndexCache:
    """Test per-snapshot index caching."""

    def test_index_reused_for_same_snapshot(self, catalog_snapshot: RegistrySnapshot) -> None:
        matcher = LexicalMatcher()
        assert matcher.index_for(catalog_snapshot) is matcher.index_for(catalog_snapshot)

    def test_index_rebuilt_after_reload(
        self, tmp_path: Path, write_skill: Callable[..., Path]
    ) -> None:
        write_skill(tmp_path, "a", {"name": "alpha", "description": "Deploy things."})
        registry = SkillRegistry([RootConfig(path=tmp_path, scope=Scope.USER)])
        matcher = LexicalMatcher()
        assert _ids(matcher.match("deploy", registry.reload())) == ["alpha"]

        write_skill(tmp_path, "b", {"name": "beta", "description": "Deploy more things."})
        assert _ids(matcher.match("deploy", registry.reload())) == ["alpha", "beta"]


class TestMatcherProtocol:
    """Test the pluggable strategy seam."""

    def test_lexical_matcher_satisfies_protocol(self) -> None:
        assert isinstance(LexicalMatcher(), Matcher)

    def test_custom_strategy_satisfies_protocol(self) -> None:
        class FixedMatcher:
            def match(self, request: str, snapshot: RegistrySnapshot) -> list[MatchCandidate]:
                return []

        assert isinstance(FixedMatcher(), Matcher)
