"""Unit tests for skillscout.skills.assembler module.

Tests cover:
- Section splitting and block classification
- Full payload rendering
- Priority packing: core before examples before references
- Paragraph-boundary truncation and the hard budget
- Capability-only activation on a missing body
"""

import pytest

from skillscout.config.models import AssemblerConfig, LoaderConfig
from skillscout.core.errors import AssemblyError
from skillscout.skills.assembler import (
    BlockKind,
    ContextAssembler,
    split_paragraphs,
    split_sections,
)
from skillscout.skills.models import Activation, ActivationDecision, ActivationReason
from skillscout.skills.registry import RegistrySnapshot

SEP = "\n\n"
AWS_HEADER = "# Skill: aws-architect"
AWS_PREAMBLE = "# AWS Architect\n\nIntro paragraph."
AWS_GUIDELINES = "## Guidelines\n\nUse least privilege."
AWS_EXAMPLES = "## Examples\n\nExample one."


def _decision(snapshot: RegistrySnapshot, *identifiers: str) -> ActivationDecision:
    activations = []
    for identifier in identifiers:
        descriptor = snapshot.lookup(identifier)
        assert descriptor is not None
        activations.append(Activation(descriptor=descriptor, reason=ActivationReason.TOP_SCORE))
    return ActivationDecision(request="test", activations=tuple(activations))


def _assembler(budget: int = 24_000, *, references: bool = False) -> ContextAssembler:
    return ContextAssembler(AssemblerConfig(budget_chars=budget, include_references=references))


class TestSplitting:
    """Test section and paragraph splitting."""

    def test_split_sections(self) -> None:
        body = "Intro.\n\n## One\n\nFirst.\n\n## Two\nSecond.\n"
        assert split_sections(body) == [
            (None, "Intro."),
            ("One", "## One\n\nFirst."),
            ("Two", "## Two\nSecond."),
        ]

    def test_headings_inside_fences_ignored(self) -> None:
        body = "## Real\n\n```\n## not a heading\n```\n"
        sections = split_sections(body)
        assert [heading for heading, _ in sections] == ["Real"]

    def test_level_three_headings_stay_in_section(self) -> None:
        sections = split_sections("## Top\n\n### Sub\n\ntext")
        assert len(sections) == 1

    def test_split_paragraphs_keeps_fences_whole(self) -> None:
        text = "Para one.\n\n```\nline\n\nline\n```\n\nPara two."
        assert split_paragraphs(text) == ["Para one.", "```\nline\n\nline\n```", "Para two."]


class TestClassify:
    """Test block classification."""

    @pytest.mark.parametrize(
        "heading",
        ["Examples", "example", "Usage Examples", "Example: deploying a stack", "Worked example:"],
    )
    def test_example_headings(self, heading: str) -> None:
        assert ContextAssembler().classify(heading) is BlockKind.EXAMPLE

    @pytest.mark.parametrize("heading", [None, "Guidelines", "When to use", "Counterexamples"])
    def test_core_headings(self, heading: str | None) -> None:
        assert ContextAssembler().classify(heading) is BlockKind.CORE

    def test_custom_example_headings(self) -> None:
        assembler = ContextAssembler(AssemblerConfig(example_headings=("Walkthrough",)))
        assert assembler.classify("walkthrough") is BlockKind.EXAMPLE

    def test_prefix_rule_can_be_disabled(self) -> None:
        assembler = ContextAssembler(AssemblerConfig(example_prefixes=()))
        assert assembler.classify("Example: deploying a stack") is BlockKind.CORE
        assert assembler.classify("Examples") is BlockKind.EXAMPLE

    def test_custom_example_prefixes(self) -> None:
        assembler = ContextAssembler(AssemblerConfig(example_prefixes=("Demo",)))
        assert assembler.classify("Demo: blue/green rollout") is BlockKind.EXAMPLE
        assert assembler.classify("Example: deploying a stack") is BlockKind.CORE


class TestAssemble:
    """Test payload assembly."""

    def test_empty_decision_gives_empty_payload(self) -> None:
        payload = _assembler().assemble(ActivationDecision.empty("x"))
        assert payload.is_empty
        assert payload.text == ""
        assert payload.capabilities == ()

    def test_full_payload(self, catalog_snapshot: RegistrySnapshot) -> None:
        payload = _assembler().assemble(_decision(catalog_snapshot, "aws-architect"))

        assert payload.text == SEP.join([AWS_HEADER, AWS_PREAMBLE, AWS_GUIDELINES, AWS_EXAMPLES])
        assert payload.capabilities == ("Read", "Bash")
        assert payload.identifiers == ("aws-architect",)
        assert payload.truncated is False
        assert payload.dropped_blocks == 0
        assert payload.errors == ()

    def test_references_appended(self, catalog_snapshot: RegistrySnapshot) -> None:
        descriptor = catalog_snapshot.lookup("aws-architect")
        (descriptor.source / "reference.md").write_text("Extra detail.\n", encoding="utf-8")
        scripts = descriptor.source / "scripts"
        scripts.mkdir()
        (scripts / "helper.py").write_text("print('never read')\n", encoding="utf-8")

        payload = _assembler(references=True).assemble(_decision(catalog_snapshot, "aws-architect"))

        assert payload.text.endswith(f"{AWS_EXAMPLES}{SEP}## Reference: reference.md{SEP}Extra detail.")
        assert "never read" not in payload.text

    def test_capabilities_union_preserves_order(self, catalog_snapshot: RegistrySnapshot) -> None:
        decision = _decision(catalog_snapshot, "aws-architect", "security-expert")
        payload = _assembler().assemble(decision)

        assert payload.capabilities == ("Read", "Bash", "Grep")
        assert payload.identifiers == ("aws-architect", "security-expert")
        assert payload.text.index("# Skill: aws-architect") < payload.text.index(
            "# Skill: security-expert"
        )


class TestBudget:
    """Test packing under a size budget."""

    def test_examples_dropped_before_core(self, catalog_snapshot: RegistrySnapshot) -> None:
        core_only = SEP.join([AWS_HEADER, AWS_PREAMBLE, AWS_GUIDELINES])
        payload = _assembler(len(core_only) + len(SEP)).assemble(
            _decision(catalog_snapshot, "aws-architect")
        )

        assert payload.text == core_only
        assert payload.truncated is True
        assert payload.dropped_blocks == 1

    def test_core_of_every_skill_before_any_example(
        self, catalog_snapshot: RegistrySnapshot
    ) -> None:
        expected = SEP.join(
            [
                SEP.join([AWS_HEADER, AWS_PREAMBLE, AWS_GUIDELINES]),
                SEP.join(["# Skill: security-expert", "# Security Expert\n\nCheck IAM."]),
            ]
        )
        decision = _decision(catalog_snapshot, "aws-architect", "security-expert")

        payload = _assembler(len(expected) + len(SEP)).assemble(decision)

        assert payload.text == expected
        assert "Example one." not in payload.text
        assert "Audit roles." not in payload.text
        assert payload.dropped_blocks == 2

    def test_cut_at_paragraph_boundary(self, catalog_snapshot: RegistrySnapshot) -> None:
        budget = len(AWS_HEADER) + len(SEP) + len("# AWS Architect") + len(SEP)

        payload = _assembler(budget).assemble(_decision(catalog_snapshot, "aws-architect"))

        assert payload.text == f"{AWS_HEADER}{SEP}# AWS Architect"
        assert payload.truncated is True
        assert payload.dropped_blocks == 2

    def test_budget_too_small_for_anything(self, catalog_snapshot: RegistrySnapshot) -> None:
        payload = _assembler(10).assemble(_decision(catalog_snapshot, "aws-architect"))

        assert payload.text == ""
        assert payload.truncated is True
        assert payload.dropped_blocks == 3
        assert payload.capabilities == ("Read", "Bash")

    @pytest.mark.parametrize("budget", range(1, 320, 9))
    def test_never_exceeds_budget(self, catalog_snapshot: RegistrySnapshot, budget: int) -> None:
        decision = _decision(catalog_snapshot, "aws-architect", "security-expert", "react-expert")
        payload = _assembler(budget, references=True).assemble(decision)
        assert len(payload.text) <= budget


class TestRecoverableErrors:
    """Test capability-only activations."""

    def test_missing_body(self, catalog_snapshot: RegistrySnapshot) -> None:
        aws = catalog_snapshot.lookup("aws-architect")
        aws.document.unlink()
        decision = _decision(catalog_snapshot, "aws-architect", "react-expert")

        payload = _assembler().assemble(decision, catalog_snapshot)

        (error,) = payload.errors
        assert isinstance(error, AssemblyError)
        assert error.identifier == "aws-architect"
        assert error.path == aws.document
        assert "# Skill: aws-architect" not in payload.text
        assert payload.text.startswith("# Skill: react-expert")
        assert payload.capabilities == ("Read", "Bash", "Write")
        assert payload.identifiers == ("aws-architect", "react-expert")

    def test_body_grown_past_limit(self, catalog_snapshot: RegistrySnapshot) -> None:
        aws = catalog_snapshot.lookup("aws-architect")
        limit = aws.document.stat().st_size + 100
        with aws.document.open("a", encoding="utf-8") as f:
            f.write("\n\n" + "padding " * 200)
        assembler = ContextAssembler(
            AssemblerConfig(include_references=False),
            LoaderConfig(max_document_bytes=limit),
        )

        payload = assembler.assemble(_decision(catalog_snapshot, "aws-architect"), catalog_snapshot)

        (error,) = payload.errors
        assert error.identifier == "aws-architect"
        assert "too large" in error.details["cause"]
        assert payload.text == ""
        assert payload.capabilities == ("Read", "Bash")

    def test_skill_no_longer_registered(self, catalog_snapshot: RegistrySnapshot) -> None:
        decision = _decision(catalog_snapshot, "aws-architect")

        payload = _assembler().assemble(decision, RegistrySnapshot.build(()))

        (error,) = payload.errors
        assert "no longer registered" in error.message
        assert payload.text == ""
        assert payload.capabilities == ("Read", "Bash")

    def test_references_disabled(self, catalog_snapshot: RegistrySnapshot) -> None:
        descriptor = catalog_snapshot.lookup("aws-architect")
        (descriptor.source / "notes.md").write_text("Notes.", encoding="utf-8")

        payload = _assembler(references=False).assemble(_decision(catalog_snapshot, "aws-architect"))

        assert "Notes." not in payload.text

    def test_reference_documents_sorted(self, catalog_snapshot: RegistrySnapshot) -> None:
        descriptor = catalog_snapshot.lookup("aws-architect")
        (descriptor.source / "z.md").write_text("Z", encoding="utf-8")
        (descriptor.source / "docs").mkdir()
        (descriptor.source / "docs" / "a.md").write_text("A", encoding="utf-8")
        (descriptor.source / ".hidden.md").write_text("H", encoding="utf-8")

        paths = ContextAssembler().reference_documents(descriptor)

        assert [p.relative_to(descriptor.source).as_posix() for p in paths] == ["docs/a.md", "z.md"]
