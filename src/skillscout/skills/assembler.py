"""Context assembler: pack activated skills into a bounded payload.

A skill body is split into content blocks at ``##`` headings. Sections
titled like worked examples are EXAMPLE blocks, everything else in the body
is CORE, and each secondary markdown document in the skill directory is a
REFERENCE block. Blocks are admitted in priority order (all CORE blocks,
then EXAMPLE, then REFERENCE; decision order within a kind). The first
block that does not fit is cut at a paragraph boundary and everything
after it is dropped, so truncation always removes the lowest-priority
material first and never splits a sentence.

Helper scripts and other non-markdown files are never read.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import structlog

from skillscout.config.models import AssemblerConfig, LoaderConfig
from skillscout.core.errors import AssemblyError
from skillscout.core.types import Result
from skillscout.skills.loader import read_document, split_front_matter
from skillscout.skills.models import ActivationDecision, AssembledPayload, SkillDescriptor
from skillscout.skills.registry import RegistrySnapshot

log = structlog.get_logger()

_SEPARATOR = "\n\n"


class BlockKind(int, Enum):
    """Content priority; lower values are kept first."""

    CORE = 0
    EXAMPLE = 1
    REFERENCE = 2


@dataclass(frozen=True)
class ContentBlock:
    """A unit of instructional text that is kept or dropped whole.

    Attributes:
        kind: Priority class
        order: Position within the skill (document order, references last)
        text: Block text, heading included
    """

    kind: BlockKind
    order: int
    text: str


def _is_fence(line: str) -> bool:
    stripped = line.lstrip()
    return stripped.startswith("```") or stripped.startswith("~~~")


def split_sections(body: str) -> list[tuple[str | None, str]]:
    """Split a markdown body at level-2 headings outside code fences.

    Returns:
        (heading, text) pairs in document order; the preamble has heading None.
    """
    sections: list[tuple[str | None, str]] = []
    heading: str | None = None
    current: list[str] = []
    in_fence = False

    for line in body.split("\n"):
        if _is_fence(line):
            in_fence = not in_fence
        if not in_fence and line.startswith("## "):
            text = "\n".join(current).strip()
            if text:
                sections.append((heading, text))
            heading = line[3:].strip()
            current = [line]
        else:
            current.append(line)

    text = "\n".join(current).strip()
    if text:
        sections.append((heading, text))
    return sections


def split_paragraphs(text: str) -> list[str]:
    """Split text at blank lines, keeping fenced code blocks intact."""
    paragraphs: list[str] = []
    current: list[str] = []
    in_fence = False

    for line in text.split("\n"):
        if _is_fence(line):
            in_fence = not in_fence
        if not in_fence and not line.strip():
            if current:
                paragraphs.append("\n".join(current))
                current = []
        else:
            current.append(line)
    if current:
        paragraphs.append("\n".join(current))
    return paragraphs


def skill_header(identifier: str) -> str:
    return f"# Skill: {identifier}"


class ContextAssembler:
    """Load activated skills' bodies and pack them into a size budget."""

    def __init__(
        self,
        config: AssemblerConfig | None = None,
        loader_config: LoaderConfig | None = None,
    ) -> None:
        self._config = config or AssemblerConfig()
        self._loader_config = loader_config or LoaderConfig()

    @property
    def config(self) -> AssemblerConfig:
        return self._config

    def classify(self, heading: str | None) -> BlockKind:
        """EXAMPLE for worked-example headings, CORE otherwise."""
        if heading is None:
            return BlockKind.CORE
        normalized = heading.strip().rstrip(":").strip().lower()
        if normalized in self._config.example_headings:
            return BlockKind.EXAMPLE
        if any(normalized.startswith(p) for p in self._config.example_prefixes):
            return BlockKind.EXAMPLE
        return BlockKind.CORE

    def load_body(self, descriptor: SkillDescriptor) -> Result[list[ContentBlock], AssemblyError]:
        """Read the body of the primary document and split it into blocks."""
        read = read_document(descriptor.document, self._loader_config.max_document_bytes)
        if read.is_err:
            return Result.err(
                AssemblyError(
                    f"Skill body unavailable for '{descriptor.identifier}'",
                    identifier=descriptor.identifier,
                    path=descriptor.document,
                    details={"cause": read.error.message},
                )
            )

        _header, body = split_front_matter(read.value)
        blocks = [
            ContentBlock(kind=self.classify(heading), order=i, text=text)
            for i, (heading, text) in enumerate(split_sections(body))
        ]
        return Result.ok(blocks)

    def reference_documents(self, descriptor: SkillDescriptor) -> list[Path]:
        """Secondary markdown documents of a skill, sorted by relative path."""
        suffixes = {s.lower() for s in self._loader_config.reference_suffixes}
        found: list[Path] = []
        try:
            for path in descriptor.source.rglob("*"):
                relative = path.relative_to(descriptor.source)
                if any(part.startswith(".") for part in relative.parts):
                    continue
                if path == descriptor.document or path.suffix.lower() not in suffixes:
                    continue
                if path.is_file():
                    found.append(path)
        except OSError as e:
            log.warning(
                "skills.assembler.reference_scan_failed",
                identifier=descriptor.identifier,
                error=str(e),
            )
        return sorted(found, key=lambda p: p.relative_to(descriptor.source).as_posix())

    def load_references(
        self, descriptor: SkillDescriptor, start: int
    ) -> tuple[list[ContentBlock], list[AssemblyError]]:
        """Read secondary documents as REFERENCE blocks numbered from ``start``."""
        blocks: list[ContentBlock] = []
        errors: list[AssemblyError] = []
        for offset, path in enumerate(self.reference_documents(descriptor)):
            read = read_document(path, self._loader_config.max_document_bytes)
            if read.is_err:
                errors.append(
                    AssemblyError(
                        f"Reference document unavailable for '{descriptor.identifier}'",
                        identifier=descriptor.identifier,
                        path=path,
                        details={"cause": read.error.message},
                    )
                )
                continue
            _header, content = split_front_matter(read.value)
            content = content.strip()
            if not content:
                continue
            title = path.relative_to(descriptor.source).as_posix()
            blocks.append(
                ContentBlock(
                    kind=BlockKind.REFERENCE,
                    order=start + offset,
                    text=f"## Reference: {title}{_SEPARATOR}{content}",
                )
            )
        return blocks, errors

    def assemble(
        self,
        decision: ActivationDecision,
        snapshot: RegistrySnapshot | None = None,
    ) -> AssembledPayload:
        """Build the payload for ``decision``.

        Per-skill failures never fail the whole payload: a skill whose body
        cannot be read, or that is no longer registered in ``snapshot``,
        contributes its capabilities only and an AssemblyError is recorded.

        Args:
            decision: The activation decision to materialise.
            snapshot: Snapshot to validate activated skills against.

        Returns:
            The assembled payload (empty for an empty decision).
        """
        if decision.is_empty:
            return AssembledPayload()

        errors: list[AssemblyError] = []
        per_skill: list[tuple[SkillDescriptor, list[ContentBlock]]] = []

        for activation in decision.activations:
            descriptor = activation.descriptor
            if snapshot is not None and snapshot.lookup_scoped(descriptor.identifier, descriptor.scope) is None:
                errors.append(
                    AssemblyError(
                        f"Skill '{descriptor.identifier}' is no longer registered",
                        identifier=descriptor.identifier,
                        details={"generation": snapshot.generation},
                    )
                )
                per_skill.append((descriptor, []))
                continue

            body = self.load_body(descriptor)
            if body.is_err:
                errors.append(body.error)
                log.warning(
                    "skills.assembler.body_missing",
                    identifier=descriptor.identifier,
                    path=str(descriptor.document),
                    error=body.error.message,
                )
                per_skill.append((descriptor, []))
                continue

            blocks = body.value
            if self._config.include_references:
                references, reference_errors = self.load_references(descriptor, len(blocks))
                blocks.extend(references)
                for error in reference_errors:
                    log.warning(
                        "skills.assembler.reference_missing",
                        identifier=descriptor.identifier,
                        path=str(error.path),
                    )
                errors.extend(reference_errors)
            per_skill.append((descriptor, blocks))

        kept, dropped, truncated = self._pack(per_skill)
        text = self._render(per_skill, kept)
        payload = AssembledPayload(
            text=text,
            capabilities=_union(a.descriptor.capabilities for a in decision.activations),
            identifiers=tuple(decision.identifiers),
            truncated=truncated,
            dropped_blocks=dropped,
            errors=tuple(errors),
        )
        log.info(
            "skills.assembler.assembled",
            identifiers=list(payload.identifiers),
            chars=len(payload.text),
            budget=self._config.budget_chars,
            truncated=truncated,
            dropped_blocks=dropped,
            errors=len(errors),
        )
        return payload

    def _pack(
        self, per_skill: list[tuple[SkillDescriptor, list[ContentBlock]]]
    ) -> tuple[dict[tuple[int, int], str], int, bool]:
        """Choose which blocks (or leading paragraphs of one block) fit.

        Returns:
            (kept text keyed by (skill position, block order), dropped count,
            truncated flag).
        """
        queue = sorted(
            (
                (block.kind, skill_pos, block.order, block)
                for skill_pos, (_descriptor, blocks) in enumerate(per_skill)
                for block in blocks
            ),
            key=lambda item: (item[0], item[1], item[2]),
        )

        budget = self._config.budget_chars
        used = 0
        kept: dict[tuple[int, int], str] = {}
        started: set[int] = set()
        dropped = 0
        cut = False

        for _kind, skill_pos, order, block in queue:
            if cut:
                dropped += 1
                continue

            header_cost = 0
            if skill_pos not in started:
                header_cost = len(skill_header(per_skill[skill_pos][0].identifier)) + len(_SEPARATOR)

            cost = header_cost + len(block.text) + len(_SEPARATOR)
            if used + cost <= budget:
                kept[(skill_pos, order)] = block.text
                started.add(skill_pos)
                used += cost
                continue

            cut = True
            room = budget - used - header_cost
            leading: list[str] = []
            for paragraph in split_paragraphs(block.text):
                candidate = _SEPARATOR.join([*leading, paragraph])
                if len(candidate) + len(_SEPARATOR) > room:
                    break
                leading.append(paragraph)

            if leading:
                kept[(skill_pos, order)] = _SEPARATOR.join(leading)
                started.add(skill_pos)
                used += header_cost + len(kept[(skill_pos, order)]) + len(_SEPARATOR)
            else:
                dropped += 1

        return kept, dropped, cut

    def _render(
        self,
        per_skill: list[tuple[SkillDescriptor, list[ContentBlock]]],
        kept: dict[tuple[int, int], str],
    ) -> str:
        chunks: list[str] = []
        for skill_pos, (descriptor, blocks) in enumerate(per_skill):
            parts = [kept[(skill_pos, b.order)] for b in blocks if (skill_pos, b.order) in kept]
            if parts:
                chunks.append(_SEPARATOR.join([skill_header(descriptor.identifier), *parts]))
        return _SEPARATOR.join(chunks)


def _union(groups: Iterable[tuple[str, ...]]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for group in groups:
        for item in group:
            seen.setdefault(item, None)
    return tuple(seen)
