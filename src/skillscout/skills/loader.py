"""Descriptor loader: scan skill roots and parse metadata headers.

Each root holds one directory per skill. A directory is a skill when it
contains the primary document (``SKILL.md`` by default), which opens with
a YAML metadata header between ``---`` lines:

    ---
    name: aws-architect
    description: Design AWS infrastructure and cloud architecture.
    allowed-tools: Read, Bash
    group: cloud-provider
    ---

Bad entries are recorded as warnings and skipped; the scan always
continues. Only read-only filesystem access happens here.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
import re
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
import structlog
import yaml

from skillscout.config.models import LoaderConfig, RootConfig
from skillscout.core.errors import FileSystemError, ParseError
from skillscout.core.types import Result
from skillscout.skills.models import LoadResult, LoadWarning, SkillDescriptor

log = structlog.get_logger()

_IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,127}$")
_HEADER_DELIMITERS = ("---", "...")


def _split_tokens(value: Any) -> tuple[str, ...]:
    """Accept a YAML list or a comma-separated string of opaque tokens."""
    if value is None:
        return ()
    if isinstance(value, str):
        parts = value.split(",") if "," in value else value.split()
        return tuple(p.strip() for p in parts if p.strip())
    if isinstance(value, (list, tuple)):
        return tuple(str(item).strip() for item in value if str(item).strip())
    msg = "must be a list or a comma-separated string"
    raise ValueError(msg)


class SkillHeader(BaseModel):
    """Validated metadata header of a primary document.

    ``name`` is accepted for ``identifier`` and ``allowed-tools`` for
    ``capabilities``, matching how skill documents are written in practice.
    Unknown keys are ignored.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    identifier: str = Field(validation_alias=AliasChoices("identifier", "name"))
    description: str
    capabilities: tuple[str, ...] = Field(
        default=(),
        validation_alias=AliasChoices("capabilities", "allowed-tools", "allowed_tools"),
    )
    keywords: tuple[str, ...] = Field(
        default=(), validation_alias=AliasChoices("keywords", "tags")
    )
    group: str | None = None
    version: str | None = None

    @field_validator("identifier", mode="before")
    @classmethod
    def validate_identifier(cls, v: Any) -> str:
        text = str(v).strip() if v is not None else ""
        if not _IDENTIFIER_RE.match(text):
            msg = f"invalid identifier {text!r}"
            raise ValueError(msg)
        return text

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, v: Any) -> str:
        text = " ".join(str(v).split()) if v is not None else ""
        if not text:
            msg = "description must not be empty"
            raise ValueError(msg)
        return text

    @field_validator("capabilities", "keywords", mode="before")
    @classmethod
    def split_tokens(cls, v: Any) -> tuple[str, ...]:
        return _split_tokens(v)

    @field_validator("group", "version", mode="before")
    @classmethod
    def optional_text(cls, v: Any) -> str | None:
        if v is None:
            return None
        text = str(v).strip()
        return text or None


def split_front_matter(text: str) -> tuple[str | None, str]:
    """Split a document into its raw YAML header and its body.

    Returns:
        (header, body). ``header`` is None when the document does not open
        with a ``---`` line or the header is never closed.
    """
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    lines = normalized.split("\n")
    if not lines or lines[0].strip() != "---":
        return None, normalized

    for i in range(1, len(lines)):
        if lines[i].strip() in _HEADER_DELIMITERS:
            header = "\n".join(lines[1:i])
            body = "\n".join(lines[i + 1 :])
            return header, body.lstrip("\n")
    return None, normalized


def read_document(path: Path, max_bytes: int | None = None) -> Result[str, FileSystemError]:
    """Read a UTF-8 text document, refusing files over ``max_bytes``."""
    try:
        if max_bytes is not None:
            size = path.stat().st_size
            if size > max_bytes:
                return Result.err(
                    FileSystemError(
                        f"Document too large: {path} ({size} bytes > {max_bytes})",
                        path=path,
                        details={"size": size, "limit": max_bytes},
                    )
                )
        return Result.ok(path.read_text(encoding="utf-8"))
    except OSError as e:
        return Result.err(FileSystemError.from_os_error(e, path=path))
    except UnicodeDecodeError as e:
        return Result.err(
            FileSystemError(f"Document is not valid UTF-8: {path}", path=path, details={"reason": e.reason})
        )


def _parse_simple_header(raw: str) -> dict[str, Any]:
    """Line-based ``key: value`` / ``- item`` reading of a header.

    Used when strict YAML rejects a header, typically an unquoted
    description containing ``: ``.
    """
    data: dict[str, Any] = {}
    current: str | None = None
    for line in raw.split("\n"):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if stripped.startswith("- ") and current is not None:
            items = data.get(current)
            if not isinstance(items, list):
                items = []
                data[current] = items
            items.append(stripped[2:].strip())
            continue
        if ":" in line and not line[0].isspace():
            key, value = line.split(":", 1)
            current = key.strip().lower()
            data[current] = value.strip().strip("\"'") or None
        elif current is not None and isinstance(data.get(current), str):
            data[current] = f"{data[current]} {stripped}"
    return data


def parse_header(text: str, path: Path) -> Result[SkillHeader, ParseError]:
    """Parse and validate the metadata header of a primary document."""
    raw, _body = split_front_matter(text)
    if raw is None:
        return Result.err(ParseError(f"Missing metadata header in {path}", path=path))

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        data = _parse_simple_header(raw)
        if not data:
            return Result.err(
                ParseError(
                    f"Malformed metadata header in {path}",
                    path=path,
                    details={"yaml_error": str(e)},
                )
            )
        log.debug("skills.loader.lenient_header", path=str(path), yaml_error=str(e))

    if not isinstance(data, dict):
        return Result.err(ParseError(f"Metadata header is not a mapping in {path}", path=path))

    try:
        return Result.ok(SkillHeader.model_validate(data))
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = str(first["loc"][0]) if first["loc"] else None
        if first["type"] == "missing":
            message = f"Missing required field '{field}' in {path}"
        else:
            message = f"Invalid field '{field}' in {path}: {first['msg']}"
        return Result.err(
            ParseError(message, path=path, field=field, details={"error_count": e.error_count()})
        )


class DescriptorLoader:
    """Scan ordered root locations and produce immutable descriptors.

    Output preserves root scan order, then directory-name order within a
    root, so later stages can apply precedence by position.
    """

    def __init__(self, config: LoaderConfig | None = None) -> None:
        self._config = config or LoaderConfig()

    @property
    def config(self) -> LoaderConfig:
        return self._config

    def load(self, roots: Iterable[RootConfig]) -> LoadResult:
        """Load every skill found under ``roots``.

        Args:
            roots: Root locations, lowest precedence first.

        Returns:
            Descriptors, warnings for skipped entries, and the roots that
            could actually be listed.
        """
        descriptors: list[SkillDescriptor] = []
        warnings: list[LoadWarning] = []
        readable: list[Path] = []

        for root in roots:
            listed = self._list_skill_dirs(root.path)
            if listed.is_err:
                warnings.append(listed.error)
                log.warning(
                    "skills.loader.root_unreadable",
                    root=str(root.path),
                    scope=root.scope.value,
                    error=listed.error.message,
                )
                continue

            readable.append(root.path)
            for skill_dir in listed.value:
                loaded = self.load_entry(skill_dir, root)
                if loaded is None:
                    continue
                if loaded.is_ok:
                    descriptors.append(loaded.value)
                else:
                    warnings.append(loaded.error)
                    log.warning(
                        "skills.loader.entry_skipped",
                        path=str(skill_dir),
                        scope=root.scope.value,
                        error=str(loaded.error),
                    )

        log.info(
            "skills.loader.scan_complete",
            descriptors=len(descriptors),
            warnings=len(warnings),
            readable_roots=len(readable),
        )
        return LoadResult(
            descriptors=tuple(descriptors),
            warnings=tuple(warnings),
            readable_roots=tuple(readable),
        )

    def load_entry(
        self, skill_dir: Path, root: RootConfig
    ) -> Result[SkillDescriptor, LoadWarning] | None:
        """Load a single skill directory.

        Returns:
            None when the directory has no primary document (not a skill),
            otherwise the descriptor or the reason it was skipped.
        """
        document = skill_dir / self._config.primary_document
        try:
            if not document.is_file():
                log.debug("skills.loader.not_a_skill", path=str(skill_dir))
                return None
            mtime = document.stat().st_mtime
        except OSError as e:
            return Result.err(FileSystemError.from_os_error(e, path=document))

        text = read_document(document, self._config.max_document_bytes)
        if text.is_err:
            return Result.err(text.error)

        header = parse_header(text.value, document)
        if header.is_err:
            return Result.err(header.error)

        meta = header.value
        return Result.ok(
            SkillDescriptor(
                identifier=meta.identifier,
                description=meta.description,
                scope=root.scope,
                source=skill_dir,
                document=document,
                last_modified=mtime,
                capabilities=meta.capabilities,
                keywords=meta.keywords,
                group=meta.group,
                version=meta.version,
            )
        )

    def _list_skill_dirs(self, root: Path) -> Result[list[Path], FileSystemError]:
        """List candidate skill directories under ``root`` in name order."""
        try:
            if not root.is_dir():
                return Result.err(
                    FileSystemError(f"Skill root not found or not a directory: {root}", path=root)
                )
            children = [
                child
                for child in root.iterdir()
                if child.is_dir() and not child.name.startswith(".")
            ]
        except OSError as e:
            return Result.err(FileSystemError.from_os_error(e, path=root))
        return Result.ok(sorted(children, key=lambda p: p.name))
