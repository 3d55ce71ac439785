"""Shared fixtures: skill directories written under tmp_path."""

from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
import yaml

from skillscout.config.models import EngineConfig, RootConfig
from skillscout.core.types import Scope
from skillscout.observability.logging import reset_logging
from skillscout.skills.registry import RegistrySnapshot, SkillRegistry

AWS_BODY = """# AWS Architect

Intro paragraph.

## Guidelines

Use least privilege.

## Examples

Example one.
"""


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Keep structlog from holding on to a captured stream between tests."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def write_skill() -> Callable[..., Path]:
    """Factory that writes ``<root>/<dirname>/SKILL.md`` and returns the directory.

    ``meta`` is dumped as the YAML header; pass ``header`` to write a raw
    (possibly malformed) header instead.
    """

    def _write(
        root: Path,
        dirname: str,
        meta: dict[str, Any] | None = None,
        *,
        body: str = "",
        header: str | None = None,
    ) -> Path:
        skill_dir = root / dirname
        skill_dir.mkdir(parents=True, exist_ok=True)
        if header is None:
            header = yaml.safe_dump(meta or {}, sort_keys=False)
        (skill_dir / "SKILL.md").write_text(f"---\n{header}---\n{body}", encoding="utf-8")
        return skill_dir

    return _write


@pytest.fixture
def catalog(tmp_path: Path, write_skill: Callable[..., Path]) -> tuple[Path, Path]:
    """A small user + project catalog. Returns (user_root, project_root)."""
    user_root = tmp_path / "user"
    project_root = tmp_path / "project"

    write_skill(
        user_root,
        "aws-architect",
        {
            "name": "aws-architect",
            "description": "Design AWS infrastructure and cloud architecture for scalable deployments.",
            "allowed-tools": "Read, Bash",
            "group": "cloud-provider",
        },
        body=AWS_BODY,
    )
    write_skill(
        user_root,
        "gcp-architect",
        {
            "name": "gcp-architect",
            "description": "Design GCP infrastructure and cloud architecture on Google Cloud.",
            "allowed-tools": ["Read", "Bash"],
            "group": "cloud-provider",
        },
        body="# GCP Architect\n\nUse projects and folders.\n",
    )
    write_skill(
        user_root,
        "react-expert",
        {
            "name": "react-expert",
            "description": "Build React components, hooks and frontend state management.",
            "allowed-tools": "Read, Write",
        },
        body="# React Expert\n\nPrefer function components.\n",
    )
    write_skill(
        project_root,
        "security-expert",
        {
            "name": "security-expert",
            "description": "Review security posture, IAM policies and cloud security controls.",
            "allowed-tools": "Read, Grep",
        },
        body="# Security Expert\n\nCheck IAM.\n\n## Example\n\nAudit roles.\n",
    )
    return user_root, project_root


@pytest.fixture
def catalog_config(catalog: tuple[Path, Path]) -> EngineConfig:
    """Default engine configuration pointed at the catalog roots."""
    user_root, project_root = catalog
    return EngineConfig(
        roots=[
            RootConfig(path=user_root, scope=Scope.USER),
            RootConfig(path=project_root, scope=Scope.PROJECT),
        ]
    )


@pytest.fixture
def catalog_snapshot(catalog_config: EngineConfig) -> RegistrySnapshot:
    """A loaded snapshot of the catalog."""
    return SkillRegistry(catalog_config.roots).reload()
