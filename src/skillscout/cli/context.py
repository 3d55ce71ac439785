"""Shared CLI options and engine construction.

Every command accepts the same root and config overrides and builds a
fresh engine from them, so a command invocation always reflects what is
on disk at that moment.
"""

from pathlib import Path
from typing import Annotated

import typer

from skillscout.cli.formatters.panels import print_error
from skillscout.config import EngineConfig, RootConfig, load_config
from skillscout.core.errors import ConfigError, RegistryError
from skillscout.core.types import Scope
from skillscout.observability.logging import LoggingConfig, configure_logging
from skillscout.skills.engine import SkillEngine

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to a config.yaml file."),
]
UserRootOption = Annotated[
    Path | None,
    typer.Option("--user-root", help="Replace the user-scope skill root."),
]
ProjectRootOption = Annotated[
    Path | None,
    typer.Option("--project-root", help="Replace the project-scope skill root."),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Emit debug logs on stderr."),
]


def override_roots(
    config: EngineConfig,
    user_root: Path | None = None,
    project_root: Path | None = None,
) -> EngineConfig:
    """Replace configured roots of a scope with the given directory.

    Order is kept as user first, project second so project still wins.
    """
    if user_root is None and project_root is None:
        return config

    overrides = {Scope.USER: user_root, Scope.PROJECT: project_root}
    roots: list[RootConfig] = []
    for scope in (Scope.USER, Scope.PROJECT):
        replacement = overrides[scope]
        if replacement is not None:
            roots.append(RootConfig(path=replacement, scope=scope))
        else:
            roots.extend(r for r in config.roots if r.scope == scope)
    return config.model_copy(update={"roots": roots})


def build_engine(
    config_path: Path | None = None,
    user_root: Path | None = None,
    project_root: Path | None = None,
    *,
    verbose: bool = False,
) -> SkillEngine:
    """Load config, apply overrides, configure logging and scan roots.

    Exits with status 1 on configuration errors or when no root is readable.
    """
    try:
        config = override_roots(load_config(config_path), user_root, project_root)
    except ConfigError as e:
        print_error(e.message, title="Configuration Error")
        raise typer.Exit(1) from e

    level = "DEBUG" if verbose else "WARNING"
    configure_logging(LoggingConfig(mode=config.logging.mode, log_level=level))

    engine = SkillEngine(config)
    try:
        engine.reload()
    except RegistryError as e:
        tried = "\n".join(f"  {root}" for root in e.roots)
        print_error(f"{e.message}\n{tried}", title="Registry Error")
        raise typer.Exit(1) from e
    return engine


__all__ = [
    "ConfigOption",
    "UserRootOption",
    "ProjectRootOption",
    "VerboseOption",
    "override_roots",
    "build_engine",
]
