"""Configuration models and loading for skillscout."""

from skillscout.config.loader import load_config, resolve_config_path
from skillscout.config.models import (
    AssemblerConfig,
    EngineConfig,
    LoaderConfig,
    MatcherConfig,
    ResolverConfig,
    RootConfig,
    default_roots,
    get_config_dir,
)

__all__ = [
    "AssemblerConfig",
    "EngineConfig",
    "LoaderConfig",
    "MatcherConfig",
    "ResolverConfig",
    "RootConfig",
    "default_roots",
    "get_config_dir",
    "load_config",
    "resolve_config_path",
]
