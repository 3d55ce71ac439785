"""Configuration loading for skillscout.

Functions:
    resolve_config_path: Pick the config file from an argument, env var or default
    load_config: Load and validate an EngineConfig from YAML
"""

import os
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError
import yaml

from skillscout.config.models import EngineConfig, get_config_dir
from skillscout.core.errors import ConfigError


def resolve_config_path(config_path: Path | None = None) -> tuple[Path, bool]:
    """Work out which configuration file to read.

    Priority:
        1. ``config_path`` argument
        2. SKILLSCOUT_CONFIG environment variable
        3. ~/.skillscout/config.yaml

    Returns:
        Tuple of (path, explicit). ``explicit`` is False only for the
        built-in default location, which is allowed to be absent.
    """
    if config_path is not None:
        return config_path.expanduser(), True

    env_path = os.environ.get("SKILLSCOUT_CONFIG", "").strip()
    if env_path:
        return Path(env_path).expanduser(), True

    return get_config_dir() / "config.yaml", False


def load_config(config_path: Path | None = None) -> EngineConfig:
    """Load configuration from a YAML file.

    A missing file at the default location yields the default
    configuration; a missing file that was asked for explicitly is an error.

    Args:
        config_path: Path to config file. See resolve_config_path for defaults.

    Returns:
        Validated EngineConfig instance.

    Raises:
        ConfigError: If an explicit file doesn't exist, is malformed, or
            fails validation.
    """
    path, explicit = resolve_config_path(config_path)

    if not path.exists():
        if explicit:
            raise ConfigError(
                f"Configuration file not found: {path}",
                config_file=str(path),
            )
        return EngineConfig()

    try:
        with path.open(encoding="utf-8") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Failed to parse configuration file: {e}",
            config_file=str(path),
            details={"yaml_error": str(e)},
        ) from e
    except OSError as e:
        raise ConfigError(
            f"Cannot read configuration file: {e}",
            config_file=str(path),
        ) from e

    if config_dict is None:
        config_dict = {}

    if not isinstance(config_dict, dict):
        raise ConfigError(
            "Configuration file must contain a mapping at the top level",
            config_file=str(path),
        )

    try:
        return EngineConfig.model_validate(config_dict)
    except PydanticValidationError as e:
        error_messages = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            error_messages.append(f"  - {loc}: {error['msg']}")

        raise ConfigError(
            "Configuration validation failed:\n" + "\n".join(error_messages),
            config_file=str(path),
            details={"validation_errors": e.errors()},
        ) from e
