"""Error hierarchy for skillscout.

Per-entry failures (a bad skill directory, a missing body file) are
recorded as values and never abort registry construction or request
handling. Only the total absence of a readable root is fatal.

Exception Hierarchy:
    SkillScoutError (base)
    ├── FileSystemError             - unreadable root, directory or document
    ├── ParseError                  - missing or invalid metadata header
    ├── DuplicateIdentifierWarning  - same identifier twice within one scope
    ├── AssemblyError               - body/reference document unreadable
    ├── RegistryError               - no readable root location (fatal)
    └── ConfigError                 - configuration loading/validation
"""

from pathlib import Path
from typing import Any


class SkillScoutError(Exception):
    """Base exception for all skillscout errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dict with additional context.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error description.
            details: Optional dict with additional context about the error.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class FileSystemError(SkillScoutError):
    """A root, skill directory or document could not be read.

    Attributes:
        path: The offending filesystem path.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.path = path

    @classmethod
    def from_os_error(cls, exc: OSError, *, path: Path) -> "FileSystemError":
        """Wrap an OSError raised while touching ``path``.

        The original exception is kept as ``__cause__``.
        """
        error = cls(
            f"Cannot read {path}: {exc.strerror or exc}",
            path=path,
            details={"original_exception": type(exc).__name__},
        )
        error.__cause__ = exc
        return error


class ParseError(SkillScoutError):
    """A skill's metadata header is missing, malformed or incomplete.

    Attributes:
        path: Path to the primary document.
        field: The header field that failed, if a single field is at fault.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.path = path
        self.field = field

    def __str__(self) -> str:
        base = self.message
        if self.field:
            base = f"{base} (field: {self.field})"
        if self.details:
            base = f"{base} (details: {self.details})"
        return base


class DuplicateIdentifierWarning(SkillScoutError):
    """Two descriptors in the same scope share an identifier.

    Never raised; recorded on the registry snapshot. The later-loaded
    descriptor is kept.

    Attributes:
        identifier: The colliding identifier.
        scope: The scope both descriptors were loaded from.
        kept: Source location of the retained descriptor.
        dropped: Source location of the discarded descriptor.
    """

    def __init__(
        self,
        identifier: str,
        *,
        scope: str,
        kept: Path,
        dropped: Path,
    ) -> None:
        super().__init__(
            f"Duplicate skill identifier '{identifier}' in {scope} scope",
            details={"kept": str(kept), "dropped": str(dropped)},
        )
        self.identifier = identifier
        self.scope = scope
        self.kept = kept
        self.dropped = dropped


class AssemblyError(SkillScoutError):
    """A skill body or reference document could not be loaded.

    Recoverable: the skill is kept as a capability-only activation.

    Attributes:
        identifier: The skill whose content failed to load.
        path: The document that failed.
    """

    def __init__(
        self,
        message: str,
        *,
        identifier: str,
        path: Path | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.identifier = identifier
        self.path = path


class RegistryError(SkillScoutError):
    """No configured root location is readable.

    This is the only startup-level failure surfaced to the host.

    Attributes:
        roots: The root locations that were tried.
    """

    def __init__(
        self,
        message: str,
        *,
        roots: tuple[Path, ...] = (),
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.roots = roots


class ConfigError(SkillScoutError):
    """Error from configuration operations.

    Attributes:
        config_key: The configuration key that caused the error.
        config_file: Path to the config file if applicable.
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        config_file: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.config_key = config_key
        self.config_file = config_file
