"""skillscout core module - shared types, errors and text helpers."""

from skillscout.core.errors import (
    AssemblyError,
    ConfigError,
    DuplicateIdentifierWarning,
    FileSystemError,
    ParseError,
    RegistryError,
    SkillScoutError,
)
from skillscout.core.text import STOP_WORDS, find_mention, identifier_terms, tokenize
from skillscout.core.types import Result, Scope

__all__ = [
    # Types
    "Result",
    "Scope",
    # Errors
    "SkillScoutError",
    "FileSystemError",
    "ParseError",
    "DuplicateIdentifierWarning",
    "AssemblyError",
    "RegistryError",
    "ConfigError",
    # Text
    "STOP_WORDS",
    "tokenize",
    "identifier_terms",
    "find_mention",
]
