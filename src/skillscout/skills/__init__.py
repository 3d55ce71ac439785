"""Skill discovery and selection.

Usage:
    from skillscout.skills import SkillEngine

    engine = SkillEngine()
    engine.reload()
    decision, payload = engine.activate("Review this React component")
"""

from skillscout.skills.assembler import BlockKind, ContentBlock, ContextAssembler
from skillscout.skills.engine import SkillEngine
from skillscout.skills.loader import DescriptorLoader, SkillHeader, parse_header
from skillscout.skills.matcher import LexicalMatcher, Matcher, TermIndex
from skillscout.skills.models import (
    Activation,
    ActivationDecision,
    ActivationReason,
    AssembledPayload,
    LoadResult,
    MatchCandidate,
    SkillDescriptor,
    Suppression,
)
from skillscout.skills.registry import RegistrySnapshot, SkillRegistry
from skillscout.skills.resolver import ConflictResolver

__all__ = [
    # Engine
    "SkillEngine",
    # Loader
    "DescriptorLoader",
    "SkillHeader",
    "parse_header",
    "LoadResult",
    # Registry
    "SkillRegistry",
    "RegistrySnapshot",
    "SkillDescriptor",
    # Matcher
    "Matcher",
    "LexicalMatcher",
    "TermIndex",
    "MatchCandidate",
    # Resolver
    "ConflictResolver",
    "ActivationDecision",
    "Activation",
    "ActivationReason",
    "Suppression",
    # Assembler
    "ContextAssembler",
    "AssembledPayload",
    "BlockKind",
    "ContentBlock",
]
