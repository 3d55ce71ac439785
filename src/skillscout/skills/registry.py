"""Skill registry: immutable snapshots with scope precedence.

A ``RegistrySnapshot`` is a pure function of its descriptor list. Within one
scope the most recently loaded descriptor wins (recorded as a conflict);
across scopes ``project`` outranks ``user`` for the visible entry, while the
shadowed descriptor stays reachable through ``lookup_scoped``.

``SkillRegistry`` owns the published snapshot. ``reload()`` builds a new
snapshot off to the side and swaps a single reference, so readers holding
the previous snapshot are never blocked and never see a partial build.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from threading import RLock

import structlog

from skillscout.config.models import RootConfig
from skillscout.core.errors import DuplicateIdentifierWarning, RegistryError
from skillscout.core.types import Scope
from skillscout.skills.loader import DescriptorLoader
from skillscout.skills.models import LoadWarning, SkillDescriptor

log = structlog.get_logger()


@dataclass(frozen=True)
class RegistrySnapshot:
    """A consistent, read-only view of every loaded skill.

    Build with ``RegistrySnapshot.build``; do not construct directly.

    Attributes:
        descriptors: Retained descriptors (one per identifier and scope),
            in load order
        conflicts: Same-scope identifier collisions resolved during build
        warnings: Loader warnings for entries that were skipped
        generation: Reload counter; 0 for snapshots built outside a registry
    """

    descriptors: tuple[SkillDescriptor, ...] = ()
    conflicts: tuple[DuplicateIdentifierWarning, ...] = field(default=(), compare=False)
    warnings: tuple[LoadWarning, ...] = field(default=(), compare=False)
    generation: int = 0
    _by_key: dict[tuple[str, Scope], SkillDescriptor] = field(
        default_factory=dict, repr=False, compare=False
    )
    _visible: dict[str, SkillDescriptor] = field(
        default_factory=dict, repr=False, compare=False
    )

    @classmethod
    def build(
        cls,
        descriptors: Iterable[SkillDescriptor],
        *,
        warnings: Iterable[LoadWarning] = (),
        generation: int = 0,
    ) -> RegistrySnapshot:
        """Group descriptors by identifier and apply precedence.

        Args:
            descriptors: Descriptors in load order (lowest precedence root first).
            warnings: Loader warnings to carry for diagnostics.
            generation: Reload counter to stamp on the snapshot.

        Returns:
            A new snapshot. Identical input yields an equal snapshot.
        """
        by_key: dict[tuple[str, Scope], SkillDescriptor] = {}
        conflicts: list[DuplicateIdentifierWarning] = []

        for descriptor in descriptors:
            previous = by_key.pop(descriptor.key, None)
            if previous is not None:
                conflict = DuplicateIdentifierWarning(
                    descriptor.identifier,
                    scope=descriptor.scope.value,
                    kept=descriptor.source,
                    dropped=previous.source,
                )
                conflicts.append(conflict)
                log.warning(
                    "skills.registry.duplicate_identifier",
                    identifier=descriptor.identifier,
                    scope=descriptor.scope.value,
                    kept=str(descriptor.source),
                    dropped=str(previous.source),
                )
            by_key[descriptor.key] = descriptor

        visible: dict[str, SkillDescriptor] = {}
        for descriptor in by_key.values():
            current = visible.get(descriptor.identifier)
            if current is None or descriptor.scope.rank > current.scope.rank:
                visible[descriptor.identifier] = descriptor

        return cls(
            descriptors=tuple(by_key.values()),
            conflicts=tuple(conflicts),
            warnings=tuple(warnings),
            generation=generation,
            _by_key=by_key,
            _visible=dict(sorted(visible.items())),
        )

    def lookup(self, identifier: str) -> SkillDescriptor | None:
        """Return the visible descriptor for ``identifier`` (highest scope)."""
        return self._visible.get(identifier)

    def lookup_scoped(self, identifier: str, scope: Scope) -> SkillDescriptor | None:
        """Return the descriptor loaded for ``identifier`` in ``scope``."""
        return self._by_key.get((identifier, scope))

    @property
    def visible(self) -> list[SkillDescriptor]:
        """Visible descriptors, ordered by identifier."""
        return list(self._visible.values())

    @property
    def identifiers(self) -> list[str]:
        return list(self._visible)

    def shadowed(self) -> list[SkillDescriptor]:
        """Descriptors hidden by a same-named skill in a higher scope."""
        return [d for d in self.descriptors if self._visible.get(d.identifier) is not d]

    def __len__(self) -> int:
        return len(self._visible)

    def __iter__(self) -> Iterator[SkillDescriptor]:
        return iter(self._visible.values())

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._visible


class SkillRegistry:
    """Holder of the published registry snapshot.

    Constructed once and passed by reference to every consumer; rescans
    only happen through an explicit ``reload()``.
    """

    def __init__(
        self,
        roots: Sequence[RootConfig],
        loader: DescriptorLoader | None = None,
    ) -> None:
        """Initialize the registry with an empty snapshot.

        Args:
            roots: Root locations, lowest precedence first.
            loader: Descriptor loader; a default-configured one if omitted.
        """
        self._roots = tuple(roots)
        self._loader = loader or DescriptorLoader()
        self._snapshot = RegistrySnapshot.build(())
        self._reload_lock = RLock()

    @property
    def roots(self) -> tuple[RootConfig, ...]:
        return self._roots

    @property
    def snapshot(self) -> RegistrySnapshot:
        """The currently published snapshot."""
        return self._snapshot

    def reload(self) -> RegistrySnapshot:
        """Rescan every root and atomically publish a new snapshot.

        Concurrent reloads are serialised; readers are never blocked.

        Returns:
            The newly published snapshot.

        Raises:
            RegistryError: If no configured root could be read. The
                previously published snapshot stays in place.
        """
        with self._reload_lock:
            result = self._loader.load(self._roots)
            if not result.readable_roots:
                paths = tuple(root.path for root in self._roots)
                log.error("skills.registry.no_readable_root", roots=[str(p) for p in paths])
                raise RegistryError(
                    "No readable skill root location",
                    roots=paths,
                    details={"warnings": len(result.warnings)},
                )

            snapshot = RegistrySnapshot.build(
                result.descriptors,
                warnings=result.warnings,
                generation=self._snapshot.generation + 1,
            )
            self._snapshot = snapshot

        log.info(
            "skills.registry.reloaded",
            generation=snapshot.generation,
            visible=len(snapshot),
            shadowed=len(snapshot.shadowed()),
            conflicts=len(snapshot.conflicts),
            warnings=len(snapshot.warnings),
        )
        return snapshot
