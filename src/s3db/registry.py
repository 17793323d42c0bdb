"""Collection registry.

Maps lower-cased logical names to collection options. Populated by explicit
register() calls before collections are constructed; lookups are plain reads.
A miss is not an error: the resolver falls back to defaults.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from s3db.errors import ConfigurationError

logger = logging.getLogger(__name__)


class DuplicateCollectionError(ConfigurationError):
    """Raised when registering a logical name that is already registered."""

    def __init__(self, logical_name: str) -> None:
        self.logical_name = logical_name
        super().__init__(f"Collection already registered: {logical_name}")


def logical_name_of(target: type | str) -> str:
    """Return the logical name for a type or an explicit name."""
    if isinstance(target, str):
        return target
    return target.__name__


@dataclass
class CollectionRegistry:
    """Registry of per-collection options keyed by lower-cased logical name."""

    _entries: dict[str, Mapping[str, Any]] = field(default_factory=dict)

    def register(
        self,
        target: type | str,
        *,
        replace: bool = False,
        **options: Any,
    ) -> None:
        """Register options for a logical type or name.

        When target is a type and no document_type option is given, the type
        itself is recorded as the document type.

        Args:
            target: Document type or logical name.
            replace: Overwrite an existing registration instead of failing.
            **options: Collection options, e.g. name="users", page_size=100.

        Raises:
            DuplicateCollectionError: If already registered and replace is False.
        """
        lookup = logical_name_of(target).lower()
        if lookup in self._entries and not replace:
            raise DuplicateCollectionError(lookup)

        entry = dict(options)
        if not isinstance(target, str):
            entry.setdefault("document_type", target)

        self._entries[lookup] = MappingProxyType(entry)
        logger.info("Registered collection: %s (options=%s)", lookup, sorted(entry))

    def resolve(self, lowercased_name: str) -> Mapping[str, Any] | None:
        """Look up registered options; None on a miss."""
        return self._entries.get(lowercased_name)

    def unregister(self, target: type | str) -> None:
        """Remove a registration if present."""
        self._entries.pop(logical_name_of(target).lower(), None)

    def clear(self) -> None:
        """Remove all registrations."""
        self._entries.clear()

    @property
    def names(self) -> frozenset[str]:
        """Return the set of registered lookup names."""
        return frozenset(self._entries.keys())


default_registry = CollectionRegistry()


def register_collection(target: type | str, **options: Any) -> None:
    """Register options on the process-wide default registry."""
    default_registry.register(target, **options)
