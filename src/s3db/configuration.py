"""Collection configuration resolution.

Effective configuration is merged in a fixed order, later layers winning:

    DEFAULT_COLLECTION_OPTIONS <- registry entry <- caller overrides <- explicit binding

The explicit binding is the document type the caller passed, or, when the
caller passed a string, that string lower-cased as the collection name.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from s3db.errors import ConfigurationError
from s3db.registry import CollectionRegistry, default_registry, logical_name_of
from s3db.serialization import JsonSerializer, Serializer

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100

DEFAULT_COLLECTION_OPTIONS: Mapping[str, Any] = {
    "page_size": DEFAULT_PAGE_SIZE,
    "id_field": "id",
}


class CollectionConfiguration(BaseModel):
    """Effective, immutable configuration of one collection.

    Unknown options are kept as extra fields so applications can carry their
    own collection-level settings.
    """

    model_config = ConfigDict(frozen=True, extra="allow", arbitrary_types_allowed=True)

    name: str = Field(..., min_length=1)
    document_type: Any = None
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1)
    id_field: str = Field(default="id", min_length=1)
    serializer: Serializer = Field(default_factory=JsonSerializer)
    id_generator: Callable[[Any, bytes], str] | None = None

    def option(self, key: str, default: Any = None) -> Any:
        """Return a declared or extra option by name."""
        if key in type(self).model_fields:
            return getattr(self, key)
        return (self.model_extra or {}).get(key, default)


def resolve_configuration(
    target: type | str,
    *,
    registry: CollectionRegistry | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> CollectionConfiguration:
    """Resolve the effective configuration for a collection.

    Args:
        target: Document type, or an explicit collection name.
        registry: Registry to consult; the process-wide default if None.
        overrides: Caller-supplied options applied over the registry entry.

    Returns:
        The merged CollectionConfiguration.

    Raises:
        ConfigurationError: If the merged result has no name, or options are invalid.
    """
    if registry is None:
        registry = default_registry

    logical_name = logical_name_of(target)
    if not logical_name:
        raise ConfigurationError("Collection target has no logical name")

    merged: dict[str, Any] = dict(DEFAULT_COLLECTION_OPTIONS)

    entry = registry.resolve(logical_name.lower())
    if entry is not None:
        merged.update(entry)
    else:
        logger.debug("No registry entry for %s, using defaults", logical_name.lower())

    if overrides:
        merged.update(overrides)

    if isinstance(target, str):
        merged["name"] = target.lower()
    else:
        merged["document_type"] = target

    if not merged.get("name"):
        raise ConfigurationError(
            f"No collection name resolvable for {logical_name}. "
            "Register it with a name or pass one explicitly."
        )

    try:
        configuration = CollectionConfiguration.model_validate(merged)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration for collection {merged['name']}: {e}"
        ) from e

    logger.debug("Resolved configuration for %s: %s", logical_name, configuration.name)
    return configuration
