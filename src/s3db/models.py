"""s3db data models.

Provides typed dataclasses for object metadata and listing results.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True)
class StorageObjectMetadata:
    """Backend-reported descriptor of a stored object.

    Attributes:
        key: Full storage key of the object.
        size_bytes: Size of the object content in bytes.
        last_modified: Timestamp the backend reports for the last write.
        etag: Content hash/etag as reported by the backend (quotes stripped).
        content_type: MIME type of the content, when known.
        tags: Custom key/value metadata stored alongside the object.
    """

    key: str
    size_bytes: int
    last_modified: datetime | None = None
    etag: str | None = None
    content_type: str | None = None
    tags: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", MappingProxyType(dict(self.tags)))

    def to_dict(self) -> dict[str, Any]:
        """Convert metadata to dictionary for JSON serialization."""
        return {
            "key": self.key,
            "size_bytes": self.size_bytes,
            "last_modified": self.last_modified.isoformat() if self.last_modified else None,
            "etag": self.etag,
            "content_type": self.content_type,
            "tags": dict(self.tags),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> StorageObjectMetadata:
        """Create metadata from dictionary."""
        last_modified_raw = data.get("last_modified")
        if isinstance(last_modified_raw, str):
            last_modified: datetime | None = datetime.fromisoformat(last_modified_raw)
        elif isinstance(last_modified_raw, datetime):
            last_modified = last_modified_raw
        else:
            last_modified = None

        size_bytes_raw = data.get("size_bytes")
        size_bytes = int(size_bytes_raw) if size_bytes_raw is not None else 0

        return cls(
            key=str(data["key"]),
            size_bytes=size_bytes,
            last_modified=last_modified,
            etag=data.get("etag"),
            content_type=data.get("content_type"),
            tags=data.get("tags") or {},
        )


@dataclass(frozen=True, slots=True)
class Reference:
    """A (key, metadata) pair returned by a listing without fetching the payload."""

    key: str
    metadata: StorageObjectMetadata


@dataclass(frozen=True)
class ReferenceList:
    """One page of a find() listing.

    Attributes:
        references: References in backend key order.
        prefix: Effective key prefix the listing was issued with.
        page_size: Page size passed to the backend.
        continuation_token: Opaque cursor; None once the listing is exhausted.
    """

    references: tuple[Reference, ...]
    prefix: str
    page_size: int
    continuation_token: str | None = None

    @property
    def keys(self) -> list[str]:
        """Return the keys of all references on this page."""
        return [ref.key for ref in self.references]

    @property
    def has_more(self) -> bool:
        """Return True if a further page can be requested with continuation_token."""
        return self.continuation_token is not None

    def __len__(self) -> int:
        return len(self.references)

    def __iter__(self) -> Iterator[Reference]:
        return iter(self.references)


@dataclass(frozen=True, slots=True)
class ListPage:
    """Raw page returned by StorageBackend.list_objects()."""

    items: tuple[StorageObjectMetadata, ...]
    next_token: str | None = None
