"""In-memory storage backend for development and testing.

Objects live in a dict per bucket. Listings are served in sorted key order
with opaque continuation tokens that encode the last key returned and the
prefix they belong to.
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime

from s3db.backends.base import MAX_PAGE_SIZE, StorageBackend
from s3db.errors import BackendNotFoundError, BackendTokenError
from s3db.models import ListPage, StorageObjectMetadata

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _StoredObject:
    body: bytes
    metadata: StorageObjectMetadata


def _encode_token(after_key: str, prefix: str) -> str:
    raw = json.dumps({"after": after_key, "prefix": prefix}).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii")


def _decode_token(token: str, bucket: str, prefix: str) -> str:
    try:
        payload = json.loads(base64.urlsafe_b64decode(token.encode("ascii")))
        after_key = payload["after"]
        token_prefix = payload["prefix"]
    except (ValueError, KeyError, TypeError) as e:
        raise BackendTokenError(bucket, token) from e
    if token_prefix != prefix or not isinstance(after_key, str):
        raise BackendTokenError(bucket, token)
    return after_key


class InMemoryBackend(StorageBackend):
    """Dict-backed StorageBackend.

    Buckets are created on first write. Safe for concurrent use from one
    event loop: no method suspends while mutating state.
    """

    def __init__(self) -> None:
        self._buckets: dict[str, dict[str, _StoredObject]] = {}

    @property
    def backend_name(self) -> str:
        """Return the backend identifier."""
        return "memory"

    def _lookup(self, bucket: str, key: str) -> _StoredObject:
        stored = self._buckets.get(bucket, {}).get(key)
        if stored is None:
            raise BackendNotFoundError(bucket, key)
        return stored

    async def head_object(self, bucket: str, key: str) -> StorageObjectMetadata:
        return self._lookup(bucket, key).metadata

    async def get_object(self, bucket: str, key: str) -> bytes:
        return self._lookup(bucket, key).body

    async def put_object(
        self,
        bucket: str,
        key: str,
        body: bytes,
        *,
        content_type: str | None = None,
        tags: Mapping[str, str] | None = None,
    ) -> None:
        metadata = StorageObjectMetadata(
            key=key,
            size_bytes=len(body),
            last_modified=datetime.now(UTC),
            etag=hashlib.md5(body).hexdigest(),
            content_type=content_type,
            tags=tags or {},
        )
        self._buckets.setdefault(bucket, {})[key] = _StoredObject(body=bytes(body), metadata=metadata)
        logger.debug("Stored object: bucket=%s key=%s size=%d", bucket, key, len(body))

    async def delete_object(self, bucket: str, key: str) -> None:
        objects = self._buckets.get(bucket, {})
        if key not in objects:
            raise BackendNotFoundError(bucket, key)
        del objects[key]

    async def list_objects(
        self,
        bucket: str,
        prefix: str,
        page_size: int,
        continuation_token: str | None = None,
    ) -> ListPage:
        page_size = max(1, min(page_size, MAX_PAGE_SIZE))
        keys = sorted(k for k in self._buckets.get(bucket, {}) if k.startswith(prefix))

        if continuation_token:
            after_key = _decode_token(continuation_token, bucket, prefix)
            keys = [k for k in keys if k > after_key]

        page_keys = keys[:page_size]
        next_token = None
        if len(keys) > page_size:
            next_token = _encode_token(page_keys[-1], prefix)

        objects = self._buckets.get(bucket, {})
        return ListPage(
            items=tuple(objects[k].metadata for k in page_keys),
            next_token=next_token,
        )

    def keys(self, bucket: str) -> list[str]:
        """Return all keys stored in a bucket, sorted."""
        return sorted(self._buckets.get(bucket, {}))
