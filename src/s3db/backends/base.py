"""s3db storage backend interface.

Provides the StorageBackend interface collections talk to. Backends are
shared by every collection built on them and must tolerate concurrent calls.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping

from s3db.models import ListPage, StorageObjectMetadata

MAX_PAGE_SIZE = 1000


class StorageBackend(ABC):
    """Abstract base class for keyed object storage backends.

    Absence of an object is signalled with BackendNotFoundError and a
    rejected continuation token with BackendTokenError. Any other exception
    is treated by callers as a backend failure.

    Implementations:
    - S3Backend: AWS S3 via boto3 (production)
    - InMemoryBackend: process-local dict (dev/test)
    """

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Return the backend identifier for observability."""
        ...

    @abstractmethod
    async def head_object(self, bucket: str, key: str) -> StorageObjectMetadata:
        """Fetch object metadata without the body.

        Raises:
            BackendNotFoundError: If the key does not exist.
        """
        ...

    @abstractmethod
    async def get_object(self, bucket: str, key: str) -> bytes:
        """Fetch the object body.

        Raises:
            BackendNotFoundError: If the key does not exist.
        """
        ...

    @abstractmethod
    async def put_object(
        self,
        bucket: str,
        key: str,
        body: bytes,
        *,
        content_type: str | None = None,
        tags: Mapping[str, str] | None = None,
    ) -> None:
        """Write the object body, overwriting any existing object."""
        ...

    @abstractmethod
    async def delete_object(self, bucket: str, key: str) -> None:
        """Delete an object.

        Raises:
            BackendNotFoundError: If there was nothing to delete.
        """
        ...

    @abstractmethod
    async def list_objects(
        self,
        bucket: str,
        prefix: str,
        page_size: int,
        continuation_token: str | None = None,
    ) -> ListPage:
        """List objects under a key prefix in lexicographic key order.

        Args:
            bucket: Bucket to list.
            prefix: Key prefix ("" lists everything).
            page_size: Maximum number of items to return (<= MAX_PAGE_SIZE).
            continuation_token: Token from a previous page, or None to start.

        Returns:
            A ListPage whose next_token is set iff more items exist.

        Raises:
            BackendTokenError: If continuation_token is invalid or expired.
        """
        ...
