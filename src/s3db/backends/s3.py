"""AWS S3 storage backend.

Uses boto3 credential resolution (env, profile, instance role). Blocking
boto3 calls run in worker threads via asyncio.to_thread(). Retries are
configured on the botocore client; nothing above this layer retries.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from s3db.backends.base import MAX_PAGE_SIZE, StorageBackend
from s3db.errors import BackendNotFoundError, BackendTokenError
from s3db.models import ListPage, StorageObjectMetadata
from s3db.settings import S3DBSettings, get_settings

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})
_BAD_TOKEN_CODES = frozenset({"InvalidArgument", "InvalidToken", "InvalidContinuationToken"})


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


def _strip_etag(etag: str | None) -> str | None:
    if etag is None:
        return None
    return etag.strip('"')


def build_metadata(key: str, response: Mapping[str, Any]) -> StorageObjectMetadata:
    """Build StorageObjectMetadata from a head_object/get_object response."""
    return StorageObjectMetadata(
        key=key,
        size_bytes=int(response.get("ContentLength") or 0),
        last_modified=response.get("LastModified"),
        etag=_strip_etag(response.get("ETag")),
        content_type=response.get("ContentType"),
        tags=response.get("Metadata") or {},
    )


def build_listing_metadata(entry: Mapping[str, Any]) -> StorageObjectMetadata:
    """Build StorageObjectMetadata from one list_objects_v2 Contents entry."""
    return StorageObjectMetadata(
        key=str(entry["Key"]),
        size_bytes=int(entry.get("Size") or 0),
        last_modified=entry.get("LastModified"),
        etag=_strip_etag(entry.get("ETag")),
    )


class S3Backend(StorageBackend):
    """StorageBackend over an S3 (or S3-compatible) endpoint."""

    def __init__(
        self,
        client: Any = None,
        *,
        region: str | None = None,
        endpoint_url: str | None = None,
        max_attempts: int = 8,
    ) -> None:
        """Initialize the S3 backend.

        Args:
            client: Preconfigured boto3 S3 client; one is created if None.
            region: AWS region for a created client.
            endpoint_url: Custom endpoint (e.g. MinIO) for a created client.
            max_attempts: botocore retry attempts for a created client.
        """
        if client is None:
            cfg = Config(
                retries={"max_attempts": max_attempts, "mode": "standard"},
                region_name=region,
            )
            client = boto3.client("s3", endpoint_url=endpoint_url, config=cfg)
        self._client = client

    @classmethod
    def from_settings(cls, settings: S3DBSettings | None = None) -> S3Backend:
        """Create a backend in the region named by the settings."""
        if settings is None:
            settings = get_settings()
        return cls(region=settings.effective_region)

    @property
    def backend_name(self) -> str:
        """Return the backend identifier."""
        return "s3"

    async def head_object(self, bucket: str, key: str) -> StorageObjectMetadata:
        try:
            response = await asyncio.to_thread(self._client.head_object, Bucket=bucket, Key=key)
        except ClientError as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                raise BackendNotFoundError(bucket, key) from e
            raise
        return build_metadata(key, response)

    async def get_object(self, bucket: str, key: str) -> bytes:
        try:
            response = await asyncio.to_thread(self._client.get_object, Bucket=bucket, Key=key)
        except ClientError as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                raise BackendNotFoundError(bucket, key) from e
            raise
        return await asyncio.to_thread(response["Body"].read)

    async def put_object(
        self,
        bucket: str,
        key: str,
        body: bytes,
        *,
        content_type: str | None = None,
        tags: Mapping[str, str] | None = None,
    ) -> None:
        kwargs: dict[str, Any] = {"Bucket": bucket, "Key": key, "Body": body}
        if content_type:
            kwargs["ContentType"] = content_type
        if tags:
            # S3 metadata keys and values must be strings
            kwargs["Metadata"] = {str(k): str(v) for k, v in tags.items()}
        await asyncio.to_thread(self._client.put_object, **kwargs)

    async def delete_object(self, bucket: str, key: str) -> None:
        # S3 deletes succeed whether or not the key exists; head first so a
        # missing key can be reported.
        await self.head_object(bucket, key)
        await asyncio.to_thread(self._client.delete_object, Bucket=bucket, Key=key)

    async def list_objects(
        self,
        bucket: str,
        prefix: str,
        page_size: int,
        continuation_token: str | None = None,
    ) -> ListPage:
        kwargs: dict[str, Any] = {
            "Bucket": bucket,
            "Prefix": prefix,
            "MaxKeys": max(1, min(page_size, MAX_PAGE_SIZE)),
        }
        if continuation_token:
            kwargs["ContinuationToken"] = continuation_token

        try:
            response = await asyncio.to_thread(self._client.list_objects_v2, **kwargs)
        except ClientError as e:
            if continuation_token and _error_code(e) in _BAD_TOKEN_CODES:
                raise BackendTokenError(bucket, continuation_token) from e
            raise

        items = tuple(build_listing_metadata(entry) for entry in response.get("Contents") or [])
        next_token = response.get("NextContinuationToken") if response.get("IsTruncated") else None
        logger.debug(
            "Listed %d objects: bucket=%s prefix=%s truncated=%s",
            len(items),
            bucket,
            prefix,
            next_token is not None,
        )
        return ListPage(items=items, next_token=next_token)
