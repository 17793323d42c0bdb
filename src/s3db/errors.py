"""s3db error types.

Provides the typed exceptions raised by collections and their behaviors.
Only "not found" is ever recovered locally (head/exists/delete); everything
else propagates with bucket/key/operation context attached.
"""

from __future__ import annotations


class S3DBError(Exception):
    """Base exception for all s3db errors.

    Attributes:
        message: Human-readable error message.
        bucket: Bucket name associated with the operation (if applicable).
        key: Object key associated with the operation (if applicable).
        operation: Logical operation name, e.g. "load" (if applicable).
    """

    def __init__(
        self,
        message: str,
        *,
        bucket: str | None = None,
        key: str | None = None,
        operation: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.bucket = bucket
        self.key = key
        self.operation = operation

    def __str__(self) -> str:
        parts = [self.message]
        if self.operation:
            parts.append(f"operation={self.operation}")
        if self.bucket:
            parts.append(f"bucket={self.bucket}")
        if self.key:
            parts.append(f"key={self.key}")
        return " ".join(parts)


class ConfigurationError(S3DBError):
    """Raised when a collection's configuration cannot be resolved.

    Fatal: raised while constructing a Collection, never retried.
    """


class NotFoundError(S3DBError):
    """Raised by load() when the requested key does not exist."""

    def __init__(
        self,
        message: str = "Object not found",
        *,
        bucket: str | None = None,
        key: str | None = None,
        operation: str | None = None,
    ) -> None:
        super().__init__(message, bucket=bucket, key=key, operation=operation)


class StorageError(S3DBError):
    """Raised when the storage backend fails for any reason other than not-found.

    Attributes:
        cause: The underlying backend exception.
    """

    def __init__(
        self,
        message: str = "Storage backend error",
        *,
        bucket: str | None = None,
        key: str | None = None,
        operation: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, bucket=bucket, key=key, operation=operation)
        self.cause = cause


class SerializationError(S3DBError):
    """Raised when a document cannot be encoded for storage."""


class CorruptDataError(S3DBError):
    """Raised when stored bytes cannot be decoded into a document."""


class PaginationError(S3DBError):
    """Raised when the backend rejects a continuation token.

    Callers must restart the listing without a token.
    """

    def __init__(
        self,
        message: str = "Continuation token rejected",
        *,
        bucket: str | None = None,
        key: str | None = None,
        operation: str | None = None,
        continuation_token: str | None = None,
    ) -> None:
        super().__init__(message, bucket=bucket, key=key, operation=operation)
        self.continuation_token = continuation_token


class BackendNotFoundError(Exception):
    """Signalled by a StorageBackend when the addressed object does not exist."""

    def __init__(self, bucket: str, key: str) -> None:
        self.bucket = bucket
        self.key = key
        super().__init__(f"No such key: {bucket}/{key}")


class BackendTokenError(Exception):
    """Signalled by a StorageBackend when a continuation token is invalid or expired."""

    def __init__(self, bucket: str, token: str | None) -> None:
        self.bucket = bucket
        self.token = token
        super().__init__(f"Invalid continuation token for bucket {bucket}")
