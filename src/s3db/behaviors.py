"""Collection behaviors.

Each behavior is a stateless coroutine function over a BehaviorContext: it
derives the storage key, makes one backend call through _dispatch(), and maps
the outcome. _dispatch() owns the error translation shared by all of them:

    BackendNotFoundError -> per-behavior fallback value, or NotFoundError
    BackendTokenError    -> PaginationError
    anything else        -> StorageError (bucket, key and cause attached)

Nothing here retries; retry policy belongs to the backend client.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from s3db.backends.base import MAX_PAGE_SIZE, StorageBackend
from s3db.configuration import CollectionConfiguration
from s3db.errors import (
    BackendNotFoundError,
    BackendTokenError,
    CorruptDataError,
    NotFoundError,
    PaginationError,
    S3DBError,
    SerializationError,
    StorageError,
)
from s3db.keys import to_key
from s3db.models import Reference, ReferenceList, StorageObjectMetadata
from s3db.serialization import get_document_id, with_document_id
from s3db.tracing import traced_operation

T = TypeVar("T")

_PROPAGATE: Any = object()


@dataclass(frozen=True)
class BehaviorContext:
    """Everything a behavior needs, resolved once per collection.

    Attributes:
        configuration: Effective collection configuration.
        backend: Shared storage backend.
        bucket_name: Fully qualified bucket name.
        prefix: Key prefix applied to every id ("" for none).
        logger: Collection logger.
    """

    configuration: CollectionConfiguration
    backend: StorageBackend
    bucket_name: str
    prefix: str
    logger: logging.Logger

    def key_for(self, document_id: str) -> str:
        """Return the storage key for an id in this collection."""
        return to_key(document_id, self.prefix)


async def _dispatch(
    context: BehaviorContext,
    operation: str,
    key: str,
    call: Callable[[], Awaitable[T]],
    *,
    not_found: Any = _PROPAGATE,
) -> T:
    """Run one backend call and translate its failures.

    Args:
        context: Behavior context.
        operation: Operation name for error context.
        key: Storage key (or listing prefix) the call addresses.
        call: Zero-argument coroutine factory issuing the backend call.
        not_found: Value returned when the backend reports the key missing.
            If omitted, NotFoundError is raised instead.
    """
    try:
        return await call()
    except BackendNotFoundError as e:
        if not_found is _PROPAGATE:
            raise NotFoundError(
                bucket=context.bucket_name,
                key=key,
                operation=operation,
            ) from e
        context.logger.debug("%s: key not found, bucket=%s key=%s", operation, context.bucket_name, key)
        return not_found
    except BackendTokenError as e:
        raise PaginationError(
            bucket=context.bucket_name,
            key=key,
            operation=operation,
            continuation_token=e.token,
        ) from e
    except S3DBError:
        raise
    except Exception as e:
        context.logger.warning(
            "%s failed: bucket=%s key=%s error=%s",
            operation,
            context.bucket_name,
            key,
            type(e).__name__,
        )
        raise StorageError(
            f"Backend {operation} failed: {e}",
            bucket=context.bucket_name,
            key=key,
            operation=operation,
            cause=e,
        ) from e


@traced_operation("head")
async def head(context: BehaviorContext, document_id: str) -> StorageObjectMetadata | None:
    """Return object metadata without loading the document; None if absent."""
    key = context.key_for(document_id)
    return await _dispatch(
        context,
        "head",
        key,
        lambda: context.backend.head_object(context.bucket_name, key),
        not_found=None,
    )


@traced_operation("exists")
async def exists(context: BehaviorContext, document_id: str) -> bool:
    """Return True if a document is stored under the id."""
    key = context.key_for(document_id)

    async def _exists() -> bool:
        await context.backend.head_object(context.bucket_name, key)
        return True

    return await _dispatch(context, "exists", key, _exists, not_found=False)


@traced_operation("load")
async def load(context: BehaviorContext, document_id: str) -> Any:
    """Fetch and decode a document.

    Raises:
        NotFoundError: If nothing is stored under the id.
        CorruptDataError: If the stored bytes cannot be decoded.
        StorageError: On any other backend failure.
    """
    key = context.key_for(document_id)
    body = await _dispatch(
        context,
        "load",
        key,
        lambda: context.backend.get_object(context.bucket_name, key),
    )

    configuration = context.configuration
    try:
        document = configuration.serializer.decode(body, configuration.document_type)
    except CorruptDataError as e:
        raise CorruptDataError(
            e.message,
            bucket=context.bucket_name,
            key=key,
            operation="load",
        ) from e
    except Exception as e:
        raise CorruptDataError(
            f"Failed to decode document: {e}",
            bucket=context.bucket_name,
            key=key,
            operation="load",
        ) from e

    context.logger.debug("load: bucket=%s key=%s size=%d", context.bucket_name, key, len(body))
    return document


def _encode(context: BehaviorContext, document: Any) -> bytes:
    try:
        return context.configuration.serializer.encode(document)
    except SerializationError as e:
        raise SerializationError(e.message, bucket=context.bucket_name, operation="save") from e
    except Exception as e:
        raise SerializationError(
            f"Failed to encode document: {e}",
            bucket=context.bucket_name,
            operation="save",
        ) from e


def _attach_id(context: BehaviorContext, document: Any, document_id: str) -> Any:
    id_field = context.configuration.id_field
    try:
        updated = with_document_id(document, id_field, document_id)
    except SerializationError as e:
        raise SerializationError(e.message, bucket=context.bucket_name, operation="save") from e
    except Exception as e:
        raise SerializationError(
            f"Failed to attach generated id: {e}",
            bucket=context.bucket_name,
            operation="save",
        ) from e

    # The stored body and the returned document must both carry the id
    if get_document_id(updated, id_field) != document_id:
        raise SerializationError(
            f"{type(document).__name__} did not keep the generated '{id_field}'",
            bucket=context.bucket_name,
            operation="save",
        )
    return updated


@traced_operation("save")
async def save(context: BehaviorContext, document: Any) -> Any:
    """Encode and store a document under its id.

    A document without an id gets one from the configured id_generator; the
    generated id is prefixed with the collection prefix and attached to the
    returned document.

    Raises:
        SerializationError: If the document cannot be encoded, or has no id
            and no id_generator is configured.
        StorageError: If the backend write fails.
    """
    configuration = context.configuration
    body = _encode(context, document)

    document_id = get_document_id(document, configuration.id_field)
    if document_id is None:
        if configuration.id_generator is None:
            raise SerializationError(
                f"Document has no '{configuration.id_field}' and no id_generator is configured",
                bucket=context.bucket_name,
                operation="save",
            )
        document_id = context.key_for(configuration.id_generator(document, body))
        document = _attach_id(context, document, document_id)
        body = _encode(context, document)

    key = context.key_for(document_id)
    await _dispatch(
        context,
        "save",
        key,
        lambda: context.backend.put_object(
            context.bucket_name,
            key,
            body,
            content_type=configuration.serializer.content_type,
        ),
    )
    context.logger.debug("save: bucket=%s key=%s size=%d", context.bucket_name, key, len(body))
    return document


@traced_operation("delete")
async def delete(context: BehaviorContext, document_id: str) -> bool:
    """Delete a document; False if there was nothing to delete."""
    key = context.key_for(document_id)

    async def _delete() -> bool:
        await context.backend.delete_object(context.bucket_name, key)
        return True

    return await _dispatch(context, "delete", key, _delete, not_found=False)


@traced_operation("find")
async def find(
    context: BehaviorContext,
    prefix: str = "",
    page_size: int | None = None,
    continuation_token: str | None = None,
) -> ReferenceList:
    """List references under a prefix within the collection, one page at a time.

    Args:
        context: Behavior context.
        prefix: Logical prefix, composed with the collection prefix.
        page_size: Items per page; the configured page_size if None.
            Clamped to the range 1..MAX_PAGE_SIZE.
        continuation_token: Token from a previous page, passed through verbatim.

    Raises:
        PaginationError: If the backend rejects the continuation token.
        StorageError: On any other backend failure.
    """
    effective_prefix = to_key(prefix or "", context.prefix)
    if page_size is None:
        page_size = context.configuration.page_size
    page_size = max(1, min(page_size, MAX_PAGE_SIZE))

    page = await _dispatch(
        context,
        "find",
        effective_prefix,
        lambda: context.backend.list_objects(
            context.bucket_name,
            effective_prefix,
            page_size,
            continuation_token,
        ),
    )
    context.logger.debug(
        "find: bucket=%s prefix=%s returned=%d more=%s",
        context.bucket_name,
        effective_prefix,
        len(page.items),
        page.next_token is not None,
    )
    return ReferenceList(
        references=tuple(Reference(key=item.key, metadata=item) for item in page.items),
        prefix=effective_prefix,
        page_size=page_size,
        continuation_token=page.next_token,
    )
