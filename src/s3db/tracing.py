"""OpenTelemetry tracing for collection operations.

Spans are emitted only when S3DB_OTEL_ENABLED is truthy; exporting them is
left to whatever TracerProvider the host application installs.

Span attributes never include raw keys or ids, only their SHA-256.
"""

from __future__ import annotations

import functools
import hashlib
import logging
import os
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeVar, cast

from opentelemetry import trace

from s3db.models import ReferenceList, StorageObjectMetadata

if TYPE_CHECKING:
    from s3db.behaviors import BehaviorContext

logger = logging.getLogger(__name__)

S3DB_OTEL_ENABLED_ENV = "S3DB_OTEL_ENABLED"
TRACER_NAME = "s3db.collection"

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def _get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    val = os.environ.get(key, "").strip().lower()
    if val in ("1", "true", "yes"):
        return True
    if val in ("0", "false", "no", ""):
        return default
    return default


def is_tracing_enabled() -> bool:
    """Check if span emission is enabled."""
    return _get_env_bool(S3DB_OTEL_ENABLED_ENV, False)


def traced_operation(operation: str) -> Callable[[F], F]:
    """Decorator to trace a behavior with an OpenTelemetry span.

    The wrapped coroutine function takes a BehaviorContext first and the
    document id, document or prefix second. String targets are hashed as the
    storage key they resolve to, so an id and its prefixed key hash alike.

    Args:
        operation: Operation name (e.g., "load", "find").
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(context: BehaviorContext, target: Any, *args: Any, **kwargs: Any) -> Any:
            if not is_tracing_enabled():
                return await func(context, target, *args, **kwargs)

            tracer = trace.get_tracer(TRACER_NAME)
            with tracer.start_as_current_span(f"s3db.{operation}") as span:
                span.set_attribute("s3db.operation", operation)
                span.set_attribute("s3db.collection", context.configuration.name)
                span.set_attribute("s3db.bucket", context.bucket_name)
                span.set_attribute("storage.backend", context.backend.backend_name)
                if isinstance(target, str):
                    key = context.key_for(target)
                    target_sha256 = hashlib.sha256(key.encode("utf-8")).hexdigest()
                    span.set_attribute("s3db.target_sha256", target_sha256)

                try:
                    result = await func(context, target, *args, **kwargs)
                except Exception as e:
                    span.set_attribute("error", True)
                    span.set_attribute("error.type", type(e).__name__)
                    raise

                _add_result_attributes(span, result)
                return result

        return cast(F, wrapper)

    return decorator


def _add_result_attributes(span: Any, result: Any) -> None:
    """Add safe result attributes (sizes, counts, booleans) to a span."""
    if isinstance(result, bool):
        span.set_attribute("s3db.result", result)
    elif isinstance(result, StorageObjectMetadata):
        span.set_attribute("s3db.object_size_bytes", result.size_bytes)
    elif isinstance(result, ReferenceList):
        span.set_attribute("s3db.reference_count", len(result))
        span.set_attribute("s3db.has_more", result.has_more)
