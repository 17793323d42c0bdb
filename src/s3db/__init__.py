"""s3db: typed document collections over S3.

Maps logical collections of documents onto S3 buckets and keys:

- Collection: head/exists/load/save/delete/find plus sub_collection()
- CollectionRegistry / register_collection: per-type collection options
- update_settings: stage, region, base name and bucket pattern

Environment Variables:
    S3DB_BASE_NAME, S3DB_STAGE, S3DB_BUCKET_PATTERN, S3DB_REGION:
        read by settings_from_env()
    S3DB_OTEL_ENABLED: Set to "1" to emit OpenTelemetry spans per operation
"""

from s3db.backends import InMemoryBackend, S3Backend, StorageBackend
from s3db.collection import Collection
from s3db.configuration import CollectionConfiguration, resolve_configuration
from s3db.errors import (
    ConfigurationError,
    CorruptDataError,
    NotFoundError,
    PaginationError,
    S3DBError,
    SerializationError,
    StorageError,
)
from s3db.ids import content_hash_ids, uuid4_ids
from s3db.keys import compose_prefix, to_key
from s3db.models import Reference, ReferenceList, StorageObjectMetadata
from s3db.naming import collection_fqn, fully_qualify
from s3db.registry import CollectionRegistry, default_registry, register_collection
from s3db.serialization import JsonSerializer, Serializer
from s3db.settings import (
    S3DBSettings,
    get_settings,
    reset_settings,
    set_log_level,
    settings_from_env,
    update_settings,
)

__all__ = [
    "Collection",
    "CollectionConfiguration",
    "CollectionRegistry",
    "ConfigurationError",
    "CorruptDataError",
    "InMemoryBackend",
    "JsonSerializer",
    "NotFoundError",
    "PaginationError",
    "Reference",
    "ReferenceList",
    "S3Backend",
    "S3DBError",
    "S3DBSettings",
    "SerializationError",
    "Serializer",
    "StorageBackend",
    "StorageError",
    "StorageObjectMetadata",
    "collection_fqn",
    "compose_prefix",
    "content_hash_ids",
    "default_registry",
    "fully_qualify",
    "get_settings",
    "register_collection",
    "reset_settings",
    "resolve_configuration",
    "set_log_level",
    "settings_from_env",
    "to_key",
    "update_settings",
    "uuid4_ids",
]
