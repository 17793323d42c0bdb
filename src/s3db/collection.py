"""Collection facade.

Usage:
    register_collection(User, name="users")
    users = Collection(User, backend=backend)
    await users.save(User(id="1234", email="a@example.com"))
    user = await users.load("1234")

Configuration and bucket name are resolved once, in the constructor, and
the id prefix is fixed there too. Every operation is forwarded to the
matching behavior in s3db.behaviors.
"""

from __future__ import annotations

import logging
from typing import Any, Generic, TypeVar

from s3db import behaviors
from s3db.backends.base import StorageBackend
from s3db.backends.s3 import S3Backend
from s3db.behaviors import BehaviorContext
from s3db.configuration import CollectionConfiguration, resolve_configuration
from s3db.keys import compose_prefix
from s3db.models import ReferenceList, StorageObjectMetadata
from s3db.naming import collection_fqn
from s3db.registry import CollectionRegistry
from s3db.settings import ROOT_LOGGER_NAME, S3DBSettings, get_settings

Of = TypeVar("Of")


def _logger_name(name: str, prefix: str) -> str:
    """Return the logger name for a collection name and id prefix.

    Prefixed collections get a sibling of the unprefixed logger, not a dotted
    child, so levels never cascade between a collection and its sub-collections.
    """
    base = f"{ROOT_LOGGER_NAME}.collection.{name}"
    if not prefix:
        return base
    return f"{base}:{prefix.replace('.', '_')}"


class Collection(Generic[Of]):
    """Logical interface of a collection, translated into backend calls."""

    def __init__(
        self,
        target: type[Of] | str,
        id_prefix: str | None = None,
        *,
        backend: StorageBackend | None = None,
        registry: CollectionRegistry | None = None,
        settings: S3DBSettings | None = None,
        **overrides: Any,
    ) -> None:
        """Build a collection.

        Args:
            target: Document type, or an explicit collection name.
            id_prefix: Prefix placed in front of every id. load("1234") on a
                collection with prefix "users/" reads "users/1234"; ids that
                already start with the prefix are used unchanged.
            backend: Storage backend; an S3Backend for the settings' region if None.
            registry: Registry to resolve options from; the default registry if None.
            settings: Settings snapshot; the current process settings if None.
            **overrides: Collection options that win over the registry entry.

        Raises:
            ConfigurationError: If no collection name can be resolved.
        """
        if settings is None:
            settings = get_settings()

        self._target = target
        self._registry = registry
        self._settings = settings
        self._overrides = dict(overrides)
        self._prefix = id_prefix or ""

        configuration = resolve_configuration(target, registry=registry, overrides=overrides)
        self._configuration = configuration
        self._bucket_name = collection_fqn(configuration.name, settings)

        self._logger = logging.getLogger(_logger_name(configuration.name, self._prefix))
        self._logger.info(
            "init() of %s prefix=%r bucket=%s", configuration.name, self._prefix, self._bucket_name
        )

        if backend is None:
            backend = S3Backend.from_settings(settings)
        self._backend = backend

        self._context = BehaviorContext(
            configuration=configuration,
            backend=backend,
            bucket_name=self._bucket_name,
            prefix=self._prefix,
            logger=self._logger,
        )

    def __repr__(self) -> str:
        return f"Collection(name={self.name!r}, bucket={self._bucket_name!r}, prefix={self._prefix!r})"

    @property
    def name(self) -> str:
        """Return the resolved collection name."""
        return self._configuration.name

    @property
    def bucket_name(self) -> str:
        """Return the fully qualified bucket name."""
        return self._bucket_name

    @property
    def prefix(self) -> str:
        """Return the id prefix ("" for none)."""
        return self._prefix

    @property
    def configuration(self) -> CollectionConfiguration:
        """Return the effective configuration."""
        return self._configuration

    @property
    def backend(self) -> StorageBackend:
        """Return the shared storage backend."""
        return self._backend

    @property
    def logger(self) -> logging.Logger:
        """Return the logger this collection and its behaviors write to."""
        return self._logger

    def set_log_level(self, level: int | str) -> None:
        """Set the log level for this collection's logger.

        The logger is keyed by collection name and id prefix; the level never
        reaches a parent or sub-collection.
        """
        if isinstance(level, str):
            level = level.upper()
        self._logger.setLevel(level)

    def sub_collection(self, prefix: str, new_type: type | str | None = None) -> Collection[Any]:
        """Derive a collection scoped to this collection's prefix + prefix.

        The child shares this collection's backend, registry, settings
        snapshot and overrides.

        Args:
            prefix: Prefix appended to this collection's prefix. Separators
                are the caller's responsibility.
            new_type: Document type or name for the child; this collection's
                target if None.
        """
        return Collection(
            self._target if new_type is None else new_type,
            compose_prefix(self._prefix, prefix),
            backend=self._backend,
            registry=self._registry,
            settings=self._settings,
            **self._overrides,
        )

    async def head(self, document_id: str) -> StorageObjectMetadata | None:
        """Return the object metadata for a document, or None if absent."""
        return await behaviors.head(self._context, document_id)

    async def exists(self, document_id: str) -> bool:
        """Return True if a document is stored under the id."""
        return await behaviors.exists(self._context, document_id)

    async def load(self, document_id: str) -> Of:
        """Load a document by id."""
        return await behaviors.load(self._context, document_id)

    async def save(self, document: Of) -> Of:
        """Save a document, returning it (with its id if one was generated)."""
        return await behaviors.save(self._context, document)

    async def delete(self, document_id: str) -> bool:
        """Delete a document; False if there was nothing to delete."""
        return await behaviors.delete(self._context, document_id)

    async def find(
        self,
        prefix: str = "",
        page_size: int | None = None,
        continuation_token: str | None = None,
    ) -> ReferenceList:
        """List one page of references under a prefix."""
        return await behaviors.find(self._context, prefix, page_size, continuation_token)
