"""Document serialization.

The JSON serializer handles the document shapes collections are typically
bound to: plain mappings, dataclasses and pydantic models. Collections may
be configured with any object satisfying the Serializer protocol instead.
"""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ValidationError

from s3db.errors import CorruptDataError, SerializationError


@runtime_checkable
class Serializer(Protocol):
    """Encodes documents to bytes and back."""

    content_type: str

    def encode(self, document: Any) -> bytes: ...

    def decode(self, data: bytes, document_type: type | None) -> Any: ...


class JsonSerializer:
    """UTF-8 JSON serializer for mappings, dataclasses and pydantic models."""

    content_type = "application/json"

    def __init__(self, *, indent: int | None = None) -> None:
        self._indent = indent

    def _to_primitive(self, document: Any) -> Any:
        if isinstance(document, BaseModel):
            return document.model_dump(mode="json")
        if dataclasses.is_dataclass(document) and not isinstance(document, type):
            return dataclasses.asdict(document)
        if isinstance(document, Mapping):
            return dict(document)
        raise SerializationError(
            f"Unsupported document type: {type(document).__name__}",
            operation="save",
        )

    def encode(self, document: Any) -> bytes:
        """Encode a document as JSON bytes.

        Raises:
            SerializationError: If the document cannot be represented as JSON.
        """
        primitive = self._to_primitive(document)
        try:
            return json.dumps(primitive, indent=self._indent).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise SerializationError(
                f"Failed to encode document: {e}",
                operation="save",
            ) from e

    def decode(self, data: bytes, document_type: type | None) -> Any:
        """Decode JSON bytes into an instance of document_type.

        With no document_type (or dict), the parsed mapping is returned.

        Raises:
            CorruptDataError: If the bytes are not valid JSON or do not fit
                document_type.
        """
        try:
            parsed = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CorruptDataError(f"Stored data is not valid JSON: {e}", operation="load") from e

        if document_type is None or document_type is dict:
            return parsed

        if not isinstance(parsed, dict):
            raise CorruptDataError(
                f"Expected a JSON object for {document_type.__name__}, "
                f"got {type(parsed).__name__}",
                operation="load",
            )

        try:
            if issubclass(document_type, BaseModel):
                return document_type.model_validate(parsed)
            return document_type(**parsed)
        except (ValidationError, TypeError, ValueError) as e:
            raise CorruptDataError(
                f"Stored data does not match {document_type.__name__}: {e}",
                operation="load",
            ) from e


def get_document_id(document: Any, id_field: str) -> str | None:
    """Return the id of a document, or None if it has none."""
    if isinstance(document, Mapping):
        value = document.get(id_field)
    else:
        value = getattr(document, id_field, None)
    if value is None or value == "":
        return None
    return str(value)


def with_document_id(document: Any, id_field: str, document_id: str) -> Any:
    """Return the document with its id field set.

    Mappings are copied, frozen pydantic models and dataclasses are rebuilt,
    and other objects are updated in place.

    Raises:
        SerializationError: If the document type has no id_field to set.
    """
    if isinstance(document, Mapping):
        updated = dict(document)
        updated[id_field] = document_id
        return updated
    if isinstance(document, BaseModel):
        allows_extra = document.model_config.get("extra") == "allow"
        if id_field not in type(document).model_fields and not allows_extra:
            raise _missing_id_field(document, id_field)
        return document.model_copy(update={id_field: document_id})
    if dataclasses.is_dataclass(document) and not isinstance(document, type):
        field_names = {f.name for f in dataclasses.fields(document) if f.init}
        if id_field not in field_names:
            raise _missing_id_field(document, id_field)
        return dataclasses.replace(document, **{id_field: document_id})
    try:
        setattr(document, id_field, document_id)
    except (AttributeError, TypeError) as e:
        raise _missing_id_field(document, id_field) from e
    return document


def _missing_id_field(document: Any, id_field: str) -> SerializationError:
    return SerializationError(
        f"{type(document).__name__} has no '{id_field}' field to hold a generated id",
        operation="save",
    )
