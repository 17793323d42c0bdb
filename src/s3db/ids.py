"""Id generation strategies for documents saved without an id.

No strategy is applied by default; a collection opts in through its
id_generator option. A strategy receives the document and its encoded body.
"""

from __future__ import annotations

import hashlib
import uuid
from typing import Any, Protocol


class IdGenerator(Protocol):
    def __call__(self, document: Any, body: bytes) -> str: ...


def uuid4_ids(document: Any, body: bytes) -> str:
    """Random UUID4 ids."""
    return str(uuid.uuid4())


def content_hash_ids(document: Any, body: bytes) -> str:
    """SHA-256 of the encoded document; identical payloads share an id."""
    return hashlib.sha256(body).hexdigest()
