"""Storage key derivation.

A key is prefix + id. A prefix is applied at most once: ids that already
start with the prefix (for example keys returned by find()) are used as-is.
"""

from __future__ import annotations


def to_key(document_id: str, prefix: str | None = None) -> str:
    """Compute the storage key for a document id.

    Args:
        document_id: Logical document id, or an already-prefixed key.
        prefix: Collection key prefix; None or "" means no prefix.

    Returns:
        The storage key.
    """
    if not prefix:
        return document_id
    if document_id.startswith(prefix):
        return document_id
    return f"{prefix}{document_id}"


def compose_prefix(parent: str | None, child: str | None) -> str:
    """Compose a sub-collection prefix by plain concatenation.

    Separators are the caller's responsibility.
    """
    return f"{parent or ''}{child or ''}"
