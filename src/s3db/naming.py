"""Bucket name templating.

A bucket pattern such as "{{baseName}}-{{stage}}-{{bucketName}}" is turned
into a fully qualified bucket name by one literal substitution pass over the
recognized placeholders:

    {{stage}}, {{region}}, {{baseName}}, {{bucketName}}

Unknown placeholders, and recognized ones with no value, are left verbatim.
Substituted values are never re-scanned.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from s3db.settings import S3DBSettings, get_settings

RECOGNIZED_TOKENS = ("stage", "region", "baseName", "bucketName")

_PLACEHOLDER_PATTERN = re.compile(r"\{\{(" + "|".join(RECOGNIZED_TOKENS) + r")\}\}")


def fully_qualify(template: str, tokens: Mapping[str, str | None]) -> str:
    """Substitute recognized placeholders in a bucket name template.

    Args:
        template: Template containing zero or more placeholders.
        tokens: Values keyed by placeholder name (e.g. "baseName").

    Returns:
        The substituted bucket name.
    """

    def _replace(match: re.Match[str]) -> str:
        value = tokens.get(match.group(1))
        if value is None:
            return match.group(0)
        return value

    return _PLACEHOLDER_PATTERN.sub(_replace, template)


def bucket_tokens(name: str, settings: S3DBSettings) -> dict[str, str | None]:
    """Build the token mapping for a collection name under the given settings."""
    return {
        "stage": settings.stage,
        "region": settings.effective_region,
        "baseName": settings.base_name,
        "bucketName": name,
    }


def collection_fqn(name: str, settings: S3DBSettings | None = None) -> str:
    """Return the fully qualified bucket name for a collection.

    Args:
        name: Collection name (the bucketName token).
        settings: Settings snapshot; the current process settings if None.
    """
    if settings is None:
        settings = get_settings()
    return fully_qualify(settings.bucket_pattern, bucket_tokens(name, settings))
