"""Process-wide s3db settings.

Holds the values used to fully qualify bucket names: base name, stage,
bucket pattern and region. Settings are immutable snapshots; update_settings()
swaps in a new snapshot. A Collection captures the snapshot current at its
construction and is unaffected by later updates.

Environment Variables (read by settings_from_env):
    S3DB_BASE_NAME: Base name token (default: "s3db")
    S3DB_STAGE: Stage token (default: "dev")
    S3DB_BUCKET_PATTERN: Bucket name template
        (default: "{{stage}}.{{region}}.{{baseName}}-{{bucketName}}")
    S3DB_REGION: Region token; falls back to AWS_REGION, then AWS_DEFAULT_REGION
"""

from __future__ import annotations

import logging
import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

ROOT_LOGGER_NAME = "s3db"

DEFAULT_BASE_NAME = "s3db"
DEFAULT_STAGE = "dev"
DEFAULT_BUCKET_PATTERN = "{{stage}}.{{region}}.{{baseName}}-{{bucketName}}"
DEFAULT_REGION = "us-west-2"

S3DB_BASE_NAME_ENV = "S3DB_BASE_NAME"
S3DB_STAGE_ENV = "S3DB_STAGE"
S3DB_BUCKET_PATTERN_ENV = "S3DB_BUCKET_PATTERN"
S3DB_REGION_ENV = "S3DB_REGION"


class S3DBSettings(BaseModel):
    """Snapshot of the process-wide s3db configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_name: str = Field(default=DEFAULT_BASE_NAME)
    stage: str = Field(default=DEFAULT_STAGE)
    bucket_pattern: str = Field(default=DEFAULT_BUCKET_PATTERN, min_length=1)
    region: str | None = Field(default=None)

    @property
    def effective_region(self) -> str:
        """Return the configured region, or the fallback region when unset."""
        return self.region or DEFAULT_REGION


_settings: S3DBSettings = S3DBSettings()


def _get_env_str(key: str, default: str = "") -> str:
    """Get string from environment variable."""
    return os.environ.get(key, default).strip()


def get_settings() -> S3DBSettings:
    """Return the current settings snapshot."""
    return _settings


def update_settings(**changes: Any) -> S3DBSettings:
    """Overlay changes on the current settings and install the result.

    Only collections constructed after the update observe the new values.

    Args:
        **changes: Any of base_name, stage, bucket_pattern, region.
            None restores a field to its default, so region=None clears
            an explicit region.

    Returns:
        The newly installed settings snapshot.

    Raises:
        pydantic.ValidationError: If a field is unknown or invalid.
    """
    global _settings
    logger.info("configuration with --> %s", changes)
    merged = _settings.model_dump()
    for name, value in changes.items():
        if value is None and name in S3DBSettings.model_fields:
            value = S3DBSettings.model_fields[name].default
        merged[name] = value
    _settings = S3DBSettings.model_validate(merged)
    logger.info("updated configuration is <-- %s", _settings.model_dump())
    return _settings


def reset_settings() -> S3DBSettings:
    """Restore default settings. Mostly useful in tests."""
    global _settings
    _settings = S3DBSettings()
    return _settings


def settings_from_env() -> S3DBSettings:
    """Build a settings snapshot from environment variables.

    Does not install the result; pass its fields to update_settings() to do so.
    """
    region = (
        _get_env_str(S3DB_REGION_ENV)
        or _get_env_str("AWS_REGION")
        or _get_env_str("AWS_DEFAULT_REGION")
    )
    return S3DBSettings(
        base_name=_get_env_str(S3DB_BASE_NAME_ENV, DEFAULT_BASE_NAME) or DEFAULT_BASE_NAME,
        stage=_get_env_str(S3DB_STAGE_ENV, DEFAULT_STAGE) or DEFAULT_STAGE,
        bucket_pattern=_get_env_str(S3DB_BUCKET_PATTERN_ENV, DEFAULT_BUCKET_PATTERN)
        or DEFAULT_BUCKET_PATTERN,
        region=region or None,
    )


def get_root_logger() -> logging.Logger:
    """Return the package root logger, namespaced 's3db'."""
    return logging.getLogger(ROOT_LOGGER_NAME)


def set_log_level(level: int | str) -> None:
    """Set the level of the package root logger.

    Args:
        level: A logging level number or name ("DEBUG", "warning", ...).
    """
    if isinstance(level, str):
        level = level.upper()
    get_root_logger().setLevel(level)
