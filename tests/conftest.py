"""Pytest configuration and fixtures for s3db tests.

This module provides common fixtures and configuration for all tests.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from s3db.backends.memory import InMemoryBackend
from s3db.registry import CollectionRegistry
from s3db.settings import S3DBSettings, reset_settings
from tests.fixtures.documents import Note, User


@pytest.fixture(autouse=True)
def clean_settings() -> Iterator[None]:
    """Restore default process settings around every test."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def settings() -> S3DBSettings:
    """Return a fixed settings snapshot for bucket naming."""
    return S3DBSettings(
        base_name="app",
        stage="test",
        bucket_pattern="{{baseName}}-{{stage}}-{{bucketName}}",
    )


@pytest.fixture
def backend() -> InMemoryBackend:
    """Return an empty in-memory backend."""
    return InMemoryBackend()


@pytest.fixture
def registry() -> CollectionRegistry:
    """Return a registry with Note and User registered."""
    reg = CollectionRegistry()
    reg.register(Note, name="notes", page_size=50)
    reg.register(User, name="users")
    return reg
