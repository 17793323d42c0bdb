"""Tests for OpenTelemetry spans around collection operations.

Verifies that, with S3DB_OTEL_ENABLED set, each operation emits one span
with safe attributes (hashed keys only), and that nothing is emitted when
tracing is disabled.
"""

from __future__ import annotations

import hashlib
from typing import Any

import pytest
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from s3db.backends.memory import InMemoryBackend
from s3db.collection import Collection
from s3db.errors import NotFoundError
from s3db.registry import CollectionRegistry
from s3db.settings import S3DBSettings

_exporter = InMemorySpanExporter()
_provider = TracerProvider()
_provider.add_span_processor(SimpleSpanProcessor(_exporter))
trace.set_tracer_provider(_provider)


@pytest.fixture
def exporter() -> Any:
    """Return the in-memory span exporter, cleared."""
    _exporter.clear()
    yield _exporter
    _exporter.clear()


@pytest.fixture
def events(backend: InMemoryBackend, settings: S3DBSettings) -> Collection[Any]:
    """Return a dict-document collection."""
    return Collection("events", "tenant-a/", backend=backend, registry=CollectionRegistry(), settings=settings)


class TestSpans:
    """Tests for span emission."""

    @pytest.mark.asyncio
    async def test_disabled_by_default(
        self,
        events: Collection[Any],
        exporter: InMemorySpanExporter,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.delenv("S3DB_OTEL_ENABLED", raising=False)

        await events.exists("e1")

        assert exporter.get_finished_spans() == ()

    @pytest.mark.asyncio
    async def test_save_emits_span_with_safe_attributes(
        self,
        events: Collection[Any],
        exporter: InMemorySpanExporter,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("S3DB_OTEL_ENABLED", "1")

        await events.save({"id": "e1", "kind": "click"})

        spans = [s for s in exporter.get_finished_spans() if s.name == "s3db.save"]
        assert len(spans) == 1
        attrs = dict(spans[0].attributes or {})
        assert attrs["s3db.collection"] == "events"
        assert attrs["s3db.bucket"] == "app-test-events"
        assert attrs["storage.backend"] == "memory"
        # Raw ids and keys must never appear in attributes
        assert "e1" not in [str(v) for v in attrs.values()]
        assert "tenant-a/e1" not in [str(v) for v in attrs.values()]

    @pytest.mark.asyncio
    async def test_storage_key_is_hashed(
        self,
        events: Collection[Any],
        exporter: InMemorySpanExporter,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("S3DB_OTEL_ENABLED", "1")

        await events.exists("e1")
        await events.exists("tenant-a/e1")

        hashes = [
            dict(s.attributes or {})["s3db.target_sha256"]
            for s in exporter.get_finished_spans()
            if s.name == "s3db.exists"
        ]
        assert hashes == [hashlib.sha256(b"tenant-a/e1").hexdigest()] * 2

    @pytest.mark.asyncio
    async def test_bool_result_recorded(
        self,
        events: Collection[Any],
        exporter: InMemorySpanExporter,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("S3DB_OTEL_ENABLED", "1")

        await events.exists("e1")

        span = next(s for s in exporter.get_finished_spans() if s.name == "s3db.exists")
        assert dict(span.attributes or {})["s3db.result"] is False

    @pytest.mark.asyncio
    async def test_find_records_counts(
        self,
        events: Collection[Any],
        exporter: InMemorySpanExporter,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        await events.save({"id": "e1"})
        await events.save({"id": "e2"})
        monkeypatch.setenv("S3DB_OTEL_ENABLED", "1")

        await events.find("", page_size=1)

        span = next(s for s in exporter.get_finished_spans() if s.name == "s3db.find")
        attrs = dict(span.attributes or {})
        assert attrs["s3db.reference_count"] == 1
        assert attrs["s3db.has_more"] is True

    @pytest.mark.asyncio
    async def test_errors_marked_on_span(
        self,
        events: Collection[Any],
        exporter: InMemorySpanExporter,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("S3DB_OTEL_ENABLED", "1")

        with pytest.raises(NotFoundError):
            await events.load("missing")

        span = next(s for s in exporter.get_finished_spans() if s.name == "s3db.load")
        attrs = dict(span.attributes or {})
        assert attrs["error"] is True
        assert attrs["error.type"] == "NotFoundError"
