"""Tests for s3db key derivation and prefix composition."""

from __future__ import annotations

import pytest

from s3db.keys import compose_prefix, to_key


class TestToKey:
    """Tests for to_key()."""

    def test_no_prefix_returns_id(self) -> None:
        assert to_key("1234") == "1234"
        assert to_key("1234", None) == "1234"
        assert to_key("1234", "") == "1234"

    def test_prefix_is_prepended(self) -> None:
        assert to_key("1234", "users/") == "users/1234"

    def test_already_prefixed_id_is_unchanged(self) -> None:
        assert to_key("users/1234", "users/") == "users/1234"

    def test_prefix_is_plain_string_match(self) -> None:
        """A partial match of the prefix still gets prefixed."""
        assert to_key("user/1234", "users/") == "users/user/1234"

    @pytest.mark.parametrize(
        ("document_id", "prefix"),
        [
            ("1234", "users/"),
            ("users/1234", "users/"),
            ("", "users/"),
            ("a", ""),
            ("abc", "ab"),
        ],
    )
    def test_double_application_is_noop(self, document_id: str, prefix: str) -> None:
        once = to_key(document_id, prefix)
        assert to_key(once, prefix) == once


class TestComposePrefix:
    """Tests for compose_prefix()."""

    def test_concatenates(self) -> None:
        assert compose_prefix("tenants/", "42/") == "tenants/42/"

    def test_handles_missing_parts(self) -> None:
        assert compose_prefix(None, "a/") == "a/"
        assert compose_prefix("a/", None) == "a/"
        assert compose_prefix(None, None) == ""

    def test_no_separator_is_inserted(self) -> None:
        assert compose_prefix("a", "b") == "ab"

    def test_associative(self) -> None:
        a, b, c = "x/", "y/", "z/"
        assert compose_prefix(compose_prefix(a, b), c) == compose_prefix(a, compose_prefix(b, c))
