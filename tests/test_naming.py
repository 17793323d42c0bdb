"""Tests for bucket name templating and process settings."""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from s3db.naming import collection_fqn, fully_qualify
from s3db.settings import (
    DEFAULT_REGION,
    S3DBSettings,
    get_root_logger,
    get_settings,
    reset_settings,
    set_log_level,
    settings_from_env,
    update_settings,
)


class TestFullyQualify:
    """Tests for fully_qualify()."""

    def test_substitutes_all_tokens(self) -> None:
        result = fully_qualify(
            "{{baseName}}-{{stage}}-{{bucketName}}",
            {"baseName": "app", "stage": "prod", "bucketName": "users"},
        )
        assert result == "app-prod-users"

    def test_idempotent_on_output(self) -> None:
        tokens = {"baseName": "app", "stage": "prod", "bucketName": "users"}
        once = fully_qualify("{{baseName}}-{{stage}}-{{bucketName}}", tokens)
        assert fully_qualify(once, tokens) == once

    def test_repeated_placeholders_all_replaced(self) -> None:
        assert fully_qualify("{{stage}}.{{stage}}", {"stage": "dev"}) == "dev.dev"

    def test_unknown_placeholder_left_verbatim(self) -> None:
        result = fully_qualify("{{owner}}-{{bucketName}}", {"bucketName": "users"})
        assert result == "{{owner}}-users"

    def test_missing_value_left_verbatim(self) -> None:
        assert fully_qualify("{{region}}-x", {}) == "{{region}}-x"

    def test_case_sensitive(self) -> None:
        assert fully_qualify("{{Stage}}", {"stage": "dev"}) == "{{Stage}}"

    def test_no_recursive_expansion(self) -> None:
        """A value that looks like a placeholder is not expanded again."""
        result = fully_qualify(
            "{{baseName}}-{{stage}}",
            {"baseName": "{{stage}}", "stage": "prod"},
        )
        assert result == "{{stage}}-prod"


class TestCollectionFqn:
    """Tests for collection_fqn() against settings snapshots."""

    def test_default_pattern(self) -> None:
        assert collection_fqn("users") == f"dev.{DEFAULT_REGION}.s3db-users"

    def test_explicit_settings(self) -> None:
        settings = S3DBSettings(
            base_name="app",
            stage="prod",
            bucket_pattern="{{baseName}}-{{stage}}-{{region}}-{{bucketName}}",
            region="eu-west-1",
        )
        assert collection_fqn("users", settings) == "app-prod-eu-west-1-users"

    def test_region_falls_back_when_unset(self) -> None:
        settings = S3DBSettings(bucket_pattern="{{region}}")
        assert collection_fqn("users", settings) == "us-west-2"


class TestSettingsLifecycle:
    """Tests for update/reset of the process-wide settings."""

    def test_update_overlays_current_values(self) -> None:
        update_settings(stage="prod")
        update_settings(base_name="app")
        settings = get_settings()
        assert settings.stage == "prod"
        assert settings.base_name == "app"

    def test_update_none_restores_default(self) -> None:
        update_settings(stage="prod")
        update_settings(stage=None)
        assert get_settings().stage == "dev"

    def test_update_none_clears_region(self) -> None:
        update_settings(region="eu-central-1")
        assert get_settings().effective_region == "eu-central-1"

        update_settings(region=None)

        assert get_settings().region is None
        assert get_settings().effective_region == "us-west-2"

    def test_update_rejects_unknown_fields(self) -> None:
        with pytest.raises(ValidationError):
            update_settings(bucket="nope")

    def test_snapshots_are_immutable(self) -> None:
        settings = get_settings()
        update_settings(stage="prod")
        assert settings.stage == "dev"
        with pytest.raises(ValidationError):
            settings.stage = "qa"  # type: ignore[misc]

    def test_reset_restores_defaults(self) -> None:
        update_settings(stage="prod")
        reset_settings()
        assert get_settings() == S3DBSettings()


class TestSettingsFromEnv:
    """Tests for settings_from_env()."""

    def test_reads_s3db_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("S3DB_BASE_NAME", "app")
        monkeypatch.setenv("S3DB_STAGE", "prod")
        monkeypatch.setenv("S3DB_BUCKET_PATTERN", "{{baseName}}-{{bucketName}}")
        monkeypatch.setenv("S3DB_REGION", "eu-central-1")

        settings = settings_from_env()

        assert settings.base_name == "app"
        assert settings.stage == "prod"
        assert settings.bucket_pattern == "{{baseName}}-{{bucketName}}"
        assert settings.region == "eu-central-1"

    def test_region_falls_back_to_aws_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("S3DB_REGION", raising=False)
        monkeypatch.delenv("AWS_REGION", raising=False)
        monkeypatch.setenv("AWS_DEFAULT_REGION", "ap-south-1")

        assert settings_from_env().region == "ap-south-1"

    def test_defaults_when_unset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in (
            "S3DB_BASE_NAME",
            "S3DB_STAGE",
            "S3DB_BUCKET_PATTERN",
            "S3DB_REGION",
            "AWS_REGION",
            "AWS_DEFAULT_REGION",
        ):
            monkeypatch.delenv(name, raising=False)

        assert settings_from_env() == S3DBSettings()


class TestLogLevel:
    """Tests for the package root logger level."""

    def test_set_log_level_by_name(self) -> None:
        original = get_root_logger().level
        try:
            set_log_level("debug")
            assert get_root_logger().level == logging.DEBUG
        finally:
            get_root_logger().setLevel(original)
