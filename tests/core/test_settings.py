"""Tests for Settings."""

import re

import pytest

from rotwave.config.settings import LOCALHOST_ORIGIN_REGEX, Settings


def test_defaults() -> None:
    settings = Settings(_env_file=None, mongodb_uri=None)
    assert settings.api_port == 5000
    assert settings.comment_max_length == 1000
    assert settings.reply_max_length == 500
    assert settings.default_author_email == "Guest"
    assert "https://rotwave.vercel.app" in settings.cors_origins


def test_cors_origin_regex_toggle() -> None:
    assert Settings(cors_allow_localhost=True).cors_origin_regex == LOCALHOST_ORIGIN_REGEX
    assert Settings(cors_allow_localhost=False).cors_origin_regex is None


def test_environment_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "production")
    monkeypatch.setenv("COMMENT_MAX_LENGTH", "280")
    settings = Settings()
    assert settings.is_production
    assert settings.comment_max_length == 280


@pytest.mark.parametrize(
    "origin",
    ["http://localhost", "http://localhost:5500", "https://127.0.0.1:3000"],
)
def test_localhost_regex_matches(origin: str) -> None:
    assert re.fullmatch(LOCALHOST_ORIGIN_REGEX, origin)


def test_unused_debug_flag_is_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    """A leftover DEBUG variable in the environment does not break startup."""
    monkeypatch.setenv("DEBUG", "true")
    settings = Settings()
    assert "debug" not in Settings.model_fields
    assert not hasattr(settings, "debug")
