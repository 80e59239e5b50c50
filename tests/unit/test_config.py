"""Tests for Settings validation and caching."""

import pytest
from pydantic import ValidationError

from schoolsync.core.config import Settings, get_settings


def test_rest_backend_requires_url() -> None:
    with pytest.raises(ValidationError, match="STORE_URL"):
        Settings(_env_file=None, store_api_key="k")


def test_rest_backend_requires_api_key() -> None:
    with pytest.raises(ValidationError, match="STORE_API_KEY"):
        Settings(_env_file=None, store_url="https://x.example.com")


def test_unknown_backend_rejected() -> None:
    with pytest.raises(ValidationError, match="store_backend"):
        Settings(_env_file=None, store_backend="sqlite")


def test_memory_backend_needs_nothing() -> None:
    settings = Settings(_env_file=None, store_backend="memory")
    assert settings.seed_default_accounts is True
    assert settings.default_account_password.get_secret_value() == "password"


def test_get_settings_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STORE_BACKEND", "rest")
    monkeypatch.setenv("STORE_URL", "https://school.example.com")
    monkeypatch.setenv("STORE_API_KEY", "anon")
    get_settings.cache_clear()

    settings = get_settings()

    assert settings.store_url == "https://school.example.com"
    assert settings.store_api_key.get_secret_value() == "anon"
    assert get_settings() is settings
