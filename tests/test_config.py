"""
Tests for environment-driven settings.
"""

from __future__ import annotations

from core.config import DEFAULT_ALLOWED_FILE_TYPES, Settings


def test_defaults(monkeypatch):
    for name in ("PORT", "API_VERSION", "CORS_ORIGIN", "EMAIL_PORT", "EMAIL_SECURE", "PUBLIC_ACCESS_MODE", "SERVER_URL"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()

    assert settings.port == 5000
    assert settings.api_prefix == "/api/v1"
    assert settings.server_url == "http://localhost:5000"
    assert settings.cors_origins == ("*",)
    assert settings.public_access_mode == "open"
    assert settings.allowed_file_types == DEFAULT_ALLOWED_FILE_TYPES
    assert settings.email.secure is True


def test_overrides(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("API_VERSION", "v2")
    monkeypatch.setenv("CORS_ORIGIN", "https://a.example.com, https://b.example.com")
    monkeypatch.setenv("EMAIL_PORT", "587")
    monkeypatch.delenv("EMAIL_SECURE", raising=False)
    monkeypatch.setenv("EMAIL_USER", "news@example.com")
    monkeypatch.delenv("EMAIL_FROM", raising=False)
    monkeypatch.setenv("RATE_LIMIT_WINDOW_MS", "60000")
    monkeypatch.setenv("RATE_LIMIT_MAX_REQUESTS", "10")
    monkeypatch.setenv("NODE_ENV", "production")

    settings = Settings.from_env()

    assert settings.port == 8080
    assert settings.api_prefix == "/api/v2"
    assert settings.cors_origins == ("https://a.example.com", "https://b.example.com")
    assert settings.email.secure is False
    assert settings.email.from_address == "news@example.com"
    assert settings.rate_limit == "10/60 seconds"
    assert settings.is_production


def test_malformed_numbers_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("PORT", "eighty")
    monkeypatch.setenv("KEEP_ALIVE_ENABLED", "false")

    settings = Settings.from_env()

    assert settings.port == 5000
    assert settings.keep_alive_enabled is False
