"""Fail-fast settings validation run before the API starts serving."""

from __future__ import annotations

from urllib.parse import urlparse

from .config import Settings

ALLOWED_ENVIRONMENTS = {"development", "staging", "production"}
LOCAL_HOSTS = {"localhost", "127.0.0.1"}


def _check_environment(settings: Settings) -> None:
    if settings.environment not in ALLOWED_ENVIRONMENTS:
        allowed = ", ".join(sorted(ALLOWED_ENVIRONMENTS))
        raise RuntimeError(f"ENVIRONMENT must be one of: {allowed}.")


def _check_database_url(settings: Settings) -> None:
    parsed = urlparse(settings.database_url)
    if not parsed.hostname:
        raise RuntimeError("DATABASE_URL must be a valid URL (missing hostname).")
    if not settings.is_production:
        return
    if parsed.hostname in LOCAL_HOSTS:
        raise RuntimeError("DATABASE_URL must not point to localhost in production.")
    if parsed.username == "postgres" and parsed.password == "postgres":
        raise RuntimeError("DATABASE_URL must not use default postgres credentials in production.")


def _check_production_secrets(settings: Settings) -> None:
    missing = [
        name
        for name, value in (
            ("OPENAI_API_KEY", settings.openai_api_key),
            ("API_KEY", settings.api_key),
            ("AUTH_PROVIDER_URL", settings.auth_provider_url),
        )
        if not value or not value.strip()
    ]
    if missing:
        raise RuntimeError(f"{', '.join(missing)} must be set in production.")


def _check_cors(settings: Settings) -> None:
    if not settings.allowed_cors_origins_raw:
        raise RuntimeError("ALLOWED_CORS_ORIGINS is required in production.")
    if any(host in settings.allowed_cors_origins_raw for host in LOCAL_HOSTS):
        raise RuntimeError("ALLOWED_CORS_ORIGINS must not include localhost in production.")


def validate_env(settings: Settings) -> None:
    """Raise RuntimeError when the settings are unusable for this environment."""
    _check_environment(settings)
    _check_database_url(settings)
    if settings.is_production:
        _check_production_secrets(settings)
        _check_cors(settings)
