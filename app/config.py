"""Configuration classes for the Flask application."""

from __future__ import annotations

import os
import secrets
from pathlib import Path


def _load_secret() -> str:
    """Return the Flask secret key for the current process."""

    secret = os.environ.get("UNIT_CONVERTER_SECRET")
    if secret:
        return secret
    # Generate an unpredictable per-process key for local development.
    return secrets.token_urlsafe(64)


def config_path() -> Path:
    """Location of ``config.yml``; ``UNIT_CONVERTER_CONFIG`` overrides it."""

    override = os.environ.get("UNIT_CONVERTER_CONFIG")
    if override:
        return Path(override)
    return Path(__file__).resolve().parent.parent / "config.yml"


class BaseConfig:
    SECRET_KEY = _load_secret()
    MAX_CONTENT_LENGTH = 1024 * 1024  # 1 MiB, conversion bodies are tiny
    JSON_SORT_KEYS = False
    LOG_LEVEL = "INFO"
    RESPONSE_HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
        "Referrer-Policy": "no-referrer",
        "Cache-Control": "no-store",
    }


class TestingConfig(BaseConfig):
    TESTING = True


__all__ = ["BaseConfig", "TestingConfig", "config_path"]
