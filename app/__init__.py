"""Application factory for the unit converter service."""

from __future__ import annotations

import importlib
import pkgutil
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml
from flask import Flask
from werkzeug.exceptions import HTTPException

from common.errors import AppError, ensure_app_error
from common.logging import get_logger, install_request_logging, set_level
from common.responses import fail, ok

from . import config as config_module
from .blueprints import register_plugin_blueprints

logger = get_logger("app")


def _load_yaml_config(path: Path | None = None) -> dict:
    path = path or config_module.config_path()
    if not path.exists():
        logger.info("no config file at %s, using defaults", path)
        return {}
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def _discover_plugins(package: str = "plugins") -> Iterable[str]:
    """Yield import paths for all plugin packages."""

    package_path = Path(__file__).resolve().parent.parent / package
    if not package_path.exists():
        return []
    for module_info in pkgutil.iter_modules([str(package_path)]):
        if module_info.ispkg:
            yield f"{package}.{module_info.name}"


def _load_manifests(plugin_settings: Mapping[str, Any]) -> list[dict[str, Any]]:
    manifests: list[dict[str, Any]] = []
    for dotted in _discover_plugins():
        module = importlib.import_module(dotted)
        manifest = getattr(module, "manifest", None)
        if not manifest:
            continue
        entry = dict(manifest)
        plugin_config = plugin_settings.get(entry.get("blueprint", ""), {}) or {}
        if not plugin_config.get("enabled", True):
            continue
        if plugin_config.get("summary"):
            entry["summary"] = plugin_config["summary"]
        manifests.append(entry)
    manifests.sort(key=lambda item: item["title"].lower())
    return manifests


def _apply_site_settings(app: Flask, site_settings: Mapping[str, Any]) -> None:
    app.config["SITE_SETTINGS"] = dict(site_settings)
    if "max_content_length_kb" in site_settings:
        try:
            max_bytes = int(float(site_settings["max_content_length_kb"]) * 1024)
            app.config["MAX_CONTENT_LENGTH"] = max_bytes
        except (TypeError, ValueError):
            logger.warning(
                "ignoring invalid max_content_length_kb %r",
                site_settings["max_content_length_kb"],
            )
    if site_settings.get("log_level"):
        app.config["LOG_LEVEL"] = site_settings["log_level"]


def _install_error_handlers(app: Flask) -> None:
    @app.errorhandler(AppError)
    def handle_app_error(error: AppError):
        return fail(error)

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        return fail(
            {
                "code": f"http.{error.code}",
                "message": error.description or error.name,
                "details": {},
            },
            status=error.code or 500,
        )

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        logger.exception("unhandled error")
        return fail(ensure_app_error(error, fallback_code="internal_error"))


def create_app(
    config_name: str | None = None, config_overrides: Mapping[str, Any] | None = None
) -> Flask:
    """Create and configure the Flask application instance."""

    app = Flask(__name__)
    app.config.from_object(config_module.BaseConfig)

    if config_name:
        config_obj = getattr(config_module, config_name, None)
        if config_obj:
            app.config.from_object(config_obj)

    yaml_config = _load_yaml_config()
    _apply_site_settings(app, yaml_config.get("site", {}) or {})
    app.config["PLUGIN_SETTINGS"] = yaml_config.get("plugins", {}) or {}
    if config_overrides:
        app.config.update(config_overrides)

    app.json.sort_keys = app.config.get("JSON_SORT_KEYS", False)
    set_level(app.config.get("LOG_LEVEL", "INFO"))
    install_request_logging(app)
    _install_error_handlers(app)
    register_plugin_blueprints(app)

    @app.after_request
    def apply_response_headers(response):
        """Attach strict security headers to every outgoing response."""

        configured = app.config.get("RESPONSE_HEADERS", {})
        for header, value in configured.items():
            if header not in response.headers:
                response.headers[header] = value
        return response

    manifests = _load_manifests(app.config["PLUGIN_SETTINGS"])
    app.config["PLUGIN_MANIFESTS"] = manifests

    @app.get("/")
    def home():
        site_config = app.config.get("SITE_SETTINGS", {})
        return ok(
            {
                "name": site_config.get("name", "Unit Converter"),
                "status": "ok",
                "plugins": app.config.get("PLUGIN_MANIFESTS", []),
            }
        )

    return app


__all__ = ["create_app"]
