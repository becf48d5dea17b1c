"""Blueprint registration helpers."""

from __future__ import annotations

import importlib
import pkgutil
from pathlib import Path
from typing import Iterable, Mapping

from flask import Flask

from common.logging import get_logger

logger = get_logger("app")


def _iter_plugin_names(package: str = "plugins") -> Iterable[str]:
    module_path = Path(__file__).resolve().parent.parent / package
    if not module_path.exists():
        return []
    return [
        module_info.name
        for module_info in pkgutil.iter_modules([str(module_path)])
        if module_info.ispkg
    ]


def _iter_blueprints(
    settings: Mapping[str, Mapping], package: str = "plugins"
) -> Iterable:
    blueprints = []
    for name in _iter_plugin_names(package):
        if not (settings.get(name) or {}).get("enabled", True):
            logger.info("plugin %s disabled in config", name)
            continue
        module = importlib.import_module(f"{package}.{name}.api")
        module_blueprints = getattr(module, "blueprints", None)
        if module_blueprints:
            blueprints.extend(module_blueprints)
            continue
        blueprint = getattr(module, "bp", None)
        if blueprint is not None:
            blueprints.append(blueprint)
    return blueprints


def register_plugin_blueprints(app: Flask) -> None:
    for bp in _iter_blueprints(app.config.get("PLUGIN_SETTINGS", {})):
        app.register_blueprint(bp)
        logger.debug("registered blueprint %s", bp.name)


__all__ = ["register_plugin_blueprints"]
