"""Unit converter API with standardized responses."""

from __future__ import annotations

from typing import Any, Literal, Mapping

from flask import Blueprint, Response, current_app, request
from pydantic import Field, StrictFloat, StrictInt, StrictStr

from common.errors import (
    AppError,
    NotFoundAppError,
    UnprocessableAppError,
    ValidationAppError,
)
from common.logging import get_logger
from common.responses import fail, ok
from common.validation import SchemaModel, ValidationError, parse_model

from ..core import (
    MAX_PRECISION,
    NOTATIONS,
    ConversionError,
    InvalidCategoryError,
    InvalidUnitError,
    InvalidValueError,
    convert_formatted,
    describe_categories,
    describe_category,
    get_converter,
    normalise_policy,
)

SETTINGS_KEY = "unit_converter"

logger = get_logger("unit_converter.api")


class PrecisionPayload(SchemaModel):
    sig_figs: int | None = Field(default=None, ge=1, le=MAX_PRECISION)
    decimals: int | None = Field(default=None, ge=0, le=MAX_PRECISION)
    notation: Literal["auto", "fixed", "scientific", "engineering"] | None = None


class ConvertPayload(PrecisionPayload):
    value: StrictFloat | StrictInt | StrictStr
    from_unit: str
    to_unit: str
    conversion_type: str


api_bp = Blueprint("unit_converter", __name__)


def _settings() -> Mapping[str, Any]:
    return current_app.config.get("PLUGIN_SETTINGS", {}).get(SETTINGS_KEY) or {}


def _non_negative(settings: Mapping[str, Any]) -> tuple[str, ...]:
    return normalise_policy(settings.get("non_negative_categories"))


def _app_error(exc: ConversionError) -> AppError:
    if isinstance(exc, InvalidCategoryError):
        return ValidationAppError(message=str(exc), code="unit.invalid_category")
    if isinstance(exc, InvalidUnitError):
        return ValidationAppError(message=str(exc), code="unit.invalid_unit")
    if isinstance(exc, InvalidValueError):
        return UnprocessableAppError(message=str(exc), code="unit.invalid_value")
    return ValidationAppError(message=str(exc), code="unit.conversion_failed")


@api_bp.record_once
def _validate_settings(state) -> None:
    settings = state.app.config.get("PLUGIN_SETTINGS", {}).get(SETTINGS_KEY) or {}
    # Fails fast on a misspelled category or notation in config.yml.
    get_converter(_non_negative(settings))
    notation = settings.get("default_notation", "auto")
    if notation not in NOTATIONS:
        raise InvalidValueError(
            f"Unknown default_notation '{notation}', expected one of {NOTATIONS}."
        )


@api_bp.get("/categories")
def categories() -> Response:
    return ok({"categories": describe_categories()})


@api_bp.get("/categories/<category>/units")
def units_endpoint(category: str) -> Response:
    try:
        info = describe_category(category)
    except InvalidCategoryError as exc:
        return fail(NotFoundAppError(message=str(exc), code="unit.unknown_category"))
    return ok(
        {
            "category": info["type"],
            "units": info["units"],
            "default_units": info["default_units"],
        }
    )


@api_bp.post("/convert")
def convert_endpoint() -> Response:
    raw_payload = request.get_json(silent=True)
    try:
        payload = parse_model(ConvertPayload, raw_payload)
    except ValidationError as exc:
        return fail(
            ValidationAppError(
                message=str(exc),
                code="unit.invalid_request",
                details=getattr(exc, "details", None),
            )
        )
    settings = _settings()
    try:
        result = convert_formatted(
            payload.value,
            payload.from_unit,
            payload.to_unit,
            payload.conversion_type,
            non_negative=_non_negative(settings),
            sig_figs=payload.sig_figs,
            decimals=payload.decimals,
            notation=payload.notation or settings.get("default_notation", "auto"),
        )
    except ConversionError as exc:
        logger.info("rejected %s conversion: %s", payload.conversion_type, exc)
        return fail(_app_error(exc))
    logger.info(
        "%s: %s %s -> %s %s",
        payload.conversion_type,
        payload.value,
        payload.from_unit,
        result["result"],
        payload.to_unit,
    )
    return ok(result, result=result["result"])


blueprints = [api_bp]


__all__ = [
    "blueprints",
    "categories",
    "units_endpoint",
    "convert_endpoint",
]
