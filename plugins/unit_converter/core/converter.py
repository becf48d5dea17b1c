"""Conversion engine for the unit converter service."""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Union

from common.logging import get_logger

from .registry import factor_table

logger = get_logger("engine")


class ConversionError(Exception):
    """Base exception for conversion failures."""


class InvalidCategoryError(ConversionError):
    """Raised when the conversion category is not supported."""


class InvalidUnitError(ConversionError):
    """Raised when a unit is unknown or belongs to another category."""


class InvalidValueError(ConversionError):
    """Raised when user supplied values cannot be normalised."""


class ConversionCategory(str, Enum):
    LENGTH = "length"
    WEIGHT = "weight"
    COOKING = "cooking"
    TEMPERATURE = "temperature"


@dataclass(frozen=True)
class LinearScale:
    """Units related to a base unit by a multiplicative factor."""

    base: str
    factors: Mapping[str, float]

    @property
    def units(self) -> tuple[str, ...]:
        return tuple(self.factors)

    def to_base(self, unit: str, value: float) -> float:
        return value * self.factors[unit]

    def from_base(self, unit: str, value: float) -> float:
        return value / self.factors[unit]


@dataclass(frozen=True)
class AffineUnit:
    """``celsius = (value - offset) * numerator / denominator``."""

    offset: float
    numerator: float = 1.0
    denominator: float = 1.0


@dataclass(frozen=True)
class AffineScale:
    """Units related to a pivot unit by affine formulas (temperature)."""

    base: str
    formulas: Mapping[str, AffineUnit]

    @property
    def units(self) -> tuple[str, ...]:
        return tuple(self.formulas)

    def to_base(self, unit: str, value: float) -> float:
        formula = self.formulas[unit]
        return (value - formula.offset) * formula.numerator / formula.denominator

    def from_base(self, unit: str, value: float) -> float:
        formula = self.formulas[unit]
        return value * formula.denominator / formula.numerator + formula.offset


Scale = Union[LinearScale, AffineScale]


@dataclass(frozen=True)
class CategoryDefinition:
    """Metadata describing a category exposed to the option screen."""

    category: ConversionCategory
    title: str
    description: str
    base: str
    units: tuple[str, ...]

    @property
    def default_units(self) -> tuple[str, str]:
        return self.units[0], self.units[1] if len(self.units) > 1 else self.units[0]


CATEGORY_DEFINITIONS: tuple[CategoryDefinition, ...] = (
    CategoryDefinition(
        ConversionCategory.LENGTH,
        "Length",
        "Meters, Feet, Inches...",
        "meters",
        ("inches", "cm", "feet", "meters"),
    ),
    CategoryDefinition(
        ConversionCategory.WEIGHT,
        "Weight",
        "Kilograms, Pounds, Ounces...",
        "grams",
        ("grams", "kg", "pounds", "ounces"),
    ),
    CategoryDefinition(
        ConversionCategory.COOKING,
        "Cooking",
        "Cups, Tablespoons, Milliliters...",
        "ml",
        ("tsp", "tbsp", "cups", "ml"),
    ),
    CategoryDefinition(
        ConversionCategory.TEMPERATURE,
        "Temperature",
        "Celsius, Fahrenheit, Kelvin...",
        "Celsius",
        ("Celsius", "Fahrenheit", "Kelvin"),
    ),
)

TEMPERATURE_FORMULAS: Mapping[str, AffineUnit] = MappingProxyType(
    {
        "Celsius": AffineUnit(offset=0.0),
        "Fahrenheit": AffineUnit(offset=32.0, numerator=5.0, denominator=9.0),
        "Kelvin": AffineUnit(offset=273.15),
    }
)

_MAX_VALUE_LENGTH = 64
MAX_PRECISION = 17
NOTATIONS: tuple[str, ...] = ("auto", "fixed", "scientific", "engineering")


def _build_scales() -> Mapping[ConversionCategory, Scale]:
    scales: dict[ConversionCategory, Scale] = {}
    for definition in CATEGORY_DEFINITIONS:
        if definition.category is ConversionCategory.TEMPERATURE:
            scales[definition.category] = AffineScale(
                definition.base, TEMPERATURE_FORMULAS
            )
        else:
            scales[definition.category] = LinearScale(
                definition.base, factor_table(definition.base, definition.units)
            )
    return MappingProxyType(scales)


class Converter:
    """Stateless conversion API used by the Flask blueprint."""

    def __init__(self, non_negative: Iterable[str] = ()) -> None:
        self.scales = _build_scales()
        self.definitions: Mapping[ConversionCategory, CategoryDefinition] = (
            MappingProxyType({item.category: item for item in CATEGORY_DEFINITIONS})
        )
        self.non_negative = frozenset(
            self._resolve_category(name) for name in non_negative
        )

    # ---- Listing helpers -------------------------------------------------
    def list_categories(self) -> List[str]:
        return [definition.category.value for definition in CATEGORY_DEFINITIONS]

    def list_units(self, category: str) -> List[str]:
        return list(self.definitions[self._resolve_category(category)].units)

    def describe(self, category: str) -> Dict[str, object]:
        definition = self.definitions[self._resolve_category(category)]
        return {
            "type": definition.category.value,
            "title": definition.title,
            "description": definition.description,
            "base_unit": definition.base,
            "units": list(definition.units),
            "default_units": list(definition.default_units),
        }

    # ---- Conversion ------------------------------------------------------
    def convert(
        self,
        category: str,
        from_unit: str,
        to_unit: str,
        value: float | int | str,
    ) -> float:
        resolved = self._resolve_category(category)
        scale = self.scales[resolved]
        source = self._resolve_unit(scale, resolved, from_unit)
        target = self._resolve_unit(scale, resolved, to_unit)
        numeric_value = self._coerce_value(value)
        if resolved in self.non_negative and numeric_value < 0:
            logger.info("rejected negative %s value %r", resolved.value, numeric_value)
            raise InvalidValueError(
                f"Negative values are not accepted for {resolved.value}."
            )
        if source == target:
            return numeric_value
        result = scale.from_base(target, scale.to_base(source, numeric_value))
        if not math.isfinite(result):
            raise InvalidValueError("Converted value is out of range.")
        logger.debug(
            "converted %r %s -> %r %s (%s)",
            numeric_value,
            source,
            result,
            target,
            resolved.value,
        )
        return result

    # ---- Internal utilities ----------------------------------------------
    def _resolve_category(self, category: str) -> ConversionCategory:
        if isinstance(category, ConversionCategory):
            return category
        if not isinstance(category, str):
            raise InvalidCategoryError("Conversion type must be a string.")
        try:
            return ConversionCategory(category.strip())
        except ValueError as exc:
            raise InvalidCategoryError(
                f"Unknown conversion type '{category}'."
            ) from exc

    def _resolve_unit(
        self, scale: Scale, category: ConversionCategory, unit: str
    ) -> str:
        if not isinstance(unit, str) or not unit.strip():
            raise InvalidUnitError("Unit must be a non-empty string.")
        text = unit.strip()
        if text not in scale.units:
            raise InvalidUnitError(
                f"Unit '{text}' is not a {category.value} unit."
            )
        return text

    def _coerce_value(self, value: float | int | str) -> float:
        if isinstance(value, bool):
            raise InvalidValueError("Value must be a number or numeric string.")
        if isinstance(value, (int, float)):
            if isinstance(value, float) and not math.isfinite(value):
                raise InvalidValueError("Value must be a finite number.")
            try:
                return float(value)
            except OverflowError as exc:
                raise InvalidValueError("Value must be a finite number.") from exc
        if not isinstance(value, str):
            raise InvalidValueError("Value must be a number or numeric string.")
        text = value.strip()
        if len(text) == 0 or len(text) > _MAX_VALUE_LENGTH:
            raise InvalidValueError(
                f"Value string must be between 1 and {_MAX_VALUE_LENGTH} characters."
            )
        try:
            parsed = Decimal(text)
        except InvalidOperation as exc:
            raise InvalidValueError("Value is not a valid number.") from exc
        if parsed.is_nan() or parsed.is_infinite():
            raise InvalidValueError("Value must be a finite number.")
        numeric = float(parsed)
        if not math.isfinite(numeric):
            raise InvalidValueError("Value must be a finite number.")
        return numeric


def format_value(
    value: float,
    *,
    sig_figs: Optional[int] = None,
    decimals: Optional[int] = None,
    notation: str = "auto",
) -> str:
    """Format a floating point number according to user preferences."""

    if notation not in NOTATIONS:
        raise InvalidValueError(f"Unknown notation '{notation}'.")
    if decimals is not None:
        if not 0 <= decimals <= MAX_PRECISION:
            raise InvalidValueError(
                f"Decimal precision must be between 0 and {MAX_PRECISION}."
            )
        return f"{value:.{decimals}f}"
    if sig_figs is not None and not 1 <= sig_figs <= MAX_PRECISION:
        raise InvalidValueError(
            f"Significant figures must be between 1 and {MAX_PRECISION}."
        )
    if notation == "fixed":
        return f"{value:.{max(0, (sig_figs or 7) - 1)}f}"
    if notation == "scientific":
        precision = sig_figs - 1 if sig_figs else 6
        return f"{value:.{max(0, precision)}e}"
    if notation == "engineering":
        if value == 0:
            return "0"
        exponent = int(math.floor(math.log10(abs(value)) / 3) * 3)
        # 10.0 ** exponent underflows to zero for subnormal values.
        scaled = Decimal(repr(value)).scaleb(-exponent)
        precision = sig_figs - 1 if sig_figs else 6
        formatted = f"{scaled:.{max(0, precision)}f}"
        if "." in formatted:
            formatted = formatted.rstrip("0").rstrip(".")
        return f"{formatted}e{exponent:+}"
    if sig_figs is not None:
        return _format_sig_figs(value, sig_figs)
    return f"{value:.15g}"


def _format_sig_figs(value: float, sig_figs: int) -> str:
    if value == 0:
        return "0" if sig_figs == 1 else "0." + "0" * (sig_figs - 1)
    magnitude = int(math.floor(math.log10(abs(value))))
    digits = sig_figs - 1 - magnitude
    with localcontext() as ctx:
        ctx.rounding = ROUND_HALF_UP
        ctx.prec = sig_figs + 2
        rounded = (
            Decimal(str(value))
            .scaleb(digits)
            .to_integral_value(rounding=ROUND_HALF_UP)
            .scaleb(-digits)
        )
    if -4 <= magnitude < sig_figs:
        return f"{float(rounded):.{max(digits, 0)}f}"
    return f"{float(rounded):.{sig_figs - 1}e}"


__all__ = [
    "AffineScale",
    "AffineUnit",
    "CATEGORY_DEFINITIONS",
    "CategoryDefinition",
    "ConversionCategory",
    "ConversionError",
    "Converter",
    "InvalidCategoryError",
    "InvalidUnitError",
    "InvalidValueError",
    "LinearScale",
    "MAX_PRECISION",
    "NOTATIONS",
    "TEMPERATURE_FORMULAS",
    "format_value",
]
