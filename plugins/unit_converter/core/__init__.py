"""Facade for the unit converter core utilities."""

from __future__ import annotations

from functools import lru_cache
from typing import Dict, Iterable, List, Optional

from .converter import (
    CATEGORY_DEFINITIONS,
    ConversionCategory,
    ConversionError,
    Converter,
    InvalidCategoryError,
    InvalidUnitError,
    InvalidValueError,
    MAX_PRECISION,
    NOTATIONS,
    format_value,
)


@lru_cache(maxsize=8)
def get_converter(non_negative: tuple[str, ...] = ()) -> Converter:
    """Return a shared :class:`Converter` for the given negative-value policy."""

    return Converter(non_negative=non_negative)


def normalise_policy(non_negative: Iterable[str] | None) -> tuple[str, ...]:
    """Return the non-negative category list as a sorted, hashable cache key."""

    return tuple(sorted(set(non_negative or ())))


def list_categories() -> List[str]:
    """Return the supported conversion categories."""

    return get_converter().list_categories()


def list_units(category: str) -> List[str]:
    """Return the units belonging to ``category``."""

    return get_converter().list_units(category)


def describe_category(category: str) -> Dict[str, object]:
    return get_converter().describe(category)


def describe_categories() -> List[Dict[str, object]]:
    converter = get_converter()
    return [converter.describe(name) for name in converter.list_categories()]


def convert(
    category: str,
    from_unit: str,
    to_unit: str,
    value: float | int | str,
    *,
    non_negative: Iterable[str] | None = None,
) -> float:
    """Convert ``value`` from ``from_unit`` to ``to_unit`` within ``category``."""

    return get_converter(normalise_policy(non_negative)).convert(
        category, from_unit, to_unit, value
    )


def convert_formatted(
    value: float | int | str,
    from_unit: str,
    to_unit: str,
    category: str,
    *,
    non_negative: Iterable[str] | None = None,
    sig_figs: Optional[int] = None,
    decimals: Optional[int] = None,
    notation: str = "auto",
) -> Dict[str, object]:
    """Convert ``value`` and format the result for display."""

    result = convert(category, from_unit, to_unit, value, non_negative=non_negative)
    formatted = format_value(
        result, sig_figs=sig_figs, decimals=decimals, notation=notation
    )
    return {
        "result": result,
        "formatted": formatted,
        "from_unit": from_unit,
        "to_unit": to_unit,
        "conversion_type": category,
    }


__all__ = [
    "CATEGORY_DEFINITIONS",
    "ConversionCategory",
    "ConversionError",
    "InvalidCategoryError",
    "InvalidUnitError",
    "InvalidValueError",
    "convert",
    "convert_formatted",
    "describe_categories",
    "describe_category",
    "format_value",
    "get_converter",
    "list_categories",
    "list_units",
    "MAX_PRECISION",
    "normalise_policy",
    "NOTATIONS",
]
