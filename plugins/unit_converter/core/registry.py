"""Shared Pint registry helpers for the unit converter core."""

from __future__ import annotations

from functools import lru_cache
from types import MappingProxyType
from typing import Iterable, Mapping

from pint import UnitRegistry
from pint.errors import UndefinedUnitError

# Names exposed to the mobile client mapped onto Pint unit names.
PINT_NAMES: Mapping[str, str] = MappingProxyType(
    {
        "inches": "inch",
        "cm": "centimeter",
        "feet": "foot",
        "meters": "meter",
        "grams": "gram",
        "kg": "kilogram",
        "pounds": "pound",
        "ounces": "ounce",
        "tsp": "teaspoon",
        "tbsp": "tablespoon",
        "cups": "cup",
        "ml": "milliliter",
    }
)


def _build_registry() -> UnitRegistry:
    registry = UnitRegistry()
    registry.default_format = "P"  # compact pretty printer
    return registry


@lru_cache(maxsize=1)
def get_registry() -> UnitRegistry:
    """Return a singleton :class:`~pint.UnitRegistry` instance."""

    return _build_registry()


def pint_name(unit: str) -> str:
    """Return the Pint spelling of an app unit name."""

    try:
        return PINT_NAMES[unit]
    except KeyError as exc:
        raise KeyError(f"No Pint mapping for unit '{unit}'.") from exc


def factor_table(base: str, units: Iterable[str]) -> Mapping[str, float]:
    """Return ``{unit: size of one unit expressed in base}`` as a read-only map."""

    registry = get_registry()
    target = pint_name(base)
    factors: dict[str, float] = {}
    for unit in units:
        try:
            quantity = registry.Quantity(1.0, pint_name(unit)).to(target)
        except UndefinedUnitError as exc:  # pragma: no cover - Pint ships all of these
            raise KeyError(str(exc)) from exc
        factors[unit] = float(quantity.magnitude)
    return MappingProxyType(factors)


__all__ = ["PINT_NAMES", "get_registry", "pint_name", "factor_table"]
