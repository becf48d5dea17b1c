"""Unit converter plugin."""

manifest = {
    "title": "Unit Converter",
    "summary": "Length, weight, cooking and temperature conversions for the mobile app.",
    "blueprint": "unit_converter",
    "category": "General Utilities",
    "endpoints": ["/convert", "/categories", "/categories/<category>/units"],
}


__all__ = ["manifest"]
