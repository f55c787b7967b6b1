"""
core/errors.py
────────────────────────────────────────────────────────────────────────
Domain errors raised by the calculators when running in strict mode and
by the custom-target validator. Routers turn them into HTTP 4xx.
"""

from __future__ import annotations

from typing import Any


class MacroError(ValueError):
    """Base class for everything the core package raises on bad input."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.message = message
        self.field = field
        super().__init__(message)

    @property
    def details(self) -> dict[str, Any]:
        return {"field": self.field} if self.field else {}


class ValidationError(MacroError):
    """A numeric field could not be parsed, or is out of range."""


class UnknownCategoryError(MacroError):
    """An enum-like field (gender, activity level, goal) has no table entry."""

    def __init__(self, field: str, value: Any) -> None:
        self.value = value
        super().__init__(f"unknown {field}: {value!r}", field=field)

    @property
    def details(self) -> dict[str, Any]:
        return {"field": self.field, "value": self.value}
