"""Error taxonomy for the emission ledger engine.

Only UnknownFactor, UnsupportedUnit and InvalidQuantity escape engine
operations. The persistence-related errors are raised by codecs and
recovered by the engine loader.
"""

from __future__ import annotations

from typing import Any


class LedgerError(Exception):
    """Base class for all engine errors."""


class UnknownFactor(LedgerError, LookupError):
    """No emission factor exists for the requested key."""

    def __init__(self, scope: Any, category: str, subcategory: str, method: Any = None):
        self.scope = scope
        self.category = category
        self.subcategory = subcategory
        self.method = method
        scope_value = getattr(scope, "value", scope)
        detail = f"scope {scope_value}, category '{category}', subcategory '{subcategory}'"
        if method is not None:
            detail += f", method '{getattr(method, 'value', method)}'"
        super().__init__(f"Unknown emission factor: {detail}")


class UnsupportedUnit(LedgerError, ValueError):
    """The input unit is not one the engine recognises."""

    def __init__(self, unit: str):
        self.unit = unit
        super().__init__(f"Unsupported unit: '{unit}'")


class InvalidQuantity(LedgerError, ValueError):
    """The activity quantity is negative or not a finite number."""

    def __init__(self, quantity: Any):
        self.quantity = quantity
        super().__init__(f"Quantity must be a finite number >= 0, got {quantity!r}")


class MalformedPersistedState(LedgerError):
    """A persisted blob could not be parsed or validated."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Malformed persisted state for '{key}': {reason}")


class DegradedAdvancedData(MalformedPersistedState):
    """The advanced Scope-3 store is unreadable; Scope 3 falls back to standard-only."""
