from .entries import ActivityInput, FactorEntry, LedgerEntry, ReviewEntry
from .enums import (
    AccountingMode,
    CalculationMethod,
    EntryOrigin,
    Scope,
    Scope3Direction,
)
from .profile import CompanyProfile

__all__ = [
    "AccountingMode",
    "ActivityInput",
    "CalculationMethod",
    "CompanyProfile",
    "EntryOrigin",
    "FactorEntry",
    "LedgerEntry",
    "ReviewEntry",
    "Scope",
    "Scope3Direction",
]
