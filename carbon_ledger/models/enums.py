from enum import Enum


class Scope(int, Enum):
    SCOPE_1 = 1
    SCOPE_2 = 2
    SCOPE_3 = 3


class AccountingMode(str, Enum):
    STANDARD = "standard"
    ADVANCED = "advanced"


class EntryOrigin(str, Enum):
    STANDARD = "standard"
    ADVANCED = "advanced"


class CalculationMethod(str, Enum):
    ACTUAL = "actual"
    TECHNICAL = "technical"
    MONETARY = "monetary"


class Scope3Direction(str, Enum):
    UPSTREAM = "upstream"
    DOWNSTREAM = "downstream"
