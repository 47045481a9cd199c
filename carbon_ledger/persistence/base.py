"""Load/save contract between the engine and its host's storage."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

LEDGER_KEYS = {
    1: "ledger-1",
    2: "ledger-2",
    3: "standard-ledger-3",
}
ADVANCED_STORE_KEY = "advanced-store-3"
MODE_KEY = "scope3-mode"
PROFILE_KEY = "company-profile"

ALL_KEYS = (*LEDGER_KEYS.values(), ADVANCED_STORE_KEY, MODE_KEY, PROFILE_KEY)


class PersistenceAdapter(ABC):
    """Host-owned storage for JSON blobs, addressed by key.

    ``load`` returns None for an absent key. The engine treats ``save`` as a
    best-effort mirror of its in-memory state.
    """

    name: str = "base"

    @abstractmethod
    def load(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def save(self, key: str, payload: str) -> None:
        ...
