"""Per-scope ordered collections of ledger entries."""

from __future__ import annotations

from typing import Iterable, Iterator, Optional

from carbon_ledger.models.entries import LedgerEntry
from carbon_ledger.models.enums import EntryOrigin, Scope


class Ledger:
    """Ordered entries for one scope.

    Insertion order is display order. Every entry stored here satisfies
    ``emissions == quantity * factor`` and ids are unique.
    """

    origin = EntryOrigin.STANDARD

    def __init__(self, scope: Scope, entries: Iterable[LedgerEntry] = ()) -> None:
        self.scope = Scope(scope)
        self._entries: list[LedgerEntry] = []
        self.replace_all(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LedgerEntry]:
        return iter(list(self._entries))

    def __contains__(self, entry_id: object) -> bool:
        return any(e.id == entry_id for e in self._entries)

    @property
    def entries(self) -> list[LedgerEntry]:
        """Snapshot copy; mutating it does not touch the ledger."""
        return list(self._entries)

    def ids(self) -> set[str]:
        return {e.id for e in self._entries}

    def get(self, entry_id: str) -> Optional[LedgerEntry]:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def append(self, entry: LedgerEntry) -> LedgerEntry:
        if entry.id in self:
            raise ValueError(f"Entry id '{entry.id}' already exists in scope {self.scope.value}")
        entry = entry.recomputed()
        self._entries.append(entry)
        return entry

    def remove(self, entry_id: str) -> Optional[LedgerEntry]:
        """Remove and return the entry, or None when the id is absent."""
        for i, entry in enumerate(self._entries):
            if entry.id == entry_id:
                return self._entries.pop(i)
        return None

    def replace_all(self, entries: Iterable[LedgerEntry]) -> None:
        """Swap the whole content in one step.

        Emissions are recomputed from quantity and factor; duplicate ids
        are rejected before anything changes.
        """
        incoming = [entry.recomputed() for entry in entries]
        seen: set[str] = set()
        for entry in incoming:
            if entry.id in seen:
                raise ValueError(f"Duplicate entry id '{entry.id}'")
            seen.add(entry.id)
        self._entries = incoming

    def clear(self) -> None:
        self._entries = []

    def total(self) -> float:
        return sum(e.emissions for e in self._entries)


class AdvancedScope3Store(Ledger):
    """Scope-3 entries recorded against the 15 GHG Protocol categories."""

    origin = EntryOrigin.ADVANCED

    def __init__(self, entries: Iterable[LedgerEntry] = ()) -> None:
        super().__init__(Scope.SCOPE_3, entries)
