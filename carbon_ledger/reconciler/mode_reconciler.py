"""Reconcile the standard Scope-3 ledger with the advanced 15-category store.

Every review row carries an explicit origin tag. Edits are routed to the
store named by that tag; ids are never parsed to guess ownership.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional, Sequence

from carbon_ledger.engine.aggregator import advanced_contribution
from carbon_ledger.engine.ledger import AdvancedScope3Store, Ledger
from carbon_ledger.engine.normalizer import validate_quantity
from carbon_ledger.factor_library.ghg_scope3 import get_category
from carbon_ledger.models.entries import LedgerEntry, ReviewEntry
from carbon_ledger.models.enums import AccountingMode, EntryOrigin, Scope

logger = logging.getLogger(__name__)


@dataclass
class ReviewOutcome:
    """What an applied review changed, per origin store."""

    updated: list[str] = field(default_factory=list)
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    ignored: list[str] = field(default_factory=list)
    advanced_rewritten: bool = False

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "updated": list(self.updated),
            "added": list(self.added),
            "removed": list(self.removed),
            "ignored": list(self.ignored),
        }


class ModeReconciler:
    """Owns the accounting-mode flag and the dual-source Scope-3 rules.

    Toggling modes never touches either store. In standard mode the
    advanced store is dormant; in advanced mode its entries are added to
    Scope 3, minus any id already present in the standard ledger.
    """

    def __init__(
        self,
        ledgers: Mapping[Scope, Ledger],
        advanced: AdvancedScope3Store,
        new_id: Callable[[Scope], str],
        mode: AccountingMode = AccountingMode.STANDARD,
    ) -> None:
        self._ledgers = ledgers
        self._advanced = advanced
        self._new_id = new_id
        self.mode = AccountingMode(mode)
        self.degraded = False

    @property
    def advanced_mode(self) -> bool:
        return self.mode is AccountingMode.ADVANCED

    def set_mode(self, mode: AccountingMode) -> AccountingMode:
        """Switch modes and return the previous one."""
        previous = self.mode
        self.mode = AccountingMode(mode)
        if previous is not self.mode:
            logger.info("Scope-3 accounting mode: %s -> %s", previous.value, self.mode.value)
        return previous

    def mark_degraded(self, reason: str) -> None:
        self.degraded = True
        logger.warning("Advanced Scope-3 data unavailable, falling back to standard-only: %s", reason)

    def advanced_touched(self) -> None:
        """The advanced store now holds fresh data; drop the degraded signal."""
        if self.degraded:
            logger.info("Advanced Scope-3 store rewritten; clearing degraded signal")
        self.degraded = False

    # -- Scope-3 totals -----------------------------------------------------

    def advanced_contribution(self) -> list[LedgerEntry]:
        """Advanced entries counted in Scope 3 (empty in standard mode)."""
        if not self.advanced_mode:
            return []
        return advanced_contribution(self._ledgers[Scope.SCOPE_3].entries, self._advanced.entries)

    # -- Review surface -----------------------------------------------------

    def review_stores(self, scope: Scope) -> dict[EntryOrigin, Ledger]:
        """Stores whose entries make up the review set for a scope."""
        scope = Scope(scope)
        stores: dict[EntryOrigin, Ledger] = {EntryOrigin.STANDARD: self._ledgers[scope]}
        if scope is Scope.SCOPE_3 and self.advanced_mode:
            stores[EntryOrigin.ADVANCED] = self._advanced
        return stores

    def list_entries_for_review(self, scope: Scope) -> list[ReviewEntry]:
        """Standard entries first, then advanced ones, each tagged with its origin."""
        rows: list[ReviewEntry] = []
        for origin, store in self.review_stores(scope).items():
            for entry in store:
                rows.append(ReviewEntry.from_entry(entry, origin))
        return rows

    def apply_reviewed_entries(self, scope: Scope, edited: Sequence[ReviewEntry]) -> ReviewOutcome:
        """Commit a reviewed list back to the stores that own its rows.

        Quantity, factor, label and unit are taken from the row; emissions
        are always recomputed. Entries of the review set missing from
        ``edited`` are deleted from their store; unknown ids are appended.
        All rows are validated before any store changes. Applying the same
        list twice leaves the same state as applying it once.
        """
        scope = Scope(scope)
        stores = self.review_stores(scope)
        if (
            self.degraded
            and EntryOrigin.ADVANCED in stores
            and not any(EntryOrigin(row.origin) is EntryOrigin.ADVANCED for row in edited)
        ):
            # The unreadable advanced blob stays until advanced rows are submitted.
            del stores[EntryOrigin.ADVANCED]
        outcome = ReviewOutcome()
        staged: dict[EntryOrigin, list[LedgerEntry]] = {origin: [] for origin in stores}
        seen: set[str] = set()

        for row in edited:
            origin = EntryOrigin(row.origin)
            if origin not in stores:
                logger.warning(
                    "Ignoring review row %s: origin '%s' is not part of scope %s review",
                    row.id, origin.value, scope.value,
                )
                outcome.ignored.append(row.id)
                continue
            if row.id and row.id in seen:
                raise ValueError(f"Duplicate review row id '{row.id}'")

            quantity = validate_quantity(row.quantity)
            factor = validate_quantity(row.factor)
            existing = stores[origin].get(row.id) if row.id else None
            if existing is not None:
                entry = existing.revised(quantity=quantity, factor=factor, label=row.label, unit=row.unit)
                outcome.updated.append(entry.id)
            else:
                entry = self._new_entry(scope, origin, row, quantity, factor)
                outcome.added.append(entry.id)
            seen.add(entry.id)
            staged[origin].append(entry)

        for origin, store in stores.items():
            kept = {e.id for e in staged[origin]}
            outcome.removed.extend(e.id for e in store if e.id not in kept)

        for origin, store in stores.items():
            store.replace_all(staged[origin])
            if origin is EntryOrigin.ADVANCED:
                outcome.advanced_rewritten = True
                self.advanced_touched()

        logger.info(
            "Applied review for scope %s: %d updated, %d added, %d removed, %d ignored",
            scope.value, len(outcome.updated), len(outcome.added),
            len(outcome.removed), len(outcome.ignored),
        )
        return outcome

    def _new_entry(
        self,
        scope: Scope,
        origin: EntryOrigin,
        row: ReviewEntry,
        quantity: float,
        factor: float,
    ) -> LedgerEntry:
        entry_id = row.id
        if not entry_id or self._id_in_use(entry_id):
            entry_id = self._new_id(scope)
        category_number: Optional[int] = None
        if origin is EntryOrigin.ADVANCED:
            category = get_category(row.category)
            category_number = category.number if category else None
        entry = LedgerEntry(
            id=entry_id,
            scope=scope,
            category=row.category,
            subcategory=row.subcategory,
            label=row.label,
            quantity=quantity,
            unit=row.unit,
            factor=factor,
            emissions=0.0,
            category_number=category_number,
        )
        return entry.recomputed()

    def _id_in_use(self, entry_id: str) -> bool:
        if entry_id in self._advanced:
            return True
        return any(entry_id in ledger for ledger in self._ledgers.values())
