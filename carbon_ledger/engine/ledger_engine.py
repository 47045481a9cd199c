"""CarbonLedgerEngine — the single owner of ledger state.

All mutations go through this class. Each one completes in memory first
and is then mirrored to the persistence adapter on a best-effort basis.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Iterable, Mapping, Optional, Sequence
from uuid import uuid4

# Ensure the standard catalog is registered on import
import carbon_ledger.factor_library.base_carbone  # noqa: F401
from carbon_ledger.config.settings import Settings
from carbon_ledger.factor_library.ghg_scope3 import advanced_units, get_category, lookup_advanced
from carbon_ledger.factor_library.registry import catalog_units, lookup
from carbon_ledger.hooks.audit_hooks import log_mutation
from carbon_ledger.models.entries import ActivityInput, LedgerEntry, ReviewEntry
from carbon_ledger.models.enums import AccountingMode, CalculationMethod, Scope
from carbon_ledger.models.profile import CompanyProfile
from carbon_ledger.persistence.base import (
    ADVANCED_STORE_KEY,
    ALL_KEYS,
    LEDGER_KEYS,
    MODE_KEY,
    PROFILE_KEY,
    PersistenceAdapter,
)
from carbon_ledger.persistence.json_file import JsonFilePersistence
from carbon_ledger.persistence.memory import InMemoryPersistence
from carbon_ledger.persistence.schema import (
    decode_advanced_store,
    decode_ledger,
    decode_mode,
    decode_profile,
    encode_ledger,
    encode_mode,
    encode_profile,
)
from carbon_ledger.reconciler.mode_reconciler import ModeReconciler, ReviewOutcome

from .aggregator import (
    advanced_contribution,
    build_aggregate_view,
    category_breakdown,
    section_total,
    top_emitters,
)
from .errors import MalformedPersistedState
from .kpi_calculator import compute_kpis
from .ledger import AdvancedScope3Store, Ledger
from .normalizer import DEFAULT_CONVERSIONS, normalize, validate_quantity
from .result import AggregateView, CategoryBreakdown, EmitterShare, KPIReport, SectionTotal

logger = logging.getLogger(__name__)


class CarbonLedgerEngine:
    """Owns the three scope ledgers, the advanced Scope-3 store and the mode flag."""

    def __init__(
        self,
        persistence: Optional[PersistenceAdapter] = None,
        mode: AccountingMode = AccountingMode.STANDARD,
        reporting_year: Optional[int] = None,
        autosave: bool = True,
        conversion_table: Optional[Mapping[tuple[str, str], float]] = None,
        profile: Optional[CompanyProfile] = None,
        audit_log_size: int = 1000,
    ) -> None:
        self.persistence = persistence or InMemoryPersistence()
        self.reporting_year = reporting_year
        self.autosave = autosave
        self.conversion_table = dict(conversion_table or DEFAULT_CONVERSIONS)
        self.profile = profile or CompanyProfile()

        self._ledgers: dict[Scope, Ledger] = {scope: Ledger(scope) for scope in Scope}
        self._advanced_store = AdvancedScope3Store()
        self.reconciler = ModeReconciler(self._ledgers, self._advanced_store, self._new_id, mode)

        self.audit_log: deque[dict[str, Any]] = deque(maxlen=audit_log_size)
        self._load_warnings: list[str] = []

    @classmethod
    def from_settings(cls, settings: Settings) -> CarbonLedgerEngine:
        """Build an engine and load its state as configured."""
        if settings.persistence_backend == "json":
            persistence: PersistenceAdapter = JsonFilePersistence(settings.data_dir)
        else:
            persistence = InMemoryPersistence()
        engine = cls(
            persistence=persistence,
            mode=AccountingMode(settings.default_mode),
            reporting_year=settings.reporting_year,
            autosave=settings.autosave,
            audit_log_size=settings.audit_log_size,
        )
        engine.load()
        return engine

    # -- State accessors ----------------------------------------------------

    @property
    def mode(self) -> AccountingMode:
        return self.reconciler.mode

    @property
    def degraded_advanced_data(self) -> bool:
        return self.reconciler.degraded

    @property
    def warnings(self) -> list[str]:
        warnings = list(self._load_warnings)
        if self.reconciler.degraded:
            warnings.append(
                "Advanced Scope-3 data could not be read; Scope 3 reflects standard entries only"
            )
        return warnings

    def entries(self, scope: Scope) -> list[LedgerEntry]:
        return self._ledgers[Scope(scope)].entries

    def advanced_entries(self) -> list[LedgerEntry]:
        return self._advanced_store.entries

    def counted_entries(self) -> list[LedgerEntry]:
        """Every entry that contributes to the current grand total."""
        counted: list[LedgerEntry] = []
        for scope in Scope:
            counted.extend(self._ledgers[scope])
        counted.extend(self.reconciler.advanced_contribution())
        return counted

    # -- Entry lifecycle ----------------------------------------------------

    def add_entry(
        self,
        scope: Scope,
        category: str,
        subcategory: str,
        normalized_quantity: float,
    ) -> LedgerEntry:
        """Cost an already-normalized quantity and append it to the scope's ledger.

        Raises UnknownFactor or InvalidQuantity without touching state.
        """
        factor = lookup(scope, category, subcategory)
        quantity = validate_quantity(normalized_quantity)
        entry = LedgerEntry.create(self._new_id(factor.scope), factor, quantity)
        entry = self._ledgers[factor.scope].append(entry)
        self._audit("add_entry", factor.scope, {"id": entry.id, "formula": entry.formula})
        self._autosave(LEDGER_KEYS[int(factor.scope)])
        return entry

    def record_activity(self, activity: ActivityInput) -> LedgerEntry:
        """Normalize a raw user input against its factor's unit, then add it."""
        factor = lookup(activity.scope, activity.category, activity.subcategory)
        quantity = normalize(
            activity.raw_quantity,
            activity.input_unit,
            factor.unit,
            self.conversion_table,
            known_units=catalog_units(),
        )
        return self.add_entry(factor.scope, factor.category, factor.subcategory, quantity)

    def add_advanced_entry(
        self,
        category_id: str,
        subcategory_id: str,
        quantity: float,
        method: Optional[CalculationMethod] = None,
        input_unit: Optional[str] = None,
    ) -> LedgerEntry:
        """Record a GHG-Protocol category entry in the advanced store.

        Allowed in either mode; in standard mode the entry stays dormant.
        """
        factor = lookup_advanced(category_id, subcategory_id, method)
        normalized = normalize(
            quantity,
            input_unit or factor.unit,
            factor.unit,
            self.conversion_table,
            known_units=advanced_units(),
        )
        category = get_category(category_id)
        entry = LedgerEntry.create(
            self._new_id(Scope.SCOPE_3),
            factor,
            normalized,
            category_number=category.number if category else None,
        )
        entry = self._advanced_store.append(entry)
        self.reconciler.advanced_touched()
        self._audit(
            "add_advanced_entry",
            Scope.SCOPE_3,
            {"id": entry.id, "method": factor.method.value if factor.method else None, "formula": entry.formula},
        )
        self._autosave(ADVANCED_STORE_KEY)
        return entry

    def remove_entry(self, scope: Scope, entry_id: str) -> Optional[LedgerEntry]:
        """Remove an entry from a scope's ledger; None when the id is absent."""
        scope = Scope(scope)
        removed = self._ledgers[scope].remove(entry_id)
        if removed is None:
            logger.debug("remove_entry: %s not found in scope %s", entry_id, scope.value)
            return None
        self._audit("remove_entry", scope, {"id": entry_id, "emissions": removed.emissions})
        self._autosave(LEDGER_KEYS[int(scope)])
        return removed

    def remove_advanced_entry(self, entry_id: str) -> Optional[LedgerEntry]:
        removed = self._advanced_store.remove(entry_id)
        if removed is None:
            return None
        self.reconciler.advanced_touched()
        self._audit("remove_entry", Scope.SCOPE_3, {"id": entry_id, "origin": "advanced", "emissions": removed.emissions})
        self._autosave(ADVANCED_STORE_KEY)
        return removed

    def replace_all(self, scope: Scope, entries: Iterable[LedgerEntry]) -> None:
        """Swap a scope's ledger wholesale; emissions are recomputed.

        Entries must belong to ``scope`` and must not reuse an id held by
        another store.
        """
        scope = Scope(scope)
        incoming = list(entries)
        foreign_ids = self._ids_outside(self._ledgers[scope])
        for entry in incoming:
            if Scope(entry.scope) is not scope:
                raise ValueError(f"Entry '{entry.id}' belongs to scope {int(entry.scope)}, not {scope.value}")
            if entry.id in foreign_ids:
                raise ValueError(f"Entry id '{entry.id}' is already used by another store")
        self._ledgers[scope].replace_all(incoming)
        self._audit("replace_all", scope, {"count": len(incoming)})
        self._autosave(LEDGER_KEYS[int(scope)])

    def clear(self, scope: Scope) -> None:
        scope = Scope(scope)
        self._ledgers[scope].clear()
        self._audit("clear", scope)
        self._autosave(LEDGER_KEYS[int(scope)])

    def clear_all(self) -> None:
        """Reset: empty every ledger and the advanced store. The mode is kept."""
        for ledger in self._ledgers.values():
            ledger.clear()
        self._advanced_store.clear()
        self.reconciler.advanced_touched()
        self._load_warnings.clear()
        self._audit("clear_all", None)
        self._autosave(*LEDGER_KEYS.values(), ADVANCED_STORE_KEY)

    # -- Mode and review ----------------------------------------------------

    def set_mode(self, mode: AccountingMode) -> None:
        previous = self.reconciler.set_mode(mode)
        self._audit("set_mode", Scope.SCOPE_3, {"from": previous.value, "to": self.mode.value})
        self._autosave(MODE_KEY)

    def list_entries_for_review(self, scope: Scope) -> list[ReviewEntry]:
        return self.reconciler.list_entries_for_review(scope)

    def apply_reviewed_entries(self, scope: Scope, edited: Sequence[ReviewEntry]) -> ReviewOutcome:
        scope = Scope(scope)
        outcome = self.reconciler.apply_reviewed_entries(scope, edited)
        self._audit("apply_reviewed_entries", scope, outcome.to_dict())
        keys = [LEDGER_KEYS[int(scope)]]
        if outcome.advanced_rewritten:
            keys.append(ADVANCED_STORE_KEY)
        self._autosave(*keys)
        return outcome

    # -- Reads ----------------------------------------------------------------

    def get_aggregate_view(self) -> AggregateView:
        advanced = self._advanced_store.entries if self.reconciler.advanced_mode else None
        return build_aggregate_view(
            self.entries(Scope.SCOPE_1),
            self.entries(Scope.SCOPE_2),
            self.entries(Scope.SCOPE_3),
            advanced,
            degraded=self.reconciler.degraded,
            warnings=self.warnings,
        )

    def get_kpis(
        self,
        profile: Optional[CompanyProfile] = None,
        reporting_year: Optional[int] = None,
    ) -> KPIReport:
        return compute_kpis(
            self.get_aggregate_view(),
            profile or self.profile,
            reporting_year or self.reporting_year,
        )

    def top_emitters(self, limit: int = 10) -> list[EmitterShare]:
        return top_emitters(self.counted_entries(), limit)

    def advanced_breakdown(self) -> CategoryBreakdown:
        """Breakdown of the advanced store, whether or not it is currently counted."""
        return category_breakdown(advanced_contribution(self.entries(Scope.SCOPE_3), self._advanced_store.entries))

    def section_totals(self) -> dict[Scope, SectionTotal]:
        totals = {scope: section_total(scope, self.entries(scope)) for scope in Scope}
        extra = self.reconciler.advanced_contribution()
        if extra:
            totals[Scope.SCOPE_3] = section_total(Scope.SCOPE_3, self.entries(Scope.SCOPE_3) + extra)
        return totals

    def set_profile(self, profile: CompanyProfile) -> None:
        self.profile = profile
        self._autosave(PROFILE_KEY)

    # -- Persistence ----------------------------------------------------------

    def load(self) -> None:
        """Read every store from persistence.

        A malformed or unreadable blob resets that store to empty with a
        warning. An unreadable advanced store additionally marks Scope 3 as
        degraded instead of failing.
        """
        self._load_warnings = []
        for scope in Scope:
            key = LEDGER_KEYS[int(scope)]
            entries: list[LedgerEntry] = []
            try:
                payload = self._read(key)
                if payload is not None:
                    entries = decode_ledger(key, payload, scope)
            except MalformedPersistedState as exc:
                self._recover(exc)
            self._ledgers[scope].replace_all(entries)

        self._advanced_store.clear()
        self.reconciler.degraded = False
        try:
            payload = self._read(ADVANCED_STORE_KEY)
            if payload is not None:
                self._advanced_store.replace_all(self._drop_overlap(decode_advanced_store(ADVANCED_STORE_KEY, payload)))
        except MalformedPersistedState as exc:
            self.reconciler.mark_degraded(exc.reason)

        try:
            payload = self._read(MODE_KEY)
            if payload is not None:
                self.reconciler.mode = decode_mode(MODE_KEY, payload)
        except MalformedPersistedState as exc:
            self._recover(exc)

        try:
            payload = self._read(PROFILE_KEY)
            if payload is not None:
                self.profile = decode_profile(PROFILE_KEY, payload)
        except MalformedPersistedState as exc:
            self._recover(exc)

        logger.info(
            "Loaded ledgers via %s persistence: %s, mode=%s",
            self.persistence.name,
            {int(s): len(self._ledgers[s]) for s in Scope},
            self.mode.value,
        )

    def save(self, keys: Optional[Iterable[str]] = None) -> None:
        """Mirror state to persistence. Failures are logged, never raised.

        While the advanced store is degraded and untouched, its key is
        skipped so the unreadable blob is not overwritten with nothing.
        """
        for key in keys or ALL_KEYS:
            if key == ADVANCED_STORE_KEY and self.reconciler.degraded:
                logger.info("Skipping save of %s while advanced data is degraded", key)
                continue
            try:
                self.persistence.save(key, self._encode(key))
            except Exception:
                logger.exception("Failed to persist %s", key)

    def _encode(self, key: str) -> str:
        if key == ADVANCED_STORE_KEY:
            return encode_ledger(Scope.SCOPE_3, self._advanced_store.entries)
        if key == MODE_KEY:
            return encode_mode(self.mode)
        if key == PROFILE_KEY:
            return encode_profile(self.profile)
        for scope_value, ledger_key in LEDGER_KEYS.items():
            if ledger_key == key:
                return encode_ledger(Scope(scope_value), self._ledgers[Scope(scope_value)].entries)
        raise KeyError(f"Unknown persistence key: {key}")

    def _read(self, key: str) -> Optional[str]:
        try:
            return self.persistence.load(key)
        except (OSError, ValueError) as exc:
            raise MalformedPersistedState(key, f"unreadable: {exc}") from exc

    def _recover(self, exc: MalformedPersistedState) -> None:
        logger.warning("%s; starting with an empty default", exc)
        self._load_warnings.append(str(exc))

    def _drop_overlap(self, entries: list[LedgerEntry]) -> list[LedgerEntry]:
        standard_ids = self._ids_outside(self._advanced_store)
        kept = [e for e in entries if e.id not in standard_ids]
        if len(kept) != len(entries):
            dropped = len(entries) - len(kept)
            logger.warning("Dropped %d advanced entries whose ids already exist in the ledgers", dropped)
            self._load_warnings.append(f"{dropped} advanced Scope-3 entries duplicated ledger ids and were ignored")
        return kept

    def _autosave(self, *keys: str) -> None:
        if self.autosave:
            self.save(keys)

    # -- Helpers --------------------------------------------------------------

    def _all_ids(self) -> set[str]:
        ids = self._advanced_store.ids()
        for ledger in self._ledgers.values():
            ids |= ledger.ids()
        return ids

    def _ids_outside(self, store: Ledger) -> set[str]:
        ids: set[str] = set()
        for other in (*self._ledgers.values(), self._advanced_store):
            if other is not store:
                ids |= other.ids()
        return ids

    def _new_id(self, scope: Scope) -> str:
        """Ids are unique across every ledger and the advanced store."""
        in_use = self._all_ids()
        while True:
            candidate = f"s{int(scope)}-{uuid4().hex[:12]}"
            if candidate not in in_use:
                return candidate

    def _audit(self, operation: str, scope: Optional[Scope], details: Optional[dict[str, Any]] = None) -> None:
        self.audit_log.append(log_mutation(operation, int(scope) if scope is not None else None, details))

