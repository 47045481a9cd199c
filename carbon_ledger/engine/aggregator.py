"""Pure aggregation over ledger entries.

Nothing here mutates state; every figure is recomputed from the entries
it is given, so results always match a full recomputation.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from carbon_ledger.factor_library.ghg_scope3 import get_category
from carbon_ledger.models.entries import LedgerEntry
from carbon_ledger.models.enums import Scope3Direction

from .result import AggregateView, CategoryBreakdown, EmitterShare, SectionTotal


def scope_total(entries: Iterable[LedgerEntry]) -> float:
    return sum(e.emissions for e in entries)


def advanced_contribution(
    standard_scope3: Sequence[LedgerEntry],
    advanced: Sequence[LedgerEntry],
) -> list[LedgerEntry]:
    """Advanced entries that may be counted on top of the standard Scope-3 ledger.

    An id already present in the standard ledger is never counted twice.
    """
    standard_ids = {e.id for e in standard_scope3}
    return [e for e in advanced if e.id not in standard_ids]


def build_aggregate_view(
    scope1: Sequence[LedgerEntry],
    scope2: Sequence[LedgerEntry],
    scope3_standard: Sequence[LedgerEntry],
    scope3_advanced: Optional[Sequence[LedgerEntry]] = None,
    degraded: bool = False,
    warnings: Iterable[str] = (),
) -> AggregateView:
    """Compute scope subtotals and grand total.

    ``scope3_advanced`` is None in standard mode; in advanced mode its
    non-overlapping entries are added to the Scope-3 total.
    """
    s1 = scope_total(scope1)
    s2 = scope_total(scope2)
    s3 = scope_total(scope3_standard)
    if scope3_advanced is not None:
        s3 += scope_total(advanced_contribution(scope3_standard, scope3_advanced))
    return AggregateView(
        scope1_total=s1,
        scope2_total=s2,
        scope3_total=s3,
        grand_total=s1 + s2 + s3,
        advanced_mode=scope3_advanced is not None,
        degraded_advanced_data=degraded,
        warnings=tuple(warnings),
    )


def section_total(scope: int, entries: Sequence[LedgerEntry]) -> SectionTotal:
    return SectionTotal(scope=int(scope), total=scope_total(entries), entry_count=len(entries))


def top_emitters(entries: Iterable[LedgerEntry], limit: int = 10) -> list[EmitterShare]:
    """Largest sources grouped by label, with their share of the listed total.

    Returns an empty list when there is nothing recorded.
    """
    grouped: dict[str, list] = {}
    for entry in entries:
        if entry.label not in grouped:
            grouped[entry.label] = [0.0, int(entry.scope)]
        grouped[entry.label][0] += entry.emissions

    ranked = sorted(grouped.items(), key=lambda item: item[1][0], reverse=True)[:limit]
    listed_total = sum(emissions for _, (emissions, _) in ranked)
    return [
        EmitterShare(
            label=label,
            scope=scope,
            emissions=emissions,
            percentage=(emissions / listed_total * 100) if listed_total > 0 else 0.0,
        )
        for label, (emissions, scope) in ranked
    ]


def category_breakdown(advanced: Iterable[LedgerEntry]) -> CategoryBreakdown:
    """Emissions per GHG category number, upstream/downstream split and
    emissions-weighted uncertainty.

    Only recorded entries contribute; no category is estimated.
    """
    by_category: dict[int, float] = {}
    upstream = 0.0
    downstream = 0.0
    weighted_uncertainty = 0.0
    total = 0.0

    for entry in advanced:
        category = get_category(entry.category)
        number = entry.category_number or (category.number if category else 0)
        by_category[number] = by_category.get(number, 0.0) + entry.emissions
        if category is not None:
            if category.direction is Scope3Direction.UPSTREAM:
                upstream += entry.emissions
            else:
                downstream += entry.emissions
        weighted_uncertainty += entry.uncertainty * entry.emissions
        total += entry.emissions

    return CategoryBreakdown(
        by_category=dict(sorted(by_category.items())),
        upstream_total=upstream,
        downstream_total=downstream,
        average_uncertainty=(weighted_uncertainty / total) if total > 0 else 0.0,
    )
