"""Brand Resolver.

Finds brand entries inside a MetricRecord using ordered strategy chains:
  - Owner resolution: ownership flag -> exact owner name -> first entry
  - Name lookup: exact -> case-insensitive -> substring containment

Each strategy is a plain function ``(entries, name) -> entry | None``; a chain
returns the first non-None result.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from rankly.engine.types import NO_OWNER, BrandMetricEntry, MetricRecord

logger = logging.getLogger(__name__)

Strategy = Callable[[Sequence[BrandMetricEntry], str | None], BrandMetricEntry | None]


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


def by_owner_flag(entries: Sequence[BrandMetricEntry], name: str | None = None) -> BrandMetricEntry | None:
    """First entry flagged as owner upstream."""
    return next((e for e in entries if e.is_owner), None)


def by_exact_name(entries: Sequence[BrandMetricEntry], name: str | None) -> BrandMetricEntry | None:
    """First entry whose brand name equals ``name`` (case-sensitive)."""
    if not name:
        return None
    return next((e for e in entries if e.brand_name == name), None)


def by_casefold_name(entries: Sequence[BrandMetricEntry], name: str | None) -> BrandMetricEntry | None:
    """First entry whose stripped brand name equals ``name``, ignoring case."""
    if not name or not name.strip():
        return None
    wanted = name.strip().casefold()
    return next((e for e in entries if e.brand_name.strip().casefold() == wanted), None)


def by_name_containment(entries: Sequence[BrandMetricEntry], name: str | None) -> BrandMetricEntry | None:
    """First entry whose brand name contains ``name``, ignoring case.

    "Stripe" matches "Stripe Payments"; the reverse is not tried.
    """
    if not name or not name.strip():
        return None
    wanted = name.strip().casefold()
    return next((e for e in entries if wanted in e.brand_name.casefold()), None)


def first_entry(entries: Sequence[BrandMetricEntry], name: str | None = None) -> BrandMetricEntry | None:
    return entries[0] if entries else None


OWNER_STRATEGIES: tuple[Strategy, ...] = (by_owner_flag, by_exact_name, first_entry)

NAME_STRATEGIES: tuple[Strategy, ...] = (by_exact_name, by_casefold_name, by_name_containment)


def run_strategies(
    strategies: Sequence[Strategy],
    entries: Sequence[BrandMetricEntry],
    name: str | None,
) -> BrandMetricEntry | None:
    """Return the result of the first strategy that finds an entry."""
    for strategy in strategies:
        found = strategy(entries, name)
        if found is not None:
            logger.debug("Brand lookup %r resolved by %s -> %s", name, strategy.__name__, found.brand_name)
            return found
    return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def resolve_owner(record: MetricRecord, owner_name: str | None) -> BrandMetricEntry:
    """Find the owner brand's entry in a record.

    Returns ``NO_OWNER`` for a record without entries. Callers should treat
    it as "no data" (compare with ``is``).
    """
    found = run_strategies(OWNER_STRATEGIES, record.brand_metrics, owner_name)
    return found if found is not None else NO_OWNER


def find_owner(entries: Sequence[BrandMetricEntry], owner_name: str | None) -> BrandMetricEntry | None:
    """Owner lookup without the first-entry fallback: flag, then exact name."""
    return run_strategies((by_owner_flag, by_exact_name), entries, owner_name)


def find_brand(entries: Sequence[BrandMetricEntry], name: str | None) -> BrandMetricEntry | None:
    """Loose brand lookup by name: exact, then case-insensitive, then substring."""
    return run_strategies(NAME_STRATEGIES, entries, name)
