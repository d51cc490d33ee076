"""Selection Filter.

Narrows what the dashboard shows to the caller's current selection:
  - which scope records are in view (topics / personas / platforms)
  - which brands are in view (owner + selected competitors)

The owner brand is never filtered out. What an empty competitor selection
means differs between dashboard views, so it is an explicit parameter
(``empty_selection_means_all``) rather than a fixed policy.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Collection, Sequence
from dataclasses import dataclass, field

from rankly.engine.brand_resolver import find_owner
from rankly.engine.types import BrandMetricEntry, MetricRecord, Scope

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Selection:
    """Active dashboard filters."""

    topics: frozenset[str] = field(default_factory=frozenset)
    personas: frozenset[str] = field(default_factory=frozenset)
    platforms: frozenset[str] = field(default_factory=frozenset)
    competitors: frozenset[str] = field(default_factory=frozenset)
    empty_selection_means_all: bool = True

    @property
    def scope_filters(self) -> dict[Scope, frozenset[str]]:
        return {
            Scope.TOPIC: self.topics,
            Scope.PERSONA: self.personas,
            Scope.PLATFORM: self.platforms,
        }

    @property
    def narrows_scope(self) -> bool:
        return any(self.scope_filters.values())


def filter_brands(
    record: MetricRecord,
    owner_name: str | None,
    allowed_competitor_names: Collection[str],
    empty_selection_means_all: bool = True,
) -> list[BrandMetricEntry]:
    """Keep the owner plus the allowed competitors, in record order.

    The owner is the entry flagged ``is_owner`` or, for records without the
    flag, the entry named ``owner_name``. With no allowed names,
    ``empty_selection_means_all`` decides between every brand and the owner alone.
    """
    entries = list(record.brand_metrics)
    owner = find_owner(entries, owner_name)

    if not allowed_competitor_names:
        if empty_selection_means_all:
            return entries
        return [owner] if owner is not None else []

    allowed = set(allowed_competitor_names)
    kept = [e for e in entries if e is owner or e.is_owner or e.brand_name in allowed]
    logger.debug(
        "Selection kept %d of %d brands (owner=%s)",
        len(kept),
        len(entries),
        owner.brand_name if owner is not None else None,
    )
    return kept


def _recency(record: MetricRecord) -> tuple:
    # Records without a timestamp sort first so any dated record wins
    return (record.last_calculated is not None, record.last_calculated or 0)


def select_records(records: Sequence[MetricRecord], selection: Selection) -> list[MetricRecord]:
    """Pick the records in view for ``selection``.

    With topic / persona / platform filters, the latest record of every
    matching ``(scope, scope_value)`` is returned, in first-seen order (the
    caller merges them). Without scope filters the most recently calculated
    ``overall`` record is returned.
    """
    if selection.narrows_scope:
        filters = selection.scope_filters
        latest: dict[tuple[Scope, str], MetricRecord] = {}
        for r in records:
            if r.scope_value is None or r.scope_value not in filters.get(r.scope, ()):
                continue
            key = (r.scope, r.scope_value)
            if key not in latest or _recency(r) > _recency(latest[key]):
                latest[key] = r
        return list(latest.values())

    overall = [r for r in records if r.scope == Scope.OVERALL]
    if not overall:
        return []
    return [max(overall, key=_recency)]


def apply_selection(
    record: MetricRecord,
    owner_name: str | None,
    selection: Selection,
) -> MetricRecord:
    """Copy of ``record`` narrowed to the selected brands."""
    kept = filter_brands(record, owner_name, selection.competitors, selection.empty_selection_means_all)
    return dataclasses.replace(record, brand_metrics=tuple(kept))
