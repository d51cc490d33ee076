"""Scope Aggregator.

Merges metric records computed for different scopes (several topics,
personas or platforms) into one synthetic ``filtered`` record:

  - rate metrics (scores, shares, positions) are averaged over the scopes
    where the brand actually appears
  - count metrics and the sentiment breakdown are summed
  - ranks from the source records are discarded and recomputed

A brand missing from a scope contributes nothing to that scope: it adds
zero to the sums and does not increase its averaging denominator.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from rankly.core.config import settings
from rankly.engine.ranking import rank_all
from rankly.engine.types import (
    COUNT_FIELDS,
    RATE_FIELDS,
    SENTIMENT_BUCKETS,
    BrandMetricEntry,
    MetricRecord,
    Scope,
    SentimentBreakdown,
)

logger = logging.getLogger(__name__)


@dataclass
class _BrandAccumulator:
    """Running sums for one brand across the merged records."""

    brand_id: str
    brand_name: str
    is_owner: bool = False
    occurrences: int = 0
    rates: dict[str, float] = field(default_factory=lambda: dict.fromkeys(RATE_FIELDS, 0.0))
    counts: dict[str, int] = field(default_factory=lambda: dict.fromkeys(COUNT_FIELDS, 0))
    sentiment: dict[str, int] = field(default_factory=lambda: dict.fromkeys(SENTIMENT_BUCKETS, 0))

    def add(self, entry: BrandMetricEntry) -> None:
        self.occurrences += 1
        self.is_owner = self.is_owner or entry.is_owner
        if not self.brand_id:
            self.brand_id = entry.brand_id
        for name in RATE_FIELDS:
            self.rates[name] += entry.metric(name)
        for name in COUNT_FIELDS:
            self.counts[name] += getattr(entry, name)
        for bucket in SENTIMENT_BUCKETS:
            self.sentiment[bucket] += getattr(entry.sentiment_breakdown, bucket)

    def build(self) -> BrandMetricEntry:
        averages = {
            name: round(
                total / self.occurrences if self.occurrences else 0.0,
                settings.depth_precision if name == "depth_of_mention" else settings.rate_precision,
            )
            for name, total in self.rates.items()
        }
        return BrandMetricEntry(
            brand_id=self.brand_id,
            brand_name=self.brand_name,
            is_owner=self.is_owner,
            sentiment_breakdown=SentimentBreakdown(**self.sentiment),
            **averages,
            **self.counts,
        )


def merge_brand_metrics(records: Sequence[MetricRecord]) -> list[BrandMetricEntry]:
    """Merge brand entries across records by brand name, in first-seen order. Ranks are left unset."""
    merged: dict[str, _BrandAccumulator] = {}
    for record in records:
        for entry in record.brand_metrics:
            acc = merged.get(entry.brand_name)
            if acc is None:
                acc = merged[entry.brand_name] = _BrandAccumulator(entry.brand_id, entry.brand_name)
            acc.add(entry)
    return [acc.build() for acc in merged.values()]


def mark_owner(entries: list[BrandMetricEntry], owner_name: str | None) -> list[BrandMetricEntry]:
    """Flag the owner by name when no entry carries the ownership flag."""
    if not owner_name or any(e.is_owner for e in entries):
        return entries
    return [dataclasses.replace(e, is_owner=True) if e.brand_name == owner_name else e for e in entries]


def combine_records(records: Sequence[MetricRecord]) -> MetricRecord:
    """Merge non-empty ``records`` into one unranked ``filtered`` record."""
    calculated = [r.last_calculated for r in records if r.last_calculated is not None]
    date_from = [r.date_from for r in records if r.date_from is not None]
    date_to = [r.date_to for r in records if r.date_to is not None]

    result = MetricRecord(
        scope=Scope.FILTERED,
        scope_value=",".join(r.scope_value for r in records if r.scope_value) or None,
        brand_metrics=tuple(merge_brand_metrics(records)),
        total_tests=sum(r.total_tests for r in records),
        total_responses=sum(r.total_responses for r in records),
        last_calculated=max(calculated) if calculated else None,
        date_from=min(date_from) if date_from else None,
        date_to=max(date_to) if date_to else None,
    )
    logger.info(
        "Aggregated %d records into %d brands (tests=%d, responses=%d)",
        len(records),
        result.total_brands,
        result.total_tests,
        result.total_responses,
        extra={"scope": result.scope.value, "records": len(records), "brands": result.total_brands},
    )
    return result


def aggregate(
    records: Sequence[MetricRecord],
    owner_name: str | None,
    fallback: MetricRecord | None = None,
) -> MetricRecord:
    """Merge ``records`` into one re-ranked ``filtered`` record.

    With no records, ``fallback`` is returned unchanged (an empty filtered
    record when no fallback is given).
    """
    if not records:
        logger.debug("Nothing to aggregate, returning fallback record")
        return fallback if fallback is not None else MetricRecord(scope=Scope.FILTERED)

    merged = combine_records(records)
    entries = rank_all(mark_owner(list(merged.brand_metrics), owner_name))
    return dataclasses.replace(merged, brand_metrics=tuple(entries))
