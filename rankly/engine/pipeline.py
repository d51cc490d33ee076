"""Engine pipeline: turns stored metric records into one ranked view.

Chains the engine steps in order:
  1. Select the scope records in view
  2. Filter each record's brands to owner + selected competitors
  3. Merge when more than one record is in view, then flag the owner by name
  4. Optionally recompute share metrics for the narrowed brand set
  5. Re-rank every ranked metric
  6. Compute percentage views per brand
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from rankly.engine.aggregator import combine_records, mark_owner
from rankly.engine.brand_resolver import resolve_owner
from rankly.engine.derived import (
    PositionDistribution,
    SentimentShare,
    position_distribution,
    sentiment_share,
    with_share_metrics,
)
from rankly.engine.ranking import rank_all
from rankly.engine.selection import Selection, apply_selection, select_records
from rankly.engine.types import NO_OWNER, BrandMetricEntry, MetricRecord, Scope

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineResult:
    """Ranked record plus the views formatters read from it."""

    record: MetricRecord
    owner: BrandMetricEntry = NO_OWNER
    records_in_view: int = 0
    position_distribution: dict[str, PositionDistribution] = field(default_factory=dict)
    sentiment_share: dict[str, SentimentShare] = field(default_factory=dict)

    @property
    def has_owner(self) -> bool:
        return self.owner is not NO_OWNER


def run_engine(
    records: Sequence[MetricRecord],
    owner_name: str | None,
    selection: Selection | None = None,
    recompute_shares: bool = False,
) -> EngineResult:
    """Run the full engine over the records available for one analysis."""
    selection = selection or Selection()

    in_view = select_records(records, selection)
    narrowed = [apply_selection(r, owner_name, selection) for r in in_view]

    if not narrowed:
        logger.info("No metric records in view (%d available)", len(records))
        empty_scope = Scope.FILTERED if selection.narrows_scope else Scope.OVERALL
        return EngineResult(record=MetricRecord(scope=empty_scope))

    record = combine_records(narrowed) if len(narrowed) > 1 else narrowed[0]

    entries = mark_owner(list(record.brand_metrics), owner_name)
    if recompute_shares:
        entries = with_share_metrics(entries)
    record = dataclasses.replace(record, brand_metrics=tuple(rank_all(entries)))

    owner = resolve_owner(record, owner_name)
    result = EngineResult(
        record=record,
        owner=owner,
        records_in_view=len(narrowed),
        position_distribution={e.brand_name: position_distribution(e) for e in record.brand_metrics},
        sentiment_share={e.brand_name: sentiment_share(e) for e in record.brand_metrics},
    )
    logger.debug(
        "Engine result: scope=%s brands=%d owner=%s",
        record.scope.value,
        record.total_brands,
        owner.brand_name or "-",
    )
    return result
