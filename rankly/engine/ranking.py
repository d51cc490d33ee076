"""Rank Assigner: competition ranking over brand entries.

Ties share a rank and the next distinct value resumes at its 1-based sorted
position: values [80, 60, 60, 40] rank as [1, 2, 2, 4].
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from rankly.engine.types import BrandMetricEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankedMetric:
    """A metric field, the rank field it feeds, and its better direction."""

    metric_key: str
    rank_key: str
    higher_is_better: bool = True


RANKED_METRICS: tuple[RankedMetric, ...] = (
    RankedMetric("visibility_score", "visibility_rank"),
    RankedMetric("total_mentions", "mention_rank"),
    RankedMetric("share_of_voice", "share_of_voice_rank"),
    RankedMetric("depth_of_mention", "depth_rank"),
    RankedMetric("citation_share", "citation_share_rank"),
    RankedMetric("avg_position", "avg_position_rank", higher_is_better=False),
    # Position distribution
    RankedMetric("count_1st", "rank_1st"),
    RankedMetric("count_2nd", "rank_2nd"),
    RankedMetric("count_3rd", "rank_3rd"),
)


def competition_ranks(values: Sequence[float], higher_is_better: bool = True) -> list[int]:
    """Competition ranks for ``values``, returned in input order."""
    # sorted() is stable, so equal values keep their input order
    order = sorted(range(len(values)), key=lambda i: values[i], reverse=higher_is_better)

    ranks = [0] * len(values)
    current_rank = 1
    for position, index in enumerate(order):
        if position > 0 and values[index] != values[order[position - 1]]:
            current_rank = position + 1
        ranks[index] = current_rank
    return ranks


def assign_ranks(
    entries: Sequence[BrandMetricEntry],
    metric_key: str,
    rank_key: str,
    higher_is_better: bool = True,
) -> list[BrandMetricEntry]:
    """Return copies of ``entries`` (same order) with ``rank_key`` set from ``metric_key``.

    Missing or invalid metric values rank as 0.
    """
    values = [e.metric(metric_key) for e in entries]
    ranks = competition_ranks(values, higher_is_better)
    return [dataclasses.replace(e, **{rank_key: rank}) for e, rank in zip(entries, ranks)]


def rank_all(
    entries: Sequence[BrandMetricEntry],
    metrics: Sequence[RankedMetric] = RANKED_METRICS,
) -> list[BrandMetricEntry]:
    """Recompute every rank field in ``metrics`` over the same brand set."""
    ranked = list(entries)
    for m in metrics:
        ranked = assign_ranks(ranked, m.metric_key, m.rank_key, m.higher_is_better)
    logger.debug("Ranked %d brands on %d metrics", len(ranked), len(metrics))
    return ranked
