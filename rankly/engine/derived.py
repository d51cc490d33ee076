"""Derived-Metric Calculator.

Turns raw counts into percentage views:
  - Position distribution: count_1st / count_2nd / count_3rd / count_other
    as % of the brand's ranked appearances
  - Sentiment share: breakdown buckets as % of the brand's rated mentions
  - Share metrics across a brand set:
      share_of_voice(b) = total_mentions(b) / sum(total_mentions) * 100
      citation_share(b) = total_citations(b) / sum(total_citations) * 100

Every division by a zero total yields 0, never NaN or Infinity.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence
from dataclasses import dataclass

from rankly.engine.numeric import percentage
from rankly.engine.types import BrandMetricEntry


@dataclass(frozen=True)
class PositionDistribution:
    first_pct: float = 0.0
    second_pct: float = 0.0
    third_pct: float = 0.0
    other_pct: float = 0.0

    def to_dict(self) -> dict:
        return {
            "firstPct": self.first_pct,
            "secondPct": self.second_pct,
            "thirdPct": self.third_pct,
            "otherPct": self.other_pct,
        }


@dataclass(frozen=True)
class SentimentShare:
    positive_pct: float = 0.0
    neutral_pct: float = 0.0
    negative_pct: float = 0.0
    mixed_pct: float = 0.0

    def to_dict(self) -> dict:
        return {
            "positivePct": self.positive_pct,
            "neutralPct": self.neutral_pct,
            "negativePct": self.negative_pct,
            "mixedPct": self.mixed_pct,
        }


def position_distribution(entry: BrandMetricEntry) -> PositionDistribution:
    """Percentage of appearances at rank 1, 2, 3 and below."""
    total = entry.count_1st + entry.count_2nd + entry.count_3rd + entry.count_other
    return PositionDistribution(
        first_pct=percentage(entry.count_1st, total),
        second_pct=percentage(entry.count_2nd, total),
        third_pct=percentage(entry.count_3rd, total),
        other_pct=percentage(entry.count_other, total),
    )


def sentiment_share(entry: BrandMetricEntry) -> SentimentShare:
    """Percentage of mentions per sentiment bucket."""
    b = entry.sentiment_breakdown
    total = b.total
    return SentimentShare(
        positive_pct=percentage(b.positive, total),
        neutral_pct=percentage(b.neutral, total),
        negative_pct=percentage(b.negative, total),
        mixed_pct=percentage(b.mixed, total),
    )


def with_share_metrics(entries: Sequence[BrandMetricEntry]) -> list[BrandMetricEntry]:
    """Recompute share of voice, citation share and positive sentiment share from raw totals.

    Shares are relative to the given brand set, so call this after the set
    has been narrowed by the Selection Filter.
    """
    total_mentions = sum(e.total_mentions for e in entries)
    total_citations = sum(e.total_citations for e in entries)
    return [
        dataclasses.replace(
            e,
            share_of_voice=percentage(e.total_mentions, total_mentions),
            citation_share=percentage(e.total_citations, total_citations),
            sentiment_share=sentiment_share(e).positive_pct,
        )
        for e in entries
    ]
