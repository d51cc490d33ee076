"""Core types for the Metrics Engine.

Engine values are frozen dataclasses: a record read from storage may be
cached and shared between requests, so every engine step returns new
values instead of writing into its inputs.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum

from rankly.engine.numeric import to_count, to_float


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Scope(str, Enum):
    """Analytical slice a MetricRecord represents."""

    OVERALL = "overall"
    PLATFORM = "platform"  # one LLM vendor: chatgpt, claude, gemini, perplexity
    TOPIC = "topic"
    PERSONA = "persona"
    PROMPT = "prompt"
    FILTERED = "filtered"  # synthesized by the Scope Aggregator, never persisted


# ---------------------------------------------------------------------------
# Field groups
# ---------------------------------------------------------------------------

RATE_FIELDS: tuple[str, ...] = (
    "visibility_score",
    "share_of_voice",
    "avg_position",
    "depth_of_mention",
    "citation_share",
    "sentiment_score",
    "sentiment_share",
)

RANK_FIELDS: tuple[str, ...] = (
    "visibility_rank",
    "mention_rank",
    "share_of_voice_rank",
    "avg_position_rank",
    "depth_rank",
    "citation_share_rank",
    "rank_1st",
    "rank_2nd",
    "rank_3rd",
)

COUNT_FIELDS: tuple[str, ...] = (
    "count_1st",
    "count_2nd",
    "count_3rd",
    "count_other",
    "total_appearances",
    "total_mentions",
    "brand_citations_total",
    "earned_citations_total",
    "social_citations_total",
    "total_citations",
)

SENTIMENT_BUCKETS: tuple[str, ...] = ("positive", "neutral", "negative", "mixed")


def camel(name: str) -> str:
    """snake_case -> camelCase (count_1st -> count1st, depth_of_mention -> depthOfMention)."""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _pick(doc: dict, name: str, default: object = None) -> object:
    """Read a key from a stored document in either camelCase or snake_case."""
    key = camel(name)
    if key in doc:
        return doc[key]
    return doc.get(name, default)


def _parse_datetime(value: object) -> datetime | None:
    """Parse a stored timestamp; naive values are taken as UTC."""
    if isinstance(value, str) and value:
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    if not isinstance(value, datetime):
        return None
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Data containers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SentimentBreakdown:
    """Mention counts per sentiment bucket."""

    positive: int = 0
    neutral: int = 0
    negative: int = 0
    mixed: int = 0

    @property
    def total(self) -> int:
        return self.positive + self.neutral + self.negative + self.mixed

    @classmethod
    def from_dict(cls, doc: dict | None) -> SentimentBreakdown:
        doc = doc or {}
        return cls(**{bucket: to_count(doc.get(bucket)) for bucket in SENTIMENT_BUCKETS})

    def to_dict(self) -> dict:
        return {bucket: getattr(self, bucket) for bucket in SENTIMENT_BUCKETS}


@dataclass(frozen=True)
class BrandMetricEntry:
    """One brand's computed performance within a scope."""

    brand_id: str = ""
    brand_name: str = ""
    is_owner: bool = False  # set upstream; authoritative when present

    # Rate metrics (averaged when scopes are merged)
    visibility_score: float = 0.0  # % of responses mentioning the brand
    share_of_voice: float = 0.0  # % of all brand mentions
    avg_position: float = 0.0  # mean list position, lower is better
    depth_of_mention: float = 0.0  # % of response words about the brand
    citation_share: float = 0.0  # % of all citations
    sentiment_score: float = 0.0  # -1.0 .. +1.0
    sentiment_share: float = 0.0  # % positive mentions

    # Ranks, 1 = best, 0 = not ranked yet
    visibility_rank: int = 0
    mention_rank: int = 0
    share_of_voice_rank: int = 0
    avg_position_rank: int = 0
    depth_rank: int = 0
    citation_share_rank: int = 0
    rank_1st: int = 0
    rank_2nd: int = 0
    rank_3rd: int = 0

    # Count metrics (summed when scopes are merged)
    count_1st: int = 0
    count_2nd: int = 0
    count_3rd: int = 0
    count_other: int = 0
    total_appearances: int = 0
    total_mentions: int = 0
    brand_citations_total: int = 0
    earned_citations_total: int = 0
    social_citations_total: int = 0
    total_citations: int = 0

    sentiment_breakdown: SentimentBreakdown = field(default_factory=SentimentBreakdown)

    def metric(self, key: str) -> float:
        """Numeric value of a metric field, 0.0 when missing or invalid."""
        return to_float(getattr(self, key, 0.0))

    @classmethod
    def from_dict(cls, doc: dict) -> BrandMetricEntry:
        """Build an entry from a stored document (camelCase or snake_case keys)."""
        values: dict = {
            "brand_id": str(_pick(doc, "brand_id") or ""),
            "brand_name": str(_pick(doc, "brand_name") or ""),
            "is_owner": bool(_pick(doc, "is_owner", False)),
            "sentiment_breakdown": SentimentBreakdown.from_dict(_pick(doc, "sentiment_breakdown")),
        }
        for name in RATE_FIELDS:
            values[name] = to_float(_pick(doc, name))
        for name in RANK_FIELDS + COUNT_FIELDS:
            values[name] = to_count(_pick(doc, name))
        return cls(**values)

    def to_dict(self) -> dict:
        """Serialize with camelCase keys for formatters and the API."""
        out: dict = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, SentimentBreakdown):
                value = value.to_dict()
            out[camel(f.name)] = value
        return out


@dataclass(frozen=True)
class MetricRecord:
    """Per-brand metrics for one (scope, scope_value) combination."""

    scope: Scope = Scope.OVERALL
    scope_value: str | None = None
    brand_metrics: tuple[BrandMetricEntry, ...] = ()
    total_tests: int = 0
    total_responses: int = 0
    last_calculated: datetime | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None

    @property
    def total_brands(self) -> int:
        return len(self.brand_metrics)

    @property
    def is_empty(self) -> bool:
        return not self.brand_metrics

    @classmethod
    def from_dict(cls, doc: dict) -> MetricRecord:
        """Build a record from a stored metrics document.

        Older documents carry ``totalPrompts`` instead of ``totalTests``.
        Unknown scopes fall back to ``overall``.
        """
        try:
            scope = Scope(_pick(doc, "scope", Scope.OVERALL.value))
        except ValueError:
            scope = Scope.OVERALL

        total_tests = _pick(doc, "total_tests")
        if total_tests is None:
            total_tests = _pick(doc, "total_prompts")

        scope_value = _pick(doc, "scope_value")
        return cls(
            scope=scope,
            scope_value=str(scope_value) if scope_value is not None else None,
            brand_metrics=tuple(BrandMetricEntry.from_dict(b) for b in (_pick(doc, "brand_metrics") or [])),
            total_tests=to_count(total_tests),
            total_responses=to_count(_pick(doc, "total_responses")),
            last_calculated=_parse_datetime(_pick(doc, "last_calculated")),
            date_from=_parse_datetime(_pick(doc, "date_from")),
            date_to=_parse_datetime(_pick(doc, "date_to")),
        )

    def to_dict(self) -> dict:
        return {
            "scope": self.scope.value,
            "scopeValue": self.scope_value,
            "brandMetrics": [b.to_dict() for b in self.brand_metrics],
            "totalTests": self.total_tests,
            "totalResponses": self.total_responses,
            "totalBrands": self.total_brands,
            "lastCalculated": self.last_calculated.isoformat() if self.last_calculated else None,
            "dateFrom": self.date_from.isoformat() if self.date_from else None,
            "dateTo": self.date_to.isoformat() if self.date_to else None,
        }


# Returned by the Brand Resolver when a record has no entries: "no data", not an error.
NO_OWNER = BrandMetricEntry()
