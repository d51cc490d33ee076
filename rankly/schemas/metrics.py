"""Pydantic request/response models for the metrics engine API.

Wire format is camelCase, matching the stored metric documents the
dashboard already consumes.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rankly.engine.types import Scope, camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=camel, populate_by_name=True)


class SentimentBreakdownSchema(CamelModel):
    positive: int = Field(default=0, ge=0)
    neutral: int = Field(default=0, ge=0)
    negative: int = Field(default=0, ge=0)
    mixed: int = Field(default=0, ge=0)


class BrandMetricEntrySchema(CamelModel):
    brand_id: str = ""
    brand_name: str
    is_owner: bool = False

    visibility_score: float = 0.0
    share_of_voice: float = 0.0
    avg_position: float = 0.0
    depth_of_mention: float = 0.0
    citation_share: float = 0.0
    sentiment_score: float = Field(default=0.0, ge=-1, le=1)
    sentiment_share: float = 0.0

    visibility_rank: int = Field(default=0, ge=0)
    mention_rank: int = Field(default=0, ge=0)
    share_of_voice_rank: int = Field(default=0, ge=0)
    avg_position_rank: int = Field(default=0, ge=0)
    depth_rank: int = Field(default=0, ge=0)
    citation_share_rank: int = Field(default=0, ge=0)
    rank_1st: int = Field(default=0, ge=0)
    rank_2nd: int = Field(default=0, ge=0)
    rank_3rd: int = Field(default=0, ge=0)

    count_1st: int = Field(default=0, ge=0)
    count_2nd: int = Field(default=0, ge=0)
    count_3rd: int = Field(default=0, ge=0)
    count_other: int = Field(default=0, ge=0)
    total_appearances: int = Field(default=0, ge=0)
    total_mentions: int = Field(default=0, ge=0)
    brand_citations_total: int = Field(default=0, ge=0)
    earned_citations_total: int = Field(default=0, ge=0)
    social_citations_total: int = Field(default=0, ge=0)
    total_citations: int = Field(default=0, ge=0)

    sentiment_breakdown: SentimentBreakdownSchema = Field(default_factory=SentimentBreakdownSchema)


class MetricRecordSchema(CamelModel):
    scope: Scope = Scope.OVERALL
    scope_value: str | None = None
    brand_metrics: list[BrandMetricEntrySchema] = Field(default_factory=list)
    total_tests: int = Field(default=0, ge=0)
    total_responses: int = Field(default=0, ge=0)
    total_brands: int = Field(default=0, ge=0)
    last_calculated: datetime | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None

    @field_validator("brand_metrics")
    @classmethod
    def validate_unique_brand_names(cls, v: list[BrandMetricEntrySchema]) -> list[BrandMetricEntrySchema]:
        """Brand names are unique within one record"""
        seen: set[str] = set()
        for entry in v:
            if entry.brand_name in seen:
                raise ValueError(f"Duplicate brand name: {entry.brand_name}")
            seen.add(entry.brand_name)
        return v


class SelectionSchema(CamelModel):
    topics: list[str] = Field(default_factory=list)
    personas: list[str] = Field(default_factory=list)
    platforms: list[str] = Field(default_factory=list)
    competitors: list[str] = Field(default_factory=list, description="Selected competitor brand names")
    empty_selection_means_all: bool | None = Field(
        default=None,
        description="Empty competitor list keeps every brand (true) or only the owner (false); "
        "defaults to the server setting",
    )


class PositionDistributionSchema(CamelModel):
    first_pct: float = Field(ge=0, le=100)
    second_pct: float = Field(ge=0, le=100)
    third_pct: float = Field(ge=0, le=100)
    other_pct: float = Field(ge=0, le=100)


class SentimentShareSchema(CamelModel):
    positive_pct: float = Field(ge=0, le=100)
    neutral_pct: float = Field(ge=0, le=100)
    negative_pct: float = Field(ge=0, le=100)
    mixed_pct: float = Field(ge=0, le=100)


# --- Requests / responses ---


class FilteredMetricsRequest(CamelModel):
    records: list[MetricRecordSchema] = Field(default_factory=list)
    owner_name: str | None = None
    selection: SelectionSchema = Field(default_factory=SelectionSchema)
    recompute_shares: bool | None = None


class FilteredMetricsResponse(CamelModel):
    record: MetricRecordSchema
    owner: BrandMetricEntrySchema | None = None
    records_in_view: int = Field(ge=0)
    position_distribution: dict[str, PositionDistributionSchema]
    sentiment_share: dict[str, SentimentShareSchema]


class RankRequest(CamelModel):
    brand_metrics: list[BrandMetricEntrySchema]


class RankResponse(CamelModel):
    brand_metrics: list[BrandMetricEntrySchema]


class OwnerRequest(CamelModel):
    record: MetricRecordSchema
    owner_name: str | None = None


class OwnerResponse(CamelModel):
    owner: BrandMetricEntrySchema | None = None
    found: bool


class BrandLookupRequest(CamelModel):
    brand_metrics: list[BrandMetricEntrySchema]
    name: str = Field(min_length=1)
