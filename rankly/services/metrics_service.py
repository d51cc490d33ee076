"""Metrics engine service.

Maps wire schemas to engine types, runs the engine and maps the result
back. All business logic lives in ``rankly.engine``; this layer only adds
server defaults, logging and Prometheus counters.
"""

import logging

from rankly.core.config import settings
from rankly.core.metrics import record_engine_run
from rankly.engine.brand_resolver import find_brand, resolve_owner
from rankly.engine.pipeline import EngineResult, run_engine
from rankly.engine.ranking import rank_all
from rankly.engine.selection import Selection
from rankly.engine.types import NO_OWNER, BrandMetricEntry, MetricRecord
from rankly.schemas.metrics import (
    BrandLookupRequest,
    BrandMetricEntrySchema,
    FilteredMetricsRequest,
    FilteredMetricsResponse,
    MetricRecordSchema,
    OwnerRequest,
    OwnerResponse,
    PositionDistributionSchema,
    RankRequest,
    RankResponse,
    SelectionSchema,
    SentimentShareSchema,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Conversions
# ---------------------------------------------------------------------------


def to_engine_entry(schema: BrandMetricEntrySchema) -> BrandMetricEntry:
    return BrandMetricEntry.from_dict(schema.model_dump())


def to_engine_record(schema: MetricRecordSchema) -> MetricRecord:
    return MetricRecord.from_dict(schema.model_dump())


def to_entry_schema(entry: BrandMetricEntry) -> BrandMetricEntrySchema:
    return BrandMetricEntrySchema.model_validate(entry.to_dict())


def to_record_schema(record: MetricRecord) -> MetricRecordSchema:
    return MetricRecordSchema.model_validate(record.to_dict())


def to_selection(schema: SelectionSchema) -> Selection:
    """Build an engine Selection, applying the server default for an empty competitor list."""
    empty_means_all = schema.empty_selection_means_all
    if empty_means_all is None:
        empty_means_all = settings.empty_selection_means_all
    return Selection(
        topics=frozenset(schema.topics),
        personas=frozenset(schema.personas),
        platforms=frozenset(schema.platforms),
        competitors=frozenset(schema.competitors),
        empty_selection_means_all=empty_means_all,
    )


def to_filtered_response(result: EngineResult) -> FilteredMetricsResponse:
    return FilteredMetricsResponse(
        record=to_record_schema(result.record),
        owner=to_entry_schema(result.owner) if result.has_owner else None,
        records_in_view=result.records_in_view,
        position_distribution={
            name: PositionDistributionSchema.model_validate(d.to_dict())
            for name, d in result.position_distribution.items()
        },
        sentiment_share={
            name: SentimentShareSchema.model_validate(s.to_dict()) for name, s in result.sentiment_share.items()
        },
    )


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


def compute_filtered_metrics(request: FilteredMetricsRequest) -> FilteredMetricsResponse:
    """Run the engine for one dashboard request."""
    records = [to_engine_record(r) for r in request.records]
    selection = to_selection(request.selection)
    recompute = settings.recompute_shares if request.recompute_shares is None else request.recompute_shares

    result = run_engine(records, request.owner_name, selection, recompute_shares=recompute)
    record_engine_run(result.record.scope.value, result.records_in_view)

    logger.info(
        "Filtered metrics: %d/%d records in view, %d brands, owner=%s",
        result.records_in_view,
        len(records),
        result.record.total_brands,
        result.owner.brand_name if result.has_owner else None,
        extra={
            "scope": result.record.scope.value,
            "records": result.records_in_view,
            "brands": result.record.total_brands,
        },
    )
    return to_filtered_response(result)


def rerank(request: RankRequest) -> RankResponse:
    """Recompute every rank field over the given brand set."""
    ranked = rank_all([to_engine_entry(e) for e in request.brand_metrics])
    return RankResponse(brand_metrics=[to_entry_schema(e) for e in ranked])


def lookup_owner(request: OwnerRequest) -> OwnerResponse:
    owner = resolve_owner(to_engine_record(request.record), request.owner_name)
    if owner is NO_OWNER:
        return OwnerResponse(owner=None, found=False)
    return OwnerResponse(owner=to_entry_schema(owner), found=True)


def lookup_brand(request: BrandLookupRequest) -> BrandMetricEntrySchema | None:
    """Loose brand-name lookup; None when nothing matches."""
    found = find_brand([to_engine_entry(e) for e in request.brand_metrics], request.name)
    return to_entry_schema(found) if found is not None else None
