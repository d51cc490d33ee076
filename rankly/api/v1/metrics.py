"""Metrics engine API: ranked and filtered brand metrics for the dashboard."""

from fastapi import APIRouter, HTTPException

from rankly.schemas.metrics import (
    BrandLookupRequest,
    BrandMetricEntrySchema,
    FilteredMetricsRequest,
    FilteredMetricsResponse,
    OwnerRequest,
    OwnerResponse,
    RankRequest,
    RankResponse,
)
from rankly.services.metrics_service import (
    compute_filtered_metrics,
    lookup_brand,
    lookup_owner,
    rerank,
)

router = APIRouter(prefix="/metrics", tags=["metrics"])


@router.post("/filtered", response_model=FilteredMetricsResponse)
async def filtered_metrics(body: FilteredMetricsRequest):
    """Merge the selected scope records, narrow to the selected brands and re-rank.

    Returns the ranked record, the owner entry and per-brand percentage views.
    An empty result (no records in view) is still a 200 with no brands.
    """
    return compute_filtered_metrics(body)


@router.post("/ranks", response_model=RankResponse)
async def ranks(body: RankRequest):
    """Recompute competition ranks for every ranked metric."""
    return rerank(body)


@router.post("/owner", response_model=OwnerResponse)
async def owner(body: OwnerRequest):
    return lookup_owner(body)


@router.post("/brand", response_model=BrandMetricEntrySchema)
async def brand(body: BrandLookupRequest):
    """Find a brand by name: exact, case-insensitive, then substring match."""
    found = lookup_brand(body)
    if found is None:
        raise HTTPException(status_code=404, detail=f"Brand not found: {body.name}")
    return found
