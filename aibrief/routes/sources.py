"""
Source routes: raw aggregation, per-source health checks, default catalog.
"""

import asyncio
import logging
import time
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from ..aggregator import SourceAggregator
from ..catalog import default_sources
from ..config import get_aggregator
from ..models import Source
from ..schemas import (
    NewsItemResponse,
    RSSRequest,
    RSSResponse,
    SourceCheckRequest,
    SourceCheckResponse,
    SourceCheckResult,
    SourceResultResponse,
    SourceSchema,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["sources"])

SAMPLE_TITLE_COUNT = 3


# ─────────────────────────────────────────────────────────────
# Aggregation
# ─────────────────────────────────────────────────────────────

@router.post("/rss")
async def fetch_rss(
    request: RSSRequest,
    aggregator: Annotated[SourceAggregator, Depends(get_aggregator)],
) -> RSSResponse:
    """Fetch and merge recent items from the given sources."""
    if not request.sources:
        raise HTTPException(status_code=400, detail="No sources provided.")

    result = await aggregator.fetch_recent(
        [s.to_source() for s in request.sources],
        request.hours,
    )
    return RSSResponse(
        items=[NewsItemResponse.from_item(i) for i in result.items],
        results=[SourceResultResponse.from_result(r) for r in result.results],
    )


# ─────────────────────────────────────────────────────────────
# Health Check
# ─────────────────────────────────────────────────────────────

async def check_source(aggregator: SourceAggregator, source: Source, hours: float) -> SourceCheckResult:
    """Fetch one source on its own and time it."""
    start = time.monotonic()
    result = await aggregator.fetch_recent([source], hours)
    elapsed_ms = int((time.monotonic() - start) * 1000)

    outcome = result.results[0]
    sample_titles = [
        item.title for item in result.items if not item.is_placeholder
    ][:SAMPLE_TITLE_COUNT]

    return SourceCheckResult(
        **SourceResultResponse.from_result(outcome).model_dump(),
        response_time_ms=elapsed_ms,
        sample_titles=sample_titles,
    )


@router.post("/source-check")
async def source_check(
    request: SourceCheckRequest,
    aggregator: Annotated[SourceAggregator, Depends(get_aggregator)],
) -> SourceCheckResponse:
    """Check each source independently, reporting timing and sample titles."""
    if not request.sources:
        raise HTTPException(status_code=400, detail="No sources provided.")

    results = await asyncio.gather(
        *(check_source(aggregator, s.to_source(), request.hours) for s in request.sources)
    )
    failed = sum(1 for r in results if r.status == "failed")
    if failed:
        logger.info(f"Source check: {failed} of {len(results)} sources failed")
    return SourceCheckResponse(results=list(results))


# ─────────────────────────────────────────────────────────────
# Catalog
# ─────────────────────────────────────────────────────────────

@router.get("/sources/catalog")
async def source_catalog() -> list[SourceSchema]:
    """Default source catalog."""
    return [SourceSchema.from_source(s) for s in default_sources()]
