"""Search API endpoints"""

import time
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, Query

from navigator.api.dependencies import Identity, get_identity, get_search_service
from navigator.core.errors import UpstreamFailure
from navigator.core.search_service import ContentSearchService
from navigator.schemas.video import SearchResponse
from navigator.utils.metrics import record_metric

logger = structlog.get_logger()

router = APIRouter()


@router.get("/search", response_model=SearchResponse)
async def search_videos(
    query: Optional[str] = Query(None),
    brawlers: List[str] = Query([]),
    game_modes: List[str] = Query([], alias="gameModes"),
    content_type: List[str] = Query([], alias="contentType"),
    skill_level: Optional[str] = Query(None, alias="skillLevel"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    min_views: Optional[str] = Query(None, alias="minViews"),
    max_duration: Optional[str] = Query(None, alias="maxDuration"),
    date_from: Optional[str] = Query(None, alias="dateFrom"),
    date_to: Optional[str] = Query(None, alias="dateTo"),
    channel_id: Optional[str] = Query(None, alias="channelId"),
    identity: Identity = Depends(get_identity),
    service: ContentSearchService = Depends(get_search_service),
):
    """
    Filtered, sorted and paginated video search.

    Numeric parameters are read leniently: malformed values fall back to
    defaults instead of failing the request.
    """
    started = time.perf_counter()

    result = await service.search({
        "query": query,
        "brawlers": brawlers,
        "game_modes": game_modes,
        "content_types": content_type,
        "skill_level": skill_level,
        "sort_by": sort_by,
        "page": page,
        "page_size": limit,
        "min_views": min_views,
        "max_duration": max_duration,
        "date_from": date_from,
        "date_to": date_to,
        "creator_id": channel_id,
    })

    # Search analytics must not fail the search itself
    try:
        await service.record_search(result.search_filter, identity.user_id, identity.session_id)
    except UpstreamFailure as e:
        logger.warning("Failed to record search query", query=query, error=e.message)

    processing_time_ms = round((time.perf_counter() - started) * 1000, 2)
    record_metric(
        "search_processing",
        processing_time_ms,
        user_id=identity.user_id,
        results_count=len(result.videos),
        total_results=result.page_info.total_matches,
        brawlers_count=len(result.search_filter.brawlers),
        game_modes_count=len(result.search_filter.game_modes),
        sort_by=result.search_filter.sort_by,
    )

    return {**result.to_dict(), "processing_time_ms": processing_time_ms}
