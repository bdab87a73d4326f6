"""Filter options and catalogue statistics"""

from fastapi import APIRouter, Depends, Query

from navigator.api.dependencies import get_search_service
from navigator.core.conversation.catalog import CONTENT_TYPES, SKILL_LEVEL_OPTIONS, SORT_OPTIONS
from navigator.core.search_service import ContentSearchService
from navigator.schemas.trends import FiltersResponse, StatsResponse

router = APIRouter()


@router.get("/filters", response_model=FiltersResponse)
async def get_filters(service: ContentSearchService = Depends(get_search_service)):
    """Values available for each search filter"""
    options = await service.filter_options()
    return {
        "brawlers": [{"id": b, "name": b} for b in options["brawlers"]],
        "game_modes": [{"id": m, "name": m} for m in options["game_modes"]],
        "content_types": CONTENT_TYPES,
        "skill_levels": SKILL_LEVEL_OPTIONS,
        "sort_options": SORT_OPTIONS,
    }


@router.get("/stats", response_model=StatsResponse)
async def get_stats(
    page: int = Query(1, ge=1),
    service: ContentSearchService = Depends(get_search_service),
):
    return await service.stats(page=page)
