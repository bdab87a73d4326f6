"""Trending API endpoints"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from navigator.api.dependencies import get_search_service
from navigator.core.search_service import ContentSearchService
from navigator.schemas.trends import CreatorListResponse, TrendingListResponse

router = APIRouter()


@router.get("/brawlers", response_model=TrendingListResponse)
async def trending_brawlers(
    days: Optional[int] = Query(None, ge=1, le=365),
    limit: int = Query(10, ge=1, le=50),
    page: int = Query(1, ge=1),
    service: ContentSearchService = Depends(get_search_service),
):
    """Brawlers ranked by recent videos and their views"""
    entries, page_info = await service.trending_brawlers(days=days, limit=limit, page=page)
    return {"items": [e.to_dict() for e in entries], "pagination": page_info.to_dict()}


@router.get("/queries", response_model=TrendingListResponse)
async def popular_queries(
    days: Optional[int] = Query(None, ge=1, le=365),
    limit: int = Query(10, ge=1, le=50),
    page: int = Query(1, ge=1),
    service: ContentSearchService = Depends(get_search_service),
):
    """Most searched free-text queries"""
    entries, page_info = await service.popular_queries(days=days, limit=limit, page=page)
    return {"items": [e.to_dict() for e in entries], "pagination": page_info.to_dict()}


@router.get("/creators", response_model=CreatorListResponse)
async def popular_creators(
    limit: int = Query(10, ge=1, le=50),
    page: int = Query(1, ge=1),
    service: ContentSearchService = Depends(get_search_service),
):
    """Creators ranked by total views"""
    creators, page_info = await service.popular_creators(limit=limit, page=page)
    return {"creators": [c.to_dict() for c in creators], "pagination": page_info.to_dict()}
