"""Trending, stats and filter option schemas"""

from pydantic import BaseModel
from typing import Optional, List

from navigator.schemas.video import PaginationResponse, VideoResponse


class TrendingEntryResponse(BaseModel):
    """A ranked brawler or search query"""
    name: str
    count: int
    total_views: Optional[int] = None
    score: float


class TrendingListResponse(BaseModel):
    items: List[TrendingEntryResponse]
    pagination: PaginationResponse


class CreatorEntryResponse(BaseModel):
    id: str
    name: str
    url: str
    video_count: int
    total_views: int


class CreatorListResponse(BaseModel):
    creators: List[CreatorEntryResponse]
    pagination: PaginationResponse


class QueryListResponse(BaseModel):
    queries: List[TrendingEntryResponse]
    pagination: PaginationResponse


class StatsResponse(BaseModel):
    """Schema for catalogue statistics"""
    video_count: int
    trending_brawlers: List[TrendingEntryResponse]
    popular_creators: CreatorListResponse
    popular_queries: QueryListResponse


class FilterOption(BaseModel):
    id: str
    name: str


class FiltersResponse(BaseModel):
    """Available values for each search filter"""
    brawlers: List[FilterOption]
    game_modes: List[FilterOption]
    content_types: List[FilterOption]
    skill_levels: List[FilterOption]
    sort_options: List[FilterOption]


class PersonalizedRecommendationsResponse(BaseModel):
    videos: List[VideoResponse]
    explanation: str
    trending_brawlers: List[TrendingEntryResponse]
    popular_queries: List[TrendingEntryResponse]
