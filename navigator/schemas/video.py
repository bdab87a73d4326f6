"""Video and search Pydantic schemas"""

from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class CreatorResponse(BaseModel):
    id: str
    name: str = ""
    url: str = ""


class KeyMomentResponse(BaseModel):
    time: int
    title: str


class VideoResponse(BaseModel):
    """Schema for a video in search results"""
    youtube_id: str
    title: str
    description: str = ""
    creator: CreatorResponse
    published_at: datetime
    duration: int = 0
    brawlers: List[str] = []
    game_modes: List[str] = []
    content_types: List[str] = []
    skill_level: str = ""
    view_count: int = 0
    like_count: int = 0
    comment_count: Optional[int] = None
    popularity: float = 0.0
    recency: float = 0.0
    key_moments: List[KeyMomentResponse] = []
    text_score: Optional[float] = None


class RankedVideoResponse(VideoResponse):
    """Schema for a recommended video with its ranking scores"""
    similarity_score: float
    final_score: float


class PaginationResponse(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class SearchResponse(BaseModel):
    """Schema for search endpoint response"""
    videos: List[VideoResponse]
    pagination: PaginationResponse
    processing_time_ms: float


class VideoDetailResponse(BaseModel):
    video: VideoResponse
    recommendations: List[RankedVideoResponse]
