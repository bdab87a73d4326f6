"""Pydantic schemas package"""

from navigator.schemas.video import (
    CreatorResponse,
    VideoResponse,
    RankedVideoResponse,
    PaginationResponse,
    SearchResponse,
    VideoDetailResponse
)
from navigator.schemas.trends import (
    TrendingEntryResponse,
    TrendingListResponse,
    CreatorListResponse,
    QueryListResponse,
    StatsResponse,
    FiltersResponse,
    PersonalizedRecommendationsResponse
)
from navigator.schemas.conversation import (
    ConversationRequest,
    ConversationResponse,
    PreferencesResponse,
    PreferencesUpdate,
    MessageResponse
)

__all__ = [
    "CreatorResponse",
    "VideoResponse",
    "RankedVideoResponse",
    "PaginationResponse",
    "SearchResponse",
    "VideoDetailResponse",
    "TrendingEntryResponse",
    "TrendingListResponse",
    "CreatorListResponse",
    "QueryListResponse",
    "StatsResponse",
    "FiltersResponse",
    "PersonalizedRecommendationsResponse",
    "ConversationRequest",
    "ConversationResponse",
    "PreferencesResponse",
    "PreferencesUpdate",
    "MessageResponse"
]
