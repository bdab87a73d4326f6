"""Video detail and recommendation endpoints"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from navigator.api.dependencies import get_search_service, get_user_preferences
from navigator.core.errors import VideoNotFound
from navigator.core.preferences import UserPreferences
from navigator.core.search_service import ContentSearchService
from navigator.schemas.trends import PersonalizedRecommendationsResponse
from navigator.schemas.video import VideoDetailResponse

router = APIRouter()


@router.get("/videos/{youtube_id}", response_model=VideoDetailResponse)
async def get_video(
    youtube_id: str,
    prefs: UserPreferences = Depends(get_user_preferences),
    service: ContentSearchService = Depends(get_search_service),
):
    """Video details plus similar videos, boosted by the caller's preferred brawlers"""
    try:
        video, recommendations = await service.video_details(youtube_id, prefs.preferred_brawlers)
    except VideoNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Video {youtube_id} not found"
        )

    return {
        "video": video.to_dict(),
        "recommendations": [r.to_dict() for r in recommendations],
    }


@router.get("/recommendations", response_model=PersonalizedRecommendationsResponse)
async def get_recommendations(
    limit: Optional[int] = Query(None, ge=1, le=50),
    prefs: UserPreferences = Depends(get_user_preferences),
    service: ContentSearchService = Depends(get_search_service),
):
    """Personalized recommendations with an explanation"""
    recommendations = await service.personalized_recommendations(prefs, limit)
    return recommendations.to_dict()
