"""Database models package"""

from navigator.models.video import Video
from navigator.models.search_event import SearchHistory
from navigator.models.user_preference import UserPreference

__all__ = [
    "Video",
    "SearchHistory",
    "UserPreference"
]
