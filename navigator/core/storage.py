"""Storage collaborator interface and the in-memory implementation"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Protocol, Sequence

import structlog

from navigator.core.preferences import UserPreferences
from navigator.core.search.query_builder import SearchQuery, execute_in_memory
from navigator.core.search.records import SearchEvent, VideoRecord, ensure_utc

logger = structlog.get_logger()


@dataclass(frozen=True)
class StoreResult:
    """One executed search page plus the total match count"""
    videos: List[VideoRecord]
    total: int


class VideoStore(Protocol):
    """
    What the service layer needs from storage.

    Implementations execute predicates, they never build them. A method
    returning None means no data was received; the service treats that as
    a storage failure, not as an empty result.
    """

    async def search(self, query: SearchQuery) -> Optional[StoreResult]: ...

    async def get_video(self, youtube_id: str) -> Optional[VideoRecord]: ...

    async def recommendation_candidates(self, exclude_id: str) -> Optional[List[VideoRecord]]: ...

    async def videos_published_since(self, since: Optional[datetime]) -> Optional[List[VideoRecord]]: ...

    async def search_events_since(self, since: datetime) -> Optional[List[SearchEvent]]: ...

    async def record_search(self, event: SearchEvent) -> None: ...

    async def get_preferences(
        self, user_id: Optional[str], session_id: Optional[str]
    ) -> Optional[UserPreferences]: ...

    async def save_preferences(self, prefs: UserPreferences) -> UserPreferences: ...

    async def count_videos(self) -> Optional[int]: ...

    async def close(self) -> None: ...


class InMemoryVideoStore:
    """
    Dict-backed store for demo mode and tests.

    Evaluates predicates with the same semantics the SQL store compiles
    them to (text search is a weighted term match instead of ts_rank).
    """

    def __init__(
        self,
        videos: Iterable[VideoRecord] = (),
        events: Iterable[SearchEvent] = (),
    ):
        self._videos: Dict[str, VideoRecord] = {}
        for video in videos:
            self.upsert_video(video)
        self._events: List[SearchEvent] = list(events)
        self._preferences: List[UserPreferences] = []

    def upsert_video(self, video: VideoRecord) -> None:
        self._videos[video.youtube_id] = video

    @property
    def videos(self) -> Sequence[VideoRecord]:
        return list(self._videos.values())

    async def search(self, query: SearchQuery) -> Optional[StoreResult]:
        page, total = execute_in_memory(query, self.videos)
        return StoreResult(videos=page, total=total)

    async def get_video(self, youtube_id: str) -> Optional[VideoRecord]:
        return self._videos.get(youtube_id)

    async def recommendation_candidates(self, exclude_id: str) -> Optional[List[VideoRecord]]:
        return [v for v in self.videos if v.youtube_id != exclude_id]

    async def videos_published_since(self, since: Optional[datetime]) -> Optional[List[VideoRecord]]:
        if since is None:
            return list(self.videos)
        since = ensure_utc(since)
        return [v for v in self.videos if v.published_at >= since]

    async def search_events_since(self, since: datetime) -> Optional[List[SearchEvent]]:
        since = ensure_utc(since)
        return [e for e in self._events if ensure_utc(e.timestamp) >= since]

    async def record_search(self, event: SearchEvent) -> None:
        self._events.append(event)
        logger.debug("Saved search query", query=event.query, user_id=event.user_id)

    def _find_preferences(self, user_id: Optional[str], session_id: Optional[str]) -> Optional[int]:
        for index, prefs in enumerate(self._preferences):
            if user_id and prefs.user_id == user_id:
                return index
            if session_id and prefs.session_id == session_id:
                return index
        return None

    async def get_preferences(
        self, user_id: Optional[str], session_id: Optional[str]
    ) -> Optional[UserPreferences]:
        index = self._find_preferences(user_id, session_id)
        return None if index is None else self._preferences[index]

    async def save_preferences(self, prefs: UserPreferences) -> UserPreferences:
        index = self._find_preferences(prefs.user_id, prefs.session_id)
        if index is None:
            self._preferences.append(prefs)
            return prefs
        existing = self._preferences[index]
        merged = replace(
            prefs,
            user_id=prefs.user_id or existing.user_id,
            session_id=prefs.session_id or existing.session_id,
        )
        self._preferences[index] = merged
        return merged

    async def count_videos(self) -> Optional[int]:
        return len(self._videos)

    async def close(self) -> None:
        return None
