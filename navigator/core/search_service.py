"""Search service: runs the pure search core against an injected video store"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, TypeVar

import structlog

from navigator.core.errors import StorageUnavailable, VideoNotFound
from navigator.core.preferences import UserPreferences
from navigator.core.search import trending
from navigator.core.search.filters import SearchFilter, normalize_filter
from navigator.core.search.pagination import PageInfo, paginate
from navigator.core.search.query_builder import build_query
from navigator.core.search.records import SearchEvent, VideoRecord
from navigator.core.search.scorer import RankedResult, RecommendationScorer
from navigator.core.storage import VideoStore

logger = structlog.get_logger()

T = TypeVar("T")

# Used when a user has no preferred content types yet
DEFAULT_RECOMMENDED_CONTENT_TYPES = ("gameplay", "tutorial")


@dataclass(frozen=True)
class SearchResult:
    """One page of search results"""
    videos: List[VideoRecord]
    page_info: PageInfo
    search_filter: SearchFilter

    def to_dict(self) -> Dict[str, Any]:
        return {
            "videos": [v.to_dict() for v in self.videos],
            "pagination": self.page_info.to_dict(),
        }


@dataclass(frozen=True)
class PersonalizedRecommendations:
    videos: List[VideoRecord]
    explanation: str
    trending_brawlers: List[trending.TrendingEntry] = field(default_factory=list)
    popular_queries: List[trending.TrendingEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "videos": [v.to_dict() for v in self.videos],
            "explanation": self.explanation,
            "trending_brawlers": [e.to_dict() for e in self.trending_brawlers],
            "popular_queries": [e.to_dict() for e in self.popular_queries],
        }


def explain_recommendations(
    target_brawlers: Iterable[str],
    game_modes: Iterable[str],
    preferred_brawlers: Iterable[str],
) -> str:
    """Human-readable reason for a set of personalized recommendations."""
    target_brawlers = list(target_brawlers)
    game_modes = list(game_modes)
    preferred_brawlers = list(preferred_brawlers)

    explanation = "Here are some Brawl Stars videos you might enjoy"
    if target_brawlers:
        explanation += f" featuring {' and '.join(target_brawlers)}"
    if game_modes:
        explanation += f" in {' and '.join(game_modes)}"
    explanation += "."

    if preferred_brawlers:
        explanation += (
            " These recommendations are based on your interest in "
            f"{', '.join(preferred_brawlers[:3])}."
        )
    return explanation


class ContentSearchService:
    """
    Orchestrates search, recommendations and trending over a VideoStore.

    The service never reads module-level connections: the store, the scorer
    and the clock are all passed in. Any store call that comes back with no
    data raises StorageUnavailable instead of pretending the result is empty.
    """

    def __init__(
        self,
        store: VideoStore,
        scorer: Optional[RecommendationScorer] = None,
        default_page_size: int = 10,
        max_page_size: int = 50,
        recommendation_limit: int = 6,
        trending_window_days: int = trending.DEFAULT_WINDOW_DAYS,
        trending_limit: int = trending.DEFAULT_TRENDING_LIMIT,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.scorer = scorer or RecommendationScorer()
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size
        self.recommendation_limit = recommendation_limit
        self.trending_window_days = trending_window_days
        self.trending_limit = trending_limit
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    @classmethod
    def from_settings(cls, store: VideoStore, settings) -> "ContentSearchService":
        return cls(
            store,
            default_page_size=settings.search_default_page_size,
            max_page_size=settings.search_max_page_size,
            recommendation_limit=settings.recommendation_limit,
            trending_window_days=settings.trending_window_days,
            trending_limit=settings.trending_limit,
        )

    @staticmethod
    def _require(value: Optional[T], operation: str) -> T:
        if value is None:
            logger.error("Store returned no data", operation=operation)
            raise StorageUnavailable(f"No data received from store ({operation})")
        return value

    def normalize(self, raw: Optional[Mapping[str, Any]] = None) -> SearchFilter:
        return normalize_filter(
            raw,
            default_page_size=self.default_page_size,
            max_page_size=self.max_page_size,
        )

    async def search(self, raw: Optional[Mapping[str, Any]] = None) -> SearchResult:
        """Normalize loosely typed parameters and run the search."""
        return await self.run_search(self.normalize(raw))

    async def run_search(self, search_filter: SearchFilter) -> SearchResult:
        query = build_query(search_filter)
        result = self._require(await self.store.search(query), "search")
        page_info = paginate(result.total, search_filter.page, search_filter.page_size)

        logger.info(
            "Search executed",
            query=search_filter.query,
            sort_by=search_filter.sort_by,
            total=page_info.total_matches,
            page=page_info.page,
            pages=page_info.total_pages,
        )

        videos = [] if page_info.is_out_of_range else list(result.videos)
        return SearchResult(videos=videos, page_info=page_info, search_filter=search_filter)

    async def record_search(
        self,
        search_filter: SearchFilter,
        user_id: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> Optional[SearchEvent]:
        """Store a free-text search for query trending. Filters without text are not recorded."""
        if not search_filter.has_text:
            return None

        filters = search_filter.to_dict()
        for key in ("query", "page", "page_size"):
            filters.pop(key, None)

        event = SearchEvent(
            query=search_filter.query,
            timestamp=self.clock(),
            filters=filters,
            user_id=user_id,
            session_id=session_id,
        )
        await self.store.record_search(event)
        return event

    async def get_video(self, youtube_id: str) -> VideoRecord:
        video = await self.store.get_video(youtube_id)
        if video is None:
            raise VideoNotFound(youtube_id)
        return video

    async def recommend(
        self,
        youtube_id: str,
        preferred_brawlers: Optional[Iterable[str]] = None,
        limit: Optional[int] = None,
    ) -> List[RankedResult]:
        """Videos similar to `youtube_id`, best first."""
        source = await self.get_video(youtube_id)
        return await self.recommend_for(source, preferred_brawlers, limit)

    async def recommend_for(
        self,
        source: VideoRecord,
        preferred_brawlers: Optional[Iterable[str]] = None,
        limit: Optional[int] = None,
    ) -> List[RankedResult]:
        candidates = self._require(
            await self.store.recommendation_candidates(source.youtube_id),
            "recommendation_candidates",
        )
        return self.scorer.rank(
            source,
            candidates,
            preferred_brawlers=preferred_brawlers,
            limit=limit or self.recommendation_limit,
        )

    async def video_details(
        self,
        youtube_id: str,
        preferred_brawlers: Optional[Iterable[str]] = None,
    ) -> Tuple[VideoRecord, List[RankedResult]]:
        video = await self.get_video(youtube_id)
        recommendations = await self.recommend_for(video, preferred_brawlers)
        return video, recommendations

    async def trending_brawlers(
        self,
        days: Optional[int] = None,
        limit: Optional[int] = None,
        page: int = 1,
    ) -> Tuple[List[trending.TrendingEntry], PageInfo]:
        days = self.trending_window_days if days is None else days
        now = self.clock()
        videos = self._require(
            await self.store.videos_published_since(trending.window_start(days, now)),
            "videos_published_since",
        )
        return trending.trending_brawlers(
            videos, days=days, now=now, limit=limit or self.trending_limit, page=page
        )

    async def popular_queries(
        self,
        days: Optional[int] = None,
        limit: Optional[int] = None,
        page: int = 1,
    ) -> Tuple[List[trending.TrendingEntry], PageInfo]:
        days = self.trending_window_days if days is None else days
        now = self.clock()
        events = self._require(
            await self.store.search_events_since(trending.window_start(days, now)),
            "search_events_since",
        )
        return trending.popular_queries(
            events, days=days, now=now, limit=limit or self.trending_limit, page=page
        )

    async def popular_creators(
        self,
        limit: Optional[int] = None,
        page: int = 1,
    ) -> Tuple[List[trending.CreatorEntry], PageInfo]:
        videos = self._require(
            await self.store.videos_published_since(None), "videos_published_since"
        )
        return trending.popular_creators(videos, limit=limit or self.trending_limit, page=page)

    async def filter_options(self) -> Dict[str, List[str]]:
        """Brawlers and game modes that actually occur in the catalogue."""
        videos = self._require(
            await self.store.videos_published_since(None), "videos_published_since"
        )
        return {
            "brawlers": trending.distinct_values(videos, "brawlers"),
            "game_modes": trending.distinct_values(videos, "game_modes"),
        }

    async def personalized_recommendations(
        self,
        prefs: UserPreferences,
        limit: Optional[int] = None,
    ) -> PersonalizedRecommendations:
        """
        Trending-sorted videos for a user's preferred brawlers.

        Users without preferred brawlers get the top trending brawlers
        instead. Preferred content types default to gameplay and tutorials.
        """
        limit = limit or self.recommendation_limit
        top_brawlers, _ = await self.trending_brawlers(limit=5)
        top_queries, _ = await self.popular_queries(limit=5)

        if prefs.preferred_brawlers:
            target_brawlers = list(prefs.preferred_brawlers[:3])
        else:
            target_brawlers = [entry.entity_name for entry in top_brawlers[:3]]

        result = await self.search({
            "brawlers": target_brawlers,
            "game_modes": list(prefs.preferred_game_modes[:2]),
            "content_types": list(prefs.preferred_content_types or DEFAULT_RECOMMENDED_CONTENT_TYPES),
            "sort_by": "trending",
            "page_size": limit,
        })

        logger.info(
            "Personalized recommendations built",
            user_id=prefs.user_id,
            brawlers=target_brawlers,
            count=len(result.videos),
        )

        return PersonalizedRecommendations(
            videos=result.videos,
            explanation=explain_recommendations(
                target_brawlers, prefs.preferred_game_modes, prefs.preferred_brawlers
            ),
            trending_brawlers=top_brawlers,
            popular_queries=top_queries,
        )

    async def stats(self, page: int = 1) -> Dict[str, Any]:
        """Catalogue size plus the trending and popularity lists."""
        video_count = self._require(await self.store.count_videos(), "count_videos")
        brawlers, _ = await self.trending_brawlers()
        creators, creators_page = await self.popular_creators(page=page)
        queries, queries_page = await self.popular_queries(page=page)

        return {
            "video_count": video_count,
            "trending_brawlers": [e.to_dict() for e in brawlers],
            "popular_creators": {
                "creators": [c.to_dict() for c in creators],
                "pagination": creators_page.to_dict(),
            },
            "popular_queries": {
                "queries": [q.to_dict() for q in queries],
                "pagination": queries_page.to_dict(),
            },
        }
