"""PostgreSQL video store: compiles search predicates to SQLAlchemy"""

import asyncio
from datetime import datetime
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

import structlog
from sqlalchemy import and_, asc, desc, func, literal_column, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from navigator.core.errors import StorageUnavailable
from navigator.core.preferences import UserPreferences
from navigator.core.search.query_builder import (
    AnyOf,
    Equals,
    Predicate,
    Range,
    SearchQuery,
    SortSpec,
    TextSearch,
)
from navigator.core.search.records import Creator, KeyMoment, SearchEvent, VideoRecord
from navigator.core.storage import StoreResult
from navigator.models.search_event import SearchHistory
from navigator.models.user_preference import UserPreference
from navigator.models.video import Video

logger = structlog.get_logger()

T = TypeVar("T")

# Predicate/sort field names to columns
COLUMNS = {
    "brawlers": Video.brawlers,
    "game_modes": Video.game_modes,
    "content_types": Video.content_types,
    "skill_level": Video.skill_level,
    "creator.id": Video.creator_id,
    "view_count": Video.view_count,
    "duration": Video.duration,
    "published_at": Video.published_at,
    "popularity": Video.popularity,
    "recency": Video.recency,
}

# ts_rank weights in {D, C, B, A} order: title A=1.0, description B=0.5,
# transcript C=0.1, i.e. 10:5:1
TEXT_RANK_WEIGHTS = literal_column("ARRAY[0.0, 0.1, 0.5, 1.0]::float4[]")
TEXT_CONFIG = literal_column("'english'::regconfig")


def document_vector():
    """Weighted tsvector over title, description and transcript."""
    def weighted(column, weight: str):
        return func.setweight(
            func.to_tsvector(TEXT_CONFIG, func.coalesce(column, literal_column("''"))),
            literal_column(f"'{weight}'"),
        )

    return (
        weighted(Video.title, "A")
        .op("||")(weighted(Video.description, "B"))
        .op("||")(weighted(Video.transcript, "C"))
    )


def text_query(search: TextSearch):
    """OR of the query's word terms, like a plain keyword search."""
    return func.to_tsquery(TEXT_CONFIG, " | ".join(search.terms))


def compile_condition(condition: Any):
    if isinstance(condition, TextSearch):
        if not condition.terms:
            return None
        return document_vector().op("@@")(text_query(condition))

    column = COLUMNS[condition.field]
    if isinstance(condition, AnyOf):
        return column.overlap(list(condition.values))
    if isinstance(condition, Equals):
        return column == condition.value
    if isinstance(condition, Range):
        clauses = []
        if condition.lower is not None:
            clauses.append(column >= condition.lower)
        if condition.upper is not None:
            clauses.append(column <= condition.upper)
        return and_(*clauses) if clauses else None

    raise TypeError(f"Unsupported condition: {condition!r}")


def compile_predicate(predicate: Predicate) -> List[Any]:
    """WHERE clauses for a predicate (implicitly AND-ed)."""
    clauses = []
    for condition in predicate.conditions:
        clause = compile_condition(condition)
        if clause is not None:
            clauses.append(clause)
    return clauses


def compile_sort(sort: SortSpec, text_rank=None) -> List[Any]:
    order_by = []
    for key in sort.keys:
        if key.field == "text_score":
            if text_rank is None:
                continue
            column = text_rank
        else:
            column = COLUMNS[key.field]
        order_by.append(desc(column).nulls_last() if key.descending else asc(column).nulls_last())
    # Stable paging across equal sort keys
    order_by.append(asc(Video.youtube_id))
    return order_by


def build_search_statements(query: SearchQuery):
    """(page statement, count statement) for a search query."""
    clauses = compile_predicate(query.predicate)
    text_search = query.predicate.text_search

    text_rank = None
    if text_search is not None and text_search.terms:
        text_rank = func.ts_rank(
            TEXT_RANK_WEIGHTS, document_vector(), text_query(text_search)
        ).label("text_score")
        page_stmt = select(Video, text_rank)
    else:
        page_stmt = select(Video)

    page_stmt = (
        page_stmt.where(*clauses)
        .order_by(*compile_sort(query.sort, text_rank))
        .offset(query.offset)
        .limit(query.limit)
    )
    count_stmt = select(func.count()).select_from(Video).where(*clauses)
    return page_stmt, count_stmt


def to_record(row: Video, text_score: Optional[float] = None) -> VideoRecord:
    return VideoRecord(
        youtube_id=row.youtube_id,
        title=row.title,
        description=row.description or "",
        creator=Creator(
            id=row.creator_id,
            name=row.creator_name or "",
            url=row.creator_url or "",
        ),
        published_at=row.published_at,
        duration=row.duration or 0,
        brawlers=tuple(row.brawlers or ()),
        game_modes=tuple(row.game_modes or ()),
        content_types=tuple(row.content_types or ()),
        skill_level=row.skill_level or "",
        view_count=row.view_count or 0,
        like_count=row.like_count or 0,
        comment_count=row.comment_count,
        popularity=row.popularity or 0.0,
        recency=row.recency or 0.0,
        transcript=row.transcript,
        key_moments=tuple(
            KeyMoment(time=int(m.get("time", 0)), title=str(m.get("title", "")))
            for m in (row.key_moments or [])
        ),
        text_score=text_score,
    )


def _to_preferences(row: UserPreference) -> UserPreferences:
    return UserPreferences.from_mapping({
        "user_id": row.user_id,
        "session_id": row.session_id,
        "preferred_brawlers": row.preferred_brawlers,
        "preferred_game_modes": row.preferred_game_modes,
        "preferred_content_types": row.preferred_content_types,
        "conversation_history": row.conversation_history,
    })


class SQLVideoStore:
    """
    VideoStore backed by PostgreSQL via async SQLAlchemy.

    Every call runs under a timeout; driver errors and timeouts surface as
    StorageUnavailable.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker,
        timeout_seconds: float = 10.0,
        engine=None,
    ):
        self.session_maker = session_maker
        self.timeout_seconds = timeout_seconds
        self.engine = engine

    async def _run(self, operation: str, fn: Callable[[AsyncSession], Awaitable[T]]) -> T:
        async def _execute():
            async with self.session_maker() as session:
                return await fn(session)

        try:
            return await asyncio.wait_for(_execute(), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            logger.error("Storage call timed out", operation=operation, timeout=self.timeout_seconds)
            raise StorageUnavailable(f"{operation} timed out", cause=e) from e
        except (SQLAlchemyError, OSError) as e:
            logger.error("Storage call failed", operation=operation, error=str(e))
            raise StorageUnavailable(f"{operation} failed", cause=e) from e

    async def search(self, query: SearchQuery) -> Optional[StoreResult]:
        page_stmt, count_stmt = build_search_statements(query)
        with_rank = query.predicate.text_search is not None and bool(query.predicate.text_search.terms)

        async def _search(session: AsyncSession) -> StoreResult:
            total = (await session.execute(count_stmt)).scalar() or 0
            result = await session.execute(page_stmt)
            if with_rank:
                videos = [to_record(row, float(score)) for row, score in result.all()]
            else:
                videos = [to_record(row) for row in result.scalars().all()]
            return StoreResult(videos=videos, total=total)

        return await self._run("search", _search)

    async def get_video(self, youtube_id: str) -> Optional[VideoRecord]:
        async def _get(session: AsyncSession) -> Optional[VideoRecord]:
            result = await session.execute(select(Video).where(Video.youtube_id == youtube_id))
            row = result.scalar_one_or_none()
            return to_record(row) if row else None

        return await self._run("get_video", _get)

    async def recommendation_candidates(self, exclude_id: str) -> Optional[List[VideoRecord]]:
        async def _candidates(session: AsyncSession) -> List[VideoRecord]:
            result = await session.execute(select(Video).where(Video.youtube_id != exclude_id))
            return [to_record(row) for row in result.scalars().all()]

        return await self._run("recommendation_candidates", _candidates)

    async def videos_published_since(self, since: Optional[datetime]) -> Optional[List[VideoRecord]]:
        async def _videos(session: AsyncSession) -> List[VideoRecord]:
            stmt = select(Video)
            if since is not None:
                stmt = stmt.where(Video.published_at >= since)
            result = await session.execute(stmt)
            return [to_record(row) for row in result.scalars().all()]

        return await self._run("videos_published_since", _videos)

    async def search_events_since(self, since: datetime) -> Optional[List[SearchEvent]]:
        async def _events(session: AsyncSession) -> List[SearchEvent]:
            result = await session.execute(
                select(SearchHistory).where(SearchHistory.timestamp >= since)
            )
            return [
                SearchEvent(
                    query=row.query,
                    timestamp=row.timestamp,
                    filters=row.filters or {},
                    user_id=row.user_id,
                    session_id=row.session_id,
                )
                for row in result.scalars().all()
            ]

        return await self._run("search_events_since", _events)

    async def record_search(self, event: SearchEvent) -> None:
        async def _record(session: AsyncSession) -> None:
            session.add(SearchHistory(
                query=event.query,
                filters=event.filters,
                user_id=event.user_id,
                session_id=event.session_id,
                timestamp=event.timestamp,
            ))
            await session.commit()

        await self._run("record_search", _record)
        logger.debug("Saved search query", query=event.query, user_id=event.user_id)

    @staticmethod
    def _preference_lookup(user_id: Optional[str], session_id: Optional[str]):
        conditions = []
        if user_id:
            conditions.append(UserPreference.user_id == user_id)
        if session_id:
            conditions.append(UserPreference.session_id == session_id)
        return or_(*conditions) if conditions else None

    async def get_preferences(
        self, user_id: Optional[str], session_id: Optional[str]
    ) -> Optional[UserPreferences]:
        lookup = self._preference_lookup(user_id, session_id)
        if lookup is None:
            return None

        async def _get(session: AsyncSession) -> Optional[UserPreferences]:
            result = await session.execute(select(UserPreference).where(lookup).limit(1))
            row = result.scalar_one_or_none()
            return _to_preferences(row) if row else None

        return await self._run("get_preferences", _get)

    async def save_preferences(self, prefs: UserPreferences) -> UserPreferences:
        lookup = self._preference_lookup(prefs.user_id, prefs.session_id)
        values = prefs.to_dict()

        async def _save(session: AsyncSession) -> UserPreferences:
            row = None
            if lookup is not None:
                result = await session.execute(select(UserPreference).where(lookup).limit(1))
                row = result.scalar_one_or_none()
            if row is None:
                row = UserPreference()
                session.add(row)
            for key, value in values.items():
                if key in ("user_id", "session_id") and not value:
                    continue
                setattr(row, key, value)
            await session.commit()
            return _to_preferences(row)

        return await self._run("save_preferences", _save)

    async def count_videos(self) -> Optional[int]:
        async def _count(session: AsyncSession) -> int:
            return (await session.execute(select(func.count()).select_from(Video))).scalar() or 0

        return await self._run("count_videos", _count)

    async def close(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
