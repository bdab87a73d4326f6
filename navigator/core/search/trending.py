"""Trending aggregation over a trailing time window"""

import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from navigator.core.search.pagination import PageInfo, paginate_items
from navigator.core.search.records import SearchEvent, VideoRecord, ensure_utc

DEFAULT_WINDOW_DAYS = 30
DEFAULT_TRENDING_LIMIT = 10

# Weight of log10(total views + 1) relative to one occurrence
VIEW_WEIGHT = 2.0


@dataclass(frozen=True)
class TrendingEntry:
    """A ranked entity: a brawler name or a free-text query"""
    entity_name: str
    occurrence_count: int
    weighted_score: float
    total_views: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.entity_name,
            "count": self.occurrence_count,
            "total_views": self.total_views,
            "score": round(self.weighted_score, 4),
        }


@dataclass(frozen=True)
class CreatorEntry:
    creator_id: str
    name: str
    url: str
    video_count: int
    total_views: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.creator_id,
            "name": self.name,
            "url": self.url,
            "video_count": self.video_count,
            "total_views": self.total_views,
        }


def window_start(days: int = DEFAULT_WINDOW_DAYS, now: Optional[datetime] = None) -> datetime:
    """Start of the trailing window ending at `now` (UTC)."""
    now = ensure_utc(now) if now else datetime.now(timezone.utc)
    return now - timedelta(days=max(0, days))


def weighted_score(count: int, total_views: Optional[int] = None) -> float:
    """
    count + 2 * log10(total_views + 1), or the bare count without views.

    The log term damps single viral outliers while still rewarding reach.
    """
    if total_views is None:
        return float(count)
    return count + VIEW_WEIGHT * math.log10(max(0, total_views) + 1)


def _rank(entries: List[TrendingEntry]) -> List[TrendingEntry]:
    return sorted(entries, key=lambda e: (-e.weighted_score, e.entity_name))


def trending_brawlers(
    videos: Iterable[VideoRecord],
    days: int = DEFAULT_WINDOW_DAYS,
    now: Optional[datetime] = None,
    limit: int = DEFAULT_TRENDING_LIMIT,
    page: int = 1,
) -> Tuple[List[TrendingEntry], PageInfo]:
    """Rank brawlers by videos published in the window that feature them."""
    start = window_start(days, now)
    end = ensure_utc(now) if now else None

    counts: Dict[str, int] = defaultdict(int)
    views: Dict[str, int] = defaultdict(int)
    for video in videos:
        if video.published_at < start or (end and video.published_at > end):
            continue
        for brawler in set(video.brawlers):
            counts[brawler] += 1
            views[brawler] += video.view_count

    entries = [
        TrendingEntry(
            entity_name=name,
            occurrence_count=count,
            total_views=views[name],
            weighted_score=weighted_score(count, views[name]),
        )
        for name, count in counts.items()
    ]
    return paginate_items(_rank(entries), page, limit)


def popular_queries(
    events: Iterable[SearchEvent],
    days: int = DEFAULT_WINDOW_DAYS,
    now: Optional[datetime] = None,
    limit: int = DEFAULT_TRENDING_LIMIT,
    page: int = 1,
) -> Tuple[List[TrendingEntry], PageInfo]:
    """Rank free-text queries by how often they were searched in the window."""
    start = window_start(days, now)
    end = ensure_utc(now) if now else None

    counts: Dict[str, int] = defaultdict(int)
    for event in events:
        timestamp = ensure_utc(event.timestamp)
        if timestamp < start or (end and timestamp > end):
            continue
        query = (event.query or "").strip()
        if query:
            counts[query] += 1

    entries = [
        TrendingEntry(
            entity_name=query,
            occurrence_count=count,
            weighted_score=weighted_score(count),
        )
        for query, count in counts.items()
    ]
    return paginate_items(_rank(entries), page, limit)


def popular_creators(
    videos: Iterable[VideoRecord],
    limit: int = DEFAULT_TRENDING_LIMIT,
    page: int = 1,
) -> Tuple[List[CreatorEntry], PageInfo]:
    """Rank creators by the total views across all their videos."""
    grouped: Dict[str, Dict[str, Any]] = {}
    for video in videos:
        creator = video.creator
        if not creator.id:
            continue
        entry = grouped.setdefault(creator.id, {
            "name": creator.name,
            "url": creator.url,
            "video_count": 0,
            "total_views": 0,
        })
        entry["video_count"] += 1
        entry["total_views"] += video.view_count

    creators = sorted(
        (CreatorEntry(creator_id=cid, **data) for cid, data in grouped.items()),
        key=lambda c: (-c.total_views, c.creator_id),
    )
    return paginate_items(creators, page, limit)


def distinct_values(videos: Iterable[VideoRecord], field: str) -> List[str]:
    """Sorted distinct values of a set field ("brawlers", "game_modes", ...)."""
    values = set()
    for video in videos:
        values.update(getattr(video, field, ()) or ())
    return sorted(values)
