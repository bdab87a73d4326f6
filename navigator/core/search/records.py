"""Value types shared by the search core"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

import structlog

logger = structlog.get_logger()

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_DATE_FORMATS = (
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S.%fZ",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d",
)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a timestamp from a datetime, a date or an ISO-ish string.

    Returns None for anything that cannot be read as a point in time.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if not isinstance(value, str):
        return None

    text = value.strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue

    try:
        return ensure_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        logger.debug("Could not parse timestamp", value=value)
        return None


def unique_strings(values: Any) -> Tuple[str, ...]:
    """
    Coerce a scalar or iterable into a tuple of distinct, non-empty strings.

    First occurrence wins, so the output order is stable for a given input.
    """
    if values is None:
        return ()
    if isinstance(values, str):
        values = [values]
    elif not isinstance(values, Iterable):
        return ()

    seen = []
    for value in values:
        if not isinstance(value, str):
            continue
        value = value.strip()
        if value and value not in seen:
            seen.append(value)
    return tuple(seen)


def _to_int(value: Any, default: int = 0) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _to_float(value: Any, default: float = 0.0) -> float:
    if isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class Creator:
    """Channel that published a video"""
    id: str
    name: str = ""
    url: str = ""


@dataclass(frozen=True)
class KeyMoment:
    """A labelled offset into a video"""
    time: int
    title: str


@dataclass(frozen=True)
class VideoRecord:
    """One ingested video, as the core sees it (read-only)."""
    youtube_id: str
    title: str
    creator: Creator
    published_at: datetime = EPOCH
    duration: int = 0
    description: str = ""

    # Classification
    brawlers: Tuple[str, ...] = ()
    game_modes: Tuple[str, ...] = ()
    content_types: Tuple[str, ...] = ()
    skill_level: str = ""

    # Metrics
    view_count: int = 0
    like_count: int = 0
    comment_count: Optional[int] = None
    popularity: float = 0.0
    recency: float = 0.0

    transcript: Optional[str] = None
    key_moments: Tuple[KeyMoment, ...] = ()

    # Set by the store when a text search was ranked
    text_score: Optional[float] = field(default=None, compare=False)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "VideoRecord":
        """Build a record from a document using camelCase or snake_case keys."""
        def pick(*keys, default=None):
            for key in keys:
                if key in data and data[key] is not None:
                    return data[key]
            return default

        creator_data = pick("creator", default={}) or {}
        if isinstance(creator_data, Creator):
            creator = creator_data
        else:
            creator = Creator(
                id=str(creator_data.get("id", "")),
                name=str(creator_data.get("name", "")),
                url=str(creator_data.get("url", "")),
            )

        moments = []
        for item in pick("key_moments", "keyMoments", "timestamps", default=[]) or []:
            if isinstance(item, KeyMoment):
                moments.append(item)
            elif isinstance(item, Mapping):
                moments.append(KeyMoment(
                    time=max(0, _to_int(item.get("time"))),
                    title=str(item.get("title") or ""),
                ))

        comment_count = pick("comment_count", "commentCount")
        text_score = pick("text_score", "score")

        return cls(
            youtube_id=str(pick("youtube_id", "youtubeId", default="")),
            title=str(pick("title", default="")),
            creator=creator,
            published_at=parse_timestamp(pick("published_at", "publishedAt")) or EPOCH,
            duration=max(0, _to_int(pick("duration"))),
            description=str(pick("description", default="")),
            brawlers=unique_strings(pick("brawlers")),
            game_modes=unique_strings(pick("game_modes", "gameModes")),
            content_types=unique_strings(pick("content_types", "contentTypes", "contentType")),
            skill_level=str(pick("skill_level", "skillLevel", default="")),
            view_count=max(0, _to_int(pick("view_count", "viewCount"))),
            like_count=max(0, _to_int(pick("like_count", "likeCount"))),
            comment_count=None if comment_count is None else max(0, _to_int(comment_count)),
            popularity=_to_float(pick("popularity")),
            recency=_to_float(pick("recency")),
            transcript=pick("transcript"),
            key_moments=tuple(moments),
            text_score=None if text_score is None else _to_float(text_score),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "youtube_id": self.youtube_id,
            "title": self.title,
            "description": self.description,
            "creator": {
                "id": self.creator.id,
                "name": self.creator.name,
                "url": self.creator.url,
            },
            "published_at": self.published_at.isoformat(),
            "duration": self.duration,
            "brawlers": list(self.brawlers),
            "game_modes": list(self.game_modes),
            "content_types": list(self.content_types),
            "skill_level": self.skill_level,
            "view_count": self.view_count,
            "like_count": self.like_count,
            "comment_count": self.comment_count,
            "popularity": self.popularity,
            "recency": self.recency,
            "key_moments": [
                {"time": m.time, "title": m.title} for m in self.key_moments
            ],
            "text_score": self.text_score,
        }


@dataclass(frozen=True)
class SearchEvent:
    """One row of search history, the occurrence stream for query trending"""
    query: str
    timestamp: datetime
    filters: Dict[str, Any] = field(default_factory=dict, compare=False)
    user_id: Optional[str] = None
    session_id: Optional[str] = None
