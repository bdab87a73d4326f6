"""Filter normalization: raw request/LLM parameters into a canonical SearchFilter"""

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Any, Dict, Mapping, Optional, Tuple

from navigator.core.search.records import parse_timestamp, unique_strings
from navigator.core.search.text import text_terms

SKILL_LEVELS = ("beginner", "intermediate", "advanced")
SORT_MODES = ("relevance", "recent", "popular", "trending")

DEFAULT_SORT = "relevance"
FALLBACK_SORT = "popular"
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50

# Upper bounds keep values inside the database column and OFFSET ranges
MAX_PAGE = 100_000
MAX_VIEWS = 2 ** 63 - 1
MAX_DURATION = 2 ** 31 - 1

# Accepted spellings for each canonical field, first match wins
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "query": ("query", "q", "text"),
    "brawlers": ("brawlers",),
    "game_modes": ("game_modes", "gameModes"),
    "content_types": ("content_types", "contentTypes", "contentType", "content_type"),
    "skill_level": ("skill_level", "skillLevel"),
    "sort_by": ("sort_by", "sortBy"),
    "min_views": ("min_views", "minViews"),
    "max_duration": ("max_duration", "maxDuration"),
    "date_from": ("date_from", "dateFrom"),
    "date_to": ("date_to", "dateTo"),
    "creator_id": ("creator_id", "creatorId", "channel_id", "channelId"),
    "page": ("page",),
    "page_size": ("page_size", "pageSize", "limit"),
}


@dataclass(frozen=True)
class SearchFilter:
    """Canonical search filter. Always valid once built by normalize_filter."""
    query: str = ""
    brawlers: Tuple[str, ...] = ()
    game_modes: Tuple[str, ...] = ()
    content_types: Tuple[str, ...] = ()
    skill_level: str = ""
    sort_by: str = DEFAULT_SORT
    min_views: int = 0
    max_duration: int = 0
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    creator_id: str = ""
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def has_text(self) -> bool:
        """True when the query has at least one searchable term."""
        return bool(text_terms(self.query))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "brawlers": list(self.brawlers),
            "game_modes": list(self.game_modes),
            "content_types": list(self.content_types),
            "skill_level": self.skill_level,
            "sort_by": self.sort_by,
            "min_views": self.min_views,
            "max_duration": self.max_duration,
            "date_from": self.date_from.isoformat() if self.date_from else None,
            "date_to": self.date_to.isoformat() if self.date_to else None,
            "creator_id": self.creator_id,
            "page": self.page,
            "page_size": self.page_size,
        }


def _lookup(raw: Mapping[str, Any], name: str) -> Any:
    for key in FIELD_ALIASES[name]:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def coerce_int(value: Any, default: int) -> int:
    """
    Read an integer leniently.

    Accepts ints, integral floats and numeric strings; anything else
    (None, "", "abc", booleans) yields the default.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        try:
            return int(value)
        except (OverflowError, ValueError):
            return default
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            try:
                return int(float(text))
            except (OverflowError, ValueError):
                return default
    return default


def _clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(value, upper))


def _coerce_text(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    return ""


def _coerce_choice(value: Any, choices: Tuple[str, ...], default: str) -> Optional[str]:
    text = _coerce_text(value).lower()
    if not text:
        return default
    return text if text in choices else None


def _coerce_date_to(value: Any) -> Optional[datetime]:
    """Upper date bound; a bare date covers the whole day."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return None
    is_bare_date = (
        isinstance(value, str) and len(value.strip()) == 10
    ) or (not isinstance(value, (datetime, str)))
    if is_bare_date and parsed.time() == time.min:
        return parsed + timedelta(days=1) - timedelta(microseconds=1)
    return parsed


def normalize_filter(
    raw: Optional[Mapping[str, Any]] = None,
    default_page_size: int = DEFAULT_PAGE_SIZE,
    max_page_size: int = MAX_PAGE_SIZE,
) -> SearchFilter:
    """
    Build a canonical SearchFilter from loosely typed parameters.

    Never raises: malformed values are replaced by safe defaults.
    - list fields accept a string or a sequence; blanks and duplicates are dropped
    - unknown skill levels become "" (no constraint)
    - missing sort_by is "relevance", unknown sort_by is "popular"
    - malformed or negative min_views / max_duration mean no constraint
    - page is clamped to [1, MAX_PAGE]; bad page_size becomes the default, large ones are capped
    - a query made only of stop words or punctuation carries no text
    """
    raw = raw or {}
    if not isinstance(raw, Mapping):
        raw = {}

    default_page_size = max(1, min(default_page_size, max_page_size))

    skill_level = _coerce_choice(_lookup(raw, "skill_level"), SKILL_LEVELS, "")
    sort_by = _coerce_choice(_lookup(raw, "sort_by"), SORT_MODES, DEFAULT_SORT)

    page = coerce_int(_lookup(raw, "page"), 1)
    page_size = coerce_int(_lookup(raw, "page_size"), default_page_size)
    if page_size < 1:
        page_size = default_page_size

    creator_id = _lookup(raw, "creator_id")

    return SearchFilter(
        query=_coerce_text(_lookup(raw, "query")),
        brawlers=unique_strings(_lookup(raw, "brawlers")),
        game_modes=unique_strings(_lookup(raw, "game_modes")),
        content_types=unique_strings(_lookup(raw, "content_types")),
        skill_level=skill_level or "",
        sort_by=sort_by or FALLBACK_SORT,
        min_views=_clamp(coerce_int(_lookup(raw, "min_views"), 0), 0, MAX_VIEWS),
        max_duration=_clamp(coerce_int(_lookup(raw, "max_duration"), 0), 0, MAX_DURATION),
        date_from=parse_timestamp(_lookup(raw, "date_from")),
        date_to=_coerce_date_to(_lookup(raw, "date_to")),
        creator_id=str(creator_id).strip() if creator_id is not None else "",
        page=_clamp(page, 1, MAX_PAGE),
        page_size=min(page_size, max_page_size),
    )
