"""Query construction: canonical SearchFilter into a storage predicate and sort order"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from navigator.core.search.filters import SearchFilter
from navigator.core.search.records import VideoRecord
from navigator.core.search.text import text_terms

# Relative weight of a term hit per text field
TEXT_WEIGHTS = {
    "title": 10,
    "description": 5,
    "transcript": 1,
}


def field_value(record: VideoRecord, field: str) -> Any:
    """Resolve a dotted field path (e.g. "creator.id") on a record."""
    value: Any = record
    for part in field.split("."):
        value = getattr(value, part, None)
        if value is None:
            return None
    return value


@dataclass(frozen=True)
class TextSearch:
    """Free-text match, delegated to the store's weighted text search"""
    query: str

    @property
    def terms(self) -> List[str]:
        return text_terms(self.query)

    def score(self, record: VideoRecord) -> float:
        """Weighted term hits across title, description and transcript."""
        total = 0.0
        for field, weight in TEXT_WEIGHTS.items():
            words = text_terms(getattr(record, field, None) or "")
            if not words:
                continue
            total += weight * sum(words.count(term) for term in self.terms)
        return total

    def matches(self, record: VideoRecord) -> bool:
        return not self.terms or self.score(record) > 0


@dataclass(frozen=True)
class AnyOf:
    """Record's set field intersects the given values"""
    field: str
    values: Tuple[str, ...]

    def matches(self, record: VideoRecord) -> bool:
        current = field_value(record, self.field) or ()
        return not set(current).isdisjoint(self.values)


@dataclass(frozen=True)
class Equals:
    field: str
    value: Any

    def matches(self, record: VideoRecord) -> bool:
        return field_value(record, self.field) == self.value


@dataclass(frozen=True)
class Range:
    """Inclusive bounds, either side optional"""
    field: str
    lower: Any = None
    upper: Any = None

    def matches(self, record: VideoRecord) -> bool:
        value = field_value(record, self.field)
        if value is None:
            return False
        if self.lower is not None and value < self.lower:
            return False
        if self.upper is not None and value > self.upper:
            return False
        return True


@dataclass(frozen=True)
class Predicate:
    """AND-combination of conditions. No conditions matches everything."""
    conditions: Tuple[Any, ...] = ()

    @property
    def text_search(self) -> Optional[TextSearch]:
        for condition in self.conditions:
            if isinstance(condition, TextSearch):
                return condition
        return None

    def is_empty(self) -> bool:
        return not self.conditions

    def matches(self, record: VideoRecord) -> bool:
        return all(condition.matches(record) for condition in self.conditions)


@dataclass(frozen=True)
class SortKey:
    field: str
    descending: bool = True


@dataclass(frozen=True)
class SortSpec:
    keys: Tuple[SortKey, ...]

    def apply(self, records: Iterable[VideoRecord]) -> List[VideoRecord]:
        """Order records in memory the way a store would."""
        ordered = list(records)
        # Stable sorts applied from the least significant key
        for key in reversed(self.keys):
            ordered.sort(
                key=lambda record: _sortable(field_value(record, key.field)),
                reverse=key.descending,
            )
        return ordered


def _sortable(value: Any) -> Any:
    if value is None:
        return float("-inf")
    if isinstance(value, datetime):
        return value.timestamp()
    return value


@dataclass(frozen=True)
class SearchQuery:
    """Everything the store needs to execute one search page"""
    predicate: Predicate
    sort: SortSpec
    offset: int
    limit: int


SORT_BY_POPULARITY = SortSpec((SortKey("popularity"),))
SORT_BY_TEXT_SCORE = SortSpec((SortKey("text_score"),))
SORT_BY_PUBLISHED = SortSpec((SortKey("published_at"),))
SORT_BY_VIEWS = SortSpec((SortKey("view_count"),))
SORT_BY_TRENDING = SortSpec((SortKey("recency"), SortKey("popularity")))


def build_predicate(search_filter: SearchFilter) -> Predicate:
    """Translate a canonical filter into AND-combined match conditions."""
    conditions: List[Any] = []

    if search_filter.has_text:
        conditions.append(TextSearch(search_filter.query))

    for field in ("brawlers", "game_modes", "content_types"):
        values = getattr(search_filter, field)
        if values:
            conditions.append(AnyOf(field, tuple(values)))

    if search_filter.skill_level:
        conditions.append(Equals("skill_level", search_filter.skill_level))

    if search_filter.creator_id:
        conditions.append(Equals("creator.id", search_filter.creator_id))

    if search_filter.min_views > 0:
        conditions.append(Range("view_count", lower=search_filter.min_views))

    if search_filter.max_duration > 0:
        conditions.append(Range("duration", upper=search_filter.max_duration))

    if search_filter.date_from or search_filter.date_to:
        conditions.append(Range(
            "published_at",
            lower=search_filter.date_from,
            upper=search_filter.date_to,
        ))

    return Predicate(tuple(conditions))


def build_sort(search_filter: SearchFilter) -> SortSpec:
    """Pick the sort order for a filter; unknown modes sort like "popular"."""
    sort_by = search_filter.sort_by

    if sort_by == "relevance":
        return SORT_BY_TEXT_SCORE if search_filter.has_text else SORT_BY_POPULARITY
    if sort_by == "recent":
        return SORT_BY_PUBLISHED
    if sort_by == "trending":
        return SORT_BY_TRENDING
    return SORT_BY_VIEWS


def build_query(search_filter: SearchFilter) -> SearchQuery:
    return SearchQuery(
        predicate=build_predicate(search_filter),
        sort=build_sort(search_filter),
        offset=(search_filter.page - 1) * search_filter.page_size,
        limit=search_filter.page_size,
    )


def execute_in_memory(
    query: SearchQuery,
    records: Sequence[VideoRecord],
) -> Tuple[List[VideoRecord], int]:
    """
    Run a SearchQuery against an in-memory record set.

    Returns the requested page and the total match count. Records are
    annotated with their text score when the query carries free text.
    """
    text_search = query.predicate.text_search
    matched = []
    for record in records:
        if not query.predicate.matches(record):
            continue
        if text_search is not None:
            record = _with_text_score(record, text_search.score(record))
        matched.append(record)

    ordered = query.sort.apply(matched)
    return ordered[query.offset:query.offset + query.limit], len(ordered)


def _with_text_score(record: VideoRecord, score: float) -> VideoRecord:
    return replace(record, text_score=score)
