"""Pure search core: normalization, query building, scoring, pagination, trending"""

from navigator.core.search.filters import SearchFilter, normalize_filter
from navigator.core.search.pagination import PageInfo, paginate, paginate_items, page_bounds
from navigator.core.search.query_builder import (
    Predicate,
    SearchQuery,
    SortSpec,
    build_predicate,
    build_query,
    build_sort,
)
from navigator.core.search.records import Creator, KeyMoment, SearchEvent, VideoRecord
from navigator.core.search.scorer import RankedResult, RecommendationScorer, ScoringWeights
from navigator.core.search.trending import (
    CreatorEntry,
    TrendingEntry,
    popular_creators,
    popular_queries,
    trending_brawlers,
)

__all__ = [
    "SearchFilter",
    "normalize_filter",
    "PageInfo",
    "paginate",
    "paginate_items",
    "page_bounds",
    "Predicate",
    "SearchQuery",
    "SortSpec",
    "build_predicate",
    "build_query",
    "build_sort",
    "Creator",
    "KeyMoment",
    "SearchEvent",
    "VideoRecord",
    "RankedResult",
    "RecommendationScorer",
    "ScoringWeights",
    "CreatorEntry",
    "TrendingEntry",
    "popular_creators",
    "popular_queries",
    "trending_brawlers",
]
