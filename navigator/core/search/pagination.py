"""Pagination: page metadata and slice bounds"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class PageInfo:
    """Page metadata reported alongside every paginated result"""
    total_matches: int
    page: int
    page_size: int
    total_pages: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def is_out_of_range(self) -> bool:
        """True when the requested page lies past the last one."""
        return self.total_matches > 0 and self.offset >= self.total_matches

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total_matches,
            "page": self.page,
            "limit": self.page_size,
            "pages": self.total_pages,
        }


def page_bounds(page: int, page_size: int) -> Tuple[int, int]:
    """Half-open [start, stop) slice for a page, after clamping to >= 1."""
    page = max(1, page)
    page_size = max(1, page_size)
    start = (page - 1) * page_size
    return start, start + page_size


def paginate(total_matches: int, page: int, page_size: int) -> PageInfo:
    """
    Compute page metadata.

    Out-of-range pages are not an error: they report the true page count so
    callers can tell an empty page apart from an empty result set.
    """
    total_matches = max(0, total_matches)
    page = max(1, page)
    page_size = max(1, page_size)
    total_pages = math.ceil(total_matches / page_size) if total_matches else 0

    return PageInfo(
        total_matches=total_matches,
        page=page,
        page_size=page_size,
        total_pages=total_pages,
    )


def paginate_items(
    items: Sequence[T],
    page: int,
    page_size: int,
) -> Tuple[List[T], PageInfo]:
    """Slice an already ordered sequence and describe the page."""
    start, stop = page_bounds(page, page_size)
    return list(items[start:stop]), paginate(len(items), page, page_size)
