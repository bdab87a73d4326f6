"""Tests for filter normalization and record parsing"""

from datetime import datetime, timezone

from navigator.core.search.filters import (
    MAX_DURATION,
    MAX_PAGE,
    MAX_VIEWS,
    SearchFilter,
    coerce_int,
    normalize_filter,
)
from navigator.core.search.records import VideoRecord, parse_timestamp, unique_strings
from navigator.core.search.text import text_terms


class TestNormalizeFilter:
    """Test raw parameter normalization"""

    def test_empty_input_gives_defaults(self):
        """Test that no parameters yield the default filter"""
        assert normalize_filter() == SearchFilter()
        assert normalize_filter({}) == SearchFilter()
        assert normalize_filter("not a mapping") == SearchFilter()

    def test_camel_case_keys(self):
        """Test that LLM-style camelCase keys are accepted"""
        search_filter = normalize_filter({
            "query": "  mortis tips ",
            "brawlers": ["Mortis"],
            "gameModes": ["Brawl Ball"],
            "contentType": ["tutorial"],
            "skillLevel": "Beginner",
            "sortBy": "recent",
            "minViews": "1000",
            "maxDuration": 600,
            "channelId": "UC1",
            "limit": "20",
            "page": "2",
        })

        assert search_filter.query == "mortis tips"
        assert search_filter.brawlers == ("Mortis",)
        assert search_filter.game_modes == ("Brawl Ball",)
        assert search_filter.content_types == ("tutorial",)
        assert search_filter.skill_level == "beginner"
        assert search_filter.sort_by == "recent"
        assert search_filter.min_views == 1000
        assert search_filter.max_duration == 600
        assert search_filter.creator_id == "UC1"
        assert search_filter.page == 2
        assert search_filter.page_size == 20

    def test_list_fields_drop_blanks_and_duplicates(self):
        search_filter = normalize_filter({"brawlers": ["Shelly", "", "  ", "Shelly", "Colt"]})
        assert search_filter.brawlers == ("Shelly", "Colt")

    def test_single_string_becomes_one_element_set(self):
        assert normalize_filter({"brawlers": "Mortis"}).brawlers == ("Mortis",)

    def test_unknown_skill_level_means_no_constraint(self):
        assert normalize_filter({"skill_level": "godlike"}).skill_level == ""

    def test_missing_sort_is_relevance(self):
        assert normalize_filter({}).sort_by == "relevance"

    def test_unknown_sort_is_popular(self):
        """Test that an unrecognized sort mode falls back to popular"""
        assert normalize_filter({"sortBy": "banana"}).sort_by == "popular"

    def test_malformed_numbers_mean_no_constraint(self):
        search_filter = normalize_filter({"min_views": "lots", "max_duration": -5})
        assert search_filter.min_views == 0
        assert search_filter.max_duration == 0

    def test_page_and_size_are_clamped(self):
        """Test invalid paging values are clamped instead of rejected"""
        search_filter = normalize_filter({"page": -3, "page_size": 0})
        assert search_filter.page == 1
        assert search_filter.page_size == 10

        assert normalize_filter({"page_size": 500}).page_size == 50
        assert normalize_filter({"page": "abc"}).page == 1

    def test_huge_numbers_are_capped(self):
        """Test oversized paging and view bounds are capped to storable values"""
        search_filter = normalize_filter({
            "page": "99999999999999999999",
            "minViews": 10 ** 30,
            "maxDuration": 10 ** 30,
        })
        assert search_filter.page == MAX_PAGE
        assert search_filter.min_views == MAX_VIEWS
        assert search_filter.max_duration == MAX_DURATION

    def test_query_without_search_terms_has_no_text(self):
        assert not normalize_filter({"query": "???"}).has_text
        assert not normalize_filter({"query": "the"}).has_text
        assert normalize_filter({"query": "the mortis"}).has_text

    def test_configurable_page_sizes(self):
        search_filter = normalize_filter({}, default_page_size=12, max_page_size=30)
        assert search_filter.page_size == 12
        assert normalize_filter({"limit": 100}, max_page_size=30).page_size == 30

    def test_bare_date_to_covers_whole_day(self):
        search_filter = normalize_filter({"dateFrom": "2025-01-01", "dateTo": "2025-01-31"})
        assert search_filter.date_from == datetime(2025, 1, 1, tzinfo=timezone.utc)
        assert search_filter.date_to.date() == datetime(2025, 1, 31).date()
        assert search_filter.date_to.hour == 23

    def test_unparseable_date_is_ignored(self):
        assert normalize_filter({"dateFrom": "yesterday-ish"}).date_from is None

    def test_never_raises_on_garbage(self):
        search_filter = normalize_filter({
            "brawlers": 42,
            "page": object(),
            "min_views": float("inf"),
            "sortBy": None,
            "dateTo": [],
        })
        assert search_filter.brawlers == ()
        assert search_filter.page == 1
        assert search_filter.min_views == 0
        assert search_filter.sort_by == "relevance"
        assert search_filter.date_to is None


class TestCoercion:
    """Test lenient value coercion helpers"""

    def test_coerce_int(self):
        assert coerce_int("42", 0) == 42
        assert coerce_int("4.7", 0) == 4
        assert coerce_int(3.0, 0) == 3
        assert coerce_int(True, 7) == 7
        assert coerce_int(None, 7) == 7
        assert coerce_int("", 7) == 7

    def test_text_terms_drop_stop_words(self):
        assert text_terms("How to play Mortis?") == ["play", "mortis"]
        assert text_terms("???") == []
        assert text_terms(None) == []

    def test_unique_strings(self):
        assert unique_strings(None) == ()
        assert unique_strings(" Bo ") == ("Bo",)
        assert unique_strings(["Bo", 1, "Bo", "Max"]) == ("Bo", "Max")

    def test_parse_timestamp(self):
        assert parse_timestamp("2023-02-15T00:00:00Z") == datetime(2023, 2, 15, tzinfo=timezone.utc)
        assert parse_timestamp("2023-02-15T10:30:00+02:00").hour == 8
        assert parse_timestamp("") is None
        assert parse_timestamp(12345) is None


class TestVideoRecord:
    """Test building records from documents"""

    def test_from_camel_case_mapping(self):
        record = VideoRecord.from_mapping({
            "youtubeId": "xvFZjo5PgG0",
            "title": "Pro Tips for Brawl Ball",
            "creator": {"name": "Brawl Tips", "id": "UC456"},
            "viewCount": 750000,
            "publishedAt": "2023-02-15T00:00:00Z",
            "duration": 240,
            "brawlers": ["Mortis", "El Primo", "Mortis"],
            "gameModes": ["Brawl Ball"],
            "contentType": ["tips", "pro"],
            "timestamps": [{"time": 42, "title": "Super"}],
        })

        assert record.youtube_id == "xvFZjo5PgG0"
        assert record.creator.id == "UC456"
        assert record.brawlers == ("Mortis", "El Primo")
        assert record.content_types == ("tips", "pro")
        assert record.view_count == 750000
        assert record.key_moments[0].time == 42
        assert record.published_at.tzinfo is not None

    def test_to_dict_round_trips_key_fields(self):
        record = VideoRecord.from_mapping({"youtube_id": "a", "title": "t", "brawlers": ["Bo"]})
        data = record.to_dict()
        assert data["youtube_id"] == "a"
        assert data["brawlers"] == ["Bo"]
        assert data["creator"]["id"] == ""
