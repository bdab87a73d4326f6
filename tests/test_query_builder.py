"""Tests for predicate and sort construction"""

from datetime import datetime, timezone

import pytest

from navigator.core.search.filters import normalize_filter
from navigator.core.search.query_builder import (
    AnyOf,
    Equals,
    Range,
    SortKey,
    TextSearch,
    build_predicate,
    build_query,
    build_sort,
    execute_in_memory,
)


class TestBuildPredicate:
    """Test filter to predicate translation"""

    def test_empty_filter_matches_everything(self, catalogue):
        """Test that a filter with no constraints matches every record"""
        predicate = build_predicate(normalize_filter({}))

        assert predicate.is_empty()
        assert all(predicate.matches(video) for video in catalogue)

    def test_brawler_set_intersection(self, video_factory):
        shelly = video_factory("s", brawlers=["Shelly"])

        assert build_predicate(normalize_filter({"brawlers": ["Shelly", "Colt"]})).matches(shelly)
        assert not build_predicate(normalize_filter({"brawlers": ["Mortis"]})).matches(shelly)

    def test_record_without_brawlers_never_matches_brawler_filter(self, video_factory):
        predicate = build_predicate(normalize_filter({"brawlers": ["Mortis"]}))
        assert not predicate.matches(video_factory("x"))

    def test_conditions_for_every_field(self):
        search_filter = normalize_filter({
            "query": "mortis",
            "brawlers": ["Mortis"],
            "gameModes": ["Brawl Ball"],
            "contentType": ["tutorial"],
            "skillLevel": "advanced",
            "channelId": "UC1",
            "minViews": 100,
            "maxDuration": 600,
            "dateFrom": "2025-01-01",
        })
        conditions = build_predicate(search_filter).conditions

        assert TextSearch("mortis") in conditions
        assert AnyOf("brawlers", ("Mortis",)) in conditions
        assert AnyOf("game_modes", ("Brawl Ball",)) in conditions
        assert AnyOf("content_types", ("tutorial",)) in conditions
        assert Equals("skill_level", "advanced") in conditions
        assert Equals("creator.id", "UC1") in conditions
        assert Range("view_count", lower=100) in conditions
        assert Range("duration", upper=600) in conditions
        assert Range(
            "published_at", lower=datetime(2025, 1, 1, tzinfo=timezone.utc)
        ) in conditions

    def test_zero_bounds_add_no_condition(self):
        predicate = build_predicate(normalize_filter({"minViews": 0, "maxDuration": 0}))
        assert predicate.is_empty()

    def test_range_is_inclusive(self, video_factory):
        video = video_factory("v", view_count=1000)
        assert Range("view_count", lower=1000).matches(video)
        assert Range("view_count", upper=1000).matches(video)
        assert not Range("view_count", lower=1001).matches(video)

    def test_unknown_filter_value_matches_nothing(self, catalogue):
        predicate = build_predicate(normalize_filter({"gameModes": ["Underwater Polo"]}))
        assert not any(predicate.matches(video) for video in catalogue)


class TestTextSearch:
    """Test the in-memory weighted text match"""

    def test_title_outweighs_description_and_transcript(self, video_factory):
        search = TextSearch("mortis")
        in_title = video_factory("a", title="Mortis guide")
        in_description = video_factory("b", title="Guide", description="mortis")
        in_transcript = video_factory("c", title="Guide", transcript="mortis")

        assert search.score(in_title) == 10
        assert search.score(in_description) == 5
        assert search.score(in_transcript) == 1

    def test_any_term_matches(self, video_factory):
        video = video_factory("a", title="Shelly tips")
        assert TextSearch("mortis shelly").matches(video)
        assert not TextSearch("mortis colt").matches(video)

    def test_stop_words_do_not_score(self, video_factory):
        video = video_factory("a", title="How to play the Mortis way")
        assert TextSearch("the mortis").score(video) == 10
        assert TextSearch("how to").terms == []


class TestBuildSort:
    """Test sort selection"""

    def test_relevance_with_text_sorts_by_text_score(self):
        assert build_sort(normalize_filter({"query": "mortis"})).keys == (SortKey("text_score"),)

    def test_relevance_without_text_sorts_by_popularity(self):
        assert build_sort(normalize_filter({})).keys == (SortKey("popularity"),)

    @pytest.mark.parametrize("sort_by,fields", [
        ("recent", ["published_at"]),
        ("popular", ["view_count"]),
        ("trending", ["recency", "popularity"]),
    ])
    def test_named_sorts(self, sort_by, fields):
        keys = build_sort(normalize_filter({"sortBy": sort_by})).keys
        assert [key.field for key in keys] == fields

    @pytest.mark.parametrize("query", ["???", "how to the", "  !! the ??"])
    def test_relevance_without_search_terms_sorts_by_popularity(self, query):
        """Test that punctuation or stop-word queries rank like a query-less search"""
        search_filter = normalize_filter({"query": query})
        assert build_sort(search_filter).keys == (SortKey("popularity"),)
        assert build_predicate(search_filter).text_search is None

    def test_unknown_sort_equals_popular(self):
        """Test that an unrecognized sort mode builds the same query as popular"""
        banana = build_query(normalize_filter({"brawlers": ["Mortis"], "sortBy": "banana"}))
        popular = build_query(normalize_filter({"brawlers": ["Mortis"], "sortBy": "popular"}))
        assert banana == popular


class TestBuildQuery:
    """Test full query construction and in-memory execution"""

    def test_offset_and_limit(self):
        query = build_query(normalize_filter({"page": 3, "page_size": 10}))
        assert query.offset == 20
        assert query.limit == 10

    def test_mortis_popular_end_to_end(self, catalogue):
        """Test the Mortis filter sorted by views excludes the higher-viewed Shelly video"""
        query = build_query(normalize_filter({"brawlers": ["Mortis"], "sortBy": "popular"}))
        page, total = execute_in_memory(query, catalogue)

        assert total == 2
        assert [v.view_count for v in page] == [500_000, 200_000]
        assert "shelly1" not in [v.youtube_id for v in page]

    def test_text_results_are_annotated_and_ranked(self, catalogue):
        query = build_query(normalize_filter({"query": "mortis"}))
        page, total = execute_in_memory(query, catalogue)

        assert total == 2
        assert all(v.text_score and v.text_score > 0 for v in page)
        assert page[0].text_score >= page[1].text_score

    def test_trending_sort_uses_popularity_as_tiebreak(self, video_factory):
        videos = [
            video_factory("a", recency=0.5, popularity=0.1),
            video_factory("b", recency=0.5, popularity=0.9),
            video_factory("c", recency=0.9, popularity=0.0),
        ]
        page, _ = execute_in_memory(build_query(normalize_filter({"sortBy": "trending"})), videos)
        assert [v.youtube_id for v in page] == ["c", "b", "a"]

    def test_page_past_the_end_is_empty(self, catalogue):
        query = build_query(normalize_filter({"page": 5, "page_size": 2}))
        page, total = execute_in_memory(query, catalogue)
        assert page == []
        assert total == 3

    def test_stop_word_query_lists_everything_by_popularity(self, catalogue):
        """Test that a query of stop words matches every record, most popular first"""
        page, total = execute_in_memory(build_query(normalize_filter({"query": "how to the"})), catalogue)

        assert total == 3
        assert [v.youtube_id for v in page] == ["shelly1", "mortis1", "mortis2"]
        assert all(v.text_score is None for v in page)
