"""API tests over the in-memory store and a fake chat-completion client"""

import json
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from navigator.config import Settings
from navigator.core.demo_data import demo_search_events, demo_videos
from navigator.core.storage import InMemoryVideoStore
from navigator.main import create_app
from tests.conftest import fake_llm_client

MORTIS_PARAMS = {
    "query": "Mortis gameplay",
    "brawlers": ["Mortis"],
    "gameModes": [],
    "contentType": [],
    "skillLevel": "",
    "sortBy": "popular",
    "intent": "specific",
    "rephrased": "Mortis gameplay videos",
}


def make_settings() -> Settings:
    return Settings(storage_backend="memory", openai_api_key="", app_env="development")


def make_client(store=None, llm_client=None) -> TestClient:
    store = store if store is not None else InMemoryVideoStore(demo_videos(), demo_search_events())
    return TestClient(create_app(settings=make_settings(), store=store, llm_client=llm_client))


@pytest.fixture
def client():
    with make_client() as test_client:
        yield test_client


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["storage"] == "memory"


class TestSearchEndpoint:
    """Test GET /api/search"""

    def test_mortis_by_views(self, client):
        response = client.get("/api/search", params={"brawlers": "Mortis", "sortBy": "popular"})

        assert response.status_code == 200
        body = response.json()
        assert [v["youtube_id"] for v in body["videos"]] == ["b7RtYq0LzWc", "xvFZjo5PgG0", "mK3pX1vQe2A"]
        assert body["pagination"] == {"total": 3, "page": 1, "limit": 10, "pages": 1}
        assert body["processing_time_ms"] >= 0

    def test_multiple_values(self, client):
        response = client.get("/api/search", params=[("gameModes", "Heist"), ("gameModes", "Showdown")])
        assert response.json()["pagination"]["total"] == 3

    def test_malformed_numbers_are_ignored(self, client):
        response = client.get("/api/search", params={"page": "abc", "limit": "-4", "minViews": "lots"})

        assert response.status_code == 200
        assert response.json()["pagination"] == {"total": 8, "page": 1, "limit": 10, "pages": 1}

    def test_paging(self, client):
        response = client.get("/api/search", params={"sortBy": "popular", "page": 2, "limit": 3})
        body = response.json()

        assert len(body["videos"]) == 3
        assert body["pagination"]["pages"] == 3

    def test_request_metric_is_emitted(self, client):
        with patch("navigator.api.search.record_metric") as record_metric:
            response = client.get(
                "/api/search",
                params={"brawlers": "Mortis", "sortBy": "popular"},
                headers={"X-User-Id": "player-1"},
            )

        record_metric.assert_called_once()
        args, kwargs = record_metric.call_args
        assert args == ("search_processing", response.json()["processing_time_ms"])
        assert kwargs["user_id"] == "player-1"
        assert kwargs["results_count"] == 3
        assert kwargs["total_results"] == 3
        assert kwargs["brawlers_count"] == 1

    def test_text_search_is_recorded(self, client):
        client.get("/api/search", params={"query": "spike heist"})
        response = client.get("/api/trends/queries")

        names = [item["name"] for item in response.json()["items"]]
        assert "spike heist" in names

    def test_store_failure_is_503(self):
        store = AsyncMock()
        store.search.return_value = None

        with make_client(store=store) as test_client:
            response = test_client.get("/api/search", params={"query": "mortis"})

        assert response.status_code == 503
        assert response.json()["source"] == "storage"


class TestVideoEndpoints:
    """Test video details and recommendations"""

    def test_video_details(self, client):
        response = client.get("/api/videos/xvFZjo5PgG0")

        assert response.status_code == 200
        body = response.json()
        assert body["video"]["title"] == "Pro Tips for Brawl Ball"
        ids = [r["youtube_id"] for r in body["recommendations"]]
        assert "xvFZjo5PgG0" not in ids
        assert len(ids) == 6
        # Same creator and brawler make this the closest match
        assert ids[0] == "mK3pX1vQe2A"

    def test_unknown_video(self, client):
        response = client.get("/api/videos/nope")
        assert response.status_code == 404

    def test_personalized_recommendations(self, client):
        response = client.get("/api/recommendations")

        assert response.status_code == 200
        body = response.json()
        assert body["explanation"].startswith("Here are some Brawl Stars videos you might enjoy")
        assert body["trending_brawlers"]


class TestTrendsAndCatalog:
    """Test trends, filters and stats"""

    def test_trending_brawlers(self, client):
        body = client.get("/api/trends/brawlers").json()

        assert body["items"][0]["name"] == "Mortis"
        assert body["items"][0]["count"] == 3

    def test_popular_queries(self, client):
        body = client.get("/api/trends/queries").json()
        assert body["items"][0] == {"name": "brawl ball tips", "count": 2, "total_views": None, "score": 2.0}

    def test_popular_creators(self, client):
        body = client.get("/api/trends/creators", params={"limit": 2}).json()

        assert [c["id"] for c in body["creators"]] == ["UC654", "UC321"]
        assert body["pagination"]["pages"] == 3

    def test_filters(self, client):
        body = client.get("/api/filters").json()

        assert {"id": "Mortis", "name": "Mortis"} in body["brawlers"]
        assert {"id": "Heist", "name": "Heist"} in body["game_modes"]
        assert body["sort_options"]

    def test_stats(self, client):
        body = client.get("/api/stats").json()

        assert body["video_count"] == 8
        assert body["popular_creators"]["creators"][0]["id"] == "UC654"
        assert body["popular_queries"]["queries"][0]["name"] == "brawl ball tips"


class TestConversationEndpoints:
    """Test chat and stored preferences"""

    def test_conversation_updates_preferences(self):
        llm = fake_llm_client(
            f"```json\n{json.dumps(MORTIS_PARAMS)}\n```",
            "Here are the top Mortis videos!",
        )
        headers = {"X-User-Id": "player-1"}

        with make_client(llm_client=llm) as test_client:
            response = test_client.post("/api/conversation", json={"message": "show me Mortis gameplay"}, headers=headers)

            assert response.status_code == 200
            body = response.json()
            assert body["message"] == "Here are the top Mortis videos!"
            assert body["search_params"]["source"] == "llm"
            assert [v["youtube_id"] for v in body["results"]][0] == "b7RtYq0LzWc"
            assert body["degraded"] is False

            prefs = test_client.get("/api/preferences", headers=headers).json()
            assert prefs["user_id"] == "player-1"
            assert prefs["preferred_brawlers"] == ["Mortis"]
            assert [m["role"] for m in prefs["conversation_history"]] == ["user", "assistant"]

            cleared = test_client.delete("/api/conversation/history", headers=headers)
            assert cleared.json() == {"message": "Conversation history cleared"}

            prefs = test_client.get("/api/preferences", headers=headers).json()
            assert prefs["conversation_history"] == []
            assert prefs["preferred_brawlers"] == ["Mortis"]

    def test_conversation_without_llm_degrades(self, client):
        response = client.post("/api/conversation", json={"message": "Shelly tips"})

        assert response.status_code == 200
        body = response.json()
        assert body["degraded"] is True
        assert body["search_params"]["source"] == "fallback"
        assert body["search_params"]["brawlers"] == ["Shelly"]

    def test_conversation_metric_is_emitted(self, client):
        with patch("navigator.api.conversation.record_metric") as record_metric:
            response = client.post("/api/conversation", json={"message": "Shelly tips"})

        args, kwargs = record_metric.call_args
        assert args == ("conversation_processing", response.json()["processing_time_ms"])
        assert kwargs["message_length"] == len("Shelly tips")
        assert kwargs["results_count"] == len(response.json()["results"])
        assert kwargs["source"] == "fallback"
        assert kwargs["degraded"] is True

    def test_empty_message_rejected(self, client):
        response = client.post("/api/conversation", json={"message": ""})
        assert response.status_code == 422

    def test_update_preferences(self, client):
        headers = {"X-Session-Id": "s-1"}
        response = client.put(
            "/api/preferences",
            json={"preferred_brawlers": ["Spike", "Crow"]},
            headers=headers,
        )

        assert response.status_code == 200
        assert response.json()["preferred_brawlers"] == ["Spike", "Crow"]
        assert client.get("/api/preferences", headers=headers).json()["session_id"] == "s-1"

    def test_anonymous_preferences_are_blank(self, client):
        prefs = client.get("/api/preferences").json()
        assert prefs["user_id"] is None
        assert prefs["preferred_brawlers"] == []
