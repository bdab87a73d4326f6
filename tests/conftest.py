"""Shared fixtures: video factory, in-memory store and a fake chat-completion client"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from navigator.core.search.records import Creator, VideoRecord
from navigator.core.search_service import ContentSearchService
from navigator.core.storage import InMemoryVideoStore
from navigator.utils.retry import RetryPolicy

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_video(
    youtube_id: str = "vid",
    title: str = "",
    brawlers=(),
    game_modes=(),
    content_types=(),
    creator_id: str = "UC1",
    view_count: int = 0,
    popularity: float = 0.0,
    recency: float = 0.0,
    days_ago: float = 1,
    **kwargs,
) -> VideoRecord:
    return VideoRecord(
        youtube_id=youtube_id,
        title=title or f"Video {youtube_id}",
        creator=Creator(id=creator_id, name=f"Creator {creator_id}"),
        published_at=NOW - timedelta(days=days_ago),
        brawlers=tuple(brawlers),
        game_modes=tuple(game_modes),
        content_types=tuple(content_types),
        view_count=view_count,
        popularity=popularity,
        recency=recency,
        **kwargs,
    )


def completion(content: str) -> SimpleNamespace:
    """Shape of an openai chat completion response"""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    )


def fake_llm_client(*contents) -> SimpleNamespace:
    """Client whose chat.completions.create returns (or raises) each item in turn"""
    side_effect = [
        item if isinstance(item, Exception) else completion(item)
        for item in contents
    ]
    create = AsyncMock(side_effect=side_effect)
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


@pytest.fixture
def video_factory():
    return make_video


@pytest.fixture
def catalogue():
    return [
        make_video(
            "mortis1", title="Mortis Brawl Ball guide",
            description="Dash timing and supers",
            brawlers=["Mortis"], game_modes=["Brawl Ball"], content_types=["tutorial"],
            creator_id="UC1", view_count=500_000, popularity=0.8, recency=0.9, days_ago=2,
        ),
        make_video(
            "mortis2", title="Mortis and Colt duo",
            brawlers=["Mortis", "Colt"], game_modes=["Gem Grab"], content_types=["gameplay"],
            creator_id="UC2", view_count=200_000, popularity=0.5, recency=0.6, days_ago=5,
        ),
        make_video(
            "shelly1", title="Shelly Showdown highlights",
            brawlers=["Shelly"], game_modes=["Showdown"], content_types=["highlights"],
            creator_id="UC3", view_count=900_000, popularity=0.9, recency=0.4, days_ago=10,
        ),
    ]


@pytest.fixture
def store(catalogue):
    return InMemoryVideoStore(catalogue)


@pytest.fixture
def search_service(store):
    return ContentSearchService(store, clock=lambda: NOW)


@pytest.fixture
def no_wait_policy():
    return RetryPolicy(max_attempts=3, base_delay=0, max_delay=0, jitter=0)
