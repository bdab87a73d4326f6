"""Sample catalogue for demo mode and database seeding"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from navigator.core.search.records import SearchEvent, VideoRecord

# (youtube_id, title, creator, days_ago, duration, brawlers, modes, types, skill, views, popularity, recency)
_SAMPLE_VIDEOS = [
    ("dQw4w9WgXcQ", "Amazing Brawl Stars Gameplay with Shelly",
     ("UC123", "Brawl Stars Official"), 2, 180,
     ["Shelly", "Colt"], ["Gem Grab"], ["gameplay", "tutorial"], "beginner", 1_500_000, 0.95, 0.97),
    ("xvFZjo5PgG0", "Pro Tips for Brawl Ball",
     ("UC456", "Brawl Tips"), 5, 240,
     ["Mortis", "El Primo"], ["Brawl Ball"], ["tips", "pro"], "advanced", 750_000, 0.8, 0.9),
    ("mK3pX1vQe2A", "Mortis Gameplay: 20 Win Streak in Brawl Ball",
     ("UC456", "Brawl Tips"), 9, 612,
     ["Mortis"], ["Brawl Ball"], ["gameplay"], "intermediate", 420_000, 0.7, 0.82),
    ("b7RtYq0LzWc", "How to Play Mortis for Beginners",
     ("UC789", "KairosTime"), 14, 845,
     ["Mortis"], ["Gem Grab", "Brawl Ball"], ["tutorial"], "beginner", 980_000, 0.88, 0.7),
    ("c2NnH8sDfUo", "Funniest Brawl Stars Moments of the Month",
     ("UC321", "Brawl Laughs"), 20, 530,
     ["El Primo", "Bo", "Spike"], ["Showdown"], ["entertainment", "highlights"], "", 2_100_000, 0.9, 0.55),
    ("e5WqLm4TgJk", "Spike Heist Strategy Explained",
     ("UC789", "KairosTime"), 40, 720,
     ["Spike"], ["Heist"], ["tutorial", "tips"], "intermediate", 310_000, 0.55, 0.35),
    ("f9ZcVb3NhRs", "World Finals Highlights: Gem Grab",
     ("UC654", "Brawl Esports"), 75, 1_380,
     ["Bo", "Colt", "Shelly"], ["Gem Grab"], ["pro", "highlights"], "advanced", 3_400_000, 0.99, 0.15),
    ("g1HxDa6KpYe", "Brock Showdown Solo Guide",
     ("UC987", "Lex"), 120, 660,
     ["Brock"], ["Showdown"], ["tutorial", "gameplay"], "intermediate", 150_000, 0.4, 0.05),
]

_SAMPLE_QUERIES = [
    ("brawl ball tips", 1),
    ("best shelly build", 2),
    ("how to use mortis", 3),
    ("brawl ball tips", 4),
    ("mortis gameplay", 6),
]


def demo_videos(now: Optional[datetime] = None) -> List[VideoRecord]:
    """Sample videos published relative to `now`."""
    now = now or datetime.now(timezone.utc)
    videos = []
    for (youtube_id, title, (creator_id, creator_name), days_ago, duration,
         brawlers, modes, types, skill, views, popularity, recency) in _SAMPLE_VIDEOS:
        videos.append(VideoRecord.from_mapping({
            "youtubeId": youtube_id,
            "title": title,
            "description": f"{title}. {', '.join(brawlers)} in {', '.join(modes)}.",
            "creator": {
                "id": creator_id,
                "name": creator_name,
                "url": f"https://www.youtube.com/channel/{creator_id}",
            },
            "publishedAt": now - timedelta(days=days_ago),
            "duration": duration,
            "brawlers": brawlers,
            "gameModes": modes,
            "contentType": types,
            "skillLevel": skill,
            "viewCount": views,
            "likeCount": views // 25,
            "popularity": popularity,
            "recency": recency,
            "timestamps": [{"time": min(30, duration), "title": "Highlight"}],
        }))
    return videos


def demo_search_events(now: Optional[datetime] = None) -> List[SearchEvent]:
    now = now or datetime.now(timezone.utc)
    return [
        SearchEvent(query=query, timestamp=now - timedelta(days=days_ago))
        for query, days_ago in _SAMPLE_QUERIES
    ]


def video_row(video: VideoRecord) -> Dict[str, Any]:
    """Column values for inserting a record into the videos table."""
    return {
        "youtube_id": video.youtube_id,
        "title": video.title,
        "description": video.description,
        "creator_id": video.creator.id,
        "creator_name": video.creator.name,
        "creator_url": video.creator.url,
        "published_at": video.published_at,
        "duration": video.duration,
        "brawlers": list(video.brawlers),
        "game_modes": list(video.game_modes),
        "content_types": list(video.content_types),
        "skill_level": video.skill_level,
        "view_count": video.view_count,
        "like_count": video.like_count,
        "comment_count": video.comment_count,
        "popularity": video.popularity,
        "recency": video.recency,
        "transcript": video.transcript,
        "key_moments": [{"time": m.time, "title": m.title} for m in video.key_moments],
    }
