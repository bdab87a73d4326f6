#!/usr/bin/env python3
"""Seed sample videos and search history into the database"""

import asyncio
import sys
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy.dialects.postgresql import insert

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from navigator.core.database import async_session_maker, engine
from navigator.core.demo_data import demo_search_events, demo_videos, video_row
from navigator.models.search_event import SearchHistory
from navigator.models.video import Video


async def seed_videos(now: datetime):
    """Upsert the sample videos"""
    rows = [video_row(video) for video in demo_videos(now)]

    stmt = insert(Video).values(rows)
    stmt = stmt.on_conflict_do_update(
        index_elements=[Video.youtube_id],
        set_={
            column: stmt.excluded[column]
            for column in rows[0]
            if column != "youtube_id"
        },
    )

    async with async_session_maker() as session:
        await session.execute(stmt)
        await session.commit()
    print(f"Seeded {len(rows)} videos")


async def seed_search_history(now: datetime):
    """Seed sample search queries"""
    events = demo_search_events(now)

    async with async_session_maker() as session:
        for event in events:
            session.add(SearchHistory(
                query=event.query,
                filters=event.filters,
                timestamp=event.timestamp,
            ))
        await session.commit()
    print(f"Seeded {len(events)} search queries")


async def main():
    """Main seeding routine"""
    print("Seeding sample data...")
    now = datetime.now(timezone.utc)

    try:
        await seed_videos(now)
        await seed_search_history(now)
        print("\nSample data seeded successfully!")
    except Exception as e:
        print(f"Seeding failed: {e}")
        sys.exit(1)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
