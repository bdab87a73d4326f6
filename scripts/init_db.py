#!/usr/bin/env python3
"""Database initialization script"""

import asyncio
import sys
from pathlib import Path

from sqlalchemy import Index

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from navigator.core.database import engine, Base
from navigator.core.sql_store import document_vector
from navigator.models import Video, SearchHistory, UserPreference  # noqa: F401

# Same expression the search queries use, so the planner can match it
TEXT_SEARCH_INDEX = Index("idx_videos_text_search", document_vector(), postgresql_using="gin")


async def init_database():
    """Create all tables and the weighted full-text index"""
    print("Initializing database...")

    async with engine.begin() as conn:
        # Drop all tables (use with caution in production!)
        # await conn.run_sync(Base.metadata.drop_all)

        await conn.run_sync(Base.metadata.create_all)
        await conn.run_sync(TEXT_SEARCH_INDEX.create, checkfirst=True)

    print("Database initialized successfully!")
    print("\nCreated tables:")
    for table in Base.metadata.tables:
        print(f"  - {table}")
    print(f"\nText search index: {TEXT_SEARCH_INDEX.name}")


async def verify_connection():
    """Verify database connection"""
    from sqlalchemy import text

    print("Verifying database connection...")

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
            print("Database connection verified!")
            return True
    except Exception as e:
        print(f"Database connection failed: {e}")
        return False


async def main():
    """Main initialization routine"""
    if not await verify_connection():
        print("\nPlease ensure PostgreSQL is running and DATABASE_URL is configured correctly.")
        sys.exit(1)

    await init_database()

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
