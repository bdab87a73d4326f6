"""Video database model"""

from sqlalchemy import Column, String, Text, BigInteger, Integer, Float, Index
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, TIMESTAMP
from sqlalchemy.sql import func

from navigator.core.database import Base


class Video(Base):
    """Videos table: one row per ingested YouTube video"""
    __tablename__ = "videos"

    youtube_id = Column(String(32), primary_key=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    creator_id = Column(String(64), nullable=False, index=True)
    creator_name = Column(String(255), nullable=False)
    creator_url = Column(Text, nullable=True)
    published_at = Column(TIMESTAMP(timezone=True), nullable=False)
    duration = Column(Integer, nullable=False, default=0)

    # Classification
    brawlers = Column(ARRAY(String), nullable=False, default=list)
    game_modes = Column(ARRAY(String), nullable=False, default=list)
    content_types = Column(ARRAY(String), nullable=False, default=list)
    skill_level = Column(String(20), nullable=False, default="")

    # Metrics, derived scores are normalized to [0, 1] by the collector
    view_count = Column(BigInteger, nullable=False, default=0)
    like_count = Column(BigInteger, nullable=False, default=0)
    comment_count = Column(BigInteger, nullable=True)
    popularity = Column(Float, nullable=False, default=0.0)
    recency = Column(Float, nullable=False, default=0.0)

    transcript = Column(Text, nullable=True)
    key_moments = Column(JSONB, nullable=False, default=list)  # [{time, title}]

    last_updated = Column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_videos_brawlers", "brawlers", postgresql_using="gin"),
        Index("idx_videos_game_modes", "game_modes", postgresql_using="gin"),
        Index("idx_videos_content_types", "content_types", postgresql_using="gin"),
        Index("idx_videos_published", "published_at"),
        Index("idx_videos_popularity", "popularity"),
        Index("idx_videos_recency_popularity", "recency", "popularity"),
        Index("idx_videos_views", "view_count"),
    )

    def __repr__(self):
        return f"<Video {self.youtube_id}>"
