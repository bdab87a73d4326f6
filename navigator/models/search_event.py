"""Search history database model"""

from sqlalchemy import Column, String, Text, Index
from sqlalchemy.dialects.postgresql import UUID, JSONB, TIMESTAMP
from sqlalchemy.sql import func
import uuid

from navigator.core.database import Base


class SearchHistory(Base):
    """Search history: one row per free-text search, feeds query trending"""
    __tablename__ = "search_history"

    event_id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )
    query = Column(Text, nullable=False, index=True)
    filters = Column(JSONB, nullable=False, default=dict)
    user_id = Column(String(255), nullable=True, index=True)
    session_id = Column(String(255), nullable=True, index=True)
    timestamp = Column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    __table_args__ = (
        Index("idx_search_history_timestamp", "timestamp"),
    )

    def __repr__(self):
        return f"<SearchHistory {self.query!r}>"
