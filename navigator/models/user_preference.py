"""User preference database model"""

from sqlalchemy import Column, String
from sqlalchemy.dialects.postgresql import UUID, JSONB, TIMESTAMP
from sqlalchemy.sql import func
import uuid

from navigator.core.database import Base


class UserPreference(Base):
    """Per-user (or per-session) preferences and conversation history"""
    __tablename__ = "user_preferences"

    preference_id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )
    user_id = Column(String(255), nullable=True, unique=True)
    session_id = Column(String(255), nullable=True, index=True)
    preferred_brawlers = Column(JSONB, nullable=False, default=list)
    preferred_game_modes = Column(JSONB, nullable=False, default=list)
    preferred_content_types = Column(JSONB, nullable=False, default=list)
    conversation_history = Column(JSONB, nullable=False, default=list)
    created_at = Column(
        TIMESTAMP(timezone=True),
        server_default=func.now()
    )
    last_updated = Column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )

    def __repr__(self):
        return f"<UserPreference user={self.user_id} session={self.session_id}>"
