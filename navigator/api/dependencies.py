"""Request-scoped dependencies: services from app state and caller identity"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, Request

from navigator.config import Settings
from navigator.core.conversation import ConversationService
from navigator.core.preferences import PreferenceCaps, UserPreferences
from navigator.core.search_service import ContentSearchService
from navigator.core.storage import VideoStore


@dataclass(frozen=True)
class Identity:
    """Opaque caller identity taken from request headers"""
    user_id: Optional[str] = None
    session_id: Optional[str] = None


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> VideoStore:
    return request.app.state.store


def get_search_service(request: Request) -> ContentSearchService:
    return request.app.state.search_service


def get_conversation_service(request: Request) -> ConversationService:
    return request.app.state.conversation_service


def get_preference_caps(settings: Settings = Depends(get_app_settings)) -> PreferenceCaps:
    return PreferenceCaps(
        brawlers=settings.max_preferred_brawlers,
        game_modes=settings.max_preferred_game_modes,
        content_types=settings.max_preferred_content_types,
        history=settings.conversation_history_limit,
    )


def get_identity(
    x_user_id: Optional[str] = Header(None),
    x_session_id: Optional[str] = Header(None),
) -> Identity:
    return Identity(
        user_id=(x_user_id or "").strip() or None,
        session_id=(x_session_id or "").strip() or None,
    )


async def get_user_preferences(
    identity: Identity = Depends(get_identity),
    store: VideoStore = Depends(get_store),
) -> UserPreferences:
    """Stored preferences for the caller, or a blank record for new callers."""
    prefs = None
    if identity.user_id or identity.session_id:
        prefs = await store.get_preferences(identity.user_id, identity.session_id)
    return prefs or UserPreferences(user_id=identity.user_id, session_id=identity.session_id)
