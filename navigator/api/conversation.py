"""Conversation and preference endpoints"""

import time

import structlog
from fastapi import APIRouter, Depends

from navigator.api.dependencies import (
    get_app_settings,
    get_conversation_service,
    get_preference_caps,
    get_search_service,
    get_store,
    get_user_preferences,
)
from navigator.config import Settings
from navigator.core.conversation import ConversationService
from navigator.core.errors import UpstreamFailure
from navigator.core.preferences import PreferenceCaps, UserPreferences, clear_history, replace_preferences
from navigator.core.search_service import ContentSearchService
from navigator.core.storage import VideoStore
from navigator.schemas.conversation import (
    ConversationRequest,
    ConversationResponse,
    MessageResponse,
    PreferencesResponse,
    PreferencesUpdate,
)
from navigator.utils.metrics import record_metric

logger = structlog.get_logger()

router = APIRouter()


@router.post("/conversation", response_model=ConversationResponse)
async def converse(
    request: ConversationRequest,
    prefs: UserPreferences = Depends(get_user_preferences),
    caps: PreferenceCaps = Depends(get_preference_caps),
    settings: Settings = Depends(get_app_settings),
    store: VideoStore = Depends(get_store),
    search_service: ContentSearchService = Depends(get_search_service),
    conversation: ConversationService = Depends(get_conversation_service),
):
    """Answer a natural language message with matching videos"""
    started = time.perf_counter()

    turn = await conversation.process_message(
        request.message,
        prefs,
        search_service,
        page=request.page,
        page_size=settings.conversation_page_size,
        caps=caps,
    )

    if turn.preferences.user_id or turn.preferences.session_id:
        try:
            await store.save_preferences(turn.preferences)
        except UpstreamFailure as e:
            logger.error("Failed to save user preferences", user_id=prefs.user_id, error=e.message)

    processing_time_ms = round((time.perf_counter() - started) * 1000, 2)
    record_metric(
        "conversation_processing",
        processing_time_ms,
        user_id=prefs.user_id,
        message_length=len(request.message),
        response_length=len(turn.reply.message),
        results_count=len(turn.videos),
        source=turn.parsed.source,
        degraded=turn.reply.degraded or turn.parsed.degraded,
    )

    return {**turn.to_dict(), "processing_time_ms": processing_time_ms}


@router.delete("/conversation/history", response_model=MessageResponse)
async def delete_history(
    prefs: UserPreferences = Depends(get_user_preferences),
    store: VideoStore = Depends(get_store),
):
    if prefs.user_id or prefs.session_id:
        await store.save_preferences(clear_history(prefs))
    return {"message": "Conversation history cleared"}


@router.get("/preferences", response_model=PreferencesResponse)
async def get_preferences(prefs: UserPreferences = Depends(get_user_preferences)):
    return prefs.to_dict()


@router.put("/preferences", response_model=PreferencesResponse)
async def update_preferences(
    update: PreferencesUpdate,
    prefs: UserPreferences = Depends(get_user_preferences),
    caps: PreferenceCaps = Depends(get_preference_caps),
    store: VideoStore = Depends(get_store),
):
    """Overwrite the preference lists given in the body"""
    updated = replace_preferences(
        prefs,
        brawlers=update.preferred_brawlers,
        game_modes=update.preferred_game_modes,
        content_types=update.preferred_content_types,
        caps=caps,
    )
    if updated.user_id or updated.session_id:
        updated = await store.save_preferences(updated)
    return updated.to_dict()
