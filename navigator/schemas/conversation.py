"""Conversation and preference schemas"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any

from navigator.schemas.video import PaginationResponse, VideoResponse


class ConversationRequest(BaseModel):
    """Schema for a chat message"""
    message: str = Field(..., min_length=1, max_length=2000)
    page: int = Field(default=1, ge=1)


class ConversationResponse(BaseModel):
    message: str
    suggested_actions: List[Dict[str, Any]] = []
    search_params: Dict[str, Any]
    results: List[VideoResponse]
    pagination: PaginationResponse
    degraded: bool = False
    processing_time_ms: float


class ChatMessage(BaseModel):
    role: str
    content: str


class PreferencesResponse(BaseModel):
    """Schema for a user's stored preferences"""
    user_id: Optional[str] = None
    session_id: Optional[str] = None
    preferred_brawlers: List[str] = []
    preferred_game_modes: List[str] = []
    preferred_content_types: List[str] = []
    conversation_history: List[ChatMessage] = []


class PreferencesUpdate(BaseModel):
    """Explicit preference edit; omitted lists are left unchanged"""
    preferred_brawlers: Optional[List[str]] = None
    preferred_game_modes: Optional[List[str]] = None
    preferred_content_types: Optional[List[str]] = None


class MessageResponse(BaseModel):
    message: str
