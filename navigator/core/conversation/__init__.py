"""Conversational layer: LLM-driven query parsing and replies"""

from navigator.core.conversation.service import (
    AssistantReply,
    ConversationService,
    ConversationTurn,
    ParsedQuery,
    PromptCache,
    extract_basic_entities,
    extract_json_block,
)

__all__ = [
    "AssistantReply",
    "ConversationService",
    "ConversationTurn",
    "ParsedQuery",
    "PromptCache",
    "extract_basic_entities",
    "extract_json_block",
]
