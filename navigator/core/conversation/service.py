"""
Conversational search: natural language in, structured search and a reply out.

The chat-completion client, the prompt cache and the retry policy are all
injected so the service can run against a fake client in tests.
"""

import hashlib
import json
import re
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import structlog

from navigator.core.conversation import prompts
from navigator.core.conversation.catalog import (
    BRAWLERS,
    CONTENT_TYPE_KEYWORDS,
    GAME_MODES,
    SKILL_LEVEL_KEYWORDS,
)
from navigator.core.errors import LLMUnavailable
from navigator.core.preferences import (
    PreferenceCaps,
    UserPreferences,
    add_to_history,
    merge_search_into_preferences,
)
from navigator.core.search.pagination import PageInfo
from navigator.core.search.records import VideoRecord
from navigator.core.search_service import ContentSearchService
from navigator.utils.retry import RetryPolicy

logger = structlog.get_logger()

DEFAULT_MODEL = "gpt-3.5-turbo"
DEFAULT_CONTEXT_LENGTH = 12
DEFAULT_CACHE_TTL_SECONDS = 3600
CACHE_KEY_HISTORY_MESSAGES = 3

FALLBACK_REPLY = (
    "I found some Brawl Stars videos that might interest you. Let me know if "
    "you'd like me to refine the search or if you want more specific content."
)

_FENCED_JSON_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")
_SUGGESTED_ACTIONS_RE = re.compile(r"SUGGESTED_ACTIONS:\s*```(?:json)?\s*([\s\S]*?)\s*```")


@dataclass
class CacheEntry:
    """Prompt cache entry with TTL."""
    value: Any
    expires_at: float


class PromptCache:
    """
    In-memory TTL cache for parsed LLM output.

    Bounded: once full, expired entries are purged first and then the
    oldest insertions are evicted.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        max_entries: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max(1, max_entries)
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    @staticmethod
    def make_key(query: str, history: Iterable[Mapping[str, str]] = ()) -> str:
        """Key on the query plus the last few history messages."""
        recent = "".join(
            str(m.get("content", "")) for m in list(history)[-CACHE_KEY_HISTORY_MESSAGES:]
        )
        digest = hashlib.sha256((query + recent).encode("utf-8")).hexdigest()
        return f"search_params_{digest}"

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: Any) -> None:
        if key not in self._entries and len(self._entries) >= self.max_entries:
            self.purge_expired()
            while len(self._entries) >= self.max_entries:
                self._entries.pop(next(iter(self._entries)))
        self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + self.ttl_seconds)

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [k for k, v in self._entries.items() if v.expires_at <= now]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        return count

    def __len__(self) -> int:
        return len(self._entries)


@dataclass(frozen=True)
class ParsedQuery:
    """Structured search parameters extracted from a user message"""
    params: Dict[str, Any]
    source: str  # "llm", "cache" or "fallback"

    @property
    def degraded(self) -> bool:
        return self.source == "fallback"

    def to_dict(self) -> Dict[str, Any]:
        return {**self.params, "source": self.source}


@dataclass(frozen=True)
class AssistantReply:
    message: str
    suggested_actions: List[Dict[str, Any]] = field(default_factory=list)
    degraded: bool = False


@dataclass(frozen=True)
class ConversationTurn:
    """Everything produced by one user message"""
    reply: AssistantReply
    parsed: ParsedQuery
    videos: List[VideoRecord]
    page_info: PageInfo
    preferences: UserPreferences

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.reply.message,
            "suggested_actions": self.reply.suggested_actions,
            "search_params": self.parsed.to_dict(),
            "results": [v.to_dict() for v in self.videos],
            "pagination": self.page_info.to_dict(),
            "degraded": self.reply.degraded or self.parsed.degraded,
        }


def extract_json_block(text: Optional[str]) -> Optional[Any]:
    """
    Pull a JSON value out of model output.

    Tries the whole text, then a fenced ```json block, then the outermost
    {...} span. Returns None when nothing parses.
    """
    if not text:
        return None
    text = text.strip()

    candidates = [text]
    match = _FENCED_JSON_RE.search(text)
    if match:
        candidates.append(match.group(1))
    start, end = text.find("{"), text.rfind("}")
    if 0 <= start < end:
        candidates.append(text[start:end + 1])

    for candidate in candidates:
        try:
            return json.loads(candidate)
        except (json.JSONDecodeError, ValueError):
            continue
    return None


def _mentions(text: str, phrase: str, plural: bool = False) -> bool:
    """Whole-word (optionally pluralized) match of a lower-cased phrase."""
    suffix = "s?" if plural else ""
    return re.search(rf"(?<!\w){re.escape(phrase.lower())}{suffix}(?!\w)", text) is not None


def extract_basic_entities(query: str) -> Dict[str, Any]:
    """Keyword-based search parameters, used when the LLM is unavailable."""
    lowered = (query or "").lower()

    brawlers = [b for b in BRAWLERS if _mentions(lowered, b)]
    game_modes = [m for m in GAME_MODES if _mentions(lowered, m)]
    content_types = [
        content_type
        for content_type, keywords in CONTENT_TYPE_KEYWORDS.items()
        if any(_mentions(lowered, keyword, plural=True) for keyword in keywords)
    ]

    skill_level = ""
    for level, keywords in SKILL_LEVEL_KEYWORDS:
        if any(_mentions(lowered, keyword, plural=True) for keyword in keywords):
            skill_level = level
            break

    if "tutorial" in content_types or "tips" in content_types:
        intent = "educational"
    elif "entertainment" in content_types or "highlights" in content_types:
        intent = "entertainment"
    elif brawlers or game_modes:
        intent = "specific"
    else:
        intent = "general"

    return {
        "query": query,
        "brawlers": brawlers,
        "gameModes": game_modes,
        "contentType": content_types,
        "skillLevel": skill_level,
        "sortBy": "relevance",
        "intent": intent,
        "rephrased": query,
    }


def split_suggested_actions(text: str) -> Tuple[str, List[Dict[str, Any]]]:
    """Separate the trailing SUGGESTED_ACTIONS block from the reply text."""
    match = _SUGGESTED_ACTIONS_RE.search(text)
    if not match:
        return text.strip(), []

    message = (text[:match.start()] + text[match.end():]).strip()
    try:
        actions = json.loads(match.group(1))
    except (json.JSONDecodeError, ValueError) as e:
        logger.warning("Could not parse suggested actions", error=str(e))
        return message, []

    if not isinstance(actions, list):
        return message, []
    return message, [a for a in actions if isinstance(a, dict)]


class ConversationService:
    """
    Turns chat messages into searches and replies via a chat-completion API.

    Every model call runs under the retry policy; when retries are exhausted
    the service degrades instead of failing: search parameters come from
    keyword extraction and the reply is a canned message.
    """

    def __init__(
        self,
        client: Any,
        model: str = DEFAULT_MODEL,
        cache: Optional[PromptCache] = None,
        retry_policy: Optional[RetryPolicy] = None,
        context_length: int = DEFAULT_CONTEXT_LENGTH,
        search_params_max_tokens: int = 1000,
        search_params_temperature: float = 0.1,
        response_max_tokens: int = 1000,
        response_temperature: float = 0.7,
    ):
        self.client = client
        self.model = model
        self.cache = cache if cache is not None else PromptCache()
        self.retry_policy = retry_policy or RetryPolicy()
        self.context_length = context_length
        self.search_params_max_tokens = search_params_max_tokens
        self.search_params_temperature = search_params_temperature
        self.response_max_tokens = response_max_tokens
        self.response_temperature = response_temperature

    @classmethod
    def from_settings(cls, client: Any, settings, cache: Optional[PromptCache] = None) -> "ConversationService":
        return cls(
            client,
            model=settings.openai_model,
            cache=cache or PromptCache(
                ttl_seconds=settings.prompt_cache_ttl_seconds,
                max_entries=settings.prompt_cache_max_entries,
            ),
            retry_policy=RetryPolicy(
                max_attempts=settings.llm_max_retries + 1,
                base_delay=settings.llm_retry_base_delay,
                max_delay=settings.llm_retry_max_delay,
                multiplier=settings.llm_retry_multiplier,
                jitter=settings.llm_retry_jitter,
            ),
            context_length=settings.conversation_context_length,
            search_params_max_tokens=settings.search_params_max_tokens,
            search_params_temperature=settings.search_params_temperature,
            response_max_tokens=settings.response_max_tokens,
            response_temperature=settings.response_temperature,
        )

    async def _complete(
        self,
        messages: List[Dict[str, str]],
        max_tokens: int,
        temperature: float,
        operation: str,
    ) -> str:
        """One chat completion under the retry policy, as plain text."""
        if self.client is None:
            raise LLMUnavailable("No LLM client configured")

        async def call() -> str:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
            )
            return response.choices[0].message.content or ""

        try:
            return await self.retry_policy.run(call, name=operation)
        except Exception as e:
            logger.error("LLM call failed after retries", operation=operation, error=str(e))
            raise LLMUnavailable(f"{operation} failed", cause=e) from e

    async def generate_search_params(
        self,
        query: str,
        history: Sequence[Mapping[str, str]] = (),
        preferences: Optional[Mapping[str, Any]] = None,
    ) -> ParsedQuery:
        """Structured search parameters for a message, cached per query and recent context."""
        cache_key = PromptCache.make_key(query, history)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug("Using cached search parameters", query=query)
            return ParsedQuery(params=dict(cached), source="cache")

        system_prompt = prompts.build_search_params_prompt(
            prompts.format_history(history, self.context_length),
            prompts.preference_context(preferences),
        )

        try:
            text = await self._complete(
                [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": query},
                ],
                max_tokens=self.search_params_max_tokens,
                temperature=self.search_params_temperature,
                operation="generate_search_params",
            )
        except LLMUnavailable:
            return ParsedQuery(params=extract_basic_entities(query), source="fallback")

        params = extract_json_block(text)
        if not isinstance(params, dict):
            logger.error("Failed to extract JSON from LLM response", response=text[:500])
            return ParsedQuery(params=extract_basic_entities(query), source="fallback")

        params.setdefault("query", query)
        self.cache.set(cache_key, params)
        logger.debug("Generated search parameters", query=query, params=params)
        return ParsedQuery(params=dict(params), source="llm")

    async def generate_response(
        self,
        params: Mapping[str, Any],
        results: Sequence[VideoRecord],
        history: Sequence[Mapping[str, str]] = (),
    ) -> AssistantReply:
        system_prompt = prompts.build_response_prompt(
            params,
            prompts.format_results(results),
            prompts.format_history(history, self.context_length),
        )

        try:
            text = await self._complete(
                [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompts.build_response_user_message(str(params.get("query", "")))},
                ],
                max_tokens=self.response_max_tokens,
                temperature=self.response_temperature,
                operation="generate_response",
            )
        except LLMUnavailable:
            return AssistantReply(message=FALLBACK_REPLY, degraded=True)

        message, actions = split_suggested_actions(text)
        return AssistantReply(message=message or FALLBACK_REPLY, suggested_actions=actions)

    async def process_message(
        self,
        message: str,
        prefs: UserPreferences,
        search_service: ContentSearchService,
        page: int = 1,
        page_size: int = 12,
        caps: PreferenceCaps = PreferenceCaps(),
    ) -> ConversationTurn:
        """
        Handle one chat message end to end.

        Parses the message, runs the search, writes the reply and returns
        the caller's preferences updated with the searched entities and the
        new history messages. Storage failures propagate.
        """
        history = list(prefs.conversation_history)
        parsed = await self.generate_search_params(message, history, prefs.to_dict())

        result = await search_service.search({**parsed.params, "page": page, "page_size": page_size})
        reply = await self.generate_response(parsed.params, result.videos, history)

        updated = merge_search_into_preferences(prefs, parsed.params, caps)
        updated = add_to_history(updated, "user", message, caps.history)
        updated = add_to_history(updated, "assistant", reply.message, caps.history)

        logger.info(
            "Conversation message processed",
            user_id=prefs.user_id,
            source=parsed.source,
            results=len(result.videos),
            total=result.page_info.total_matches,
        )

        return ConversationTurn(
            reply=reply,
            parsed=parsed,
            videos=result.videos,
            page_info=result.page_info,
            preferences=updated,
        )
