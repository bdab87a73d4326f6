"""Prompt templates and result formatting for the conversational layer"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from navigator.core.conversation.catalog import BRAWLERS, GAME_MODES
from navigator.core.search.records import VideoRecord, ensure_utc

NO_RESULTS_TEXT = "No results found for this query."


def format_duration(seconds: int) -> str:
    """Clock-style duration: m:ss below an hour, h:mm:ss above."""
    seconds = max(0, int(seconds or 0))
    minutes, secs = divmod(seconds, 60)
    if minutes < 60:
        return f"{minutes}:{secs:02d}"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}"


def format_count(value: int) -> str:
    """Compact view counts: 1.2M, 45.3K, 999."""
    value = int(value or 0)
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{value / 1_000:.1f}K"
    return str(value)


def format_relative_date(published_at: datetime, now: Optional[datetime] = None) -> str:
    now = ensure_utc(now) if now else datetime.now(timezone.utc)
    days = (now - ensure_utc(published_at)).days

    if days <= 0:
        return "Today"
    if days == 1:
        return "Yesterday"
    if days < 7:
        return f"{days} days ago"
    if days < 30:
        weeks = days // 7
        return f"{weeks} week{'s' if weeks > 1 else ''} ago"
    if days < 365:
        months = days // 30
        return f"{months} month{'s' if months > 1 else ''} ago"
    return published_at.strftime("%Y-%m-%d")


def format_history(history: Iterable[Mapping[str, str]], context_length: int = 12) -> str:
    """Last `context_length` messages as "User: ..." / "Assistant: ..." lines."""
    messages = list(history)[-context_length:] if context_length > 0 else []
    lines = []
    for message in messages:
        speaker = "User" if message.get("role") == "user" else "Assistant"
        lines.append(f"{speaker}: {message.get('content', '')}")
    return "\n".join(lines)


def format_results(videos: Sequence[VideoRecord], now: Optional[datetime] = None) -> str:
    """Numbered plain-text digest of search results for the response prompt."""
    blocks = []
    for index, video in enumerate(videos, start=1):
        if video.key_moments:
            moment = video.key_moments[0]
            key_moment = f"{moment.title or 'Highlight'} at {format_duration(moment.time)}"
        else:
            key_moment = "None"

        blocks.append(
            f'{index}. "{video.title}" by {video.creator.name}\n'
            f"   - Brawlers: {', '.join(video.brawlers) or 'None'}\n"
            f"   - Game Mode: {', '.join(video.game_modes) or 'None'}\n"
            f"   - Content Type: {', '.join(video.content_types) or 'General'}\n"
            f"   - Views: {format_count(video.view_count)}\n"
            f"   - Duration: {format_duration(video.duration)}\n"
            f"   - Published: {format_relative_date(video.published_at, now)}\n"
            f"   - Key Moment: {key_moment}"
        )
    return "\n\n".join(blocks)


def build_search_params_prompt(history_text: str, preferences: Mapping[str, Any]) -> str:
    """System prompt that turns a user message into structured search parameters."""
    return f"""You are an AI assistant that helps users find Brawl Stars gaming content.
Your task is to convert natural language queries into structured search parameters.

BRAWL STARS INFORMATION:
- Brawlers: {', '.join(BRAWLERS)}
- Game Modes: {', '.join(GAME_MODES)}
- Content Types: gameplay, tutorial, entertainment, pro, esports, funny, highlights, tips, strategy
- Skill Levels: beginner, intermediate, advanced

USER PREFERENCES:
{json.dumps(dict(preferences), indent=2, default=str)}

PREVIOUS CONVERSATION:
{history_text}

INSTRUCTIONS:
1. Convert the user's query into search parameters for finding Brawl Stars videos.
2. Extract mentions of specific brawlers, game modes, content types, and skill levels.
3. Determine if the user is looking for educational content (tutorials, tips) or entertainment (funny moments, highlights).
4. Take into account the conversation history to maintain context.
5. Consider the user's preferences to personalize the search parameters.
6. Respond with a JSON object containing the extracted parameters.

Your response should be a JSON object in the following format:
```json
{{
  "query": "The search text to use",
  "brawlers": ["Brawler1", "Brawler2"],
  "gameModes": ["GameMode1", "GameMode2"],
  "contentType": ["tutorial", "gameplay", "entertainment", "pro"],
  "skillLevel": "beginner/intermediate/advanced",
  "sortBy": "relevance/recent/popular/trending",
  "intent": "educational/entertainment/specific/general",
  "rephrased": "A rephrased version of the query for better search results"
}}
```

Only include parameters that are relevant to the query. If a parameter isn't mentioned, leave its array empty or field blank.
If the query is ambiguous or open-ended, prioritize the most relevant content based on user preferences."""


def build_response_prompt(
    params: Mapping[str, Any],
    results_text: str,
    history_text: str,
) -> str:
    """System prompt for the conversational reply about a page of results."""
    return f"""You are an AI assistant that helps users find Brawl Stars gaming content.
Your task is to provide helpful and conversational responses based on search results.

SEARCH PARAMETERS:
{json.dumps(dict(params), indent=2, default=str)}

SEARCH RESULTS:
{results_text or NO_RESULTS_TEXT}

PREVIOUS CONVERSATION:
{history_text}

INSTRUCTIONS:
1. Provide a conversational response that highlights the most relevant videos from the search results.
2. Mention specific brawlers, game modes, or content types that were found.
3. If the results don't seem relevant, suggest ways to refine the search.
4. Maintain a friendly, helpful tone appropriate for Brawl Stars players.
5. Include 3-5 suggested follow-up actions the user might want to take.
6. If there are key moments listed, highlight those.

Your response should be a conversational message, optionally followed by suggested actions formatted as:

SUGGESTED_ACTIONS: ```json
[
  {{"type": "refine_search", "label": "Show me more Mortis tutorials", "parameters": {{"brawlers": ["Mortis"], "contentType": ["tutorial"]}}}},
  {{"type": "filter_by_mode", "label": "Mortis in Brawl Ball", "parameters": {{"brawlers": ["Mortis"], "gameModes": ["Brawl Ball"]}}}}
]
```"""


def build_response_user_message(query: str) -> str:
    return f'Query: "{query}"\nPlease provide a helpful response based on the search results.'


def preference_context(preferences: Optional[Mapping[str, Any]]) -> Dict[str, List[str]]:
    """The subset of a preferences mapping worth showing the model."""
    preferences = preferences or {}
    return {
        "preferred_brawlers": list(preferences.get("preferred_brawlers") or []),
        "preferred_game_modes": list(preferences.get("preferred_game_modes") or []),
        "preferred_content_types": list(preferences.get("preferred_content_types") or []),
    }
