"""User preference tracking: preferred brawlers/modes/types and chat history"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from navigator.core.search.records import unique_strings


@dataclass(frozen=True)
class PreferenceCaps:
    brawlers: int = 10
    game_modes: int = 5
    content_types: int = 5
    history: int = 20


@dataclass(frozen=True)
class UserPreferences:
    """Preferences keyed by an opaque user id and/or session id"""
    user_id: Optional[str] = None
    session_id: Optional[str] = None
    preferred_brawlers: Tuple[str, ...] = ()
    preferred_game_modes: Tuple[str, ...] = ()
    preferred_content_types: Tuple[str, ...] = ()
    conversation_history: Tuple[Dict[str, str], ...] = field(default=(), compare=False)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "UserPreferences":
        history = []
        for message in data.get("conversation_history") or []:
            if isinstance(message, Mapping) and message.get("content"):
                history.append({
                    "role": str(message.get("role") or "user"),
                    "content": str(message["content"]),
                })
        return cls(
            user_id=data.get("user_id"),
            session_id=data.get("session_id"),
            preferred_brawlers=unique_strings(data.get("preferred_brawlers")),
            preferred_game_modes=unique_strings(data.get("preferred_game_modes")),
            preferred_content_types=unique_strings(data.get("preferred_content_types")),
            conversation_history=tuple(history),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "session_id": self.session_id,
            "preferred_brawlers": list(self.preferred_brawlers),
            "preferred_game_modes": list(self.preferred_game_modes),
            "preferred_content_types": list(self.preferred_content_types),
            "conversation_history": [dict(m) for m in self.conversation_history],
        }


def _append_capped(current: Iterable[str], additions: Iterable[str], cap: int) -> Tuple[str, ...]:
    """Append unseen values, dropping the oldest once over the cap."""
    values: List[str] = list(current)
    for value in unique_strings(list(additions)):
        if value not in values:
            values.append(value)
            if len(values) > cap:
                values.pop(0)
    return tuple(values)


def merge_search_into_preferences(
    prefs: UserPreferences,
    params: Mapping[str, Any],
    caps: PreferenceCaps = PreferenceCaps(),
) -> UserPreferences:
    """Learn from the brawlers, modes and content types a user searched for."""
    return replace(
        prefs,
        preferred_brawlers=_append_capped(
            prefs.preferred_brawlers, unique_strings(params.get("brawlers")), caps.brawlers
        ),
        preferred_game_modes=_append_capped(
            prefs.preferred_game_modes,
            unique_strings(params.get("game_modes") or params.get("gameModes")),
            caps.game_modes,
        ),
        preferred_content_types=_append_capped(
            prefs.preferred_content_types,
            unique_strings(
                params.get("content_types") or params.get("contentType") or params.get("contentTypes")
            ),
            caps.content_types,
        ),
    )


def add_to_history(
    prefs: UserPreferences,
    role: str,
    content: str,
    cap: int = PreferenceCaps.history,
) -> UserPreferences:
    """Append a chat message, keeping only the most recent `cap` messages."""
    if not content:
        return prefs
    history = list(prefs.conversation_history) + [{"role": role, "content": content}]
    return replace(prefs, conversation_history=tuple(history[-cap:]))


def clear_history(prefs: UserPreferences) -> UserPreferences:
    return replace(prefs, conversation_history=())


def replace_preferences(
    prefs: UserPreferences,
    brawlers: Optional[Iterable[str]] = None,
    game_modes: Optional[Iterable[str]] = None,
    content_types: Optional[Iterable[str]] = None,
    caps: PreferenceCaps = PreferenceCaps(),
) -> UserPreferences:
    """Overwrite whichever preference lists are given (explicit user edit)."""
    updates: Dict[str, Any] = {}
    if brawlers is not None:
        updates["preferred_brawlers"] = unique_strings(list(brawlers))[-caps.brawlers:]
    if game_modes is not None:
        updates["preferred_game_modes"] = unique_strings(list(game_modes))[-caps.game_modes:]
    if content_types is not None:
        updates["preferred_content_types"] = unique_strings(list(content_types))[-caps.content_types:]
    return replace(prefs, **updates)
