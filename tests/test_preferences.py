"""Tests for preference learning and chat history"""

from navigator.core.preferences import (
    PreferenceCaps,
    UserPreferences,
    add_to_history,
    clear_history,
    merge_search_into_preferences,
    replace_preferences,
)


class TestMergeSearch:
    """Test learning preferences from searches"""

    def test_accepts_both_key_styles(self):
        prefs = merge_search_into_preferences(UserPreferences(), {
            "brawlers": ["Mortis"],
            "gameModes": ["Brawl Ball"],
            "content_types": ["tutorial"],
        })

        assert prefs.preferred_brawlers == ("Mortis",)
        assert prefs.preferred_game_modes == ("Brawl Ball",)
        assert prefs.preferred_content_types == ("tutorial",)

    def test_known_values_are_not_duplicated(self):
        prefs = UserPreferences(preferred_brawlers=("Mortis", "Shelly"))
        merged = merge_search_into_preferences(prefs, {"brawlers": ["Shelly", "Colt"]})
        assert merged.preferred_brawlers == ("Mortis", "Shelly", "Colt")

    def test_oldest_dropped_over_cap(self):
        caps = PreferenceCaps(brawlers=3)
        prefs = UserPreferences(preferred_brawlers=("A", "B", "C"))

        merged = merge_search_into_preferences(prefs, {"brawlers": ["D", "E"]}, caps)

        assert merged.preferred_brawlers == ("C", "D", "E")

    def test_original_is_untouched(self):
        prefs = UserPreferences(user_id="u1")
        merge_search_into_preferences(prefs, {"brawlers": ["Mortis"]})
        assert prefs.preferred_brawlers == ()


class TestHistory:
    """Test conversation history bounds"""

    def test_keeps_most_recent_messages(self):
        prefs = UserPreferences()
        for i in range(25):
            prefs = add_to_history(prefs, "user", f"message {i}")

        assert len(prefs.conversation_history) == 20
        assert prefs.conversation_history[0]["content"] == "message 5"
        assert prefs.conversation_history[-1]["content"] == "message 24"

    def test_empty_message_is_skipped(self):
        prefs = add_to_history(UserPreferences(), "assistant", "")
        assert prefs.conversation_history == ()

    def test_clear_keeps_preferences(self):
        prefs = add_to_history(UserPreferences(preferred_brawlers=("Bo",)), "user", "hi")
        cleared = clear_history(prefs)

        assert cleared.conversation_history == ()
        assert cleared.preferred_brawlers == ("Bo",)


class TestReplacePreferences:
    """Test explicit preference edits"""

    def test_only_given_lists_change(self):
        prefs = UserPreferences(preferred_brawlers=("Bo",), preferred_game_modes=("Heist",))
        updated = replace_preferences(prefs, brawlers=["Mortis", "Mortis", "Colt"])

        assert updated.preferred_brawlers == ("Mortis", "Colt")
        assert updated.preferred_game_modes == ("Heist",)

    def test_empty_list_clears(self):
        prefs = UserPreferences(preferred_content_types=("tips",))
        assert replace_preferences(prefs, content_types=[]).preferred_content_types == ()

    def test_caps_keep_the_last_entries(self):
        updated = replace_preferences(UserPreferences(), game_modes=["a", "b", "c"], caps=PreferenceCaps(game_modes=2))
        assert updated.preferred_game_modes == ("b", "c")


class TestFromMapping:
    def test_round_trip_through_dict(self):
        prefs = add_to_history(
            UserPreferences(user_id="u1", preferred_brawlers=("Bo",)), "user", "hello"
        )
        restored = UserPreferences.from_mapping(prefs.to_dict())

        assert restored == prefs
        assert restored.conversation_history == ({"role": "user", "content": "hello"},)

    def test_malformed_history_entries_dropped(self):
        prefs = UserPreferences.from_mapping({
            "conversation_history": [{"role": "user"}, "junk", {"content": "hi"}],
        })
        assert prefs.conversation_history == ({"role": "user", "content": "hi"},)
