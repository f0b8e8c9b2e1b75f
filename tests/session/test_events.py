"""Tests for trouble/session/events.py: event types and classification."""

from dataclasses import replace

from trouble.engine.base import Turn
from trouble.session.events import EventPayload, GameEvent, classify_turn_change


# ── GameEvent enum ──────────────────────────────────────────────────────

class TestGameEvent:
    def test_events_are_unique(self):
        values = [e.value for e in GameEvent]
        assert len(values) == len(set(values))

    def test_lifecycle_events_defined(self):
        names = {e.name for e in GameEvent}
        assert {"GAME_STARTED", "GAME_WON", "GAME_RESET", "TURN_ADVANCED"} <= names


# ── EventPayload ────────────────────────────────────────────────────────

class TestEventPayload:
    def test_minimal_payload(self):
        p = EventPayload(event=GameEvent.DIE_ROLLED)
        assert p.player_id is None
        assert p.data == {}

    def test_full_payload(self):
        p = EventPayload(event=GameEvent.PEG_MOVED, player_id="player-1", data={"peg_id": "x"})
        assert p.data["peg_id"] == "x"

    def test_default_data_not_shared(self):
        a = EventPayload(event=GameEvent.DIE_ROLLED)
        b = EventPayload(event=GameEvent.DIE_ROLLED)
        a.data["k"] = 1
        assert b.data == {}


# ── classify_turn_change ────────────────────────────────────────────────

class TestClassifyTurnChange:
    def test_game_cleared(self):
        assert classify_turn_change(Turn.begin("a"), None) is None

    def test_first_turn(self):
        assert classify_turn_change(None, Turn.begin("a")) == GameEvent.TURN_ADVANCED

    def test_player_changed(self):
        assert classify_turn_change(Turn.begin("a"), Turn.begin("b")) == GameEvent.TURN_ADVANCED

    def test_extra_turn_granted(self):
        before = Turn.begin("a")
        after = replace(before, extra_turns_remaining=1)
        assert classify_turn_change(before, after) == GameEvent.EXTRA_TURN_GRANTED

    def test_extra_turn_spent(self):
        before = replace(Turn.begin("a"), extra_turns_remaining=1)
        after = replace(before, extra_turns_remaining=0)
        assert classify_turn_change(before, after) is None

    def test_unrelated_change(self):
        before = Turn.begin("a")
        assert classify_turn_change(before, replace(before, selected_peg_id="x")) is None
