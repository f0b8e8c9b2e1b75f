"""Tests for trouble/database/models.py: snapshot serialization."""

from dataclasses import replace

import pytest
from pydantic import ValidationError

from trouble.database.models import GameSnapshot, PegRecord
from trouble.engine.base import (
    DieRoll,
    DieState,
    GamePhase,
    Peg,
    SessionState,
    Turn,
)


@pytest.fixture
def playing_state(two_players, peg_factory) -> SessionState:
    return SessionState(
        phase=GamePhase.PLAYING,
        players=tuple(two_players),
        pegs=(
            peg_factory("player-1", 0, 25),
            peg_factory("player-1", 1, 57),
            peg_factory("player-2", 0),
        ),
        turn=replace(
            Turn.begin("player-1"),
            die_roll=DieRoll(6, 1001.5),
            moves_available=6,
            extra_turns_remaining=1,
            rolls_this_turn=1,
        ),
        die_state=DieState(last_roll=6, consecutive_repeats=1),
    )


class TestGameSnapshot:
    def test_empty_snapshot(self):
        assert GameSnapshot().to_state() == SessionState()

    def test_state_survives_json(self, playing_state):
        raw = GameSnapshot.from_state(playing_state).model_dump_json()
        assert GameSnapshot.model_validate_json(raw).to_state() == playing_state

    def test_json_shape(self, playing_state):
        data = GameSnapshot.from_state(playing_state).model_dump(mode="json")
        assert set(data) == {
            "game_state", "players", "pegs", "current_turn", "winner", "die_state",
        }
        assert data["game_state"] == "playing"
        assert data["players"][0]["color"] == "red"
        assert data["current_turn"]["die_roll"] == {"value": 6, "timestamp": 1001.5}

    def test_bad_die_value_rejected(self):
        with pytest.raises(ValidationError):
            GameSnapshot.model_validate({
                "current_turn": {"player_id": "a", "die_roll": {"value": 9}},
            })

    def test_long_player_names_kept(self):
        snapshot = GameSnapshot.model_validate({
            "players": [{"id": "a", "name": "x" * 80, "color": "red"}],
        })
        assert snapshot.to_state().players[0].name == "x" * 80

    def test_inconsistent_peg_rejected_on_rebuild(self):
        record = PegRecord(id="x", player_id="a", position=5, is_in_home=True)
        with pytest.raises(ValueError):
            record.to_engine()


class TestPegRecord:
    def test_from_engine_peg(self):
        peg = Peg.at("x", "a", 58)
        record = PegRecord.model_validate(peg, from_attributes=True)
        assert record.finish_position == 2
        assert record.to_engine() == peg
