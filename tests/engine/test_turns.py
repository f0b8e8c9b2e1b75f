"""
Trouble - Turn Rules Tests

Roll sequencing, extra turns and turn ending.
"""

from dataclasses import replace

import pytest

from trouble.engine.base import DieRoll, DieState, Player, PlayerColor, Turn
from trouble.engine.turns import (
    AlreadyRolling,
    MaxRollsReached,
    MoveRequiredFirst,
    RollNotAllowed,
    TurnRules,
)


def rolled(value: int, turn: Turn | None = None, **kwargs) -> Turn:
    return TurnRules.apply_roll(turn or Turn.begin("p1"), DieRoll(value=value), **kwargs)


# === Ensure Can Roll ===


class TestEnsureCanRoll:
    def test_fresh_turn_can_roll(self):
        TurnRules.ensure_can_roll(Turn.begin("p1"), DieState())
        assert TurnRules.can_roll(Turn.begin("p1"), DieState()) is True

    def test_rolling_die_blocks(self):
        with pytest.raises(AlreadyRolling):
            TurnRules.ensure_can_roll(Turn.begin("p1"), DieState(is_rolling=True))

    def test_move_required_before_second_roll(self):
        turn = rolled(6)
        with pytest.raises(MoveRequiredFirst):
            TurnRules.ensure_can_roll(turn, DieState())

    def test_second_roll_needs_extra_turn(self):
        turn = TurnRules.apply_move(rolled(4), landed_on_double_trouble=False)
        with pytest.raises(MaxRollsReached):
            TurnRules.ensure_can_roll(turn, DieState())

    def test_second_roll_after_six_and_move(self):
        turn = TurnRules.apply_move(rolled(6), landed_on_double_trouble=False)
        assert TurnRules.can_roll(turn, DieState()) is True

    def test_roll_cap(self):
        turn = replace(Turn.begin("p1"), rolls_this_turn=2, extra_turns_remaining=3,
                       has_moved_since_roll=True)
        with pytest.raises(MaxRollsReached):
            TurnRules.ensure_can_roll(turn, DieState())

    def test_errors_are_value_errors(self):
        assert issubclass(RollNotAllowed, ValueError)
        for error in (AlreadyRolling, MoveRequiredFirst, MaxRollsReached):
            assert issubclass(error, RollNotAllowed)


# === Apply Roll ===


class TestApplyRoll:
    @pytest.mark.parametrize("value", [2, 3, 4, 5, 6])
    def test_moves_equal_die_value(self, value):
        turn = rolled(value)
        assert turn.moves_available == value
        assert turn.die_roll.value == value
        assert turn.rolls_this_turn == 1
        assert turn.has_moved_since_roll is False

    def test_roll_of_one_has_no_move(self):
        turn = rolled(1)
        assert turn.moves_available == 0
        assert turn.rolls_this_turn == 1

    def test_first_six_banks_extra_turn(self):
        assert rolled(6).extra_turns_remaining == 1

    def test_first_six_without_house_rule(self):
        assert rolled(6, six_grants_extra_turn=False).extra_turns_remaining == 0

    @pytest.mark.parametrize("value", [1, 2, 6])
    def test_second_roll_spends_extra_turn(self, value):
        first = TurnRules.apply_move(rolled(6), landed_on_double_trouble=False)
        second = rolled(value, first)
        assert second.extra_turns_remaining == 0
        assert second.rolls_this_turn == 2

    def test_resets_timer_fields(self):
        turn = replace(Turn.begin("p1"), start_time=5.0, timeout_warning=True, selected_peg_id="x")
        after = rolled(3, turn)
        assert after.start_time == 0
        assert after.timeout_warning is False
        assert after.selected_peg_id is None


# === Apply Move ===


class TestApplyMove:
    def test_spends_die_value(self):
        turn = TurnRules.apply_move(rolled(4), landed_on_double_trouble=False)
        assert turn.moves_available == 0
        assert turn.has_moved_since_roll is True
        assert turn.extra_turns_remaining == 0

    def test_double_trouble_stacks_with_six(self):
        turn = TurnRules.apply_move(rolled(6), landed_on_double_trouble=True)
        assert turn.extra_turns_remaining == 2

    @pytest.mark.parametrize("rolls_this_turn", [0, 2])
    def test_double_trouble_stacks_without_limit(self, rolls_this_turn):
        turn = replace(Turn.begin("p1"), rolls_this_turn=rolls_this_turn)
        counts = []
        for _ in range(6):
            turn = TurnRules.apply_move(turn, landed_on_double_trouble=True)
            counts.append(turn.extra_turns_remaining)
        assert counts == [1, 2, 3, 4, 5, 6]
        assert turn.rolls_this_turn == rolls_this_turn


# === Turn End ===


class TestCheckTurnEnd:
    def test_no_roll_never_ends(self):
        assert TurnRules.check_turn_end(Turn.begin("p1"), has_valid_moves=False) is False

    def test_ends_without_extra_turn(self):
        turn = TurnRules.apply_move(rolled(3), landed_on_double_trouble=False)
        assert TurnRules.check_turn_end(turn, has_valid_moves=False) is True

    def test_continues_with_extra_turn(self):
        turn = TurnRules.apply_move(rolled(6), landed_on_double_trouble=False)
        assert TurnRules.can_continue(turn) is True
        assert TurnRules.check_turn_end(turn, has_valid_moves=False) is False

    def test_extra_turn_lost_at_roll_cap(self):
        first = TurnRules.apply_move(rolled(6), landed_on_double_trouble=True)
        second = TurnRules.apply_move(rolled(5, first), landed_on_double_trouble=False)
        assert second.extra_turns_remaining == 1
        assert TurnRules.can_continue(second) is False
        assert TurnRules.check_turn_end(second, has_valid_moves=False) is True

    def test_pending_move_with_options(self):
        assert TurnRules.check_turn_end(rolled(3), has_valid_moves=True) is False
        assert TurnRules.check_turn_end(rolled(3), has_valid_moves=False) is True


class TestContinueTurn:
    def test_keeps_player_and_counters(self):
        moved = TurnRules.apply_move(rolled(6), landed_on_double_trouble=False)
        turn = TurnRules.continue_turn(moved)
        assert turn.player_id == "p1"
        assert turn.die_roll is None
        assert turn.rolls_this_turn == 1
        assert turn.extra_turns_remaining == 1
        assert TurnRules.can_roll(turn, DieState()) is True


class TestNextPlayer:
    @pytest.fixture
    def players(self):
        return [
            Player(id="a", name="A", color=PlayerColor.RED),
            Player(id="b", name="B", color=PlayerColor.BLUE, is_active=False),
            Player(id="c", name="C", color=PlayerColor.GREEN),
        ]

    def test_skips_inactive(self, players):
        assert TurnRules.next_player_id(players, "a") == "c"

    def test_wraps(self, players):
        assert TurnRules.next_player_id(players, "c") == "a"

    def test_unknown_current_starts_over(self, players):
        assert TurnRules.next_player_id(players, "zzz") == "a"

    def test_no_active_players(self):
        with pytest.raises(ValueError, match="No active players"):
            TurnRules.next_player_id([], "a")
