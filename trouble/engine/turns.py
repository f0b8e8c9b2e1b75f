"""
Trouble - Turn Rules

Pure turn bookkeeping: who may roll, how a resolved roll or a finished move
changes the Turn record, and when control passes on.

Turn Rules:
    - At most 2 rolls per turn sequence
    - A second roll needs a move since the last roll and a banked extra turn
    - A 6 on the first roll banks an extra turn; any later roll spends one
    - Landing on Double Trouble banks an extra turn, without limit
    - Rolling a 1 gives the roller no move (opponents may leave HOME instead)
"""

from dataclasses import replace
from typing import ClassVar, Sequence

from trouble.engine.base import DieRoll, DieState, Player, Turn


class RollNotAllowed(ValueError):
    """A roll was requested when the turn state forbids it."""


class AlreadyRolling(RollNotAllowed):
    """The die has not settled from the previous roll."""


class MoveRequiredFirst(RollNotAllowed):
    """The last roll has not been used for a move yet."""


class MaxRollsReached(RollNotAllowed):
    """The turn sequence has no roll left."""


class TurnRules:
    """Stateless turn state transitions."""

    MAX_ROLLS_PER_TURN: ClassVar[int] = 2
    EXTRA_TURN_ROLL: ClassVar[int] = 6
    ROLL_OF_ONE: ClassVar[int] = 1

    @classmethod
    def ensure_can_roll(cls, turn: Turn, die_state: DieState) -> None:
        """
        Check the roll sequencing contract.

        Raises:
            AlreadyRolling: The die is still settling
            MaxRollsReached: Roll cap hit, or no extra turn to spend
            MoveRequiredFirst: The previous roll was not used yet
        """
        if die_state.is_rolling:
            raise AlreadyRolling("The die is already rolling.")
        if turn.rolls_this_turn >= cls.MAX_ROLLS_PER_TURN:
            raise MaxRollsReached(
                f"At most {cls.MAX_ROLLS_PER_TURN} rolls per turn."
            )
        if turn.rolls_this_turn > 0:
            if not turn.has_moved_since_roll:
                raise MoveRequiredFirst("Move a peg before rolling again.")
            if turn.extra_turns_remaining == 0:
                raise MaxRollsReached("No extra turn remaining.")

    @classmethod
    def can_roll(cls, turn: Turn, die_state: DieState) -> bool:
        try:
            cls.ensure_can_roll(turn, die_state)
        except RollNotAllowed:
            return False
        return True

    @classmethod
    def apply_roll(
        cls,
        turn: Turn,
        die_roll: DieRoll,
        *,
        six_grants_extra_turn: bool = True,
    ) -> Turn:
        """
        Commit a settled roll to the turn.

        Args:
            turn: Turn before the roll
            die_roll: Settled die value
            six_grants_extra_turn: Whether a first-roll 6 banks an extra turn

        Returns:
            Updated Turn awaiting a move (no move at all for a 1)
        """
        extra = turn.extra_turns_remaining
        if turn.rolls_this_turn == 0:
            if six_grants_extra_turn and die_roll.value == cls.EXTRA_TURN_ROLL:
                extra += 1
        else:
            extra -= 1

        moves = 0 if die_roll.value == cls.ROLL_OF_ONE else die_roll.value

        return replace(
            turn,
            die_roll=die_roll,
            moves_available=moves,
            extra_turns_remaining=extra,
            selected_peg_id=None,
            rolls_this_turn=turn.rolls_this_turn + 1,
            has_moved_since_roll=False,
            start_time=0.0,
            timeout_warning=False,
        )

    @classmethod
    def apply_move(cls, turn: Turn, landed_on_double_trouble: bool) -> Turn:
        """Record a completed move; the whole die value is spent."""
        extra = turn.extra_turns_remaining + (1 if landed_on_double_trouble else 0)
        return replace(
            turn,
            moves_available=0,
            extra_turns_remaining=extra,
            selected_peg_id=None,
            has_moved_since_roll=True,
            start_time=0.0,
            timeout_warning=False,
        )

    @classmethod
    def can_continue(cls, turn: Turn) -> bool:
        """True when a banked extra turn may still be used for another roll."""
        return (
            turn.extra_turns_remaining > 0
            and turn.rolls_this_turn < cls.MAX_ROLLS_PER_TURN
        )

    @classmethod
    def check_turn_end(cls, turn: Turn, has_valid_moves: bool) -> bool:
        """
        Decide whether the turn is over after a move.

        Args:
            turn: Current turn
            has_valid_moves: Whether the remaining die value still has a move

        Returns:
            True if control should leave the current roll sequence
        """
        if turn.die_roll is None:
            return False
        if turn.moves_available <= 0:
            return not cls.can_continue(turn)
        return not has_valid_moves

    @classmethod
    def continue_turn(cls, turn: Turn) -> Turn:
        """
        Keep the same player in control for their banked extra turn.

        The extra turn is spent when the next roll resolves, not here.
        """
        return replace(
            turn,
            die_roll=None,
            moves_available=0,
            selected_peg_id=None,
            has_moved_since_roll=True,
            start_time=0.0,
            timeout_warning=False,
        )

    @classmethod
    def next_player_id(cls, players: Sequence[Player], current_player_id: str) -> str:
        """
        Round-robin successor among active players.

        Raises:
            ValueError: If there are no active players
        """
        active = [p for p in players if p.is_active]
        if not active:
            raise ValueError("No active players.")
        for index, player in enumerate(active):
            if player.id == current_player_id:
                return active[(index + 1) % len(active)].id
        return active[0].id
