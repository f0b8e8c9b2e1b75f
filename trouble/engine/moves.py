"""
Trouble - Move Validator

Decides whether a peg may move for a given die value and where it ends up.

Movement Rules:
    - HOME -> START only on a 6; START blocked by an own peg stops the move
    - FINISH pegs advance within their 4 slots and may not overshoot
    - Track pegs move clockwise; strictly passing the color's FINISH entry
      turns the peg into FINISH (slot = new index - entry - 1), exact count only
    - Landing on a WARP endpoint teleports to the paired endpoint; own pegs on
      either end block, opponents on either end are captured
    - Landing on a single opponent peg sends it HOME; own pegs always block

All methods are stateless class methods; the peg collection is never mutated.
"""

from dataclasses import dataclass
from typing import Sequence

from trouble.engine.base import Peg, PlayerColor, ValidationResult, ValidMove
from trouble.engine.board import BoardTopology

REASON_MUST_ROLL_SIX = "Must roll 6 to move peg from HOME"
REASON_START_BLOCKED = "START space is blocked by your own peg"
REASON_EXCEEDS_FINISH = "Move exceeds FINISH area"
REASON_EXACT_COUNT = "Must roll exact count to enter FINISH space"
REASON_FINISH_BLOCKED = "FINISH space is blocked by your own peg"
REASON_BLOCKED = "Destination is blocked by your own peg"
REASON_WARP_BLOCKED = "Cannot use warp - destination is blocked by your own peg"
REASON_INVALID_COLOR = "Invalid player color"
REASON_INVALID_DIE = "Die roll must be between 1 and 6"
REASON_UNKNOWN_PEG = "Unknown peg"
REASON_UNKNOWN_PLAYER = "Unknown player"
REASON_NOT_ON_BOARD = "Peg is not on the board"


@dataclass(frozen=True)
class HomeExit:
    """Result of the Roll-of-1 eligibility check."""
    can_move: bool
    peg_id: str | None = None


def _coerce_color(color: PlayerColor | str) -> PlayerColor | None:
    if isinstance(color, PlayerColor):
        return color
    try:
        return PlayerColor(color)
    except ValueError:
        return None


class MoveValidator:
    """Stateless move legality checks."""

    @classmethod
    def is_destination_blocked(
        cls,
        position: int,
        player_id: str,
        all_pegs: Sequence[Peg],
        moving_peg_id: str | None = None,
    ) -> str | None:
        """
        Find an own peg occupying ``position``.

        HOME pegs never block.

        Returns:
            Id of the blocking peg, or None if the space is free of own pegs
        """
        for peg in all_pegs:
            if (
                peg.player_id == player_id
                and peg.id != moving_peg_id
                and not peg.is_in_home
                and peg.position == position
            ):
                return peg.id
        return None

    @classmethod
    def check_for_capture(
        cls,
        position: int,
        player_id: str,
        all_pegs: Sequence[Peg],
    ) -> str | None:
        """
        Find an opponent peg on ``position`` that would be sent HOME.

        Pegs in HOME or FINISH can never be captured.

        Returns:
            Id of the captured peg, or None
        """
        for peg in all_pegs:
            if peg.player_id != player_id and peg.is_on_track and peg.position == position:
                return peg.id
        return None

    @classmethod
    def calculate_destination(
        cls,
        peg: Peg,
        die_roll: int,
        player_color: PlayerColor | str,
        all_pegs: Sequence[Peg] = (),
    ) -> int | None:
        """
        Calculate where a peg lands before blocking and capture checks.

        WARP teleports are not applied here; a move onto a WARP endpoint
        returns the endpoint itself.

        Args:
            peg: Peg to move
            die_roll: Die value (1-6)
            player_color: Color of the peg's owner
            all_pegs: Every peg on the board (for FINISH slot occupancy)

        Returns:
            Destination position, or None if the peg cannot move
        """
        position, _ = cls._destination(peg, die_roll, player_color, all_pegs)
        return position

    @classmethod
    def _destination(
        cls,
        peg: Peg,
        die_roll: int,
        player_color: PlayerColor | str,
        all_pegs: Sequence[Peg],
    ) -> tuple[int | None, str | None]:
        color = _coerce_color(player_color)
        if color is None:
            return None, REASON_INVALID_COLOR
        if not (1 <= die_roll <= 6):
            return None, REASON_INVALID_DIE

        if peg.is_in_home:
            if die_roll != 6:
                return None, REASON_MUST_ROLL_SIX
            return BoardTopology.start_position(color), None

        if peg.is_in_finish:
            new_slot = peg.finish_position + die_roll
            if new_slot >= BoardTopology.FINISH_SPACES:
                return None, REASON_EXCEEDS_FINISH
            return BoardTopology.finish_code(new_slot), None

        if not BoardTopology.is_track_position(peg.position):
            return None, REASON_NOT_ON_BOARD

        new_position = (peg.position + die_roll) % BoardTopology.TRACK_SPACES
        entry = BoardTopology.finish_entry(color)

        # Strictly passing the entry; wrapping past index 0 is not detected.
        if peg.position < entry < new_position:
            slot = new_position - entry - 1
            if slot >= BoardTopology.FINISH_SPACES:
                return None, REASON_EXACT_COUNT
            code = BoardTopology.finish_code(slot)
            if cls.is_destination_blocked(code, peg.player_id, all_pegs, peg.id):
                return None, REASON_FINISH_BLOCKED
            return code, None

        return new_position, None

    @classmethod
    def validate_move(
        cls,
        peg: Peg,
        die_roll: int,
        player_color: PlayerColor | str,
        all_pegs: Sequence[Peg],
    ) -> ValidationResult:
        """
        Validate a single peg move.

        Validation is total: every failure is reported as a rejected
        ValidationResult with a descriptive reason, never raised.

        Args:
            peg: Peg to move
            die_roll: Die value (1-6)
            player_color: Color of the peg's owner
            all_pegs: Every peg on the board

        Returns:
            ValidationResult describing legality, destination and captures
        """
        destination, reason = cls._destination(peg, die_roll, player_color, all_pegs)
        if destination is None:
            return ValidationResult.rejected(reason)

        if peg.is_in_home:
            if cls.is_destination_blocked(destination, peg.player_id, all_pegs, peg.id):
                return ValidationResult.rejected(REASON_START_BLOCKED)
            return ValidationResult(
                is_valid=True,
                new_position=destination,
                captured_peg_id=cls.check_for_capture(destination, peg.player_id, all_pegs),
            )

        if BoardTopology.finish_slot(destination) is not None:
            if cls.is_destination_blocked(destination, peg.player_id, all_pegs, peg.id):
                return ValidationResult.rejected(REASON_FINISH_BLOCKED)
            return ValidationResult(
                is_valid=True,
                new_position=destination,
                enters_finish=not peg.is_in_finish,
            )

        if cls.is_destination_blocked(destination, peg.player_id, all_pegs, peg.id):
            return ValidationResult.rejected(REASON_BLOCKED)

        partner = BoardTopology.warp_partner(destination)
        if partner is not None:
            if cls.is_destination_blocked(partner, peg.player_id, all_pegs, peg.id):
                return ValidationResult.rejected(REASON_WARP_BLOCKED)
            return ValidationResult(
                is_valid=True,
                new_position=destination,
                warp_destination=partner,
                warp_space_captured_peg_id=cls.check_for_capture(
                    destination, peg.player_id, all_pegs
                ),
                captured_peg_id=cls.check_for_capture(partner, peg.player_id, all_pegs),
            )

        return ValidationResult(
            is_valid=True,
            new_position=destination,
            captured_peg_id=cls.check_for_capture(destination, peg.player_id, all_pegs),
        )

    @classmethod
    def get_valid_moves(
        cls,
        player_id: str,
        die_roll: int,
        all_pegs: Sequence[Peg],
        player_color: PlayerColor | str,
    ) -> list[ValidMove]:
        """
        List every legal move for a player's pegs.

        Returns:
            ValidMove entries in peg order; empty if nothing can move
        """
        moves = []
        for peg in all_pegs:
            if peg.player_id != player_id:
                continue
            result = cls.validate_move(peg, die_roll, player_color, all_pegs)
            if result.is_valid:
                moves.append(ValidMove(peg_id=peg.id, validation_result=result))
        return moves

    @classmethod
    def has_valid_moves(
        cls,
        player_id: str,
        die_roll: int,
        all_pegs: Sequence[Peg],
        player_color: PlayerColor | str,
    ) -> bool:
        return len(cls.get_valid_moves(player_id, die_roll, all_pegs, player_color)) > 0

    @classmethod
    def can_move_from_home_to_start(
        cls,
        player_id: str,
        player_color: PlayerColor | str,
        all_pegs: Sequence[Peg],
    ) -> HomeExit:
        """
        Check whether a player may put a HOME peg on START (Roll-of-1 rule).

        Only own pegs on START prevent the move. The first HOME peg in list
        order is chosen.

        Returns:
            HomeExit with the chosen peg id, or ``can_move=False``
        """
        color = _coerce_color(player_color)
        if color is None:
            return HomeExit(can_move=False)

        start = BoardTopology.start_position(color)
        if cls.is_destination_blocked(start, player_id, all_pegs):
            return HomeExit(can_move=False)

        for peg in all_pegs:
            if peg.player_id == player_id and peg.is_in_home:
                return HomeExit(can_move=True, peg_id=peg.id)
        return HomeExit(can_move=False)
