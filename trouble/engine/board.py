"""
Trouble - Board Topology

Static geometry of the 28-space circular track:

    - START spaces:       red 25, blue 4, green 11, yellow 18
    - FINISH entry:       the space just before each START
    - Double Trouble:     0, 7, 14, 21 (landing grants an extra turn)
    - WARP pairs:         3 <-> 17, 10 <-> 24

FINISH slots are numbered ``BOARD_SPACES + slot`` so they never collide with
track indices.
"""

from types import MappingProxyType
from typing import ClassVar, Mapping

from trouble.engine.base import (
    BOARD_SPACES,
    FINISH_SPACES,
    TRACK_SPACES,
    PlayerColor,
)


class BoardTopology:
    """Lookup tables for the board. Never instantiated."""

    TRACK_SPACES: ClassVar[int] = TRACK_SPACES
    BOARD_SPACES: ClassVar[int] = BOARD_SPACES
    FINISH_SPACES: ClassVar[int] = FINISH_SPACES

    START_POSITIONS: ClassVar[Mapping[PlayerColor, int]] = MappingProxyType({
        PlayerColor.RED: 25,
        PlayerColor.BLUE: 4,
        PlayerColor.GREEN: 11,
        PlayerColor.YELLOW: 18,
    })

    FINISH_ENTRY_POSITIONS: ClassVar[Mapping[PlayerColor, int]] = MappingProxyType({
        PlayerColor.RED: 24,
        PlayerColor.BLUE: 3,
        PlayerColor.GREEN: 10,
        PlayerColor.YELLOW: 17,
    })

    DOUBLE_TROUBLE_POSITIONS: ClassVar[frozenset[int]] = frozenset({0, 7, 14, 21})

    WARP_PAIRS: ClassVar[tuple[tuple[int, int], ...]] = ((3, 17), (10, 24))

    @classmethod
    def start_position(cls, color: PlayerColor) -> int:
        return cls.START_POSITIONS[color]

    @classmethod
    def finish_entry(cls, color: PlayerColor) -> int:
        """Track space a peg must pass to turn into its FINISH track."""
        return cls.FINISH_ENTRY_POSITIONS[color]

    @classmethod
    def is_track_position(cls, position: int) -> bool:
        return 0 <= position < cls.TRACK_SPACES

    @classmethod
    def is_double_trouble(cls, position: int) -> bool:
        return position in cls.DOUBLE_TROUBLE_POSITIONS

    @classmethod
    def warp_partner(cls, position: int) -> int | None:
        """
        Return the paired endpoint of a WARP space.

        Args:
            position: Track index

        Returns:
            The other end of the warp, or None if ``position`` is not a WARP
        """
        for a, b in cls.WARP_PAIRS:
            if position == a:
                return b
            if position == b:
                return a
        return None

    @classmethod
    def finish_code(cls, slot: int) -> int:
        """Encode a FINISH slot as a position."""
        if not (0 <= slot < cls.FINISH_SPACES):
            raise ValueError(f"FINISH slot must be 0-{cls.FINISH_SPACES - 1}, got {slot}")
        return cls.BOARD_SPACES + slot

    @classmethod
    def finish_slot(cls, position: int) -> int | None:
        """Decode a FINISH position back to its slot, or None for other positions."""
        slot = position - cls.BOARD_SPACES
        if 0 <= slot < cls.FINISH_SPACES:
            return slot
        return None
