"""
Trouble - Player Roster

The fixed four setup slots. The first two seats always play; the other two
can be toggled on and off before the game starts.
"""

from dataclasses import replace
from typing import Sequence

from trouble.engine.base import Player, PlayerColor

MIN_PLAYERS = 2
MAX_PLAYERS = 4
MANDATORY_SLOTS = 2

_DEFAULT_SLOTS = (
    ("player-1", "Player 1", PlayerColor.RED, True),
    ("player-2", "Player 2", PlayerColor.BLUE, True),
    ("player-3", "Player 3", PlayerColor.YELLOW, False),
    ("player-4", "Player 4", PlayerColor.GREEN, False),
)


def default_roster() -> tuple[Player, ...]:
    """The four setup slots with only the mandatory seats active."""
    return tuple(
        Player(id=pid, name=name, color=color, is_active=active)
        for pid, name, color, active in _DEFAULT_SLOTS
    )


def toggle_player(roster: Sequence[Player], index: int) -> tuple[Player, ...]:
    """
    Flip a seat between active and inactive.

    Mandatory seats are left unchanged.

    Raises:
        ValueError: If index is out of range
    """
    if not (0 <= index < len(roster)):
        raise ValueError(f"Slot index must be 0-{len(roster) - 1}, got {index}")
    if index < MANDATORY_SLOTS:
        return tuple(roster)

    updated = list(roster)
    updated[index] = replace(roster[index], is_active=not roster[index].is_active)
    return tuple(updated)


def active_players(roster: Sequence[Player]) -> tuple[Player, ...]:
    return tuple(p for p in roster if p.is_active)
