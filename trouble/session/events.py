"""
Trouble - Session Event Definitions

Event types and payloads emitted by a game session. Presentation layers
(animation, sound, haptics) subscribe to these instead of reading
presentation fields off the pegs.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

from trouble.engine.base import Turn


class GameEvent(Enum):
    """Events that can occur during a game."""

    GAME_STARTED = auto()
    DIE_ROLLED = auto()
    PEG_MOVED = auto()
    PEG_CAPTURED = auto()
    WARP_USED = auto()
    DOUBLE_TROUBLE = auto()
    FORCED_MOVE = auto()
    EXTRA_TURN_GRANTED = auto()
    TIMEOUT_WARNING = auto()
    TURN_TIMED_OUT = auto()
    TURN_ADVANCED = auto()
    GAME_WON = auto()
    GAME_RESET = auto()


@dataclass
class EventPayload:
    """Wrapper for session event data."""

    event: GameEvent
    player_id: str | None = None
    data: dict[str, Any] = field(default_factory=dict)


def classify_turn_change(before: Turn | None, after: Turn | None) -> GameEvent | None:
    """Determine the game event from a committed turn change."""
    if after is None:
        return None
    if before is None or before.player_id != after.player_id:
        return GameEvent.TURN_ADVANCED
    if after.extra_turns_remaining > before.extra_turns_remaining:
        return GameEvent.EXTRA_TURN_GRANTED
    return None
