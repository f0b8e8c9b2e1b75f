"""
Trouble - Game Engine Base Classes

This module defines the foundational data structures and enums used throughout
the game engine. All classes are immutable (frozen dataclasses); every state
change produces a new instance, so readers always see a consistent snapshot.
"""

from dataclasses import dataclass, field, replace
from enum import Enum

# Position constants shared by the data model and the board topology.
HOME_POSITION = -1
TRACK_SPACES = 28
BOARD_SPACES = 56  # Numbering base for FINISH slots (legacy, larger than the track)
FINISH_SPACES = 4
PEGS_PER_PLAYER = 4


class PlayerColor(Enum):
    """The four peg colors."""
    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"


class GamePhase(Enum):
    """Lifecycle of a game session."""
    SETUP = "setup"
    PLAYING = "playing"
    FINISHED = "finished"


@dataclass(frozen=True)
class Player:
    """
    A seat at the table.

    Attributes:
        id: Stable player identifier
        name: Display name
        color: Peg color owned by this player
        is_active: Whether the seat takes part in the game
    """
    id: str
    name: str
    color: PlayerColor
    is_active: bool = True


@dataclass(frozen=True)
class Peg:
    """
    Immutable representation of a single peg.

    Attributes:
        id: Peg identifier (``"<player_id>-peg-<n>"``)
        player_id: Owner of the peg
        position: -1 for HOME, 0-27 on the track, BOARD_SPACES + slot in FINISH
        is_in_home: Peg sits in its HOME area
        is_in_finish: Peg sits in its FINISH track
        finish_position: FINISH slot (0-3) when ``is_in_finish``
    """
    id: str
    player_id: str
    position: int = HOME_POSITION
    is_in_home: bool = True
    is_in_finish: bool = False
    finish_position: int | None = None

    def __post_init__(self) -> None:
        """Validate that exactly one location holds."""
        if self.is_in_home and self.is_in_finish:
            raise ValueError(f"Peg {self.id} cannot be in HOME and FINISH at once.")
        if self.is_in_home:
            if self.position != HOME_POSITION:
                raise ValueError(
                    f"Peg {self.id} is in HOME but has position {self.position}."
                )
        elif self.is_in_finish:
            if self.finish_position is None or not (0 <= self.finish_position < FINISH_SPACES):
                raise ValueError(
                    f"Peg {self.id} has invalid FINISH slot {self.finish_position}."
                )
            if self.position != BOARD_SPACES + self.finish_position:
                raise ValueError(
                    f"Peg {self.id} FINISH position {self.position} does not match "
                    f"slot {self.finish_position}."
                )
        elif not (0 <= self.position < TRACK_SPACES):
            raise ValueError(
                f"Peg {self.id} position {self.position} is not on the track."
            )

    @property
    def is_on_track(self) -> bool:
        """True when the peg is on the main track."""
        return not self.is_in_home and not self.is_in_finish

    @classmethod
    def at(cls, peg_id: str, player_id: str, position: int) -> "Peg":
        """Build a peg from a raw position code (HOME, track or FINISH)."""
        if position == HOME_POSITION:
            return cls(id=peg_id, player_id=player_id)
        if position >= BOARD_SPACES:
            return cls(
                id=peg_id,
                player_id=player_id,
                position=position,
                is_in_home=False,
                is_in_finish=True,
                finish_position=position - BOARD_SPACES,
            )
        return cls(id=peg_id, player_id=player_id, position=position, is_in_home=False)

    def moved_to(self, position: int) -> "Peg":
        """Return a copy of this peg relocated to ``position``."""
        return Peg.at(self.id, self.player_id, position)

    def sent_home(self) -> "Peg":
        """Return a copy of this peg back in HOME."""
        return Peg(id=self.id, player_id=self.player_id)


@dataclass(frozen=True)
class DieRoll:
    """
    A committed die value.

    Attributes:
        value: Face value (1-6)
        timestamp: Scheduler clock reading when the roll was committed
    """
    value: int
    timestamp: float = 0.0

    def __post_init__(self) -> None:
        if not (1 <= self.value <= 6):
            raise ValueError(f"Invalid die value {self.value}. Must be between 1 and 6.")


@dataclass(frozen=True)
class DieState:
    """
    Anti-streak history and rolling lock, one per session.

    Attributes:
        last_roll: Most recent value produced (None before the first roll)
        consecutive_repeats: How many times in a row the last value repeated
        is_rolling: Die is locked while a roll settles
    """
    last_roll: int | None = None
    consecutive_repeats: int = 0
    is_rolling: bool = False


@dataclass(frozen=True)
class Turn:
    """
    Bookkeeping for the player currently in control.

    Attributes:
        player_id: Player whose turn it is
        die_roll: Committed roll awaiting a move (None before rolling)
        moves_available: Spaces the committed roll still allows
        extra_turns_remaining: Banked extra turns (sixes, Double Trouble)
        selected_peg_id: Peg highlighted by the player, if any
        rolls_this_turn: Rolls resolved in this turn sequence
        has_moved_since_roll: A move was made after the last roll
        start_time: Clock reading when move selection began; 0 hides the timer
        timeout_warning: The warning timer has fired
    """
    player_id: str
    die_roll: DieRoll | None = None
    moves_available: int = 0
    extra_turns_remaining: int = 0
    selected_peg_id: str | None = None
    rolls_this_turn: int = 0
    has_moved_since_roll: bool = False
    start_time: float = 0.0
    timeout_warning: bool = False

    @classmethod
    def begin(cls, player_id: str) -> "Turn":
        """Create a clean turn record for ``player_id``."""
        return cls(player_id=player_id)


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of validating one peg move.

    Attributes:
        is_valid: Whether the move is legal
        reason: Why the move was rejected
        new_position: Space the peg lands on (before any warp)
        captured_peg_id: Opponent sent HOME at the final destination
        warp_space_captured_peg_id: Opponent sent HOME from the warp space itself
        enters_finish: Move takes the peg from the track into FINISH
        warp_destination: Paired endpoint when ``new_position`` is a WARP
    """
    is_valid: bool
    reason: str | None = None
    new_position: int | None = None
    captured_peg_id: str | None = None
    warp_space_captured_peg_id: str | None = None
    enters_finish: bool = False
    warp_destination: int | None = None

    @property
    def final_position(self) -> int | None:
        """Where the peg ends up once any warp is resolved."""
        if self.warp_destination is not None:
            return self.warp_destination
        return self.new_position

    @property
    def captured_peg_ids(self) -> tuple[str, ...]:
        """All pegs this move sends back HOME."""
        return tuple(
            peg_id
            for peg_id in (self.warp_space_captured_peg_id, self.captured_peg_id)
            if peg_id is not None
        )

    @classmethod
    def rejected(cls, reason: str) -> "ValidationResult":
        return cls(is_valid=False, reason=reason)


@dataclass(frozen=True)
class ValidMove:
    """A peg that can move, with its validation result."""
    peg_id: str
    validation_result: ValidationResult


@dataclass(frozen=True)
class SessionState:
    """
    Complete committed state of a game session.

    The session replaces this object wholesale on every commit.

    Attributes:
        phase: Setup, playing or finished
        players: Active players in turn order
        pegs: All pegs of all active players
        turn: Current turn record (None outside of play)
        winner: Winning player id once the game is finished
        die_state: Anti-streak history and rolling lock
    """
    phase: GamePhase = GamePhase.SETUP
    players: tuple[Player, ...] = field(default_factory=tuple)
    pegs: tuple[Peg, ...] = field(default_factory=tuple)
    turn: Turn | None = None
    winner: str | None = None
    die_state: DieState = field(default_factory=DieState)

    def get_player(self, player_id: str) -> Player | None:
        return next((p for p in self.players if p.id == player_id), None)

    def get_peg(self, peg_id: str) -> Peg | None:
        return next((p for p in self.pegs if p.id == peg_id), None)

    def pegs_for(self, player_id: str) -> tuple[Peg, ...]:
        """Pegs owned by ``player_id``, in creation order."""
        return tuple(p for p in self.pegs if p.player_id == player_id)

    def with_pegs(self, updated: dict[str, Peg]) -> "SessionState":
        """Return a copy with the pegs in ``updated`` (keyed by id) replaced."""
        return replace(
            self,
            pegs=tuple(updated.get(peg.id, peg) for peg in self.pegs),
        )
