"""
Trouble - Persisted Snapshot Models

Pydantic models for the serialized session snapshot:
``{game_state, players, pegs, current_turn, winner, die_state}``.
"""

from pydantic import BaseModel, Field

from trouble.engine.base import (
    DieRoll,
    DieState,
    GamePhase,
    Peg,
    Player,
    PlayerColor,
    SessionState,
    Turn,
)


class PlayerRecord(BaseModel):
    """Mirrors an engine Player."""

    id: str
    name: str
    color: PlayerColor
    is_active: bool = True

    model_config = {"from_attributes": True}

    def to_engine(self) -> Player:
        return Player(id=self.id, name=self.name, color=self.color, is_active=self.is_active)


class PegRecord(BaseModel):
    """Mirrors an engine Peg."""

    id: str
    player_id: str
    position: int = -1
    is_in_home: bool = True
    is_in_finish: bool = False
    finish_position: int | None = None

    model_config = {"from_attributes": True}

    def to_engine(self) -> Peg:
        return Peg(
            id=self.id,
            player_id=self.player_id,
            position=self.position,
            is_in_home=self.is_in_home,
            is_in_finish=self.is_in_finish,
            finish_position=self.finish_position,
        )


class DieRollRecord(BaseModel):
    value: int = Field(ge=1, le=6)
    timestamp: float = 0.0

    model_config = {"from_attributes": True}


class TurnRecord(BaseModel):
    """Mirrors an engine Turn."""

    player_id: str
    die_roll: DieRollRecord | None = None
    moves_available: int = 0
    extra_turns_remaining: int = 0
    selected_peg_id: str | None = None
    rolls_this_turn: int = 0
    has_moved_since_roll: bool = False
    start_time: float = 0.0
    timeout_warning: bool = False

    model_config = {"from_attributes": True}

    def to_engine(self) -> Turn:
        die_roll = None
        if self.die_roll is not None:
            die_roll = DieRoll(value=self.die_roll.value, timestamp=self.die_roll.timestamp)
        return Turn(
            player_id=self.player_id,
            die_roll=die_roll,
            moves_available=self.moves_available,
            extra_turns_remaining=self.extra_turns_remaining,
            selected_peg_id=self.selected_peg_id,
            rolls_this_turn=self.rolls_this_turn,
            has_moved_since_roll=self.has_moved_since_roll,
            start_time=self.start_time,
            timeout_warning=self.timeout_warning,
        )


class DieStateRecord(BaseModel):
    last_roll: int | None = None
    consecutive_repeats: int = 0
    is_rolling: bool = False

    model_config = {"from_attributes": True}

    def to_engine(self) -> DieState:
        return DieState(
            last_roll=self.last_roll,
            consecutive_repeats=self.consecutive_repeats,
            is_rolling=self.is_rolling,
        )


class GameSnapshot(BaseModel):
    """Everything needed to rebuild a session."""

    game_state: GamePhase = GamePhase.SETUP
    players: list[PlayerRecord] = Field(default_factory=list)
    pegs: list[PegRecord] = Field(default_factory=list)
    current_turn: TurnRecord | None = None
    winner: str | None = None
    die_state: DieStateRecord = Field(default_factory=DieStateRecord)

    @classmethod
    def from_state(cls, state: SessionState) -> "GameSnapshot":
        """Capture a committed session state."""
        turn = None
        if state.turn is not None:
            turn = TurnRecord.model_validate(state.turn, from_attributes=True)
        return cls(
            game_state=state.phase,
            players=[PlayerRecord.model_validate(p, from_attributes=True) for p in state.players],
            pegs=[PegRecord.model_validate(p, from_attributes=True) for p in state.pegs],
            current_turn=turn,
            winner=state.winner,
            die_state=DieStateRecord.model_validate(state.die_state, from_attributes=True),
        )

    def to_state(self) -> SessionState:
        """Rebuild the engine state this snapshot describes."""
        return SessionState(
            phase=self.game_state,
            players=tuple(p.to_engine() for p in self.players),
            pegs=tuple(p.to_engine() for p in self.pegs),
            turn=self.current_turn.to_engine() if self.current_turn is not None else None,
            winner=self.winner,
            die_state=self.die_state.to_engine(),
        )
