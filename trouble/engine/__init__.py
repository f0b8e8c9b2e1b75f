"""
Trouble Game Engine.

Pure Python game logic with zero UI/database dependencies.
Handles die rolls, move validation, captures, warps and turn bookkeeping.
"""

from trouble.engine.base import (
    DieRoll,
    DieState,
    GamePhase,
    Peg,
    Player,
    PlayerColor,
    SessionState,
    Turn,
    ValidationResult,
    ValidMove,
)
from trouble.engine.board import BoardTopology
from trouble.engine.dice import DiceEngine, StreakResult
from trouble.engine.moves import HomeExit, MoveValidator
from trouble.engine.roster import default_roster, toggle_player
from trouble.engine.turns import (
    AlreadyRolling,
    MaxRollsReached,
    MoveRequiredFirst,
    RollNotAllowed,
    TurnRules,
)

__all__ = [
    # Data Classes
    "DieRoll",
    "DieState",
    "HomeExit",
    "Peg",
    "Player",
    "SessionState",
    "StreakResult",
    "Turn",
    "ValidationResult",
    "ValidMove",
    # Enums
    "GamePhase",
    "PlayerColor",
    # Engines
    "BoardTopology",
    "DiceEngine",
    "MoveValidator",
    "TurnRules",
    # Roster
    "default_roster",
    "toggle_player",
    # Errors
    "AlreadyRolling",
    "MaxRollsReached",
    "MoveRequiredFirst",
    "RollNotAllowed",
]
