"""
Trouble - Input Validation Utilities

Provides validation functions for game engine inputs. All validators
either return validated data or raise descriptive ValueError exceptions.
"""

from typing import Sequence

from trouble.engine.base import Player


def validate_die_value(value: int) -> int:
    """
    Validate a single die value.

    Args:
        value: Die face to validate

    Returns:
        The validated value

    Raises:
        ValueError: If value is not an integer between 1 and 6
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"Die value must be an integer, got {type(value).__name__}.")

    if not (1 <= value <= 6):
        raise ValueError(f"Die value is {value}, must be between 1 and 6.")

    return value


def validate_player_count(count: int) -> int:
    """
    Validate number of players.

    Args:
        count: Number of players

    Returns:
        Validated count

    Raises:
        ValueError: If count is not 2-4
    """
    if not isinstance(count, int):
        raise ValueError(f"Player count must be an integer, got {type(count).__name__}.")

    if not (2 <= count <= 4):
        raise ValueError(f"Player count must be 2-4, got {count}.")

    return count


def validate_roster(players: Sequence[Player]) -> tuple[Player, ...]:
    """
    Validate the active players of a new game.

    Args:
        players: Active players in turn order

    Returns:
        Players as a tuple

    Raises:
        ValueError: If the count is wrong or ids/colors repeat
    """
    roster = tuple(players)
    validate_player_count(len(roster))

    ids = [p.id for p in roster]
    if len(set(ids)) != len(ids):
        raise ValueError(f"Player ids must be unique, got {ids}.")

    colors = [p.color for p in roster]
    if len(set(colors)) != len(colors):
        names = [c.value for c in colors]
        raise ValueError(f"Player colors must be unique, got {names}.")

    return roster
