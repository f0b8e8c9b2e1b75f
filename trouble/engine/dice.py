"""
Trouble - Dice Engine (Pop-O-Matic)

Plain D6 rolls plus a streak breaker that makes long runs of the same value
increasingly unlikely without ever making a value impossible.

Streak breaker:
    - A value different from the last roll resets the streak.
    - A repeat is rerolled to one of the other five faces with probability
      0.4 on the first repeat, +0.3 per further repeat, capped at 0.7.

All methods are stateless class methods operating on immutable data.
"""

import random
from dataclasses import dataclass
from typing import ClassVar

from trouble.engine.base import DieState


@dataclass(frozen=True)
class StreakResult:
    """
    Final die value after the streak breaker.

    Attributes:
        result: Value to use (1-6)
        consecutive_repeats: Updated repeat count for the DieState
    """
    result: int
    consecutive_repeats: int


class DiceEngine:
    """Stateless engine for die rolls."""

    DIE_FACES: ClassVar[int] = 6
    BASE_REROLL_CHANCE: ClassVar[float] = 0.4
    REROLL_CHANCE_STEP: ClassVar[float] = 0.3
    MAX_REROLL_CHANCE: ClassVar[float] = 0.7

    @classmethod
    def generate_roll(cls) -> int:
        """Roll a single D6."""
        return random.randint(1, cls.DIE_FACES)

    @classmethod
    def reroll_chance(cls, repeats: int) -> float:
        """
        Probability of rerolling the ``repeats``-th consecutive repeat.

        Args:
            repeats: Repeat count including the current one (>= 1)

        Returns:
            Reroll probability in [0.4, 0.7]
        """
        return min(
            cls.MAX_REROLL_CHANCE,
            cls.BASE_REROLL_CHANCE + (repeats - 1) * cls.REROLL_CHANCE_STEP,
        )

    @classmethod
    def apply_streak_breaker(cls, roll: int, die_state: DieState) -> StreakResult:
        """
        Possibly replace a repeated value with a different one.

        Args:
            roll: Freshly generated value
            die_state: Current anti-streak history

        Returns:
            StreakResult with the value to use and the new repeat count
        """
        if roll != die_state.last_roll:
            return StreakResult(result=roll, consecutive_repeats=0)

        new_repeats = die_state.consecutive_repeats + 1
        if random.random() < cls.reroll_chance(new_repeats):
            others = [v for v in range(1, cls.DIE_FACES + 1) if v != die_state.last_roll]
            return StreakResult(result=random.choice(others), consecutive_repeats=0)

        return StreakResult(result=roll, consecutive_repeats=new_repeats)

    @classmethod
    def roll(cls, die_state: DieState, roll: int | None = None) -> StreakResult:
        """
        Produce the next die value.

        Args:
            die_state: Current anti-streak history
            roll: Optional pre-determined value (for testing). It bypasses
                randomness entirely but still updates the repeat count.

        Returns:
            StreakResult with the value to use and the new repeat count
        """
        if roll is not None:
            repeats = die_state.consecutive_repeats + 1 if roll == die_state.last_roll else 0
            return StreakResult(result=roll, consecutive_repeats=repeats)

        return cls.apply_streak_breaker(cls.generate_roll(), die_state)
