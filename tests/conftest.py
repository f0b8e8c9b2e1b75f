"""
Trouble - Test Configuration and Fixtures

Common fixtures and test data for all test modules.
"""

import pytest

from trouble.config.settings import Settings
from trouble.engine.base import Peg, Player, PlayerColor
from trouble.session.game import GameSession
from trouble.session.scheduler import ManualScheduler


# =============================================================================
# PLAYERS AND PEGS
# =============================================================================

@pytest.fixture
def red_player() -> Player:
    return Player(id="player-1", name="Player 1", color=PlayerColor.RED)


@pytest.fixture
def blue_player() -> Player:
    return Player(id="player-2", name="Player 2", color=PlayerColor.BLUE)


@pytest.fixture
def two_players(red_player, blue_player) -> list[Player]:
    return [red_player, blue_player]


@pytest.fixture
def four_players(red_player, blue_player) -> list[Player]:
    return [
        red_player,
        blue_player,
        Player(id="player-3", name="Player 3", color=PlayerColor.YELLOW),
        Player(id="player-4", name="Player 4", color=PlayerColor.GREEN),
    ]


def make_peg(player_id: str, index: int, position: int = -1) -> Peg:
    """Build a peg ``<player_id>-peg-<index>`` at a raw position code."""
    return Peg.at(f"{player_id}-peg-{index}", player_id, position)


@pytest.fixture
def peg_factory():
    return make_peg


# =============================================================================
# SESSION FIXTURES
# =============================================================================

@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(
        _env_file=None,
        turn_timeout=15,
        timeout_warning_threshold=5,
        die_roll_delay=1.5,
        no_moves_delay=1.5,
        forced_move_delay=0.8,
    )


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def session(settings, scheduler) -> GameSession:
    return GameSession(settings=settings, scheduler=scheduler)


@pytest.fixture
def started_session(session, two_players) -> GameSession:
    session.initialize_game(two_players)
    return session
