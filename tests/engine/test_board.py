"""
Trouble - Board Topology Tests
"""

import pytest

from trouble.engine.base import PlayerColor
from trouble.engine.board import BoardTopology


class TestStartAndFinishEntry:
    @pytest.mark.parametrize(
        "color, start",
        [
            (PlayerColor.RED, 25),
            (PlayerColor.BLUE, 4),
            (PlayerColor.GREEN, 11),
            (PlayerColor.YELLOW, 18),
        ],
    )
    def test_start_positions(self, color, start):
        assert BoardTopology.start_position(color) == start

    @pytest.mark.parametrize("color", list(PlayerColor))
    def test_finish_entry_precedes_start(self, color):
        start = BoardTopology.start_position(color)
        assert BoardTopology.finish_entry(color) == (start - 1) % BoardTopology.TRACK_SPACES

    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            BoardTopology.START_POSITIONS[PlayerColor.RED] = 0

    def test_space_counts(self):
        assert BoardTopology.TRACK_SPACES == 28
        assert BoardTopology.BOARD_SPACES == 56
        assert BoardTopology.FINISH_SPACES == 4
        assert not hasattr(BoardTopology, "HOME_SPACES")


class TestSpecialSpaces:
    @pytest.mark.parametrize("position", [0, 7, 14, 21])
    def test_double_trouble(self, position):
        assert BoardTopology.is_double_trouble(position)

    @pytest.mark.parametrize("position", [1, 3, 17, 27, 56])
    def test_not_double_trouble(self, position):
        assert not BoardTopology.is_double_trouble(position)

    @pytest.mark.parametrize("a, b", [(3, 17), (17, 3), (10, 24), (24, 10)])
    def test_warp_pairs_are_symmetric(self, a, b):
        assert BoardTopology.warp_partner(a) == b

    @pytest.mark.parametrize("position", [0, 4, 11, 25, 56])
    def test_non_warp(self, position):
        assert BoardTopology.warp_partner(position) is None

    @pytest.mark.parametrize("position, expected", [(0, True), (27, True), (28, False), (-1, False)])
    def test_is_track_position(self, position, expected):
        assert BoardTopology.is_track_position(position) is expected


class TestFinishCodes:
    @pytest.mark.parametrize("slot", [0, 1, 2, 3])
    def test_code_and_slot(self, slot):
        code = BoardTopology.finish_code(slot)
        assert code == 56 + slot
        assert BoardTopology.finish_slot(code) == slot

    @pytest.mark.parametrize("slot", [-1, 4])
    def test_bad_slot(self, slot):
        with pytest.raises(ValueError, match="FINISH slot"):
            BoardTopology.finish_code(slot)

    @pytest.mark.parametrize("position", [-1, 0, 27, 55, 60])
    def test_non_finish_positions(self, position):
        assert BoardTopology.finish_slot(position) is None
