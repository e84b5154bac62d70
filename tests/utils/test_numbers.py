"""Tests for score and progress rounding."""

import pytest

from src.utils import half_up, percentage


class TestHalfUp:
    @pytest.mark.parametrize(
        "value,expected", [(62, 62), (0, 0), (100, 100)]
    )
    def test_integers_unchanged(self, value: int, expected: int) -> None:
        assert half_up(value) == expected


class TestPercentage:
    """Tests for percentage function."""

    @pytest.mark.parametrize(
        "part,whole,expected",
        [
            (1, 3, 33),
            (2, 3, 67),
            (5, 8, 63),  # 62.5 rounds up, not to even
            (1, 8, 13),  # 12.5
            (3, 8, 38),  # 37.5
            (1, 2, 50),
            (3, 4, 75),
            (15, 20, 75),
            (4, 4, 100),
        ],
    )
    def test_rounds_half_up(self, part: int, whole: int, expected: int) -> None:
        assert percentage(part, whole) == expected

    def test_zero_whole(self) -> None:
        assert percentage(0, 0) == 0
        assert percentage(3, 0) == 0

    def test_every_count_reaches_100_only_when_complete(self) -> None:
        for whole in range(1, 60):
            assert all(percentage(part, whole) < 100 for part in range(whole))
            assert percentage(whole, whole) == 100
