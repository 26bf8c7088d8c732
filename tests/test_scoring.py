"""Tests for bet point calculation."""

import pytest

from app.utils.scoring import bet_result, calculate_bet_points


@pytest.mark.parametrize(
    "prediction, final, expected",
    [
        ((2, 1), (2, 1), 3),  # exact home win
        ((0, 0), (0, 0), 3),  # exact draw
        ((3, 0), (1, 0), 1),  # home win, wrong score
        ((1, 1), (2, 2), 1),  # draw, wrong score
        ((0, 2), (1, 4), 1),  # away win, wrong score
        ((2, 1), (1, 2), 0),  # wrong winner
        ((1, 1), (1, 0), 0),  # predicted draw
        ((1, 0), (2, 2), 0),  # missed draw
    ],
)
def test_calculate_bet_points(prediction, final, expected):
    assert calculate_bet_points(*prediction, *final) == expected


@pytest.mark.parametrize(
    "points, label", [(3, "exact"), (1, "correct"), (0, "wrong")]
)
def test_bet_result(points, label):
    assert bet_result(points) == label
