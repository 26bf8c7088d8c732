"""
Scoring rules for Football Bets

This module turns a prediction and a final score into bet points.
For per-competition rankings see app/utils/standings.py; for global
statistics see app/services/stats.py.
"""

EXACT_SCORE_POINTS = 3
CORRECT_OUTCOME_POINTS = 1
WRONG_POINTS = 0

VALID_POINTS = (WRONG_POINTS, CORRECT_OUTCOME_POINTS, EXACT_SCORE_POINTS)


def _outcome(home, away):
    """1 for a home win, 0 for a draw, -1 for an away win"""
    return (home > away) - (home < away)


def calculate_bet_points(predicted_home, predicted_away, home_score, away_score):
    """
    Calculate points for a single bet.

    Returns:
        3 for the exact score
        1 for the correct outcome (home win, draw or away win)
        0 otherwise
    """
    if predicted_home == home_score and predicted_away == away_score:
        return EXACT_SCORE_POINTS

    if _outcome(predicted_home, predicted_away) == _outcome(home_score, away_score):
        return CORRECT_OUTCOME_POINTS

    return WRONG_POINTS


def bet_result(points):
    """Label used when reporting a scored bet"""
    if points == EXACT_SCORE_POINTS:
        return "exact"
    if points == CORRECT_OUTCOME_POINTS:
        return "correct"
    return "wrong"
