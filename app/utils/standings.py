"""
Competition standings

Pure aggregation over already-scored bets. Nothing here touches the
database: callers fetch participants and bets (see
app/services/competition_store.py) and persist the winner themselves.
"""

from collections import defaultdict
from dataclasses import dataclass

from app.utils.scoring import CORRECT_OUTCOME_POINTS, EXACT_SCORE_POINTS


@dataclass
class StandingEntry:
    user: object
    total_points: int = 0
    bet_count: int = 0
    exact_scores: int = 0
    correct_results: int = 0
    rank: int = 0

    @property
    def winner_accuracy(self):
        if not self.bet_count:
            return 0.0
        return self.correct_results / self.bet_count * 100

    def to_dict(self):
        return {
            "rank": self.rank,
            "user": self.user.to_dict() if hasattr(self.user, "to_dict") else self.user,
            "total_points": self.total_points,
            "bet_count": self.bet_count,
            "exact_scores": self.exact_scores,
            "correct_results": self.correct_results,
            "winner_accuracy": round(self.winner_accuracy, 1),
        }


def compute_standings(participants, bets):
    """Rank the participants of a competition by points.

    Args:
        participants: users registered to the competition, in registration order
        bets: every bet placed on a game of the competition

    Returns:
        list of StandingEntry, best first. Participants without a bet are
        left out, as are bets from users who are not participants.

    Ties on total points go to the participant with more exact scores, then
    to the one who registered first.
    """
    bets_by_user = defaultdict(list)
    for bet in bets:
        bets_by_user[bet.user_id].append(bet.points)

    standings = []
    seen = set()
    for user in participants:
        if user.id in seen:
            continue
        seen.add(user.id)

        points = bets_by_user.get(user.id)
        if not points:
            continue

        standings.append(
            StandingEntry(
                user=user,
                total_points=sum(points),
                bet_count=len(points),
                exact_scores=points.count(EXACT_SCORE_POINTS),
                correct_results=points.count(CORRECT_OUTCOME_POINTS),
            )
        )

    # Stable sort: registration order survives full ties
    standings.sort(key=lambda e: (e.total_points, e.exact_scores), reverse=True)

    for position, entry in enumerate(standings, start=1):
        entry.rank = position

    return standings


def determine_winner(standings):
    """Return the leader's user, or None when nobody has bet"""
    if not standings:
        return None
    return standings[0].user


def winner_accuracy(bets):
    """Percentage of bets that got the outcome right but not the exact score"""
    bets = list(bets)
    if not bets:
        return 0.0
    correct = sum(1 for bet in bets if bet.points == CORRECT_OUTCOME_POINTS)
    return correct / len(bets) * 100
