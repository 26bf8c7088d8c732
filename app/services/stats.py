"""
Global statistics: per-user stats, leaderboards and the palmarès.

Only bets on finished games count here; competition standings live in
app/utils/standings.py.
"""

from collections import defaultdict

from app.models import Bet, Competition, CompetitionUser, Game, User
from app.models.status import FINISHED
from app.utils.errors import UserNotFoundError
from app.utils.scoring import (
    CORRECT_OUTCOME_POINTS,
    EXACT_SCORE_POINTS,
    bet_result,
)
from app.utils.standings import winner_accuracy


def _finished_bets_query(session):
    return session.query(Bet).join(Game, Bet.game_id == Game.id).filter(
        Game.status == FINISHED
    )


def _longest_streak(bets, predicate):
    """Longest run of consecutive bets matching predicate (bets in kickoff order)"""
    longest = 0
    current = 0
    for bet in bets:
        if predicate(bet):
            current += 1
            longest = max(longest, current)
        else:
            current = 0
    return longest


def summarize_bets(bets):
    """Aggregate a user's scored bets (expected in kickoff order)"""
    total_predictions = len(bets)
    total_points = sum(bet.points for bet in bets)

    points_accuracy = (
        total_points / (total_predictions * EXACT_SCORE_POINTS) * 100
        if total_predictions > 0
        else 0
    )
    average_points = (
        round(total_points / total_predictions, 3) if total_predictions > 0 else 0
    )

    return {
        "total_predictions": total_predictions,
        "total_points": total_points,
        "exact_scores": sum(1 for bet in bets if bet.points == EXACT_SCORE_POINTS),
        "correct_results": sum(
            1 for bet in bets if bet.points == CORRECT_OUTCOME_POINTS
        ),
        "winner_accuracy": round(winner_accuracy(bets), 2),
        "accuracy": round(points_accuracy, 2),
        "average_points": average_points,
        "longest_streak": _longest_streak(bets, lambda bet: bet.points > 0),
        "exact_score_streak": _longest_streak(
            bets, lambda bet: bet.points == EXACT_SCORE_POINTS
        ),
    }


def count_competition_wins(session, user_id):
    """Finished competitions this user won"""
    return (
        session.query(Competition)
        .filter(Competition.winner_id == user_id, Competition.status == FINISHED)
        .count()
    )


def _bets_by_user(session):
    bets_by_user = defaultdict(list)
    for bet in _finished_bets_query(session).order_by(Game.date.asc(), Bet.id.asc()):
        bets_by_user[bet.user_id].append(bet)
    return bets_by_user


def get_user_stats(session, user_id):
    """Full statistics for one user, including their global ranking"""
    user = session.get(User, user_id)
    if user is None:
        raise UserNotFoundError(user_id)

    bets_by_user = _bets_by_user(session)
    stats = summarize_bets(bets_by_user.get(user_id, []))
    stats["wins"] = count_competition_wins(session, user_id)

    # Ranking counts every user, admins included
    totals = sorted(
        (
            (sum(bet.points for bet in bets_by_user.get(u.id, [])), u.id)
            for u in session.query(User).order_by(User.created_at.asc(), User.id.asc())
        ),
        key=lambda item: item[0],
        reverse=True,
    )
    stats["ranking"] = next(
        position for position, (_, uid) in enumerate(totals, start=1) if uid == user_id
    )

    stats["user"] = user.to_dict()
    return stats


def get_leaderboard(session, limit=10, min_predictions=5):
    """Top players by total points and by average points per prediction.

    Admins are left out, as are users without a finished prediction.
    """
    bets_by_user = _bets_by_user(session)

    players = []
    for user in session.query(User).order_by(User.created_at.asc(), User.id.asc()):
        if user.is_admin:
            continue

        stats = summarize_bets(bets_by_user.get(user.id, []))
        stats["wins"] = count_competition_wins(session, user.id)
        players.append({"user": user.to_dict(), "stats": stats})

    by_points = sorted(
        (p for p in players if p["stats"]["total_predictions"] > 0),
        key=lambda p: p["stats"]["total_points"],
        reverse=True,
    )
    by_average = sorted(
        (p for p in players if p["stats"]["total_predictions"] >= min_predictions),
        key=lambda p: p["stats"]["average_points"],
        reverse=True,
    )

    return {
        "top_players_by_points": by_points[:limit],
        "top_players_by_average": by_average[:limit],
        "total_users": len(players),
    }


def get_palmares(session):
    """Every competition with its winner and the winner's points, newest first"""
    palmares = []

    competitions = session.query(Competition).order_by(
        Competition.start_date.desc(), Competition.id.desc()
    )
    for competition in competitions:
        winner_points = 0
        if competition.winner_id is not None:
            winner_points = sum(
                bet.points
                for bet in session.query(Bet)
                .join(Game, Bet.game_id == Game.id)
                .filter(
                    Bet.user_id == competition.winner_id,
                    Game.competition_id == competition.id,
                )
            )

        entry = competition.to_dict()
        entry["winner_points"] = winner_points
        entry["participant_count"] = (
            session.query(CompetitionUser)
            .filter_by(competition_id=competition.id)
            .count()
        )
        entry["game_count"] = competition.get_game_count()
        palmares.append(entry)

    return palmares


def get_user_performance(session, user_id, limit=10):
    """The user's most recent finished bets, newest first"""
    if session.get(User, user_id) is None:
        raise UserNotFoundError(user_id)

    bets = (
        _finished_bets_query(session)
        .filter(Bet.user_id == user_id)
        .order_by(Game.date.desc(), Bet.id.desc())
        .limit(limit)
        .all()
    )

    return [
        {
            "game_id": bet.game.id,
            "date": bet.game.date.isoformat() if bet.game.date else None,
            "home_team": bet.game.home_team.name,
            "away_team": bet.game.away_team.name,
            "competition": bet.game.competition.name,
            "actual_score": bet.game.score_display,
            "predicted_score": bet.predicted_score,
            "points": bet.points,
            "result": bet_result(bet.points),
        }
        for bet in bets
    ]
