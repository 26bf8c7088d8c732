"""
Game lifecycle: UPCOMING -> LIVE -> FINISHED.

A game goes live once its kickoff has passed and finishes once a live game
has both scores. Finishing a game scores its bets and refreshes the status
and winner of its competition.
"""

import logging
from datetime import datetime, timezone

from app.models import Competition, Game
from app.models.status import FINISHED, LIVE, UPCOMING
from app.services.competition_store import CompetitionStore
from app.services.winner_service import refresh_competition_winner
from app.utils.errors import GameNotFoundError

logger = logging.getLogger(__name__)


def update_game_statuses(session, now=None):
    """Advance every open game and settle the ones that just finished.

    Returns a summary dict with the ids of games that went live, games that
    finished and competitions whose winner was refreshed.
    """
    now = now or datetime.now(timezone.utc)

    summary = {"went_live": [], "finished": [], "competitions_refreshed": []}

    open_games = (
        session.query(Game)
        .filter(Game.status.in_([UPCOMING, LIVE]))
        .order_by(Game.date.asc())
        .all()
    )

    # PHASE 1: status transitions
    for game in open_games:
        previous = game.advance_status(now)
        if previous is None:
            continue

        if previous == UPCOMING:
            summary["went_live"].append(game.id)
        if game.status == FINISHED:
            summary["finished"].append(game.id)

    if not summary["went_live"] and not summary["finished"]:
        return summary

    # PHASE 2: score bets of finished games
    bets_scored = 0
    for game in open_games:
        if game.id in summary["finished"]:
            bets_scored += game.score_bets()

    session.commit()
    logger.info(
        f"Game statuses updated: {len(summary['went_live'])} live, "
        f"{len(summary['finished'])} finished, {bets_scored} bets scored"
    )

    # PHASE 3: competition status and winner
    touched = set(summary["went_live"]) | set(summary["finished"])
    competition_ids = sorted(
        {game.competition_id for game in open_games if game.id in touched}
    )
    summary["competitions_refreshed"] = settle_competitions(session, competition_ids)

    return summary


def settle_competitions(session, competition_ids):
    """Refresh status and winner for each competition. Returns refreshed ids."""
    store = CompetitionStore(session)
    refreshed = []

    for competition_id in competition_ids:
        competition = session.get(Competition, competition_id)
        if competition is None:
            continue

        if competition.refresh_status():
            logger.info(f"Competition {competition.name} is now {competition.status}")
            session.commit()

        refresh_competition_winner(store, competition_id)
        refreshed.append(competition_id)

    return refreshed


def set_game_score(session, game_id, home_score, away_score):
    """Enter or correct a game's score.

    The game is not finished here; the next status update does that. A game
    that is already finished gets its bets rescored and its competition
    winner refreshed right away.
    """
    if home_score < 0 or away_score < 0:
        raise ValueError("Scores cannot be negative")

    game = session.get(Game, game_id)
    if game is None:
        raise GameNotFoundError(game_id)

    rescored = game.update_score(home_score, away_score)
    session.commit()

    logger.info(f"Game {game_id} score set to {game.score_display}")

    if game.is_finished:
        logger.info(f"Game {game_id} was already finished, rescored {rescored} bets")
        settle_competitions(session, [game.competition_id])

    return game


def delete_game(session, game_id):
    """Remove a game and its bets, then resettle its competition.

    Returns the id of the competition the game belonged to.
    """
    game = session.get(Game, game_id)
    if game is None:
        raise GameNotFoundError(game_id)

    competition_id = game.competition_id
    bet_count = 0
    for bet in game.bets.all():
        session.delete(bet)
        bet_count += 1
    session.delete(game)
    session.commit()

    logger.info(f"Game {game_id} deleted with {bet_count} bets")

    settle_competitions(session, [competition_id])
    return competition_id
