"""Competition registration and bet placement"""

import logging
from datetime import datetime, timezone

from app.models import Bet, CompetitionUser, Game, User
from app.models.status import UPCOMING
from app.services.competition_store import CompetitionStore
from app.services.game_status import settle_competitions
from app.utils.errors import BetNotFoundError, UserNotFoundError
from app.utils.scoring import calculate_bet_points

logger = logging.getLogger(__name__)


def join_competition(session, user_id, competition_id):
    """Register a user to a competition. Returns (membership, created)."""
    CompetitionStore(session).get_competition(competition_id)
    if session.get(User, user_id) is None:
        raise UserNotFoundError(user_id)

    membership = (
        session.query(CompetitionUser)
        .filter_by(user_id=user_id, competition_id=competition_id)
        .first()
    )
    if membership:
        return membership, False

    membership = CompetitionUser(user_id=user_id, competition_id=competition_id)
    session.add(membership)
    session.commit()

    logger.info(f"User {user_id} joined competition {competition_id}")
    return membership, True


def place_bet(session, user_id, game_id, predicted_home, predicted_away, now=None):
    """Create or update a user's bet on a game.

    Returns (bet, message); bet is None when the bet was refused.
    """
    if predicted_home is None or predicted_away is None:
        return None, "Missing required fields"

    if predicted_home < 0 or predicted_away < 0:
        return None, "Scores cannot be negative"

    game = session.get(Game, game_id)
    if not game:
        return None, "Game not found"

    if game.status != UPCOMING:
        return None, "Cannot place bet on non-upcoming game"

    if game.has_started(now or datetime.now(timezone.utc)):
        return None, "Cannot place bet on past or current game"

    user = session.get(User, user_id)
    if not user:
        return None, "User not found"

    if not user.is_member_of_competition(game.competition_id):
        return None, "User is not registered to this competition"

    bet = session.query(Bet).filter_by(user_id=user_id, game_id=game_id).first()

    if bet:
        bet.predicted_home_score = predicted_home
        bet.predicted_away_score = predicted_away
        message = "Bet updated successfully"
    else:
        bet = Bet(
            user_id=user_id,
            game_id=game_id,
            predicted_home_score=predicted_home,
            predicted_away_score=predicted_away,
        )
        session.add(bet)
        message = "Bet placed successfully"

    session.commit()
    logger.debug(f"{message}: user {user_id} game {game_id} {bet.predicted_score}")
    return bet, message


def correct_bet(session, bet_id, predicted_home, predicted_away):
    """Admin correction of any bet, kickoff lock and membership ignored.

    A bet on a finished game is rescored at once and the competition winner
    refreshed. Returns the bet.
    """
    if predicted_home < 0 or predicted_away < 0:
        raise ValueError("Scores cannot be negative")

    bet = session.get(Bet, bet_id)
    if bet is None:
        raise BetNotFoundError(bet_id)

    bet.predicted_home_score = predicted_home
    bet.predicted_away_score = predicted_away

    game = bet.game
    if game.is_finished and game.has_score:
        bet.points = calculate_bet_points(
            predicted_home, predicted_away, game.home_score, game.away_score
        )
    session.commit()

    logger.info(f"Bet {bet_id} corrected to {bet.predicted_score} ({bet.points} pts)")

    if game.is_finished:
        settle_competitions(session, [game.competition_id])
    return bet


def delete_bet(session, bet_id):
    """Remove a bet and refresh its competition. Returns the competition id."""
    bet = session.get(Bet, bet_id)
    if bet is None:
        raise BetNotFoundError(bet_id)

    competition_id = bet.game.competition_id
    session.delete(bet)
    session.commit()

    logger.info(f"Bet {bet_id} deleted")

    settle_competitions(session, [competition_id])
    return competition_id
