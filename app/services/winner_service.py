"""
Competition winner determination.

The winner is always derived from the standings, so it is recomputed every
time a game of the competition finishes or a finished score is corrected.
"""

import logging
from dataclasses import dataclass, field

from app.utils.logging_config import ContextualLogger
from app.utils.standings import compute_standings, determine_winner

logger = logging.getLogger(__name__)


@dataclass
class WinnerRefresh:
    competition_id: int
    winner: object = None
    previous_winner_id: int = None
    changed: bool = False
    standings: list = field(default_factory=list)

    @property
    def winner_id(self):
        return self.winner.id if self.winner is not None else None


def refresh_competition_winner(store, competition_id):
    """Recompute standings and persist the winner when it changed.

    Raises CompetitionNotFoundError for an unknown competition. An empty
    standings table leaves the stored winner untouched.
    """
    log = ContextualLogger(__name__, {"competition_id": competition_id})

    competition = store.get_competition(competition_id)
    previous_winner_id = competition.winner_id

    standings = compute_standings(
        store.fetch_membership(competition_id), store.fetch_bets(competition_id)
    )
    winner = determine_winner(standings)

    result = WinnerRefresh(
        competition_id=competition_id,
        winner=winner,
        previous_winner_id=previous_winner_id,
        standings=standings,
    )

    if winner is None:
        log.debug("No standings yet, winner left unchanged")
        return result

    if winner.id != previous_winner_id:
        store.set_winner(competition_id, winner.id)
        result.changed = True
        log.info(
            f"Winner set to {winner.name} ({standings[0].total_points} pts), "
            f"was user {previous_winner_id}"
        )

    return result


def refresh_all_winners(store):
    """Refresh the winner of every competition. Returns the list of results."""
    results = []
    for competition in store.list_competitions():
        results.append(refresh_competition_winner(store, competition.id))

    changed = sum(1 for result in results if result.changed)
    logger.info(f"Refreshed {len(results)} competition winners, {changed} changed")
    return results
