"""
Persistence access for competition standings.

A CompetitionStore wraps one SQLAlchemy session. Build one per unit of work
(CLI command, scheduler job) from the current app context's ``db.session``
and hand it to the services that need it.
"""

from app.models import Bet, Competition, CompetitionUser, Game, User
from app.utils.errors import CompetitionNotFoundError


class CompetitionStore:
    def __init__(self, session):
        self.session = session

    def get_competition(self, competition_id):
        competition = self.session.get(Competition, competition_id)
        if competition is None:
            raise CompetitionNotFoundError(competition_id)
        return competition

    def list_competitions(self):
        return (
            self.session.query(Competition)
            .order_by(Competition.start_date.desc(), Competition.id.desc())
            .all()
        )

    def find_competitions(self, name_fragment):
        """Case-insensitive lookup by name, newest first"""
        return (
            self.session.query(Competition)
            .filter(Competition.name.ilike(f"%{name_fragment}%"))
            .order_by(Competition.start_date.desc(), Competition.id.desc())
            .all()
        )

    def fetch_membership(self, competition_id):
        """Users registered to the competition, in registration order"""
        self.get_competition(competition_id)

        return (
            self.session.query(User)
            .join(CompetitionUser, CompetitionUser.user_id == User.id)
            .filter(CompetitionUser.competition_id == competition_id)
            .order_by(CompetitionUser.joined_at.asc(), CompetitionUser.id.asc())
            .all()
        )

    def fetch_bets(self, competition_id):
        """Every bet placed on a game of the competition"""
        self.get_competition(competition_id)

        return (
            self.session.query(Bet)
            .join(Game, Bet.game_id == Game.id)
            .filter(Game.competition_id == competition_id)
            .order_by(Bet.id.asc())
            .all()
        )

    def set_winner(self, competition_id, user_id):
        """Persist the winner. No locking: the last write wins."""
        competition = self.get_competition(competition_id)
        competition.winner_id = user_id
        self.session.commit()
        return competition
