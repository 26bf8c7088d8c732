"""
Shared test fixtures.

Every test gets a fresh application on an in-memory SQLite database and a
``make`` factory for building users, teams, competitions, games and bets.
"""

from datetime import datetime, timedelta, timezone
from itertools import count

import pytest

from app import create_app, db
from app.models import Bet, Competition, CompetitionUser, Game, Team, User
from app.models.status import UPCOMING
from app.models.user import ROLE_USER

NOW = datetime(2024, 6, 15, 18, 0, tzinfo=timezone.utc)


@pytest.fixture
def app():
    """Application bound to an in-memory database"""
    app = create_app("testing")

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def session(app):
    return db.session


@pytest.fixture
def now():
    return NOW


class Factory:
    """Builds and commits model instances with sensible defaults"""

    def __init__(self, session):
        self.session = session
        self._sequence = count(1)
        self._joined = NOW - timedelta(days=30)

    def _save(self, instance):
        self.session.add(instance)
        self.session.commit()
        return instance

    def user(self, name=None, role=ROLE_USER):
        n = next(self._sequence)
        name = name or f"user{n}"
        return self._save(User(name=name, email=f"{name.lower()}@example.com", role=role))

    def team(self, name=None):
        return self._save(Team(name=name or f"Team {next(self._sequence)}"))

    def competition(self, name=None, start_date=None, **kwargs):
        return self._save(
            Competition(
                name=name or f"Competition {next(self._sequence)}",
                start_date=start_date,
                **kwargs,
            )
        )

    def member(self, competition, user):
        # Strictly increasing registration times keep the order deterministic
        self._joined += timedelta(minutes=1)
        return self._save(
            CompetitionUser(
                competition_id=competition.id, user_id=user.id, joined_at=self._joined
            )
        )

    def game(
        self,
        competition,
        date=None,
        status=UPCOMING,
        home_score=None,
        away_score=None,
    ):
        return self._save(
            Game(
                competition_id=competition.id,
                home_team_id=self.team().id,
                away_team_id=self.team().id,
                date=date or NOW + timedelta(days=1),
                status=status,
                home_score=home_score,
                away_score=away_score,
            )
        )

    def bet(self, user, game, predicted_home=1, predicted_away=0, points=0):
        return self._save(
            Bet(
                user_id=user.id,
                game_id=game.id,
                predicted_home_score=predicted_home,
                predicted_away_score=predicted_away,
                points=points,
            )
        )


@pytest.fixture
def make(session):
    return Factory(session)
