"""Tests for game status transitions and score entry."""

from datetime import timedelta

import pytest

from app.models import Bet, Competition, Game
from app.models.status import FINISHED, LIVE, UPCOMING
from app.services.game_status import (
    delete_game,
    set_game_score,
    update_game_statuses,
)
from app.utils.errors import GameNotFoundError


@pytest.fixture
def euro(make):
    return make.competition("Euro 2024")


class TestAdvanceStatus:
    def test_future_game_stays_upcoming(self, make, euro, now):
        game = make.game(euro, date=now + timedelta(hours=1))

        assert game.advance_status(now) is None
        assert game.status == UPCOMING

    def test_kickoff_passed_goes_live(self, make, euro, now):
        game = make.game(euro, date=now - timedelta(minutes=5))

        assert game.advance_status(now) == UPCOMING
        assert game.status == LIVE

    def test_live_game_without_score_stays_live(self, make, euro, now):
        game = make.game(euro, date=now - timedelta(hours=1), status=LIVE)

        assert game.advance_status(now) is None

    def test_scored_game_can_finish_in_one_step(self, make, euro, now):
        game = make.game(
            euro, date=now - timedelta(hours=3), home_score=2, away_score=0
        )

        assert game.advance_status(now) == UPCOMING
        assert game.status == FINISHED


class TestUpdateGameStatuses:
    def test_nothing_to_do(self, session, make, euro, now):
        make.game(euro, date=now + timedelta(days=2))

        summary = update_game_statuses(session, now=now)

        assert summary == {"went_live": [], "finished": [], "competitions_refreshed": []}

    def test_live_transition_updates_competition(self, session, make, euro, now):
        game = make.game(euro, date=now - timedelta(minutes=1))
        make.game(euro, date=now + timedelta(days=1))

        summary = update_game_statuses(session, now=now)

        assert summary["went_live"] == [game.id]
        assert summary["finished"] == []
        assert summary["competitions_refreshed"] == [euro.id]
        assert session.get(Competition, euro.id).status == LIVE

    def test_finishing_game_scores_bets_and_sets_winner(self, session, make, euro, now):
        alice, bob = make.user("Alice"), make.user("Bob")
        make.member(euro, alice)
        make.member(euro, bob)
        game = make.game(euro, date=now - timedelta(hours=2), status=LIVE)
        exact = make.bet(alice, game, predicted_home=2, predicted_away=1)
        wrong = make.bet(bob, game, predicted_home=0, predicted_away=1)

        game.home_score, game.away_score = 2, 1
        session.commit()

        summary = update_game_statuses(session, now=now)

        assert summary["finished"] == [game.id]
        assert session.get(Bet, exact.id).points == 3
        assert session.get(Bet, wrong.id).points == 0

        competition = session.get(Competition, euro.id)
        assert competition.status == FINISHED
        assert competition.winner_id == alice.id

    def test_finished_games_are_left_alone(self, session, make, euro, now):
        game = make.game(
            euro,
            date=now - timedelta(days=1),
            status=FINISHED,
            home_score=1,
            away_score=1,
        )

        summary = update_game_statuses(session, now=now)

        assert game.id not in summary["finished"]
        assert summary["competitions_refreshed"] == []

    def test_only_touched_competitions_are_refreshed(self, session, make, euro, now):
        other = make.competition("Copa America")
        make.game(other, date=now + timedelta(days=3))
        make.game(euro, date=now - timedelta(minutes=10))

        summary = update_game_statuses(session, now=now)

        assert summary["competitions_refreshed"] == [euro.id]
        assert session.get(Competition, other.id).status == UPCOMING


class TestSetGameScore:
    def test_score_on_live_game_waits_for_status_update(self, session, make, euro, now):
        user = make.user()
        make.member(euro, user)
        game = make.game(euro, date=now - timedelta(minutes=30), status=LIVE)
        bet = make.bet(user, game, predicted_home=1, predicted_away=0)

        set_game_score(session, game.id, 1, 0)

        assert session.get(Game, game.id).status == LIVE
        assert session.get(Bet, bet.id).points == 0

        update_game_statuses(session, now=now)

        assert session.get(Game, game.id).status == FINISHED
        assert session.get(Bet, bet.id).points == 3

    def test_correction_rescores_and_changes_winner(self, session, make, euro, now):
        alice, bob = make.user("Alice"), make.user("Bob")
        make.member(euro, alice)
        make.member(euro, bob)
        game = make.game(euro, date=now - timedelta(hours=2), status=LIVE)
        make.bet(alice, game, predicted_home=2, predicted_away=0)
        make.bet(bob, game, predicted_home=0, predicted_away=1)

        set_game_score(session, game.id, 2, 0)
        update_game_statuses(session, now=now)
        assert session.get(Competition, euro.id).winner_id == alice.id

        set_game_score(session, game.id, 0, 1)

        assert session.get(Competition, euro.id).winner_id == bob.id

    def test_negative_score_rejected(self, session, make, euro):
        game = make.game(euro)

        with pytest.raises(ValueError):
            set_game_score(session, game.id, -1, 0)

    def test_unknown_game(self, session):
        with pytest.raises(GameNotFoundError) as excinfo:
            set_game_score(session, 999, 1, 1)

        assert "999" in str(excinfo.value)


class TestCompetitionStatus:
    def test_no_games_stays_upcoming(self, euro):
        assert euro.refresh_status() is False
        assert euro.status == UPCOMING

    def test_started_game_makes_it_live(self, make, euro, now):
        make.game(euro, date=now - timedelta(days=1), status=FINISHED, home_score=0, away_score=0)
        make.game(euro, date=now + timedelta(days=1))

        assert euro.refresh_status() is True
        assert euro.status == LIVE

    def test_all_finished(self, make, euro, now):
        make.game(euro, date=now - timedelta(days=1), status=FINISHED, home_score=0, away_score=0)

        euro.refresh_status()

        assert euro.status == FINISHED


class TestDeleteGame:
    def test_delete_removes_bets_and_resettles(self, session, make, euro, now):
        alice, bob = make.user("Alice"), make.user("Bob")
        make.member(euro, alice)
        make.member(euro, bob)
        opener = make.game(
            euro, date=now - timedelta(days=2), status=FINISHED, home_score=1, away_score=0
        )
        final = make.game(
            euro, date=now - timedelta(days=1), status=FINISHED, home_score=2, away_score=2
        )
        make.bet(alice, opener, points=3)
        make.bet(bob, final, predicted_home=1, predicted_away=1, points=1)
        set_game_score(session, opener.id, 1, 0)
        assert session.get(Competition, euro.id).winner_id == alice.id

        opener_id = opener.id
        assert delete_game(session, opener_id) == euro.id

        assert session.get(Game, opener_id) is None
        assert session.query(Bet).filter_by(game_id=opener_id).count() == 0
        competition = session.get(Competition, euro.id)
        assert competition.status == FINISHED
        assert competition.winner_id == bob.id

    def test_deleting_last_game_reopens_competition(self, session, make, euro, now):
        game = make.game(
            euro, date=now - timedelta(days=1), status=FINISHED, home_score=1, away_score=1
        )
        euro.refresh_status()
        session.commit()

        delete_game(session, game.id)

        assert session.get(Competition, euro.id).status == UPCOMING

    def test_unknown_game(self, session):
        with pytest.raises(GameNotFoundError):
            delete_game(session, 404)
