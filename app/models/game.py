from datetime import datetime, timezone

from app import db

from .status import FINISHED, LIVE, STATUSES, UPCOMING


def _as_utc(value):
    # SQLite hands back naive datetimes; they are stored as UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Game(db.Model):
    __tablename__ = "games"

    id = db.Column(db.Integer, primary_key=True)
    competition_id = db.Column(
        db.Integer, db.ForeignKey("competitions.id"), nullable=False
    )

    # Teams
    home_team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)
    away_team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)

    # Kickoff (UTC)
    date = db.Column(db.DateTime, nullable=False)

    # Scores
    home_score = db.Column(db.Integer)
    away_score = db.Column(db.Integer)

    status = db.Column(db.String(20), nullable=False, default=UPCOMING)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    bets = db.relationship(
        "Bet", backref="game", lazy="dynamic", cascade="all, delete-orphan"
    )

    # Indexes
    __table_args__ = (
        db.Index("idx_game_competition_date", "competition_id", "date"),
        db.Index("idx_game_status", "status"),
        db.CheckConstraint("home_team_id != away_team_id", name="different_teams"),
        db.CheckConstraint(f"status IN {STATUSES!r}", name="valid_game_status"),
    )

    def __repr__(self):
        return f'<Game {self.home_team.name if self.home_team else "TBD"} - {self.away_team.name if self.away_team else "TBD"} {self.status}>'

    @property
    def has_score(self):
        return self.home_score is not None and self.away_score is not None

    @property
    def is_finished(self):
        return self.status == FINISHED

    @property
    def kickoff_utc(self):
        return _as_utc(self.date)

    def has_started(self, now=None):
        """Check if kickoff time has passed"""
        if not self.date:
            return False
        now = _as_utc(now) if now else datetime.now(timezone.utc)
        return now >= self.kickoff_utc

    def advance_status(self, now=None):
        """Move the game along UPCOMING -> LIVE -> FINISHED.

        A game whose kickoff has passed goes live; a live game with both
        scores set finishes. Both steps may happen in one call. Returns the
        previous status when something changed, otherwise None.
        """
        previous = self.status

        if self.status == UPCOMING and self.has_started(now):
            self.status = LIVE

        if self.status == LIVE and self.has_score:
            self.status = FINISHED

        return previous if self.status != previous else None

    def update_score(self, home_score, away_score):
        """Set the final score; bets are rescored only once the game is finished"""
        self.home_score = home_score
        self.away_score = away_score

        if self.is_finished:
            return self.score_bets()
        return 0

    def score_bets(self):
        """Write points into every bet on this game. Returns the bet count."""
        if not self.has_score:
            return 0

        from app.utils.scoring import calculate_bet_points

        bets = self.bets.all()
        for bet in bets:
            bet.points = calculate_bet_points(
                bet.predicted_home_score,
                bet.predicted_away_score,
                self.home_score,
                self.away_score,
            )
        return len(bets)

    @property
    def score_display(self):
        if not self.has_score:
            return "-"
        return f"{self.home_score}-{self.away_score}"

    def to_dict(self):
        """Convert game to dictionary"""
        return {
            "id": self.id,
            "competition_id": self.competition_id,
            "date": self.date.isoformat() if self.date else None,
            "home_team": self.home_team.to_dict() if self.home_team else None,
            "away_team": self.away_team.to_dict() if self.away_team else None,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "status": self.status,
        }
