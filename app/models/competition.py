from datetime import datetime, timezone

from app import db

from .status import FINISHED, LIVE, STATUSES, UPCOMING


class Competition(db.Model):
    __tablename__ = "competitions"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, unique=True, index=True)
    logo = db.Column(db.String(500))

    # Competition dates
    start_date = db.Column(db.Date)
    end_date = db.Column(db.Date)

    status = db.Column(db.String(20), nullable=False, default=UPCOMING)

    # Written only by the winner service
    winner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    games = db.relationship(
        "Game", backref="competition", lazy="dynamic", cascade="all, delete-orphan"
    )
    members = db.relationship(
        "CompetitionUser",
        backref="competition",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )
    winner = db.relationship("User", foreign_keys=[winner_id], backref="competitions_won")

    __table_args__ = (
        db.CheckConstraint(
            f"status IN {STATUSES!r}", name="valid_competition_status"
        ),
        db.Index("idx_competition_status", "status"),
        db.Index("idx_competition_start_date", "start_date"),
    )

    def __repr__(self):
        return f"<Competition {self.name}>"

    @property
    def is_finished(self):
        return self.status == FINISHED

    def get_participant_count(self):
        return self.members.count()

    def get_game_count(self):
        return self.games.count()

    def refresh_status(self):
        """Derive the competition status from its games.

        Returns True when the status changed.
        """
        statuses = [game.status for game in self.games.all()]

        if statuses and all(status == FINISHED for status in statuses):
            new_status = FINISHED
        elif any(status in (LIVE, FINISHED) for status in statuses):
            new_status = LIVE
        else:
            new_status = UPCOMING

        if new_status != self.status:
            self.status = new_status
            return True
        return False

    def to_dict(self):
        """Convert competition to dictionary"""
        return {
            "id": self.id,
            "name": self.name,
            "logo": self.logo,
            "status": self.status,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "winner": self.winner.to_dict() if self.winner else None,
        }
