from datetime import datetime, timezone

from app import db
from app.utils.scoring import VALID_POINTS


class Bet(db.Model):
    __tablename__ = "bets"

    id = db.Column(db.Integer, primary_key=True)

    # Bet identification
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    game_id = db.Column(db.Integer, db.ForeignKey("games.id"), nullable=False)

    # Prediction
    predicted_home_score = db.Column(db.Integer, nullable=False)
    predicted_away_score = db.Column(db.Integer, nullable=False)

    # Result (written when the game finishes): 0 wrong, 1 outcome, 3 exact
    points = db.Column(db.Integer, nullable=False, default=0)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Constraints and indexes
    __table_args__ = (
        db.UniqueConstraint("user_id", "game_id", name="unique_user_game_bet"),
        db.CheckConstraint(f"points IN {VALID_POINTS!r}", name="valid_bet_points"),
        db.Index("idx_bet_user", "user_id"),
        db.Index("idx_bet_game", "game_id"),
    )

    def __repr__(self):
        return f"<Bet user_id={self.user_id} game_id={self.game_id} {self.predicted_score} ({self.points} pts)>"

    @property
    def predicted_score(self):
        return f"{self.predicted_home_score}-{self.predicted_away_score}"

    def to_dict(self):
        """Convert bet to dictionary"""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "game_id": self.game_id,
            "predicted_home_score": self.predicted_home_score,
            "predicted_away_score": self.predicted_away_score,
            "points": self.points,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
