from datetime import datetime, timezone

from app import db


class CompetitionUser(db.Model):
    __tablename__ = "competition_users"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    competition_id = db.Column(
        db.Integer, db.ForeignKey("competitions.id"), nullable=False
    )

    # Registration order is the last standings tie-break
    joined_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Constraints
    __table_args__ = (
        db.UniqueConstraint("user_id", "competition_id", name="unique_user_competition"),
        db.Index("idx_competition_members", "competition_id", "joined_at"),
    )

    def __repr__(self):
        return (
            f"<CompetitionUser user_id={self.user_id} "
            f"competition_id={self.competition_id}>"
        )

    def to_dict(self):
        return {
            "user_id": self.user_id,
            "competition_id": self.competition_id,
            "name": self.user.name if self.user else None,
            "joined_at": self.joined_at.isoformat() if self.joined_at else None,
        }
