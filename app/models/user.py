from datetime import datetime, timezone

from app import db

ROLE_USER = "user"
ROLE_ADMIN = "admin"


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False, index=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)

    # Admins manage competitions and are left out of the global leaderboard
    role = db.Column(db.String(20), nullable=False, default=ROLE_USER)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    bets = db.relationship(
        "Bet", backref="user", lazy="dynamic", cascade="all, delete-orphan"
    )
    competition_memberships = db.relationship(
        "CompetitionUser", backref="user", lazy="dynamic", cascade="all, delete-orphan"
    )

    # Database indexes and constraints
    __table_args__ = (db.Index("idx_user_created_at", "created_at"),)

    def __repr__(self):
        return f"<User {self.name}>"

    @property
    def is_admin(self):
        return (self.role or "").lower() == ROLE_ADMIN

    @property
    def avatar(self):
        """Two-letter initials used in place of a profile picture"""
        parts = self.name.split()
        if len(parts) > 1:
            return f"{parts[0][0]}{parts[1][0]}".upper()
        return self.name[:2].upper()

    def is_member_of_competition(self, competition_id):
        """Check if user is registered to a specific competition"""
        return (
            self.competition_memberships.filter_by(
                competition_id=competition_id
            ).first()
            is not None
        )

    def to_dict(self):
        """Convert user to dictionary"""
        return {
            "id": self.id,
            "name": self.name,
            "avatar": self.avatar,
            "role": self.role,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
