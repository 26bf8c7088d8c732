from datetime import datetime, timezone

from app import db


class Team(db.Model):
    __tablename__ = "teams"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, unique=True, index=True)
    logo = db.Column(db.String(500))

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    home_games = db.relationship(
        "Game",
        foreign_keys="Game.home_team_id",
        backref=db.backref("home_team", lazy="joined"),
        lazy="dynamic",
    )
    away_games = db.relationship(
        "Game",
        foreign_keys="Game.away_team_id",
        backref=db.backref("away_team", lazy="joined"),
        lazy="dynamic",
    )

    def __repr__(self):
        return f"<Team {self.name}>"

    def to_dict(self):
        return {"id": self.id, "name": self.name, "logo": self.logo}
