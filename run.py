from app import create_app, db
from app.models import Bet, Competition, CompetitionUser, Game, Team, User
from app.services.scheduler_service import scheduler_service

app = create_app()


@app.shell_context_processor
def make_shell_context():
    return {
        "db": db,
        "User": User,
        "Team": Team,
        "Competition": Competition,
        "CompetitionUser": CompetitionUser,
        "Game": Game,
        "Bet": Bet,
    }


if __name__ == "__main__":
    scheduler_service.init_app(app)
    if not scheduler_service.is_running:
        raise SystemExit("Scheduler is disabled (SCHEDULER_ENABLED=false)")
    scheduler_service.run_forever()
