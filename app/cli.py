"""
Football Bets management commands.

Registered on ``app.cli`` (``flask competition standings 3``) and exposed
through manage.py (``python manage.py competition standings 3``).
"""

import logging

import click
from flask import current_app
from flask.cli import with_appcontext
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app import db
from app.models import Bet, Competition, Game, Team, User
from app.models.status import FINISHED
from app.models.user import ROLE_ADMIN, ROLE_USER
from app.services.betting import (
    correct_bet,
    delete_bet,
    join_competition,
    place_bet,
)
from app.services.competition_store import CompetitionStore
from app.services.game_status import (
    delete_game,
    set_game_score,
    update_game_statuses,
)
from app.services.stats import get_leaderboard, get_palmares, get_user_stats
from app.services.winner_service import (
    refresh_all_winners,
    refresh_competition_winner,
)
from app.utils.errors import CompetitionNotFoundError, NotFoundError
from app.utils.standings import compute_standings
from app.utils.timezone_utils import display_kickoff, parse_kickoff

logger = logging.getLogger(__name__)


def _resolve_competition(store, reference):
    """Find a competition by id or by (part of) its name"""
    if str(reference).isdigit():
        return store.get_competition(int(reference))

    matches = store.find_competitions(reference)
    if not matches:
        raise CompetitionNotFoundError(reference)
    if len(matches) > 1:
        names = ", ".join(c.name for c in matches)
        raise click.UsageError(f"'{reference}' matches several competitions: {names}")
    return matches[0]


def _resolve_user(reference):
    if str(reference).isdigit():
        user = db.session.get(User, int(reference))
    else:
        user = User.query.filter_by(name=reference).first()
    if user is None:
        raise click.UsageError(f"User '{reference}' not found")
    return user


@click.group()
def cli():
    """Football Bets Management CLI"""
    pass


# Competition Commands
@cli.group()
def competition():
    """Competition management commands"""
    pass


@competition.command("create")
@click.argument("name")
@click.option("--start-date", type=click.DateTime(formats=["%Y-%m-%d"]))
@click.option("--end-date", type=click.DateTime(formats=["%Y-%m-%d"]))
@click.option("--logo", help="Logo URL")
@with_appcontext
def create_competition(name, start_date, end_date, logo):
    """Create a new competition"""
    try:
        comp = Competition(
            name=name,
            start_date=start_date.date() if start_date else None,
            end_date=end_date.date() if end_date else None,
            logo=logo,
        )
        db.session.add(comp)
        db.session.commit()
        click.echo(f"✅ Created competition {comp.name} (ID: {comp.id})")
    except IntegrityError:
        db.session.rollback()
        click.echo(f"❌ Competition '{name}' already exists!")


@competition.command("list")
@with_appcontext
def list_competitions():
    """List all competitions"""
    competitions = CompetitionStore(db.session).list_competitions()

    if not competitions:
        click.echo("No competitions found.")
        return

    click.echo("Competitions:")
    for comp in competitions:
        winner = comp.winner.name if comp.winner else "-"
        click.echo(
            f"  [{comp.id}] {comp.name}: {comp.status} - "
            f"{comp.get_game_count()} games, "
            f"{comp.get_participant_count()} participants, winner: {winner}"
        )


@competition.command("standings")
@click.argument("reference")
@with_appcontext
def standings(reference):
    """Show the standings of a competition (id or name)"""
    store = CompetitionStore(db.session)
    try:
        comp = _resolve_competition(store, reference)
    except NotFoundError as e:
        click.echo(f"❌ {e}")
        return

    table = compute_standings(
        store.fetch_membership(comp.id), store.fetch_bets(comp.id)
    )

    click.echo(f"🏆 {comp.name} ({comp.status})")
    if not table:
        click.echo("No bets placed yet.")
        return

    for entry in table:
        click.echo(
            f"  {entry.rank}. {entry.user.name}: {entry.total_points} pts "
            f"({entry.bet_count} bets, {entry.exact_scores} exact, "
            f"{entry.winner_accuracy:.1f}% winner accuracy)"
        )


@competition.command("refresh-winner")
@click.argument("reference")
@with_appcontext
def refresh_winner(reference):
    """Recompute and store the winner of a competition"""
    store = CompetitionStore(db.session)
    try:
        comp = _resolve_competition(store, reference)
        result = refresh_competition_winner(store, comp.id)
    except NotFoundError as e:
        click.echo(f"❌ {e}")
        return
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Database error refreshing winner: {str(e)}")
        logger.error(f"Winner refresh failed - SQL error: {e}")
        return

    if result.winner is None:
        click.echo(f"⚠️  {comp.name}: no bets placed, winner unchanged")
    elif result.changed:
        click.echo(f"🔧 {comp.name}: winner set to {result.winner.name}")
    else:
        click.echo(f"✅ {comp.name}: {result.winner.name} is already the winner")


@competition.command("refresh-all")
@with_appcontext
def refresh_all():
    """Recompute and store the winner of every competition"""
    try:
        results = refresh_all_winners(CompetitionStore(db.session))
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Database error refreshing winners: {str(e)}")
        logger.error(f"Winner refresh failed - SQL error: {e}")
        return

    changed = [result for result in results if result.changed]
    for result in changed:
        click.echo(
            f"🔧 Competition {result.competition_id}: winner set to {result.winner.name}"
        )
    click.echo(f"✅ Checked {len(results)} competitions, {len(changed)} winners changed")


@competition.command("wins")
@with_appcontext
def wins():
    """Rank users by competitions won"""
    palmares = get_palmares(db.session)

    win_counts = {}
    for entry in palmares:
        if entry["winner"] and entry["status"] == FINISHED:
            name = entry["winner"]["name"]
            win_counts.setdefault(name, []).append(entry)

    if not win_counts:
        click.echo("No finished competition has a winner yet.")
        return

    ranked = sorted(win_counts.items(), key=lambda item: len(item[1]), reverse=True)
    click.echo("🏅 Competition wins:")
    for position, (name, won) in enumerate(ranked, start=1):
        click.echo(f"{position}. {name}: {len(won)} wins")
        for entry in won:
            click.echo(f"   - {entry['name']} ({entry['winner_points']} pts)")


@competition.command("join")
@click.argument("reference")
@click.argument("user_ref")
@with_appcontext
def join(reference, user_ref):
    """Register a user to a competition"""
    store = CompetitionStore(db.session)
    try:
        comp = _resolve_competition(store, reference)
        user = _resolve_user(user_ref)
        _, created = join_competition(db.session, user.id, comp.id)
    except NotFoundError as e:
        click.echo(f"❌ {e}")
        return

    if created:
        click.echo(f"✅ {user.name} joined {comp.name}")
    else:
        click.echo(f"{user.name} is already registered to {comp.name}")


# Team Commands
@cli.group()
def team():
    """Team management commands"""
    pass


@team.command("create")
@click.argument("name")
@click.option("--logo", help="Logo URL")
@with_appcontext
def create_team(name, logo):
    """Create a team"""
    try:
        new_team = Team(name=name, logo=logo)
        db.session.add(new_team)
        db.session.commit()
        click.echo(f"✅ Created team {new_team.name} (ID: {new_team.id})")
    except IntegrityError:
        db.session.rollback()
        click.echo(f"❌ Team '{name}' already exists!")


# Game Commands
@cli.group()
def game():
    """Game management commands"""
    pass


@game.command("create")
@click.argument("reference")
@click.argument("home_team")
@click.argument("away_team")
@click.argument("kickoff")
@with_appcontext
def create_game(reference, home_team, away_team, kickoff):
    """Schedule a game (kickoff "YYYY-MM-DD HH:MM" in the application timezone)"""
    try:
        kickoff_utc = parse_kickoff(kickoff)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="KICKOFF")

    store = CompetitionStore(db.session)
    try:
        comp = _resolve_competition(store, reference)
    except NotFoundError as e:
        click.echo(f"❌ {e}")
        return

    home = Team.query.filter_by(name=home_team).first()
    away = Team.query.filter_by(name=away_team).first()
    if not home or not away:
        click.echo("❌ Both teams must exist")
        return
    if home.id == away.id:
        click.echo("❌ A team cannot play itself")
        return

    new_game = Game(
        competition_id=comp.id,
        home_team_id=home.id,
        away_team_id=away.id,
        date=kickoff_utc,
    )
    db.session.add(new_game)
    db.session.commit()
    click.echo(
        f"✅ Scheduled {home.name} - {away.name} on "
        f"{display_kickoff(new_game.date)} (ID: {new_game.id})"
    )


@game.command("list")
@click.argument("reference")
@with_appcontext
def list_games(reference):
    """List the games of a competition"""
    store = CompetitionStore(db.session)
    try:
        comp = _resolve_competition(store, reference)
    except NotFoundError as e:
        click.echo(f"❌ {e}")
        return

    games = comp.games.order_by(Game.date.asc()).all()
    if not games:
        click.echo("No games found.")
        return

    for g in games:
        click.echo(
            f"  [{g.id}] {display_kickoff(g.date)} {g.home_team.name} "
            f"{g.score_display} {g.away_team.name} ({g.status})"
        )


@game.command("update-status")
@with_appcontext
def update_status():
    """Move games to LIVE/FINISHED and settle finished ones"""
    try:
        summary = update_game_statuses(db.session)
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Database error updating statuses: {str(e)}")
        logger.error(f"Status update failed - SQL error: {e}")
        return

    click.echo(
        f"✅ Game statuses updated: {len(summary['went_live'])} live, "
        f"{len(summary['finished'])} finished, "
        f"{len(summary['competitions_refreshed'])} competitions refreshed"
    )


@game.command("set-score")
@click.argument("game_id", type=int)
@click.argument("home_score", type=int)
@click.argument("away_score", type=int)
@with_appcontext
def set_score(game_id, home_score, away_score):
    """Enter or correct the score of a game"""
    try:
        updated = set_game_score(db.session, game_id, home_score, away_score)
    except (NotFoundError, ValueError) as e:
        click.echo(f"❌ {e}")
        return
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Database error setting score: {str(e)}")
        logger.error(f"Score update failed - SQL error: {e}")
        return

    click.echo(f"✅ Game {updated.id}: {updated.score_display} ({updated.status})")


@game.command("delete")
@click.argument("game_id", type=int)
@click.confirmation_option(prompt="This deletes the game and all its bets. Continue?")
@with_appcontext
def delete_game_cmd(game_id):
    """Delete a game and its bets, then resettle its competition"""
    try:
        competition_id = delete_game(db.session, game_id)
    except NotFoundError as e:
        click.echo(f"❌ {e}")
        return
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Database error deleting game: {str(e)}")
        logger.error(f"Game deletion failed - SQL error: {e}")
        return

    click.echo(f"🗑  Game {game_id} deleted, competition {competition_id} resettled")


# Bet Commands
@cli.group()
def bet():
    """Bet commands"""
    pass


@bet.command("place")
@click.argument("user_ref")
@click.argument("game_id", type=int)
@click.argument("home_score", type=int)
@click.argument("away_score", type=int)
@with_appcontext
def place(user_ref, game_id, home_score, away_score):
    """Place or update a bet for a user"""
    user = _resolve_user(user_ref)
    placed, message = place_bet(db.session, user.id, game_id, home_score, away_score)
    if placed is None:
        click.echo(f"❌ {message}")
    else:
        click.echo(f"✅ {message}: {placed.predicted_score}")


@bet.command("list")
@click.argument("game_id", type=int)
@with_appcontext
def list_bets(game_id):
    """List the bets placed on a game"""
    target = db.session.get(Game, game_id)
    if target is None:
        click.echo(f"❌ Game {game_id} not found")
        return

    click.echo(
        f"{target.home_team.name} {target.score_display} {target.away_team.name} "
        f"({target.status})"
    )
    bets = target.bets.order_by(Bet.id.asc()).all()
    if not bets:
        click.echo("No bets placed.")
        return

    for b in bets:
        click.echo(f"  [{b.id}] {b.user.name}: {b.predicted_score} ({b.points} pts)")


@bet.command("correct")
@click.argument("bet_id", type=int)
@click.argument("home_score", type=int)
@click.argument("away_score", type=int)
@with_appcontext
def correct(bet_id, home_score, away_score):
    """Correct any bet; finished games are rescored"""
    try:
        corrected = correct_bet(db.session, bet_id, home_score, away_score)
    except (NotFoundError, ValueError) as e:
        click.echo(f"❌ {e}")
        return
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Database error correcting bet: {str(e)}")
        logger.error(f"Bet correction failed - SQL error: {e}")
        return

    click.echo(
        f"🔧 Bet {corrected.id} corrected to {corrected.predicted_score} "
        f"({corrected.points} pts)"
    )


@bet.command("delete")
@click.argument("bet_id", type=int)
@click.confirmation_option(prompt="Delete this bet?")
@with_appcontext
def delete(bet_id):
    """Delete a bet and refresh its competition"""
    try:
        delete_bet(db.session, bet_id)
    except NotFoundError as e:
        click.echo(f"❌ {e}")
        return
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Database error deleting bet: {str(e)}")
        logger.error(f"Bet deletion failed - SQL error: {e}")
        return

    click.echo(f"🗑  Bet {bet_id} deleted")


# User Management Commands
@cli.group()
def user():
    """User management commands"""
    pass


@user.command("create")
@click.argument("name")
@click.argument("email")
@click.option("--admin", is_flag=True, help="Create an admin user")
@with_appcontext
def create_user(name, email, admin):
    """Create a user"""
    existing = User.query.filter((User.name == name) | (User.email == email)).first()
    if existing:
        click.echo(f"❌ User with name '{name}' or email '{email}' already exists!")
        return

    new_user = User(name=name, email=email, role=ROLE_ADMIN if admin else ROLE_USER)
    db.session.add(new_user)
    db.session.commit()
    click.echo(f"✅ Created {new_user.role} '{name}' ({email})")


@user.command("stats")
@click.argument("user_ref")
@with_appcontext
def user_stats(user_ref):
    """Show a user's statistics"""
    target = _resolve_user(user_ref)
    stats = get_user_stats(db.session, target.id)

    click.echo(f"👤 {target.name} (rank #{stats['ranking']})")
    click.echo(f"  Points: {stats['total_points']} in {stats['total_predictions']} predictions")
    click.echo(f"  Exact scores: {stats['exact_scores']}")
    click.echo(f"  Winner accuracy: {stats['winner_accuracy']}%")
    click.echo(f"  Average points: {stats['average_points']}")
    click.echo(f"  Longest streak: {stats['longest_streak']}")
    click.echo(f"  Competition wins: {stats['wins']}")


@user.command("leaderboard")
@click.option("--limit", type=int, help="Number of players shown")
@with_appcontext
def leaderboard(limit):
    """Show the global leaderboard (admins excluded)"""
    board = get_leaderboard(
        db.session,
        limit=limit or current_app.config["LEADERBOARD_SIZE"],
        min_predictions=current_app.config["MIN_PREDICTIONS_FOR_AVERAGE"],
    )

    if not board["top_players_by_points"]:
        click.echo("No finished predictions yet.")
        return

    click.echo("🏅 Top players by points:")
    for position, player in enumerate(board["top_players_by_points"], start=1):
        stats = player["stats"]
        click.echo(
            f"{position}. {player['user']['name']}: {stats['total_points']} pts "
            f"({stats['total_predictions']} predictions, {stats['wins']} wins)"
        )

    if board["top_players_by_average"]:
        click.echo("📈 Top players by average:")
        for position, player in enumerate(board["top_players_by_average"], start=1):
            click.echo(
                f"{position}. {player['user']['name']}: "
                f"{player['stats']['average_points']} pts/prediction"
            )


# Database Commands
@cli.group("db-cmd")
def db_cmd():
    """Database commands"""
    pass


@db_cmd.command("init")
@with_appcontext
def init_db():
    """Initialize database tables"""
    db.create_all()
    click.echo("✅ Database tables created successfully!")


@db_cmd.command("reset")
@with_appcontext
def reset():
    """⚠️  DANGER: Drop and recreate all tables"""
    if not click.confirm("This will DELETE ALL DATA. Are you sure?"):
        click.echo("Cancelled.")
        return

    db.drop_all()
    db.create_all()
    click.echo("✅ Database reset successfully!")


@cli.command()
@with_appcontext
def status():
    """Show application status"""
    click.echo("⚽ Football Bets Application Status")
    click.echo("=" * 40)

    try:
        db.session.execute(text("SELECT 1"))
        click.echo("✅ Database: Connected")
    except SQLAlchemyError as e:
        click.echo(f"❌ Database: Error - {str(e)}")
        return

    click.echo(f"👥 Users: {User.query.count()}")
    click.echo(f"🏆 Competitions: {Competition.query.count()}")

    final_count = Game.query.filter_by(status=FINISHED).count()
    click.echo(f"⚽ Games: {final_count}/{Game.query.count()} finished")
    click.echo(f"⏱  Scheduler enabled: {current_app.config.get('SCHEDULER_ENABLED')}")


def register_commands(app):
    """Attach every command group to the Flask CLI"""
    for command in cli.commands.values():
        app.cli.add_command(command)
