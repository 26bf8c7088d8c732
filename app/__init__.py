import logging
import os

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.engine import make_url

from config import config

logger = logging.getLogger(__name__)

db = SQLAlchemy()


def create_app(config_name=None):
    app = Flask(__name__)

    # Determine configuration
    if config_name is None:
        config_name = os.environ.get("FLASK_CONFIG", "default")

    app.config.from_object(config[config_name]())

    # Initialize extensions
    db.init_app(app)

    # Setup logging
    from app.utils.logging_config import setup_logging

    setup_logging(app)

    # Management commands (flask <group> <command>)
    from app.cli import register_commands

    register_commands(app)

    # Configuration and database summary
    log_startup(app, config_name)

    # Create database tables
    with app.app_context():
        db.create_all()

    return app


def log_startup(app, config_name):
    """Log the active configuration and which database it talks to"""
    if config_name == "production" and app.config.get("DEBUG"):
        logger.warning("DEBUG mode is enabled in production!")

    # Never log the password part of the URL
    url = make_url(app.config["SQLALCHEMY_DATABASE_URI"])
    if url.get_backend_name() == "sqlite":
        logger.info(f"Using SQLite database {url.database or ':memory:'}")
    else:
        logger.info(
            f"Using {url.get_backend_name()} database {url.database} "
            f"on {url.host}:{url.port or 'default port'}"
        )

    logger.info(f"Football Bets started with '{config_name}' configuration")


from app import models  # noqa: F401, E402 - imported for model registration
