import os
import warnings

from dotenv import load_dotenv

basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(basedir, ".env"))


def _env_flag(name, default):
    return os.environ.get(name, str(default)).lower() in ("true", "on", "1")


def _env_int(name, default):
    return int(os.environ.get(name) or default)


class Config:
    def __init__(self):
        # Read at instantiation so tests and scripts can change the environment
        self.SQLALCHEMY_DATABASE_URI = self._build_database_uri()

    def _build_database_uri(self):
        """DATABASE_URL wins; otherwise PostgreSQL from DB_* parts or local SQLite"""
        database_url = os.environ.get("DATABASE_URL")
        if database_url:
            return database_url

        if os.environ.get("DB_TYPE", "sqlite").lower() != "postgresql":
            return "sqlite:///" + os.path.join(basedir, "app.db")

        user = os.environ.get("DB_USER") or "football_bets"
        password = os.environ.get("DB_PASSWORD") or "football_bets"
        host = os.environ.get("DB_HOST") or "localhost"
        port = os.environ.get("DB_PORT") or "5432"
        name = os.environ.get("DB_NAME") or "football_bets_db"

        return f"postgresql+psycopg://{user}:{password}@{host}:{port}/{name}"

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Kickoff times are stored in UTC and displayed in this timezone
    TIMEZONE = os.environ.get("TIMEZONE", "Europe/Paris")

    # Statistics
    LEADERBOARD_SIZE = _env_int("LEADERBOARD_SIZE", 10)
    MIN_PREDICTIONS_FOR_AVERAGE = _env_int("MIN_PREDICTIONS_FOR_AVERAGE", 5)

    # Scheduler
    SCHEDULER_ENABLED = _env_flag("SCHEDULER_ENABLED", True)
    STATUS_UPDATE_INTERVAL_SECONDS = _env_int("STATUS_UPDATE_INTERVAL_SECONDS", 60)
    WINNER_RECONCILE_HOUR = _env_int("WINNER_RECONCILE_HOUR", 3)  # UTC

    # Logging
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_TO_CONSOLE = _env_flag("LOG_TO_CONSOLE", True)
    LOG_TO_FILE = _env_flag("LOG_TO_FILE", True)
    LOG_DIR = os.environ.get("LOG_DIR", "logs")

    FLASK_ENV = os.environ.get("FLASK_ENV", "development")
    DEBUG = FLASK_ENV == "development"
    TESTING = False


class DevelopmentConfig(Config):
    """Development configuration with helpful defaults"""

    DEBUG = True
    SQLALCHEMY_ECHO = _env_flag("SQLALCHEMY_ECHO", False)


class ProductionConfig(Config):
    """Production configuration"""

    DEBUG = False

    def __init__(self):
        super().__init__()

        if self.SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
            warnings.warn(
                "🚨 PRODUCTION WARNING: running on SQLite. "
                "Set DATABASE_URL or DB_TYPE=postgresql for concurrent access.",
                UserWarning,
            )


class TestingConfig(Config):
    """Testing configuration: in-memory database, no scheduler, no log files"""

    TESTING = True
    SCHEDULER_ENABLED = False
    LOG_TO_FILE = False
    LOG_TO_CONSOLE = False

    def __init__(self):
        super().__init__()
        self.SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"


config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}
