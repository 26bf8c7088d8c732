"""
Logging configuration for the Football Bets application

Console output (colored in debug), plus rotating files under LOG_DIR:
football_bets.log for everything, errors.log for errors and scheduler.log
for the background jobs.
"""

import logging
import logging.handlers
import os

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MB = 1024 * 1024

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("werkzeug", "sqlalchemy.engine", "apscheduler")


class ColoredFormatter(logging.Formatter):
    """Colored formatter for console output"""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def format(self, record):
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])

        # Color a copy so file handlers sharing the record keep the plain level
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{self.COLORS['RESET']}"

        return super().format(record)


def _rotating_handler(log_dir, filename, level, max_mb, backups, fmt=PLAIN_FORMAT):
    handler = logging.handlers.RotatingFileHandler(
        os.path.join(log_dir, filename), maxBytes=max_mb * MB, backupCount=backups
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=DATE_FORMAT))
    return handler


def _console_handler(level, colored):
    handler = logging.StreamHandler()
    handler.setLevel(level)
    if colored:
        handler.setFormatter(
            ColoredFormatter(
                PLAIN_FORMAT + " [%(filename)s:%(lineno)d]", datefmt="%H:%M:%S"
            )
        )
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(app):
    """
    Configure the root logger from the application config

    Args:
        app: Flask application instance
    """
    log_level = getattr(logging, app.config.get("LOG_LEVEL", "INFO").upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Calling create_app twice must not duplicate output
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if app.config.get("LOG_TO_CONSOLE", True):
        root_logger.addHandler(_console_handler(log_level, colored=app.debug))

    if app.config.get("LOG_TO_FILE", True):
        log_dir = app.config.get("LOG_DIR", "logs")
        os.makedirs(log_dir, exist_ok=True)

        root_logger.addHandler(
            _rotating_handler(log_dir, "football_bets.log", log_level, 10, 5)
        )
        root_logger.addHandler(
            _rotating_handler(
                log_dir,
                "errors.log",
                logging.ERROR,
                5,
                3,
                fmt=PLAIN_FORMAT + " [%(pathname)s:%(lineno)d]",
            )
        )

        scheduler_logger = logging.getLogger("app.services.scheduler_service")
        for handler in scheduler_logger.handlers[:]:
            scheduler_logger.removeHandler(handler)
        scheduler_logger.addHandler(
            _rotating_handler(log_dir, "scheduler.log", logging.INFO, 5, 3)
        )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    app.logger.info(f"Logging configured - Level: {logging.getLevelName(log_level)}")


class ContextualLogger:
    """Logger that appends key=value context to every message"""

    def __init__(self, name, context=None):
        self.logger = logging.getLogger(name)
        self.context = context or {}

    def _format_message(self, message):
        if self.context:
            context_str = " ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{message} [{context_str}]"
        return message

    def debug(self, message, **kwargs):
        self.logger.debug(self._format_message(message), **kwargs)

    def info(self, message, **kwargs):
        self.logger.info(self._format_message(message), **kwargs)

    def warning(self, message, **kwargs):
        self.logger.warning(self._format_message(message), **kwargs)

    def error(self, message, **kwargs):
        self.logger.error(self._format_message(message), **kwargs)
