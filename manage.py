#!/usr/bin/env python3
"""
Football Bets Management CLI

This script provides command-line management functionality for the Football Bets application.
The same commands are available through ``flask`` once FLASK_APP=manage.py is set.
"""

from app import create_app
from app.cli import cli

app = create_app()


if __name__ == "__main__":
    with app.app_context():
        cli()
