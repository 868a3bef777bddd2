"""
config/settings.py
Loads environment variables and defines global configuration for ScoreLens.
"""

import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration object loaded from environment variables."""

    # Directory holding league_matches/<CODE>.json and fixtures_index.json
    LEAGUE_DATA_DIR: str = os.getenv("LEAGUE_DATA_DIR", "league_data")

    # Timezone used to decide which fixtures are still upcoming
    TIMEZONE: str = os.getenv("TIMEZONE", "Europe/London")

    # Lookback window (days) used when none is given on the command line
    DEFAULT_WINDOW_DAYS: int = int(os.getenv("DEFAULT_WINDOW_DAYS", "90"))

    # Number of correct scores listed in a breakdown
    TOP_SCORES: int = int(os.getenv("TOP_SCORES", "3"))

    # Maximum number of upcoming fixtures processed per league run
    UPCOMING_LIMIT: int = int(os.getenv("UPCOMING_LIMIT", "10"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Supported league codes (football-data.co.uk divisions)
    LEAGUE_CODES: list = [
        "E0",  # Premier League
        "E1",  # Championship
        "E2",  # League 1
        "E3",  # League 2
    ]


settings = Settings()
