"""
backend/nerdfootball/config.py

Purpose:
    Central settings loading for the scoring backend, workers and tools.

Dependencies:
    - pydantic-settings
    - pathlib
"""

from datetime import date
from pathlib import Path

from pydantic_settings import BaseSettings

# Prefer backend/.env, fallback to project-root .env.
_BACKEND_ENV_FILE = Path(__file__).resolve().parent.parent / ".env"
_ROOT_ENV_FILE = Path(__file__).resolve().parent.parent.parent / ".env"


class Settings(BaseSettings):
    MONGO_URI: str
    MONGO_DB: str = "nerdfootball"
    BACKEND_CORS_ORIGINS: str = "http://localhost:5173"

    # Pool / season
    POOL_ID: str = "nerduniverse-2025"
    SEASON_START_DATE: date = date(2025, 9, 4)  # Thursday kickoff of week 1
    SEASON_WEEKS: int = 18

    # Standings projections (derived, disposable)
    STANDINGS_CACHE_TTL_SECONDS: int = 300

    # Picks on games still absent this many weeks after the fact are reported
    MISSING_GAME_GRACE_WEEKS: int = 1

    # Automated triggers (off by default, enable per deployment)
    AUTOMATION_ENABLED: bool = False
    SCORING_INTERVAL_MINUTES: int = 15
    SURVIVOR_INTERVAL_MINUTES: int = 60

    model_config = {
        "env_file": (str(_BACKEND_ENV_FILE), str(_ROOT_ENV_FILE)),
        "extra": "ignore",
    }


settings = Settings()
