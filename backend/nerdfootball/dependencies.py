"""
Wiring for the HTTP routes, workers and tools.

This is the only place that turns the process-wide settings and database
handle into engine collaborators; everything below receives them explicitly.
"""

from typing import Any

import nerdfootball.database as _db
from nerdfootball.config import settings
from nerdfootball.services.recompute_service import StandingsRecomputer
from nerdfootball.services.standings_cache_service import StandingsCache
from nerdfootball.services.store import GameStore, PickStore, ResultStore
from nerdfootball.utils import current_nfl_week


def current_week() -> int:
    return current_nfl_week(settings.SEASON_START_DATE, settings.SEASON_WEEKS)


def build_cache(db: Any) -> StandingsCache:
    return StandingsCache(
        db,
        pool_id=settings.POOL_ID,
        ttl_seconds=settings.STANDINGS_CACHE_TTL_SECONDS,
    )


def build_recomputer(db: Any = None, *, week: int | None = None) -> StandingsRecomputer:
    """Assemble a recomputer over ``db`` (defaults to the connected database)."""
    db = db if db is not None else _db.db
    return StandingsRecomputer(
        GameStore(db),
        PickStore(db),
        ResultStore(db),
        build_cache(db),
        current_week=week if week is not None else current_week(),
        missing_game_grace_weeks=settings.MISSING_GAME_GRACE_WEEKS,
    )


async def get_recomputer() -> StandingsRecomputer:
    """FastAPI dependency."""
    return build_recomputer()
