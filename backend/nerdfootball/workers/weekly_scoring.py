"""Scheduled confidence scoring for the current week, then the season fold."""

import logging

import nerdfootball.database as _db
from nerdfootball.dependencies import build_recomputer, current_week
from nerdfootball.services.store import StoreUnavailable
from nerdfootball.workers._state import set_synced

logger = logging.getLogger("nerdfootball.weekly_scoring")

_STATE_KEY = "weekly_scoring"


async def run_weekly_scoring(week: int | None = None) -> None:
    """Re-score ``week`` (default: current week) and rebuild season standings.

    The previous week is re-scored too while it can still receive late
    Monday-night results.
    """
    target = week if week is not None else current_week()
    weeks = [target] if week is not None or target == 1 else [target - 1, target]
    recomputer = build_recomputer(week=current_week())

    try:
        summaries = []
        for w in weeks:
            summaries.append(await recomputer.recompute_week(w))
        season = await recomputer.recompute_season()
    except StoreUnavailable:
        logger.error("Weekly scoring aborted: store unavailable (weeks=%s)", weeks)
        return

    await set_synced(_db.db, _STATE_KEY, summary={
        "weeks": weeks,
        "users_written": sum(s.users_written for s in summaries),
        "failed_users": sorted({u for s in summaries + [season] for u in s.failed_users}),
    })
