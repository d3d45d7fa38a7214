"""Resolve survivor entries against the latest game results."""

import logging
from datetime import timedelta

import nerdfootball.database as _db
from nerdfootball.dependencies import build_recomputer
from nerdfootball.services.store import StoreUnavailable
from nerdfootball.utils import utcnow
from nerdfootball.workers._state import recently_synced, set_synced

logger = logging.getLogger("nerdfootball.survivor_resolver")

_STATE_KEY = "survivor_resolver"


async def resolve_survivor_entries() -> None:
    """Advance every survivor entry through the current week.

    Smart sleep: skips when it ran within the last few minutes and no entry
    is still alive.
    """
    if await recently_synced(_db.db, _STATE_KEY, timedelta(minutes=10)):
        has_alive = await _db.db.survivor_status.find_one({"status": "alive"})
        if not has_alive:
            logger.debug("Smart sleep: no alive survivor entries")
            return

    try:
        summary = await build_recomputer().recompute_survivor(now=utcnow())
    except StoreUnavailable:
        logger.error("Survivor resolution aborted: store unavailable")
        return

    await set_synced(_db.db, _STATE_KEY, summary=summary.model_dump(mode="json"))
