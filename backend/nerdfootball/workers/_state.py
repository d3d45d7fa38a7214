"""Persistent worker state: last run time and outcome per worker.

Kept in a lightweight `worker_state` collection so restarts and multiple
processes see the same history.
"""

from datetime import datetime, timedelta
from typing import Any

from nerdfootball.utils import ensure_utc, utcnow


async def get_synced_at(db: Any, worker_id: str) -> datetime | None:
    """Get the last successful run timestamp for a worker."""
    doc = await db.worker_state.find_one({"_id": worker_id})
    return doc.get("synced_at") if doc else None


async def set_synced(db: Any, worker_id: str, *, summary: dict | None = None) -> None:
    """Mark a worker as just run, keeping the last run summary."""
    await db.worker_state.update_one(
        {"_id": worker_id},
        {"$set": {"synced_at": utcnow(), "last_summary": summary or {}}},
        upsert=True,
    )


async def recently_synced(db: Any, worker_id: str, max_age: timedelta) -> bool:
    """Check if a worker ran within the given time window."""
    last = await get_synced_at(db, worker_id)
    if not last:
        return False
    return (utcnow() - ensure_utc(last)) < max_age
