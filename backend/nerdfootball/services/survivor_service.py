"""Survivor administration: the explicit override path around the engine."""

import logging
from typing import Any

from nerdfootball.models.survivor import SurvivorEntry, SurvivorStatus
from nerdfootball.services.audit_service import log_audit
from nerdfootball.services.standings_cache_service import StandingsCache
from nerdfootball.services.store import ResultStore

logger = logging.getLogger("nerdfootball.survivor_service")


class SurvivorOverrideError(Exception):
    """Raised when an override request does not apply to the entry."""


async def reinstate_entry(
    db: Any,
    results: ResultStore,
    cache: StandingsCache,
    *,
    user_id: str,
    actor_id: str,
    reason: str,
) -> SurvivorEntry:
    """Clear an elimination. The only way an eliminated entry becomes alive again.

    The eliminating week is waived: history from that week on is dropped and
    evaluation resumes with the following week. The audit record is written
    before the entry so no override exists without its trail.
    """
    if not reason or not reason.strip():
        raise SurvivorOverrideError("A reason is required to reinstate an entry.")

    entry = await results.get_survivor_status(user_id)
    if entry is None:
        raise SurvivorOverrideError(f"No survivor entry for user {user_id}.")
    if entry.is_alive:
        raise SurvivorOverrideError(f"User {user_id} is not eliminated.")

    waived_week = entry.eliminated_week or entry.last_evaluated_week
    reinstated = entry.model_copy(deep=True)
    reinstated.status = SurvivorStatus.ALIVE
    reinstated.eliminated_week = None
    reinstated.elimination_reason = None
    reinstated.pick_history = [h for h in entry.pick_history if h.week < waived_week]
    reinstated.last_evaluated_week = waived_week
    reinstated.integrity_flags.append(f"week {waived_week}: elimination waived by {actor_id}")

    await log_audit(
        db,
        actor_id=actor_id,
        target_id=user_id,
        action="SURVIVOR_REINSTATE",
        metadata={
            "reason": reason.strip(),
            "before": entry.model_dump(mode="json", exclude={"picks"}),
            "after": reinstated.model_dump(mode="json", exclude={"picks"}),
        },
    )
    await results.put_survivor_status(user_id, reinstated)
    await cache.invalidate_survivor()

    logger.warning(
        "Survivor reinstated: user=%s waived_week=%d actor=%s",
        user_id, waived_week, actor_id,
    )
    return reinstated
