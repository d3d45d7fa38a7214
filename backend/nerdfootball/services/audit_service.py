"""Insert-only audit trail for administrative overrides.

This module exposes NO update or delete operations on the audit_logs
collection. Unlike request logging, a failed audit write propagates: an
override without its audit record must not happen.
"""

import logging
from typing import Any, Optional

from nerdfootball.services.store import store_call
from nerdfootball.utils import utcnow

logger = logging.getLogger("nerdfootball.audit")


@store_call
async def log_audit(
    db: Any,
    *,
    actor_id: str,
    target_id: str,
    action: str,
    metadata: Optional[dict] = None,
) -> None:
    """Write an immutable audit record to the audit_logs collection.

    Args:
        db: Database handle.
        actor_id: Who performed the action (operator id or "SYSTEM").
        target_id: Who/what was affected (user id).
        action: Action identifier, e.g. "SURVIVOR_REINSTATE".
        metadata: Optional dict with before/after values or extra context.
    """
    doc = {
        "timestamp": utcnow(),
        "actor_id": actor_id,
        "target_id": target_id,
        "action": action,
        "metadata": metadata or {},
    }
    await db.audit_logs.insert_one(doc)
    logger.info("Audit: %s actor=%s target=%s", action, actor_id, target_id)
