"""Survivor pool endpoints: recompute trigger, board and per-user status."""

from fastapi import APIRouter, Depends

import nerdfootball.database as _db
from nerdfootball.dependencies import get_recomputer
from nerdfootball.services.recompute_service import StandingsRecomputer
from nerdfootball.services.store import ResultStore
from nerdfootball.utils import utcnow

router = APIRouter(prefix="/api/survivor", tags=["survivor"])


@router.post("/recompute")
async def recompute_survivor(recomputer: StandingsRecomputer = Depends(get_recomputer)):
    """Advance every survivor entry from its last evaluated week."""
    summary = await recomputer.recompute_survivor(now=utcnow())
    return {"status": "ok" if summary.complete else "partial", "survivor": summary.model_dump()}


@router.get("/standings")
async def get_standings(recomputer: StandingsRecomputer = Depends(get_recomputer)):
    """Alive entries first, then by streak."""
    return await recomputer.survivor_board()


@router.get("/{user_id}")
async def get_status(user_id: str):
    """Get one user's survivor status and resolved picks."""
    entry = await ResultStore(_db.db).get_survivor_status(user_id)
    if entry is None:
        return {"user_id": user_id, "status": "not_started", "pick_history": [], "used_teams": []}
    payload = entry.model_dump(mode="json", exclude={"integrity_flags"})
    payload["used_teams"] = entry.used_teams
    return payload
