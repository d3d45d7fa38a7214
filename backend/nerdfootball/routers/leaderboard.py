from typing import Any

from fastapi import APIRouter, Depends, Path, Query

from nerdfootball.config import settings
from nerdfootball.dependencies import get_recomputer
from nerdfootball.services.recompute_service import StandingsRecomputer

router = APIRouter(prefix="/api/leaderboard", tags=["leaderboard"])


@router.get("/season")
async def get_season_leaderboard(
    limit: int = Query(100, ge=1, le=500),
    recomputer: StandingsRecomputer = Depends(get_recomputer),
) -> list[dict[str, Any]]:
    """Season standings, sorted by rank.

    Served from the standings cache; regenerated from weekly records on a miss.
    """
    rows = await recomputer.season_leaderboard()
    return rows[:limit]


@router.get("/weeks/{week}")
async def get_week_leaderboard(
    week: int = Path(..., ge=1, le=settings.SEASON_WEEKS),
    limit: int = Query(100, ge=1, le=500),
    recomputer: StandingsRecomputer = Depends(get_recomputer),
) -> list[dict[str, Any]]:
    rows = await recomputer.week_leaderboard(week)
    return rows[:limit]
