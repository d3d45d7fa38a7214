"""Recompute triggers: cron, admin button or live-score webhook call these."""

from fastapi import APIRouter, Depends, Path

from nerdfootball.config import settings
from nerdfootball.dependencies import get_recomputer
from nerdfootball.services.recompute_service import StandingsRecomputer

router = APIRouter(prefix="/api/scoring", tags=["scoring"])


@router.post("/weeks/{week}/recompute")
async def recompute_week(
    week: int = Path(..., ge=1, le=settings.SEASON_WEEKS),
    recomputer: StandingsRecomputer = Depends(get_recomputer),
):
    """Re-score one week for every user, then rebuild the season standings."""
    week_summary, season_summary = await recomputer.recompute_week_and_season(week)
    return {
        "status": "ok" if week_summary.complete and season_summary.complete else "partial",
        "week": week_summary.model_dump(),
        "season": season_summary.model_dump(),
    }


@router.post("/season/recompute")
async def recompute_season(recomputer: StandingsRecomputer = Depends(get_recomputer)):
    """Rebuild season standings from stored weekly records (replay/backfill)."""
    summary = await recomputer.recompute_season()
    return {"status": "ok" if summary.complete else "partial", "season": summary.model_dump()}
