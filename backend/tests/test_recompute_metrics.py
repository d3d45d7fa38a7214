from __future__ import annotations

import pytest
from prometheus_client import REGISTRY

from fake_mongo import FakeDb

from nerdfootball.services.recompute_service import StandingsRecomputer
from nerdfootball.services.standings_cache_service import StandingsCache
from nerdfootball.services.store import GameStore, PickStore, ResultStore


def _sample(name, **labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


@pytest.mark.asyncio
async def test_runs_and_cache_lookups_are_counted():
    db = FakeDb(
        game_results=[{"_id": 1, "101": {"home_team": "PHI", "away_team": "DAL", "home_score": 1,
                                         "away_score": 0, "status": "final"}}],
        confidence_picks=[
            {"userId": "u1", "week": 1, "101": {"team": "PHI", "confidence": 1}},
            {"userId": "u2", "week": 1, "101": {"team": "PHI"}},
        ],
    )
    db.weekly_scores.fail_write_ids = {"u2:1"}
    recomputer = StandingsRecomputer(
        GameStore(db), PickStore(db), ResultStore(db),
        StandingsCache(db, pool_id="metrics", ttl_seconds=60),
        current_week=1,
    )
    partial_before = _sample("nerdfootball_recompute_runs_total", kind="week", outcome="partial")
    failed_before = _sample("nerdfootball_recompute_users_failed_total", kind="week")
    discarded_before = _sample("nerdfootball_discarded_picks_total")
    miss_before = _sample("nerdfootball_standings_cache_lookups_total", kind="week", result="miss")
    hit_before = _sample("nerdfootball_standings_cache_lookups_total", kind="week", result="hit")

    await recomputer.recompute_week(1)
    await recomputer.week_leaderboard(1)
    await recomputer.week_leaderboard(1)

    assert _sample("nerdfootball_recompute_runs_total", kind="week", outcome="partial") == partial_before + 1
    assert _sample("nerdfootball_recompute_users_failed_total", kind="week") == failed_before + 1
    assert _sample("nerdfootball_discarded_picks_total") == discarded_before + 1
    assert _sample("nerdfootball_standings_cache_lookups_total", kind="week", result="miss") == miss_before + 1
    assert _sample("nerdfootball_standings_cache_lookups_total", kind="week", result="hit") == hit_before + 1
