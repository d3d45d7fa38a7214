"""
backend/nerdfootball/services/recompute_service.py

Purpose:
    Idempotent recompute coordinator. Pulls normalized inputs from the stores,
    runs the pure engines and writes results one user at a time, so an
    interrupted run simply leaves some users for the next run. Leaderboard
    caches are invalidated after every write and regenerated from stored
    records on a miss.

Failure policy:
    - a store outage while reading the run's inputs fails the whole run
    - a store outage while handling one user fails only that user
      (listed in RecomputeSummary.failed_users)

Dependencies:
    - nerdfootball.services.store
    - nerdfootball.services.standings_cache_service
    - nerdfootball.services.scoring_engine / season_aggregation / survivor_engine
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime
from typing import Any

from nerdfootball.models.recompute import RecomputeSummary
from nerdfootball.models.scoring import WeeklyScoreRecord
from nerdfootball.models.survivor import SurvivorEntry, SurvivorStandingEntry
from nerdfootball.monitoring.recompute_metrics import (
    METRIC_CACHE_LOOKUPS,
    METRIC_RECOMPUTE_LATENCY,
    observe_latency,
    record_run,
)
from nerdfootball.services.scoring_engine import score_week
from nerdfootball.services.season_aggregation import aggregate_season
from nerdfootball.services.standings_cache_service import StandingsCache
from nerdfootball.services.store import GameStore, PickStore, ResultStore, StoreUnavailable
from nerdfootball.services.survivor_engine import evaluate_survivor

logger = logging.getLogger("nerdfootball.recompute")


def _entry_fingerprint(entry: SurvivorEntry) -> dict[str, Any]:
    return entry.model_dump(mode="json", exclude={"updated_at"})


def _week_rows(records: list[WeeklyScoreRecord]) -> list[dict[str, Any]]:
    ordered = sorted(records, key=lambda r: (-r.total_points, -r.accuracy, r.user_id))
    return [
        {
            "rank": position,
            "user_id": r.user_id,
            "week": r.week,
            "total_points": r.total_points,
            "correct_picks": r.correct_picks,
            "total_valid_picks": r.total_valid_picks,
            "accuracy": round(r.accuracy, 4),
            "pending_picks": r.pending_picks,
        }
        for position, r in enumerate(ordered, start=1)
    ]


def _survivor_rows(entries: list[SurvivorEntry]) -> list[dict[str, Any]]:
    rows = [
        SurvivorStandingEntry(
            user_id=e.user_id,
            status=e.status,
            streak=sum(1 for h in e.pick_history if h.result != "lost"),
            last_pick=e.pick_history[-1].team if e.pick_history else None,
            eliminated_week=e.eliminated_week,
            elimination_reason=e.elimination_reason,
        )
        for e in entries
    ]
    # Alive first, then longest run, then whoever lasted longest
    rows.sort(key=lambda r: (
        r.status.value != "alive",
        -r.streak,
        -(r.eliminated_week or 0),
        r.user_id,
    ))
    return [r.model_dump(mode="json") for r in rows]


class StandingsRecomputer:
    def __init__(
        self,
        games: GameStore,
        picks: PickStore,
        results: ResultStore,
        cache: StandingsCache,
        *,
        current_week: int,
        missing_game_grace_weeks: int = 1,
    ):
        self._games = games
        self._picks = picks
        self._results = results
        self._cache = cache
        self._current_week = int(current_week)
        self._grace_weeks = max(0, int(missing_game_grace_weeks))

    # ---- Confidence pool ----

    async def recompute_week(self, week: int) -> RecomputeSummary:
        """Re-score ``week`` for every user with a submission."""
        with observe_latency(METRIC_RECOMPUTE_LATENCY.labels(kind="week")):
            summary = await self._score_week(week)
        record_run(summary)
        return summary

    async def _score_week(self, week: int) -> RecomputeSummary:
        summary = RecomputeSummary(kind="week", week=week)
        games = await self._games.get_week_games(week)
        picks = await self._picks.get_week_picks(week)
        if not games:
            summary.warnings.append(f"no game results stored for week {week}")

        records = score_week(week, games, picks)
        for user_id, record in records.items():
            summary.users_processed += 1
            summary.discarded_picks += record.discarded_picks
            try:
                await self._results.put_weekly_score(user_id, week, record)
            except StoreUnavailable:
                logger.error("Week %d: could not write score for user %s", week, user_id)
                summary.failed_users.append(user_id)
                continue
            summary.users_written += 1

        self._report_missing_games(week, records, summary)

        if summary.users_written:
            await self._cache.invalidate_week(week)
            await self._cache.invalidate_season()

        logger.info(
            "Week %d scored: %d/%d users written, %d malformed picks, %d failed",
            week, summary.users_written, summary.users_processed,
            summary.discarded_picks, len(summary.failed_users),
        )
        return summary

    def _report_missing_games(
        self,
        week: int,
        records: dict[str, WeeklyScoreRecord],
        summary: RecomputeSummary,
    ) -> None:
        if week > self._current_week - self._grace_weeks:
            return
        missing = Counter(gid for r in records.values() for gid in r.missing_game_ids)
        for game_id, pick_count in sorted(missing.items()):
            message = f"week {week} game {game_id} has no result but {pick_count} picks reference it"
            summary.warnings.append(message)
            logger.warning("Data integrity: %s", message)

    async def recompute_season(self) -> RecomputeSummary:
        """Rebuild every season standing from the stored weekly records."""
        with observe_latency(METRIC_RECOMPUTE_LATENCY.labels(kind="season")):
            summary = await self._fold_season()
        record_run(summary)
        return summary

    async def _fold_season(self) -> RecomputeSummary:
        summary = RecomputeSummary(kind="season")
        weekly = await self._results.get_all_weekly_scores()
        standings = aggregate_season(weekly)

        for standing in standings:
            summary.users_processed += 1
            try:
                await self._results.put_season_standing(standing.user_id, standing)
            except StoreUnavailable:
                logger.error("Season: could not write standing for user %s", standing.user_id)
                summary.failed_users.append(standing.user_id)
                continue
            summary.users_written += 1

        if summary.complete:
            pruned = await self._results.prune_season_standings([s.user_id for s in standings])
            if pruned:
                logger.info("Season: removed %d standings without weekly records", pruned)
        await self._cache.invalidate_season()

        logger.info(
            "Season standings rebuilt: %d/%d users written",
            summary.users_written, summary.users_processed,
        )
        return summary

    async def recompute_week_and_season(self, week: int) -> tuple[RecomputeSummary, RecomputeSummary]:
        """Full trigger flow: the season is only folded after the week's writes."""
        week_summary = await self.recompute_week(week)
        season_summary = await self.recompute_season()
        return week_summary, season_summary

    # ---- Survivor pool ----

    async def recompute_survivor(self, now: datetime | None = None) -> RecomputeSummary:
        """Advance every survivor entry through the current week."""
        with observe_latency(METRIC_RECOMPUTE_LATENCY.labels(kind="survivor")):
            summary = await self._advance_survivor(now)
        record_run(summary)
        return summary

    async def _advance_survivor(self, now: datetime | None) -> RecomputeSummary:
        summary = RecomputeSummary(kind="survivor", week=self._current_week)
        entrants = set(await self._picks.list_survivor_entrants())
        existing = {e.user_id: e for e in await self._results.list_survivor_statuses()}
        entrants |= set(existing)
        games = await self._games.get_games_through(self._current_week)

        for user_id in sorted(entrants):
            summary.users_processed += 1
            prior = existing.get(user_id) or SurvivorEntry(user_id=user_id)
            try:
                picks = await self._picks.get_survivor_pick_history(user_id)
                entry = prior.model_copy(update={"picks": picks})
                evaluated = evaluate_survivor(entry, games, now=now)

                new_flags = evaluated.integrity_flags[len(prior.integrity_flags):]
                for flag in new_flags:
                    summary.warnings.append(f"user {user_id}: {flag}")

                if _entry_fingerprint(evaluated) == _entry_fingerprint(prior):
                    continue
                await self._results.put_survivor_status(user_id, evaluated)
            except StoreUnavailable:
                logger.error("Survivor: could not evaluate user %s", user_id)
                summary.failed_users.append(user_id)
                continue
            summary.users_written += 1

        if summary.users_written:
            await self._cache.invalidate_survivor()

        logger.info(
            "Survivor evaluated through week %d: %d entrants, %d updated, %d failed",
            self._current_week, summary.users_processed,
            summary.users_written, len(summary.failed_users),
        )
        return summary

    # ---- Read projections ----

    async def season_leaderboard(self) -> list[dict[str, Any]]:
        key = self._cache.key("season")
        cached = await self._cache.get(key)
        if cached is not None:
            METRIC_CACHE_LOOKUPS.labels(kind="season", result="hit").inc()
            return cached
        METRIC_CACHE_LOOKUPS.labels(kind="season", result="miss").inc()
        standings = aggregate_season(await self._results.get_all_weekly_scores())
        payload = [s.model_dump(mode="json") for s in standings]
        await self._cache.set(key, "season", payload)
        return payload

    async def week_leaderboard(self, week: int) -> list[dict[str, Any]]:
        key = self._cache.key("week", week)
        cached = await self._cache.get(key)
        if cached is not None:
            METRIC_CACHE_LOOKUPS.labels(kind="week", result="hit").inc()
            return cached
        METRIC_CACHE_LOOKUPS.labels(kind="week", result="miss").inc()
        payload = _week_rows(await self._results.get_week_scores(week))
        await self._cache.set(key, "week", payload)
        return payload

    async def survivor_board(self) -> list[dict[str, Any]]:
        key = self._cache.key("survivor")
        cached = await self._cache.get(key)
        if cached is not None:
            METRIC_CACHE_LOOKUPS.labels(kind="survivor", result="hit").inc()
            return cached
        METRIC_CACHE_LOOKUPS.labels(kind="survivor", result="miss").inc()
        payload = _survivor_rows(await self._results.list_survivor_statuses())
        await self._cache.set(key, "survivor", payload)
        return payload
