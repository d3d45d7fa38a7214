"""
backend/nerdfootball/services/store.py

Purpose:
    Persistence access layer for game results, submitted picks and derived
    results. Every read goes through the document adapter; every write is a
    full-document replace on a deterministic key, so two overlapping runs
    converge on the same documents instead of interleaving partial updates.

Collections:
    game_results      _id=week, {game_id: {...}, _metadata: {...}}
    confidence_picks  one submission per (user_id, week)
    survivor_picks    one pick sheet per user_id
    weekly_scores     _id="{user_id}:{week}"
    season_standings  _id=user_id
    survivor_status   _id=user_id

Dependencies:
    - motor (database handle injected by the caller)
    - pymongo.errors
    - nerdfootball.services.document_adapter
"""

from __future__ import annotations

import functools
import logging
from typing import Any

from pymongo.errors import ConnectionFailure

from nerdfootball.models.game import Game
from nerdfootball.models.scoring import ConfidencePick, SeasonStanding, WeeklyScoreRecord
from nerdfootball.models.survivor import SurvivorEntry, SurvivorPick
from nerdfootball.services.document_adapter import (
    games_from_week_document,
    picks_from_submission,
    survivor_picks_from_document,
)
from nerdfootball.utils import utcnow

logger = logging.getLogger("nerdfootball.store")


class StoreUnavailable(Exception):
    """The document store could not be reached; the affected unit must be retried."""


def store_call(func):
    """Translate pymongo connectivity errors into StoreUnavailable."""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except ConnectionFailure as exc:
            logger.error("Store unavailable in %s: %s", func.__qualname__, exc)
            raise StoreUnavailable(str(exc)) from exc

    return wrapper


def weekly_score_key(user_id: str, week: int) -> str:
    return f"{user_id}:{int(week)}"


def _submission_user_id(doc: dict) -> str | None:
    user_id = doc.get("user_id") or doc.get("userId")
    if not user_id or user_id == "undefined":
        return None
    return str(user_id)


class GameStore:
    def __init__(self, db: Any):
        self._db = db

    @store_call
    async def get_week_games(self, week: int) -> dict[str, Game]:
        doc = await self._db.game_results.find_one({"_id": int(week)})
        if not doc:
            return {}
        return games_from_week_document(doc, week=int(week))

    @store_call
    async def get_games_through(self, week: int) -> dict[int, dict[str, Game]]:
        docs = await self._db.game_results.find(
            {"_id": {"$lte": int(week)}},
        ).to_list(length=None)
        return {
            int(doc["_id"]): games_from_week_document(doc, week=int(doc["_id"]))
            for doc in docs
        }


class PickStore:
    def __init__(self, db: Any):
        self._db = db

    @store_call
    async def get_week_picks(self, week: int) -> dict[str, dict[str, ConfidencePick]]:
        docs = await self._db.confidence_picks.find({"week": int(week)}).to_list(length=None)
        picks: dict[str, dict[str, ConfidencePick]] = {}
        for doc in docs:
            user_id = _submission_user_id(doc)
            if user_id is None:
                logger.warning("Week %d submission %s has no user id, skipped", week, doc.get("_id"))
                continue
            picks[user_id] = picks_from_submission(doc)
        return picks

    @store_call
    async def get_survivor_pick_history(self, user_id: str) -> list[SurvivorPick]:
        doc = await self._db.survivor_picks.find_one({"user_id": user_id})
        if not doc:
            return []
        return survivor_picks_from_document(doc)

    @store_call
    async def list_survivor_entrants(self) -> list[str]:
        user_ids = await self._db.survivor_picks.distinct("user_id")
        return sorted(str(uid) for uid in user_ids if uid)


class ResultStore:
    def __init__(self, db: Any):
        self._db = db

    @store_call
    async def put_weekly_score(self, user_id: str, week: int, record: WeeklyScoreRecord) -> None:
        doc = record.model_dump(mode="json")
        doc["_id"] = weekly_score_key(user_id, week)
        doc["updated_at"] = utcnow()
        await self._db.weekly_scores.replace_one({"_id": doc["_id"]}, doc, upsert=True)

    @store_call
    async def get_week_scores(self, week: int) -> list[WeeklyScoreRecord]:
        docs = await self._db.weekly_scores.find({"week": int(week)}).to_list(length=None)
        return [WeeklyScoreRecord.model_validate(doc) for doc in docs]

    @store_call
    async def get_all_weekly_scores(self) -> dict[str, list[WeeklyScoreRecord]]:
        docs = await self._db.weekly_scores.find({}).to_list(length=None)
        by_user: dict[str, list[WeeklyScoreRecord]] = {}
        for doc in docs:
            record = WeeklyScoreRecord.model_validate(doc)
            by_user.setdefault(record.user_id, []).append(record)
        return by_user

    @store_call
    async def put_season_standing(self, user_id: str, standing: SeasonStanding) -> None:
        doc = standing.model_dump(mode="json")
        doc["_id"] = user_id
        doc["updated_at"] = utcnow()
        await self._db.season_standings.replace_one({"_id": user_id}, doc, upsert=True)

    @store_call
    async def prune_season_standings(self, keep_user_ids: list[str]) -> int:
        result = await self._db.season_standings.delete_many({"_id": {"$nin": list(keep_user_ids)}})
        return int(result.deleted_count or 0)

    @store_call
    async def get_season_standings(self) -> list[SeasonStanding]:
        docs = await self._db.season_standings.find({}).to_list(length=None)
        standings = [SeasonStanding.model_validate(doc) for doc in docs]
        return sorted(standings, key=lambda s: s.rank)

    @store_call
    async def put_survivor_status(self, user_id: str, entry: SurvivorEntry) -> None:
        doc = entry.model_dump(mode="json")
        doc["_id"] = user_id
        doc["updated_at"] = utcnow()
        await self._db.survivor_status.replace_one({"_id": user_id}, doc, upsert=True)

    @store_call
    async def get_survivor_status(self, user_id: str) -> SurvivorEntry | None:
        doc = await self._db.survivor_status.find_one({"_id": user_id})
        return SurvivorEntry.model_validate(doc) if doc else None

    @store_call
    async def list_survivor_statuses(self) -> list[SurvivorEntry]:
        docs = await self._db.survivor_status.find({}).to_list(length=None)
        return [SurvivorEntry.model_validate(doc) for doc in docs]
