"""
backend/nerdfootball/services/standings_cache_service.py

Purpose:
    TTL cache for leaderboard projections. Backed by MongoDB so a recompute in
    one process invalidates what another process serves. Cached payloads are
    disposable: a miss is always answered by regenerating from stored records.

Dependencies:
    - nerdfootball.services.store (StoreUnavailable translation)
    - nerdfootball.utils
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Literal

from nerdfootball.services.store import store_call
from nerdfootball.utils import ensure_utc, utcnow

CacheKind = Literal["season", "week", "survivor"]


def build_cache_key(*, pool_id: str, kind: CacheKind, week: int | None = None) -> str:
    if kind == "week":
        return f"{pool_id}:week:{int(week)}"
    return f"{pool_id}:{kind}"


class StandingsCache:
    def __init__(self, db: Any, *, pool_id: str, ttl_seconds: int):
        self._db = db
        self._pool_id = pool_id
        self._ttl = max(30, int(ttl_seconds))

    def key(self, kind: CacheKind, week: int | None = None) -> str:
        return build_cache_key(pool_id=self._pool_id, kind=kind, week=week)

    @store_call
    async def get(self, key: str) -> list[dict[str, Any]] | None:
        doc = await self._db.standings_cache.find_one({"_id": key})
        if not isinstance(doc, dict):
            return None
        expires_at = doc.get("expires_at")
        if expires_at is None or ensure_utc(expires_at) <= utcnow():
            return None
        payload = doc.get("payload")
        if not isinstance(payload, list):
            return None
        return payload

    @store_call
    async def set(self, key: str, kind: CacheKind, payload: list[dict[str, Any]]) -> None:
        now = utcnow()
        await self._db.standings_cache.replace_one(
            {"_id": key},
            {
                "_id": key,
                "kind": kind,
                "pool_id": self._pool_id,
                "payload": payload,
                "generated_at": now,
                "expires_at": now + timedelta(seconds=self._ttl),
            },
            upsert=True,
        )

    @store_call
    async def invalidate(self, key: str) -> int:
        result = await self._db.standings_cache.delete_one({"_id": key})
        return int(result.deleted_count or 0)

    async def invalidate_week(self, week: int) -> int:
        return await self.invalidate(self.key("week", week))

    async def invalidate_season(self) -> int:
        return await self.invalidate(self.key("season"))

    async def invalidate_survivor(self) -> int:
        return await self.invalidate(self.key("survivor"))
