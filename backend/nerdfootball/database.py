"""
backend/nerdfootball/database.py

Purpose:
    MongoDB connection bootstrap and index management for the pool collections.

Dependencies:
    - motor.motor_asyncio
    - nerdfootball.config
"""

import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from nerdfootball.config import settings

client: AsyncIOMotorClient = None
db: AsyncIOMotorDatabase = None

logger = logging.getLogger("nerdfootball.database")


async def connect_db() -> None:
    global client, db
    client = AsyncIOMotorClient(
        settings.MONGO_URI,
        maxPoolSize=25,
        minPoolSize=1,
        serverSelectionTimeoutMS=5000,
    )
    db = client[settings.MONGO_DB]
    await _ensure_indexes()


async def close_db() -> None:
    global client
    if client:
        client.close()


async def _ensure_indexes() -> None:
    """Create indexes on startup. Idempotent, safe to run repeatedly."""

    # ---- Game results: one document per week keyed by week (_id) ----
    # Written by the feed sync, read-only here; no secondary index needed.

    # ---- Confidence submissions: one document per user per week ----
    await db.confidence_picks.create_index([("week", 1), ("user_id", 1)], unique=True)

    # ---- Survivor pick sheets: one document per user ----
    await db.survivor_picks.create_index("user_id", unique=True)

    # ---- Derived results (_id is the deterministic document key) ----
    await db.weekly_scores.create_index([("week", 1), ("total_points", -1)])
    await db.weekly_scores.create_index("user_id")
    await db.season_standings.create_index("rank")
    await db.survivor_status.create_index([("status", 1), ("eliminated_week", 1)])

    # ---- Projections / bookkeeping ----
    await db.standings_cache.create_index("kind")
    await db.standings_cache.create_index("expires_at", expireAfterSeconds=0)
    await db.audit_logs.create_index([("target_id", 1), ("timestamp", -1)])

    logger.info("Indexes ensured on %s", settings.MONGO_DB)
