"""
backend/nerdfootball/main.py

Purpose:
    FastAPI application bootstrap: middleware/router wiring, scheduler
    lifecycle for the automated scoring triggers, and error mapping so a
    store outage surfaces as "retry later" instead of a stack trace.

Dependencies:
    - nerdfootball.database
    - nerdfootball.workers
    - prometheus_client (/metrics)
"""

import logging
from contextlib import asynccontextmanager

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app
from pymongo.errors import ConnectionFailure, OperationFailure

import nerdfootball.database as _db
from nerdfootball.config import settings
from nerdfootball.database import close_db, connect_db
from nerdfootball.dependencies import current_week
from nerdfootball.middleware.logging import StructuredLoggingMiddleware, setup_logging
from nerdfootball.services.store import StoreUnavailable

logger = logging.getLogger("nerdfootball")
scheduler = AsyncIOScheduler()

_STALE_DETAIL = "Standings may be stale, retry later."
_INTERNAL_DETAIL = "An internal error occurred."


def _build_automated_job_specs() -> list[dict]:
    from nerdfootball.workers.survivor_resolver import resolve_survivor_entries
    from nerdfootball.workers.weekly_scoring import run_weekly_scoring

    return [
        {
            "id": "weekly_scoring",
            "func": run_weekly_scoring,
            "trigger": "interval",
            "trigger_kwargs": {"minutes": settings.SCORING_INTERVAL_MINUTES},
        },
        {
            "id": "survivor_resolver",
            "func": resolve_survivor_entries,
            "trigger": "interval",
            "trigger_kwargs": {"minutes": settings.SURVIVOR_INTERVAL_MINUTES},
        },
    ]


def _register_automated_jobs() -> int:
    added = 0
    for spec in _build_automated_job_specs():
        if scheduler.get_job(spec["id"]):
            continue
        scheduler.add_job(
            spec["func"],
            spec["trigger"],
            id=spec["id"],
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            **spec["trigger_kwargs"],
        )
        added += 1
    return added


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await connect_db()

    scheduler.start()
    if settings.AUTOMATION_ENABLED:
        added = _register_automated_jobs()
        logger.info("Automated scoring enabled: %d jobs scheduled", added)
    else:
        logger.info("Automated scoring disabled; use the recompute endpoints or tools.")

    yield

    if scheduler.running:
        scheduler.shutdown(wait=False)
    await close_db()


app = FastAPI(
    title="NerdFootball",
    description="Confidence and survivor pool scoring",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)
app.add_middleware(StructuredLoggingMiddleware)

from nerdfootball.routers.leaderboard import router as leaderboard_router
from nerdfootball.routers.scoring import router as scoring_router
from nerdfootball.routers.survivor import router as survivor_router

app.include_router(scoring_router)
app.include_router(leaderboard_router)
app.include_router(survivor_router)
app.mount("/metrics", make_asgi_app())


async def _stale_standings(request: Request, exc: Exception):
    logger.error("Store unreachable on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": _STALE_DETAIL})


app.add_exception_handler(StoreUnavailable, _stale_standings)
app.add_exception_handler(ConnectionFailure, _stale_standings)


@app.exception_handler(OperationFailure)
async def db_operation_handler(request: Request, exc: OperationFailure):
    logger.error("Store rejected operation on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": _INTERNAL_DETAIL})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """422 with one entry per bad parameter, e.g. ``{"field": "week", ...}``."""
    errors = [
        {
            "field": str(err["loc"][-1]) if err.get("loc") else "unknown",
            "message": err.get("msg", "Invalid value."),
        }
        for err in exc.errors()
    ]
    return JSONResponse(status_code=422, content={"detail": "Validation error.", "errors": errors})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": _INTERNAL_DETAIL})


@app.get("/health")
async def health():
    """Liveness plus a Mongo ping; reports whether automated triggers run."""
    try:
        ping = await _db.db.command("ping")
        mongo_ok = ping.get("ok") == 1.0
    except Exception:
        mongo_ok = False

    return {
        "status": "ok" if mongo_ok else "degraded",
        "mongo": "up" if mongo_ok else "down",
        "automation": settings.AUTOMATION_ENABLED,
        "current_week": current_week(),
    }
