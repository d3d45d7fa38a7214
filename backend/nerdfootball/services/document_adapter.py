"""
backend/nerdfootball/services/document_adapter.py

Purpose:
    Single normalization layer between raw store documents and the engines.
    Historical documents use several field names (team/winner, homeTeam/
    home_team), status spellings (STATUS_FINAL, Final, F, ...) and team name
    formats. Everything is mapped to the canonical models here; anything that
    cannot be mapped is passed on in a form the engines flag instead of crash on.

Dependencies:
    - nerdfootball.models
    - nerdfootball.services.team_alias_normalizer
"""

from __future__ import annotations

import logging
from typing import Any

from nerdfootball.models.game import Game, GameStatus
from nerdfootball.models.scoring import ConfidencePick
from nerdfootball.models.survivor import SurvivorPick
from nerdfootball.services.team_alias_normalizer import canonical_team
from nerdfootball.utils import parse_utc

logger = logging.getLogger("nerdfootball.document_adapter")

# Non-pick keys stored next to the per-game picks in a submission document.
SUBMISSION_METADATA_KEYS = frozenset({
    "_id", "userId", "user_id", "userName", "week", "weekNumber", "poolId",
    "submittedAt", "submitted_at", "timestamp", "createdAt", "lastUpdated",
    "updated_at", "mondayNightPoints", "mnfTotalPoints", "tiebreaker",
    "totalPoints", "survivorPick", "games", "picks",
})

_FINAL_STATUSES = frozenset({
    "final", "status_final", "f", "complete", "completed", "final ot",
    "final/ot", "f/ot", "status_final_ot", "post",
})
_SCHEDULED_STATUSES = frozenset({
    "", "scheduled", "status_scheduled", "not started", "pre", "pregame",
    "upcoming", "postponed", "status_postponed",
})

_TIE_MARKERS = frozenset({"tie", "draw", "push"})


def normalize_status(raw: Any) -> GameStatus:
    """Map any feed status spelling to a GameStatus.

    Unknown non-empty strings ("Q3", "Halftime", "STATUS_END_PERIOD") are
    treated as in progress, so they are never scored.
    """
    if isinstance(raw, GameStatus):
        return raw
    text = str(raw or "").strip().lower()
    if text in _FINAL_STATUSES or text.startswith("final"):
        return GameStatus.FINAL
    if text in _SCHEDULED_STATUSES:
        return GameStatus.SCHEDULED
    return GameStatus.IN_PROGRESS


def _first(doc: dict, *keys: str) -> Any:
    for key in keys:
        value = doc.get(key)
        if value is not None and value != "":
            return value
    return None


def _to_int(value: Any) -> int | None:
    """Whole numbers as int: 24, 24.0 and "24.0" all give 24; 24.5 gives None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        number = value if isinstance(value, float) else float(str(value).strip())
    except (TypeError, ValueError):
        return None
    if not number.is_integer():
        return None
    return int(number)


def game_from_document(doc: dict, *, week: int, game_id: str | None = None) -> Game | None:
    """Build a Game from a feed document, or None if its teams are unknown."""
    gid = str(game_id if game_id is not None else _first(doc, "game_id", "gameId", "id"))
    home = canonical_team(_first(doc, "home_team", "homeTeam", "home"))
    away = canonical_team(_first(doc, "away_team", "awayTeam", "away"))
    if not home or not away:
        logger.warning(
            "Dropping game %s week %d: unrecognized teams home=%r away=%r",
            gid, week, _first(doc, "home_team", "homeTeam", "home"),
            _first(doc, "away_team", "awayTeam", "away"),
        )
        return None

    status = normalize_status(_first(doc, "status", "game_status"))
    home_score = _to_int(_first(doc, "home_score", "homeScore"))
    away_score = _to_int(_first(doc, "away_score", "awayScore"))

    winner = None
    declared_tie = False
    if status == GameStatus.FINAL:
        winner = _resolve_winner(doc, gid, home, away, home_score, away_score)
        if winner is None and (home_score is None or away_score is None):
            declared_tie = _is_tie_marker(doc.get("winner"))
            if not declared_tie:
                logger.warning(
                    "Data integrity: game %s week %d is final without scores or winner, "
                    "treated as in progress",
                    gid, week,
                )
                status = GameStatus.IN_PROGRESS

    kickoff = _first(doc, "kickoff", "dateTime", "date", "start_time")
    try:
        kickoff = parse_utc(kickoff) if kickoff is not None else None
    except (AttributeError, TypeError, ValueError):
        kickoff = None

    return Game(
        game_id=gid,
        week=week,
        home_team=home,
        away_team=away,
        home_score=home_score,
        away_score=away_score,
        status=status,
        winner=winner,
        declared_tie=declared_tie,
        kickoff=kickoff,
    )


def _is_tie_marker(raw: Any) -> bool:
    return isinstance(raw, str) and raw.strip().lower() in _TIE_MARKERS


def _resolve_winner(
    doc: dict,
    game_id: str,
    home: str,
    away: str,
    home_score: int | None,
    away_score: int | None,
) -> str | None:
    raw_winner = doc.get("winner")
    stored = None
    if isinstance(raw_winner, str) and not _is_tie_marker(raw_winner):
        stored = canonical_team(raw_winner)

    if home_score is None or away_score is None:
        if stored not in (None, home, away):
            logger.warning("Game %s: stored winner %r did not play, ignoring", game_id, raw_winner)
            return None
        return stored

    if home_score > away_score:
        derived = home
    elif away_score > home_score:
        derived = away
    else:
        derived = None
    if stored is not None and stored != derived:
        logger.warning(
            "Game %s: stored winner %s contradicts score %d-%d, using %s",
            game_id, stored, home_score, away_score, derived or "tie",
        )
    return derived


def games_from_week_document(doc: dict, *, week: int) -> dict[str, Game]:
    """Normalize a legacy week document ``{game_id: {...}, _metadata: {...}}``."""
    games: dict[str, Game] = {}
    for key, value in doc.items():
        if key.startswith("_") or not isinstance(value, dict):
            continue
        game = game_from_document(value, week=week, game_id=key)
        if game is not None:
            games[game.game_id] = game
    return games


def pick_from_value(game_id: str, value: Any) -> ConfidencePick:
    """Normalize one submitted pick; unusable fields become None."""
    if not isinstance(value, dict):
        return ConfidencePick(game_id=game_id)
    raw_team = _first(value, "team", "winner", "pick")
    confidence = _to_int(value.get("confidence"))
    if confidence is not None and confidence <= 0:
        confidence = None
    return ConfidencePick(
        game_id=game_id,
        team=canonical_team(raw_team),
        confidence=confidence,
    )


def picks_from_submission(doc: dict) -> dict[str, ConfidencePick]:
    """Extract a user's per-game picks from a weekly submission document.

    Picks live either at the top level next to metadata keys (legacy layout)
    or under a ``picks`` mapping.
    """
    source = doc.get("picks") if isinstance(doc.get("picks"), dict) else doc
    picks: dict[str, ConfidencePick] = {}
    for key, value in source.items():
        if key in SUBMISSION_METADATA_KEYS:
            continue
        game_id = str(key)
        picks[game_id] = pick_from_value(game_id, value)
    return picks


def survivor_picks_from_document(doc: dict) -> list[SurvivorPick]:
    """Read a survivor pick sheet in either ``{week: {...}}`` or list form."""
    raw = doc.get("picks") or {}
    if isinstance(raw, dict):
        items = [dict(value, week=key) for key, value in raw.items() if isinstance(value, dict)]
    elif isinstance(raw, list):
        items = [item for item in raw if isinstance(item, dict)]
    else:
        items = []

    by_week: dict[int, SurvivorPick] = {}
    for item in items:
        week = _to_int(item.get("week"))
        team = canonical_team(_first(item, "team", "winner", "pick"))
        if week is None or week <= 0 or team is None:
            logger.warning(
                "Skipping survivor pick for user %s: week=%r team=%r",
                doc.get("user_id"), item.get("week"), item.get("team"),
            )
            continue
        game_id = _first(item, "game_id", "gameId")
        if week in by_week:
            logger.warning("User %s has two survivor picks for week %d, keeping the first",
                           doc.get("user_id"), week)
            continue
        by_week[week] = SurvivorPick(
            week=week,
            team=team,
            game_id=str(game_id) if game_id is not None else None,
        )
    return [by_week[week] for week in sorted(by_week)]
