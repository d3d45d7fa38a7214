"""
backend/nerdfootball/services/scoring_engine.py

Purpose:
    Weekly confidence-pool scoring. Pure functions over normalized games and
    picks: no I/O, no clock, safe to re-run on every score update.

Rules:
    - picks missing a team or a positive confidence are discarded (counted)
    - picks on games that are missing or not final are pending and excluded
    - a final tie awards the pick's confidence whatever team was chosen
    - otherwise a pick is correct iff its team equals the winner

Dependencies:
    - nerdfootball.models
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Mapping

from nerdfootball.models.game import Game
from nerdfootball.models.scoring import ConfidencePick, PickResult, WeeklyScoreRecord

logger = logging.getLogger("nerdfootball.scoring")


def max_weekly_points(game_count: int) -> int:
    """Best possible week: every pick correct, confidences 1..N."""
    return game_count * (game_count + 1) // 2


def _confidence_warnings(picks: list[ConfidencePick], game_count: int) -> list[str]:
    warnings: list[str] = []
    counts = Counter(p.confidence for p in picks)
    for value in sorted(v for v, n in counts.items() if n > 1):
        warnings.append(f"confidence {value} used {counts[value]} times")
    if game_count:
        for value in sorted(v for v in counts if v > game_count):
            warnings.append(f"confidence {value} outside 1..{game_count}")
    return warnings


def score_user_week(
    user_id: str,
    week: int,
    games: Mapping[str, Game],
    picks: Mapping[str, ConfidencePick],
) -> WeeklyScoreRecord:
    """Score one user's week. Never raises on bad picks."""
    record = WeeklyScoreRecord(
        user_id=user_id,
        week=week,
        max_possible_points=max_weekly_points(len(games)),
    )

    valid: list[ConfidencePick] = []
    for game_id, pick in picks.items():
        if pick is None or pick.is_malformed:
            record.discarded_picks += 1
            logger.debug("Discarded malformed pick user=%s week=%d game=%s", user_id, week, game_id)
            continue
        valid.append(pick)

    record.confidence_warnings = _confidence_warnings(valid, len(games))

    for pick in sorted(valid, key=lambda p: p.game_id):
        game = games.get(pick.game_id)
        if game is None:
            record.pending_picks += 1
            record.missing_game_ids.append(pick.game_id)
            continue
        if not game.is_decided:
            record.pending_picks += 1
            continue

        if game.is_tie:
            correct = True
        else:
            correct = pick.team == game.winner
        points = pick.confidence if correct else 0

        record.total_valid_picks += 1
        if correct:
            record.correct_picks += 1
            record.total_points += points
        record.pick_results[pick.game_id] = PickResult(
            team=pick.team,
            confidence=pick.confidence,
            correct=correct,
            points=points,
            is_tie=game.is_tie,
            winner=game.winner,
        )

    if record.total_valid_picks:
        record.accuracy = record.correct_picks / record.total_valid_picks
    return record


def score_week(
    week: int,
    games: Mapping[str, Game],
    picks: Mapping[str, Mapping[str, ConfidencePick]],
) -> dict[str, WeeklyScoreRecord]:
    """Score every user's picks for ``week`` against the week's game results.

    Each user is scored independently; one user's bad data cannot affect
    another's record.
    """
    records: dict[str, WeeklyScoreRecord] = {}
    for user_id in sorted(picks):
        records[user_id] = score_user_week(user_id, week, games, picks[user_id] or {})

    discarded = sum(r.discarded_picks for r in records.values())
    if discarded:
        logger.info("Week %d: discarded %d malformed picks across %d users", week, discarded, len(records))
    flagged = [uid for uid, r in records.items() if r.confidence_warnings]
    if flagged:
        logger.warning("Week %d: confidence values not a permutation for users %s", week, flagged)
    return records
