"""
backend/nerdfootball/services/survivor_engine.py

Purpose:
    Survivor pool state machine. Walks an entry's weeks in increasing order,
    starting after the last resolved week, and decides alive/eliminated.

    ALIVE --no pick, week complete------> ELIMINATED(week, "no pick")
    ALIVE --team used before------------> ELIMINATED(week, "duplicate team")
    ALIVE --team not on the slate-------> ELIMINATED(week, "team not playing")
    ALIVE --picked team lost------------> ELIMINATED(week, "team lost")
    ALIVE --won or tie------------------> ALIVE (week appended to history)
    ALIVE --game not final--------------> stop, resume on a later run

    ELIMINATED is terminal: only an explicit admin reinstatement clears it.

Dependencies:
    - nerdfootball.models
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime

from nerdfootball.models.game import Game
from nerdfootball.models.survivor import (
    EliminationReason,
    SurvivorEntry,
    SurvivorHistoryItem,
    SurvivorPick,
    SurvivorStatus,
)
from nerdfootball.utils import ensure_utc

logger = logging.getLogger("nerdfootball.survivor")


def _eliminate(entry: SurvivorEntry, week: int, reason: EliminationReason) -> None:
    entry.status = SurvivorStatus.ELIMINATED
    entry.eliminated_week = week
    entry.elimination_reason = reason
    entry.last_evaluated_week = max(entry.last_evaluated_week, week)
    logger.info("Survivor eliminated: user=%s week=%d reason=%s", entry.user_id, week, reason)


def _flag(entry: SurvivorEntry, message: str) -> None:
    entry.integrity_flags.append(message)
    logger.error("Survivor history inconsistent for user=%s: %s", entry.user_id, message)


def _check_history(entry: SurvivorEntry) -> None:
    """Resolve contradictions in already-resolved history toward elimination."""
    if entry.eliminated_week is not None:
        _flag(entry, f"alive entry carries eliminated_week {entry.eliminated_week}")
        _eliminate(entry, entry.eliminated_week, entry.elimination_reason or "team lost")
        return

    seen: set[str] = set()
    for item in sorted(entry.pick_history, key=lambda h: h.week):
        if item.team in seen:
            _flag(entry, f"week {item.week}: {item.team} already used earlier")
            _eliminate(entry, item.week, "duplicate team")
            return
        if item.result == "lost":
            _flag(entry, f"week {item.week}: loss recorded on an alive entry")
            _eliminate(entry, item.week, "team lost")
            return
        seen.add(item.team)
        entry.last_evaluated_week = max(entry.last_evaluated_week, item.week)


def _all_decided(week_games: Mapping[str, Game]) -> bool:
    return bool(week_games) and all(g.is_decided for g in week_games.values())


def _deadline_passed(week_games: Mapping[str, Game], now: datetime | None) -> bool:
    if now is None:
        return True
    kickoffs = [ensure_utc(g.kickoff) for g in week_games.values() if g.kickoff is not None]
    return not kickoffs or max(kickoffs) <= ensure_utc(now)


def _find_game(week_games: Mapping[str, Game], pick: SurvivorPick) -> Game | None:
    if pick.game_id is not None:
        game = week_games.get(pick.game_id)
        if game is not None and game.involves(pick.team):
            return game
        logger.warning(
            "Survivor pick week %d: game %s does not involve %s, searching by team",
            pick.week, pick.game_id, pick.team,
        )
    candidates = [g for g in week_games.values() if g.involves(pick.team)]
    if not candidates:
        return None
    return min(candidates, key=lambda g: g.game_id)


def evaluate_survivor(
    entry: SurvivorEntry,
    games: Mapping[int, Mapping[str, Game]],
    now: datetime | None = None,
) -> SurvivorEntry:
    """Return the entry advanced as far as the game results allow.

    ``games`` maps week -> game_id -> Game. The input entry is not mutated.
    Running this again on its own output with the same games is a no-op.
    """
    result = entry.model_copy(deep=True)
    if not result.is_alive:
        return result

    _check_history(result)
    if not result.is_alive:
        return result

    picks_by_week = {p.week: p for p in result.picks}
    used = set(result.used_teams)
    week = result.last_evaluated_week + 1

    while games.get(week):
        week_games = games[week]
        pick = picks_by_week.get(week)

        if pick is None:
            if _all_decided(week_games) and _deadline_passed(week_games, now):
                _eliminate(result, week, "no pick")
            break

        if pick.team in used:
            _eliminate(result, week, "duplicate team")
            break

        game = _find_game(week_games, pick)
        if game is None:
            if _all_decided(week_games):
                _eliminate(result, week, "team not playing")
            break
        if not game.is_decided:
            break

        if game.is_tie:
            outcome = "tie"
        elif game.winner == pick.team:
            outcome = "won"
        else:
            outcome = "lost"
        result.pick_history.append(SurvivorHistoryItem(
            week=week, team=pick.team, game_id=game.game_id, result=outcome,
        ))
        result.last_evaluated_week = week
        if outcome == "lost":
            _eliminate(result, week, "team lost")
            break

        used.add(pick.team)
        week += 1

    return result
