"""Season standings folded from weekly score records.

Fully re-derivable: the standings depend only on the set of weekly records,
never on previous standings or on the order records arrive in.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from nerdfootball.models.scoring import SeasonStanding, WeeklyScoreRecord


def _preferred(a: WeeklyScoreRecord, b: WeeklyScoreRecord) -> WeeklyScoreRecord:
    # Two records for one (user, week) can only come from a bad replay;
    # keep the one that scored more picks so the pick is order-independent.
    key_a = (a.total_valid_picks, a.total_points, a.correct_picks)
    key_b = (b.total_valid_picks, b.total_points, b.correct_picks)
    return a if key_a >= key_b else b


def _dedupe_weeks(records: Iterable[WeeklyScoreRecord]) -> dict[int, WeeklyScoreRecord]:
    by_week: dict[int, WeeklyScoreRecord] = {}
    for record in records:
        current = by_week.get(record.week)
        by_week[record.week] = record if current is None else _preferred(current, record)
    return by_week


def aggregate_season(
    weekly_records: Mapping[str, Iterable[WeeklyScoreRecord]],
) -> list[SeasonStanding]:
    standings: list[SeasonStanding] = []
    for user_id, records in weekly_records.items():
        by_week = _dedupe_weeks(records)
        correct = sum(r.correct_picks for r in by_week.values())
        valid = sum(r.total_valid_picks for r in by_week.values())
        standings.append(SeasonStanding(
            user_id=user_id,
            rank=0,
            total_points=sum(r.total_points for r in by_week.values()),
            weeks_played=sum(1 for r in by_week.values() if r.total_valid_picks > 0),
            correct_picks=correct,
            total_valid_picks=valid,
            accuracy=correct / valid if valid else 0.0,
            weekly_points={str(week): by_week[week].total_points for week in sorted(by_week)},
        ))

    standings.sort(key=lambda s: (-s.total_points, -s.accuracy, s.user_id))
    for position, standing in enumerate(standings, start=1):
        standing.rank = position
    return standings
