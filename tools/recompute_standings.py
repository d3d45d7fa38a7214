"""Operator entry point for scoring recomputes and survivor overrides.

Usage:
    python -m tools.recompute_standings week 5
    python -m tools.recompute_standings week 5 --no-season
    python -m tools.recompute_standings season
    python -m tools.recompute_standings survivor
    python -m tools.recompute_standings reinstate USER_ID --actor admin --reason "late feed correction"
"""

import argparse
import asyncio
import json
import os
import sys

sys.path.insert(0, "backend")

if "MONGO_URI" not in os.environ:
    os.environ["MONGO_URI"] = "mongodb://localhost:27017/nerdfootball"

from nerdfootball.middleware.logging import setup_logging
from nerdfootball.utils import utcnow


def _print_summary(label: str, summary) -> None:
    print(f"{label}: {json.dumps(summary.model_dump(mode='json'), indent=2)}")


async def run(args: argparse.Namespace) -> int:
    import nerdfootball.database as _db
    from nerdfootball.dependencies import build_cache, build_recomputer
    from nerdfootball.services.store import ResultStore, StoreUnavailable
    from nerdfootball.services.survivor_service import SurvivorOverrideError, reinstate_entry

    await _db.connect_db()
    try:
        recomputer = build_recomputer(_db.db, week=args.current_week)
        if args.command == "week":
            week_summary = await recomputer.recompute_week(args.week)
            _print_summary("week", week_summary)
            if not args.no_season:
                _print_summary("season", await recomputer.recompute_season())
            return 0 if week_summary.complete else 2
        if args.command == "season":
            summary = await recomputer.recompute_season()
            _print_summary("season", summary)
            return 0 if summary.complete else 2
        if args.command == "survivor":
            summary = await recomputer.recompute_survivor(now=utcnow())
            _print_summary("survivor", summary)
            return 0 if summary.complete else 2
        if args.command == "reinstate":
            try:
                entry = await reinstate_entry(
                    _db.db,
                    ResultStore(_db.db),
                    build_cache(_db.db),
                    user_id=args.user_id,
                    actor_id=args.actor,
                    reason=args.reason,
                )
            except SurvivorOverrideError as exc:
                print(f"refused: {exc}")
                return 1
            print(f"reinstated {entry.user_id}, evaluation resumes at week {entry.last_evaluated_week + 1}")
            return 0
    except StoreUnavailable as exc:
        print(f"store unavailable, nothing further written; retry later ({exc})")
        return 3
    finally:
        await _db.close_db()
    return 1


def main() -> None:
    parser = argparse.ArgumentParser(description="Recompute pool standings.")
    parser.add_argument(
        "--current-week", type=int, default=None,
        help="Override the current NFL week (default: derived from the season start).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    week = sub.add_parser("week", help="Re-score one week, then the season.")
    week.add_argument("week", type=int)
    week.add_argument("--no-season", action="store_true", help="Skip the season rebuild.")

    sub.add_parser("season", help="Rebuild season standings from weekly records.")
    sub.add_parser("survivor", help="Advance every survivor entry.")

    reinstate = sub.add_parser("reinstate", help="Clear a survivor elimination (audited).")
    reinstate.add_argument("user_id")
    reinstate.add_argument("--actor", required=True, help="Operator id recorded in the audit log.")
    reinstate.add_argument("--reason", required=True)

    args = parser.parse_args()
    setup_logging()
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
