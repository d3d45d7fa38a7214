"""
backend/tests/test_scoring_engine.py

Purpose:
    Weekly confidence scoring: tie policy, pending games, malformed pick
    isolation, idempotent re-runs and confidence diagnostics.
"""

from __future__ import annotations

from nerdfootball.models.game import Game, GameStatus
from nerdfootball.models.scoring import ConfidencePick
from nerdfootball.services.scoring_engine import max_weekly_points, score_user_week, score_week


def _game(game_id, home, away, status=GameStatus.FINAL, home_score=None, away_score=None, winner=None):
    return Game(
        game_id=game_id,
        week=3,
        home_team=home,
        away_team=away,
        home_score=home_score,
        away_score=away_score,
        status=status,
        winner=winner,
    )


def _pick(game_id, team, confidence):
    return ConfidencePick(game_id=game_id, team=team, confidence=confidence)


def _example_games():
    return {
        "G1": _game("G1", "PHI", "DAL", home_score=24, away_score=17, winner="PHI"),
        "G2": _game("G2", "BUF", "MIA", home_score=20, away_score=20),
        "G3": _game("G3", "KC", "DEN", status=GameStatus.SCHEDULED),
    }


def test_example_week_with_tie_and_pending_game():
    picks = {
        "u1": {
            "G1": _pick("G1", "PHI", 3),
            "G2": _pick("G2", "MIA", 2),
            "G3": _pick("G3", "KC", 1),
        }
    }

    record = score_week(3, _example_games(), picks)["u1"]

    assert record.total_points == 5
    assert record.correct_picks == 2
    assert record.total_valid_picks == 2
    assert record.pending_picks == 1
    assert record.accuracy == 1.0
    assert record.pick_results["G2"].is_tie is True
    assert "G3" not in record.pick_results


def test_incorrect_pick_counts_as_valid_with_zero_points():
    games = {"G1": _game("G1", "PHI", "DAL", home_score=10, away_score=27, winner="DAL")}
    record = score_user_week("u1", 3, games, {"G1": _pick("G1", "PHI", 7)})

    assert record.total_points == 0
    assert record.correct_picks == 0
    assert record.total_valid_picks == 1
    assert record.accuracy == 0.0
    assert record.pick_results["G1"].points == 0


def test_tie_awards_full_confidence_to_either_side():
    games = {"G2": _game("G2", "BUF", "MIA", home_score=13, away_score=13)}
    picks = {
        "home_fan": {"G2": _pick("G2", "BUF", 9)},
        "away_fan": {"G2": _pick("G2", "MIA", 4)},
    }

    records = score_week(3, games, picks)

    assert records["home_fan"].total_points == 9
    assert records["away_fan"].total_points == 4
    assert all(r.correct_picks == 1 for r in records.values())


def test_malformed_pick_is_isolated():
    games = {
        gid: _game(gid, home, away, home_score=21, away_score=3, winner=home)
        for gid, home, away in [
            ("G1", "PHI", "DAL"),
            ("G2", "BUF", "MIA"),
            ("G3", "KC", "DEN"),
            ("G4", "SF", "SEA"),
            ("G5", "DET", "GB"),
        ]
    }
    messy = {
        "G1": _pick("G1", "PHI", 5),
        "G2": _pick("G2", "BUF", 4),
        "G3": ConfidencePick(game_id="G3", team="KC", confidence=None),
        "G4": _pick("G4", "SF", 2),
        "G5": _pick("G5", "DET", 1),
    }
    clean = {gid: _pick(gid, g.home_team, 6 - i) for i, (gid, g) in enumerate(sorted(games.items()), start=1)}

    records = score_week(3, games, {"messy": messy, "clean": clean})

    assert records["messy"].total_valid_picks == 4
    assert records["messy"].discarded_picks == 1
    assert records["messy"].total_points == 12
    assert records["clean"].total_valid_picks == 5
    assert records["clean"].discarded_picks == 0
    assert records["clean"].total_points == 15


def test_pick_without_team_is_discarded():
    games = _example_games()
    record = score_user_week("u1", 3, games, {"G1": ConfidencePick(game_id="G1", confidence=3)})

    assert record.discarded_picks == 1
    assert record.total_valid_picks == 0
    assert record.accuracy == 0.0


def test_scoring_is_idempotent():
    picks = {"u1": {"G1": _pick("G1", "PHI", 3), "G2": _pick("G2", "BUF", 2)}}

    first = score_week(3, _example_games(), picks)
    second = score_week(3, _example_games(), picks)

    assert first == second


def test_rescoring_after_more_games_finalize_only_grows_scored_set():
    picks = {"u1": {"G1": _pick("G1", "PHI", 3), "G2": _pick("G2", "BUF", 2), "G3": _pick("G3", "KC", 1)}}
    games = _example_games()
    before = score_week(3, games, picks)["u1"]

    games["G3"] = _game("G3", "KC", "DEN", home_score=31, away_score=10, winner="KC")
    after = score_week(3, games, picks)["u1"]

    assert set(before.pick_results) < set(after.pick_results)
    assert after.total_valid_picks == before.total_valid_picks + 1
    assert after.total_points == before.total_points + 1
    assert after.pending_picks == 0


def test_missing_game_is_pending_and_reported():
    record = score_user_week("u1", 3, _example_games(), {"G9": _pick("G9", "NYJ", 4)})

    assert record.pending_picks == 1
    assert record.total_valid_picks == 0
    assert record.missing_game_ids == ["G9"]


def test_final_game_without_outcome_is_pending_not_a_tie():
    games = {
        "G1": _game("G1", "PHI", "DAL"),
        "G2": _game("G2", "BUF", "MIA", home_score=20, away_score=None),
    }
    picks = {"G1": _pick("G1", "DAL", 2), "G2": _pick("G2", "MIA", 1)}

    record = score_user_week("u1", 3, games, picks)

    assert record.total_points == 0
    assert record.total_valid_picks == 0
    assert record.pending_picks == 2
    assert record.pick_results == {}


def test_confidence_outside_permutation_is_flagged_but_scored():
    games = _example_games()
    picks = {
        "G1": _pick("G1", "PHI", 3),
        "G2": _pick("G2", "BUF", 3),
        "G3": _pick("G3", "KC", 8),
    }

    record = score_user_week("u1", 3, games, picks)

    assert record.confidence_warnings == [
        "confidence 3 used 2 times",
        "confidence 8 outside 1..3",
    ]
    assert record.total_points == 6


def test_max_weekly_points_is_triangular():
    assert max_weekly_points(0) == 0
    assert max_weekly_points(3) == 6
    assert max_weekly_points(16) == 136

    games = {
        f"G{i}": _game(f"G{i}", "PHI", "DAL", home_score=1, away_score=0, winner="PHI")
        for i in range(1, 5)
    }
    perfect = {gid: _pick(gid, "PHI", i) for i, gid in enumerate(sorted(games), start=1)}
    record = score_user_week("u1", 3, games, perfect)

    assert record.total_points == record.max_possible_points == 10
