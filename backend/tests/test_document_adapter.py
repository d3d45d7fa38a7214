"""
backend/tests/test_document_adapter.py

Purpose:
    Raw document normalization: status spellings, field name variants,
    winner derivation from scores and malformed pick handling.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from nerdfootball.models.game import GameStatus
from nerdfootball.services.document_adapter import (
    game_from_document,
    games_from_week_document,
    normalize_status,
    pick_from_value,
    picks_from_submission,
    survivor_picks_from_document,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("STATUS_FINAL", GameStatus.FINAL),
        ("Final", GameStatus.FINAL),
        ("final/OT", GameStatus.FINAL),
        ("F", GameStatus.FINAL),
        ("STATUS_SCHEDULED", GameStatus.SCHEDULED),
        (None, GameStatus.SCHEDULED),
        ("Q3", GameStatus.IN_PROGRESS),
        ("STATUS_HALFTIME", GameStatus.IN_PROGRESS),
    ],
)
def test_normalize_status(raw, expected):
    assert normalize_status(raw) == expected


def test_game_from_camel_case_document():
    doc = {
        "homeTeam": "Philadelphia Eagles",
        "awayTeam": "Cowboys",
        "homeScore": "24",
        "awayScore": 20,
        "status": "STATUS_FINAL",
        "dateTime": "2025-09-05T00:20:00Z",
    }

    game = game_from_document(doc, week=1, game_id="101")

    assert game.home_team == "PHI"
    assert game.away_team == "DAL"
    assert game.home_score == 24
    assert game.winner == "PHI"
    assert game.kickoff == datetime(2025, 9, 5, 0, 20, tzinfo=timezone.utc)


def test_score_wins_over_contradicting_stored_winner():
    doc = {
        "home_team": "KC", "away_team": "DEN",
        "home_score": 10, "away_score": 17,
        "status": "final", "winner": "KC",
    }

    game = game_from_document(doc, week=2, game_id="201")

    assert game.winner == "DEN"


def test_equal_scores_are_a_tie_even_with_stored_winner():
    doc = {
        "home_team": "NYG", "away_team": "WAS",
        "home_score": 14, "away_score": 14,
        "status": "Final", "winner": "NYG",
    }

    game = game_from_document(doc, week=3, game_id="302")

    assert game.is_tie
    assert game.winner is None


def test_non_final_game_never_carries_winner():
    doc = {"home_team": "KC", "away_team": "DEN", "home_score": 21, "away_score": 0,
           "status": "STATUS_IN_PROGRESS", "winner": "KC"}

    game = game_from_document(doc, week=2, game_id="201")

    assert game.status == GameStatus.IN_PROGRESS
    assert game.winner is None


def test_stored_winner_used_when_scores_missing():
    doc = {"home_team": "SF", "away_team": "SEA", "status": "final", "winner": "Niners"}

    game = game_from_document(doc, week=1, game_id="103")

    assert game.winner == "SF"


def test_final_without_scores_or_winner_is_treated_as_in_progress():
    doc = {"home_team": "PHI", "away_team": "DAL", "status": "STATUS_FINAL"}

    game = game_from_document(doc, week=1, game_id="101")

    assert game.status == GameStatus.IN_PROGRESS
    assert not game.is_tie
    assert not game.is_decided


def test_tie_marker_without_scores_is_a_declared_tie():
    doc = {"home_team": "NYG", "away_team": "WAS", "status": "final", "winner": "TIE"}

    game = game_from_document(doc, week=3, game_id="302")

    assert game.is_tie
    assert game.is_decided


@pytest.mark.parametrize("home_score, away_score", [(24.0, 20.0), ("24.0", "20"), (" 24 ", 20.0)])
def test_whole_number_scores_in_float_form_decide_the_winner(home_score, away_score):
    doc = {"home_team": "PHI", "away_team": "DAL", "home_score": home_score,
           "away_score": away_score, "status": "final"}

    game = game_from_document(doc, week=1, game_id="101")

    assert (game.home_score, game.away_score) == (24, 20)
    assert game.winner == "PHI"


def test_fractional_score_is_not_a_score():
    doc = {"home_team": "PHI", "away_team": "DAL", "home_score": 24.5,
           "away_score": 20, "status": "final"}

    game = game_from_document(doc, week=1, game_id="101")

    assert game.home_score is None
    assert game.status == GameStatus.IN_PROGRESS


def test_unknown_team_drops_game():
    doc = {"home_team": "Springfield Atoms", "away_team": "DAL", "status": "final"}

    assert game_from_document(doc, week=1, game_id="999") is None


def test_unparseable_kickoff_is_ignored():
    doc = {"home_team": "KC", "away_team": "DEN", "status": "scheduled", "kickoff": "next sunday"}

    game = game_from_document(doc, week=2, game_id="201")

    assert game.kickoff is None


def test_week_document_skips_metadata():
    doc = {
        "_id": 1,
        "_metadata": {"lastUpdated": "2025-09-09"},
        "101": {"home_team": "PHI", "away_team": "DAL", "home_score": 24, "away_score": 20, "status": "final"},
        "102": {"home_team": "Nowhere", "away_team": "LAC", "status": "final"},
    }

    games = games_from_week_document(doc, week=1)

    assert list(games) == ["101"]
    assert games["101"].week == 1


def test_pick_with_winner_field_and_string_confidence():
    pick = pick_from_value("101", {"winner": "Eagles", "confidence": "7"})

    assert pick.team == "PHI"
    assert pick.confidence == 7
    assert not pick.is_malformed


@pytest.mark.parametrize("raw", [5.0, "5.0"])
def test_whole_number_confidence_in_float_form_is_valid(raw):
    pick = pick_from_value("101", {"team": "PHI", "confidence": raw})

    assert pick.confidence == 5
    assert not pick.is_malformed


@pytest.mark.parametrize("value", [
    {"team": "PHI"},
    {"team": "PHI", "confidence": 0},
    {"team": "PHI", "confidence": "high"},
    {"team": "PHI", "confidence": 2.5},
    {"team": "Gotham Rogues", "confidence": 3},
    "PHI",
])
def test_malformed_picks_become_none_fields(value):
    assert pick_from_value("101", value).is_malformed


def test_submission_metadata_is_not_a_pick():
    doc = {
        "_id": "u1:1",
        "userId": "u1",
        "week": 1,
        "submittedAt": "2025-09-04T20:00:00Z",
        "mondayNightPoints": 44,
        "101": {"team": "PHI", "confidence": 2},
        "102": {"team": "KC", "confidence": 1},
    }

    picks = picks_from_submission(doc)

    assert set(picks) == {"101", "102"}


def test_submission_with_nested_picks():
    doc = {"user_id": "u1", "week": 1, "picks": {"101": {"team": "DAL", "confidence": 1}}}

    picks = picks_from_submission(doc)

    assert picks["101"].team == "DAL"


def test_survivor_sheet_in_mapping_form():
    doc = {
        "user_id": "u1",
        "picks": {
            "2": {"team": "Chiefs", "gameId": 201},
            "1": {"team": "PHI", "game_id": "101"},
            "3": {"team": "Not A Team"},
        },
    }

    picks = survivor_picks_from_document(doc)

    assert [(p.week, p.team, p.game_id) for p in picks] == [(1, "PHI", "101"), (2, "KC", "201")]


def test_survivor_sheet_keeps_first_pick_per_week():
    doc = {
        "user_id": "u1",
        "picks": [
            {"week": 1, "team": "PHI"},
            {"week": 1, "team": "DAL"},
            {"week": 0, "team": "KC"},
        ],
    }

    picks = survivor_picks_from_document(doc)

    assert [(p.week, p.team) for p in picks] == [(1, "PHI")]
