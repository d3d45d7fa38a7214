"""Confidence pool models: submitted picks and the derived weekly/season records."""

from typing import Optional

from pydantic import BaseModel, Field


class ConfidencePick(BaseModel):
    """One user's pick on one game. ``None`` fields mark a malformed pick."""
    game_id: str
    team: Optional[str] = None
    confidence: Optional[int] = None

    @property
    def is_malformed(self) -> bool:
        return not self.team or self.confidence is None or self.confidence <= 0


class PickResult(BaseModel):
    team: str
    confidence: int
    correct: bool
    points: int
    is_tie: bool = False
    winner: Optional[str] = None


class WeeklyScoreRecord(BaseModel):
    """Full weekly result for one user; always replaced as a whole."""
    user_id: str
    week: int
    total_points: int = 0
    correct_picks: int = 0
    total_valid_picks: int = 0
    accuracy: float = 0.0
    max_possible_points: int = 0

    # Diagnostics
    discarded_picks: int = 0
    pending_picks: int = 0
    missing_game_ids: list[str] = Field(default_factory=list)
    confidence_warnings: list[str] = Field(default_factory=list)
    pick_results: dict[str, PickResult] = Field(default_factory=dict)


class SeasonStanding(BaseModel):
    user_id: str
    rank: int
    total_points: int = 0
    weeks_played: int = 0
    correct_picks: int = 0
    total_valid_picks: int = 0
    accuracy: float = 0.0
    weekly_points: dict[str, int] = Field(default_factory=dict)
