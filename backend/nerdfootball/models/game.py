"""Game result models: one record per scheduled matchup in a week."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, model_validator


class GameStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    FINAL = "final"


class Game(BaseModel):
    """Authoritative game outcome as synced from the score feed.

    Teams are canonical NFL abbreviations ("PHI", "KC"). ``winner`` is only
    ever set on a final game with unequal scores. A tie needs equal scores
    or ``declared_tie``; a final game with neither a winner nor a tie is
    undecided and never scored.
    """
    game_id: str
    week: int
    home_team: str
    away_team: str
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    status: GameStatus = GameStatus.SCHEDULED
    winner: Optional[str] = None
    # Set when the feed marks a tie without reporting scores
    declared_tie: bool = False
    kickoff: Optional[datetime] = None

    @model_validator(mode="after")
    def _winner_only_when_decided(self) -> "Game":
        if self.status != GameStatus.FINAL:
            self.winner = None
            self.declared_tie = False
        elif self.declared_tie or self._scores_equal():
            self.winner = None
        if self.winner is not None and self.winner not in (self.home_team, self.away_team):
            raise ValueError(f"winner {self.winner!r} did not play in game {self.game_id}")
        return self

    def _scores_equal(self) -> bool:
        return (
            self.home_score is not None
            and self.away_score is not None
            and self.home_score == self.away_score
        )

    @property
    def is_final(self) -> bool:
        return self.status == GameStatus.FINAL

    @property
    def is_tie(self) -> bool:
        return self.is_final and self.winner is None and (self.declared_tie or self._scores_equal())

    @property
    def is_decided(self) -> bool:
        """Final with a known outcome: a winner or a tie."""
        return self.is_final and (self.winner is not None or self.is_tie)

    def involves(self, team: str | None) -> bool:
        return team is not None and team in (self.home_team, self.away_team)
