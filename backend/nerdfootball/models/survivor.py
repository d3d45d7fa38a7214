"""Survivor pool models: pick one team per week, eliminated on loss or reuse."""

from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field


class SurvivorStatus(str, Enum):
    ALIVE = "alive"
    ELIMINATED = "eliminated"


EliminationReason = Literal["no pick", "duplicate team", "team lost", "team not playing"]


class SurvivorPick(BaseModel):
    """A submitted survivor pick as read from the pick sheet."""
    week: int
    team: str
    game_id: Optional[str] = None


class SurvivorHistoryItem(BaseModel):
    """A pick the engine has already resolved."""
    week: int
    team: str
    game_id: Optional[str] = None
    result: Literal["won", "tie", "lost"] = "won"


class SurvivorEntry(BaseModel):
    """One entry per user for the season.

    ``picks`` is the submitted sheet, ``pick_history`` the resolved weeks.
    Elimination is terminal for ordinary recomputation.
    """
    user_id: str
    status: SurvivorStatus = SurvivorStatus.ALIVE
    eliminated_week: Optional[int] = None
    elimination_reason: Optional[EliminationReason] = None
    last_evaluated_week: int = 0
    picks: list[SurvivorPick] = Field(default_factory=list)
    pick_history: list[SurvivorHistoryItem] = Field(default_factory=list)
    integrity_flags: list[str] = Field(default_factory=list)
    updated_at: Optional[datetime] = None

    @property
    def is_alive(self) -> bool:
        return self.status == SurvivorStatus.ALIVE

    @property
    def used_teams(self) -> list[str]:
        return [item.team for item in self.pick_history]


class SurvivorStandingEntry(BaseModel):
    """Single row of the survivor board."""
    user_id: str
    status: SurvivorStatus
    streak: int
    last_pick: Optional[str] = None
    eliminated_week: Optional[int] = None
    elimination_reason: Optional[str] = None
