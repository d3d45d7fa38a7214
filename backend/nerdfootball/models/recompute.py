from typing import Literal, Optional

from pydantic import BaseModel, Field


class RecomputeSummary(BaseModel):
    """Outcome of one trigger run, returned to the caller and logged."""
    kind: Literal["week", "season", "survivor"]
    week: Optional[int] = None
    users_processed: int = 0
    users_written: int = 0
    failed_users: list[str] = Field(default_factory=list)
    discarded_picks: int = 0
    warnings: list[str] = Field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failed_users
