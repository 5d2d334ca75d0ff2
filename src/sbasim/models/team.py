"""Team records with standings counters."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class Team(BaseModel):
    team_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    logo_url: str | None = None
    wins: int = Field(default=0, ge=0)
    losses: int = Field(default=0, ge=0)
    roster: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def games_played(self) -> int:
        return self.wins + self.losses

    @property
    def win_pct(self) -> float:
        if self.games_played == 0:
            return 0.0
        return self.wins / self.games_played
