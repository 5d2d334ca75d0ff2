"""Scheduled games and the box-score lines a simulation produces."""

from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class StatLine(BaseModel):
    """One player's contribution to one simulated matchup."""

    player_id: str
    team_id: str
    points: int = Field(default=0, ge=0)
    assists: int = Field(default=0, ge=0)
    rebounds: int = Field(default=0, ge=0)
    steals: int = Field(default=0, ge=0)
    blocks: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)


class Matchup(BaseModel):
    matchup_id: str = Field(..., min_length=1)
    home_team_id: str
    away_team_id: str
    scheduled_at: datetime
    location: str = Field(..., min_length=1)
    simulated: bool = False
    home_score: int | None = None
    away_score: int | None = None
    stat_lines: List[StatLine] = Field(default_factory=list)
    simulated_at: datetime | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def winner_team_id(self) -> str | None:
        """Team that outscored the other; ``None`` before simulation or on a tie."""

        if not self.simulated or self.home_score is None or self.away_score is None:
            return None
        if self.home_score > self.away_score:
            return self.home_team_id
        if self.away_score > self.home_score:
            return self.away_team_id
        return None
