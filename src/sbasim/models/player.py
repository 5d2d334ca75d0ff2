"""Player records and their cumulative statistics."""

from __future__ import annotations

from typing import Dict, Literal

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from sbasim.config import STAT_CATEGORIES


PositionCode = Literal["PG", "SG", "SF", "PF", "C"]


class PlayerStats(BaseModel):
    """Career totals; averages are derived on read and never stored."""

    points: int = Field(default=0, ge=0)
    assists: int = Field(default=0, ge=0)
    rebounds: int = Field(default=0, ge=0)
    steals: int = Field(default=0, ge=0)
    blocks: int = Field(default=0, ge=0)
    games_played: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)

    def per_game(self) -> Dict[str, float]:
        if self.games_played == 0:
            return {category: 0.0 for category in STAT_CATEGORIES}
        return {
            category: getattr(self, category) / self.games_played
            for category in STAT_CATEGORIES
        }


class Player(BaseModel):
    player_id: str = Field(..., min_length=1)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    position: PositionCode
    height_cm: float = Field(..., gt=0)
    weight_lbs: float = Field(..., gt=0)
    skill: int = Field(..., ge=0, le=99)
    team_id: str | None = None
    stats: PlayerStats = Field(default_factory=PlayerStats)

    model_config = ConfigDict(frozen=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
