from __future__ import annotations

from typing import Dict

from pydantic import BaseModel, Field

from sbasim.models import PositionCode


class PlayerCreateRequest(BaseModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    position: PositionCode
    height_cm: float = Field(..., gt=0)
    weight_lbs: float = Field(..., gt=0)
    skill: int = Field(..., ge=0, le=99)
    team_id: str | None = None


class PlayerUpdateRequest(BaseModel):
    first_name: str | None = Field(default=None, min_length=1)
    last_name: str | None = Field(default=None, min_length=1)
    position: PositionCode | None = None
    height_cm: float | None = Field(default=None, gt=0)
    weight_lbs: float | None = Field(default=None, gt=0)
    skill: int | None = Field(default=None, ge=0, le=99)
    team_id: str | None = None


class PlayerStatsResponse(BaseModel):
    points: int
    assists: int
    rebounds: int
    steals: int
    blocks: int
    games_played: int
    per_game: Dict[str, float]


class PlayerResponse(BaseModel):
    player_id: str
    first_name: str
    last_name: str
    position: str
    height_cm: float
    weight_lbs: float
    skill: int
    team_id: str | None
    stats: PlayerStatsResponse
