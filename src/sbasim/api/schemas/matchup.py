from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field


class MatchupCreateRequest(BaseModel):
    home_team_id: str = Field(..., min_length=1)
    away_team_id: str = Field(..., min_length=1)
    scheduled_at: datetime
    location: str = Field(..., min_length=1)


class MatchupUpdateRequest(BaseModel):
    home_team_id: str | None = Field(default=None, min_length=1)
    away_team_id: str | None = Field(default=None, min_length=1)
    scheduled_at: datetime | None = None
    location: str | None = Field(default=None, min_length=1)


class StatLineResponse(BaseModel):
    player_id: str
    team_id: str
    points: int
    assists: int
    rebounds: int
    steals: int
    blocks: int


class MatchupResponse(BaseModel):
    matchup_id: str
    home_team_id: str
    away_team_id: str
    scheduled_at: datetime
    location: str
    simulated: bool
    home_score: int | None
    away_score: int | None
    winner_team_id: str | None
    simulated_at: datetime | None
    stat_lines: List[StatLineResponse]


class SimulationResponse(BaseModel):
    matchup: MatchupResponse
    winner_team_id: str | None
    loser_team_id: str | None
    tie: bool
