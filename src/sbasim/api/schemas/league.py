from __future__ import annotations

from pydantic import BaseModel


class StandingResponse(BaseModel):
    rank: int
    team_id: str
    name: str
    city: str
    wins: int
    losses: int
    win_pct: float


class LeaderResponse(BaseModel):
    rank: int
    player_id: str
    name: str
    team_id: str | None
    games_played: int
    total: int
    per_game: float


class ErrorResponse(BaseModel):
    error: str
    message: str
    retryable: bool = False
