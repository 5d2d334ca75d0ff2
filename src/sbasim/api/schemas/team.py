from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class TeamCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    logo_url: str | None = None


class TeamUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    city: str | None = Field(default=None, min_length=1)
    logo_url: str | None = None


class TeamResponse(BaseModel):
    team_id: str
    name: str
    city: str
    logo_url: str | None
    wins: int
    losses: int
    win_pct: float
    roster: List[str]
