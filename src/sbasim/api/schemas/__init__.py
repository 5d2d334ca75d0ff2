"""Pydantic models for API I/O."""

from .league import ErrorResponse, LeaderResponse, StandingResponse
from .matchup import (
    MatchupCreateRequest,
    MatchupResponse,
    MatchupUpdateRequest,
    SimulationResponse,
    StatLineResponse,
)
from .player import PlayerCreateRequest, PlayerResponse, PlayerStatsResponse, PlayerUpdateRequest
from .team import TeamCreateRequest, TeamResponse, TeamUpdateRequest

__all__ = [
    "ErrorResponse",
    "LeaderResponse",
    "MatchupCreateRequest",
    "MatchupResponse",
    "MatchupUpdateRequest",
    "PlayerCreateRequest",
    "PlayerResponse",
    "PlayerStatsResponse",
    "PlayerUpdateRequest",
    "SimulationResponse",
    "StandingResponse",
    "StatLineResponse",
    "TeamCreateRequest",
    "TeamResponse",
    "TeamUpdateRequest",
]
