"""Canonical league models shared across persistence, simulation and API layers."""

from .matchup import Matchup, StatLine
from .player import Player, PlayerStats, PositionCode
from .team import Team

__all__ = [
    "Matchup",
    "Player",
    "PlayerStats",
    "PositionCode",
    "StatLine",
    "Team",
]
