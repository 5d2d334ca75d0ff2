"""Derived league tables: standings and per-game leaders."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from sbasim.config import STAT_CATEGORIES
from sbasim.models import Player, Team


@dataclass(frozen=True)
class StandingRow:
    rank: int
    team_id: str
    name: str
    city: str
    wins: int
    losses: int
    win_pct: float


@dataclass(frozen=True)
class LeaderRow:
    rank: int
    player_id: str
    name: str
    team_id: str | None
    games_played: int
    total: int
    per_game: float


def build_standings(teams: Iterable[Team]) -> List[StandingRow]:
    ordered = sorted(teams, key=lambda team: (-team.wins, team.losses, team.name))
    return [
        StandingRow(
            rank=idx,
            team_id=team.team_id,
            name=team.name,
            city=team.city,
            wins=team.wins,
            losses=team.losses,
            win_pct=team.win_pct,
        )
        for idx, team in enumerate(ordered, start=1)
    ]


def league_leaders(players: Iterable[Player], category: str, *, limit: int = 10) -> List[LeaderRow]:
    """Rank players by per-game average; players yet to appear are left out."""

    if category not in STAT_CATEGORIES:
        raise KeyError(f"Unknown stat category {category!r}")

    eligible = [player for player in players if player.stats.games_played > 0]
    ordered = sorted(
        eligible,
        key=lambda player: (-player.stats.per_game()[category], -player.stats.games_played, player.full_name),
    )
    return [
        LeaderRow(
            rank=idx,
            player_id=player.player_id,
            name=player.full_name,
            team_id=player.team_id,
            games_played=player.stats.games_played,
            total=getattr(player.stats, category),
            per_game=player.stats.per_game()[category],
        )
        for idx, player in enumerate(ordered[:limit], start=1)
    ]
