"""Fold a finished game into standings and career totals."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from sbasim.errors import InvalidRoster
from sbasim.models import StatLine
from sbasim.persistence import LeagueTransaction


@dataclass(frozen=True)
class GameOutcome:
    home_team_id: str
    away_team_id: str
    home_score: int
    away_score: int

    @property
    def is_tie(self) -> bool:
        return self.home_score == self.away_score

    @property
    def winner_team_id(self) -> str | None:
        if self.home_score > self.away_score:
            return self.home_team_id
        if self.away_score > self.home_score:
            return self.away_team_id
        return None

    @property
    def loser_team_id(self) -> str | None:
        if self.home_score > self.away_score:
            return self.away_team_id
        if self.away_score > self.home_score:
            return self.home_team_id
        return None


def apply_outcome(tx: LeagueTransaction, outcome: GameOutcome, stat_lines: Sequence[StatLine]) -> None:
    """Credit the win and loss, then add every line to its player's totals.

    A tie changes neither team's record. Callers must hand in the open
    transaction that will also finalize the matchup.
    """

    if not outcome.is_tie:
        tx.record_result(outcome.winner_team_id, wins=1)
        tx.record_result(outcome.loser_team_id, losses=1)

    seen: set[str] = set()
    for line in stat_lines:
        if line.player_id in seen:
            raise InvalidRoster(f"Player {line.player_id} appears twice in one box score")
        seen.add(line.player_id)
        tx.add_player_line(line)
