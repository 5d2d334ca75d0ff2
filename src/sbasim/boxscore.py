"""CSV export helpers for simulated matchups."""

from __future__ import annotations

import csv
from io import StringIO
from typing import Mapping

from sbasim.config import STAT_CATEGORIES
from sbasim.errors import SbasimError
from sbasim.models import Matchup, Player, Team


class BoxScoreExportError(SbasimError):
    """Raised when a matchup has no box score to export."""

    kind = "not_simulated"


def export_box_score_to_csv(
    matchup: Matchup,
    *,
    teams: Mapping[str, Team],
    players: Mapping[str, Player],
) -> str:
    """One row per stat line, home roster first, followed by a team total row each."""

    if not matchup.simulated:
        raise BoxScoreExportError(f"Matchup {matchup.matchup_id} has not been simulated")

    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(["matchup_id", "team", "player_id", "player", "position", *STAT_CATEGORIES])

    for team_id in (matchup.home_team_id, matchup.away_team_id):
        team = teams.get(team_id)
        team_name = team.name if team else team_id
        totals = dict.fromkeys(STAT_CATEGORIES, 0)
        for line in matchup.stat_lines:
            if line.team_id != team_id:
                continue
            player = players.get(line.player_id)
            writer.writerow([
                matchup.matchup_id,
                team_name,
                line.player_id,
                player.full_name if player else "",
                player.position if player else "",
                *(getattr(line, category) for category in STAT_CATEGORIES),
            ])
            for category in STAT_CATEGORIES:
                totals[category] += getattr(line, category)
        writer.writerow([matchup.matchup_id, team_name, "", "TOTAL", "", *totals.values()])

    return buffer.getvalue()


__all__ = [
    "BoxScoreExportError",
    "export_box_score_to_csv",
]
