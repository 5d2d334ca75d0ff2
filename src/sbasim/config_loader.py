"""Load, save and apply JSON league fixtures."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List
from uuid import uuid4

from pydantic import ValidationError

from sbasim.config import LEAGUE_RULES
from sbasim.errors import ValidationFailed
from sbasim.models import Player, Team
from sbasim.persistence import LeagueStore


logger = logging.getLogger(__name__)


@dataclass
class LeagueFixture:
    teams: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def load(cls, path: Path) -> "LeagueFixture":
        data = json.loads(path.read_text(encoding="utf-8"))
        return cls(teams=data.get("teams", []))

    def save(self, path: Path) -> None:
        payload = {"teams": self.teams}
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def seed_league(store: LeagueStore, fixture: LeagueFixture) -> List[Team]:
    """Insert every team and rostered player of a fixture in one transaction.

    The same uniqueness and roster-size rules as the CRUD endpoints apply; any
    violation aborts the whole seed.
    """

    created: list[str] = []
    with store.transaction() as tx:
        for entry in fixture.teams:
            try:
                team = Team(
                    team_id=uuid4().hex,
                    name=entry["name"],
                    city=entry["city"],
                    logo_url=entry.get("logo_url"),
                )
            except KeyError as exc:
                raise ValidationFailed(f"Fixture team is missing {exc.args[0]!r}") from exc
            except ValidationError as exc:
                raise ValidationFailed(f"Invalid fixture team: {exc}") from exc
            if tx.find_team_by_name(team.name) is not None:
                raise ValidationFailed(f"Team name must be unique: {team.name}")
            tx.insert_team(team)
            created.append(team.team_id)

            roster = entry.get("roster", [])
            limit = LEAGUE_RULES.roster_max_players
            if len(roster) > limit:
                raise ValidationFailed(f"Team {team.name} roster is full (maximum {limit} players allowed).")
            for raw in roster:
                try:
                    player = Player(
                        player_id=uuid4().hex,
                        first_name=raw["first_name"],
                        last_name=raw["last_name"],
                        position=str(raw["position"]).upper(),
                        height_cm=raw["height_cm"],
                        weight_lbs=raw["weight_lbs"],
                        skill=raw["skill"],
                        team_id=team.team_id,
                    )
                except (KeyError, ValidationError) as exc:
                    raise ValidationFailed(f"Invalid fixture player on {team.name}: {exc}") from exc
                if tx.find_player_by_name(player.first_name, player.last_name) is not None:
                    raise ValidationFailed(f"Player name must be unique: {player.full_name}")
                tx.insert_player(player)
        teams = [tx.require_team(team_id) for team_id in created]

    logger.info("Seeded %s teams and %s players", len(teams), sum(len(team.roster) for team in teams))
    return teams
