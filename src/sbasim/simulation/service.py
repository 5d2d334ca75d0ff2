"""Simulate a scheduled matchup and commit its result atomically."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from typing import List, Sequence, Tuple

from sbasim.config.settings import default_rng
from sbasim.errors import AlreadySimulated, TransactionConflict
from sbasim.models import Matchup, Player, StatLine
from sbasim.persistence import LeagueStore

from .aggregation import GameOutcome, apply_outcome
from .generator import RandomSource, generate_line


logger = logging.getLogger("uvicorn.error")
logger.setLevel(logging.INFO)


@dataclass(frozen=True)
class SimulationResult:
    matchup: Matchup
    outcome: GameOutcome


@lru_cache(maxsize=1)
def _production_rng() -> RandomSource:
    return default_rng()


def _box_score(roster: Sequence[Player], team_id: str, rng: RandomSource) -> Tuple[List[StatLine], int]:
    lines: list[StatLine] = []
    score = 0
    for player in roster:
        generated = generate_line(player, rng)
        lines.append(StatLine(player_id=player.player_id, team_id=team_id, **generated.as_dict()))
        score += generated.points
    return lines, score


def simulate_matchup(
    store: LeagueStore,
    matchup_id: str,
    *,
    rng: RandomSource | None = None,
    now: datetime | None = None,
) -> SimulationResult:
    """Play out a matchup using the rosters as they stand right now.

    Standings, career totals and the matchup's own score, lines and
    ``simulated`` flag are written in one store transaction. Raises
    ``NotFound`` for an unknown matchup or team, ``AlreadySimulated`` when the
    game has been played, ``InvalidRoster`` when a roster row cannot be
    loaded, and ``TransactionConflict`` when the store cannot commit. Nothing
    is persisted in any of those cases.
    """

    rng = rng or _production_rng()
    try:
        with store.transaction() as tx:
            matchup = tx.require_matchup(matchup_id)
            if matchup.simulated:
                raise AlreadySimulated(f"Matchup {matchup_id} has already been simulated")
            home = tx.require_team(matchup.home_team_id)
            away = tx.require_team(matchup.away_team_id)

            home_lines, home_score = _box_score(tx.roster(home.team_id), home.team_id, rng)
            away_lines, away_score = _box_score(tx.roster(away.team_id), away.team_id, rng)
            stat_lines = [*home_lines, *away_lines]
            outcome = GameOutcome(
                home_team_id=home.team_id,
                away_team_id=away.team_id,
                home_score=home_score,
                away_score=away_score,
            )

            apply_outcome(tx, outcome, stat_lines)
            # Written last: the check-and-set on the flag is what turns away a
            # concurrent simulation of the same matchup.
            tx.finalize_matchup(
                matchup_id,
                home_score=home_score,
                away_score=away_score,
                stat_lines=stat_lines,
                simulated_at=now,
            )
            final = tx.require_matchup(matchup_id)
    except (AlreadySimulated, TransactionConflict) as exc:
        logger.warning("Simulation of matchup %s rejected: %s", matchup_id, exc)
        raise

    if outcome.is_tie:
        logger.info("Matchup %s finished tied %s-%s", matchup_id, home_score, away_score)
    else:
        logger.info(
            "Matchup %s final %s %s - %s %s (winner %s)",
            matchup_id,
            home.name,
            home_score,
            away_score,
            away.name,
            outcome.winner_team_id,
        )
    return SimulationResult(matchup=final, outcome=outcome)
