"""REST API for the simulated basketball league."""

from __future__ import annotations

import logging
from dataclasses import asdict
from pathlib import Path
from typing import Literal

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse, Response

from sbasim.api.schemas import (
    ErrorResponse,
    LeaderResponse,
    MatchupCreateRequest,
    MatchupResponse,
    MatchupUpdateRequest,
    PlayerCreateRequest,
    PlayerResponse,
    PlayerStatsResponse,
    PlayerUpdateRequest,
    SimulationResponse,
    StandingResponse,
    StatLineResponse,
    TeamCreateRequest,
    TeamResponse,
    TeamUpdateRequest,
)
from sbasim.boxscore import BoxScoreExportError, export_box_score_to_csv
from sbasim.errors import (
    AlreadySimulated,
    ImmutableRecord,
    InvalidRoster,
    NotFound,
    SbasimError,
    TransactionConflict,
    ValidationFailed,
)
from sbasim.models import Matchup, Player, Team
from sbasim.persistence import LeagueStore
from sbasim.simulation import RandomSource, simulate_matchup
from sbasim.standings import build_standings, league_leaders


logger = logging.getLogger("uvicorn.error")

StatCategory = Literal["points", "assists", "rebounds", "steals", "blocks"]

# Order matters: subclasses before their bases.
_ERROR_STATUS: tuple[tuple[type[SbasimError], int], ...] = (
    (NotFound, 404),
    (AlreadySimulated, 409),
    (BoxScoreExportError, 409),
    (ImmutableRecord, 409),
    (TransactionConflict, 503),
    (InvalidRoster, 422),
    (ValidationFailed, 400),
)


def _status_for(exc: SbasimError) -> int:
    for error_type, status in _ERROR_STATUS:
        if isinstance(exc, error_type):
            return status
    return 500


def team_to_response(team: Team) -> TeamResponse:
    return TeamResponse(
        team_id=team.team_id,
        name=team.name,
        city=team.city,
        logo_url=team.logo_url,
        wins=team.wins,
        losses=team.losses,
        win_pct=team.win_pct,
        roster=list(team.roster),
    )


def player_to_response(player: Player) -> PlayerResponse:
    stats = player.stats
    return PlayerResponse(
        player_id=player.player_id,
        first_name=player.first_name,
        last_name=player.last_name,
        position=player.position,
        height_cm=player.height_cm,
        weight_lbs=player.weight_lbs,
        skill=player.skill,
        team_id=player.team_id,
        stats=PlayerStatsResponse(
            points=stats.points,
            assists=stats.assists,
            rebounds=stats.rebounds,
            steals=stats.steals,
            blocks=stats.blocks,
            games_played=stats.games_played,
            per_game=stats.per_game(),
        ),
    )


def matchup_to_response(matchup: Matchup) -> MatchupResponse:
    return MatchupResponse(
        matchup_id=matchup.matchup_id,
        home_team_id=matchup.home_team_id,
        away_team_id=matchup.away_team_id,
        scheduled_at=matchup.scheduled_at,
        location=matchup.location,
        simulated=matchup.simulated,
        home_score=matchup.home_score,
        away_score=matchup.away_score,
        winner_team_id=matchup.winner_team_id,
        simulated_at=matchup.simulated_at,
        stat_lines=[StatLineResponse.model_validate(line.model_dump()) for line in matchup.stat_lines],
    )


def create_app(
    db_path: Path | str | None = None,
    *,
    rng: RandomSource | None = None,
    timeout: float | None = None,
) -> FastAPI:
    """Build the application.

    ``rng`` pins the random source used by simulate; ``timeout`` overrides
    SBASIM_BUSY_TIMEOUT for the store.
    """

    app = FastAPI(title="sbasim league")
    store = LeagueStore(db_path, timeout=timeout)
    app.state.league_store = store
    app.state.rng = rng

    @app.exception_handler(SbasimError)
    async def league_error(request: Request, exc: SbasimError) -> JSONResponse:
        status = _status_for(exc)
        if status >= 500:
            logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status,
            content={"detail": ErrorResponse(error=exc.kind, message=str(exc), retryable=exc.retryable).model_dump()},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    # Teams -----------------------------------------------------------------

    @app.get("/api/teams", response_model=list[TeamResponse])
    async def list_teams():
        return [team_to_response(team) for team in store.list_teams()]

    @app.post("/api/teams", response_model=TeamResponse, status_code=201)
    async def create_team(payload: TeamCreateRequest):
        team = store.create_team(name=payload.name, city=payload.city, logo_url=payload.logo_url)
        return team_to_response(team)

    @app.get("/api/teams/{team_id}", response_model=TeamResponse)
    async def get_team(team_id: str):
        team = store.get_team(team_id)
        if team is None:
            raise NotFound(f"Team {team_id} not found")
        return team_to_response(team)

    @app.put("/api/teams/{team_id}", response_model=TeamResponse)
    async def update_team(team_id: str, payload: TeamUpdateRequest):
        team = store.update_team(team_id, payload.model_dump(exclude_unset=True))
        return team_to_response(team)

    @app.delete("/api/teams/{team_id}")
    async def delete_team(team_id: str):
        store.delete_team(team_id)
        return {"message": "Team deleted successfully"}

    # Players ---------------------------------------------------------------

    @app.get("/api/players", response_model=list[PlayerResponse])
    async def list_players(team_id: str | None = None):
        return [player_to_response(player) for player in store.list_players(team_id=team_id)]

    @app.post("/api/players", response_model=PlayerResponse, status_code=201)
    async def create_player(payload: PlayerCreateRequest):
        player = store.create_player(**payload.model_dump())
        return player_to_response(player)

    @app.get("/api/players/{player_id}", response_model=PlayerResponse)
    async def get_player(player_id: str):
        player = store.get_player(player_id)
        if player is None:
            raise NotFound(f"Player {player_id} not found")
        return player_to_response(player)

    @app.put("/api/players/{player_id}", response_model=PlayerResponse)
    async def update_player(player_id: str, payload: PlayerUpdateRequest):
        player = store.update_player(player_id, payload.model_dump(exclude_unset=True))
        return player_to_response(player)

    @app.delete("/api/players/{player_id}")
    async def delete_player(player_id: str):
        store.delete_player(player_id)
        return {"message": "Player deleted successfully"}

    # Matchups --------------------------------------------------------------

    @app.get("/api/matchups", response_model=list[MatchupResponse])
    async def list_matchups(team_id: str | None = None, simulated: bool | None = None):
        return [
            matchup_to_response(matchup)
            for matchup in store.list_matchups(team_id=team_id, simulated=simulated)
        ]

    @app.post("/api/matchups", response_model=MatchupResponse, status_code=201)
    async def create_matchup(payload: MatchupCreateRequest):
        matchup = store.create_matchup(**payload.model_dump())
        return matchup_to_response(matchup)

    @app.get("/api/matchups/{matchup_id}", response_model=MatchupResponse)
    async def get_matchup(matchup_id: str):
        matchup = store.get_matchup(matchup_id)
        if matchup is None:
            raise NotFound(f"Matchup {matchup_id} not found")
        return matchup_to_response(matchup)

    @app.put("/api/matchups/{matchup_id}", response_model=MatchupResponse)
    async def update_matchup(matchup_id: str, payload: MatchupUpdateRequest):
        matchup = store.update_matchup(matchup_id, payload.model_dump(exclude_unset=True))
        return matchup_to_response(matchup)

    @app.delete("/api/matchups/{matchup_id}")
    async def delete_matchup(matchup_id: str):
        store.delete_matchup(matchup_id)
        return {"message": "Matchup deleted successfully"}

    @app.post("/api/matchups/{matchup_id}/simulate", response_model=SimulationResponse)
    async def simulate(matchup_id: str, request: Request):
        result = simulate_matchup(store, matchup_id, rng=request.app.state.rng)
        return SimulationResponse(
            matchup=matchup_to_response(result.matchup),
            winner_team_id=result.outcome.winner_team_id,
            loser_team_id=result.outcome.loser_team_id,
            tie=result.outcome.is_tie,
        )

    @app.get("/api/matchups/{matchup_id}/boxscore.csv")
    async def export_box_score(matchup_id: str):
        with store.snapshot() as tx:
            matchup = tx.require_matchup(matchup_id)
            teams = {
                team_id: tx.require_team(team_id)
                for team_id in (matchup.home_team_id, matchup.away_team_id)
            }
            players: dict[str, Player] = {}
            for line in matchup.stat_lines:
                player = tx.get_player(line.player_id)
                if player is not None:
                    players[line.player_id] = player
        csv_text = export_box_score_to_csv(matchup, teams=teams, players=players)
        return Response(
            content=csv_text,
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename={matchup_id}.csv"},
        )

    # League tables ---------------------------------------------------------

    @app.get("/api/standings", response_model=list[StandingResponse])
    async def standings():
        return [StandingResponse(**asdict(row)) for row in build_standings(store.list_teams())]

    @app.get("/api/leaders", response_model=list[LeaderResponse])
    async def leaders(
        category: StatCategory = "points",
        limit: int = Query(default=10, ge=1, le=100),
    ):
        rows = league_leaders(store.list_players(), category, limit=limit)
        return [LeaderResponse(**asdict(row)) for row in rows]

    return app
