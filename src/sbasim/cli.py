"""Command-line interface for seeding and running the league."""

from __future__ import annotations

import argparse
import json
import random
import sys
from dataclasses import asdict
from pathlib import Path

from sbasim.config import STAT_CATEGORIES
from sbasim.config_loader import LeagueFixture, seed_league
from sbasim.errors import SbasimError
from sbasim.persistence import LeagueStore
from sbasim.simulation import simulate_matchup
from sbasim.standings import build_standings, league_leaders


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulated Basketball Association league tools")
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="SQLite database path (defaults to $SBASIM_DB_PATH or the bundled location)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    seed = subparsers.add_parser("seed", help="Load teams and rosters from a JSON fixture")
    seed.add_argument("fixture", type=Path, help="Path to league fixture JSON")

    simulate = subparsers.add_parser("simulate", help="Simulate one or more scheduled matchups")
    simulate.add_argument("matchup_ids", nargs="*", help="Matchup IDs to simulate")
    simulate.add_argument("--all-pending", action="store_true", help="Simulate every unsimulated matchup")
    simulate.add_argument("--seed", type=int, default=None, help="Seed for reproducible results")

    subparsers.add_parser("standings", help="Print the league table")

    leaders = subparsers.add_parser("leaders", help="Print per-game leaders for a stat category")
    leaders.add_argument("--category", choices=STAT_CATEGORIES, default="points")
    leaders.add_argument("--limit", type=int, default=10)

    serve = subparsers.add_parser("serve", help="Run the REST API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    return parser.parse_args(argv)


def _cmd_seed(store: LeagueStore, args: argparse.Namespace) -> int:
    fixture = LeagueFixture.load(args.fixture)
    teams = seed_league(store, fixture)
    for team in teams:
        print(f"{team.team_id}  {team.name} ({team.city}) - {len(team.roster)} players")
    return 0


def _cmd_simulate(store: LeagueStore, args: argparse.Namespace) -> int:
    matchup_ids = list(args.matchup_ids)
    if args.all_pending:
        matchup_ids.extend(matchup.matchup_id for matchup in store.list_matchups(simulated=False))
    if not matchup_ids:
        print("No matchups to simulate", file=sys.stderr)
        return 1

    rng = random.Random(args.seed) if args.seed is not None else None
    teams = {team.team_id: team for team in store.list_teams()}
    failures = 0
    for matchup_id in matchup_ids:
        try:
            result = simulate_matchup(store, matchup_id, rng=rng)
        except SbasimError as exc:
            print(f"{matchup_id}: {exc.kind}: {exc}", file=sys.stderr)
            failures += 1
            continue
        matchup = result.matchup
        home = teams.get(matchup.home_team_id)
        away = teams.get(matchup.away_team_id)
        print(
            f"{matchup_id}: {home.name if home else matchup.home_team_id} {matchup.home_score}"
            f" - {matchup.away_score} {away.name if away else matchup.away_team_id}"
        )
    return 1 if failures else 0


def _cmd_standings(store: LeagueStore, args: argparse.Namespace) -> int:
    for row in build_standings(store.list_teams()):
        print(f"{row.rank:>2}. {row.name:<28} {row.wins:>3}-{row.losses:<3} {row.win_pct:.3f}")
    return 0


def _cmd_leaders(store: LeagueStore, args: argparse.Namespace) -> int:
    rows = league_leaders(store.list_players(), args.category, limit=args.limit)
    print(json.dumps([asdict(row) for row in rows], indent=2))
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from sbasim.api import create_app

    uvicorn.run(create_app(args.db), host=args.host, port=args.port)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    if args.command == "serve":
        return _cmd_serve(args)

    store = LeagueStore(args.db)
    handlers = {
        "seed": _cmd_seed,
        "simulate": _cmd_simulate,
        "standings": _cmd_standings,
        "leaders": _cmd_leaders,
    }
    try:
        return handlers[args.command](store, args)
    except SbasimError as exc:
        print(f"{exc.kind}: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
