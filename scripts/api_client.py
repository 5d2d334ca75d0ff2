"""Lightweight REST client for the sbasim API."""

from __future__ import annotations

import argparse
import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import httpx


def seed_from_fixture(client: httpx.Client, fixture_path: Path) -> list[dict]:
    data = json.loads(fixture_path.read_text(encoding="utf-8"))
    created: list[dict] = []
    for entry in data.get("teams", []):
        resp = client.post(
            "/api/teams",
            json={"name": entry["name"], "city": entry["city"], "logo_url": entry.get("logo_url")},
        )
        resp.raise_for_status()
        team = resp.json()
        print(f"Team created: {team['name']}")
        for player in entry.get("roster", []):
            resp = client.post("/api/players", json={**player, "team_id": team["team_id"]})
            if resp.status_code >= 400:
                print(f"Error creating player {player['first_name']} {player['last_name']}: {resp.text}")
                continue
            body = resp.json()
            print(f"Player created: {body['first_name']} {body['last_name']}")
        created.append(team)
    return created


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the sbasim REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("--seed", type=Path, metavar="FIXTURE", help="Create teams and players from a fixture JSON")
    parser.add_argument(
        "--schedule",
        nargs=2,
        metavar=("HOME_ID", "AWAY_ID"),
        help="Schedule a matchup one day from now at the home team's city",
    )
    parser.add_argument("--simulate", metavar="MATCHUP_ID", help="Simulate a matchup and print the result")
    parser.add_argument("--standings", action="store_true", help="Print the league table")
    args = parser.parse_args()

    with httpx.Client(base_url=args.base_url) as client:
        if args.seed:
            seed_from_fixture(client, args.seed)
        if args.schedule:
            home_id, away_id = args.schedule
            home = client.get(f"/api/teams/{home_id}")
            home.raise_for_status()
            resp = client.post(
                "/api/matchups",
                json={
                    "home_team_id": home_id,
                    "away_team_id": away_id,
                    "scheduled_at": (datetime.now(timezone.utc) + timedelta(days=1)).isoformat(),
                    "location": home.json()["city"],
                },
            )
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2))
        if args.simulate:
            resp = client.post(f"/api/matchups/{args.simulate}/simulate")
            if resp.status_code >= 400:
                raise SystemExit(f"Simulation failed ({resp.status_code}): {resp.text}")
            print(json.dumps(resp.json(), indent=2))
        if args.standings:
            resp = client.get("/api/standings")
            resp.raise_for_status()
            for row in resp.json():
                print(f"{row['rank']:>2}. {row['name']:<28} {row['wins']}-{row['losses']}")


if __name__ == "__main__":
    main()
