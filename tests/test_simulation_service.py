import random
import sqlite3
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from sbasim.errors import AlreadySimulated, InvalidRoster, NotFound, TransactionConflict
from sbasim.persistence import LeagueStore, LeagueTransaction
from sbasim.simulation import simulate_matchup
from sbasim.simulation import service as simulation_service


class FractionRandom:
    def __init__(self, fraction: float):
        self.fraction = fraction

    def uniform(self, a: float, b: float) -> float:
        return a + (b - a) * self.fraction


def _future(days: int = 1) -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=days)


@pytest.fixture
def store(tmp_path: Path) -> LeagueStore:
    return LeagueStore(tmp_path / "league.sqlite")


@pytest.fixture
def league(store: LeagueStore) -> dict:
    """Team A (one PG, skill 90) hosting Team B (one C, skill 50)."""

    team_a = store.create_team(name="Team A", city="Alpha")
    team_b = store.create_team(name="Team B", city="Beta")
    guard = store.create_player(
        first_name="Point",
        last_name="Guard",
        position="PG",
        height_cm=190,
        weight_lbs=187,
        skill=90,
        team_id=team_a.team_id,
    )
    center = store.create_player(
        first_name="Big",
        last_name="Center",
        position="C",
        height_cm=210,
        weight_lbs=250,
        skill=50,
        team_id=team_b.team_id,
    )
    matchup = store.create_matchup(
        home_team_id=team_a.team_id,
        away_team_id=team_b.team_id,
        scheduled_at=_future(),
        location="Alpha",
    )
    return {"home": team_a, "away": team_b, "guard": guard, "center": center, "matchup": matchup}


def _snapshot(store: LeagueStore, league: dict) -> dict:
    return {
        "matchup": store.get_matchup(league["matchup"].matchup_id),
        "home": store.get_team(league["home"].team_id),
        "away": store.get_team(league["away"].team_id),
        "guard": store.get_player(league["guard"].player_id),
        "center": store.get_player(league["center"].player_id),
    }


def test_single_player_scenario(store: LeagueStore, league: dict):
    result = simulate_matchup(store, league["matchup"].matchup_id, rng=FractionRandom(0.3))

    matchup = result.matchup
    assert matchup.simulated is True
    assert matchup.simulated_at is not None
    assert (matchup.home_score, matchup.away_score) == (25, 9)
    lines = {line.player_id: line for line in matchup.stat_lines}
    guard_line = lines[league["guard"].player_id]
    center_line = lines[league["center"].player_id]
    assert guard_line.team_id == league["home"].team_id
    assert center_line.team_id == league["away"].team_id
    assert (guard_line.points, guard_line.assists, guard_line.rebounds, guard_line.steals, guard_line.blocks) == (
        25,
        12,
        3,
        4,
        2,
    )
    assert (center_line.points, center_line.assists, center_line.rebounds, center_line.steals, center_line.blocks) == (
        9,
        2,
        6,
        1,
        3,
    )
    assert result.outcome.winner_team_id == league["home"].team_id
    assert result.outcome.loser_team_id == league["away"].team_id

    after = _snapshot(store, league)
    assert (after["home"].wins, after["home"].losses) == (1, 0)
    assert (after["away"].wins, after["away"].losses) == (0, 1)
    assert after["guard"].stats.games_played == 1
    assert after["guard"].stats.points == 25
    assert after["guard"].stats.assists == 12
    assert after["center"].stats.games_played == 1
    assert after["center"].stats.rebounds == 6
    assert after["center"].stats.blocks == 3


def test_scores_equal_sum_of_points(store: LeagueStore):
    home = store.create_team(name="Home", city="Here")
    away = store.create_team(name="Away", city="There")
    positions = ["PG", "SG", "SF", "PF", "C"]
    for idx, position in enumerate(positions):
        store.create_player(
            first_name="Home",
            last_name=f"P{idx}",
            position=position,
            height_cm=185 + idx * 6,
            weight_lbs=180 + idx * 15,
            skill=60 + idx * 7,
            team_id=home.team_id,
        )
        store.create_player(
            first_name="Away",
            last_name=f"P{idx}",
            position=position,
            height_cm=188 + idx * 5,
            weight_lbs=190 + idx * 12,
            skill=85 - idx * 5,
            team_id=away.team_id,
        )
    matchup = store.create_matchup(
        home_team_id=home.team_id,
        away_team_id=away.team_id,
        scheduled_at=_future(),
        location="Here",
    )

    result = simulate_matchup(store, matchup.matchup_id, rng=random.Random(2024))

    final = result.matchup
    assert len(final.stat_lines) == 10
    home_points = sum(line.points for line in final.stat_lines if line.team_id == home.team_id)
    away_points = sum(line.points for line in final.stat_lines if line.team_id == away.team_id)
    assert final.home_score == home_points
    assert final.away_score == away_points
    assert store.get_matchup(matchup.matchup_id) == final


def test_seeded_simulations_are_repeatable(tmp_path: Path):
    scores = []
    for name in ("one", "two"):
        store = LeagueStore(tmp_path / f"{name}.sqlite")
        home = store.create_team(name="Home", city="Here")
        away = store.create_team(name="Away", city="There")
        for team, skill in ((home, 80), (away, 70)):
            store.create_player(
                first_name=team.name,
                last_name="Starter",
                position="SF",
                height_cm=201,
                weight_lbs=220,
                skill=skill,
                team_id=team.team_id,
            )
        matchup = store.create_matchup(
            home_team_id=home.team_id,
            away_team_id=away.team_id,
            scheduled_at=_future(),
            location="Here",
        )
        result = simulate_matchup(store, matchup.matchup_id, rng=random.Random(7))
        scores.append(
            (result.matchup.home_score, result.matchup.away_score, [line.rebounds for line in result.matchup.stat_lines])
        )
    assert scores[0] == scores[1]


def test_second_simulation_is_rejected(store: LeagueStore, league: dict):
    matchup_id = league["matchup"].matchup_id
    simulate_matchup(store, matchup_id, rng=FractionRandom(0.3))
    first = _snapshot(store, league)

    with pytest.raises(AlreadySimulated):
        simulate_matchup(store, matchup_id, rng=FractionRandom(0.9))

    assert _snapshot(store, league) == first
    assert first["guard"].stats.games_played == 1
    assert first["home"].wins == 1


def test_tie_leaves_records_untouched(store: LeagueStore):
    home = store.create_team(name="Home", city="Here")
    away = store.create_team(name="Away", city="There")
    matchup = store.create_matchup(
        home_team_id=home.team_id,
        away_team_id=away.team_id,
        scheduled_at=_future(),
        location="Here",
    )

    result = simulate_matchup(store, matchup.matchup_id)

    assert result.outcome.is_tie
    assert result.outcome.winner_team_id is None
    assert (result.matchup.home_score, result.matchup.away_score) == (0, 0)
    assert result.matchup.simulated is True
    assert result.matchup.stat_lines == []
    for team_id in (home.team_id, away.team_id):
        team = store.get_team(team_id)
        assert (team.wins, team.losses) == (0, 0)


def test_tie_with_players_still_counts_games(store: LeagueStore):
    home = store.create_team(name="Home", city="Here")
    away = store.create_team(name="Away", city="There")
    twins = []
    for team in (home, away):
        twins.append(
            store.create_player(
                first_name="Twin",
                last_name=team.name,
                position="SG",
                height_cm=196,
                weight_lbs=200,
                skill=80,
                team_id=team.team_id,
            )
        )
    matchup = store.create_matchup(
        home_team_id=home.team_id,
        away_team_id=away.team_id,
        scheduled_at=_future(),
        location="Here",
    )

    result = simulate_matchup(store, matchup.matchup_id, rng=FractionRandom(0.5))

    assert result.matchup.home_score == result.matchup.away_score
    assert store.get_team(home.team_id).wins == 0
    assert store.get_team(away.team_id).losses == 0
    assert all(store.get_player(p.player_id).stats.games_played == 1 for p in twins)


def test_empty_roster_contributes_nothing(store: LeagueStore, league: dict):
    store.update_player(league["center"].player_id, {"team_id": None})

    result = simulate_matchup(store, league["matchup"].matchup_id, rng=FractionRandom(0.3))

    assert result.matchup.away_score == 0
    assert result.matchup.home_score == 25
    assert [line.player_id for line in result.matchup.stat_lines] == [league["guard"].player_id]
    assert store.get_team(league["away"].team_id).losses == 1
    assert store.get_player(league["center"].player_id).stats.games_played == 0


def test_roster_is_read_at_simulation_time(store: LeagueStore, league: dict):
    late_signing = store.create_player(
        first_name="Late",
        last_name="Signing",
        position="SF",
        height_cm=203,
        weight_lbs=210,
        skill=70,
        team_id=league["away"].team_id,
    )

    result = simulate_matchup(store, league["matchup"].matchup_id, rng=FractionRandom(0.3))

    assert late_signing.player_id in {line.player_id for line in result.matchup.stat_lines}
    assert store.get_player(late_signing.player_id).stats.games_played == 1


def test_unknown_matchup(store: LeagueStore):
    with pytest.raises(NotFound):
        simulate_matchup(store, "does-not-exist")


def test_missing_team_is_not_found(store: LeagueStore, league: dict):
    with sqlite3.connect(store.db_path) as conn:
        conn.execute("DELETE FROM teams WHERE id = ?", (league["away"].team_id,))

    with pytest.raises(NotFound):
        simulate_matchup(store, league["matchup"].matchup_id, rng=FractionRandom(0.3))

    assert store.get_matchup(league["matchup"].matchup_id).simulated is False
    assert store.get_team(league["home"].team_id).wins == 0


def test_unreadable_roster_entry(store: LeagueStore, league: dict):
    with sqlite3.connect(store.db_path) as conn:
        conn.execute(
            """
            INSERT INTO players (
                id, first_name, last_name, position, height_cm, weight_lbs, skill, team_id,
                created_at, updated_at
            ) VALUES ('broken', 'Broken', 'Record', 'SF', 200, 220, 150, ?, 'x', 'x')
            """,
            (league["away"].team_id,),
        )

    with pytest.raises(InvalidRoster):
        simulate_matchup(store, league["matchup"].matchup_id, rng=FractionRandom(0.3))

    assert _snapshot(store, league)["matchup"].simulated is False
    assert store.get_player(league["guard"].player_id).stats.games_played == 0


def test_failure_after_aggregation_rolls_everything_back(store: LeagueStore, league: dict, monkeypatch):
    before = _snapshot(store, league)
    real_apply = simulation_service.apply_outcome

    def apply_then_fail(tx, outcome, stat_lines):
        real_apply(tx, outcome, stat_lines)
        raise RuntimeError("injected failure after aggregation")

    monkeypatch.setattr(simulation_service, "apply_outcome", apply_then_fail)
    with pytest.raises(RuntimeError, match="injected"):
        simulate_matchup(store, league["matchup"].matchup_id, rng=FractionRandom(0.3))

    assert _snapshot(store, league) == before


def test_failure_during_team_update_rolls_everything_back(store: LeagueStore, league: dict, monkeypatch):
    before = _snapshot(store, league)
    real_record = LeagueTransaction.record_result
    calls = []

    def record_once_then_fail(self, team_id, *, wins=0, losses=0):
        calls.append(team_id)
        if len(calls) > 1:
            raise TransactionConflict("injected conflict on second team")
        return real_record(self, team_id, wins=wins, losses=losses)

    monkeypatch.setattr(LeagueTransaction, "record_result", record_once_then_fail)
    with pytest.raises(TransactionConflict):
        simulate_matchup(store, league["matchup"].matchup_id, rng=FractionRandom(0.3))

    assert _snapshot(store, league) == before


def test_failure_finalizing_matchup_rolls_back_aggregates(store: LeagueStore, league: dict, monkeypatch):
    before = _snapshot(store, league)

    def fail_finalize(self, matchup_id, **kwargs):
        raise TransactionConflict("injected conflict on matchup write")

    monkeypatch.setattr(LeagueTransaction, "finalize_matchup", fail_finalize)
    with pytest.raises(TransactionConflict):
        simulate_matchup(store, league["matchup"].matchup_id, rng=FractionRandom(0.3))
    assert _snapshot(store, league) == before

    monkeypatch.undo()
    simulate_matchup(store, league["matchup"].matchup_id, rng=FractionRandom(0.3))
    after = _snapshot(store, league)
    assert after["guard"].stats.games_played == 1
    assert after["home"].wins == 1


def test_locked_store_reports_conflict(store: LeagueStore, league: dict):
    impatient = LeagueStore(store.db_path, timeout=0.05)

    with store.transaction():
        with pytest.raises(TransactionConflict):
            simulate_matchup(impatient, league["matchup"].matchup_id, rng=FractionRandom(0.3))

    assert store.get_matchup(league["matchup"].matchup_id).simulated is False


def test_concurrent_simulations_count_once(store: LeagueStore, league: dict):
    matchup_id = league["matchup"].matchup_id

    def attempt(seed: int) -> str:
        try:
            simulate_matchup(store, matchup_id, rng=random.Random(seed))
        except (AlreadySimulated, TransactionConflict) as exc:
            return exc.kind
        return "ok"

    with ThreadPoolExecutor(max_workers=8) as pool:
        outcomes = list(pool.map(attempt, range(8)))

    assert outcomes.count("ok") == 1
    assert set(outcomes) - {"ok"} <= {"already_simulated", "transaction_conflict"}
    after = _snapshot(store, league)
    assert after["guard"].stats.games_played == 1
    assert after["center"].stats.games_played == 1
    assert after["home"].wins + after["home"].losses + after["away"].wins + after["away"].losses in (0, 2)
    assert len(after["matchup"].stat_lines) == 2
