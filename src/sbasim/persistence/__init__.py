"""Persistence layer for teams, players, matchups and their stat lines."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Mapping, Optional
from uuid import uuid4

from pydantic import ValidationError

from sbasim.config import LEAGUE_RULES, STAT_CATEGORIES
from sbasim.config.settings import DEFAULT_DB_PATH, busy_timeout, db_path_from_env
from sbasim.errors import (
    AlreadySimulated,
    ImmutableRecord,
    InvalidRoster,
    NotFound,
    TransactionConflict,
    ValidationFailed,
)
from sbasim.models import Matchup, Player, PlayerStats, StatLine, Team


PLAYER_FIELDS = ("first_name", "last_name", "position", "height_cm", "weight_lbs", "skill", "team_id")
# Fields shown in past box scores.
HISTORY_FIELDS = ("first_name", "last_name", "position")
TEAM_FIELDS = ("name", "city", "logo_url")
MATCHUP_FIELDS = ("home_team_id", "away_team_id", "scheduled_at", "location")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))


class LeagueTransaction:
    """Reads and writes bound to one open SQLite transaction.

    Instances are only handed out by :meth:`LeagueStore.transaction` and
    :meth:`LeagueStore.snapshot`; every write made through one either commits
    together with the rest or not at all.
    """

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn

    # Teams -----------------------------------------------------------------

    def get_team(self, team_id: str) -> Optional[Team]:
        row = self._conn.execute("SELECT * FROM teams WHERE id = ?", (team_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_team(row)

    def require_team(self, team_id: str) -> Team:
        team = self.get_team(team_id)
        if team is None:
            raise NotFound(f"Team {team_id} not found")
        return team

    def find_team_by_name(self, name: str) -> Optional[Team]:
        row = self._conn.execute("SELECT * FROM teams WHERE name = ?", (name,)).fetchone()
        if row is None:
            return None
        return self._row_to_team(row)

    def list_teams(self) -> List[Team]:
        rows = self._conn.execute("SELECT * FROM teams ORDER BY name").fetchall()
        return [self._row_to_team(row) for row in rows]

    def insert_team(self, team: Team) -> None:
        now = _utcnow().isoformat()
        self._conn.execute(
            """
            INSERT INTO teams (id, name, city, logo_url, wins, losses, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (team.team_id, team.name, team.city, team.logo_url, team.wins, team.losses, now, now),
        )

    def update_team_fields(self, team: Team) -> None:
        self._conn.execute(
            "UPDATE teams SET name = ?, city = ?, logo_url = ?, updated_at = ? WHERE id = ?",
            (team.name, team.city, team.logo_url, _utcnow().isoformat(), team.team_id),
        )

    def delete_team(self, team_id: str) -> None:
        self._conn.execute("UPDATE players SET team_id = NULL WHERE team_id = ?", (team_id,))
        self._conn.execute(
            "DELETE FROM matchups WHERE (home_team_id = ? OR away_team_id = ?) AND simulated = 0",
            (team_id, team_id),
        )
        self._conn.execute("DELETE FROM teams WHERE id = ?", (team_id,))

    def record_result(self, team_id: str, *, wins: int = 0, losses: int = 0) -> None:
        if wins < 0 or losses < 0:
            raise ValueError("standings counters only move forward")
        cursor = self._conn.execute(
            "UPDATE teams SET wins = wins + ?, losses = losses + ?, updated_at = ? WHERE id = ?",
            (wins, losses, _utcnow().isoformat(), team_id),
        )
        if cursor.rowcount != 1:
            raise NotFound(f"Team {team_id} not found")

    # Players ---------------------------------------------------------------

    def get_player(self, player_id: str) -> Optional[Player]:
        row = self._conn.execute("SELECT * FROM players WHERE id = ?", (player_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_player(row)

    def require_player(self, player_id: str) -> Player:
        player = self.get_player(player_id)
        if player is None:
            raise NotFound(f"Player {player_id} not found")
        return player

    def find_player_by_name(self, first_name: str, last_name: str) -> Optional[Player]:
        row = self._conn.execute(
            "SELECT * FROM players WHERE first_name = ? AND last_name = ?",
            (first_name, last_name),
        ).fetchone()
        if row is None:
            return None
        return self._row_to_player(row)

    def list_players(self, *, team_id: str | None = None) -> List[Player]:
        if team_id is None:
            rows = self._conn.execute("SELECT * FROM players ORDER BY last_name, first_name").fetchall()
        else:
            rows = self._conn.execute(
                "SELECT * FROM players WHERE team_id = ? ORDER BY rowid",
                (team_id,),
            ).fetchall()
        return [self._row_to_player(row) for row in rows]

    def roster(self, team_id: str) -> List[Player]:
        """Resolve a team's current roster into full player records."""

        rows = self._conn.execute(
            "SELECT * FROM players WHERE team_id = ? ORDER BY rowid",
            (team_id,),
        ).fetchall()
        players: list[Player] = []
        for row in rows:
            try:
                players.append(self._row_to_player(row))
            except ValidationError as exc:
                raise InvalidRoster(
                    f"Team {team_id} roster entry {row['id']} is not a valid player: {_first_error(exc)}"
                ) from exc
        return players

    def roster_size(self, team_id: str) -> int:
        row = self._conn.execute("SELECT COUNT(*) AS n FROM players WHERE team_id = ?", (team_id,)).fetchone()
        return int(row["n"])

    def insert_player(self, player: Player) -> None:
        now = _utcnow().isoformat()
        self._conn.execute(
            """
            INSERT INTO players (
                id, first_name, last_name, position, height_cm, weight_lbs, skill, team_id,
                points, assists, rebounds, steals, blocks, games_played, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                player.player_id,
                player.first_name,
                player.last_name,
                player.position,
                player.height_cm,
                player.weight_lbs,
                player.skill,
                player.team_id,
                player.stats.points,
                player.stats.assists,
                player.stats.rebounds,
                player.stats.steals,
                player.stats.blocks,
                player.stats.games_played,
                now,
                now,
            ),
        )

    def update_player_fields(self, player: Player) -> None:
        self._conn.execute(
            """
            UPDATE players
            SET first_name = ?, last_name = ?, position = ?, height_cm = ?,
                weight_lbs = ?, skill = ?, team_id = ?, updated_at = ?
            WHERE id = ?
            """,
            (
                player.first_name,
                player.last_name,
                player.position,
                player.height_cm,
                player.weight_lbs,
                player.skill,
                player.team_id,
                _utcnow().isoformat(),
                player.player_id,
            ),
        )

    def delete_player(self, player_id: str) -> None:
        self._conn.execute("DELETE FROM players WHERE id = ?", (player_id,))

    def player_has_history(self, player_id: str) -> bool:
        row = self._conn.execute(
            "SELECT 1 FROM stat_lines WHERE player_id = ? LIMIT 1",
            (player_id,),
        ).fetchone()
        return row is not None

    def add_player_line(self, line: StatLine) -> None:
        """Fold one game's line into a player's career totals, counting one game played."""

        cursor = self._conn.execute(
            """
            UPDATE players
            SET points = points + ?, assists = assists + ?, rebounds = rebounds + ?,
                steals = steals + ?, blocks = blocks + ?, games_played = games_played + 1,
                updated_at = ?
            WHERE id = ?
            """,
            (
                line.points,
                line.assists,
                line.rebounds,
                line.steals,
                line.blocks,
                _utcnow().isoformat(),
                line.player_id,
            ),
        )
        if cursor.rowcount != 1:
            raise InvalidRoster(f"Player {line.player_id} vanished during simulation")

    # Matchups --------------------------------------------------------------

    def get_matchup(self, matchup_id: str) -> Optional[Matchup]:
        row = self._conn.execute("SELECT * FROM matchups WHERE id = ?", (matchup_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_matchup(row)

    def require_matchup(self, matchup_id: str) -> Matchup:
        matchup = self.get_matchup(matchup_id)
        if matchup is None:
            raise NotFound(f"Matchup {matchup_id} not found")
        return matchup

    def list_matchups(self, *, team_id: str | None = None, simulated: bool | None = None) -> List[Matchup]:
        query = "SELECT * FROM matchups"
        conditions: list[str] = []
        params: list[Any] = []
        if team_id:
            conditions.append("(home_team_id = ? OR away_team_id = ?)")
            params.extend([team_id, team_id])
        if simulated is not None:
            conditions.append("simulated = ?")
            params.append(1 if simulated else 0)
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY scheduled_at, rowid"
        rows = self._conn.execute(query, tuple(params)).fetchall()
        return [self._row_to_matchup(row) for row in rows]

    def team_has_history(self, team_id: str) -> bool:
        row = self._conn.execute(
            "SELECT 1 FROM matchups WHERE (home_team_id = ? OR away_team_id = ?) AND simulated = 1 LIMIT 1",
            (team_id, team_id),
        ).fetchone()
        return row is not None

    def insert_matchup(self, matchup: Matchup) -> None:
        now = _utcnow().isoformat()
        self._conn.execute(
            """
            INSERT INTO matchups (
                id, home_team_id, away_team_id, scheduled_at, location,
                simulated, home_score, away_score, simulated_at, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, 0, NULL, NULL, NULL, ?, ?)
            """,
            (
                matchup.matchup_id,
                matchup.home_team_id,
                matchup.away_team_id,
                _as_utc(matchup.scheduled_at).isoformat(),
                matchup.location,
                now,
                now,
            ),
        )

    def update_matchup_fields(self, matchup: Matchup) -> None:
        cursor = self._conn.execute(
            """
            UPDATE matchups
            SET home_team_id = ?, away_team_id = ?, scheduled_at = ?, location = ?, updated_at = ?
            WHERE id = ? AND simulated = 0
            """,
            (
                matchup.home_team_id,
                matchup.away_team_id,
                _as_utc(matchup.scheduled_at).isoformat(),
                matchup.location,
                _utcnow().isoformat(),
                matchup.matchup_id,
            ),
        )
        if cursor.rowcount != 1:
            raise ImmutableRecord(f"Matchup {matchup.matchup_id} has already been simulated")

    def delete_matchup(self, matchup_id: str) -> None:
        cursor = self._conn.execute("DELETE FROM matchups WHERE id = ? AND simulated = 0", (matchup_id,))
        if cursor.rowcount != 1:
            raise ImmutableRecord(f"Matchup {matchup_id} has already been simulated")

    def finalize_matchup(
        self,
        matchup_id: str,
        *,
        home_score: int,
        away_score: int,
        stat_lines: Iterable[StatLine],
        simulated_at: datetime | None = None,
    ) -> None:
        """Flip ``simulated`` and store the final score and lines.

        The flag is check-and-set inside the open transaction, so a second
        writer that already holds a stale read still fails here.
        """

        simulated_at = simulated_at or _utcnow()
        cursor = self._conn.execute(
            """
            UPDATE matchups
            SET simulated = 1, home_score = ?, away_score = ?, simulated_at = ?, updated_at = ?
            WHERE id = ? AND simulated = 0
            """,
            (home_score, away_score, simulated_at.isoformat(), simulated_at.isoformat(), matchup_id),
        )
        if cursor.rowcount != 1:
            if self.get_matchup(matchup_id) is None:
                raise NotFound(f"Matchup {matchup_id} not found")
            raise AlreadySimulated(f"Matchup {matchup_id} has already been simulated")
        self._conn.executemany(
            """
            INSERT INTO stat_lines (
                matchup_id, player_id, team_id, points, assists, rebounds, steals, blocks
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    matchup_id,
                    line.player_id,
                    line.team_id,
                    line.points,
                    line.assists,
                    line.rebounds,
                    line.steals,
                    line.blocks,
                )
                for line in stat_lines
            ],
        )

    # Row mapping -----------------------------------------------------------

    def _row_to_team(self, row: sqlite3.Row) -> Team:
        roster_rows = self._conn.execute(
            "SELECT id FROM players WHERE team_id = ? ORDER BY rowid",
            (row["id"],),
        ).fetchall()
        return Team(
            team_id=row["id"],
            name=row["name"],
            city=row["city"],
            logo_url=row["logo_url"],
            wins=row["wins"],
            losses=row["losses"],
            roster=[roster_row["id"] for roster_row in roster_rows],
        )

    def _row_to_player(self, row: sqlite3.Row) -> Player:
        return Player(
            player_id=row["id"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            position=row["position"],
            height_cm=row["height_cm"],
            weight_lbs=row["weight_lbs"],
            skill=row["skill"],
            team_id=row["team_id"],
            stats=PlayerStats(
                points=row["points"],
                assists=row["assists"],
                rebounds=row["rebounds"],
                steals=row["steals"],
                blocks=row["blocks"],
                games_played=row["games_played"],
            ),
        )

    def _row_to_matchup(self, row: sqlite3.Row) -> Matchup:
        line_rows = self._conn.execute(
            "SELECT * FROM stat_lines WHERE matchup_id = ? ORDER BY rowid",
            (row["id"],),
        ).fetchall()
        return Matchup(
            matchup_id=row["id"],
            home_team_id=row["home_team_id"],
            away_team_id=row["away_team_id"],
            scheduled_at=datetime.fromisoformat(row["scheduled_at"]),
            location=row["location"],
            simulated=bool(row["simulated"]),
            home_score=row["home_score"],
            away_score=row["away_score"],
            simulated_at=_parse_ts(row["simulated_at"]),
            stat_lines=[
                StatLine(
                    player_id=line["player_id"],
                    team_id=line["team_id"],
                    **{category: line[category] for category in STAT_CATEGORIES},
                )
                for line in line_rows
            ],
        )


class LeagueStore:
    """SQLite-backed store for the league.

    Every public write runs inside :meth:`transaction`, which opens the
    database with ``BEGIN IMMEDIATE`` so concurrent writers are serialized by
    SQLite's write lock. A writer that cannot obtain the lock within the busy
    timeout fails with :class:`TransactionConflict` and leaves nothing behind.
    """

    def __init__(self, db_path: Path | str | None = None, *, timeout: float | None = None):
        self._use_uri = False
        self.timeout = busy_timeout() if timeout is None else timeout
        env_db = db_path_from_env()
        if db_path is not None:
            target: Path | str = db_path
        elif env_db:
            target = env_db
        else:
            target = DEFAULT_DB_PATH
        if isinstance(target, str) and target.startswith("file:"):
            self.db_path: Path | str = target
            self._use_uri = True
        else:
            self.db_path = Path(target)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(
            self.db_path,
            timeout=self.timeout,
            isolation_level=None,
            uri=self._use_uri,
        )
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        conn = self._connect()
        try:
            self._create_schema(conn)
        finally:
            conn.close()

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS teams (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL UNIQUE,
                city TEXT NOT NULL,
                logo_url TEXT,
                wins INTEGER NOT NULL DEFAULT 0 CHECK (wins >= 0),
                losses INTEGER NOT NULL DEFAULT 0 CHECK (losses >= 0),
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS players (
                id TEXT PRIMARY KEY,
                first_name TEXT NOT NULL,
                last_name TEXT NOT NULL,
                position TEXT NOT NULL,
                height_cm REAL NOT NULL,
                weight_lbs REAL NOT NULL,
                skill INTEGER NOT NULL,
                team_id TEXT,
                points INTEGER NOT NULL DEFAULT 0,
                assists INTEGER NOT NULL DEFAULT 0,
                rebounds INTEGER NOT NULL DEFAULT 0,
                steals INTEGER NOT NULL DEFAULT 0,
                blocks INTEGER NOT NULL DEFAULT 0,
                games_played INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                UNIQUE (first_name, last_name)
            )
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS idx_players_team ON players (team_id)")
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS matchups (
                id TEXT PRIMARY KEY,
                home_team_id TEXT NOT NULL,
                away_team_id TEXT NOT NULL,
                scheduled_at TEXT NOT NULL,
                location TEXT NOT NULL,
                simulated INTEGER NOT NULL DEFAULT 0,
                home_score INTEGER,
                away_score INTEGER,
                simulated_at TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                CHECK (home_team_id <> away_team_id)
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS stat_lines (
                matchup_id TEXT NOT NULL,
                player_id TEXT NOT NULL,
                team_id TEXT NOT NULL,
                points INTEGER NOT NULL,
                assists INTEGER NOT NULL,
                rebounds INTEGER NOT NULL,
                steals INTEGER NOT NULL,
                blocks INTEGER NOT NULL,
                PRIMARY KEY (matchup_id, player_id)
            )
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS idx_stat_lines_player ON stat_lines (player_id)")

    @contextmanager
    def _unit_of_work(self, begin: str) -> Iterator[LeagueTransaction]:
        conn = self._connect()
        try:
            try:
                conn.execute(begin)
                yield LeagueTransaction(conn)
                conn.execute("COMMIT")
            except sqlite3.IntegrityError as exc:
                raise TransactionConflict(f"Write rejected by the store: {exc}") from exc
            except sqlite3.OperationalError as exc:
                message = str(exc).lower()
                if "locked" in message or "busy" in message:
                    raise TransactionConflict(f"Could not commit league update: {exc}") from exc
                raise
        except BaseException:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        finally:
            conn.close()

    def transaction(self):
        """Open a write transaction; commits on clean exit, rolls back on any error."""

        return self._unit_of_work("BEGIN IMMEDIATE")

    def snapshot(self):
        """Open a read transaction giving a consistent view across several queries."""

        return self._unit_of_work("BEGIN")

    # Reads -----------------------------------------------------------------

    def get_team(self, team_id: str) -> Optional[Team]:
        with self.snapshot() as tx:
            return tx.get_team(team_id)

    def list_teams(self) -> List[Team]:
        with self.snapshot() as tx:
            return tx.list_teams()

    def get_player(self, player_id: str) -> Optional[Player]:
        with self.snapshot() as tx:
            return tx.get_player(player_id)

    def list_players(self, *, team_id: str | None = None) -> List[Player]:
        with self.snapshot() as tx:
            return tx.list_players(team_id=team_id)

    def get_matchup(self, matchup_id: str) -> Optional[Matchup]:
        with self.snapshot() as tx:
            return tx.get_matchup(matchup_id)

    def list_matchups(self, *, team_id: str | None = None, simulated: bool | None = None) -> List[Matchup]:
        with self.snapshot() as tx:
            return tx.list_matchups(team_id=team_id, simulated=simulated)

    # Teams -----------------------------------------------------------------

    def create_team(self, *, name: str, city: str, logo_url: str | None = None, team_id: str | None = None) -> Team:
        team = _build(Team, team_id=team_id or uuid4().hex, name=name, city=city, logo_url=logo_url)
        with self.transaction() as tx:
            if tx.find_team_by_name(team.name) is not None:
                raise ValidationFailed("Team name must be unique.")
            tx.insert_team(team)
            return tx.require_team(team.team_id)

    def update_team(self, team_id: str, changes: Mapping[str, Any]) -> Team:
        with self.transaction() as tx:
            existing = tx.require_team(team_id)
            merged = existing.model_dump()
            merged.update({key: value for key, value in changes.items() if key in TEAM_FIELDS})
            updated = _build(Team, **merged)
            clash = tx.find_team_by_name(updated.name)
            if clash is not None and clash.team_id != team_id:
                raise ValidationFailed("Team name must be unique.")
            tx.update_team_fields(updated)
            return tx.require_team(team_id)

    def delete_team(self, team_id: str) -> None:
        with self.transaction() as tx:
            tx.require_team(team_id)
            if tx.team_has_history(team_id):
                raise ImmutableRecord(f"Team {team_id} has simulated matchups and cannot be deleted")
            tx.delete_team(team_id)

    # Players ---------------------------------------------------------------

    def create_player(
        self,
        *,
        first_name: str,
        last_name: str,
        position: str,
        height_cm: float,
        weight_lbs: float,
        skill: int,
        team_id: str | None = None,
        player_id: str | None = None,
    ) -> Player:
        player = _build(
            Player,
            player_id=player_id or uuid4().hex,
            first_name=first_name,
            last_name=last_name,
            position=position.upper() if isinstance(position, str) else position,
            height_cm=height_cm,
            weight_lbs=weight_lbs,
            skill=skill,
            team_id=team_id or None,
        )
        with self.transaction() as tx:
            self._check_player_name(tx, player)
            if player.team_id is not None:
                self._check_roster_space(tx, player.team_id)
            tx.insert_player(player)
            return tx.require_player(player.player_id)

    def update_player(self, player_id: str, changes: Mapping[str, Any]) -> Player:
        with self.transaction() as tx:
            existing = tx.require_player(player_id)
            merged = existing.model_dump()
            merged.update({key: value for key, value in changes.items() if key in PLAYER_FIELDS})
            if merged.get("team_id") == "":
                merged["team_id"] = None
            if isinstance(merged.get("position"), str):
                merged["position"] = merged["position"].upper()
            updated = _build(Player, **merged)
            if tx.player_has_history(player_id):
                frozen = [field for field in HISTORY_FIELDS if getattr(updated, field) != getattr(existing, field)]
                if frozen:
                    raise ImmutableRecord(
                        f"Player {player_id} appears in simulated matchups; {', '.join(frozen)} cannot change"
                    )
            self._check_player_name(tx, updated)
            if updated.team_id is not None and updated.team_id != existing.team_id:
                self._check_roster_space(tx, updated.team_id)
            tx.update_player_fields(updated)
            return tx.require_player(player_id)

    def delete_player(self, player_id: str) -> None:
        with self.transaction() as tx:
            tx.require_player(player_id)
            if tx.player_has_history(player_id):
                raise ImmutableRecord(f"Player {player_id} appears in simulated matchups and cannot be deleted")
            tx.delete_player(player_id)

    def _check_player_name(self, tx: LeagueTransaction, player: Player) -> None:
        clash = tx.find_player_by_name(player.first_name, player.last_name)
        if clash is not None and clash.player_id != player.player_id:
            raise ValidationFailed("Player name must be unique.")

    def _check_roster_space(self, tx: LeagueTransaction, team_id: str) -> None:
        tx.require_team(team_id)
        limit = LEAGUE_RULES.roster_max_players
        if tx.roster_size(team_id) >= limit:
            raise ValidationFailed(f"Team roster is full (maximum {limit} players allowed).")

    # Matchups --------------------------------------------------------------

    def create_matchup(
        self,
        *,
        home_team_id: str,
        away_team_id: str,
        scheduled_at: datetime,
        location: str,
        matchup_id: str | None = None,
        now: datetime | None = None,
    ) -> Matchup:
        matchup = _build(
            Matchup,
            matchup_id=matchup_id or uuid4().hex,
            home_team_id=home_team_id,
            away_team_id=away_team_id,
            scheduled_at=scheduled_at,
            location=location,
        )
        with self.transaction() as tx:
            self._check_matchup(tx, matchup, now=now, check_date=True)
            tx.insert_matchup(matchup)
            return tx.require_matchup(matchup.matchup_id)

    def update_matchup(self, matchup_id: str, changes: Mapping[str, Any], *, now: datetime | None = None) -> Matchup:
        with self.transaction() as tx:
            existing = tx.require_matchup(matchup_id)
            if existing.simulated:
                raise ImmutableRecord(f"Matchup {matchup_id} has already been simulated")
            merged = existing.model_dump()
            merged.update({key: value for key, value in changes.items() if key in MATCHUP_FIELDS})
            updated = _build(Matchup, **merged)
            self._check_matchup(tx, updated, now=now, check_date="scheduled_at" in changes)
            tx.update_matchup_fields(updated)
            return tx.require_matchup(matchup_id)

    def delete_matchup(self, matchup_id: str) -> None:
        with self.transaction() as tx:
            existing = tx.require_matchup(matchup_id)
            if existing.simulated:
                raise ImmutableRecord(f"Matchup {matchup_id} has already been simulated")
            tx.delete_matchup(matchup_id)

    def _check_matchup(
        self,
        tx: LeagueTransaction,
        matchup: Matchup,
        *,
        now: datetime | None,
        check_date: bool,
    ) -> None:
        if matchup.home_team_id == matchup.away_team_id:
            raise ValidationFailed("Home team and away team must be different.")
        tx.require_team(matchup.home_team_id)
        tx.require_team(matchup.away_team_id)
        if check_date and _as_utc(matchup.scheduled_at) < _as_utc(now or _utcnow()):
            raise ValidationFailed("Game date cannot be in the past.")


def _build(model, **values):
    try:
        return model(**values)
    except ValidationError as exc:
        raise ValidationFailed(_first_error(exc)) from exc


__all__ = [
    "LeagueStore",
    "LeagueTransaction",
]
