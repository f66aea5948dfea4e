import aiosqlite
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional, Any
import logging

from errors import ConcurrencyConflictError, NotFoundError
from models import Game, GameScore, ScoringType

logger = logging.getLogger(__name__)

# Fixed-width UTC format so range filters compare correctly as strings
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

DEFAULT_GAMES = [
    ("Queens", "LinkedIn Queens puzzle game", ScoringType.TIME),
    ("Pinpoint", "LinkedIn Pinpoint geography game", ScoringType.GUESSES),
    ("Crossclimb", "LinkedIn Crossclimb word ladder game", ScoringType.TIME),
]

_SCORE_COLUMNS = """
    gs.id, gs.game_id, gs.player_name, gs.guess_count, gs.completion_seconds,
    gs.date_achieved, gs.profile_url, gs.image_content_type,
    gs.score_image IS NOT NULL AS has_image, gs.version,
    g.name AS game_name, g.scoring_type AS scoring_type
"""

_VALUE_COLUMNS = {
    ScoringType.TIME: "gs.completion_seconds",
    ScoringType.GUESSES: "gs.guess_count",
}


def to_db_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def from_db_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _row_to_game(row: aiosqlite.Row) -> Game:
    return Game(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        created_date=from_db_timestamp(row["created_date"]),
        is_active=bool(row["is_active"]),
        scoring_type=ScoringType(row["scoring_type"]),
        version=row["version"],
    )


def _row_to_score(row: aiosqlite.Row) -> GameScore:
    seconds = row["completion_seconds"]
    return GameScore(
        id=row["id"],
        game_id=row["game_id"],
        player_name=row["player_name"],
        guess_count=row["guess_count"],
        completion_time=timedelta(seconds=seconds) if seconds is not None else None,
        date_achieved=from_db_timestamp(row["date_achieved"]),
        profile_url=row["profile_url"],
        image_content_type=row["image_content_type"],
        has_image=bool(row["has_image"]),
        version=row["version"],
        game_name=row["game_name"],
        scoring_type=ScoringType(row["scoring_type"]),
    )


def _seconds(value: Optional[timedelta]) -> Optional[float]:
    return value.total_seconds() if value is not None else None


class Database:
    """Async SQLite database wrapper."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._connection: Optional[aiosqlite.Connection] = None

    async def connect(self) -> None:
        """Connect to the database and run migrations."""
        self._connection = await aiosqlite.connect(self.db_path)
        self._connection.row_factory = aiosqlite.Row
        await self._connection.execute("PRAGMA foreign_keys = ON")
        await self._run_migrations()

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def _run_migrations(self) -> None:
        """Run all SQL migration files."""
        # Create migrations tracking table
        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS _migrations (
                name TEXT PRIMARY KEY,
                applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        await self._connection.commit()

        migrations_dir = Path(__file__).parent / "migrations"

        for migration_file in sorted(migrations_dir.glob("*.sql")):
            cursor = await self._connection.execute(
                "SELECT 1 FROM _migrations WHERE name = ?",
                (migration_file.name,)
            )
            if await cursor.fetchone():
                logger.debug(f"Skipping already applied migration: {migration_file.name}")
                continue

            logger.info(f"Running migration: {migration_file.name}")
            sql = migration_file.read_text()
            await self._connection.executescript(sql)
            await self._connection.execute(
                "INSERT INTO _migrations (name) VALUES (?)",
                (migration_file.name,)
            )
            await self._connection.commit()

    async def execute(
        self, query: str, params: tuple = ()
    ) -> aiosqlite.Cursor:
        """Execute a query and return the cursor."""
        cursor = await self._connection.execute(query, params)
        await self._connection.commit()
        return cursor

    async def fetch_one(
        self, query: str, params: tuple = ()
    ) -> Optional[aiosqlite.Row]:
        """Fetch a single row."""
        cursor = await self._connection.execute(query, params)
        return await cursor.fetchone()

    async def fetch_all(
        self, query: str, params: tuple = ()
    ) -> list[aiosqlite.Row]:
        """Fetch all rows."""
        cursor = await self._connection.execute(query, params)
        return await cursor.fetchall()

    async def fetch_value(
        self, query: str, params: tuple = ()
    ) -> Optional[Any]:
        """Fetch a single value from the first column of the first row."""
        row = await self.fetch_one(query, params)
        return row[0] if row else None

    async def _update_versioned(
        self,
        table: str,
        row_id: int,
        assignments: dict[str, Any],
        expected_version: Optional[int],
    ) -> None:
        """Update a row, bumping its version.

        Raises NotFoundError if the row is gone, ConcurrencyConflictError if
        it exists but no longer has ``expected_version``.
        """
        set_clause = ", ".join(f"{column} = ?" for column in assignments)
        query = f"UPDATE {table} SET {set_clause}, version = version + 1 WHERE id = ?"
        params = [*assignments.values(), row_id]
        if expected_version is not None:
            query += " AND version = ?"
            params.append(expected_version)

        cursor = await self.execute(query, tuple(params))
        if cursor.rowcount:
            return

        exists = await self.fetch_value(f"SELECT 1 FROM {table} WHERE id = ?", (row_id,))
        if exists is None:
            raise NotFoundError(f"{table} row {row_id} not found")
        raise ConcurrencyConflictError(f"{table} row {row_id} was modified by another request")

    # Games methods

    async def create_game(
        self,
        name: str,
        description: str,
        scoring_type: ScoringType,
        is_active: bool = True,
    ) -> Game:
        """Create a game. Returns the stored record."""
        cursor = await self.execute(
            """
            INSERT INTO games (name, description, created_date, is_active, scoring_type)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                name,
                description,
                to_db_timestamp(datetime.now(timezone.utc)),
                is_active,
                scoring_type.value,
            ),
        )
        return await self.get_game(cursor.lastrowid)

    async def get_game(self, game_id: int) -> Optional[Game]:
        row = await self.fetch_one("SELECT * FROM games WHERE id = ?", (game_id,))
        return _row_to_game(row) if row else None

    async def list_games(
        self,
        active_only: bool = True,
        scoring_type: Optional[ScoringType] = None,
    ) -> list[Game]:
        """List games ordered by id."""
        query = "SELECT * FROM games WHERE 1 = 1"
        params: list[Any] = []
        if active_only:
            query += " AND is_active = 1"
        if scoring_type is not None:
            query += " AND scoring_type = ?"
            params.append(scoring_type.value)
        query += " ORDER BY id"
        rows = await self.fetch_all(query, tuple(params))
        return [_row_to_game(row) for row in rows]

    async def update_game(
        self,
        game_id: int,
        name: str,
        description: str,
        is_active: bool,
        scoring_type: ScoringType,
        expected_version: Optional[int] = None,
    ) -> Game:
        await self._update_versioned(
            "games",
            game_id,
            {
                "name": name,
                "description": description,
                "is_active": is_active,
                "scoring_type": scoring_type.value,
            },
            expected_version,
        )
        return await self.get_game(game_id)

    async def deactivate_game(self, game_id: int) -> bool:
        """Soft-delete a game. Returns False if it does not exist."""
        cursor = await self.execute(
            "UPDATE games SET is_active = 0, version = version + 1 WHERE id = ?",
            (game_id,),
        )
        return cursor.rowcount > 0

    async def seed_default_games(self) -> int:
        """Insert the default games if the games table is empty."""
        count = await self.fetch_value("SELECT COUNT(*) FROM games")
        if count:
            return 0
        for name, description, scoring_type in DEFAULT_GAMES:
            await self.create_game(name, description, scoring_type)
        logger.info(f"Seeded {len(DEFAULT_GAMES)} default games")
        return len(DEFAULT_GAMES)

    # Scores methods

    async def add_score(
        self,
        game_id: int,
        player_name: str,
        guess_count: Optional[int] = None,
        completion_time: Optional[timedelta] = None,
        profile_url: Optional[str] = None,
        date_achieved: Optional[datetime] = None,
        image: Optional[bytes] = None,
        image_content_type: Optional[str] = None,
    ) -> GameScore:
        """Insert a score. ``date_achieved`` defaults to now."""
        cursor = await self.execute(
            """
            INSERT INTO game_scores
            (game_id, player_name, guess_count, completion_seconds, date_achieved,
             profile_url, score_image, image_content_type)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                game_id,
                player_name,
                guess_count,
                _seconds(completion_time),
                to_db_timestamp(date_achieved or datetime.now(timezone.utc)),
                profile_url,
                image,
                image_content_type,
            ),
        )
        return await self.get_score(cursor.lastrowid)

    async def get_score(self, score_id: int) -> Optional[GameScore]:
        row = await self.fetch_one(
            f"""
            SELECT {_SCORE_COLUMNS}
            FROM game_scores gs JOIN games g ON g.id = gs.game_id
            WHERE gs.id = ?
            """,
            (score_id,),
        )
        return _row_to_score(row) if row else None

    async def list_scores(self, game_id: Optional[int] = None) -> list[GameScore]:
        """All scores, newest first."""
        query = f"SELECT {_SCORE_COLUMNS} FROM game_scores gs JOIN games g ON g.id = gs.game_id"
        params: tuple = ()
        if game_id is not None:
            query += " WHERE gs.game_id = ?"
            params = (game_id,)
        query += " ORDER BY gs.date_achieved DESC, gs.id DESC"
        rows = await self.fetch_all(query, params)
        return [_row_to_score(row) for row in rows]

    async def get_scores_in_range(
        self,
        start: datetime,
        end: Optional[datetime] = None,
        game_id: Optional[int] = None,
    ) -> list[GameScore]:
        """Scores achieved in [start, end), oldest first."""
        query = f"""
            SELECT {_SCORE_COLUMNS}
            FROM game_scores gs JOIN games g ON g.id = gs.game_id
            WHERE gs.date_achieved >= ?
        """
        params: list[Any] = [to_db_timestamp(start)]
        if end is not None:
            query += " AND gs.date_achieved < ?"
            params.append(to_db_timestamp(end))
        if game_id is not None:
            query += " AND gs.game_id = ?"
            params.append(game_id)
        query += " ORDER BY gs.date_achieved, gs.id"
        rows = await self.fetch_all(query, tuple(params))
        return [_row_to_score(row) for row in rows]

    async def get_ranked_scores(
        self,
        game_id: int,
        scoring_type: ScoringType,
        limit: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[GameScore]:
        """Scores for a game, best first; ties keep submission order."""
        value_column = _VALUE_COLUMNS[scoring_type]
        query = f"""
            SELECT {_SCORE_COLUMNS}
            FROM game_scores gs JOIN games g ON g.id = gs.game_id
            WHERE gs.game_id = ? AND {value_column} IS NOT NULL
        """
        params: list[Any] = [game_id]
        if start is not None:
            query += " AND gs.date_achieved >= ?"
            params.append(to_db_timestamp(start))
        if end is not None:
            query += " AND gs.date_achieved < ?"
            params.append(to_db_timestamp(end))
        query += f" ORDER BY {value_column} ASC, gs.id ASC"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)
        rows = await self.fetch_all(query, tuple(params))
        return [_row_to_score(row) for row in rows]

    async def get_score_image(self, score_id: int) -> Optional[tuple[bytes, str]]:
        """Return (image bytes, content type), or None when there is no image."""
        row = await self.fetch_one(
            "SELECT score_image, image_content_type FROM game_scores WHERE id = ?",
            (score_id,),
        )
        if not row or row["score_image"] is None:
            return None
        return bytes(row["score_image"]), row["image_content_type"] or "application/octet-stream"

    async def update_score(
        self,
        score_id: int,
        game_id: int,
        player_name: str,
        guess_count: Optional[int],
        completion_time: Optional[timedelta],
        profile_url: Optional[str],
        date_achieved: Optional[datetime] = None,
        expected_version: Optional[int] = None,
    ) -> GameScore:
        assignments: dict[str, Any] = {
            "game_id": game_id,
            "player_name": player_name,
            "guess_count": guess_count,
            "completion_seconds": _seconds(completion_time),
            "profile_url": profile_url,
        }
        if date_achieved is not None:
            assignments["date_achieved"] = to_db_timestamp(date_achieved)
        await self._update_versioned("game_scores", score_id, assignments, expected_version)
        return await self.get_score(score_id)

    async def delete_score(self, score_id: int) -> bool:
        """Delete a score. Returns False if it did not exist."""
        cursor = await self.execute("DELETE FROM game_scores WHERE id = ?", (score_id,))
        return cursor.rowcount > 0
