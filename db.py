import sqlite3
import aiosqlite
import datetime
import logging
from contextlib import contextmanager, asynccontextmanager
from typing import List, Tuple, Optional

from algorithms.math_tools import MathTools
from config import YamlConfig
from models import MovementFamily, parse_timestamp
from settings_schema import validate_settings

logger = logging.getLogger(__name__)


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "programs": (
            """CREATE TABLE programs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    description TEXT,
                    created_at TEXT
                );""",
            ["id", "name", "description", "created_at"],
        ),
        "workouts": (
            """CREATE TABLE workouts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    program_id INTEGER NOT NULL,
                    name TEXT NOT NULL,
                    description TEXT,
                    order_index INTEGER NOT NULL DEFAULT 0,
                    FOREIGN KEY(program_id) REFERENCES programs(id) ON DELETE CASCADE
                );""",
            ["id", "program_id", "name", "description", "order_index"],
        ),
        "workout_rows": (
            """CREATE TABLE workout_rows (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    workout_id INTEGER NOT NULL,
                    order_label TEXT NOT NULL,
                    lift_name TEXT NOT NULL,
                    variant TEXT,
                    sets TEXT NOT NULL,
                    reps TEXT NOT NULL,
                    intensity_value TEXT,
                    intensity_type TEXT NOT NULL DEFAULT 'RPE',
                    rest TEXT,
                    is_anchor INTEGER NOT NULL DEFAULT 0,
                    movement_family TEXT NOT NULL DEFAULT 'Accessory',
                    FOREIGN KEY(workout_id) REFERENCES workouts(id) ON DELETE CASCADE
                );""",
            [
                "id",
                "workout_id",
                "order_label",
                "lift_name",
                "variant",
                "sets",
                "reps",
                "intensity_value",
                "intensity_type",
                "rest",
                "is_anchor",
                "movement_family",
            ],
        ),
        "logs": (
            """CREATE TABLE logs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    workout_row_id INTEGER NOT NULL,
                    weight REAL NOT NULL,
                    reps INTEGER NOT NULL,
                    rpe REAL,
                    notes TEXT,
                    date TEXT,
                    FOREIGN KEY(workout_row_id) REFERENCES workout_rows(id) ON DELETE CASCADE
                );""",
            ["id", "user_id", "workout_row_id", "weight", "reps", "rpe", "notes", "date"],
        ),
        "settings": (
            """CREATE TABLE settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );""",
            ["key", "value"],
        ),
    }

    _INDEXES = [
        "CREATE INDEX IF NOT EXISTS logs_user_id_date_idx ON logs (user_id, date DESC);",
        "CREATE INDEX IF NOT EXISTS logs_workout_row_id_date_idx ON logs (workout_row_id, date DESC);",
        "CREATE INDEX IF NOT EXISTS workout_rows_workout_id_order_label_idx ON workout_rows (workout_id, order_label);",
    ]

    def __init__(self, db_path: str = "workout.db") -> None:
        self._db_path = db_path
        self._ensure_schema()
        self._ensure_indexes()
        self._init_settings()
        self.vacuum()

    @contextmanager
    def _connection(self):
        connection = sqlite3.connect(self._db_path)
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute("PRAGMA foreign_keys=off;")
            # keep references from other tables pointing at the new table on rename
            cursor.execute("PRAGMA legacy_alter_table=ON;")
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                self._ensure_table(conn, table, sql, columns)
            cursor.execute("PRAGMA foreign_keys=on;")

    def _ensure_indexes(self) -> None:
        with self._connection() as conn:
            for sql in self._INDEXES:
                conn.execute(sql)

    def _ensure_table(
        self, conn: sqlite3.Connection, table: str, sql: str, columns: List[str]
    ) -> None:
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;", (table,)
        )
        if cur.fetchone() is None:
            conn.execute(sql)
            return

        cur = conn.execute(f"PRAGMA table_info({table});")
        existing_cols = [row[1] for row in cur.fetchall()]
        if existing_cols == columns:
            return

        logger.info("Migrating table %s", table)
        conn.execute(f"DROP TABLE IF EXISTS {table}_old;")
        conn.execute(f"ALTER TABLE {table} RENAME TO {table}_old;")
        conn.execute(sql)

        common = [c for c in existing_cols if c in columns]
        if common:
            cols = ", ".join(common)
            missing = [c for c in columns if c not in existing_cols]
            if missing:
                def default_val(col: str) -> str:
                    if col == "is_anchor":
                        return "0"
                    if col == "movement_family":
                        return "'Accessory'"
                    if col == "intensity_type":
                        return "'RPE'"
                    if col == "order_index":
                        return "0"
                    return "NULL"

                defaults = ", ".join(default_val(c) for c in missing)
                conn.execute(
                    f"INSERT INTO {table} ({cols}, {', '.join(missing)}) SELECT {cols}, {defaults} FROM {table}_old;"
                )
            else:
                conn.execute(
                    f"INSERT INTO {table} ({cols}) SELECT {cols} FROM {table}_old;"
                )
        conn.execute(f"DROP TABLE {table}_old;")

    def _init_settings(self) -> None:
        defaults = {
            "weight_unit": "lb",
            "load_increment": "5.0",
        }
        with self._connection() as conn:
            for key, value in defaults.items():
                conn.execute(
                    "INSERT OR IGNORE INTO settings (key, value) VALUES (?, ?);",
                    (key, value),
                )

    def vacuum(self) -> None:
        """Run SQLite VACUUM to reduce database size."""
        with self._connection() as conn:
            conn.execute("VACUUM;")


class BaseRepository(Database):
    """Base repository providing helper methods."""

    def execute(self, query: str, params: Tuple = ()) -> int:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.lastrowid

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()

    def _delete_all(self, table: str) -> None:
        self.execute(f"DELETE FROM {table};")


class AsyncDatabase(Database):
    """Provides asynchronous connection management."""

    @asynccontextmanager
    async def _async_connection(self):
        conn = await aiosqlite.connect(self._db_path)
        try:
            yield conn
            await conn.commit()
        finally:
            await conn.close()


class AsyncBaseRepository(AsyncDatabase):
    """Asynchronous variant of BaseRepository using aiosqlite."""

    async def execute(self, query: str, params: Tuple = ()) -> int:
        async with self._async_connection() as conn:
            cursor = await conn.execute(query, params)
            await conn.commit()
            return cursor.lastrowid

    async def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        async with self._async_connection() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
            return rows


class ProgramRepository(BaseRepository):
    """Repository for training programs."""

    def create(self, name: str, description: Optional[str] = None) -> int:
        if not name:
            raise ValueError("name is required")
        created = datetime.datetime.now(datetime.timezone.utc).isoformat()
        return self.execute(
            "INSERT INTO programs (name, description, created_at) VALUES (?, ?, ?);",
            (name, description, created),
        )

    def fetch_all_programs(self) -> List[Tuple[int, str, Optional[str], str]]:
        return self.fetch_all(
            "SELECT id, name, description, created_at FROM programs ORDER BY id;"
        )


class WorkoutRepository(BaseRepository):
    """Repository for workouts within a program."""

    def create(
        self,
        program_id: int,
        name: str,
        order_index: int,
        description: Optional[str] = None,
    ) -> int:
        return self.execute(
            "INSERT INTO workouts (program_id, name, description, order_index) VALUES (?, ?, ?, ?);",
            (program_id, name, description, order_index),
        )

    def fetch_for_program(self, program_id: int) -> List[Tuple[int, str, Optional[str], int]]:
        return self.fetch_all(
            "SELECT id, name, description, order_index FROM workouts "
            "WHERE program_id = ? ORDER BY order_index, id;",
            (program_id,),
        )


class WorkoutRowRepository(BaseRepository):
    """Repository for prescribed exercise rows."""

    INTENSITY_TYPES = {"RPE", "%1RM", "MAX", "Text"}

    def add(
        self,
        workout_id: int,
        order_label: str,
        lift_name: str,
        sets: str,
        reps: str,
        *,
        variant: Optional[str] = None,
        intensity_value: Optional[str] = None,
        intensity_type: str = "RPE",
        rest: Optional[str] = None,
        is_anchor: bool = False,
        movement_family: str = MovementFamily.ACCESSORY.value,
    ) -> int:
        family = MovementFamily.parse(movement_family)
        if intensity_type not in self.INTENSITY_TYPES:
            raise ValueError(f"unknown intensity type: {intensity_type}")
        return self.execute(
            "INSERT INTO workout_rows (workout_id, order_label, lift_name, variant, sets, reps, "
            "intensity_value, intensity_type, rest, is_anchor, movement_family) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);",
            (
                workout_id,
                order_label,
                lift_name,
                variant,
                sets,
                reps,
                intensity_value,
                intensity_type,
                rest,
                int(is_anchor),
                family.value,
            ),
        )

    def fetch_detail(self, row_id: int) -> dict:
        rows = self.fetch_all(
            "SELECT workout_id, order_label, lift_name, variant, sets, reps, intensity_value, "
            "intensity_type, rest, is_anchor, movement_family FROM workout_rows WHERE id = ?;",
            (row_id,),
        )
        if not rows:
            raise ValueError("workout row not found")
        (
            workout_id,
            order_label,
            lift_name,
            variant,
            sets,
            reps,
            intensity_value,
            intensity_type,
            rest,
            is_anchor,
            movement_family,
        ) = rows[0]
        return {
            "id": row_id,
            "workout_id": workout_id,
            "order_label": order_label,
            "lift_name": lift_name,
            "variant": variant,
            "sets": sets,
            "reps": reps,
            "intensity_value": intensity_value,
            "intensity_type": intensity_type,
            "rest": rest,
            "is_anchor": bool(is_anchor),
            "movement_family": movement_family,
        }


class _LogQueries:
    """SQL shared by the sync and async log repositories."""

    _SELECT = (
        "SELECT l.weight, l.reps, l.rpe, l.date, r.movement_family, r.is_anchor, "
        "l.id, l.workout_row_id FROM logs l "
        "JOIN workout_rows r ON l.workout_row_id = r.id "
    )

    @classmethod
    def history_query(
        cls,
        user_id: str,
        movement_family: Optional[str] = None,
        is_anchor: Optional[bool] = None,
        workout_row_id: Optional[int] = None,
    ) -> Tuple[str, Tuple]:
        query = cls._SELECT + "WHERE l.user_id = ?"
        params: list = [user_id]
        if movement_family:
            query += " AND r.movement_family = ?"
            params.append(MovementFamily.parse(movement_family).value)
        if is_anchor is not None:
            query += " AND r.is_anchor = ?"
            params.append(int(is_anchor))
        if workout_row_id:
            query += " AND l.workout_row_id = ?"
            params.append(workout_row_id)
        query += " ORDER BY l.date DESC, l.id DESC"
        return query, tuple(params)

    @classmethod
    def last_anchor_query(cls, user_id: str, movement_family: str) -> Tuple[str, Tuple]:
        query, params = cls.history_query(user_id, movement_family, True)
        return query + " LIMIT 1;", params


class LogRepository(BaseRepository, _LogQueries):
    """Repository for logged set executions."""

    def add(
        self,
        user_id: str,
        workout_row_id: int,
        weight: float,
        reps: int,
        rpe: Optional[float] = None,
        notes: Optional[str] = None,
        date: Optional[str] = None,
    ) -> int:
        if not user_id:
            raise ValueError("user_id is required")
        if weight < 0:
            raise ValueError("weight must be non-negative")
        if reps < 0:
            raise ValueError("reps must be non-negative")
        if rpe is not None and not 0 <= rpe <= MathTools.MAX_RPE:
            raise ValueError(f"rpe must be between 0 and {MathTools.MAX_RPE:g}")
        rows = self.fetch_all(
            "SELECT id FROM workout_rows WHERE id = ?;", (workout_row_id,)
        )
        if not rows:
            raise ValueError("workout row not found")
        performed_at = parse_timestamp(date) or datetime.datetime.now(datetime.timezone.utc)
        stamp = performed_at.astimezone(datetime.timezone.utc).isoformat()
        return self.execute(
            "INSERT INTO logs (user_id, workout_row_id, weight, reps, rpe, notes, date) "
            "VALUES (?, ?, ?, ?, ?, ?, ?);",
            (user_id, workout_row_id, float(weight), int(reps), rpe, notes, stamp),
        )

    def remove(self, log_id: int) -> None:
        self.execute("DELETE FROM logs WHERE id = ?;", (log_id,))

    def fetch_history(
        self,
        user_id: str,
        movement_family: Optional[str] = None,
        is_anchor: Optional[bool] = None,
        workout_row_id: Optional[int] = None,
    ) -> List[Tuple]:
        """Return ``(weight, reps, rpe, date, family, is_anchor, id, row_id)`` rows, newest first."""
        query, params = self.history_query(
            user_id, movement_family, is_anchor, workout_row_id
        )
        return self.fetch_all(query + ";", params)

    def last_anchor(self, user_id: str, movement_family: str) -> Optional[Tuple]:
        query, params = self.last_anchor_query(user_id, movement_family)
        rows = self.fetch_all(query, params)
        return rows[0] if rows else None


class AsyncLogRepository(AsyncBaseRepository, _LogQueries):
    """Async read paths over the logs table."""

    async def fetch_history(
        self,
        user_id: str,
        movement_family: Optional[str] = None,
        is_anchor: Optional[bool] = None,
        workout_row_id: Optional[int] = None,
    ) -> List[Tuple]:
        query, params = self.history_query(
            user_id, movement_family, is_anchor, workout_row_id
        )
        return list(await self.fetch_all(query + ";", params))

    async def last_anchor(self, user_id: str, movement_family: str) -> Optional[Tuple]:
        query, params = self.last_anchor_query(user_id, movement_family)
        rows = await self.fetch_all(query, params)
        return tuple(rows[0]) if rows else None


class SettingsRepository(BaseRepository):
    """Repository for application settings synchronized with YAML."""

    def __init__(
        self, db_path: str = "workout.db", yaml_path: str = "settings.yaml"
    ) -> None:
        super().__init__(db_path)
        self._yaml = YamlConfig(yaml_path)
        self._sync_from_yaml()
        self._sync_to_yaml()

    def _raw_all_settings(self) -> dict:
        rows = self.fetch_all("SELECT key, value FROM settings ORDER BY key;")
        result: dict[str, float | str] = {}
        for k, v in rows:
            try:
                result[k] = float(v)
            except ValueError:
                result[k] = v
        return result

    def _sync_from_yaml(self) -> None:
        data = self._yaml.load()
        if not data:
            return
        validate_settings(data)
        with self._connection() as conn:
            for key, value in data.items():
                conn.execute(
                    "INSERT INTO settings (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value=excluded.value;",
                    (key, str(value)),
                )

    def _sync_to_yaml(self) -> None:
        self._yaml.save(self._raw_all_settings())

    def get_text(self, key: str, default: str) -> str:
        self._sync_from_yaml()
        rows = self.fetch_all("SELECT value FROM settings WHERE key = ?;", (key,))
        return rows[0][0] if rows else default

    def set_text(self, key: str, value: str) -> None:
        data = self._raw_all_settings()
        data[key] = value
        validate_settings(data)
        self.execute(
            "INSERT INTO settings (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value;",
            (key, value),
        )
        self._sync_to_yaml()

    def get_float(self, key: str, default: float) -> float:
        try:
            return float(self.get_text(key, str(default)))
        except ValueError:
            return default

    def set_float(self, key: str, value: float) -> None:
        self.set_text(key, str(value))

    def all_settings(self) -> dict:
        self._sync_from_yaml()
        return self._raw_all_settings()
