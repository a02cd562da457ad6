import sqlite3
import aiosqlite
import csv
import os
import datetime
from contextlib import contextmanager, asynccontextmanager
from typing import List, Tuple, Optional


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "exercises": (
            """CREATE TABLE exercises (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL UNIQUE,
                    category TEXT NOT NULL,
                    difficulty_level INTEGER NOT NULL,
                    instructions TEXT NOT NULL DEFAULT '',
                    video_url TEXT
                );""",
            ["id", "name", "category", "difficulty_level", "instructions", "video_url"],
        ),
        "programs": (
            """CREATE TABLE programs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    phase INTEGER NOT NULL,
                    cycle_number INTEGER NOT NULL DEFAULT 1,
                    status TEXT NOT NULL DEFAULT 'active',
                    started_at TEXT NOT NULL,
                    completed_at TEXT
                );""",
            [
                "id",
                "user_id",
                "name",
                "phase",
                "cycle_number",
                "status",
                "started_at",
                "completed_at",
            ],
        ),
        "workouts": (
            """CREATE TABLE workouts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    program_id INTEGER NOT NULL,
                    week_number INTEGER NOT NULL,
                    session_type TEXT NOT NULL,
                    session_order INTEGER NOT NULL DEFAULT 1,
                    is_deload INTEGER NOT NULL DEFAULT 0,
                    started_at TEXT,
                    completed_at TEXT,
                    notes TEXT,
                    FOREIGN KEY(program_id) REFERENCES programs(id) ON DELETE CASCADE
                );""",
            [
                "id",
                "program_id",
                "week_number",
                "session_type",
                "session_order",
                "is_deload",
                "started_at",
                "completed_at",
                "notes",
            ],
        ),
        "sets": (
            """CREATE TABLE sets (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    workout_id INTEGER NOT NULL,
                    exercise_id INTEGER,
                    exercise_name TEXT NOT NULL,
                    set_number INTEGER NOT NULL,
                    target_reps_min INTEGER NOT NULL,
                    target_reps_max INTEGER NOT NULL,
                    tempo TEXT NOT NULL,
                    rest_seconds INTEGER,
                    actual_reps INTEGER,
                    rpe INTEGER,
                    notes TEXT,
                    completed_at TEXT,
                    FOREIGN KEY(workout_id) REFERENCES workouts(id) ON DELETE CASCADE,
                    FOREIGN KEY(exercise_id) REFERENCES exercises(id)
                );""",
            [
                "id",
                "workout_id",
                "exercise_id",
                "exercise_name",
                "set_number",
                "target_reps_min",
                "target_reps_max",
                "tempo",
                "rest_seconds",
                "actual_reps",
                "rpe",
                "notes",
                "completed_at",
            ],
        ),
        "generation_logs": (
            """CREATE TABLE generation_logs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    timestamp TEXT NOT NULL,
                    user_id TEXT,
                    status TEXT NOT NULL,
                    program_id INTEGER,
                    message TEXT
                );""",
            ["id", "timestamp", "user_id", "status", "program_id", "message"],
        ),
    }

    def __init__(self, db_path: str = "training.db", seed_catalog: bool = True) -> None:
        self._db_path = db_path
        self._ensure_schema()
        if seed_catalog:
            self._import_exercise_catalog_data()

    @contextmanager
    def _connection(self):
        connection = sqlite3.connect(self._db_path)
        connection.execute("PRAGMA foreign_keys=on;")
        try:
            yield connection
            connection.commit()
        except Exception:
            connection.rollback()
            raise
        finally:
            connection.close()

    def transaction(self):
        """Return a context manager yielding one connection for several writes.

        Everything executed on the yielded connection is committed together
        or rolled back together.
        """
        return self._connection()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute("PRAGMA foreign_keys=off;")
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                self._ensure_table(conn, table, sql, columns)
            cursor.execute("PRAGMA foreign_keys=on;")

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

        conn.execute(f"DROP TABLE IF EXISTS {table}_old;")
        conn.execute(f"ALTER TABLE {table} RENAME TO {table}_old;")
        conn.execute(sql)

        common = [c for c in existing_cols if c in columns]
        if common:
            cols = ", ".join(common)
            missing = [c for c in columns if c not in existing_cols]
            if missing:
                def default_val(col: str) -> str:
                    if col == "status":
                        return "'active'"
                    if col in ("cycle_number", "session_order"):
                        return "1"
                    if col == "is_deload":
                        return "0"
                    if col == "instructions":
                        return "''"
                    if col == "started_at":
                        return f"'{datetime.datetime.now().isoformat()}'"
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

    def _import_exercise_catalog_data(self) -> None:
        csv_path = os.path.join(os.path.dirname(__file__), "exercise_catalog.csv")
        if not os.path.exists(csv_path):
            return
        with open(csv_path, newline="", encoding="utf-8") as csvfile:
            reader = csv.DictReader(csvfile)
            records = [
                (
                    row["Exercise Name"],
                    row["Category"],
                    int(row["Difficulty Level"]),
                    row.get("Instructions", ""),
                )
                for row in reader
            ]
        with self._connection() as conn:
            for name, category, level, instructions in records:
                conn.execute(
                    "INSERT INTO exercises (name, category, difficulty_level, instructions) VALUES (?, ?, ?, ?) "
                    "ON CONFLICT(name) DO UPDATE SET category=excluded.category, difficulty_level=excluded.difficulty_level, instructions=excluded.instructions;",
                    (name, category, level, instructions),
                )


class BaseRepository(Database):
    """Base repository providing helper methods.

    ``conn`` lets a call join a transaction opened with ``transaction()``.
    """

    def execute(
        self, query: str, params: Tuple = (), conn: sqlite3.Connection | None = None
    ) -> int:
        if conn is not None:
            cursor = conn.execute(query, params)
            return cursor.lastrowid
        with self._connection() as own:
            cursor = own.cursor()
            cursor.execute(query, params)
            return cursor.lastrowid

    def fetch_all(
        self, query: str, params: Tuple = (), conn: sqlite3.Connection | None = None
    ) -> List[Tuple]:
        if conn is not None:
            return conn.execute(query, params).fetchall()
        with self._connection() as own:
            cursor = own.cursor()
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
    """Asynchronous read-only variant of BaseRepository using aiosqlite."""

    async def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        async with self._async_connection() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
            return list(rows)


_EXERCISE_COLUMNS = "id, name, category, difficulty_level, instructions, video_url"


def _exercise_dict(row: Tuple) -> dict:
    ex_id, name, category, level, instructions, video_url = row
    return {
        "id": ex_id,
        "name": name,
        "category": category,
        "difficulty_level": int(level),
        "instructions": instructions,
        "video_url": video_url,
    }


class ExerciseCatalogRepository(BaseRepository):
    """Read access to the exercise catalog."""

    CATEGORIES = ("push", "pull", "legs", "core")

    def add(
        self,
        name: str,
        category: str,
        difficulty_level: int,
        instructions: str = "",
        video_url: str | None = None,
    ) -> int:
        if category not in self.CATEGORIES:
            raise ValueError(f"unknown category: {category}")
        if not 1 <= int(difficulty_level) <= 10:
            raise ValueError("difficulty_level must be between 1 and 10")
        return self.execute(
            "INSERT INTO exercises (name, category, difficulty_level, instructions, video_url) VALUES (?, ?, ?, ?, ?);",
            (name, category, int(difficulty_level), instructions, video_url),
        )

    def list_exercises(self, order_by: str = "difficulty_level") -> list[dict]:
        allowed = {"difficulty_level", "name", "id", "category"}
        if order_by not in allowed:
            order_by = "difficulty_level"
        rows = self.fetch_all(
            f"SELECT {_EXERCISE_COLUMNS} FROM exercises ORDER BY {order_by}, id;"
        )
        return [_exercise_dict(r) for r in rows]

    def list_by_category(
        self, category: str, exclude_id: Optional[int] = None
    ) -> list[dict]:
        query = f"SELECT {_EXERCISE_COLUMNS} FROM exercises WHERE category = ?"
        params: list = [category]
        if exclude_id is not None:
            query += " AND id != ?"
            params.append(exclude_id)
        query += " ORDER BY difficulty_level, id;"
        return [_exercise_dict(r) for r in self.fetch_all(query, tuple(params))]

    def fetch_by_id(self, exercise_id: int) -> dict:
        rows = self.fetch_all(
            f"SELECT {_EXERCISE_COLUMNS} FROM exercises WHERE id = ?;",
            (exercise_id,),
        )
        if not rows:
            raise ValueError("exercise not found")
        return _exercise_dict(rows[0])

    def clear(self) -> None:
        self._delete_all("exercises")


class AsyncExerciseCatalogRepository(AsyncBaseRepository):
    """Asynchronous read access to the exercise catalog."""

    async def list_by_category(
        self, category: str, exclude_id: Optional[int] = None
    ) -> list[dict]:
        query = f"SELECT {_EXERCISE_COLUMNS} FROM exercises WHERE category = ?"
        params: list = [category]
        if exclude_id is not None:
            query += " AND id != ?"
            params.append(exclude_id)
        query += " ORDER BY difficulty_level, id;"
        rows = await self.fetch_all(query, tuple(params))
        return [_exercise_dict(r) for r in rows]

    async def fetch_by_id(self, exercise_id: int) -> dict:
        rows = await self.fetch_all(
            f"SELECT {_EXERCISE_COLUMNS} FROM exercises WHERE id = ?;",
            (exercise_id,),
        )
        if not rows:
            raise ValueError("exercise not found")
        return _exercise_dict(rows[0])


class ProgramRepository(BaseRepository):
    """Repository for generated programs."""

    STATUSES = ("active", "completed", "paused")

    def create(
        self,
        user_id: str,
        name: str,
        phase: int,
        cycle_number: int = 1,
        status: str = "active",
        conn: sqlite3.Connection | None = None,
    ) -> int:
        return self.execute(
            "INSERT INTO programs (user_id, name, phase, cycle_number, status, started_at) VALUES (?, ?, ?, ?, ?, ?);",
            (
                user_id,
                name,
                phase,
                cycle_number,
                status,
                datetime.datetime.now().isoformat(),
            ),
            conn,
        )

    def _to_dict(self, row: Tuple) -> dict:
        pid, user_id, name, phase, cycle, status, started, completed = row
        return {
            "id": pid,
            "user_id": user_id,
            "name": name,
            "phase": int(phase),
            "cycle_number": int(cycle),
            "status": status,
            "started_at": started,
            "completed_at": completed,
        }

    def fetch_detail(self, program_id: int) -> dict:
        rows = self.fetch_all(
            "SELECT id, user_id, name, phase, cycle_number, status, started_at, completed_at FROM programs WHERE id = ?;",
            (program_id,),
        )
        if not rows:
            raise ValueError("program not found")
        return self._to_dict(rows[0])

    def fetch_for_user(self, user_id: str, status: str | None = None) -> list[dict]:
        query = "SELECT id, user_id, name, phase, cycle_number, status, started_at, completed_at FROM programs WHERE user_id = ?"
        params: list = [user_id]
        if status is not None:
            query += " AND status = ?"
            params.append(status)
        query += " ORDER BY id;"
        return [self._to_dict(r) for r in self.fetch_all(query, tuple(params))]

    def active_ids(
        self, user_id: str, conn: sqlite3.Connection | None = None
    ) -> list[int]:
        rows = self.fetch_all(
            "SELECT id FROM programs WHERE user_id = ? AND status = 'active' ORDER BY id;",
            (user_id,),
            conn,
        )
        return [r[0] for r in rows]

    def set_status(
        self,
        program_id: int,
        status: str,
        conn: sqlite3.Connection | None = None,
    ) -> None:
        if status not in self.STATUSES:
            raise ValueError(f"invalid status: {status}")
        completed = datetime.datetime.now().isoformat() if status == "completed" else None
        if conn is None:
            self.fetch_detail(program_id)
        self.execute(
            "UPDATE programs SET status = ?, completed_at = ? WHERE id = ?;",
            (status, completed, program_id),
            conn,
        )


class WorkoutRepository(BaseRepository):
    """Repository for the sessions of a program."""

    def create(
        self,
        program_id: int,
        week_number: int,
        session_type: str,
        is_deload: bool,
        session_order: int = 1,
        conn: sqlite3.Connection | None = None,
    ) -> int:
        return self.execute(
            "INSERT INTO workouts (program_id, week_number, session_type, session_order, is_deload) VALUES (?, ?, ?, ?, ?);",
            (program_id, week_number, session_type, session_order, int(is_deload)),
            conn,
        )

    def fetch_for_program(self, program_id: int) -> list[dict]:
        rows = self.fetch_all(
            "SELECT id, week_number, session_type, session_order, is_deload FROM workouts "
            "WHERE program_id = ? ORDER BY week_number, session_order;",
            (program_id,),
        )
        return [
            {
                "id": wid,
                "program_id": program_id,
                "week_number": week,
                "session_type": stype,
                "session_order": order,
                "is_deload": bool(deload),
            }
            for wid, week, stype, order, deload in rows
        ]


class SetRepository(BaseRepository):
    """Repository for prescribed sets."""

    def create(
        self,
        workout_id: int,
        exercise_id: int | None,
        exercise_name: str,
        set_number: int,
        target_reps_min: int,
        target_reps_max: int,
        tempo: str,
        rest_seconds: int | None = None,
        conn: sqlite3.Connection | None = None,
    ) -> int:
        if target_reps_min > target_reps_max:
            raise ValueError("target_reps_min must not exceed target_reps_max")
        return self.execute(
            "INSERT INTO sets (workout_id, exercise_id, exercise_name, set_number, target_reps_min, target_reps_max, tempo, rest_seconds) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?);",
            (
                workout_id,
                exercise_id,
                exercise_name,
                set_number,
                target_reps_min,
                target_reps_max,
                tempo,
                rest_seconds,
            ),
            conn,
        )

    def fetch_for_workout(self, workout_id: int) -> list[dict]:
        rows = self.fetch_all(
            "SELECT id, exercise_id, exercise_name, set_number, target_reps_min, target_reps_max, tempo, rest_seconds "
            "FROM sets WHERE workout_id = ? ORDER BY id;",
            (workout_id,),
        )
        return [
            {
                "id": sid,
                "workout_id": workout_id,
                "exercise_id": ex_id,
                "exercise_name": name,
                "set_number": num,
                "target_reps_min": rmin,
                "target_reps_max": rmax,
                "tempo": tempo,
                "rest_seconds": rest,
            }
            for sid, ex_id, name, num, rmin, rmax, tempo, rest in rows
        ]

    def count_for_program(self, program_id: int) -> dict[int, int]:
        """Return the number of set rows per week for a program."""
        rows = self.fetch_all(
            "SELECT w.week_number, COUNT(s.id) FROM workouts w "
            "LEFT JOIN sets s ON s.workout_id = w.id "
            "WHERE w.program_id = ? GROUP BY w.week_number ORDER BY w.week_number;",
            (program_id,),
        )
        return {int(week): int(count) for week, count in rows}


class GenerationLogRepository(BaseRepository):
    """Repository for program generation run logs."""

    def log_success(self, user_id: str, program_id: int) -> int:
        return self.execute(
            "INSERT INTO generation_logs (timestamp, user_id, status, program_id, message) VALUES (?, ?, 'success', ?, NULL);",
            (datetime.datetime.now().isoformat(), user_id, program_id),
        )

    def log_skipped(self, user_id: str, message: str) -> int:
        return self.execute(
            "INSERT INTO generation_logs (timestamp, user_id, status, program_id, message) VALUES (?, ?, 'skipped', NULL, ?);",
            (datetime.datetime.now().isoformat(), user_id, message),
        )

    def log_error(self, user_id: str, message: str) -> int:
        return self.execute(
            "INSERT INTO generation_logs (timestamp, user_id, status, program_id, message) VALUES (?, ?, 'error', NULL, ?);",
            (datetime.datetime.now().isoformat(), user_id, message),
        )

    def last_success(self) -> Optional[str]:
        rows = self.fetch_all(
            "SELECT timestamp FROM generation_logs WHERE status='success' ORDER BY id DESC LIMIT 1;"
        )
        return rows[0][0] if rows else None

    def last_errors(self, limit: int = 5) -> list[tuple[str, str]]:
        rows = self.fetch_all(
            "SELECT timestamp, message FROM generation_logs WHERE status='error' ORDER BY id DESC LIMIT ?;",
            (limit,),
        )
        return [(r[0], r[1]) for r in rows]

    def fetch_recent(self, limit: int = 20) -> list[dict]:
        rows = self.fetch_all(
            "SELECT timestamp, user_id, status, program_id, message FROM generation_logs ORDER BY id DESC LIMIT ?;",
            (limit,),
        )
        return [
            {
                "timestamp": ts,
                "user_id": uid,
                "status": status,
                "program_id": pid,
                "message": msg,
            }
            for ts, uid, status, pid, msg in rows
        ]
