# src/backlist/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import math
import sqlite3
import time
from pathlib import Path
from typing import Any

from ..errors import ConfigurationError, InvariantViolation
from .task_models import (
    AllowanceSettings,
    Folder,
    FolderStyle,
    Priority,
    Task,
    TemporalMode,
    check_mode_fields,
    is_repeat_eligible,
    temporal_mode,
)

logger = logging.getLogger(__name__)

ROOT_FOLDER_NAME = "General"

TARGET_ALLOWANCE_KEY = "target_monthly_allowance"
MAXIMUM_ALLOWANCE_KEY = "maximum_monthly_allowance"


class TaskStore:
    """
    SQLite store for tasks, folders and allowance settings.

    The schema is intentionally simple and migration-safe:
    - create tables if missing
    - use PRAGMA table_info to detect missing task columns
    - add columns with ALTER TABLE only when needed

    Seeding:
    - an empty folders table gets a root folder ("General")
    - an empty settings table gets the default allowances

    Each method opens its own SQLite connection.
    """

    def __init__(
        self,
        db_path: str | Path = "backlist.sqlite3",
        *,
        default_target_allowance: float = 400.0,
        default_maximum_allowance: float = 600.0,
    ) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema(
            default_target_allowance=default_target_allowance,
            default_maximum_allowance=default_maximum_allowance,
        )
        logger.info("TaskStore ready db=%s total=%s", self._db_path, self.count_tasks())

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.DatabaseError):
            conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")

    def _ensure_schema(self, *, default_target_allowance: float, default_maximum_allowance: float) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS folders (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    parent_id INTEGER,
                    name TEXT NOT NULL,
                    style TEXT NOT NULL DEFAULT 'Directory',
                    status INTEGER,
                    FOREIGN KEY (parent_id) REFERENCES folders(id)
                )
                """
            )

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    folder_id INTEGER NOT NULL,
                    archived INTEGER NOT NULL DEFAULT 0,
                    summary TEXT NOT NULL,
                    description TEXT,
                    average_duration REAL,
                    bounty_modifier REAL NOT NULL DEFAULT 0,
                    due_date REAL,
                    from_date REAL NOT NULL,
                    lead_days INTEGER,
                    priority TEXT NOT NULL DEFAULT 'P1',
                    repeat_interval INTEGER,
                    times_selected INTEGER NOT NULL DEFAULT 0,
                    times_shown INTEGER NOT NULL DEFAULT 0,
                    FOREIGN KEY (folder_id) REFERENCES folders(id)
                )
                """
            )

            # Migrations (safe): add missing columns.
            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s", name)

            add_col("description", "TEXT")
            add_col("average_duration", "REAL")
            add_col("bounty_modifier", "REAL NOT NULL DEFAULT 0")
            add_col("times_selected", "INTEGER NOT NULL DEFAULT 0")
            add_col("times_shown", "INTEGER NOT NULL DEFAULT 0")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_archived ON tasks(archived)")

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS settings (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    key TEXT NOT NULL UNIQUE,
                    value TEXT NOT NULL
                )
                """
            )

            cur.execute("SELECT COUNT(*) FROM folders")
            if int(cur.fetchone()[0]) == 0:
                cur.execute(
                    "INSERT INTO folders(parent_id, name, style) VALUES (NULL, ?, ?)",
                    (ROOT_FOLDER_NAME, FolderStyle.DIRECTORY.value),
                )
                logger.info("TaskStore seeded root folder %r", ROOT_FOLDER_NAME)

            cur.execute("SELECT COUNT(*) FROM settings")
            if int(cur.fetchone()[0]) == 0:
                cur.executemany(
                    "INSERT INTO settings(key, value) VALUES (?, ?)",
                    [
                        (MAXIMUM_ALLOWANCE_KEY, _format_amount(default_maximum_allowance)),
                        (TARGET_ALLOWANCE_KEY, _format_amount(default_target_allowance)),
                    ],
                )
                logger.info(
                    "TaskStore seeded settings target=%s maximum=%s",
                    default_target_allowance,
                    default_maximum_allowance,
                )

            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=int(row["id"]),
            folder_id=int(row["folder_id"]),
            archived=bool(row["archived"]),
            summary=str(row["summary"] or ""),
            description=row["description"],
            average_duration=float(row["average_duration"]) if row["average_duration"] is not None else None,
            bounty_modifier=float(row["bounty_modifier"] or 0.0),
            due_date=float(row["due_date"]) if row["due_date"] is not None else None,
            from_date=float(row["from_date"]),
            lead_days=int(row["lead_days"]) if row["lead_days"] is not None else None,
            priority=Priority.from_db(row["priority"]),
            repeat_interval=int(row["repeat_interval"]) if row["repeat_interval"] is not None else None,
            times_selected=int(row["times_selected"] or 0),
            times_shown=int(row["times_shown"] or 0),
        )

    def _update_one(self, sql: str, params: tuple[Any, ...], task_id: int) -> None:
        conn = self._get_conn()
        try:
            cur = conn.execute(sql, params)
            conn.commit()
            if cur.rowcount != 1:
                raise ValueError(f"task {task_id} does not exist")
        finally:
            conn.close()

    # ---- tasks ----

    def count_tasks(self) -> int:
        conn = self._get_conn()
        try:
            (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
            return int(n)
        finally:
            conn.close()

    def add_task(
        self,
        *,
        summary: str,
        folder_id: int = 1,
        description: str | None = None,
        priority: Priority | None = None,
        due_date: float | None = None,
        lead_days: int | None = None,
        repeat_interval: int | None = None,
        average_duration: float | None = None,
        bounty_modifier: float = 0.0,
        now_ts: float | None = None,
    ) -> int:
        if not summary or not summary.strip():
            raise ValueError("summary is required")

        mode = check_mode_fields(
            due_date=due_date,
            lead_days=lead_days,
            repeat_interval=repeat_interval,
            summary=summary,
        )
        if priority is None:
            priority = Priority.P1
        if now_ts is None:
            now_ts = time.time()
        description = description.strip() if description else None

        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT 1 FROM folders WHERE id = ?", (int(folder_id),))
            if cur.fetchone() is None:
                raise ValueError(f"folder {folder_id} does not exist")

            cur.execute(
                """
                INSERT INTO tasks(
                    folder_id, archived, summary, description,
                    average_duration, bounty_modifier,
                    due_date, from_date, lead_days,
                    priority, repeat_interval,
                    times_selected, times_shown
                )
                VALUES (?, 0, ?, ?, ?, ?, ?, ?, ?, ?, ?, 0, 0)
                """,
                (
                    int(folder_id),
                    summary.strip(),
                    description or None,
                    average_duration,
                    float(bounty_modifier),
                    due_date,
                    float(now_ts),
                    lead_days,
                    priority.value,
                    repeat_interval,
                ),
            )
            conn.commit()
            rowid = cur.lastrowid
            if rowid is None:
                raise RuntimeError("SQLite did not return lastrowid for tasks insert")
            task_id = int(rowid)
            logger.debug(
                "Task added id=%s mode=%s priority=%s folder=%s",
                task_id,
                mode.value,
                priority.value,
                folder_id,
            )
            return task_id
        finally:
            conn.close()

    def get_task(self, task_id: int) -> Task | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (int(task_id),)).fetchone()
            return self._row_to_task(row) if row else None
        finally:
            conn.close()

    def list_open_tasks(self) -> list[Task]:
        """Every non-archived task, including repeating tasks still cooling down."""
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT * FROM tasks WHERE archived = 0 ORDER BY id ASC").fetchall()
            return [self._row_to_task(r) for r in rows]
        finally:
            conn.close()

    def list_active_tasks(self, *, now_ts: float) -> list[Task]:
        """
        Non-archived tasks that may be shown at now_ts.

        Repeating tasks whose interval has not elapsed are left out, using the
        same predicate as the weight function. Malformed rows are passed through
        so the caller can report them.
        """
        out: list[Task] = []
        for task in self.list_open_tasks():
            if _mode_or_none(task) is TemporalMode.REPEATING and not is_repeat_eligible(task, now_ts):
                continue
            out.append(task)
        return out

    def record_shown(self, task_id: int) -> None:
        self._update_one(
            "UPDATE tasks SET times_shown = times_shown + 1 WHERE id = ?",
            (int(task_id),),
            task_id,
        )

    def record_selected(self, task_id: int) -> None:
        self._update_one(
            "UPDATE tasks SET times_selected = times_selected + 1 WHERE id = ?",
            (int(task_id),),
            task_id,
        )

    def archive_task(self, task_id: int) -> None:
        self._update_one("UPDATE tasks SET archived = 1 WHERE id = ?", (int(task_id),), task_id)
        logger.debug("Task %s archived", task_id)

    def reschedule_task(self, task_id: int, now_ts: float) -> None:
        self._update_one(
            "UPDATE tasks SET from_date = ? WHERE id = ?",
            (float(now_ts), int(task_id)),
            task_id,
        )
        logger.debug("Task %s rescheduled from=%s", task_id, now_ts)

    # ---- settings ----

    def _read_setting(self, key: str) -> float:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
        finally:
            conn.close()

        if row is None:
            raise ConfigurationError(f"setting {key!r} is missing")
        try:
            value = float(row["value"])
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"setting {key!r} is not a number: {row['value']!r}") from e
        if not math.isfinite(value):
            raise ConfigurationError(f"setting {key!r} is not a finite number: {row['value']!r}")
        return value

    def get_settings(self) -> AllowanceSettings:
        return AllowanceSettings(
            target_monthly_allowance=self._read_setting(TARGET_ALLOWANCE_KEY),
            maximum_monthly_allowance=self._read_setting(MAXIMUM_ALLOWANCE_KEY),
        )

    def set_setting(self, key: str, value: float) -> None:
        if key not in (TARGET_ALLOWANCE_KEY, MAXIMUM_ALLOWANCE_KEY):
            raise ValueError(f"unknown setting {key!r}")
        if not math.isfinite(value):
            raise ValueError(f"allowance must be a finite number, got {value!r}")
        if value < 0:
            raise ValueError("allowance must not be negative")

        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO settings(key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, _format_amount(value)),
            )
            conn.commit()
        finally:
            conn.close()
        logger.info("Setting %s = %s", key, value)

    # ---- folders ----

    def add_folder(
        self,
        *,
        name: str,
        parent_id: int | None = 1,
        style: FolderStyle = FolderStyle.DIRECTORY,
    ) -> int:
        if not name or not name.strip():
            raise ValueError("folder name is required")
        if "::" in name:
            raise ValueError("folder name must not contain '::'")

        conn = self._get_conn()
        try:
            cur = conn.cursor()
            if parent_id is not None:
                cur.execute("SELECT 1 FROM folders WHERE id = ?", (int(parent_id),))
                if cur.fetchone() is None:
                    raise ValueError(f"folder {parent_id} does not exist")
            cur.execute(
                "INSERT INTO folders(parent_id, name, style) VALUES (?, ?, ?)",
                (parent_id, name.strip(), style.value),
            )
            conn.commit()
            rowid = cur.lastrowid
            if rowid is None:
                raise RuntimeError("SQLite did not return lastrowid for folders insert")
            logger.debug("Folder added id=%s name=%s parent=%s", rowid, name, parent_id)
            return int(rowid)
        finally:
            conn.close()

    def list_folders(self) -> list[Folder]:
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT * FROM folders ORDER BY id ASC").fetchall()
        finally:
            conn.close()

        out: list[Folder] = []
        for r in rows:
            try:
                style = FolderStyle(r["style"])
            except ValueError:
                style = FolderStyle.DIRECTORY
            out.append(
                Folder(
                    id=int(r["id"]),
                    parent_id=int(r["parent_id"]) if r["parent_id"] is not None else None,
                    name=str(r["name"]),
                    style=style,
                    status=r["status"],
                )
            )
        return out

    def list_folder_paths(self) -> list[tuple[int, str]]:
        """(folder_id, "Parent::Child") pairs sorted by path."""
        folders = {f.id: f for f in self.list_folders()}

        def path_of(folder: Folder) -> str:
            parts = [folder.name]
            seen = {folder.id}
            parent = folder.parent_id
            while parent is not None and parent in folders and parent not in seen:
                seen.add(parent)
                parts.append(folders[parent].name)
                parent = folders[parent].parent_id
            return "::".join(reversed(parts))

        return sorted(((f.id, path_of(f)) for f in folders.values()), key=lambda p: p[1])


def _format_amount(value: float) -> str:
    return str(float(value))


def _mode_or_none(task: Task) -> TemporalMode | None:
    try:
        return temporal_mode(task)
    except InvariantViolation:
        return None
