# src/backlist/finance/ledger_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
from pathlib import Path

from .ledger import Transaction, split_amount

logger = logging.getLogger(__name__)


class LedgerStore:
    """
    SQLite transaction log.

    Rows are only ever inserted; nothing updates or deletes them.
    Each method opens its own SQLite connection.
    """

    def __init__(self, db_path: str | Path = "backlist.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("LedgerStore ready db=%s total=%s", self._db_path, self.count_transactions())

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.DatabaseError):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS transactions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    date REAL NOT NULL,
                    funds_added REAL,
                    funds_subtracted REAL,
                    CHECK ((funds_added IS NULL) <> (funds_subtracted IS NULL))
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_transaction(row: sqlite3.Row) -> Transaction:
        return Transaction(
            id=int(row["id"]),
            date=float(row["date"]),
            funds_added=float(row["funds_added"]) if row["funds_added"] is not None else None,
            funds_subtracted=float(row["funds_subtracted"]) if row["funds_subtracted"] is not None else None,
        )

    def count_transactions(self) -> int:
        conn = self._get_conn()
        try:
            (n,) = conn.execute("SELECT COUNT(*) FROM transactions").fetchone()
            return int(n)
        finally:
            conn.close()

    def add_transaction(self, amount: float, *, now_ts: float | None = None) -> Transaction:
        if now_ts is None:
            now_ts = time.time()
        added, subtracted = split_amount(amount)

        conn = self._get_conn()
        try:
            cur = conn.execute(
                "INSERT INTO transactions(date, funds_added, funds_subtracted) VALUES (?, ?, ?)",
                (float(now_ts), added, subtracted),
            )
            conn.commit()
            rowid = cur.lastrowid
            if rowid is None:
                raise RuntimeError("SQLite did not return lastrowid for transactions insert")
        finally:
            conn.close()

        logger.debug("Transaction added id=%s added=%s subtracted=%s", rowid, added, subtracted)
        return Transaction(id=int(rowid), date=float(now_ts), funds_added=added, funds_subtracted=subtracted)

    def list_transactions(self) -> list[Transaction]:
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT * FROM transactions ORDER BY id ASC").fetchall()
            return [self._row_to_transaction(r) for r in rows]
        finally:
            conn.close()
