"""
db.py
SQLite record store: connection lifecycle, query helpers and table creation.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from errors import StoreUnavailable

logger = logging.getLogger(__name__)


class Database:
    """
    Single handle on the SQLite file.
    Open once at startup (or use as a context manager), pass it to every
    operation, close it on shutdown. Each write commits on its own.
    """

    def __init__(self, path: str | Path):
        self.path = str(path)
        self._conn: sqlite3.Connection | None = None

    def open(self) -> "Database":
        if self._conn is not None:
            return self
        try:
            conn = sqlite3.connect(self.path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as exc:
            logger.exception("Could not open database at %s", self.path)
            raise StoreUnavailable(f"open {self.path}") from exc
        self._conn = conn
        logger.info("Connected to SQLite database at %s", self.path)
        return self

    def close(self) -> None:
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None
        logger.info("Database connection closed")

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def __enter__(self) -> "Database":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreUnavailable("store is not open")
        return self._conn

    def _run(self, sql: str, params: tuple, read):
        conn = self._connection()
        try:
            with conn:
                return read(conn.execute(sql, params))
        except sqlite3.IntegrityError:
            # constraint violations are the caller's to translate
            raise
        except sqlite3.Error as exc:
            logger.exception("Store call failed: %s", " ".join(sql.split()))
            raise StoreUnavailable(" ".join(sql.split())) from exc

    def execute(self, sql: str, params: tuple = ()) -> int:
        """Run a write and return the new row id."""
        return self._run(sql, params, lambda cur: cur.lastrowid)

    def execute_rowcount(self, sql: str, params: tuple = ()) -> int:
        """Run a write and return how many rows it changed."""
        return self._run(sql, params, lambda cur: cur.rowcount)

    def fetch_one(self, sql: str, params: tuple = ()):
        return self._run(sql, params, lambda cur: cur.fetchone())

    def fetch_all(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        return self._run(sql, params, lambda cur: cur.fetchall())

    def scalar(self, sql: str, params: tuple = ()):
        row = self.fetch_one(sql, params)
        return row[0] if row else None

    def init_db(self) -> None:
        """
        Create the tables if they do not exist yet. Safe to call on every start.
        """
        self.execute(
            """
            CREATE TABLE IF NOT EXISTS students (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                cabin TEXT NOT NULL,
                hall TEXT NOT NULL,
                phone TEXT NOT NULL,
                fee_paid INTEGER NOT NULL DEFAULT 0,
                fee_due INTEGER NOT NULL DEFAULT 0,
                status TEXT NOT NULL DEFAULT 'Pending' CHECK(status IN ('Paid','Pending')),
                join_date TEXT,
                left_date TEXT,
                monthly_fee INTEGER DEFAULT 0,
                last_fee_calculated_date TEXT,
                created_at TEXT DEFAULT CURRENT_TIMESTAMP
            )
            """
        )

        # Halls are referenced by name from students.hall, not by id
        self.execute(
            """
            CREATE TABLE IF NOT EXISTS study_halls (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL UNIQUE,
                capacity INTEGER NOT NULL,
                location TEXT NOT NULL,
                description TEXT,
                created_at TEXT DEFAULT CURRENT_TIMESTAMP
            )
            """
        )


def open_database(path: str | Path) -> Database:
    """Open the store and make sure its tables exist."""
    store = Database(path).open()
    store.init_db()
    return store
