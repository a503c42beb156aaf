# -*- coding: utf-8 -*-
"""
Local SQLite database holding wizard drafts.

Drafts survive restarts and crashes, so every write is committed immediately.
"""

import sqlite3
from pathlib import Path
from typing import Optional, Dict, Any

from utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS drafts (
    draft_key TEXT PRIMARY KEY,
    application_id TEXT,
    step INTEGER NOT NULL DEFAULT 1,
    payload TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS draft_meta (
    meta_key TEXT PRIMARY KEY,
    meta_value TEXT
);
"""


class Database:
    """SQLite connection wrapper with dict rows and auto-commit."""

    def __init__(self, db_path: Optional[Path] = None):
        """
        Initialize database.

        Args:
            db_path: SQLite file path; defaults to Config.DRAFTS_DB_PATH.
                     Pass ":memory:" for a throwaway database.
        """
        if db_path is None:
            from app.config import Config
            db_path = Config.DRAFTS_DB_PATH

        self._db_path = db_path
        self._connection: Optional[sqlite3.Connection] = None

        if str(db_path) != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    def _dict_factory(self, cursor, row) -> Dict[str, Any]:
        """Convert row to dictionary."""
        columns = [col[0] for col in cursor.description]
        return {col: row[idx] for idx, col in enumerate(columns)}

    def _get_connection(self) -> sqlite3.Connection:
        """Get connection, connecting if needed."""
        if self._connection is None:
            self._connection = sqlite3.connect(str(self._db_path), check_same_thread=False)
            self._connection.row_factory = self._dict_factory
        return self._connection

    def initialize(self) -> None:
        """Create the schema if missing."""
        conn = self._get_connection()
        conn.executescript(SCHEMA)
        conn.commit()
        logger.debug(f"Draft database ready at {self._db_path}")

    def execute(self, query: str, params: tuple = ()) -> int:
        """Execute a write query and return the affected row count."""
        conn = self._get_connection()
        try:
            cursor = conn.execute(query, params)
            conn.commit()
            return cursor.rowcount
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(f"SQLite execute error: {e}\nQuery: {query}")
            raise

    def fetch_one(self, query: str, params: tuple = ()) -> Optional[Dict[str, Any]]:
        """Execute query and fetch a single row."""
        cursor = self._get_connection().execute(query, params)
        return cursor.fetchone()

    def close(self) -> None:
        """Close database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None
            logger.info("SQLite connection closed")
