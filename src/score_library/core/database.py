"""
SQLite database operations for the local Score Library store
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from loguru import logger

from .config import Config, get_data_dir

# Database schema version for migrations
SCHEMA_VERSION = 2


def get_database_path(config: Config) -> Path:
    """Get the path to the SQLite database file."""
    return get_data_dir(config) / config.library.database_file


@contextmanager
def get_db_connection(db_path: Path) -> Iterator[sqlite3.Connection]:
    """Get a database connection with proper cleanup and concurrency support."""
    # Timeout handles concurrent syncs writing to the same file
    conn = sqlite3.connect(db_path, timeout=30.0)
    conn.row_factory = sqlite3.Row  # Enable dict-like access

    # WAL allows reads during writes; foreign keys are off by default in SQLite
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys = ON")

    try:
        yield conn
    finally:
        conn.close()


def _column_names(conn: sqlite3.Connection, table: str) -> set[str]:
    cursor = conn.execute(f"PRAGMA table_info({table})")
    return {row[1] for row in cursor.fetchall()}


def migrate_database(conn: sqlite3.Connection, current_version: int) -> None:
    """Migrate database from current_version to latest schema."""
    if current_version < 2:
        # v1 -> v2: ordering column for children, denormalized counts on composers
        if "position" not in _column_names(conn, "works"):
            conn.execute("ALTER TABLE works ADD COLUMN position INTEGER NOT NULL DEFAULT 0")
        if "position" not in _column_names(conn, "recordings"):
            conn.execute(
                "ALTER TABLE recordings ADD COLUMN position INTEGER NOT NULL DEFAULT 0"
            )

        composer_columns = _column_names(conn, "composers")
        if "sheet_music_count" not in composer_columns:
            conn.execute(
                "ALTER TABLE composers ADD COLUMN sheet_music_count INTEGER NOT NULL DEFAULT 0"
            )
        if "recording_count" not in composer_columns:
            conn.execute(
                "ALTER TABLE composers ADD COLUMN recording_count INTEGER NOT NULL DEFAULT 0"
            )

        # Existing rows keep their creation order
        conn.execute("UPDATE works SET position = rowid")
        conn.execute("UPDATE recordings SET position = rowid")

        conn.commit()
        logger.info("Migrated local database to schema v2")


def init_database(db_path: Path) -> None:
    """Initialize the database with required tables."""
    db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_db_connection(db_path) as conn:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS composers (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                period TEXT DEFAULT '',
                image TEXT DEFAULT '',
                created_at TEXT DEFAULT (datetime('now'))
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS works (
                id TEXT PRIMARY KEY,
                composer_id TEXT NOT NULL,
                title TEXT NOT NULL,
                edition TEXT DEFAULT '',
                year TEXT DEFAULT '',
                file_url TEXT DEFAULT '',
                created_at TEXT DEFAULT (datetime('now')),
                FOREIGN KEY (composer_id) REFERENCES composers (id) ON DELETE CASCADE
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS recordings (
                id TEXT PRIMARY KEY,
                composer_id TEXT NOT NULL,
                title TEXT NOT NULL,
                performer TEXT DEFAULT '',
                duration TEXT DEFAULT '',
                year TEXT DEFAULT '',
                file_url TEXT DEFAULT '',
                created_at TEXT DEFAULT (datetime('now')),
                FOREIGN KEY (composer_id) REFERENCES composers (id) ON DELETE CASCADE
            )
        """)

        cursor = conn.execute("SELECT MAX(version) as version FROM schema_version")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] else 0
        cursor.close()  # Release any locks before migration

        if current_version < SCHEMA_VERSION:
            migrate_database(conn, current_version)

        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_works_composer ON works (composer_id, position)"
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_recordings_composer ON recordings (composer_id, position)"
        )

        conn.execute("DELETE FROM schema_version")
        conn.execute(
            "INSERT INTO schema_version (version) VALUES (?)",
            (SCHEMA_VERSION,),
        )

        conn.commit()
