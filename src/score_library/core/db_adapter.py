"""
Database adapter that lets the same SQL run on SQLite and PostgreSQL.

The local library lives in SQLite; the remote catalog lives in PostgreSQL.
Repository code is written against the small connection protocol below with
SQLite-style `?` placeholders, which the PostgreSQL wrapper converts.
"""

from contextlib import contextmanager
from typing import Any, Iterator, Optional, Protocol

from loguru import logger


class CursorProtocol(Protocol):
    """Protocol for database cursor."""

    def execute(self, query: str, params: tuple = ()) -> "CursorProtocol": ...
    def fetchone(self) -> Optional[Any]: ...
    def fetchall(self) -> list[Any]: ...
    @property
    def rowcount(self) -> int: ...
    def close(self) -> None: ...


class ConnectionProtocol(Protocol):
    """Protocol for database connection."""

    def execute(self, query: str, params: tuple = ()) -> CursorProtocol: ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...
    def close(self) -> None: ...


def is_postgres_url(url: Optional[str]) -> bool:
    """Check if a database URL points at PostgreSQL."""
    return url is not None and url.startswith(("postgres://", "postgresql://"))


def _convert_query_placeholders(query: str) -> str:
    """Convert SQLite ? placeholders to PostgreSQL %s placeholders."""
    # Simple conversion - doesn't handle ? inside strings
    return query.replace("?", "%s")


def _redact_url(url: str) -> str:
    """Drop credentials from a database URL before logging it."""
    return url.split("@", 1)[1] if "@" in url else url


class PostgresCursor:
    """Wrapper around psycopg2 cursor to provide dict-like row access."""

    def __init__(self, cursor: Any) -> None:
        self._cursor = cursor
        self._columns: Optional[list[str]] = None

    def execute(self, query: str, params: tuple = ()) -> "PostgresCursor":
        self._cursor.execute(_convert_query_placeholders(query), params)
        if self._cursor.description:
            self._columns = [desc[0] for desc in self._cursor.description]
        return self

    def fetchone(self) -> Optional[dict[str, Any]]:
        row = self._cursor.fetchone()
        if row is None or self._columns is None:
            return None
        return dict(zip(self._columns, row))

    def fetchall(self) -> list[dict[str, Any]]:
        rows = self._cursor.fetchall()
        if not self._columns:
            return []
        return [dict(zip(self._columns, row)) for row in rows]

    @property
    def rowcount(self) -> int:
        return self._cursor.rowcount

    def close(self) -> None:
        self._cursor.close()


class PostgresConnection:
    """Wrapper around psycopg2 connection."""

    def __init__(self, conn: Any) -> None:
        self._conn = conn

    def execute(self, query: str, params: tuple = ()) -> PostgresCursor:
        cursor = PostgresCursor(self._conn.cursor())
        cursor.execute(query, params)
        return cursor

    def commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        self._conn.rollback()

    def close(self) -> None:
        self._conn.close()


@contextmanager
def get_postgres_connection(url: str) -> Iterator[PostgresConnection]:
    """Open a PostgreSQL connection for a single unit of work."""
    import psycopg2

    logger.debug(f"Connecting to PostgreSQL at {_redact_url(url)}")
    wrapped = PostgresConnection(psycopg2.connect(url))
    try:
        yield wrapped
    finally:
        wrapped.close()


def init_postgres_schema(url: str) -> None:
    """Initialize the remote catalog schema (idempotent)."""
    logger.info("Initializing PostgreSQL schema for remote catalog...")

    with get_postgres_connection(url) as conn:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS composers (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                period TEXT DEFAULT '',
                image TEXT DEFAULT '',
                sheet_music_count INTEGER NOT NULL DEFAULT 0,
                recording_count INTEGER NOT NULL DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS works (
                id TEXT PRIMARY KEY,
                composer_id TEXT NOT NULL REFERENCES composers(id) ON DELETE CASCADE,
                title TEXT NOT NULL,
                edition TEXT DEFAULT '',
                year TEXT DEFAULT '',
                file_url TEXT DEFAULT '',
                position INTEGER NOT NULL DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS recordings (
                id TEXT PRIMARY KEY,
                composer_id TEXT NOT NULL REFERENCES composers(id) ON DELETE CASCADE,
                title TEXT NOT NULL,
                performer TEXT DEFAULT '',
                duration TEXT DEFAULT '',
                year TEXT DEFAULT '',
                file_url TEXT DEFAULT '',
                position INTEGER NOT NULL DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # Catalogs created before ordering and counts existed
        conn.execute("ALTER TABLE works ADD COLUMN IF NOT EXISTS position INTEGER NOT NULL DEFAULT 0")
        conn.execute("ALTER TABLE recordings ADD COLUMN IF NOT EXISTS position INTEGER NOT NULL DEFAULT 0")
        conn.execute(
            "ALTER TABLE composers ADD COLUMN IF NOT EXISTS sheet_music_count INTEGER NOT NULL DEFAULT 0"
        )
        conn.execute(
            "ALTER TABLE composers ADD COLUMN IF NOT EXISTS recording_count INTEGER NOT NULL DEFAULT 0"
        )

        conn.execute("CREATE INDEX IF NOT EXISTS idx_works_composer ON works(composer_id, position)")
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_recordings_composer ON recordings(composer_id, position)"
        )

        conn.commit()

    logger.info("PostgreSQL schema initialized")
