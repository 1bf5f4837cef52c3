"""
Relational store for composers, works and recordings.

One repository class serves both sides of the sync: the local library runs
it over SQLite, the remote catalog over PostgreSQL. Queries use SQLite-style
placeholders; the PostgreSQL connection wrapper converts them.

Every operation opens its own short-lived connection, so a repository can be
shared between threads (concurrent syncs of different composers).
"""

import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, ContextManager, Dict, Iterator, List, Optional

from loguru import logger

from ...core.database import get_db_connection, init_database
from ...core.db_adapter import (
    ConnectionProtocol,
    get_postgres_connection,
    init_postgres_schema,
)
from .exceptions import EntityNotFoundError, IdentifierCollisionError, StoreClosedError
from .models import (
    Composer,
    ComposerUpdate,
    EntityUpdate,
    Recording,
    RecordingUpdate,
    Work,
    WorkUpdate,
)

ConnectionFactory = Callable[[], ContextManager[ConnectionProtocol]]


def new_entity_id() -> str:
    """Mint a store-scoped identifier."""
    return uuid.uuid4().hex


def _composer_from_row(row: Any, works_count: int = 0, recordings_count: int = 0) -> Composer:
    return Composer(
        id=row["id"],
        name=row["name"],
        period=row["period"] or "",
        image=row["image"] or "",
        sheet_music_count=works_count,
        recording_count=recordings_count,
    )


def _work_from_row(row: Any) -> Work:
    return Work(
        id=row["id"],
        composer_id=row["composer_id"],
        title=row["title"],
        edition=row["edition"] or "",
        year=row["year"] or "",
        file_url=row["file_url"] or "",
    )


def _recording_from_row(row: Any) -> Recording:
    return Recording(
        id=row["id"],
        composer_id=row["composer_id"],
        title=row["title"],
        performer=row["performer"] or "",
        duration=row["duration"] or "",
        year=row["year"] or "",
        file_url=row["file_url"] or "",
    )


class LibraryRepository:
    """CRUD over the composers/works/recordings schema of one store.

    Args:
        name: Label used in logs ("local", "remote")
        connect: Factory returning a connection context manager
        init_schema: Idempotent schema setup, run by ``open()``
        id_factory: Generates ids for new rows
    """

    def __init__(
        self,
        name: str,
        connect: ConnectionFactory,
        init_schema: Callable[[], None],
        id_factory: Callable[[], str] = new_entity_id,
    ) -> None:
        self.name = name
        self._connect = connect
        self._init_schema = init_schema
        self._id_factory = id_factory
        self._is_open = False

    def open(self) -> "LibraryRepository":
        if not self._is_open:
            self._init_schema()
            self._is_open = True
            logger.debug(f"Opened {self.name} library store")
        return self

    def close(self) -> None:
        if self._is_open:
            self._is_open = False
            logger.debug(f"Closed {self.name} library store")

    @property
    def is_open(self) -> bool:
        return self._is_open

    def __enter__(self) -> "LibraryRepository":
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()

    @contextmanager
    def _connection(self) -> Iterator[ConnectionProtocol]:
        if not self._is_open:
            raise StoreClosedError(f"The {self.name} library store is not open")
        with self._connect() as conn:
            yield conn

    def _mint_id(self, conn: ConnectionProtocol, table: str) -> str:
        entity_id = self._id_factory()
        cursor = conn.execute(f"SELECT 1 FROM {table} WHERE id = ?", (entity_id,))
        if cursor.fetchone() is not None:
            raise IdentifierCollisionError(table, entity_id)
        return entity_id

    @staticmethod
    def _require_composer(conn: ConnectionProtocol, composer_id: str) -> Any:
        row = conn.execute(
            "SELECT * FROM composers WHERE id = ?", (composer_id,)
        ).fetchone()
        if row is None:
            raise EntityNotFoundError("composer", composer_id)
        return row

    @staticmethod
    def _child_counts(conn: ConnectionProtocol, table: str) -> Dict[str, int]:
        cursor = conn.execute(
            f"SELECT composer_id, COUNT(*) as count FROM {table} GROUP BY composer_id"
        )
        return {row["composer_id"]: row["count"] for row in cursor.fetchall()}

    # =============================================
    # Composers
    # =============================================

    def list_composers(self) -> List[Composer]:
        """All composers ordered by name, with live work/recording counts."""
        with self._connection() as conn:
            rows = conn.execute("SELECT * FROM composers ORDER BY name").fetchall()
            works_counts = self._child_counts(conn, "works")
            recordings_counts = self._child_counts(conn, "recordings")

        return [
            _composer_from_row(
                row,
                works_counts.get(row["id"], 0),
                recordings_counts.get(row["id"], 0),
            )
            for row in rows
        ]

    def get_composer(self, composer_id: str) -> Composer:
        """Composer without children (counts filled in)."""
        with self._connection() as conn:
            row = self._require_composer(conn, composer_id)
            works_count = conn.execute(
                "SELECT COUNT(*) as count FROM works WHERE composer_id = ?",
                (composer_id,),
            ).fetchone()["count"]
            recordings_count = conn.execute(
                "SELECT COUNT(*) as count FROM recordings WHERE composer_id = ?",
                (composer_id,),
            ).fetchone()["count"]
        return _composer_from_row(row, works_count, recordings_count)

    def get_composer_with_children(self, composer_id: str) -> Composer:
        """Composer with its works and recordings in insertion order.

        Issues one read for the composer and one per child collection.
        """
        with self._connection() as conn:
            row = self._require_composer(conn, composer_id)
            works = [
                _work_from_row(r)
                for r in conn.execute(
                    "SELECT * FROM works WHERE composer_id = ? ORDER BY position",
                    (composer_id,),
                ).fetchall()
            ]
            recordings = [
                _recording_from_row(r)
                for r in conn.execute(
                    "SELECT * FROM recordings WHERE composer_id = ? ORDER BY position",
                    (composer_id,),
                ).fetchall()
            ]

        composer = _composer_from_row(row, len(works), len(recordings))
        composer.works = works
        composer.recordings = recordings
        return composer

    def create_composer(
        self,
        name: str,
        period: str = "",
        image: str = "",
        sheet_music_count: int = 0,
        recording_count: int = 0,
    ) -> Composer:
        """Insert a composer; the store assigns its id."""
        with self._connection() as conn:
            composer_id = self._mint_id(conn, "composers")
            conn.execute(
                """
                INSERT INTO composers (id, name, period, image, sheet_music_count, recording_count)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (composer_id, name, period, image, sheet_music_count, recording_count),
            )
            conn.commit()

        logger.debug(f"[{self.name}] Created composer {composer_id}: {name}")
        return Composer(
            id=composer_id,
            name=name,
            period=period,
            image=image,
            sheet_music_count=sheet_music_count,
            recording_count=recording_count,
        )

    def update_composer(self, composer_id: str, update: ComposerUpdate) -> Composer:
        """Apply the fields set in ``update`` and return the re-read row."""
        self._apply_update("composers", "composer", composer_id, update)
        return self.get_composer(composer_id)

    def delete_composer(self, composer_id: str) -> None:
        """Delete a composer; works and recordings cascade."""
        self._delete("composers", "composer", composer_id)

    # =============================================
    # Works
    # =============================================

    def list_works(self, composer_id: Optional[str] = None) -> List[Work]:
        with self._connection() as conn:
            if composer_id is None:
                rows = conn.execute(
                    "SELECT * FROM works ORDER BY composer_id, position"
                ).fetchall()
            else:
                rows = conn.execute(
                    "SELECT * FROM works WHERE composer_id = ? ORDER BY position",
                    (composer_id,),
                ).fetchall()
        return [_work_from_row(row) for row in rows]

    def get_work(self, work_id: str) -> Work:
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM works WHERE id = ?", (work_id,)).fetchone()
        if row is None:
            raise EntityNotFoundError("work", work_id)
        return _work_from_row(row)

    def create_work(
        self,
        composer_id: str,
        title: str,
        edition: str = "",
        year: str = "",
        file_url: str = "",
    ) -> Work:
        with self._connection() as conn:
            self._require_composer(conn, composer_id)
            work_id = self._mint_id(conn, "works")
            conn.execute(
                """
                INSERT INTO works (id, composer_id, title, edition, year, file_url, position)
                VALUES (?, ?, ?, ?, ?, ?,
                        (SELECT COALESCE(MAX(position) + 1, 0) FROM works WHERE composer_id = ?))
                """,
                (work_id, composer_id, title, edition, year, file_url, composer_id),
            )
            conn.commit()

        return Work(
            id=work_id,
            composer_id=composer_id,
            title=title,
            edition=edition,
            year=year,
            file_url=file_url,
        )

    def update_work(self, work_id: str, update: WorkUpdate) -> Work:
        self._apply_update("works", "work", work_id, update)
        return self.get_work(work_id)

    def delete_work(self, work_id: str) -> None:
        self._delete("works", "work", work_id)

    # =============================================
    # Recordings
    # =============================================

    def list_recordings(self, composer_id: Optional[str] = None) -> List[Recording]:
        with self._connection() as conn:
            if composer_id is None:
                rows = conn.execute(
                    "SELECT * FROM recordings ORDER BY composer_id, position"
                ).fetchall()
            else:
                rows = conn.execute(
                    "SELECT * FROM recordings WHERE composer_id = ? ORDER BY position",
                    (composer_id,),
                ).fetchall()
        return [_recording_from_row(row) for row in rows]

    def get_recording(self, recording_id: str) -> Recording:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT * FROM recordings WHERE id = ?", (recording_id,)
            ).fetchone()
        if row is None:
            raise EntityNotFoundError("recording", recording_id)
        return _recording_from_row(row)

    def create_recording(
        self,
        composer_id: str,
        title: str,
        performer: str = "",
        duration: str = "",
        year: str = "",
        file_url: str = "",
    ) -> Recording:
        with self._connection() as conn:
            self._require_composer(conn, composer_id)
            recording_id = self._mint_id(conn, "recordings")
            conn.execute(
                """
                INSERT INTO recordings (id, composer_id, title, performer, duration, year, file_url, position)
                VALUES (?, ?, ?, ?, ?, ?, ?,
                        (SELECT COALESCE(MAX(position) + 1, 0) FROM recordings WHERE composer_id = ?))
                """,
                (
                    recording_id,
                    composer_id,
                    title,
                    performer,
                    duration,
                    year,
                    file_url,
                    composer_id,
                ),
            )
            conn.commit()

        return Recording(
            id=recording_id,
            composer_id=composer_id,
            title=title,
            performer=performer,
            duration=duration,
            year=year,
            file_url=file_url,
        )

    def update_recording(self, recording_id: str, update: RecordingUpdate) -> Recording:
        self._apply_update("recordings", "recording", recording_id, update)
        return self.get_recording(recording_id)

    def delete_recording(self, recording_id: str) -> None:
        self._delete("recordings", "recording", recording_id)

    # =============================================
    # Shared write helpers
    # =============================================

    def _apply_update(
        self, table: str, entity: str, entity_id: str, update: EntityUpdate
    ) -> None:
        with self._connection() as conn:
            if update.is_empty():
                if conn.execute(
                    f"SELECT 1 FROM {table} WHERE id = ?", (entity_id,)
                ).fetchone() is None:
                    raise EntityNotFoundError(entity, entity_id)
                return

            changes = update.changes()
            set_clause = ", ".join(f"{column} = ?" for column in changes)
            cursor = conn.execute(
                f"UPDATE {table} SET {set_clause} WHERE id = ?",
                (*changes.values(), entity_id),
            )
            if cursor.rowcount == 0:
                raise EntityNotFoundError(entity, entity_id)
            conn.commit()

        logger.debug(f"[{self.name}] Updated {entity} {entity_id}: {sorted(changes)}")

    def _delete(self, table: str, entity: str, entity_id: str) -> None:
        with self._connection() as conn:
            cursor = conn.execute(f"DELETE FROM {table} WHERE id = ?", (entity_id,))
            if cursor.rowcount == 0:
                raise EntityNotFoundError(entity, entity_id)
            conn.commit()

        logger.debug(f"[{self.name}] Deleted {entity} {entity_id}")


def sqlite_repository(db_path: Path, name: str = "local") -> LibraryRepository:
    """Repository over a SQLite file (the local library)."""
    return LibraryRepository(
        name=name,
        connect=lambda: get_db_connection(db_path),
        init_schema=lambda: init_database(db_path),
    )


def postgres_repository(database_url: str, name: str = "remote") -> LibraryRepository:
    """Repository over PostgreSQL (the remote catalog)."""
    return LibraryRepository(
        name=name,
        connect=lambda: get_postgres_connection(database_url),
        init_schema=lambda: init_postgres_schema(database_url),
    )
