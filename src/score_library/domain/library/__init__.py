"""Library domain - composers, works and recordings.

This domain handles:
- Data models and typed partial updates
- The relational store (SQLite locally, PostgreSQL remotely)
- Local catalog operations that combine rows and asset files
"""

# Models
from .models import (
    AssetKind,
    AssetRef,
    Composer,
    ComposerUpdate,
    Recording,
    RecordingUpdate,
    Work,
    WorkUpdate,
)

# Exceptions
from .exceptions import (
    EntityNotFoundError,
    IdentifierCollisionError,
    LibraryError,
    StoreClosedError,
)

# Relational store
from .repository import (
    LibraryRepository,
    new_entity_id,
    postgres_repository,
    sqlite_repository,
)

# Catalog operations
from .catalog import (
    ATTACH_KINDS,
    attach_file,
    delete_composer,
    delete_recording,
    delete_work,
    list_composers_for_display,
)

__all__ = [
    # Models
    "AssetKind",
    "AssetRef",
    "Composer",
    "ComposerUpdate",
    "Recording",
    "RecordingUpdate",
    "Work",
    "WorkUpdate",
    # Exceptions
    "EntityNotFoundError",
    "IdentifierCollisionError",
    "LibraryError",
    "StoreClosedError",
    # Repository
    "LibraryRepository",
    "new_entity_id",
    "postgres_repository",
    "sqlite_repository",
    # Catalog
    "ATTACH_KINDS",
    "attach_file",
    "delete_composer",
    "delete_recording",
    "delete_work",
    "list_composers_for_display",
]
