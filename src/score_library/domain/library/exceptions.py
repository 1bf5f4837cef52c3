"""Library store exceptions for error handling."""


class LibraryError(Exception):
    """Base exception for relational store operations."""

    pass


class EntityNotFoundError(LibraryError):
    """Raised when a composer, work or recording does not exist."""

    def __init__(self, entity: str, entity_id: str, message: str = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(message or f"{entity.capitalize()} not found: {entity_id}")


class IdentifierCollisionError(LibraryError):
    """Raised when a freshly minted id already exists in the store."""

    def __init__(self, table: str, entity_id: str):
        self.table = table
        self.entity_id = entity_id
        super().__init__(f"Generated id {entity_id} already exists in {table}")


class StoreClosedError(LibraryError):
    """Raised when a store is used before open() or after close()."""

    pass
