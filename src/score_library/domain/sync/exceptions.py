"""Sync-specific exceptions for error handling."""


class SyncError(Exception):
    """Base exception for push/pull operations.

    Raised directly when a sync cannot continue at all, e.g. when the
    destination composer row could not be created.
    """

    pass


class RemoteFetchError(SyncError):
    """Raised when the remote subtree of a pull cannot be read."""

    def __init__(self, composer_id: str, message: str = None):
        self.composer_id = composer_id
        super().__init__(message or f"Could not fetch remote composer {composer_id}")
