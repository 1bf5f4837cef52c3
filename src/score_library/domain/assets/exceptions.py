"""Asset storage exceptions for error handling."""


class AssetError(Exception):
    """Base exception for asset storage operations."""

    pass


class AssetNotFoundError(AssetError):
    """Raised when a referenced asset does not exist in its store."""

    def __init__(self, reference: str, message: str = None):
        self.reference = reference
        super().__init__(message or f"Asset not found: {reference}")


class AssetTransferError(AssetError):
    """Raised when an upload or download to object storage fails."""

    pass


class UnsupportedReferenceError(AssetError):
    """Raised when a reference cannot belong to the store it was given to."""

    pass
