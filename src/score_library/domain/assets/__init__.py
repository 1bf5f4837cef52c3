"""Assets domain - binary files attached to library entities.

This domain handles:
- Content-type and category resolution
- Local file storage (base64 transport encoding)
- Remote bucketed object storage over HTTP
"""

from .exceptions import (
    AssetError,
    AssetNotFoundError,
    AssetTransferError,
    UnsupportedReferenceError,
)
from .local import (
    LocalAssetStore,
    StorageUsage,
    decode_base64,
    encode_base64,
    format_size,
)
from .mime import (
    AssetCategory,
    content_type_for,
    extension_of,
    infer_category,
)
from .remote import RemoteAssetStore, fetch_bytes

__all__ = [
    # Exceptions
    "AssetError",
    "AssetNotFoundError",
    "AssetTransferError",
    "UnsupportedReferenceError",
    # Local
    "LocalAssetStore",
    "StorageUsage",
    "decode_base64",
    "encode_base64",
    "format_size",
    # Mime
    "AssetCategory",
    "content_type_for",
    "extension_of",
    "infer_category",
    # Remote
    "RemoteAssetStore",
    "fetch_bytes",
]
