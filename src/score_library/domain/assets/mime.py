"""
Content-type and storage-category resolution for asset files.

Pure functions: nothing here touches the filesystem or the network.
"""

from enum import Enum
from pathlib import PurePosixPath
from typing import Optional
from urllib.parse import urlparse

DEFAULT_EXTENSION = "bin"
DEFAULT_CONTENT_TYPE = "application/octet-stream"

MIME_TYPES = {
    "pdf": "application/pdf",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "m4a": "audio/mp4",
    "ogg": "audio/ogg",
}


class AssetCategory(Enum):
    """Storage category of an asset; decides directory, bucket and key prefix."""

    SHEET = "sheet"
    RECORDING = "recording"
    AVATAR = "avatar"

    @property
    def local_dir(self) -> str:
        """Directory name under the local asset root (SML/<dir>)."""
        return _LOCAL_DIRS[self]

    @property
    def remote_prefix(self) -> str:
        """Key prefix inside the remote bucket."""
        return _REMOTE_PREFIXES[self]


_LOCAL_DIRS = {
    AssetCategory.SHEET: "sheets",
    AssetCategory.RECORDING: "recordings",
    AssetCategory.AVATAR: "avatars",
}

_REMOTE_PREFIXES = {
    AssetCategory.SHEET: "sheets",
    AssetCategory.RECORDING: "audio",
    AssetCategory.AVATAR: "composers",
}


def extension_of(path_or_url: str, default: str = DEFAULT_EXTENSION) -> str:
    """Lower-cased extension of a path or URL, without the dot.

    Query strings and fragments of URLs are ignored.

    >>> extension_of("SML/sheets/abc.PDF")
    'pdf'
    >>> extension_of("https://cdn.example/x/y.mp3?token=1")
    'mp3'
    """
    if not path_or_url:
        return default
    if "://" in path_or_url:
        path_or_url = urlparse(path_or_url).path
    suffix = PurePosixPath(path_or_url).suffix
    return suffix[1:].lower() if len(suffix) > 1 else default


def content_type_for(path_or_extension: str) -> str:
    """Infer a content type from a file extension or a path ending in one."""
    value = path_or_extension.strip().lower()
    if "/" in value or "." in value.lstrip("."):
        value = extension_of(value, default="")
    else:
        value = value.lstrip(".")
    return MIME_TYPES.get(value, DEFAULT_CONTENT_TYPE)


def infer_category(path: str) -> Optional[AssetCategory]:
    """Guess the storage category of a path.

    A known category directory in the path wins; otherwise the extension
    family decides (documents are sheets, audio is a recording, images are
    avatars). Returns None when neither gives an answer.
    """
    if not path:
        return None

    if "://" in path:
        path = urlparse(path).path
    parts = PurePosixPath(path).parts[:-1]
    for category in AssetCategory:
        if category.local_dir in parts:
            return category

    content_type = content_type_for(extension_of(path, default=""))
    if content_type == "application/pdf":
        return AssetCategory.SHEET
    if content_type.startswith("audio/"):
        return AssetCategory.RECORDING
    if content_type.startswith("image/"):
        return AssetCategory.AVATAR
    return None
