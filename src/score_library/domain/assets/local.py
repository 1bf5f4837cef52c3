"""
Local asset storage.

Assets live as plain files under ``<base_dir>/SML/<category dir>/<id>.<ext>``.
References stored in the database are the POSIX path relative to
``base_dir`` (for example ``SML/sheets/1f0c....pdf``). Content crosses the
store boundary as base64 text, matching what the sync engine transports.
"""

import base64
import binascii
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict

from loguru import logger

from .exceptions import AssetError, AssetNotFoundError, UnsupportedReferenceError
from .mime import DEFAULT_EXTENSION, AssetCategory

ASSET_ROOT = "SML"


def encode_base64(data: bytes) -> str:
    """Encode bytes as base64 text (no data: prefix)."""
    return base64.b64encode(data).decode("ascii")


def decode_base64(text: str) -> bytes:
    """Decode base64 text, rejecting anything that is not valid base64."""
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise AssetError(f"Invalid base64 asset data: {e}") from e


@dataclass
class CategoryUsage:
    """File count and total size of one asset category."""

    count: int = 0
    size: int = 0


@dataclass
class StorageUsage:
    """Disk usage of the local asset store, per category."""

    categories: Dict[AssetCategory, CategoryUsage] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(usage.size for usage in self.categories.values())


class LocalAssetStore:
    """File-backed asset store rooted at ``base_dir``.

    The caller owns the lifecycle: call ``open()`` before use and ``close()``
    afterwards (or use the store as a context manager).
    """

    def __init__(self, base_dir: Path) -> None:
        self.base_dir = Path(base_dir)
        self._is_open = False

    def open(self) -> "LocalAssetStore":
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self._is_open = True
        return self

    def close(self) -> None:
        self._is_open = False

    @property
    def is_open(self) -> bool:
        return self._is_open

    def __enter__(self) -> "LocalAssetStore":
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _check_open(self) -> None:
        if not self._is_open:
            raise AssetError(f"Local asset store at {self.base_dir} is not open")

    def category_dir(self, category: AssetCategory) -> str:
        """Relative directory for a category, e.g. ``SML/sheets``."""
        return f"{ASSET_ROOT}/{category.local_dir}"

    def ensure_category_dir(self, category: AssetCategory) -> Path:
        """Create the category directory if missing; other errors propagate."""
        path = self.base_dir / ASSET_ROOT / category.local_dir
        path.mkdir(parents=True, exist_ok=True)
        return path

    def path_for(self, reference: str) -> Path:
        """Absolute path of a reference, refusing anything outside the store."""
        if not reference:
            raise UnsupportedReferenceError("Empty asset reference")
        if "://" in reference:
            raise UnsupportedReferenceError(
                f"Not a local asset reference: {reference}"
            )

        root = self.base_dir.resolve()
        resolved = (self.base_dir / reference).resolve()
        try:
            resolved.relative_to(root)
        except ValueError:
            raise UnsupportedReferenceError(
                f"Reference escapes the asset store: {reference}"
            ) from None
        return resolved

    def write(
        self,
        data: str,
        category: AssetCategory,
        entity_id: str,
        extension: str = DEFAULT_EXTENSION,
    ) -> str:
        """Store base64 ``data`` as ``<category dir>/<entity_id>.<extension>``.

        Returns:
            The new reference (path relative to the store root)
        """
        self._check_open()
        raw = decode_base64(data)
        extension = (extension or DEFAULT_EXTENSION).lstrip(".").lower()

        directory = self.ensure_category_dir(category)
        file_name = f"{entity_id}.{extension}"
        target = directory / file_name

        # Atomic write: temp file in the same directory, then replace
        temp_path = target.with_name(file_name + ".tmp")
        try:
            temp_path.write_bytes(raw)
            os.replace(temp_path, target)
        except OSError:
            if temp_path.exists():
                temp_path.unlink()
            raise

        reference = f"{self.category_dir(category)}/{file_name}"
        logger.debug(f"Stored local asset {reference} ({len(raw)} bytes)")
        return reference

    def write_bytes(
        self,
        data: bytes,
        category: AssetCategory,
        entity_id: str,
        extension: str = DEFAULT_EXTENSION,
    ) -> str:
        """Convenience wrapper for callers holding raw bytes."""
        return self.write(encode_base64(data), category, entity_id, extension)

    def read(self, reference: str) -> str:
        """Read an asset as base64 text.

        Raises:
            AssetNotFoundError: If the file does not exist
        """
        self._check_open()
        path = self.path_for(reference)
        try:
            return encode_base64(path.read_bytes())
        except FileNotFoundError:
            raise AssetNotFoundError(reference) from None

    def exists(self, reference: str) -> bool:
        if not reference:
            return False
        try:
            return self.path_for(reference).is_file()
        except UnsupportedReferenceError:
            return False

    def delete(self, reference: str) -> None:
        """Delete an asset; a missing file is logged and ignored."""
        self._check_open()
        if not reference:
            return
        path = self.path_for(reference)
        try:
            path.unlink()
            logger.debug(f"Deleted local asset {reference}")
        except FileNotFoundError:
            logger.warning(f"Local asset already gone: {reference}")

    def resolve_for_display(self, reference: str) -> str:
        """``file://`` URI for a stored reference, or "" when there is none."""
        if not reference:
            return ""
        path = self.path_for(reference)
        if not path.is_file():
            logger.warning(f"Cannot resolve missing local asset: {reference}")
            return ""
        return path.as_uri()

    def storage_usage(self) -> StorageUsage:
        """Count files and bytes per category directory."""
        usage = StorageUsage()
        for category in AssetCategory:
            category_usage = CategoryUsage()
            directory = self.base_dir / ASSET_ROOT / category.local_dir
            if directory.is_dir():
                for entry in directory.iterdir():
                    if entry.is_file() and not entry.name.endswith(".tmp"):
                        category_usage.count += 1
                        category_usage.size += entry.stat().st_size
            usage.categories[category] = category_usage
        return usage


def format_size(num_bytes: int, precision: int = 1) -> str:
    """Human-readable byte size (B, KB, MB, GB)."""
    if num_bytes <= 0:
        return "0 B"
    size = float(num_bytes)
    for unit in ("B", "KB", "MB"):
        if size < 1024:
            return f"{size:.{precision}f} {unit}".replace(".0 ", " ")
        size /= 1024
    return f"{size:.{precision}f} GB".replace(".0 ", " ")
