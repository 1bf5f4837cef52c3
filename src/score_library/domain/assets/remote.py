"""
Remote asset storage over an HTTP object-storage API.

Objects are uploaded to ``<storage_url>/storage/v1/object/<bucket>/<key>``
and served from the public URL
``<storage_url>/storage/v1/object/public/<bucket>/<key>``. The public URL is
the reference stored in the remote catalog.
"""

from typing import Callable, Dict, Optional
from urllib.parse import urlparse

import requests
from loguru import logger

from .exceptions import AssetTransferError, UnsupportedReferenceError
from .mime import DEFAULT_EXTENSION, AssetCategory, content_type_for

OBJECT_API_PATH = "/storage/v1/object"

DEFAULT_BUCKETS = {
    AssetCategory.SHEET: "sheet-music",
    AssetCategory.RECORDING: "recordings",
    AssetCategory.AVATAR: "avatars",
}


def fetch_bytes(
    url: str,
    session: Optional[requests.Session] = None,
    timeout: int = 30,
) -> bytes:
    """Download a URL and return the response body.

    Args:
        url: http(s) URL to fetch
        session: Optional session to reuse connections and headers
        timeout: Request timeout in seconds

    Raises:
        UnsupportedReferenceError: If the URL is not http(s)
        AssetTransferError: On network errors or non-2xx responses
    """
    if urlparse(url).scheme not in ("http", "https"):
        raise UnsupportedReferenceError(f"Not an http(s) URL: {url}")

    get = session.get if session is not None else requests.get
    try:
        response = get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise AssetTransferError(f"Download failed for {url}: {e}") from e

    return response.content


class RemoteAssetStore:
    """Bucketed object storage reached through ``requests``.

    The caller owns the lifecycle: ``open()`` creates the HTTP session,
    ``close()`` releases it.
    """

    def __init__(
        self,
        storage_url: str,
        service_key: str,
        buckets: Optional[Dict[AssetCategory, str]] = None,
        timeout: int = 30,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ) -> None:
        self.storage_url = storage_url.rstrip("/")
        self.service_key = service_key
        self.buckets = {**DEFAULT_BUCKETS, **(buckets or {})}
        self.timeout = timeout
        self._session_factory = session_factory
        self._session: Optional[requests.Session] = None

    def open(self) -> "RemoteAssetStore":
        if self._session is None:
            session = self._session_factory()
            session.headers.update(
                {
                    "Authorization": f"Bearer {self.service_key}",
                    "apikey": self.service_key,
                }
            )
            self._session = session
        return self

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    @property
    def is_open(self) -> bool:
        return self._session is not None

    def __enter__(self) -> "RemoteAssetStore":
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            raise AssetTransferError("Remote asset store is not open")
        return self._session

    @property
    def public_prefix(self) -> str:
        return f"{self.storage_url}{OBJECT_API_PATH}/public/"

    def bucket_for(self, category: AssetCategory) -> str:
        return self.buckets[category]

    def object_key(
        self, category: AssetCategory, entity_id: str, extension: str
    ) -> str:
        """Category-scoped key, e.g. ``sheets/<entity_id>.pdf``."""
        extension = (extension or DEFAULT_EXTENSION).lstrip(".").lower()
        return f"{category.remote_prefix}/{entity_id}.{extension}"

    def public_url(self, bucket: str, key: str) -> str:
        return f"{self.public_prefix}{bucket}/{key}"

    def _split_reference(self, reference: str) -> tuple[str, str]:
        """Split a public URL of this store into (bucket, key)."""
        if not reference.startswith(self.public_prefix):
            raise UnsupportedReferenceError(
                f"Reference does not belong to {self.storage_url}: {reference}"
            )
        bucket, _, key = reference[len(self.public_prefix):].partition("/")
        if not bucket or not key:
            raise UnsupportedReferenceError(f"Malformed object URL: {reference}")
        return bucket, key

    def write(
        self,
        data: bytes,
        category: AssetCategory,
        entity_id: str,
        extension: str = DEFAULT_EXTENSION,
        content_type: Optional[str] = None,
    ) -> str:
        """Upload ``data`` (overwriting any object with the same key).

        Returns:
            Durable public URL of the object
        """
        bucket = self.bucket_for(category)
        key = self.object_key(category, entity_id, extension)
        content_type = content_type or content_type_for(extension)

        try:
            response = self.session.post(
                f"{self.storage_url}{OBJECT_API_PATH}/{bucket}/{key}",
                data=data,
                headers={"Content-Type": content_type, "x-upsert": "true"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise AssetTransferError(f"Storage upload failed for {bucket}/{key}: {e}") from e

        logger.debug(f"Uploaded {bucket}/{key} ({len(data)} bytes, {content_type})")
        return self.public_url(bucket, key)

    def read(self, reference: str) -> bytes:
        """Download an object by its public URL.

        Only URLs of this store go through the authenticated session; any
        other host is fetched without credentials.
        """
        if reference.startswith(self.public_prefix):
            return fetch_bytes(reference, session=self.session, timeout=self.timeout)
        return fetch_bytes(reference, timeout=self.timeout)

    def delete(self, reference: str) -> None:
        """Remove an object; empty references are ignored."""
        if not reference:
            return
        bucket, key = self._split_reference(reference)
        try:
            response = self.session.delete(
                f"{self.storage_url}{OBJECT_API_PATH}/{bucket}/{key}",
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise AssetTransferError(f"Storage delete failed for {bucket}/{key}: {e}") from e
        logger.debug(f"Deleted remote object {bucket}/{key}")

    def resolve_for_display(self, reference: str) -> str:
        """Public URLs are directly displayable."""
        if not reference:
            return ""
        if urlparse(reference).scheme not in ("http", "https"):
            raise UnsupportedReferenceError(f"Not a remote asset URL: {reference}")
        return reference
