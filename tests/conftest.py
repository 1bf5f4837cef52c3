"""Shared fixtures: both sides of the sync backed by temporary stores.

The remote catalog runs on the same repository class over a second SQLite
file; remote object storage is an in-memory double built on
RemoteAssetStore, so keys and public URLs are computed by the real code.
"""

from typing import Dict, Optional, Set

import pytest

from score_library.domain.assets import (
    AssetCategory,
    AssetTransferError,
    LocalAssetStore,
    RemoteAssetStore,
    content_type_for,
)
from score_library.domain.library import sqlite_repository
from score_library.domain.sync import SyncOrchestrator


class InMemoryObjectStore(RemoteAssetStore):
    """Remote asset store that keeps objects in a dict instead of HTTP."""

    def __init__(self) -> None:
        super().__init__("https://storage.test", "test-key")
        self.objects: Dict[str, bytes] = {}
        self.content_types: Dict[str, str] = {}
        self.fail_categories: Set[AssetCategory] = set()

    def open(self) -> "InMemoryObjectStore":
        return self

    def close(self) -> None:
        pass

    def write(
        self,
        data: bytes,
        category: AssetCategory,
        entity_id: str,
        extension: str = "bin",
        content_type: Optional[str] = None,
    ) -> str:
        if category in self.fail_categories:
            raise AssetTransferError(f"Upload rejected for {category.value}")
        bucket = self.bucket_for(category)
        key = self.object_key(category, entity_id, extension)
        url = self.public_url(bucket, key)
        self.objects[url] = bytes(data)
        self.content_types[url] = content_type or content_type_for(extension)
        return url

    def read(self, reference: str) -> bytes:
        try:
            return self.objects[reference]
        except KeyError:
            raise AssetTransferError(f"404 Not Found: {reference}") from None

    def delete(self, reference: str) -> None:
        self.objects.pop(reference, None)


@pytest.fixture
def local_repo(tmp_path):
    repo = sqlite_repository(tmp_path / "local.db").open()
    yield repo
    repo.close()


@pytest.fixture
def remote_repo(tmp_path):
    repo = sqlite_repository(tmp_path / "remote.db", name="remote").open()
    yield repo
    repo.close()


@pytest.fixture
def local_assets(tmp_path):
    store = LocalAssetStore(tmp_path / "data").open()
    yield store
    store.close()


@pytest.fixture
def remote_assets():
    return InMemoryObjectStore()


@pytest.fixture
def orchestrator(local_repo, local_assets, remote_repo, remote_assets):
    return SyncOrchestrator(
        local_repo=local_repo,
        local_assets=local_assets,
        remote_repo=remote_repo,
        remote_assets=remote_assets,
    )
