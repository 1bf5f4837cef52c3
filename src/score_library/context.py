"""Application context for explicit state passing.

LibraryContext bundles the configuration with the four stores (local and
remote, records and assets). The CLI and the web API build one context,
open it once and pass it to the functions that need stores, instead of
reaching for module-level globals.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from loguru import logger

from score_library.core.config import Config, get_data_dir
from score_library.core.database import get_database_path
from score_library.domain.assets import AssetCategory, LocalAssetStore, RemoteAssetStore
from score_library.domain.library import (
    LibraryRepository,
    postgres_repository,
    sqlite_repository,
)
from score_library.domain.sync import SyncError, SyncOrchestrator


@dataclass
class LibraryContext:
    """Configuration plus the stores it describes.

    Attributes:
        config: Application configuration
        local_repo: SQLite store for the local library
        local_assets: File store rooted at the data directory
        remote_repo: PostgreSQL catalog (None when remote is not configured)
        remote_assets: Object storage (None when remote is not configured)
    """

    config: Config
    local_repo: LibraryRepository
    local_assets: LocalAssetStore
    remote_repo: Optional[LibraryRepository] = None
    remote_assets: Optional[RemoteAssetStore] = None

    @classmethod
    def create(cls, config: Config) -> "LibraryContext":
        """Build (but do not open) all stores described by ``config``.

        Args:
            config: Application configuration

        Returns:
            New LibraryContext; the remote side is left empty unless both
            database_url and storage_url are configured
        """
        data_dir: Path = get_data_dir(config)
        remote_repo = None
        remote_assets = None

        if config.remote.enabled:
            remote_repo = postgres_repository(config.remote.database_url)
            remote_assets = RemoteAssetStore(
                config.remote.storage_url,
                config.remote.service_key,
                buckets={
                    AssetCategory.SHEET: config.remote.sheet_bucket,
                    AssetCategory.RECORDING: config.remote.recording_bucket,
                    AssetCategory.AVATAR: config.remote.avatar_bucket,
                },
                timeout=config.remote.request_timeout,
            )

        return cls(
            config=config,
            local_repo=sqlite_repository(get_database_path(config)),
            local_assets=LocalAssetStore(data_dir),
            remote_repo=remote_repo,
            remote_assets=remote_assets,
        )

    @property
    def has_remote(self) -> bool:
        return self.remote_repo is not None and self.remote_assets is not None

    def open(self, remote: bool = True) -> "LibraryContext":
        """Open the local stores, and the remote ones when requested."""
        self.local_repo.open()
        self.local_assets.open()
        if remote and self.has_remote:
            self.remote_repo.open()
            self.remote_assets.open()
        logger.debug(f"Library context opened (remote={remote and self.has_remote})")
        return self

    def close(self) -> None:
        for store in (self.remote_assets, self.remote_repo, self.local_assets, self.local_repo):
            if store is not None:
                store.close()

    def __enter__(self) -> "LibraryContext":
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()

    def orchestrator(self) -> SyncOrchestrator:
        """Sync engine wired to this context's stores.

        Raises:
            SyncError: If the remote side is not configured
        """
        if not self.has_remote:
            raise SyncError(
                "Remote store is not configured "
                "(set [remote] database_url and storage_url)"
            )
        return SyncOrchestrator(
            local_repo=self.local_repo,
            local_assets=self.local_assets,
            remote_repo=self.remote_repo,
            remote_assets=self.remote_assets,
            copy_suffix=self.config.sync.copy_suffix,
        )
