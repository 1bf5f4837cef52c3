"""
Push/pull engine: copies a whole composer subtree between the local library
and the remote catalog.

A sync is additive: it creates a new composer (fresh id) with new works and
recordings in the destination store and never modifies the source. Asset
files are transcoded between the local base64 file representation and the
remote object storage, and every reference is rewritten to the destination
store.

Failures of a single asset or child record are logged, recorded in the
returned ``SyncReport`` and skipped. Failing to create the destination
composer aborts the sync, since no child could be attached to it.
"""

from typing import Callable, List, Optional

from loguru import logger

from ..assets import (
    AssetCategory,
    LocalAssetStore,
    RemoteAssetStore,
    content_type_for,
    decode_base64,
    encode_base64,
    extension_of,
)
from ..library import (
    AssetKind,
    AssetRef,
    Composer,
    LibraryRepository,
    new_entity_id,
)
from .exceptions import RemoteFetchError, SyncError
from .models import StepKind, StepOutcome, StepResult, SyncDirection, SyncReport

ProgressCallback = Callable[[int], None]

DEFAULT_COPY_SUFFIX = " (copy)"


def progress_percent(current: int, total: int) -> int:
    """Percentage of ``current`` out of ``total``, rounded half up."""
    if total <= 0:
        return 100
    return (200 * current + total) // (2 * total)


class ProgressTracker:
    """Counts completed steps and reports the percentage after each one."""

    def __init__(self, total: int, callback: Optional[ProgressCallback] = None):
        self.total = total
        self.current = 0
        self.callback = callback

    def step(self) -> int:
        self.current += 1
        percent = progress_percent(self.current, self.total)
        if self.callback is not None:
            self.callback(percent)
        return percent


class SyncOrchestrator:
    """Moves composer subtrees between two pairs of stores.

    The stores are owned by the caller, who opens them before syncing and
    closes them afterwards.

    Args:
        local_repo: Local relational store
        local_assets: Local file asset store
        remote_repo: Remote relational store
        remote_assets: Remote object storage
        copy_suffix: Appended to composer names on pull
        id_factory: Generates asset key ids
    """

    def __init__(
        self,
        local_repo: LibraryRepository,
        local_assets: LocalAssetStore,
        remote_repo: LibraryRepository,
        remote_assets: RemoteAssetStore,
        copy_suffix: str = DEFAULT_COPY_SUFFIX,
        id_factory: Callable[[], str] = new_entity_id,
    ) -> None:
        self.local_repo = local_repo
        self.local_assets = local_assets
        self.remote_repo = remote_repo
        self.remote_assets = remote_assets
        self.copy_suffix = copy_suffix
        self._id_factory = id_factory

    # =============================================
    # Remote catalog reads
    # =============================================

    def list_remote_composers(self) -> List[Composer]:
        """Remote composers with their work/recording counts."""
        return self.remote_repo.list_composers()

    def get_remote_composer(self, composer_id: str) -> Composer:
        """Remote composer with works and recordings."""
        return self.remote_repo.get_composer_with_children(composer_id)

    # =============================================
    # Push / pull
    # =============================================

    def push_local_composer(
        self, composer_id: str, on_progress: Optional[ProgressCallback] = None
    ) -> SyncReport:
        """Load a local composer subtree and push it."""
        composer = self.local_repo.get_composer_with_children(composer_id)
        return self.push_composer(composer, on_progress)

    def push_composer(
        self, composer: Composer, on_progress: Optional[ProgressCallback] = None
    ) -> SyncReport:
        """
        Copy a hydrated local composer into the remote catalog.

        Args:
            composer: Local composer with works and recordings loaded
            on_progress: Called with 0-100 after each composer/work/recording

        Returns:
            SyncReport with the new remote composer id and every step

        Raises:
            SyncError: If the remote composer row cannot be created
        """
        logger.info(
            f"Pushing composer {composer.id} ({composer.name}): "
            f"{len(composer.works)} works, {len(composer.recordings)} recordings"
        )
        report = self._copy_subtree(
            composer,
            SyncDirection.PUSH,
            destination_name=composer.name,
            on_progress=on_progress,
        )
        logger.info(f"Push finished: {report.summary()}")
        return report

    def pull_composer(
        self, remote_composer_id: str, on_progress: Optional[ProgressCallback] = None
    ) -> SyncReport:
        """
        Copy a remote composer into the local library as a new composer.

        The subtree is fetched before anything is written; the local copy's
        name gets ``copy_suffix`` appended.

        Raises:
            RemoteFetchError: If the remote subtree cannot be read
            SyncError: If the local composer row cannot be created
        """
        try:
            composer = self.remote_repo.get_composer_with_children(remote_composer_id)
        except Exception as e:
            logger.error(f"Failed to fetch remote composer {remote_composer_id}: {e}")
            raise RemoteFetchError(
                remote_composer_id,
                f"Could not fetch remote composer {remote_composer_id}: {e}",
            ) from e

        logger.info(
            f"Pulling composer {composer.id} ({composer.name}): "
            f"{len(composer.works)} works, {len(composer.recordings)} recordings"
        )
        report = self._copy_subtree(
            composer,
            SyncDirection.PULL,
            destination_name=composer.name + self.copy_suffix,
            on_progress=on_progress,
        )
        logger.info(f"Pull finished: {report.summary()}")
        return report

    def _copy_subtree(
        self,
        composer: Composer,
        direction: SyncDirection,
        destination_name: str,
        on_progress: Optional[ProgressCallback],
    ) -> SyncReport:
        if direction is SyncDirection.PUSH:
            source_ref, destination = AssetRef.local, self.remote_repo
        else:
            source_ref, destination = AssetRef.remote, self.local_repo

        report = SyncReport(direction=direction, source_composer_id=composer.id)
        tracker = ProgressTracker(
            1 + len(composer.works) + len(composer.recordings), on_progress
        )

        image = self._transfer_asset(
            report,
            StepKind.AVATAR,
            composer.id,
            source_ref(composer.image),
            AssetCategory.AVATAR,
            self._id_factory(),
        )

        try:
            created = destination.create_composer(
                name=destination_name,
                period=composer.period,
                image=image,
                sheet_music_count=len(composer.works),
                recording_count=len(composer.recordings),
            )
        except Exception as e:
            logger.error(
                f"Failed to create {destination.name} composer for {composer.id}: {e}"
            )
            report.record(
                StepResult(StepKind.COMPOSER, composer.id, StepOutcome.FAILED, reason=str(e))
            )
            raise SyncError(
                f"Could not create {destination.name} composer for {composer.id}: {e}"
            ) from e

        composer_id = created.id
        report.destination_composer_id = composer_id
        report.record(
            StepResult(StepKind.COMPOSER, composer.id, StepOutcome.OK, composer_id)
        )
        tracker.step()

        for work in composer.works:
            file_url = self._transfer_asset(
                report,
                StepKind.WORK_FILE,
                work.id,
                source_ref(work.file_url),
                AssetCategory.SHEET,
                self._child_key(direction, composer_id),
            )
            try:
                new_work = destination.create_work(
                    composer_id=composer_id,
                    title=work.title,
                    edition=work.edition,
                    year=work.year,
                    file_url=file_url,
                )
                report.record(
                    StepResult(StepKind.WORK, work.id, StepOutcome.OK, new_work.id)
                )
            except Exception as e:
                logger.error(f"Failed to copy work {work.id} ({work.title}): {e}")
                report.record(
                    StepResult(StepKind.WORK, work.id, StepOutcome.FAILED, reason=str(e))
                )
            tracker.step()

        for recording in composer.recordings:
            file_url = self._transfer_asset(
                report,
                StepKind.RECORDING_FILE,
                recording.id,
                source_ref(recording.file_url),
                AssetCategory.RECORDING,
                self._child_key(direction, composer_id),
            )
            try:
                new_recording = destination.create_recording(
                    composer_id=composer_id,
                    title=recording.title,
                    performer=recording.performer,
                    duration=recording.duration,
                    year=recording.year,
                    file_url=file_url,
                )
                report.record(
                    StepResult(
                        StepKind.RECORDING, recording.id, StepOutcome.OK, new_recording.id
                    )
                )
            except Exception as e:
                logger.error(
                    f"Failed to copy recording {recording.id} ({recording.title}): {e}"
                )
                report.record(
                    StepResult(
                        StepKind.RECORDING, recording.id, StepOutcome.FAILED, reason=str(e)
                    )
                )
            tracker.step()

        return report

    def _child_key(self, direction: SyncDirection, composer_id: str) -> str:
        # Remote keys are grouped by composer; local files only need a unique id
        if direction is SyncDirection.PUSH:
            return f"{composer_id}_{self._id_factory()}"
        return self._id_factory()

    # =============================================
    # Asset transcoding
    # =============================================

    def _transfer_asset(
        self,
        report: SyncReport,
        kind: StepKind,
        entity_id: str,
        source: AssetRef,
        category: AssetCategory,
        key_id: str,
    ) -> str:
        """Copy one asset to the other side; returns "" when skipped or failed."""
        if source.is_empty:
            report.record(StepResult(kind, entity_id, StepOutcome.SKIPPED))
            return ""

        try:
            if source.kind is AssetKind.LOCAL:
                reference = self.upload_local_asset(source.value, category, key_id)
            else:
                reference = self.download_remote_asset(source.value, category, key_id)
        except Exception as e:
            logger.warning(
                f"Skipping {kind.value} of {entity_id} ({source.value}): {e}"
            )
            report.record(StepResult(kind, entity_id, StepOutcome.FAILED, reason=str(e)))
            return ""

        report.record(StepResult(kind, entity_id, StepOutcome.OK, reference))
        return reference

    def upload_local_asset(
        self, reference: str, category: AssetCategory, key_id: str
    ) -> str:
        """Local file -> remote object; returns the public URL."""
        data = decode_base64(self.local_assets.read(reference))
        extension = extension_of(reference)
        return self.remote_assets.write(
            data, category, key_id, extension, content_type_for(extension)
        )

    def download_remote_asset(
        self, url: str, category: AssetCategory, key_id: str
    ) -> str:
        """Remote object -> local file; returns the local reference."""
        data = self.remote_assets.read(url)
        return self.local_assets.write(
            encode_base64(data), category, key_id, extension_of(url)
        )
