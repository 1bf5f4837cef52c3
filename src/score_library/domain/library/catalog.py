"""
Local library operations that touch both records and asset files.

Deletions remove asset files before rows; a missing or undeletable file is
logged and never blocks removal of the record.
"""

from dataclasses import replace
from pathlib import Path
from typing import List

from loguru import logger

from ..assets import (
    AssetCategory,
    AssetError,
    LocalAssetStore,
    encode_base64,
    extension_of,
    infer_category,
)
from .models import Composer, ComposerUpdate, RecordingUpdate, WorkUpdate
from .repository import LibraryRepository

ATTACH_KINDS = {
    "composer": AssetCategory.AVATAR,
    "work": AssetCategory.SHEET,
    "recording": AssetCategory.RECORDING,
}


def _delete_asset_quietly(assets: LocalAssetStore, reference: str) -> None:
    if not reference:
        return
    try:
        assets.delete(reference)
    except (AssetError, OSError) as e:
        logger.warning(f"Could not delete asset {reference}: {e}")


def delete_composer(
    repo: LibraryRepository, assets: LocalAssetStore, composer_id: str
) -> None:
    """Delete a composer, its avatar and every child asset, then the row.

    Works and recordings are removed by the cascade.
    """
    composer = repo.get_composer_with_children(composer_id)

    _delete_asset_quietly(assets, composer.image)
    for work in composer.works:
        _delete_asset_quietly(assets, work.file_url)
    for recording in composer.recordings:
        _delete_asset_quietly(assets, recording.file_url)

    repo.delete_composer(composer_id)
    logger.info(
        f"Deleted composer {composer_id} ({composer.name}) with "
        f"{len(composer.works)} works and {len(composer.recordings)} recordings"
    )


def delete_work(repo: LibraryRepository, assets: LocalAssetStore, work_id: str) -> None:
    work = repo.get_work(work_id)
    _delete_asset_quietly(assets, work.file_url)
    repo.delete_work(work_id)


def delete_recording(
    repo: LibraryRepository, assets: LocalAssetStore, recording_id: str
) -> None:
    recording = repo.get_recording(recording_id)
    _delete_asset_quietly(assets, recording.file_url)
    repo.delete_recording(recording_id)


def attach_file(
    repo: LibraryRepository,
    assets: LocalAssetStore,
    kind: str,
    entity_id: str,
    path: Path,
) -> str:
    """
    Import a file from disk and attach it to a composer, work or recording.

    The file is stored under the entity id with its own extension. A
    previously attached file with a different extension is removed.

    Args:
        repo: Local repository
        assets: Local asset store (must be open)
        kind: "composer", "work" or "recording"
        entity_id: Id of the entity to attach to
        path: File to import

    Returns:
        The new asset reference

    Raises:
        ValueError: If kind is unknown
        EntityNotFoundError: If the entity does not exist
        FileNotFoundError: If path does not exist
    """
    if kind not in ATTACH_KINDS:
        raise ValueError(
            f"Invalid kind: {kind}. Must be one of {', '.join(ATTACH_KINDS)}"
        )

    # Existence check first so a bad id never leaves an orphaned file
    if kind == "composer":
        previous = repo.get_composer(entity_id).image
    elif kind == "work":
        previous = repo.get_work(entity_id).file_url
    else:
        previous = repo.get_recording(entity_id).file_url

    path = Path(path)
    data = path.read_bytes()

    category = ATTACH_KINDS[kind]
    guessed = infer_category(path.name)
    if guessed is not None and guessed is not category:
        logger.warning(
            f"{path.name} looks like a {guessed.value} file, attaching to {kind} anyway"
        )

    reference = assets.write(
        encode_base64(data), category, entity_id, extension_of(path.name)
    )

    if kind == "composer":
        repo.update_composer(entity_id, ComposerUpdate(image=reference))
    elif kind == "work":
        repo.update_work(entity_id, WorkUpdate(file_url=reference))
    else:
        repo.update_recording(entity_id, RecordingUpdate(file_url=reference))

    if previous and previous != reference and assets.exists(previous):
        _delete_asset_quietly(assets, previous)

    logger.info(f"Attached {path.name} to {kind} {entity_id} as {reference}")
    return reference


def list_composers_for_display(
    repo: LibraryRepository, assets: LocalAssetStore
) -> List[Composer]:
    """All composers with ``image`` resolved to a displayable URI."""
    composers = []
    for composer in repo.list_composers():
        try:
            image = assets.resolve_for_display(composer.image)
        except AssetError as e:
            logger.warning(f"Cannot display image of composer {composer.id}: {e}")
            image = ""
        composers.append(replace(composer, image=image))
    return composers
