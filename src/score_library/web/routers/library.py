"""Read-only endpoints over the local library."""

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from score_library.context import LibraryContext
from score_library.domain.assets import AssetError, LocalAssetStore
from score_library.domain.library import (
    Composer,
    EntityNotFoundError,
    list_composers_for_display,
)

from ..deps import get_context
from ..schemas import ComposerDetail, ComposerSummary, RecordingInfo, WorkInfo

router = APIRouter()


def composer_summary(composer: Composer) -> ComposerSummary:
    return ComposerSummary(
        id=composer.id,
        name=composer.name,
        period=composer.period,
        image=composer.image,
        sheet_music_count=composer.sheet_music_count,
        recording_count=composer.recording_count,
    )


def composer_detail(composer: Composer) -> ComposerDetail:
    return ComposerDetail(
        **composer_summary(composer).model_dump(),
        works=[
            WorkInfo(
                id=w.id,
                composer_id=w.composer_id,
                title=w.title,
                edition=w.edition,
                year=w.year,
                file_url=w.file_url,
            )
            for w in composer.works
        ],
        recordings=[
            RecordingInfo(
                id=r.id,
                composer_id=r.composer_id,
                title=r.title,
                performer=r.performer,
                duration=r.duration,
                year=r.year,
                file_url=r.file_url,
            )
            for r in composer.recordings
        ],
    )


def _display_uri(assets: LocalAssetStore, reference: str) -> str:
    try:
        return assets.resolve_for_display(reference)
    except AssetError as e:
        logger.warning(f"Cannot display asset {reference}: {e}")
        return ""


@router.get("/composers", response_model=list[ComposerSummary])
def list_local_composers(ctx: LibraryContext = Depends(get_context)):
    """Local composers with counts; images as file:// URIs."""
    composers = list_composers_for_display(ctx.local_repo, ctx.local_assets)
    return [composer_summary(c) for c in composers]


@router.get("/composers/{composer_id}", response_model=ComposerDetail)
def get_local_composer(composer_id: str, ctx: LibraryContext = Depends(get_context)):
    try:
        composer = ctx.local_repo.get_composer_with_children(composer_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    composer.image = _display_uri(ctx.local_assets, composer.image)
    for work in composer.works:
        work.file_url = _display_uri(ctx.local_assets, work.file_url)
    for recording in composer.recordings:
        recording.file_url = _display_uri(ctx.local_assets, recording.file_url)
    return composer_detail(composer)
