"""Remote catalog browsing and background push/pull jobs."""

from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from loguru import logger

from score_library.context import LibraryContext
from score_library.domain.library import EntityNotFoundError
from score_library.domain.sync import SyncDirection, SyncOrchestrator

from ..deps import get_context, get_jobs, get_orchestrator
from ..jobs import Job, JobRegistry
from ..schemas import ComposerDetail, ComposerSummary, JobInfo, JobStarted, StepInfo
from .library import composer_detail, composer_summary

router = APIRouter()


def job_info(job: Job) -> JobInfo:
    return JobInfo(
        id=job.id,
        direction=job.direction.value,
        source_composer_id=job.source_composer_id,
        status=job.status,
        progress=job.progress,
        destination_composer_id=job.destination_composer_id,
        failures=[
            StepInfo(
                kind=step.kind.value,
                entity_id=step.entity_id,
                outcome=step.outcome.value,
                destination_id=step.destination_id,
                reason=step.reason,
            )
            for step in job.failures
        ],
        error=job.error,
    )


@router.get("/cloud/composers", response_model=list[ComposerSummary])
def list_remote_composers(orchestrator: SyncOrchestrator = Depends(get_orchestrator)):
    return [composer_summary(c) for c in orchestrator.list_remote_composers()]


@router.get("/cloud/composers/{composer_id}", response_model=ComposerDetail)
def get_remote_composer(
    composer_id: str, orchestrator: SyncOrchestrator = Depends(get_orchestrator)
):
    try:
        return composer_detail(orchestrator.get_remote_composer(composer_id))
    except EntityNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/cloud/push/{local_id}", response_model=JobStarted)
def push_composer(
    local_id: str,
    background_tasks: BackgroundTasks,
    ctx: LibraryContext = Depends(get_context),
    orchestrator: SyncOrchestrator = Depends(get_orchestrator),
    jobs: JobRegistry = Depends(get_jobs),
):
    """Start pushing a local composer to the remote catalog.

    Runs in background; poll /cloud/jobs/{job_id} for progress.
    """
    try:
        ctx.local_repo.get_composer(local_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    job = jobs.create(SyncDirection.PUSH, local_id)
    background_tasks.add_task(_run_job, jobs, job.id, orchestrator, SyncDirection.PUSH, local_id)
    return JobStarted(job_id=job.id, status=job.status)


@router.post("/cloud/pull/{remote_id}", response_model=JobStarted)
def pull_composer(
    remote_id: str,
    background_tasks: BackgroundTasks,
    orchestrator: SyncOrchestrator = Depends(get_orchestrator),
    jobs: JobRegistry = Depends(get_jobs),
):
    """Start copying a remote composer into the local library."""
    job = jobs.create(SyncDirection.PULL, remote_id)
    background_tasks.add_task(_run_job, jobs, job.id, orchestrator, SyncDirection.PULL, remote_id)
    return JobStarted(job_id=job.id, status=job.status)


@router.get("/cloud/jobs/{job_id}", response_model=JobInfo)
def get_job(job_id: str, jobs: JobRegistry = Depends(get_jobs)) -> Any:
    job = jobs.get(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return job_info(job)


def _run_job(
    jobs: JobRegistry,
    job_id: str,
    orchestrator: SyncOrchestrator,
    direction: SyncDirection,
    composer_id: str,
) -> None:
    """Run a push or pull (background task)."""
    on_progress = lambda percent: jobs.set_progress(job_id, percent)

    try:
        if direction is SyncDirection.PUSH:
            report = orchestrator.push_local_composer(composer_id, on_progress)
        else:
            report = orchestrator.pull_composer(composer_id, on_progress)
    except Exception as e:
        logger.exception(f"{direction.value} job {job_id} failed")
        jobs.fail(job_id, str(e))
        return

    jobs.finish(job_id, report)
