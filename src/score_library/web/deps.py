from fastapi import Depends, HTTPException, Request

from score_library.context import LibraryContext
from score_library.domain.sync import SyncError, SyncOrchestrator

from .jobs import JobRegistry


def get_context(request: Request) -> LibraryContext:
    """FastAPI dependency for the opened library context."""
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise HTTPException(status_code=503, detail="Library is not initialized")
    return context


def get_orchestrator(ctx: LibraryContext = Depends(get_context)) -> SyncOrchestrator:
    """FastAPI dependency for the sync engine; 503 without a remote store."""
    try:
        return ctx.orchestrator()
    except SyncError as e:
        raise HTTPException(status_code=503, detail=str(e))


def get_jobs(request: Request) -> JobRegistry:
    return request.app.state.jobs
