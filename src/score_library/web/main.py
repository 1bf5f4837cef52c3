import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from score_library.context import LibraryContext
from score_library.core.config import Config, ensure_directories, load_config
from score_library.core.output import setup_from_config

from .jobs import JobRegistry
from .routers import cloud, library


@asynccontextmanager
async def lifespan(app: FastAPI):
    # An injected context is owned by whoever created the app
    owned = app.state.context is None
    if owned:
        config = app.state.config or load_config()
        ensure_directories(config)
        setup_from_config(config)
        app.state.context = LibraryContext.create(config).open()
        logger.info("Score Library API started")

    yield

    if owned:
        app.state.context.close()
        app.state.context = None


def create_app(
    config: Optional[Config] = None,
    context: Optional[LibraryContext] = None,
) -> FastAPI:
    """Build the API.

    Args:
        config: Configuration used for CORS and, without ``context``, to open
            the stores at startup
        context: Already opened stores (tests, embedding)
    """
    if config is None and context is not None:
        config = context.config

    app = FastAPI(title="Score Library API", version="0.1.0", lifespan=lifespan)
    app.state.config = config
    app.state.context = context
    app.state.jobs = JobRegistry()

    # CORS: Allow environment override for production
    allowed_origins_env = os.getenv("ALLOWED_ORIGINS", "")
    if allowed_origins_env:
        allowed_origins = allowed_origins_env.split(",")
    elif config is not None:
        allowed_origins = config.web.allowed_origins
    else:
        allowed_origins = ["http://localhost:5173"]  # Dev default

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(library.router, prefix="/api", tags=["library"])
    app.include_router(cloud.router, prefix="/api", tags=["cloud"])

    @app.get("/health")
    async def health_check():
        ctx = app.state.context
        return {
            "status": "healthy",
            "local_store": ctx is not None
            and ctx.local_repo.is_open
            and ctx.local_assets.is_open,
            "remote_store": ctx is not None
            and ctx.has_remote
            and ctx.remote_repo.is_open,
        }

    return app


_app: Optional[FastAPI] = None


def __getattr__(name: str):
    # `uvicorn score_library.web.main:app` builds the app on first access so
    # that importing this module never reads or writes the config file
    global _app
    if name == "app":
        if _app is None:
            _app = create_app(config=load_config())
        return _app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
