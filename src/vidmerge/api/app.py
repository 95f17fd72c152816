"""FastAPI application factory.

:func:`create_app` wires the infrastructure adapters into the core
services and registers the routes.  Collaborators may be injected
(tests pass a fake command runner and an in-memory store); otherwise
they are built from :class:`~vidmerge.config.AppSettings`.

All error responses share one shape: ``{"error": <message>}``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from vidmerge.api.routes import (
    download_router,
    formats_router,
    index_router,
    keys_router,
)
from vidmerge.config import AppSettings, load_settings
from vidmerge.core.credential_gate import CredentialGate
from vidmerge.core.format_catalog import FormatCatalog
from vidmerge.core.job_pipeline import JobPipeline
from vidmerge.core.protocols import CommandRunner
from vidmerge.infra.command_runner import AsyncCommandRunner
from vidmerge.infra.credential_store import SqlCredentialStore
from vidmerge.infra.scratch import LocalScratchArea
from vidmerge.infra.tool_detector import detect_tool
from vidmerge.version import __version__

logger = logging.getLogger(__name__)

MISSING_URL_MESSAGE = 'Missing "url" in request body'
INVALID_BODY_MESSAGE = "Invalid request body"
INTERNAL_ERROR_MESSAGE = "Internal server error"


def create_app(
    settings: AppSettings | None = None,
    *,
    runner: CommandRunner | None = None,
    store: SqlCredentialStore | None = None,
) -> FastAPI:
    """Build the application.

    Parameters
    ----------
    settings:
        Configuration; loaded from the environment when omitted.
    runner:
        Executes yt-dlp and ffmpeg.  Defaults to
        :class:`~vidmerge.infra.command_runner.AsyncCommandRunner`.
    store:
        Credential store.  It is opened at startup and closed at
        shutdown by the application lifespan.
    """
    settings = settings or load_settings()
    runner = runner or AsyncCommandRunner(timeout=settings.tools.command_timeout)
    store = store or SqlCredentialStore(settings.database.url)

    catalog = FormatCatalog(
        runner,
        ytdlp_binary=settings.tools.ytdlp_binary,
        media=settings.media,
        estimation=settings.estimation,
    )
    pipeline = JobPipeline(runner, catalog, LocalScratchArea(), settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        store.open()
        _warn_missing_tools(settings)
        logger.info(
            "Server ready",
            extra={"scratch_root": str(settings.workspace.scratch_root)},
        )
        try:
            yield
        finally:
            store.close()
            logger.info("Server stopped")

    app = FastAPI(title="vidmerge", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.credential_store = store
    app.state.credential_gate = CredentialGate(store)
    app.state.format_catalog = catalog
    app.state.job_pipeline = pipeline

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.server.cors_origins),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "Content-Length"],
    )

    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    app.include_router(index_router)
    app.include_router(keys_router)
    app.include_router(formats_router)
    app.include_router(download_router)
    return app


def _warn_missing_tools(settings: AppSettings) -> None:
    for binary in (settings.tools.ytdlp_binary, settings.tools.ffmpeg_binary):
        status = detect_tool(binary)
        if not status.found:
            logger.warning(
                "External tool not found; requests needing it will fail",
                extra={"tool": binary, "install": list(status.install_commands)},
            )


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------

async def _http_error_handler(
    request: Request, exc: StarletteHTTPException,
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def _validation_error_handler(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    """Malformed or missing bodies are a plain 400, never a 422."""
    message = INVALID_BODY_MESSAGE
    for error in exc.errors():
        loc = tuple(error.get("loc", ()))
        if error.get("type") == "missing" and loc in (("body",), ("body", "url")):
            message = MISSING_URL_MESSAGE
            break
    return JSONResponse(status_code=400, content={"error": message})


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", extra={"path": request.url.path})
    return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR_MESSAGE})
