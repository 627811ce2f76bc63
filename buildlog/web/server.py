"""
FastAPI web server for the Build Log service.

Provides:
- POST /builds/{identifier}/generate-log   start a generation task (202)
- GET  /builds/log-status/{taskId}         poll task status
- GET  /builds/log-file/{taskId}           download the generated log
- GET  /builds/log-metrics                 cache / task counters
- GET  /api/health, /api/version
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, List, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from .. import __version__
from ..app import BuildLogServices, create_services
from ..config import BuildLogConfig
from ..errors import InvalidInputError, NotFoundError, SubmissionRejectedError
from .protocol import LOG_IN_PROGRESS_MESSAGE, problem_to_dict, task_status_to_dict

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[BuildLogConfig] = None,
    config_path: Optional[str] = None,
    services: Optional[BuildLogServices] = None,
    cors_origins: Optional[List[str]] = None,
) -> FastAPI:
    """Create a FastAPI application for the Build Log service.

    Args:
        config: Configuration object (defaults apply when omitted)
        config_path: Path to YAML config file (used when config is omitted)
        services: Pre-wired services (tests); built from config otherwise
        cors_origins: Allowed CORS origins (default: from config)

    Returns:
        FastAPI application instance
    """
    if config is None:
        config = BuildLogConfig.load(config_path) if config_path else BuildLogConfig()
    if services is None:
        services = create_services(config)
    service = services.service

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup/shutdown lifecycle: the worker pool lives as long as the app."""
        logger.info("Starting Build Log web server...")
        services.start()
        yield
        logger.info("Shutting down Build Log web server...")
        services.shutdown(wait=True)
        logger.info("Build Log web server stopped")

    app = FastAPI(
        title="Build Log",
        description="Asynchronous build log generation — REST API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins or services.config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # === Error mapping ===

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        logger.warning(f"Not found: {exc}")
        return JSONResponse(problem_to_dict(404, "Not Found", str(exc)), status_code=404)

    @app.exception_handler(InvalidInputError)
    async def handle_invalid_input(request: Request, exc: InvalidInputError) -> JSONResponse:
        logger.warning(f"Input error: {exc}")
        return JSONResponse(problem_to_dict(400, "Input Error", str(exc)), status_code=400)

    @app.exception_handler(SubmissionRejectedError)
    async def handle_rejected(request: Request, exc: SubmissionRejectedError) -> JSONResponse:
        logger.warning(f"Submission rejected: {exc}")
        return JSONResponse(
            problem_to_dict(503, "Service Unavailable", str(exc), taskId=exc.task_id),
            status_code=503,
        )

    # === REST Endpoints ===

    @app.get("/api/health")
    async def get_health() -> JSONResponse:
        """Health check."""
        healthy = services.pool.is_running
        return JSONResponse(
            {"healthy": healthy, "workers": services.pool.stats()},
            status_code=200 if healthy else 503,
        )

    @app.get("/api/version")
    async def get_version() -> JSONResponse:
        return JSONResponse({"version": __version__})

    @app.post("/builds/{identifier}/generate-log")
    def generate_build_log(identifier: str) -> JSONResponse:
        """Start log generation. Sync route: submit may wait briefly for a pool slot."""
        task_id = service.initiate(identifier)
        logger.info(f"Log generation accepted for '{identifier}', task {task_id}")
        return JSONResponse({"taskId": task_id}, status_code=202)

    @app.get("/builds/log-status/{task_id}")
    async def get_log_status(task_id: str) -> JSONResponse:
        status = service.get_status(task_id)
        return JSONResponse(task_status_to_dict(status))

    @app.get("/builds/log-file/{task_id}")
    async def get_log_file(task_id: str) -> Any:
        result = service.get_file(task_id)
        if result.in_progress:
            return JSONResponse({"message": LOG_IN_PROGRESS_MESSAGE}, status_code=202)
        return FileResponse(result.path, media_type="text/plain", filename=result.filename)

    @app.get("/builds/log-metrics")
    async def get_metrics() -> JSONResponse:
        data = services.metrics.get_all()
        data["cache"] = {"size": services.cache.size, "max_size": services.cache.max_size}
        data["workers"] = services.pool.stats()
        return JSONResponse(data)

    return app
