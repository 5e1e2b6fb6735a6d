"""FastAPI application.

Run with `python main.py --serve` or `uvicorn api.main:app`.
"""

import logging
import sys

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ideaforge import IdeaForge, __version__
from models import LLMError, MalformedStructuringError
from storage import StorageError, AuthRequiredError
from workflows import PipelineError, EmptyResultError, ProjectStoreError
from api.routes import drive, projects

logger = logging.getLogger("ideaforge")


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Send IdeaForge log lines to stderr alongside uvicorn's own output."""
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(
            fmt="[%(asctime)s] %(levelname)s [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        logger.addHandler(handler)
    return logger


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={'error': message, **extra})


def register_error_handlers(app: FastAPI) -> None:
    """Map domain errors to HTTP responses.

    Handlers are looked up by exception class, most specific first.
    """

    @app.exception_handler(AuthRequiredError)
    async def auth_required(request: Request, exc: AuthRequiredError) -> JSONResponse:
        return _error(401, str(exc) or "Google authentication required", needsGoogleAuth=True)

    @app.exception_handler(EmptyResultError)
    async def empty_result(request: Request, exc: EmptyResultError) -> JSONResponse:
        return _error(400, str(exc))

    @app.exception_handler(MalformedStructuringError)
    async def malformed_structuring(request: Request,
                                    exc: MalformedStructuringError) -> JSONResponse:
        logger.warning("Unparseable model reply: %s", exc)
        return _error(502, "The AI response could not be interpreted. Please try again.")

    @app.exception_handler(LLMError)
    async def llm_error(request: Request, exc: LLMError) -> JSONResponse:
        logger.error("LLM error: %s", exc)
        return _error(502, "The AI provider failed to process the request")

    @app.exception_handler(StorageError)
    async def storage_error(request: Request, exc: StorageError) -> JSONResponse:
        logger.error("Storage error: %s", exc)
        return _error(502, "Google Drive request failed")

    @app.exception_handler(ProjectStoreError)
    async def project_store_error(request: Request, exc: ProjectStoreError) -> JSONResponse:
        logger.error("Project store error: %s", exc)
        return _error(500, "Could not save the project")

    @app.exception_handler(PipelineError)
    async def pipeline_error(request: Request, exc: PipelineError) -> JSONResponse:
        logger.error("Pipeline error: %s", exc)
        return _error(500, str(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error(400, "Invalid request", details=jsonable_errors(exc))


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {'loc': list(err.get('loc', ())), 'msg': err.get('msg', '')}
        for err in exc.errors()
    ]


def create_app() -> FastAPI:
    if not IdeaForge.configured:
        IdeaForge.configure()
    setup_logging()
    IdeaForge.set_sink(logger.info)

    app = FastAPI(title="IdeaForge", version=__version__)
    app.include_router(drive.router, prefix="/drive", tags=["drive"])
    app.include_router(projects.router, prefix="/projects", tags=["projects"])
    register_error_handlers(app)

    @app.get("/health-check/")
    async def health_check() -> bool:
        return True

    return app


app = create_app()
