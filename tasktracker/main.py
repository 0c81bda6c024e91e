import logging
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import CORS_ORIGINS, DATABASE_URL
from .routers import tasks
from .store import TaskStore
from .validation import TaskValidationError

logger = logging.getLogger(__name__)


async def _validation_error_handler(request: Request, exc: TaskValidationError) -> JSONResponse:
    logger.debug("Rejected %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def create_app(store: Optional[TaskStore] = None) -> FastAPI:
    """Build the API around ``store``; a fresh one from ``DATABASE_URL`` if omitted."""
    if store is None:
        store = TaskStore.from_url(DATABASE_URL)

    app = FastAPI(
        title="Task Tracker API",
        description="Single-list task tracker: create, list, update and delete tasks",
        version="1.0.0",
    )
    app.state.store = store

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            # Log the traceback once and answer in the usual error shape
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            response = JSONResponse(status_code=500, content={"error": "Internal server error"})
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s %s %.1f ms",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    app.add_exception_handler(TaskValidationError, _validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)

    # Include routers
    app.include_router(tasks.router, prefix="/api", tags=["tasks"])

    @app.get("/")
    def read_root():
        return {"message": "Task Tracker API"}

    @app.get("/health")
    def health_check():
        return {"status": "healthy"}

    return app

