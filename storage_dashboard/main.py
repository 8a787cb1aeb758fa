"""Editor Storage Dashboard API - FastAPI application."""

import logging
import structlog
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
import time
import uuid

from storage_dashboard.config import settings
from storage_dashboard.errors import StorageDashboardError
from storage_dashboard.routers import backend, entries, metrics, statistics, workspaces
from storage_dashboard.middleware.metrics import MetricsMiddleware, normalize_path
from storage_dashboard.metrics import ERROR_COUNT
from storage_dashboard.models.responses import ErrorResponse


def setup_logging() -> None:
    """Configure structured logging."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer() if not settings.debug else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.INFO if not settings.debug else logging.DEBUG
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger = structlog.get_logger()
    logger.info(
        "application_startup",
        version=settings.api_version,
        debug=settings.debug,
        workspace_path=str(settings.workspace_path) if settings.workspace_path else None,
    )
    if settings.workspace_path is None:
        logger.warning("workspace_path_not_configured")

    yield

    logger.info("application_shutdown")


# Setup logging before creating app
setup_logging()
logger = structlog.get_logger()

# Create FastAPI application
app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description="""
Local dashboard API for the editor's on-disk storage.

This service reads the editor's workspace and global SQLite key-value
databases and provides:
- Statistics across all workspaces (chat/composer presence, counts, sizes)
- Global database analysis (entry types, largest entries)
- Single entry lookup with JSON decoding
- Removal of workspace directories

All reads are recomputed from disk on every request. Databases are opened
read-only; only workspace removal modifies the filesystem.
    """,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add metrics middleware (for Prometheus request instrumentation)
app.add_middleware(MetricsMiddleware)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    """Log all requests with timing and request ID."""
    request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id)

    start_time = time.perf_counter()

    logger.info(
        "request_started",
        method=request.method,
        path=request.url.path,
    )

    response = await call_next(request)

    duration_ms = (time.perf_counter() - start_time) * 1000

    logger.info(
        "request_completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(duration_ms, 2),
    )

    response.headers["X-Request-ID"] = request_id
    return response


def _error_response(status_code: int, error: ErrorResponse) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error.model_dump(by_alias=True, exclude_none=True),
    )


@app.exception_handler(StorageDashboardError)
async def storage_dashboard_error_handler(request: Request, exc: StorageDashboardError):
    """Render dashboard errors as {"error": ..., "type": ...}."""
    if exc.status_code >= 500:
        ERROR_COUNT.labels(type=exc.error_type, endpoint=normalize_path(request.url.path)).inc()
        logger.error(
            "request_failed",
            method=request.method,
            path=request.url.path,
            error=exc.message,
            error_type=exc.error_type,
        )
    else:
        logger.info(
            "request_rejected",
            method=request.method,
            path=request.url.path,
            error=exc.message,
            error_type=exc.error_type,
        )

    return _error_response(
        exc.status_code,
        ErrorResponse(error=exc.message, type=exc.error_type, details=exc.details),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Render request validation failures as 400 errors."""
    errors = exc.errors()
    fields = [".".join(str(p) for p in e.get("loc", ()) if p != "body") for e in errors]
    message = "Invalid request"
    if fields and any(fields):
        message += ": " + ", ".join(f for f in fields if f)

    logger.info("request_validation_failed", path=request.url.path, fields=fields)

    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        ErrorResponse(
            error=message,
            type="invalid_request",
            details=[{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors],
        ),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions."""
    endpoint = normalize_path(request.url.path)
    error_type = type(exc).__name__

    ERROR_COUNT.labels(type=error_type, endpoint=endpoint).inc()

    logger.error(
        "unhandled_exception",
        method=request.method,
        path=request.url.path,
        error=str(exc),
        error_type=error_type,
        exc_info=True,
    )
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorResponse(
            error=str(exc) if settings.debug else "An internal error occurred",
            type="internal_server_error",
        ),
    )


# Include routers
app.include_router(backend.router)
app.include_router(statistics.router)
app.include_router(entries.router)
app.include_router(workspaces.router)
app.include_router(metrics.router)


# Root endpoint
@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint - service info."""
    return {
        "service": settings.api_title,
        "version": settings.api_version,
        "health": "/health",
        "docs": "/docs" if settings.debug else None,
    }


def run() -> None:
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "storage_dashboard.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
