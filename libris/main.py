"""FastAPI application exposing Libris import operations."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from libris.api.middleware import RequestLoggingMiddleware
from libris.api.routes import api_v1_router, health
from libris.config import settings
from libris.db.session import close_db
from libris.utils.exceptions import LibrisError
from libris.utils.logging import configure_logging
from libris.version import __version__

configure_logging(log_level=settings.log_level, environment=settings.environment)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifespan events."""
    settings.ensure_import_directories()
    logger.info(
        "application_startup",
        version=__version__,
        imports_dir=str(settings.imports_dir),
        existing_book_policy=settings.existing_book_policy,
    )
    yield
    await close_db()
    logger.info("application_shutdown")


app = FastAPI(
    title="Libris API",
    description="ONIX book metadata import pipeline",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)  # Health check (no version prefix)
app.include_router(api_v1_router)  # Versioned API endpoints


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    """Handle database errors with appropriate logging and response."""
    request_id = getattr(request.state, "request_id", "unknown")
    logger.error("database_error", error=str(exc), request_id=request_id)
    return JSONResponse(status_code=500, content={"detail": "Database error occurred"})


@app.exception_handler(LibrisError)
async def libris_exception_handler(request: Request, exc: LibrisError) -> JSONResponse:
    """Handle import pipeline errors that escape a route."""
    request_id = getattr(request.state, "request_id", "unknown")
    logger.error(
        "import_pipeline_error",
        error=str(exc),
        error_class=exc.__class__.__name__,
        request_id=request_id,
    )
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors."""
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all unhandled exceptions."""
    request_id = getattr(request.state, "request_id", "unknown")
    logger.error("unhandled_exception", error=str(exc), request_id=request_id)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})
