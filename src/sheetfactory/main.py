"""sheetfactory server.

HTTP transport around the workbook compiler. Receives a JSON workbook
description and streams back the generated .xlsx file.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from sheetfactory import __version__, api
from sheetfactory.config import get_settings
from sheetfactory.exceptions import StorageError
from sheetfactory.logging import configure_logging


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global handler for unhandled exceptions."""
    logger.opt(exception=exc).error(f"Unhandled exception on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


async def storage_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle failures to persist a generated workbook."""
    logger.error(f"Storage failure on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Generated workbook could not be saved"},
    )


def rate_limit_exceeded_handler(request: Request, _exc: Exception) -> JSONResponse:
    """Handle rate limit exceeded errors."""
    logger.warning(f"Rate limit exceeded on {request.url.path} by {get_remote_address(request)}")
    return JSONResponse(
        status_code=429,
        content={"detail": "Rate limit exceeded. Please try again later."},
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()
    logger.info(f"Starting sheetfactory server on port {settings.port}")
    if settings.persist_generated:
        logger.info(f"Generated workbooks will be saved under {settings.templates_dir}")

    yield

    logger.info("Shutting down sheetfactory server")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    configure_logging(
        is_production=settings.is_production,
        log_level=settings.log_level,
    )

    app = FastAPI(
        title="sheetfactory",
        description="Generate .xlsx spreadsheets from JSON workbook descriptions",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/docs" if not settings.is_production else None,
        redoc_url="/api/redoc" if not settings.is_production else None,
        openapi_url="/api/openapi.json" if not settings.is_production else None,
    )

    # Exception handlers
    app.add_exception_handler(Exception, unhandled_exception_handler)
    app.add_exception_handler(StorageError, storage_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    app.state.limiter = api.limiter

    app.include_router(api.router, prefix="/api")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "sheetfactory.main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )
