"""REST API endpoints for sheetfactory.

This module contains all HTTP endpoints. Business logic is delegated to
SpreadsheetService.

Endpoints:
- POST /api/spreadsheet/generate  - Build a workbook and return it as a download
- POST /api/spreadsheet/validate  - Validate a request without building it
- GET  /api/health                - Health check
- GET  /api/health/ready          - Readiness check
"""

import json
from functools import lru_cache
from typing import Any
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response
from loguru import logger
from slowapi import Limiter
from slowapi.util import get_remote_address

from sheetfactory import __version__
from sheetfactory.config import get_settings
from sheetfactory.exceptions import BuildError, SchemaValidationError
from sheetfactory.service import SpreadsheetService

# Rate limiter instance - registered on the app by main.py
limiter = Limiter(key_func=get_remote_address)

router = APIRouter()


@lru_cache
def get_service() -> SpreadsheetService:
    """Get the shared SpreadsheetService (it holds no per-request state)."""
    return SpreadsheetService(get_settings())


def _generate_rate_limit() -> str:
    return get_settings().generate_rate_limit


def content_disposition(filename: str) -> str:
    """Build an attachment Content-Disposition header with a UTF-8 filename."""
    ascii_name = filename.encode("ascii", "replace").decode("ascii").replace('"', "_")
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"


async def _read_json(request: Request) -> Any:
    body = await request.body()
    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise HTTPException(status_code=400, detail=f"Malformed JSON body: {e}") from e


# =============================================================================
# Health Endpoints
# =============================================================================


@router.get("/health")
async def health_check() -> dict:
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "sheetfactory"}


@router.get("/health/ready")
async def readiness_check() -> dict:
    """Readiness check for container orchestrators."""
    settings = get_settings()
    return {
        "status": "ready",
        "service": "sheetfactory",
        "version": __version__,
        "environment": settings.environment,
    }


# =============================================================================
# Spreadsheet Endpoints
# =============================================================================


@router.post("/spreadsheet/generate")
@limiter.limit(_generate_rate_limit)
async def generate_spreadsheet(
    request: Request,
    service: SpreadsheetService = Depends(get_service),
) -> Response:
    """Generate an .xlsx file from a JSON workbook description.

    Returns the file as an attachment named after the sanitized workbook name.
    Validation and build failures return 400 with a readable message.
    """
    payload = await _read_json(request)

    try:
        result = await run_in_threadpool(service.generate, payload)
    except SchemaValidationError as e:
        logger.info(f"Rejected spreadsheet request: {len(e.errors)} validation error(s)")
        return JSONResponse(
            status_code=400,
            content={"detail": "Invalid spreadsheet request", "errors": e.errors},
        )
    except BuildError as e:
        logger.info(f"Spreadsheet build failed: {e}")
        return JSONResponse(status_code=400, content={"detail": str(e), "field": e.field})

    return Response(
        content=result.content,
        media_type=result.media_type,
        headers={"Content-Disposition": content_disposition(result.filename)},
    )


@router.post("/spreadsheet/validate")
async def validate_spreadsheet(
    request: Request,
    service: SpreadsheetService = Depends(get_service),
) -> dict:
    """Validate a JSON workbook description without building it."""
    payload = await _read_json(request)
    result = service.check(payload)
    return {"valid": result.is_valid, "errors": result.errors}
