"""
Notekeeper Backend: Health Check & Service Banner
==================================================

What:  GET /health for monitoring probes and GET / listing the API endpoints.
How:   The health check runs the gateway's SELECT 1 probe. The service is
       "healthy" (200) when the database answers and "unhealthy" (503)
       otherwise.
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app import __version__
from app.database import Database, get_database
from app.exceptions import StorageError
from app.schemas.note import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/", summary="Service banner")
async def root() -> dict:
    return {
        "message": "Notes API is working",
        "version": __version__,
        "endpoints": {
            "health": "GET /health",
            "list_notes": "GET /api/notes?filter=&search=&sort=",
            "get_note": "GET /api/notes/{id}",
            "create_note": "POST /api/notes",
            "update_note": "PUT /api/notes/{id}",
            "trash_note": "DELETE /api/notes/{id}/trash",
            "delete_note": "DELETE /api/notes/{id}",
            "restore_note": "PATCH /api/notes/{id}/restore",
            "toggle_important": "PATCH /api/notes/{id}/toggle-important",
            "export_notes": "GET /api/notes/export/all",
            "import_notes": "POST /api/notes/import",
            "clear_trash": "DELETE /api/notes/trash/clear",
        },
    }


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(database: Database = Depends(get_database)):
    db_status = "connected"
    overall = "healthy"

    try:
        await database.ping()
    except StorageError as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", e.detail)

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall != "healthy":
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
