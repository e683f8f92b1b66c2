"""
ScanPlant Backend — Health Check Route
========================================

What:  Health check endpoint for monitoring and load balancer checks.
How:   Queries the database with SELECT 1 and checks that the blob storage
       directory is writable.
Who:   Called by Docker health checks, load balancers, and monitoring systems.

Status levels:
    - healthy:   database and storage operational
    - unhealthy: either one is down
"""

import logging
import os
import time

from fastapi import APIRouter, Response
from sqlalchemy import text

from app import __version__
from app.database import engine
from app.schemas.common import HealthResponse
from app.services.storage_service import storage_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Track when the service started for uptime reporting
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description=(
        "Returns the health status of the backend service and its dependencies. "
        "Responds 503 when the database or blob storage is unavailable."
    ),
)
async def health_check(response: Response) -> HealthResponse:
    db_status = "connected"
    storage_status = "writable"
    overall = "healthy"

    # ── Check Database ────────────────────────────────────────────────────
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    # ── Check Blob Storage ────────────────────────────────────────────────
    if not os.access(storage_service.storage_root, os.W_OK):
        storage_status = "unavailable"
        overall = "unhealthy"
        logger.warning("Health check: storage root not writable: %s", storage_service.storage_root)

    if overall != "healthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        storage=storage_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
