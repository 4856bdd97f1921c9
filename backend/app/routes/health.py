"""
WellNest Backend — Health Check Route
======================================

What:  Health check endpoint for the hosting platform's probes.
How:   Pings the database with SELECT 1. The service is only healthy if the
       database answers; otherwise the endpoint returns 503 so the platform
       routes traffic elsewhere.
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Response, status

from app import __version__
from app.database import ping_database
from app.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
    summary="Service health check",
)
async def health_check(response: Response) -> HealthResponse:
    db_status = "connected"
    overall = "OK"

    try:
        await ping_database()
    except Exception as e:
        db_status = "disconnected"
        overall = "ERROR"
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        database=db_status,
        timestamp=datetime.now(timezone.utc),
        uptime=round(time.time() - _start_time, 2),
        version=__version__,
    )
