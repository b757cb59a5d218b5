"""
Card Activation Backend — Health Check Route
==============================================

What:  GET /health for container and load balancer probes.
How:   Runs SELECT 1 through the app's Database. Returns 200 "healthy" when
       the store answers and 503 "unhealthy" otherwise.
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from cardactivation import __version__
from cardactivation.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request):
    db_status = "connected"
    overall = "healthy"

    database = getattr(request.app.state, "database", None)
    try:
        if database is None or not database.is_connected:
            raise RuntimeError("database not connected")
        await database.ping()
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall != "healthy":
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
