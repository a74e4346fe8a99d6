"""
Library Store Backend - Health Check Route
===========================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Runs `SELECT 1` on the application's database and reports the result.
Who:   Docker health checks, load balancers, uptime monitors.

Status levels:
    - database connected:    HTTP 200, success=true
    - database unreachable:  HTTP 503, success=false (stop routing traffic)
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from library_api import __version__
from library_api.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Module-level: set once when the module loads.
_start_time = time.time()


@router.get(
    "/health-check",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request):
    """
    Probe the database with `SELECT 1`.

    Lightweight on purpose: probes run every few seconds.
    """
    db_status = "connected"
    try:
        async with request.app.state.database.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        logger.warning("Health check: database unreachable: %s", e)

    healthy = db_status == "connected"
    body = HealthResponse(
        success=healthy,
        message="Hello World!" if healthy else "Database unavailable",
        version=__version__,
        database=db_status,
        date=datetime.now(timezone.utc).strftime("%a %b %d %Y"),
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if healthy:
        return body
    return JSONResponse(status_code=503, content=body.model_dump())
