"""
QuillMind Backend — Health Check Route
========================================

What:  Liveness/readiness probe for load balancers and Docker.
How:   Runs SELECT 1 against the database and asks the Gemini service
       whether it is reachable (or whether its circuit is open).

Status levels:
    healthy:   database and AI service available          (HTTP 200)
    degraded:  AI service down, database fine             (HTTP 200)
    unhealthy: database unreachable                       (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Response
from sqlalchemy import text

from quillmind import __version__
from quillmind.database import engine
from quillmind.schemas.common import HealthResponse
from quillmind.services.gemini_service import CircuitBreaker, gemini_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(response: Response) -> HealthResponse:
    db_status = "connected"
    ai_status = "available"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    if gemini_service.circuit_breaker.state == CircuitBreaker.OPEN:
        ai_status = "circuit_open"
    elif not await gemini_service.health_check():
        ai_status = "unavailable"

    if ai_status != "available" and overall == "healthy":
        overall = "degraded"
    if overall == "unhealthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        ai=ai_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
