"""
QR Bridge — Health Check Route
================================

What:  GET /health for monitoring and load balancer health checks.
How:   The service has no external dependencies, so it reports "healthy"
       together with the active generation defaults and uptime.
"""

import time

from fastapi import APIRouter

from qrbridge import __version__
from qrbridge.config import settings
from qrbridge.schemas.record import HealthResponse

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=__version__,
        matrix_size=f"{settings.matrix_width}x{settings.matrix_height}",
        image_format=settings.image_format,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
