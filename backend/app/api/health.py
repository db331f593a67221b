"""Health check endpoints"""
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from app.api.deps import get_health_service
from app.middleware.rate_limit import api_rate_limit
from app.services import HealthService

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("")
@api_rate_limit
def health_check(request: Request, health_service: HealthService = Depends(get_health_service)):
    """
    Detailed health check

    Reports database and redis status individually.
    Returns 200 when both are connected, 503 with every failure listed otherwise.
    The readiness and liveness probes below are not rate limited.
    """
    healthy, body = health_service.detailed()
    if not healthy:
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body)
    return body


@router.get("/ready")
def readiness_check(health_service: HealthService = Depends(get_health_service)):
    """
    Readiness check - verifies all dependencies are available

    Returns 200 if ready to serve traffic, 503 if not ready
    """
    ready, body = health_service.readiness()
    if not ready:
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body)
    return body


@router.get("/live")
def liveness_check(health_service: HealthService = Depends(get_health_service)):
    """
    Liveness check - verifies service is alive

    Returns 200 if process is alive
    Used by Kubernetes liveness probe
    """
    return health_service.liveness()
