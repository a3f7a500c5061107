"""
Recipe Share Health Check Endpoints
Liveness, readiness and metrics
"""

from fastapi import APIRouter, HTTPException, Response, status
from fastapi.concurrency import run_in_threadpool
import time

from core.database import DatabaseHealthCheck
from core.config import settings
from core.monitoring import CONTENT_TYPE_LATEST, get_metrics

router = APIRouter()


@router.get("/")
async def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.VERSION,
        "timestamp": time.time()
    }


@router.get("/live")
async def liveness_check():
    """Kubernetes liveness probe endpoint"""
    return {"status": "alive"}


@router.get("/ready")
async def readiness_check():
    """
    Kubernetes readiness probe endpoint
    Checks the database connection
    """
    db_healthy = await run_in_threadpool(DatabaseHealthCheck.check_connection)

    if not db_healthy:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"status": "not_ready", "database": "disconnected"}
        )

    return {
        "status": "ready",
        "database": "connected",
        "pool": DatabaseHealthCheck.get_connection_info(),
        "timestamp": time.time()
    }


@router.get("/metrics", include_in_schema=False)
async def metrics_endpoint():
    """
    Prometheus metrics endpoint
    Returns metrics in Prometheus exposition format
    """
    return Response(content=get_metrics(), media_type=CONTENT_TYPE_LATEST)
