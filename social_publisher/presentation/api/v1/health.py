import structlog
from fastapi import APIRouter
from sqlalchemy import text

from ....infrastructure.logging import Timer
from ..dependencies import get_database

router = APIRouter(tags=["health"])
logger = structlog.get_logger()


@router.get("/health", summary="Health check")
async def health() -> dict:
    """Basic health check for load balancer."""
    return {"status": "healthy"}


@router.get("/health/ready", summary="Readiness check")
async def readiness() -> dict:
    """Readiness check - verifies the database is reachable."""
    try:
        with Timer() as t:
            async with get_database().session() as session:
                await session.execute(text("SELECT 1"))
        database = {"status": "healthy", "latency_ms": t.duration_ms}
    except Exception as e:
        logger.error("Database health check failed", error=str(e))
        database = {"status": "unhealthy", "error": str(e)}

    return {
        "status": "ready" if database["status"] == "healthy" else "degraded",
        "checks": {"database": database},
    }
