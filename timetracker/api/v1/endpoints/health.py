"""
Health Check Endpoints
"""

import time
from typing import Any

from fastapi import APIRouter
import structlog

from timetracker.core.config import settings
from timetracker.core.database import check_database_health

logger = structlog.get_logger()
router = APIRouter()


@router.get("")
@router.get("/")
async def health_check() -> Any:
    """Service and database health"""
    started = time.perf_counter()
    db_healthy = await check_database_health()
    elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

    if not db_healthy:
        logger.warning("Health check failed", check="database")

    return {
        "status": "healthy" if db_healthy else "unhealthy",
        "environment": settings.ENVIRONMENT,
        "checks": {
            "database": {
                "status": "healthy" if db_healthy else "unhealthy",
                "response_time_ms": elapsed_ms,
            }
        },
        "timestamp": time.time(),
    }
