"""
Health check endpoints.

- /health       - liveness plus database status (always 200)
- /health/ready - readiness probe, 503 while the database is unreachable
"""
import time
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from lecture_reports import __version__
from lecture_reports.core.config import settings
from lecture_reports.core.database import AsyncSessionLocal
from lecture_reports.core.logging_config import logger

router = APIRouter(prefix="/health", tags=["Health Checks"])


async def check_database() -> Dict[str, Any]:
    """Round-trip SELECT 1, then confirm the reports table exists"""
    started = time.perf_counter()
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
            try:
                await session.execute(text("SELECT COUNT(*) FROM reports"))
                tables_ready = True
            except Exception:
                tables_ready = False
    except Exception as e:
        latency = (time.perf_counter() - started) * 1000
        logger.log_db_query("health_check", "reports", latency, success=False, error=str(e))
        return {
            "status": "unhealthy",
            "connection": "failed",
            "tables_ready": False,
            "latency_ms": round(latency, 2),
            "error": str(e),
        }

    latency = (time.perf_counter() - started) * 1000
    logger.log_db_query("health_check", "reports", latency)
    return {
        "status": "healthy",
        "connection": "ok",
        "tables_ready": tables_ready,
        "latency_ms": round(latency, 2),
    }


async def health_payload() -> Dict[str, Any]:
    database = await check_database()
    return {
        "status": "healthy" if database["status"] == "healthy" else "degraded",
        "service": settings.APP_NAME,
        "version": __version__,
        "environment": settings.ENVIRONMENT,
        "database": database,
        "timestamp": datetime.utcnow().isoformat() + "Z",
    }


@router.get("")
async def health_check():
    return await health_payload()


@router.get("/ready")
async def readiness_check():
    payload = await health_payload()
    ready = payload["database"]["status"] == "healthy"
    return JSONResponse(status_code=200 if ready else 503, content=payload)
