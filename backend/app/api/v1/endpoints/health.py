"""
Health Check Endpoints

Endpoints:
- /health/live  - Basic liveness (app is running)
- /health/ready - Readiness check (database reachable and tables created)
- /health/deep  - Detailed diagnostics for debugging
"""

from fastapi import APIRouter, HTTPException, status
from datetime import datetime
from typing import Dict, Any
import time

from app.core.config import settings
from app.core.logging_config import logger


router = APIRouter(prefix="/health", tags=["Health Checks"])


async def check_database() -> Dict[str, Any]:
    """Check database connectivity and that the evaluation tables exist"""
    start = time.time()
    try:
        from app.core.database import get_session_local
        from sqlalchemy import text

        session_factory = get_session_local()
        async with session_factory() as session:
            await session.execute(text("SELECT 1 as health"))

            try:
                await session.execute(text("SELECT COUNT(*) FROM evaluations"))
                tables_ok = True
            except Exception:
                tables_ok = False

            latency = (time.time() - start) * 1000
            return {
                "status": "healthy",
                "latency_ms": round(latency, 2),
                "connection": "ok",
                "tables_ready": tables_ok,
                "message": "Database connection successful"
            }
    except Exception as e:
        latency = (time.time() - start) * 1000
        logger.error(f"[HealthCheck] Database check failed: {e}")
        return {
            "status": "unhealthy",
            "latency_ms": round(latency, 2),
            "connection": "failed",
            "tables_ready": False,
            "error": str(e),
            "message": "Database connection failed"
        }


def check_critical_env_vars() -> Dict[str, Any]:
    """Verify critical settings are not left at placeholder values"""
    critical_vars = {
        "DATABASE_URL": settings.DATABASE_URL,
        "JWT_SECRET_KEY": settings.JWT_SECRET_KEY,
    }

    missing = [
        name for name, value in critical_vars.items()
        if not value or value in ["CHANGE_ME", "your-secret-key"]
    ]

    if missing:
        return {
            "status": "unhealthy",
            "missing_critical": missing,
            "message": f"Missing critical env vars: {', '.join(missing)}"
        }
    return {
        "status": "healthy",
        "missing_critical": [],
        "message": "All critical environment variables configured"
    }


@router.get("/live")
async def liveness_check():
    """
    Liveness probe - indicates the application is running.

    Returns 200 if the process is alive.
    """
    return {
        "status": "alive",
        "timestamp": datetime.utcnow().isoformat(),
        "app": settings.APP_NAME,
        "version": "1.0.0"
    }


@router.get("/ready")
async def readiness_check():
    """
    Readiness probe - indicates the application can handle requests.

    Returns 200 only if the database is reachable and its tables exist.
    """
    db_check = await check_database()
    env_check = check_critical_env_vars()

    is_ready = db_check.get("status") == "healthy" and db_check.get("tables_ready", False)

    response = {
        "status": "ready" if is_ready else "not_ready",
        "timestamp": datetime.utcnow().isoformat(),
        "checks": {
            "database": db_check,
            "environment": env_check
        }
    }

    if not is_ready:
        logger.warning(f"[HealthCheck] Readiness check failed: {response}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=response
        )

    return response


@router.get("/deep")
async def deep_health_check():
    """Full diagnostics for debugging and monitoring dashboards"""
    start_time = time.time()

    checks = {
        "database": await check_database(),
        "environment": check_critical_env_vars(),
    }

    statuses = [c.get("status", "unknown") for c in checks.values()]
    overall = "unhealthy" if "unhealthy" in statuses else "healthy"

    response = {
        "status": overall,
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.ENVIRONMENT,
        "version": "1.0.0",
        "total_check_time_ms": round((time.time() - start_time) * 1000, 2),
        "checks": checks,
        "scoring_ready": (
            checks["database"].get("status") == "healthy" and
            checks["database"].get("tables_ready", False)
        )
    }

    if overall == "unhealthy":
        logger.error(f"[HealthCheck] Deep check unhealthy: {response}")

    return response
