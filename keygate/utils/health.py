"""Health check endpoints for monitoring and container orchestration."""

import logging
import time
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from sqlmodel import Session, text

from keygate.database import engine

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthStatus(BaseModel):
    status: str
    timestamp: str
    version: str = "0.1.0"
    checks: Dict[str, Any]


class ServiceCheck(BaseModel):
    status: str
    latency_ms: float | None = None
    error: str | None = None


def check_database() -> ServiceCheck:
    start = time.time()
    try:
        with Session(engine) as session:
            session.exec(text("SELECT 1"))
        latency = (time.time() - start) * 1000
        return ServiceCheck(status="healthy", latency_ms=round(latency, 2))
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return ServiceCheck(status="unhealthy", error=str(e))


@router.get("/health", response_model=HealthStatus, tags=["system"])
def health_check() -> HealthStatus:
    """Liveness plus database connectivity."""
    db_check = check_database()
    return HealthStatus(
        status="healthy" if db_check.status == "healthy" else "unhealthy",
        timestamp=datetime.utcnow().isoformat(),
        checks={"database": db_check.model_dump()},
    )


@router.get("/health/ready", tags=["system"])
def readiness_probe() -> Dict[str, str]:
    """Returns 200 only if the database is reachable."""
    db_check = check_database()
    if db_check.status == "unhealthy":
        raise HTTPException(status_code=503, detail="Database unavailable")
    return {"status": "ready"}


@router.get("/health/feature-flags", tags=["system"])
def feature_flags_status() -> Dict[str, Any]:
    from keygate.utils.feature_flags import FeatureFlags

    return {
        "feature_flags": FeatureFlags.get_all_flags(),
        "timestamp": datetime.utcnow().isoformat(),
    }
