"""Health check endpoint with database connectivity check and process uptime."""

import time

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import check_db_connected, get_db
from app.schemas.health import HealthResponse

router = APIRouter()

# Set once when the API process imports this module.
PROCESS_STARTED_AT = time.monotonic()


def uptime_seconds() -> float:
    return max(0.0, time.monotonic() - PROCESS_STARTED_AT)


@router.get("/", response_model=HealthResponse)
def get_health(db: Session = Depends(get_db)) -> HealthResponse:
    """
    Return service health status, database connectivity and uptime.
    Used by load balancers and monitoring.
    """
    db_status = "connected" if check_db_connected(db) else "disconnected"

    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        database=db_status,
        uptime_seconds=round(uptime_seconds(), 3),
    )
