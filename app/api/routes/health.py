"""Liveness and readiness checks for the API container."""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.logging import get_logger
from app.models import AcquisitionRun, DataSource
from app.schemas.api import HealthResponse

router = APIRouter(prefix="/health", tags=["health"])
log = get_logger("health")


def _database_error(db: Session) -> Optional[str]:
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        log.error(f"Database check failed: {e}")
        return str(e)
    return None


@router.get("", response_model=HealthResponse)
def health(response: Response, db: Session = Depends(get_db)):
    """
    Database connectivity plus a summary of the acquisition pipeline.

    Responds 503 when the database is unreachable.
    """
    error = _database_error(db)
    if error:
        response.status_code = 503
        return HealthResponse(database=f"down: {error}")

    source_count = db.execute(select(func.count()).select_from(DataSource)).scalar_one()
    last_run = db.execute(
        select(AcquisitionRun).order_by(AcquisitionRun.started_at.desc()).limit(1)
    ).scalar_one_or_none()

    return HealthResponse(
        database="ok",
        data_sources=source_count,
        last_acquisition_status=last_run.status if last_run else None,
        last_acquisition_at=last_run.started_at if last_run else None,
    )


@router.get("/ready")
def readiness(response: Response, db: Session = Depends(get_db)):
    """Readiness check: 200 once the database answers, 503 otherwise."""
    checked_at = datetime.now(timezone.utc).isoformat()
    error = _database_error(db)
    if error:
        response.status_code = 503
        return {"status": "not_ready", "error": error, "timestamp": checked_at}
    return {"status": "ready", "timestamp": checked_at}
