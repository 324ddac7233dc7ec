"""Data source routes - registry, reliability and prioritization."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.models.data_sources import DataSource
from app.schemas.api import AttemptIn, DataSourceCreate, DataSourceOut, ReliabilityMetrics
from app.services.data_source_service import DataSourceService
from app.services.source_priority import priority_score

router = APIRouter(prefix="/sources", tags=["sources"])


def _to_out(source: DataSource) -> DataSourceOut:
    return DataSourceOut(
        id=source.id,
        name=source.name,
        url=source.url,
        reliability_metrics=source.reliability_metrics or {},
        success_history=source.success_history or {},
        priority_score=round(priority_score(source), 4),
    )


@router.get("", response_model=list[DataSourceOut])
def list_sources(db: Session = Depends(get_db)):
    """All data sources in acquisition order (highest priority first)."""
    return [_to_out(s) for s in DataSourceService(db).prioritized()]


@router.post("", response_model=DataSourceOut, status_code=status.HTTP_201_CREATED)
def add_source(payload: DataSourceCreate, db: Session = Depends(get_db)):
    return _to_out(DataSourceService(db).add_source(payload))


@router.put("/{source_id}/reliability", response_model=DataSourceOut)
def update_reliability(source_id: uuid.UUID, payload: ReliabilityMetrics, db: Session = Depends(get_db)):
    service = DataSourceService(db)
    if not service.update_reliability(source_id, payload):
        raise HTTPException(status_code=404, detail=f"Data source '{source_id}' not found")
    return _to_out(service.get(source_id))


@router.post("/{source_id}/attempts", status_code=status.HTTP_204_NO_CONTENT)
def record_attempt(source_id: uuid.UUID, payload: AttemptIn, db: Session = Depends(get_db)):
    if not DataSourceService(db).record_attempt(source_id, payload.success):
        raise HTTPException(status_code=404, detail=f"Data source '{source_id}' not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
