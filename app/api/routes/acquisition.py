"""Acquisition routes - Trigger and inspect lawsuit acquisition runs."""

import uuid
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.logging import get_logger
from app.schemas.api import AcquisitionRunOut, AcquisitionTriggerResponse
from app.services.acquisition_service import AcquisitionService
from app.services.data_source_service import DataSourceService

router = APIRouter(prefix="/acquisition", tags=["acquisition"])
log = get_logger("acquisition_routes")


@router.post("/run/{source_id}", response_model=AcquisitionTriggerResponse)
async def trigger_acquisition(source_id: uuid.UUID, db: Session = Depends(get_db)):
    """
    Trigger acquisition for a single data source.

    This runs the full pipeline:
    1. Fetch the source's lawsuit feed
    2. Deduplicate lawsuits by (case_number, court)
    3. Upsert lawsuits and attach new defendants
    4. Record the attempt on the source's success history
    """
    source = DataSourceService(db).get(source_id)
    if not source:
        raise HTTPException(status_code=404, detail=f"Data source '{source_id}' not found")
    source_name = source.name

    log.info(f"Acquisition triggered for source: {source_name}")

    try:
        result = await AcquisitionService(db).run(source_id)
        return AcquisitionTriggerResponse(
            success=result["success"],
            source=source_name,
            records_processed=result.get("records_processed", 0),
        )
    except Exception as exc:
        log.error(f"Acquisition failed for {source_name}: {exc}")
        return AcquisitionTriggerResponse(
            success=False,
            source=source_name,
            records_processed=0,
            error=str(exc),
        )


@router.post("/run-all")
async def trigger_acquisition_all(db: Session = Depends(get_db)):
    """
    Trigger acquisition for every registered source, highest priority first.

    A failing source is reported in its result and does not stop the others.
    """
    log.info("Acquisition triggered for all sources")

    results = await AcquisitionService(db).run_all()

    return {
        "success": all(r.get("success", False) for r in results.values()),
        "results": results,
    }


@router.get("/runs", response_model=list[AcquisitionRunOut])
def list_runs(
    source_id: Optional[uuid.UUID] = Query(None, description="Filter by data source"),
    status: Optional[Literal["running", "success", "failure"]] = Query(None, description="Filter by run status"),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    runs = AcquisitionService(db).list_runs(source_id=source_id, status=status, limit=limit)
    return [AcquisitionRunOut.model_validate(r) for r in runs]
