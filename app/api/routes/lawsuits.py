"""Lawsuit routes - search, detail, similar cases and claim statistics."""

import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.schemas.api import LawsuitOut, SearchParams, SearchResult, SocialProofOut
from app.services.lawsuit_service import LawsuitService

router = APIRouter(prefix="/lawsuits", tags=["lawsuits"])


@router.get("", response_model=SearchResult)
def search_lawsuits(
    query: Optional[str] = Query(None, description="Case-insensitive partial match on lawsuit name"),
    category: Optional[str] = Query(None, description="Exact category"),
    deadline_after: Optional[datetime] = Query(None, description="Opt-out deadline on or after"),
    deadline_before: Optional[datetime] = Query(None, description="Opt-out deadline on or before"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """
    Search lawsuits with filtering and pagination.

    Results are ordered by opt-out deadline (soonest first, undated last), then name.
    """
    params = SearchParams(
        query=query,
        category=category,
        deadline_after=deadline_after,
        deadline_before=deadline_before,
        page=page,
        limit=limit,
    )
    result = LawsuitService(db).search(params)
    return SearchResult(
        lawsuits=[LawsuitOut.model_validate(lawsuit) for lawsuit in result["lawsuits"]],
        total=result["total"],
        page=result["page"],
        limit=result["limit"],
        has_more=result["has_more"],
    )


@router.get("/{lawsuit_id}", response_model=LawsuitOut)
def get_lawsuit(lawsuit_id: uuid.UUID, db: Session = Depends(get_db)):
    lawsuit = LawsuitService(db).get(lawsuit_id)
    if not lawsuit:
        raise HTTPException(status_code=404, detail=f"Lawsuit '{lawsuit_id}' not found")
    return LawsuitOut.model_validate(lawsuit)


@router.get("/{lawsuit_id}/similar", response_model=list[LawsuitOut])
def similar_lawsuits(
    lawsuit_id: uuid.UUID,
    limit: int = Query(3, ge=1, le=20),
    db: Session = Depends(get_db),
):
    """Other lawsuits naming at least one of the same defendants."""
    similar = LawsuitService(db).similar(lawsuit_id, limit=limit)
    if similar is None:
        raise HTTPException(status_code=404, detail=f"Lawsuit '{lawsuit_id}' not found")
    return [LawsuitOut.model_validate(lawsuit) for lawsuit in similar]


@router.get("/{lawsuit_id}/social-proof", response_model=SocialProofOut)
def social_proof(lawsuit_id: uuid.UUID, db: Session = Depends(get_db)):
    """How many users have claimed this lawsuit, how many were approved, and the average payout."""
    metrics = LawsuitService(db).social_proof(lawsuit_id)
    if metrics is None:
        raise HTTPException(status_code=404, detail=f"Lawsuit '{lawsuit_id}' not found")
    return SocialProofOut(**metrics)
