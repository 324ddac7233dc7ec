"""Saved search routes."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.schemas.api import SavedSearchCreate, SavedSearchNotificationUpdate, SavedSearchOut
from app.services.lawsuit_service import LawsuitService

router = APIRouter(tags=["saved-searches"])


@router.get("/users/{user_id}/saved-searches", response_model=list[SavedSearchOut])
def list_saved_searches(user_id: uuid.UUID, db: Session = Depends(get_db)):
    return [SavedSearchOut.model_validate(s) for s in LawsuitService(db).list_saved_searches(user_id)]


@router.post("/users/{user_id}/saved-searches", response_model=SavedSearchOut, status_code=status.HTTP_201_CREATED)
def save_search(user_id: uuid.UUID, payload: SavedSearchCreate, db: Session = Depends(get_db)):
    saved = LawsuitService(db).save_search(user_id, payload.search_query)
    if not saved:
        raise HTTPException(status_code=404, detail=f"User '{user_id}' not found")
    return SavedSearchOut.model_validate(saved)


@router.delete("/saved-searches/{search_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_saved_search(search_id: uuid.UUID, db: Session = Depends(get_db)):
    if not LawsuitService(db).delete_saved_search(search_id):
        raise HTTPException(status_code=404, detail=f"Saved search '{search_id}' not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/saved-searches/{search_id}", response_model=SavedSearchOut)
def update_saved_search_notifications(
    search_id: uuid.UUID,
    payload: SavedSearchNotificationUpdate,
    db: Session = Depends(get_db),
):
    saved = LawsuitService(db).update_saved_search_notifications(search_id, payload.enabled, payload.frequency)
    if not saved:
        raise HTTPException(status_code=404, detail=f"Saved search '{search_id}' not found")
    return SavedSearchOut.model_validate(saved)
