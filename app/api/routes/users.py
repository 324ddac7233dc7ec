"""User routes - profile, imports, recommendations, behavioral tracking and notification preferences."""

import uuid
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from app.api.deps import client_ip, get_db, limit_per_client
from app.core.logging import get_logger
from app.schemas.api import LawsuitOut, UserActionIn, UserOut, UserProfileUpdate
from app.schemas.notifications import NotificationPreferences
from app.services.lawsuit_service import LawsuitService
from app.services.notification_service import NotificationService
from app.services.privacy_service import PrivacyService
from app.services.user_service import IMPORT_FIELDS, UserService

router = APIRouter(prefix="/users", tags=["users"])
log = get_logger("user_routes")


@router.get("/{user_id}", response_model=UserOut)
def get_profile(user_id: uuid.UUID, db: Session = Depends(get_db)):
    profile = UserService(db).get_profile(user_id)
    if not profile:
        raise HTTPException(status_code=404, detail=f"User '{user_id}' not found")
    return UserOut(**profile)


@router.patch("/{user_id}", response_model=UserOut)
def update_profile(user_id: uuid.UUID, payload: UserProfileUpdate, request: Request, db: Session = Depends(get_db)):
    changes = payload.model_dump(exclude_unset=True)
    profile = UserService(db).update_profile(user_id, changes)
    if not profile:
        raise HTTPException(status_code=404, detail=f"User '{user_id}' not found")

    PrivacyService(db).log_audit_event(user_id, "profile_update", {"fields": sorted(changes)}, client_ip(request))
    return UserOut(**profile)


@router.post("/{user_id}/imports/{service}", response_model=UserOut)
@limit_per_client()
def import_profile(
    user_id: uuid.UUID,
    service: str,
    request: Request,
    payload: dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
):
    """Fill the profile from an amazon, linkedin or facebook export."""
    try:
        profile = UserService(db).import_from_service(user_id, service, payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not profile:
        raise HTTPException(status_code=404, detail=f"User '{user_id}' not found")

    imported = sorted(field for field in IMPORT_FIELDS[service] if payload.get(field) is not None)
    PrivacyService(db).log_audit_event(
        user_id, "data_import", {"service": service, "fields": imported}, client_ip(request)
    )
    return UserOut(**profile)


@router.get("/{user_id}/recommendations", response_model=list[LawsuitOut])
def recommendations(user_id: uuid.UUID, limit: int = Query(10, ge=1, le=50), db: Session = Depends(get_db)):
    """Unclaimed lawsuits matching the user's location, soonest deadline first."""
    lawsuits = LawsuitService(db).recommend_for_user(user_id, limit=limit)
    if lawsuits is None:
        raise HTTPException(status_code=404, detail=f"User '{user_id}' not found")
    return [LawsuitOut.model_validate(lawsuit) for lawsuit in lawsuits]


@router.post("/{user_id}/actions", status_code=status.HTTP_204_NO_CONTENT)
def track_action(user_id: uuid.UUID, payload: UserActionIn, db: Session = Depends(get_db)):
    if not UserService(db).track_action(user_id, payload.action, payload.details):
        raise HTTPException(status_code=404, detail=f"User '{user_id}' not found")


@router.get("/{user_id}/notification-preferences", response_model=NotificationPreferences)
def get_notification_preferences(user_id: uuid.UUID, db: Session = Depends(get_db)):
    preferences = NotificationService(db).get_preferences(user_id)
    if preferences is None:
        raise HTTPException(status_code=404, detail=f"User '{user_id}' not found")
    return preferences


@router.put("/{user_id}/notification-preferences", response_model=NotificationPreferences)
def update_notification_preferences(
    user_id: uuid.UUID,
    payload: NotificationPreferences,
    db: Session = Depends(get_db),
):
    if not NotificationService(db).update_preferences(user_id, payload):
        raise HTTPException(status_code=404, detail=f"User '{user_id}' not found")
    log.info(f"Notification preferences updated for user={user_id}")
    return payload
