"""Notification routes - inbox, delivery gate and batching."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, limit_per_client
from app.schemas.notifications import (
    Frequency,
    NotificationCreate,
    NotificationOut,
    NotificationType,
    ShouldSendResponse,
)
from app.services.notification_service import NotificationService

router = APIRouter(tags=["notifications"])


@router.get("/users/{user_id}/notifications", response_model=list[NotificationOut])
def list_notifications(
    user_id: uuid.UUID,
    include_read: bool = Query(False, description="Include notifications already marked read"),
    db: Session = Depends(get_db),
):
    notifications = NotificationService(db).list_for_user(user_id, include_read=include_read)
    return [NotificationOut.model_validate(n) for n in notifications]


@router.post(
    "/notifications",
    response_model=NotificationOut,
    status_code=status.HTTP_201_CREATED,
)
@limit_per_client()
def create_notification(request: Request, payload: NotificationCreate, db: Session = Depends(get_db)):
    service = NotificationService(db)
    if service.get_preferences(payload.user_id) is None:
        raise HTTPException(status_code=404, detail=f"User '{payload.user_id}' not found")
    notification = service.create(payload.user_id, payload.type, payload.content, payload.data)
    return NotificationOut.model_validate(notification)


@router.post("/notifications/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
def mark_read(notification_id: uuid.UUID, db: Session = Depends(get_db)):
    if not NotificationService(db).mark_read(notification_id):
        raise HTTPException(status_code=404, detail=f"Notification '{notification_id}' not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/notifications/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(notification_id: uuid.UUID, db: Session = Depends(get_db)):
    if not NotificationService(db).delete(notification_id):
        raise HTTPException(status_code=404, detail=f"Notification '{notification_id}' not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/users/{user_id}/notifications/read-all")
def mark_all_read(user_id: uuid.UUID, db: Session = Depends(get_db)):
    return {"marked_read": NotificationService(db).mark_all_read(user_id)}


@router.get("/users/{user_id}/notifications/should-send", response_model=ShouldSendResponse)
def should_send(
    user_id: uuid.UUID,
    type: NotificationType = Query(..., description="Notification type to check"),
    db: Session = Depends(get_db),
):
    """
    Whether a notification of this type may be delivered right now.

    Unknown users fall back to default behavior (allowed).
    """
    allowed = NotificationService(db).should_send(user_id, type)
    return ShouldSendResponse(user_id=user_id, type=type.value, should_send=allowed)


@router.post("/users/{user_id}/notifications/batch", response_model=list[NotificationOut])
def batch_notifications(
    user_id: uuid.UUID,
    frequency: Frequency = Query(Frequency.DAILY),
    db: Session = Depends(get_db),
):
    """Summarize the user's unread notifications into one notification per type."""
    created = NotificationService(db).create_batched(user_id, frequency)
    return [NotificationOut.model_validate(n) for n in created]
