"""Notification persistence, preference storage, and delivery decisions."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.models.notifications import UserNotification
from app.models.users import User
from app.schemas.notifications import Frequency, NotificationPreferences, NotificationType
from app.services.notification_gate import batch_notifications, may_notify

log = get_logger("notification_service")

PREFERENCES_KEY = "notification_preferences"


class NotificationService:
    """CRUD over user_notifications plus the preference-backed send gate."""

    def __init__(self, db: Session):
        self.db = db

    # -------------------------------------------------------------------------
    # Notifications
    # -------------------------------------------------------------------------
    def create(
        self,
        user_id: uuid.UUID,
        type: NotificationType | str,
        content: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> UserNotification:
        type_value = type.value if isinstance(type, NotificationType) else type
        notification = UserNotification(
            user_id=user_id,
            type=type_value,
            content=content,
            data=data or {},
            read=False,
        )
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        log.info(f"Created {type_value} notification {notification.id} for user={user_id}")
        return notification

    def list_for_user(self, user_id: uuid.UUID, include_read: bool = False) -> List[UserNotification]:
        stmt = select(UserNotification).where(UserNotification.user_id == user_id)
        if not include_read:
            stmt = stmt.where(UserNotification.read.is_(False))
        stmt = stmt.order_by(UserNotification.created_at.desc())
        return list(self.db.execute(stmt).scalars().all())

    def mark_read(self, notification_id: uuid.UUID) -> bool:
        notification = self.db.get(UserNotification, notification_id)
        if not notification:
            return False
        notification.read = True
        self.db.commit()
        return True

    def mark_all_read(self, user_id: uuid.UUID) -> int:
        stmt = (
            update(UserNotification)
            .where(UserNotification.user_id == user_id, UserNotification.read.is_(False))
            .values(read=True)
        )
        result = self.db.execute(stmt)
        self.db.commit()
        return result.rowcount or 0

    def delete(self, notification_id: uuid.UUID) -> bool:
        notification = self.db.get(UserNotification, notification_id)
        if not notification:
            return False
        self.db.delete(notification)
        self.db.commit()
        return True

    # -------------------------------------------------------------------------
    # Preferences
    # -------------------------------------------------------------------------
    def get_preferences(self, user_id: uuid.UUID) -> Optional[NotificationPreferences]:
        """Stored preferences merged over defaults, or None when the user is unknown."""
        user = self.db.get(User, user_id)
        if not user:
            log.warning(f"Notification preferences requested for unknown user={user_id}")
            return None
        stored = (user.preferences or {}).get(PREFERENCES_KEY) or {}
        return NotificationPreferences.model_validate(stored)

    def update_preferences(self, user_id: uuid.UUID, preferences: NotificationPreferences) -> bool:
        user = self.db.get(User, user_id)
        if not user:
            return False
        # Reassign so the JSON column change is detected
        merged = dict(user.preferences or {})
        merged[PREFERENCES_KEY] = preferences.model_dump(mode="json")
        user.preferences = merged
        self.db.commit()
        return True

    # -------------------------------------------------------------------------
    # Delivery
    # -------------------------------------------------------------------------
    def should_send(self, user_id: uuid.UUID, type: NotificationType | str, now: Optional[datetime] = None) -> bool:
        preferences = self.get_preferences(user_id)
        return may_notify(user_id, type, preferences, now=now)

    def create_batched(self, user_id: uuid.UUID, frequency: Frequency) -> List[UserNotification]:
        """Persist one summary notification per type over the user's unread notifications."""
        unread = self.list_for_user(user_id)
        if not unread:
            return []

        created: List[UserNotification] = []
        for summary in batch_notifications(unread, frequency):
            notification = UserNotification(
                user_id=user_id,
                type=summary["type"],
                content=summary["content"],
                data=summary["data"],
                read=False,
            )
            self.db.add(notification)
            created.append(notification)

        self.db.commit()
        for notification in created:
            self.db.refresh(notification)

        log.info(f"Batched {len(unread)} unread notifications into {len(created)} for user={user_id} ({frequency.value})")
        return created
