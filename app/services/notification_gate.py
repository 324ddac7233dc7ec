"""Delivery gating and batching for user notifications.

Both functions are pure: preference lookup and persistence belong to
NotificationService.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence
from zoneinfo import ZoneInfo

from app.core.config import settings
from app.core.logging import get_logger
from app.core.records import field_value
from app.schemas.notifications import Frequency, NotificationPreferences, NotificationType

log = get_logger("notification_gate")

# Event types delivered regardless of the user's batching frequency
ALWAYS_IMMEDIATE = frozenset({NotificationType.CLAIM_UPDATE.value, NotificationType.DEADLINE.value})

BATCH_TEMPLATES = {
    NotificationType.CLAIM_UPDATE.value: "You have {count} updates to your claims.",
    NotificationType.DEADLINE.value: "You have {count} upcoming deadlines.",
    NotificationType.NEW_LAWSUIT.value: "There are {count} new lawsuits that may be relevant to you.",
}
DEFAULT_BATCH_TEMPLATE = "You have {count} new notifications."


def _type_value(event_type: Any) -> str:
    return event_type.value if isinstance(event_type, NotificationType) else str(event_type)


def minute_of_day(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


def current_time() -> datetime:
    if settings.QUIET_HOURS_TIMEZONE.upper() == "UTC":
        return datetime.now(timezone.utc)
    return datetime.now(ZoneInfo(settings.QUIET_HOURS_TIMEZONE))


def may_notify(
    user_id: Any,
    event_type: Any,
    preferences: Optional[NotificationPreferences],
    now: Optional[datetime] = None,
) -> bool:
    """Decide whether a notification may go out right now through at least one channel."""
    if preferences is None:
        # Missing preferences fail open so users are never silently starved
        return True

    if not preferences.any_channel_enabled:
        log.debug(f"Notification suppressed for user={user_id}: all channels disabled")
        return False

    if preferences.quiet_hours is not None:
        moment = now or current_time()
        if preferences.quiet_hours.contains(minute_of_day(moment)):
            log.debug(f"Notification suppressed for user={user_id}: inside quiet hours")
            return False

    type_value = _type_value(event_type)
    if type_value not in ALWAYS_IMMEDIATE and preferences.frequency in (Frequency.DAILY, Frequency.WEEKLY):
        # Left for the batching sweep
        return False

    return True


def batch_summary(event_type: str, count: int) -> str:
    template = BATCH_TEMPLATES.get(event_type, DEFAULT_BATCH_TEMPLATE)
    return template.format(count=count)


def batch_notifications(unread: Sequence[Any], frequency: Optional[Any] = None) -> List[Dict[str, Any]]:
    """Collapse unread notifications into one summary record per type.

    Types appear in order of first occurrence. A single notification keeps its
    content verbatim; larger groups get a templated summary.
    """
    groups: Dict[str, List[Any]] = {}
    for notification in unread:
        type_value = _type_value(field_value(notification, "type"))
        groups.setdefault(type_value, []).append(notification)

    frequency_value = frequency.value if isinstance(frequency, Frequency) else frequency

    summaries: List[Dict[str, Any]] = []
    for type_value, members in groups.items():
        if len(members) == 1:
            content = field_value(members[0], "content")
        else:
            content = batch_summary(type_value, len(members))

        ids = [field_value(n, "id") for n in members]
        summaries.append(
            {
                "type": type_value,
                "content": content,
                "data": {
                    "batched": True,
                    "count": len(members),
                    "frequency": frequency_value,
                    "notification_ids": [str(i) for i in ids if i is not None],
                },
            }
        )

    return summaries
