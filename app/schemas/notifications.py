"""Notification preference and payload schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_serializer, field_validator

MINUTES_PER_DAY = 24 * 60


class NotificationType(str, Enum):
    CLAIM_UPDATE = "claim_update"
    DEADLINE = "deadline"
    NEW_LAWSUIT = "new_lawsuit"
    SYSTEM = "system"


class Frequency(str, Enum):
    IMMEDIATE = "immediate"
    DAILY = "daily"
    WEEKLY = "weekly"


def parse_minute_of_day(value: Any) -> int:
    """Accept ``"HH:MM"`` or an int minute-of-day and return minutes since midnight."""
    if isinstance(value, bool):
        raise ValueError("minute of day must be 'HH:MM' or an integer")
    if isinstance(value, int):
        minutes = value
    elif isinstance(value, str):
        hours, sep, mins = value.strip().partition(":")
        if not sep or not hours.isdigit() or not mins.isdigit():
            raise ValueError(f"invalid time of day: {value!r} (expected HH:MM)")
        if int(hours) > 23 or int(mins) > 59:
            raise ValueError(f"invalid time of day: {value!r}")
        minutes = int(hours) * 60 + int(mins)
    else:
        raise ValueError("minute of day must be 'HH:MM' or an integer")

    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"minute of day out of range: {minutes}")
    return minutes


def format_minute_of_day(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


class QuietHours(BaseModel):
    """A daily window in minutes since midnight; start > end wraps past midnight."""

    start: int
    end: int

    @field_validator("start", "end", mode="before")
    @classmethod
    def _parse(cls, value: Any) -> int:
        return parse_minute_of_day(value)

    @field_serializer("start", "end")
    def _format(self, value: int) -> str:
        return format_minute_of_day(value)

    @property
    def is_overnight(self) -> bool:
        return self.start >= self.end

    def contains(self, minute: int) -> bool:
        if self.start < self.end:
            return self.start <= minute <= self.end
        return minute >= self.start or minute <= self.end


class NotificationPreferences(BaseModel):
    email: bool = True
    sms: bool = False
    push: bool = True
    in_app: bool = True
    frequency: Frequency = Frequency.IMMEDIATE
    quiet_hours: Optional[QuietHours] = None

    @property
    def any_channel_enabled(self) -> bool:
        return self.email or self.sms or self.push or self.in_app


class NotificationCreate(BaseModel):
    user_id: uuid.UUID
    type: NotificationType
    content: str = Field(min_length=1)
    data: Dict[str, Any] = Field(default_factory=dict)


class NotificationOut(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    type: str
    content: str
    data: Optional[dict] = None
    read: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ShouldSendResponse(BaseModel):
    user_id: uuid.UUID
    type: str
    should_send: bool
