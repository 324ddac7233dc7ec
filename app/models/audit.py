"""Append-only audit trail for sensitive operations."""

import uuid

from sqlalchemy import DateTime, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, JSONType


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # No FK: entries must survive erasure of the user they describe
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    operation: Mapped[str] = mapped_column(String(100), nullable=False)

    details: Mapped[dict | None] = mapped_column(JSONType, nullable=True)

    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)

    timestamp: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
