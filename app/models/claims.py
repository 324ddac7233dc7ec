"""Claims a user files against a lawsuit."""

import uuid

from sqlalchemy import DateTime, ForeignKey, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, JSONType

CLAIM_STATUSES = ("draft", "submitted", "under_review", "approved", "rejected", "paid")


class Claim(Base):
    __tablename__ = "claims"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    lawsuit_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("lawsuits.id"), nullable=False, index=True)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")

    status_history: Mapped[list | None] = mapped_column(JSONType, nullable=True)
    documents: Mapped[list | None] = mapped_column(JSONType, nullable=True)
    eligibility_answers: Mapped[dict | None] = mapped_column(JSONType, nullable=True)

    created_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    updated_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
