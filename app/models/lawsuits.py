"""Lawsuits, their defendants, and users' saved searches."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, JSONType


class Lawsuit(Base):
    """A class action, identified across sources by (case_number, court)."""

    __tablename__ = "lawsuits"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String, nullable=False)
    case_number: Mapped[str] = mapped_column(String(100), nullable=False)
    court: Mapped[str] = mapped_column(String(200), nullable=False)
    judge: Mapped[str | None] = mapped_column(String(200), nullable=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)

    settlement_info: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    eligibility_criteria: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    required_evidence: Mapped[list | None] = mapped_column(JSONType, nullable=True)
    important_dates: Mapped[dict | None] = mapped_column(JSONType, nullable=True)

    # Denormalized from important_dates for range filtering
    opt_out_deadline: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, index=True)

    success_metrics: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    source_info: Mapped[dict | None] = mapped_column(JSONType, nullable=True)

    created_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    updated_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    defendants: Mapped[list["Defendant"]] = relationship(
        back_populates="lawsuit",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Defendant.company_name",
    )

    __table_args__ = (Index("ix_lawsuits_case_number_court", "case_number", "court", unique=True),)


class Defendant(Base):
    __tablename__ = "defendants"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    lawsuit_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("lawsuits.id", ondelete="CASCADE"), nullable=False, index=True
    )

    company_name: Mapped[str] = mapped_column(String(300), nullable=False)
    company_info: Mapped[dict | None] = mapped_column(JSONType, nullable=True)

    created_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    updated_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    lawsuit: Mapped[Lawsuit] = relationship(back_populates="defendants")


class SavedSearch(Base):
    __tablename__ = "saved_searches"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    search_query: Mapped[dict] = mapped_column(JSONType, nullable=False)

    notification_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    notification_frequency: Mapped[str | None] = mapped_column(String(20), nullable=True)

    created_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
