"""Application users; name/address/phone are stored Fernet-encrypted."""

import uuid

from sqlalchemy import DateTime, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, JSONType


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)

    name: Mapped[str | None] = mapped_column(String, nullable=True)
    address: Mapped[str | None] = mapped_column(String, nullable=True)
    phone: Mapped[str | None] = mapped_column(String, nullable=True)

    demographics: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    preferences: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    privacy_settings: Mapped[dict | None] = mapped_column(JSONType, nullable=True)

    account_tier: Mapped[str] = mapped_column(String(20), nullable=False, default="free")  # free | premium

    action_history: Mapped[list | None] = mapped_column(JSONType, nullable=True)

    created_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    updated_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
