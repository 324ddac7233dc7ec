"""External scraping targets with reliability metrics and attempt history."""

import uuid

from sqlalchemy import DateTime, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, JSONType


def empty_success_history() -> dict:
    return {
        "success_count": 0,
        "failure_count": 0,
        "last_success": None,
        "last_failure": None,
    }


class DataSource(Base):
    """A scrape target. Rows are never deleted; success_history only accumulates."""

    __tablename__ = "data_sources"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    url: Mapped[str] = mapped_column(String, nullable=False)

    # {accuracy, completeness, timeliness}, each conventionally in [0, 1]
    reliability_metrics: Mapped[dict] = mapped_column(JSONType, nullable=False)

    scraping_config: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    data_mapping: Mapped[dict | None] = mapped_column(JSONType, nullable=True)

    success_history: Mapped[dict] = mapped_column(JSONType, nullable=False, default=empty_success_history)

    created_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    updated_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
