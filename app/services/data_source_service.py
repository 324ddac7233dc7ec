"""Data source registry: reliability metrics and scrape attempt history."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.models.data_sources import DataSource, empty_success_history
from app.schemas.api import DataSourceCreate, ReliabilityMetrics
from app.services.source_priority import prioritize_sources

log = get_logger("data_source_service")


class DataSourceService:
    def __init__(self, db: Session):
        self.db = db

    def list_sources(self) -> List[DataSource]:
        """All sources, most accurate first."""
        sources = list(self.db.execute(select(DataSource).order_by(DataSource.created_at)).scalars().all())
        return sorted(sources, key=lambda s: (s.reliability_metrics or {}).get("accuracy") or 0.0, reverse=True)

    def get(self, source_id: uuid.UUID) -> Optional[DataSource]:
        return self.db.get(DataSource, source_id)

    def prioritized(self) -> List[DataSource]:
        return prioritize_sources(self.list_sources())

    def add_source(self, payload: DataSourceCreate) -> DataSource:
        source = DataSource(
            name=payload.name,
            url=payload.url,
            reliability_metrics=payload.reliability_metrics.model_dump(),
            scraping_config=payload.scraping_config,
            data_mapping=payload.data_mapping,
            success_history=empty_success_history(),
        )
        self.db.add(source)
        self.db.commit()
        self.db.refresh(source)
        log.info(f"Registered data source {source.name} ({source.id})")
        return source

    def update_reliability(self, source_id: uuid.UUID, metrics: ReliabilityMetrics) -> bool:
        source = self.get(source_id)
        if not source:
            return False
        source.reliability_metrics = metrics.model_dump()
        self.db.commit()
        return True

    def record_attempt(self, source_id: uuid.UUID, success: bool, at: Optional[datetime] = None) -> bool:
        """Accumulate one scrape attempt into the source's success history."""
        source = self.get(source_id)
        if not source:
            return False

        stamp = (at or datetime.now(timezone.utc)).isoformat()
        history = {**empty_success_history(), **(source.success_history or {})}
        if success:
            history["success_count"] += 1
            history["last_success"] = stamp
        else:
            history["failure_count"] += 1
            history["last_failure"] = stamp

        source.success_history = history
        self.db.commit()
        return True
