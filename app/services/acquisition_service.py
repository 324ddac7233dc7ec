"""Lawsuit acquisition pipeline across all registered data sources."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.ingestion.base import BaseSource
from app.ingestion.feed_source import FeedSource
from app.ingestion.runner import IngestionRunner
from app.models.data_sources import DataSource
from app.models.lawsuits import Defendant, Lawsuit
from app.models.runs import AcquisitionRun
from app.services.data_source_service import DataSourceService
from app.services.entity_resolution import deduplicate, defendant_key, lawsuit_key

log = get_logger("acquisition_service")

# Fields refreshed on an existing lawsuit when the feed supplies a value
UPSERT_FIELDS = (
    "name",
    "judge",
    "category",
    "settlement_info",
    "eligibility_criteria",
    "required_evidence",
    "important_dates",
    "opt_out_deadline",
    "success_metrics",
)


class AcquisitionService:
    """Fetches, resolves and stores lawsuits for each data source.

    Responsibilities:
    - Visit sources in priority order
    - Deduplicate lawsuits and defendants before writing
    - Upsert lawsuits by (case_number, court)
    - Track each run and the source's success history
    - Keep going when a single source fails
    """

    def __init__(self, db: Session, source_factory: Callable[[DataSource], BaseSource] = FeedSource.from_model):
        self.db = db
        self.sources = DataSourceService(db)
        self.source_factory = source_factory

    async def run(self, source_id: uuid.UUID) -> Dict[str, Any]:
        """Run acquisition for a single data source."""
        source = self.sources.get(source_id)
        if not source:
            raise ValueError(f"Unknown data source: {source_id}")

        source_name = source.name
        run = AcquisitionRun(source_id=source_id, source_name=source_name, status="running", records_processed=0)
        self.db.add(run)
        self.db.commit()
        self.db.refresh(run)

        try:
            log.info(f"Starting acquisition for {source_name} ({source_id})")

            records = await self._fetch_source(source)
            unique = deduplicate(records, "lawsuit")
            stored, new_defendants = self._upsert_lawsuits(source, unique)

            run.status = "success"
            run.records_processed = stored
            run.meta = {"fetched": len(records), "unique": len(unique), "new_defendants": new_defendants}
            run.ended_at = datetime.now(timezone.utc)
            self.db.commit()

            self.sources.record_attempt(source_id, success=True)

            log.info(f"Acquisition finished for {source_name} | processed={stored} new_defendants={new_defendants}")
            return {"success": True, "records_processed": stored, "source": source_name}

        except Exception as exc:  # noqa: BLE001
            self.db.rollback()
            run.status = "failure"
            run.error_message = str(exc)
            run.ended_at = datetime.now(timezone.utc)
            self.db.add(run)
            self.db.commit()
            self.sources.record_attempt(source_id, success=False)
            log.error(f"Acquisition failed for {source_name}: {exc}")
            raise

    async def run_all(self) -> Dict[str, Any]:
        """Run acquisition for every source, highest priority first."""
        results: Dict[str, Any] = {}
        for source in self.sources.prioritized():
            source_name = source.name
            try:
                results[source_name] = await self.run(source.id)
            except Exception as exc:  # noqa: BLE001
                log.error(f"Failed to run acquisition for {source_name}: {exc}")
                results[source_name] = {"success": False, "error": str(exc), "source": source_name}

        return results

    # -------------------------------------------------------------------------
    # Runs
    # -------------------------------------------------------------------------
    def list_runs(
        self,
        source_id: Optional[uuid.UUID] = None,
        status: Optional[str] = None,
        limit: int = 10,
    ) -> List[AcquisitionRun]:
        stmt = select(AcquisitionRun)
        if source_id:
            stmt = stmt.where(AcquisitionRun.source_id == source_id)
        if status:
            stmt = stmt.where(AcquisitionRun.status == status)
        stmt = stmt.order_by(AcquisitionRun.started_at.desc()).limit(limit)
        return list(self.db.execute(stmt).scalars().all())

    def latest_run(self) -> Optional[AcquisitionRun]:
        runs = self.list_runs(limit=1)
        return runs[0] if runs else None

    # -------------------------------------------------------------------------
    # Fetch
    # -------------------------------------------------------------------------
    async def _fetch_source(self, source: DataSource) -> List[Dict[str, Any]]:
        feed = self.source_factory(source)
        aggregated = await IngestionRunner([feed]).run()
        return aggregated.get(feed.name, [])

    # -------------------------------------------------------------------------
    # Upsert
    # -------------------------------------------------------------------------
    def _upsert_lawsuits(self, source: DataSource, records: List[Dict[str, Any]]) -> Tuple[int, int]:
        """Insert or refresh each lawsuit; returns (lawsuits stored, defendants added)."""
        stored = 0
        new_defendants = 0
        fetched_at = datetime.now(timezone.utc).isoformat()

        for rec in records:
            if lawsuit_key(rec) is None or not rec.get("name"):
                log.warning(f"Skipping lawsuit without name/case_number/court from {source.name}")
                continue

            case_number, court = str(rec["case_number"]).strip(), str(rec["court"]).strip()
            lawsuit = self._find_lawsuit(case_number, court)
            if lawsuit is None:
                lawsuit = Lawsuit(case_number=case_number, court=court, name=str(rec["name"]).strip())
                self.db.add(lawsuit)

            for field in UPSERT_FIELDS:
                value = rec.get(field)
                if value is not None:
                    setattr(lawsuit, field, value)
            lawsuit.source_info = {"source_id": str(source.id), "source_name": source.name, "fetched_at": fetched_at}

            defendants = rec.get("defendants")
            if isinstance(defendants, list):
                new_defendants += self._attach_defendants(lawsuit, defendants)
            stored += 1

        return stored, new_defendants

    def _find_lawsuit(self, case_number: str, court: str) -> Optional[Lawsuit]:
        stmt = select(Lawsuit).where(Lawsuit.case_number == case_number, Lawsuit.court == court)
        return self.db.execute(stmt).scalar_one_or_none()

    @staticmethod
    def _attach_defendants(lawsuit: Lawsuit, defendants: List[Dict[str, Any]]) -> int:
        """Add defendants the lawsuit does not already name; returns how many were added."""
        known = {defendant_key(d) for d in lawsuit.defendants}
        added = 0
        entries = [entry for entry in defendants if isinstance(entry, dict)]
        for entry in deduplicate(entries, "defendant"):
            key = defendant_key(entry)
            if key is None or key in known:
                continue
            lawsuit.defendants.append(
                Defendant(company_name=str(entry["company_name"]).strip(), company_info=entry.get("company_info"))
            )
            known.add(key)
            added += 1
        return added
