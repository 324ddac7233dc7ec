"""Pulls every configured feed and hands back well-formed lawsuit records per source."""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from app.core.logging import get_logger
from .base import BaseSource

log = get_logger("ingestion.runner")


def _count_defendants(records: Sequence[dict]) -> int:
    return sum(len(rec.get("defendants") or []) for rec in records)


class IngestionRunner:
    """Fetches each source in order. A fetch error stops the run and propagates."""

    def __init__(self, sources: List[BaseSource]):
        self.sources = sources

    async def run(self) -> Dict[str, List[dict]]:
        by_source: Dict[str, List[dict]] = {}

        for source in self.sources:
            fetched: List[Any] = list(await source.fetch())
            records = [rec for rec in fetched if isinstance(rec, dict)]

            dropped = len(fetched) - len(records)
            if dropped:
                log.warning(f"Source={source.name} returned {dropped} non-object entries, ignoring them")

            by_source[source.name] = records
            log.info(
                f"Source={source.name} fetched={len(fetched)} kept={len(records)} "
                f"defendants={_count_defendants(records)}"
            )
        return by_source
