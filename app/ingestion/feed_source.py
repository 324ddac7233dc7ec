"""JSON feed source: one HTTP endpoint returning a list of lawsuits."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from app.core.config import settings
from app.core.logging import get_logger
from app.models.data_sources import DataSource
from .base import BaseSource

log = get_logger("ingestion.feed")

LAWSUIT_FIELDS = (
    "name",
    "case_number",
    "court",
    "judge",
    "category",
    "settlement_info",
    "eligibility_criteria",
    "required_evidence",
    "important_dates",
    "success_metrics",
)

TEXT_FIELDS = ("name", "case_number", "court", "judge", "category")
OBJECT_FIELDS = ("settlement_info", "eligibility_criteria", "important_dates", "success_metrics")


class FeedSource(BaseSource):
    """Fetches lawsuits from a registered data source URL.

    ``scraping_config`` may carry ``params`` (query string), ``headers`` and
    ``records_key`` (envelope key when the feed wraps its list in an object).
    ``data_mapping`` renames feed keys to lawsuit fields, e.g.
    ``{"case_number": "docket"}``.
    """

    def __init__(
        self,
        name: str,
        url: str,
        scraping_config: Optional[Dict[str, Any]] = None,
        data_mapping: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ):
        self.name = name
        self.url = url
        self.scraping_config = scraping_config or {}
        self.data_mapping = data_mapping or {}
        self.timeout = timeout if timeout is not None else settings.FEED_TIMEOUT_SECONDS

    @classmethod
    def from_model(cls, source: DataSource) -> "FeedSource":
        return cls(
            name=source.name,
            url=source.url,
            scraping_config=source.scraping_config,
            data_mapping=source.data_mapping,
        )

    async def fetch(self) -> List[Dict[str, Any]]:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.get(
                self.url,
                params=self.scraping_config.get("params"),
                headers=self.scraping_config.get("headers"),
            )
            resp.raise_for_status()
            data = resp.json()

        items = self._unwrap(data)
        results = [self.parse_record(item) for item in items if isinstance(item, dict)]
        log.info(f"Fetched {len(results)} lawsuits from {self.name}")
        return results

    def _unwrap(self, data: Any) -> List[Any]:
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            items = data.get(self.scraping_config.get("records_key", "lawsuits"))
            if isinstance(items, list):
                return items
        raise ValueError(f"Feed {self.name} did not return a list of lawsuits")

    def _mapped(self, item: Dict[str, Any], field: str) -> Any:
        return item.get(self.data_mapping.get(field, field))

    def parse_record(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """Map one feed item onto lawsuit fields plus a ``defendants`` list.

        Values of the wrong shape are dropped: text fields accept strings and
        numbers, object fields only dicts and ``required_evidence`` only a list.
        """
        record: Dict[str, Any] = {field: self._mapped(item, field) for field in LAWSUIT_FIELDS}

        for field in TEXT_FIELDS:
            record[field] = _text(record[field])
        for field in OBJECT_FIELDS:
            if not isinstance(record[field], dict):
                record[field] = None
        if not isinstance(record["required_evidence"], list):
            record["required_evidence"] = None

        important_dates = record["important_dates"] or {}
        deadline = self._mapped(item, "opt_out_deadline") or important_dates.get("opt_out_deadline")
        record["opt_out_deadline"] = self.parse_timestamp(deadline)

        entries = self._mapped(item, "defendants")
        defendants = []
        for entry in entries if isinstance(entries, list) else []:
            if isinstance(entry, dict):
                company_name = _text(entry.get("company_name") or entry.get("name"))
                company_info = entry.get("company_info") if isinstance(entry.get("company_info"), dict) else None
            else:
                company_name, company_info = _text(entry), None
            if company_name:
                defendants.append({"company_name": company_name, "company_info": company_info})
        record["defendants"] = defendants
        return record


def _text(value: Any) -> Optional[str]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str):
        return None
    return value.strip() or None
