"""Acquisition pipeline, feed parsing and failure handling tests"""

import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy import select

from app import acquisition_entrypoint
from app.ingestion.base import BaseSource
from app.ingestion.feed_source import FeedSource
from app.ingestion.runner import IngestionRunner
from app.models import AcquisitionRun, DataSource, Lawsuit
from app.services.acquisition_service import AcquisitionService


class StaticSource(BaseSource):
    """Source returning a fixed set of records"""

    def __init__(self, name, records):
        self.name = name
        self.records = records

    async def fetch(self):
        return self.records


class FailingSource(BaseSource):
    """Source whose fetch always fails"""

    def __init__(self, name):
        self.name = name

    async def fetch(self):
        raise RuntimeError("Simulated fetch failure")


def lawsuit_record(case_number, court="N.D. Cal.", name=None, defendants=()):
    return {
        "name": name or f"Lawsuit {case_number}",
        "case_number": case_number,
        "court": court,
        "category": "privacy",
        "defendants": [{"company_name": d, "company_info": None} for d in defendants],
    }


def factory_for(feeds):
    """Build a source_factory that maps DataSource.name to a prepared source"""

    def _factory(source: DataSource) -> BaseSource:
        return feeds[source.name]

    return _factory


class TestAcquisitionService:
    """End-to-end acquisition against the test database"""

    @pytest.mark.asyncio
    async def test_run_stores_deduplicated_lawsuits(self, db, make_source):
        source = make_source("court-feed")
        records = [
            lawsuit_record("1", defendants=["Acme Corp", "acme corp "]),
            lawsuit_record("2", defendants=["Globex"]),
            lawsuit_record("1", name="Duplicate of 1", defendants=["Initech"]),
        ]
        service = AcquisitionService(db, source_factory=factory_for({"court-feed": StaticSource("court-feed", records)}))

        result = await service.run(source.id)

        assert result == {"success": True, "records_processed": 2, "source": "court-feed"}
        lawsuits = db.execute(select(Lawsuit).order_by(Lawsuit.case_number)).scalars().all()
        assert [lawsuit.name for lawsuit in lawsuits] == ["Lawsuit 1", "Lawsuit 2"]
        assert [d.company_name for d in lawsuits[0].defendants] == ["Acme Corp"]

        run = db.execute(select(AcquisitionRun)).scalar_one()
        assert run.status == "success"
        assert run.meta == {"fetched": 3, "unique": 2, "new_defendants": 2}
        assert db.get(DataSource, source.id).success_history["success_count"] == 1

    @pytest.mark.asyncio
    async def test_rerun_upserts_and_adds_only_new_defendants(self, db, make_source):
        source = make_source("court-feed")
        first = [lawsuit_record("1", defendants=["Acme Corp"])]
        second = [lawsuit_record("1", name="Renamed", defendants=["ACME CORP", "Initech"])]

        await AcquisitionService(db, source_factory=factory_for({"court-feed": StaticSource("court-feed", first)})).run(source.id)
        await AcquisitionService(db, source_factory=factory_for({"court-feed": StaticSource("court-feed", second)})).run(source.id)

        lawsuit = db.execute(select(Lawsuit)).scalar_one()
        assert lawsuit.name == "Renamed"
        assert sorted(d.company_name for d in lawsuit.defendants) == ["Acme Corp", "Initech"]

    @pytest.mark.asyncio
    async def test_records_without_identity_are_skipped(self, db, make_source):
        source = make_source("court-feed")
        records = [{"name": "No docket", "defendants": []}, lawsuit_record("7")]
        service = AcquisitionService(db, source_factory=factory_for({"court-feed": StaticSource("court-feed", records)}))

        result = await service.run(source.id)

        assert result["records_processed"] == 1
        assert db.execute(select(Lawsuit.case_number)).scalars().all() == ["7"]

    @pytest.mark.asyncio
    async def test_malformed_defendants_are_tolerated(self, db, make_source):
        source = make_source("court-feed")
        records = [
            {"name": "Numbered", "case_number": "1", "court": "C", "defendants": [{"company_name": 3000}, "Acme"]},
            {"name": "Text list", "case_number": "2", "court": "C", "defendants": "Acme Corp"},
        ]
        service = AcquisitionService(db, source_factory=factory_for({"court-feed": StaticSource("court-feed", records)}))

        result = await service.run(source.id)

        assert result["records_processed"] == 2
        lawsuits = db.execute(select(Lawsuit).order_by(Lawsuit.case_number)).scalars().all()
        assert [d.company_name for d in lawsuits[0].defendants] == ["3000"]
        assert lawsuits[1].defendants == []

    @pytest.mark.asyncio
    async def test_failure_records_run_and_attempt(self, db, make_source):
        source = make_source("broken")
        service = AcquisitionService(db, source_factory=factory_for({"broken": FailingSource("broken")}))

        with pytest.raises(RuntimeError):
            await service.run(source.id)

        run = db.execute(select(AcquisitionRun)).scalar_one()
        assert run.status == "failure"
        assert "Simulated fetch failure" in run.error_message
        assert db.get(DataSource, source.id).success_history["failure_count"] == 1

    @pytest.mark.asyncio
    async def test_unknown_source(self, db):
        with pytest.raises(ValueError):
            await AcquisitionService(db).run(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_run_all_continues_past_failures(self, db, make_source):
        make_source("broken", accuracy=0.9)
        make_source("healthy", accuracy=0.1)
        feeds = {
            "broken": FailingSource("broken"),
            "healthy": StaticSource("healthy", [lawsuit_record("1")]),
        }

        results = await AcquisitionService(db, source_factory=factory_for(feeds)).run_all()

        assert list(results) == ["broken", "healthy"]
        assert results["broken"]["success"] is False
        assert results["healthy"]["success"] is True
        assert db.execute(select(Lawsuit)).scalar_one().case_number == "1"

    @pytest.mark.asyncio
    async def test_list_runs_newest_first(self, db, make_source):
        source = make_source("court-feed")
        service = AcquisitionService(db, source_factory=factory_for({"court-feed": StaticSource("court-feed", [])}))
        await service.run(source.id)

        runs = service.list_runs(source_id=source.id)
        assert len(runs) == 1
        assert service.latest_run().run_id == runs[0].run_id


class TestFeedSource:
    """Feed parsing"""

    @pytest.fixture
    def feed(self):
        return FeedSource(
            name="court-feed",
            url="https://feeds.example.com/court.json",
            scraping_config={"records_key": "results"},
            data_mapping={"case_number": "docket"},
            timeout=1.0,
        )

    def test_parse_record_maps_fields(self, feed):
        record = feed.parse_record(
            {
                "name": "  Acme Data Breach ",
                "docket": "3:23-cv-01",
                "court": "N.D. Cal.",
                "important_dates": {"opt_out_deadline": "2026-05-01T00:00:00Z"},
                "defendants": ["Acme Corp", {"name": "Acme Holdings", "company_info": {"ticker": "ACME"}}],
            }
        )

        assert record["name"] == "Acme Data Breach"
        assert record["case_number"] == "3:23-cv-01"
        assert record["opt_out_deadline"] == datetime(2026, 5, 1, tzinfo=timezone.utc)
        assert record["defendants"] == [
            {"company_name": "Acme Corp", "company_info": None},
            {"company_name": "Acme Holdings", "company_info": {"ticker": "ACME"}},
        ]

    def test_parse_record_drops_malformed_values(self, feed):
        record = feed.parse_record(
            {
                "name": "Acme",
                "docket": 12345,
                "court": ["N.D. Cal."],
                "important_dates": "2026-05-01",
                "eligibility_criteria": ["residence"],
                "required_evidence": "receipt",
                "defendants": [42, None, {"company_name": {"legal": "Acme"}}, {"name": 7, "company_info": "n/a"}],
            }
        )

        assert record["case_number"] == "12345"
        assert record["court"] is None
        assert record["important_dates"] is None
        assert record["opt_out_deadline"] is None
        assert record["eligibility_criteria"] is None
        assert record["required_evidence"] is None
        assert record["defendants"] == [
            {"company_name": "42", "company_info": None},
            {"company_name": "7", "company_info": None},
        ]

    def test_parse_record_ignores_non_list_defendants(self, feed):
        record = feed.parse_record({"name": "Acme", "docket": "1", "court": "C", "defendants": "Acme Corp"})
        assert record["defendants"] == []

    @pytest.mark.asyncio
    async def test_fetch_unwraps_envelope(self, feed):
        response = MagicMock()
        response.raise_for_status = MagicMock()
        response.json.return_value = {"results": [{"name": "A", "docket": "1", "court": "C"}]}

        with patch("app.ingestion.feed_source.httpx.AsyncClient") as client_cls:
            client = client_cls.return_value.__aenter__.return_value
            client.get = AsyncMock(return_value=response)

            records = await feed.fetch()

        assert [r["case_number"] for r in records] == ["1"]
        client.get.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_fetch_rejects_non_list_payload(self, feed):
        response = MagicMock()
        response.json.return_value = {"unexpected": True}

        with patch("app.ingestion.feed_source.httpx.AsyncClient") as client_cls:
            client_cls.return_value.__aenter__.return_value.get = AsyncMock(return_value=response)

            with pytest.raises(ValueError):
                await feed.fetch()

    def test_parse_timestamp(self):
        assert BaseSource.parse_timestamp("2026-01-02") == datetime(2026, 1, 2, tzinfo=timezone.utc)
        assert BaseSource.parse_timestamp("not a date") is None
        assert BaseSource.parse_timestamp(None) is None


class TestIngestionRunner:
    """Runner aggregation"""

    @pytest.mark.asyncio
    async def test_runner_collects_by_source(self):
        runner = IngestionRunner([StaticSource("a", [lawsuit_record("1")]), StaticSource("b", [])])
        results = await runner.run()
        assert set(results) == {"a", "b"}
        assert len(results["a"]) == 1

    @pytest.mark.asyncio
    async def test_runner_propagates_fetch_failure(self):
        with pytest.raises(RuntimeError):
            await IngestionRunner([FailingSource("x")]).run()

    @pytest.mark.asyncio
    async def test_runner_drops_non_object_entries(self):
        runner = IngestionRunner([StaticSource("a", [lawsuit_record("1"), "garbage", None])])
        results = await runner.run()
        assert [r["case_number"] for r in results["a"]] == ["1"]


class TestAcquisitionRunModel:
    def test_duration_once_finished(self):
        run = AcquisitionRun(
            source_name="feed",
            status="success",
            started_at=datetime(2026, 1, 1, 12, 0, 0),
            ended_at=datetime(2026, 1, 1, 12, 0, 2, 500000, tzinfo=timezone.utc),
        )
        assert run.duration_seconds == 2.5

    def test_no_duration_while_running(self):
        run = AcquisitionRun(source_name="feed", status="running", started_at=datetime(2026, 1, 1, tzinfo=timezone.utc))
        assert run.duration_seconds is None


class TestAcquisitionEntrypoint:
    """Command-line runs exit non-zero when anything fails"""

    def test_invalid_source_id_exits(self):
        with pytest.raises(SystemExit) as exc:
            acquisition_entrypoint.main(["not-a-uuid"])
        assert exc.value.code == 1

    def test_run_all_success(self):
        results = {"feed": {"success": True, "records_processed": 3, "source": "feed"}}
        with patch.object(AcquisitionService, "run_all", AsyncMock(return_value=results)):
            assert acquisition_entrypoint.main([]) == results

    def test_run_all_with_failure_exits(self):
        results = {"feed": {"success": False, "error": "down", "source": "feed"}}
        with patch.object(AcquisitionService, "run_all", AsyncMock(return_value=results)):
            with pytest.raises(SystemExit) as exc:
                acquisition_entrypoint.main([])
        assert exc.value.code == 1

    def test_single_source_failure_exits(self):
        with patch.object(AcquisitionService, "run", AsyncMock(side_effect=ValueError("unknown source"))):
            with pytest.raises(SystemExit):
                acquisition_entrypoint.main([str(uuid.uuid4())])
