"""API endpoint tests"""

import uuid
from unittest.mock import patch

import pytest
from sqlalchemy import select

from app.core.config import settings
from app.models import AuditLog, Claim, UserNotification
from app.services.acquisition_service import AcquisitionService


class TestHealthAPI:
    """Health endpoints"""

    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {
            "database": "ok",
            "data_sources": 0,
            "last_acquisition_status": None,
            "last_acquisition_at": None,
        }

    def test_health_counts_sources(self, client, make_source):
        make_source("feed")
        assert client.get("/health").json()["data_sources"] == 1

    def test_readiness(self, client):
        response = client.get("/health/ready")
        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    def test_security_headers_present(self, client):
        response = client.get("/health")
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert "Content-Security-Policy" in response.headers

    def test_request_id_issued(self, client):
        first = client.get("/health").headers["X-Request-ID"]
        second = client.get("/health").headers["X-Request-ID"]
        assert len(first) == 16 and first.isalnum()
        assert first != second

    def test_request_id_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "trace-abc"})
        assert response.headers["X-Request-ID"] == "trace-abc"

    def test_invalid_endpoint(self, client):
        assert client.get("/invalid").status_code == 404


class TestLawsuitAPI:
    """Lawsuit search and detail"""

    def test_search(self, client, make_lawsuit):
        make_lawsuit("Acme Data Breach", "1", defendants=["Acme Corp"])
        make_lawsuit("Globex Fees", "2")

        response = client.get("/lawsuits", params={"query": "acme", "limit": 5})
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["has_more"] is False
        assert body["lawsuits"][0]["defendants"][0]["company_name"] == "Acme Corp"

    def test_search_validates_limit(self, client):
        assert client.get("/lawsuits", params={"limit": 0}).status_code == 422

    def test_get_lawsuit(self, client, make_lawsuit):
        lawsuit = make_lawsuit("Acme", "1")
        response = client.get(f"/lawsuits/{lawsuit.id}")
        assert response.status_code == 200
        assert response.json()["case_number"] == "1"

    def test_get_missing_lawsuit(self, client):
        assert client.get(f"/lawsuits/{uuid.uuid4()}").status_code == 404

    def test_similar(self, client, make_lawsuit):
        target = make_lawsuit("Target", "1", defendants=["Acme"])
        make_lawsuit("Sibling", "2", defendants=["ACME"])

        response = client.get(f"/lawsuits/{target.id}/similar")
        assert [lawsuit["name"] for lawsuit in response.json()] == ["Sibling"]

    def test_social_proof(self, client, db, user, make_lawsuit):
        lawsuit = make_lawsuit("Acme", "1", success_metrics={"average_payout": 80})
        db.add(Claim(user_id=user.id, lawsuit_id=lawsuit.id, status="approved"))
        db.commit()

        response = client.get(f"/lawsuits/{lawsuit.id}/social-proof")
        assert response.status_code == 200
        assert response.json() == {"total_claims": 1, "approved_claims": 1, "average_payout": 80.0}

    def test_social_proof_unknown_lawsuit(self, client):
        assert client.get(f"/lawsuits/{uuid.uuid4()}/social-proof").status_code == 404


class TestUserAPI:
    """Profiles, actions, preferences and saved searches"""

    def test_get_profile_decrypted(self, client, user):
        response = client.get(f"/users/{user.id}")
        assert response.status_code == 200
        assert response.json()["name"] == "Jane Doe"

    def test_update_profile(self, client, user):
        response = client.patch(f"/users/{user.id}", json={"address": "2 Elm St"})
        assert response.status_code == 200
        assert response.json()["address"] == "2 Elm St"
        assert response.json()["name"] == "Jane Doe"

    def test_unknown_user(self, client):
        assert client.get(f"/users/{uuid.uuid4()}").status_code == 404

    def test_import_from_service(self, client, db, user):
        response = client.post(
            f"/users/{user.id}/imports/linkedin",
            json={"name": "Jane Roe", "occupation": "Teacher", "connections": 500},
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Jane Roe"
        assert response.json()["demographics"] == {"occupation": "Teacher"}

        entry = db.execute(select(AuditLog)).scalar_one()
        assert entry.operation == "data_import"
        assert entry.details == {"service": "linkedin", "fields": ["name", "occupation"]}

    def test_import_unsupported_service(self, client, user):
        assert client.post(f"/users/{user.id}/imports/myspace", json={"name": "x"}).status_code == 400

    def test_import_unknown_user(self, client):
        assert client.post(f"/users/{uuid.uuid4()}/imports/amazon", json={"name": "x"}).status_code == 404

    def test_recommendations(self, client, db, user, make_lawsuit):
        claimed = make_lawsuit("Claimed", "1")
        make_lawsuit("Open", "2")
        db.add(Claim(user_id=user.id, lawsuit_id=claimed.id, status="draft"))
        db.commit()

        response = client.get(f"/users/{user.id}/recommendations")
        assert response.status_code == 200
        assert [lawsuit["name"] for lawsuit in response.json()] == ["Open"]

    def test_recommendations_unknown_user(self, client):
        assert client.get(f"/users/{uuid.uuid4()}/recommendations").status_code == 404

    def test_track_action(self, client, user):
        response = client.post(f"/users/{user.id}/actions", json={"action": "search", "details": {"q": "acme"}})
        assert response.status_code == 204

    def test_preferences_round_trip(self, client, user):
        payload = {
            "email": True,
            "sms": False,
            "push": False,
            "in_app": True,
            "frequency": "daily",
            "quiet_hours": {"start": "22:00", "end": "07:00"},
        }
        assert client.put(f"/users/{user.id}/notification-preferences", json=payload).status_code == 200

        response = client.get(f"/users/{user.id}/notification-preferences")
        assert response.json() == payload

    def test_invalid_quiet_hours(self, client, user):
        payload = {"quiet_hours": {"start": "9am", "end": "17:00"}}
        assert client.put(f"/users/{user.id}/notification-preferences", json=payload).status_code == 422

    def test_saved_searches(self, client, user):
        created = client.post(f"/users/{user.id}/saved-searches", json={"search_query": {"query": "acme"}})
        assert created.status_code == 201
        search_id = created.json()["id"]

        patched = client.patch(f"/saved-searches/{search_id}", json={"enabled": True, "frequency": "weekly"})
        assert patched.json()["notification_frequency"] == "weekly"

        listed = client.get(f"/users/{user.id}/saved-searches").json()
        assert [s["id"] for s in listed] == [search_id]

        assert client.delete(f"/saved-searches/{search_id}").status_code == 204
        assert client.delete(f"/saved-searches/{search_id}").status_code == 404


class TestNotificationAPI:
    """Notification inbox, gate and batching"""

    def test_create_and_list(self, client, user):
        response = client.post(
            "/notifications",
            json={"user_id": str(user.id), "type": "deadline", "content": "Opt-out closes Friday"},
        )
        assert response.status_code == 201
        assert response.json()["read"] is False

        listed = client.get(f"/users/{user.id}/notifications").json()
        assert [n["content"] for n in listed] == ["Opt-out closes Friday"]

    def test_create_for_unknown_user(self, client):
        response = client.post("/notifications", json={"user_id": str(uuid.uuid4()), "type": "system", "content": "x"})
        assert response.status_code == 404

    def test_create_rejects_unknown_type(self, client, user):
        response = client.post("/notifications", json={"user_id": str(user.id), "type": "spam", "content": "x"})
        assert response.status_code == 422

    def test_mark_read_and_delete(self, client, db, user):
        notification = UserNotification(user_id=user.id, type="system", content="hi", data={}, read=False)
        db.add(notification)
        db.commit()

        assert client.post(f"/notifications/{notification.id}/read").status_code == 204
        assert client.get(f"/users/{user.id}/notifications").json() == []
        assert client.delete(f"/notifications/{notification.id}").status_code == 204
        assert client.delete(f"/notifications/{notification.id}").status_code == 404

    def test_mark_all_read(self, client, db, user):
        for content in ("a", "b"):
            db.add(UserNotification(user_id=user.id, type="system", content=content, data={}, read=False))
        db.commit()

        response = client.post(f"/users/{user.id}/notifications/read-all")
        assert response.json() == {"marked_read": 2}

    def test_should_send(self, client, user):
        client.put(f"/users/{user.id}/notification-preferences", json={"frequency": "weekly"})

        gated = client.get(f"/users/{user.id}/notifications/should-send", params={"type": "new_lawsuit"})
        urgent = client.get(f"/users/{user.id}/notifications/should-send", params={"type": "deadline"})

        assert gated.json()["should_send"] is False
        assert urgent.json()["should_send"] is True

    def test_batch(self, client, db, user):
        for content in ("a", "b"):
            db.add(UserNotification(user_id=user.id, type="claim_update", content=content, data={}, read=False))
        db.commit()

        response = client.post(f"/users/{user.id}/notifications/batch", params={"frequency": "daily"})
        assert response.status_code == 200
        [summary] = response.json()
        assert summary["content"] == "You have 2 updates to your claims."
        assert summary["data"]["batched"] is True

    def test_create_is_rate_limited(self, client, user):
        payload = {"user_id": str(user.id), "type": "system", "content": "x"}
        with patch.object(settings, "RATE_LIMIT_REQUESTS", 2):
            codes = [client.post("/notifications", json=payload).status_code for _ in range(3)]
        assert codes == [201, 201, 429]


class TestSourceAndAcquisitionAPI:
    """Source registry and pipeline triggers"""

    def test_add_and_list_prioritized(self, client):
        for name, accuracy in (("low", 0.1), ("high", 0.9)):
            response = client.post(
                "/sources",
                json={
                    "name": name,
                    "url": f"https://feeds.example.com/{name}.json",
                    "reliability_metrics": {"accuracy": accuracy, "completeness": 0.5, "timeliness": 0.5},
                },
            )
            assert response.status_code == 201

        listed = client.get("/sources").json()
        assert [s["name"] for s in listed] == ["high", "low"]
        assert listed[0]["priority_score"] == pytest.approx(0.36 + 0.15 + 0.1 + 0.05)

    def test_reliability_bounds(self, client, make_source):
        source = make_source("feed")
        response = client.put(
            f"/sources/{source.id}/reliability",
            json={"accuracy": 1.5, "completeness": 0.5, "timeliness": 0.5},
        )
        assert response.status_code == 422

    def test_record_attempt(self, client, make_source):
        source = make_source("feed")
        assert client.post(f"/sources/{source.id}/attempts", json={"success": False}).status_code == 204
        listed = client.get("/sources").json()
        assert listed[0]["success_history"]["failure_count"] == 1

    def test_trigger_unknown_source(self, client):
        assert client.post(f"/acquisition/run/{uuid.uuid4()}").status_code == 404

    def test_trigger_reports_failure(self, client, make_source):
        source = make_source("feed")
        with patch.object(AcquisitionService, "_fetch_source", side_effect=RuntimeError("feed down")):
            response = client.post(f"/acquisition/run/{source.id}")

        assert response.status_code == 200
        assert response.json()["success"] is False
        assert response.json()["error"] == "feed down"

        runs = client.get("/acquisition/runs").json()
        assert runs[0]["status"] == "failure"
        assert client.get("/health").json()["last_acquisition_status"] == "failure"

    def test_run_all(self, client, make_source):
        make_source("feed")

        async def fake_fetch(self, source):
            return [{"name": "Acme", "case_number": "1", "court": "C", "defendants": []}]

        with patch.object(AcquisitionService, "_fetch_source", fake_fetch):
            response = client.post("/acquisition/run-all")

        body = response.json()
        assert body["success"] is True
        assert body["results"]["feed"]["records_processed"] == 1


class TestPrivacyAPI:
    """PII scan, file validation and data subject requests"""

    def test_scan(self, client):
        response = client.post("/privacy/scan", json={"data": {"email": "a@b.co", "note": "hello"}})
        assert response.json() == {"pii_fields": ["email"]}

    def test_validate_file(self, client):
        response = client.post(
            "/privacy/validate-file",
            json={"file_name": "receipt.pdf.exe", "file_size": 100, "file_type": "application/pdf"},
        )
        assert response.json()["is_valid"] is False

    def test_access_request(self, client, user):
        response = client.post(f"/users/{user.id}/data-requests/access")
        assert response.status_code == 200
        assert response.json()["data"]["user"]["phone"] == "555-123-4567"

    def test_erasure_request(self, client, user):
        response = client.post(f"/users/{user.id}/data-requests/erasure")
        assert response.json()["success"] is True
        assert client.get(f"/users/{user.id}").status_code == 404

    def test_unknown_user(self, client):
        assert client.post(f"/users/{uuid.uuid4()}/data-requests/access").status_code == 404

    def test_rate_limit_spans_user_ids(self, client):
        with patch.object(settings, "RATE_LIMIT_REQUESTS", 3):
            codes = [client.post(f"/users/{uuid.uuid4()}/data-requests/access").status_code for _ in range(4)]
        assert codes == [404, 404, 404, 429]

    def test_rate_limit_shared_across_endpoints(self, client, user):
        with patch.object(settings, "RATE_LIMIT_REQUESTS", 2):
            scanned = client.post("/privacy/scan", json={"data": {}})
            exported = client.post(f"/users/{user.id}/data-requests/access")
            validated = client.post(
                "/privacy/validate-file",
                json={"file_name": "a.pdf", "file_size": 1, "file_type": "application/pdf"},
            )
        assert (scanned.status_code, exported.status_code, validated.status_code) == (200, 200, 429)

    def test_headless_client_refused(self, client, user):
        response = client.post(
            f"/users/{user.id}/data-requests/access",
            headers={"User-Agent": "Mozilla/5.0 HeadlessChrome/120.0"},
        )
        assert response.status_code == 403
