"""
Tests: HTTP surface — status codes, error bodies and JSON money rendering.

Run with:
    pytest quote_automation/tests/test_api.py -v
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from quote_automation.api import create_app
from quote_automation.config import Settings

ALICE = {"X-User-Id": "alice"}
BOB = {"X-User-Id": "bob"}
OPS = {"X-User-Id": "ops"}

PROJECT = {
    "project_name": "Checkout rebuild",
    "project_type": "fullstack",
    "urgency": "urgent",
    "project_scope": {
        "features": ["auth", "dashboard", "billing", "reports"],
        "integrations": [{"type": "payment", "name": "stripe"}, {"type": "payment", "name": "paypal"}],
    },
}


class Clock:
    def __init__(self):
        self.now = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def client(clock):
    app = create_app(settings=Settings(mock_mode=True, staff_user_ids=["ops"]), clock=clock)
    return TestClient(app)


def _create_project(client, headers=ALICE, **overrides) -> str:
    resp = client.post("/api/projects", json={**PROJECT, **overrides}, headers=headers)
    assert resp.status_code == 200
    return resp.json()["project"]["id"]


def _generate(client, project_id, headers=ALICE):
    return client.post(f"/api/quotes/generate/{project_id}", headers=headers)


class TestHealthAndAuth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    def test_missing_user_header(self, client):
        resp = client.get("/api/quotes")
        assert resp.status_code == 401
        assert resp.json() == {
            "success": False,
            "error": {"kind": "unauthorized", "message": "Unauthorized"},
        }


class TestProjects:
    def test_create_and_read(self, client):
        project_id = _create_project(client)
        resp = client.get(f"/api/projects/{project_id}", headers=ALICE)
        assert resp.status_code == 200
        body = resp.json()["project"]
        assert body["status"] == "assessment_complete"
        assert body["project_type"] == "fullstack"

    def test_read_other_users_project(self, client):
        project_id = _create_project(client)
        assert client.get(f"/api/projects/{project_id}", headers=BOB).status_code == 403

    def test_invalid_project_type(self, client):
        resp = client.post("/api/projects", json={**PROJECT, "project_type": "mobile"}, headers=ALICE)
        assert resp.status_code == 400
        assert resp.json()["error"]["kind"] == "validation_error"

    def test_null_scope_fields_are_treated_as_absent(self, client):
        scope = {"features": None, "integrations": None, "timeline": None}
        project_id = _create_project(client, project_scope=scope, urgency=None)
        body = client.get(f"/api/projects/{project_id}", headers=ALICE).json()["project"]
        assert body["project_scope"]["timeline"] == "standard"

        quote = _generate(client, project_id).json()["quote"]
        assert quote["metadata"]["complexity_score"] == "2.00"
        assert quote["total_estimate"] == 8000.0

    def test_null_scope(self, client):
        project_id = _create_project(client, project_scope=None)
        assert _generate(client, project_id).status_code == 200


class TestQuotes:
    def test_generate(self, client):
        resp = _generate(client, _create_project(client))
        assert resp.status_code == 200
        quote = resp.json()["quote"]
        assert quote["status"] == "pending"
        assert quote["total_estimate"] == 14400.0
        assert quote["not_to_exceed"] == 16560.0
        assert quote["estimated_timeline_weeks"] == 12
        assert quote["payment_structure"]["deposit"] == 4320.0
        assert quote["metadata"]["complexity_level"] == "high"

    def test_generate_duplicate(self, client):
        project_id = _create_project(client)
        _generate(client, project_id)
        resp = _generate(client, project_id)
        assert resp.status_code == 400
        assert resp.json()["error"]["kind"] == "conflict"

    def test_generate_missing_project(self, client):
        resp = _generate(client, "nope")
        assert resp.status_code == 404
        assert resp.json()["error"]["kind"] == "not_found"

    def test_generate_for_other_user(self, client):
        project_id = _create_project(client)
        assert _generate(client, project_id, headers=BOB).status_code == 403

    def test_list_scoped_to_caller(self, client):
        _generate(client, _create_project(client))
        _generate(client, _create_project(client, headers=BOB), headers=BOB)
        quotes = client.get("/api/quotes", headers=ALICE).json()["quotes"]
        assert len(quotes) == 1
        assert quotes[0]["user_id"] == "alice"

    def test_get_quote(self, client):
        quote_id = _generate(client, _create_project(client)).json()["quote"]["id"]
        assert client.get(f"/api/quotes/{quote_id}", headers=ALICE).status_code == 200
        assert client.get(f"/api/quotes/{quote_id}", headers=BOB).status_code == 403
        assert client.get("/api/quotes/nope", headers=ALICE).status_code == 404

    def test_quote_carries_project_summary(self, client):
        quote_id = _generate(client, _create_project(client)).json()["quote"]["id"]
        project = client.get(f"/api/quotes/{quote_id}", headers=ALICE).json()["quote"]["project"]
        assert project == {
            "project_name": "Checkout rebuild",
            "project_type": "fullstack",
            "project_description": "",
            "urgency": "urgent",
        }
        listed = client.get("/api/quotes", headers=ALICE).json()["quotes"]
        assert listed[0]["project"]["project_name"] == "Checkout rebuild"

    def test_accept(self, client):
        quote_id = _generate(client, _create_project(client)).json()["quote"]["id"]
        resp = client.post(f"/api/quotes/{quote_id}/accept", headers=ALICE)
        assert resp.status_code == 200
        assert resp.json()["quote"]["status"] == "accepted"
        assert resp.json()["quote"]["terms_accepted"] is True

    def test_accept_expired(self, client, clock):
        quote_id = _generate(client, _create_project(client)).json()["quote"]["id"]
        clock.now += timedelta(days=31)
        resp = client.post(f"/api/quotes/{quote_id}/accept", headers=ALICE)
        assert resp.status_code == 400
        assert resp.json()["error"]["kind"] == "expired"
        assert client.get(f"/api/quotes/{quote_id}", headers=ALICE).json()["quote"]["status"] == "expired"

    def test_decline_with_and_without_reason(self, client):
        first = _generate(client, _create_project(client)).json()["quote"]["id"]
        resp = client.post(f"/api/quotes/{first}/decline", json={"reason": "budget"}, headers=ALICE)
        assert resp.status_code == 200
        assert resp.json()["quote"]["metadata"]["decline_reason"] == "budget"

        second = _generate(client, _create_project(client)).json()["quote"]["id"]
        resp = client.post(f"/api/quotes/{second}/decline", headers=ALICE)
        assert resp.status_code == 200
        assert resp.json()["quote"]["status"] == "declined"

    def test_invalid_transition(self, client):
        quote_id = _generate(client, _create_project(client)).json()["quote"]["id"]
        client.post(f"/api/quotes/{quote_id}/accept", headers=ALICE)
        resp = client.post(f"/api/quotes/{quote_id}/decline", headers=ALICE)
        assert resp.status_code == 400
        assert resp.json()["error"]["kind"] == "conflict"

    def test_send_and_expire(self, client, clock):
        quote_id = _generate(client, _create_project(client)).json()["quote"]["id"]
        resp = client.post(f"/api/quotes/{quote_id}/send", headers=OPS)
        assert resp.json()["quote"]["status"] == "sent"

        clock.now += timedelta(days=31)
        resp = client.post("/api/quotes/expire", headers=OPS)
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "expired": 1}

    def test_send_requires_staff(self, client):
        quote_id = _generate(client, _create_project(client)).json()["quote"]["id"]
        for headers in (ALICE, BOB):
            resp = client.post(f"/api/quotes/{quote_id}/send", headers=headers)
            assert resp.status_code == 403
            assert resp.json()["error"]["kind"] == "forbidden"
        assert client.get(f"/api/quotes/{quote_id}", headers=ALICE).json()["quote"]["status"] == "pending"

    def test_expire_requires_staff(self, client):
        assert client.post("/api/quotes/expire", headers=BOB).status_code == 403
        assert client.post("/api/quotes/expire").status_code == 401


class TestPricing:
    def test_calculate_after_seed(self, client):
        assert client.post("/api/pricing/seed", json={}, headers=ALICE).json()["count"] == 275
        resp = client.post(
            "/api/pricing/calculate",
            json={
                "bundle_id": "bundle_saas_starter",
                "revenue_category": "saas",
                "company_revenue_scale": "medium_10m",
                "complexity_rating": 7,
            },
            headers=ALICE,
        )
        assert resp.status_code == 200
        pricing = resp.json()["pricing"]
        assert pricing["final_price"] == 15187.5
        assert set(pricing["breakdown"]) == {"base", "scale_adjustment", "complexity_adjustment"}

    def test_unknown_category(self, client):
        client.post("/api/pricing/seed", json={}, headers=ALICE)
        resp = client.post(
            "/api/pricing/calculate",
            json={"bundle_id": "bundle_saas_starter", "revenue_category": "aerospace",
                  "company_revenue_scale": "medium_10m"},
            headers=ALICE,
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["kind"] == "validation_error"

    def test_unknown_bundle(self, client):
        client.post("/api/pricing/seed", json={}, headers=ALICE)
        resp = client.post(
            "/api/pricing/calculate",
            json={"bundle_id": "bundle_nope", "revenue_category": "saas",
                  "company_revenue_scale": "medium_10m"},
            headers=ALICE,
        )
        assert resp.status_code == 404

    def test_missing_fields(self, client):
        resp = client.post("/api/pricing/calculate", json={"bundle_id": "x"}, headers=ALICE)
        assert resp.status_code == 400
        assert "revenue_category" in resp.json()["error"]["message"]

    def test_rating_out_of_range(self, client):
        resp = client.post(
            "/api/pricing/calculate",
            json={"bundle_id": "x", "revenue_category": "saas",
                  "company_revenue_scale": "medium_10m", "complexity_rating": 11},
            headers=ALICE,
        )
        assert resp.status_code == 400

    def test_catalog_listings(self, client):
        client.post("/api/pricing/seed", json={}, headers=ALICE)
        assert len(client.get("/api/pricing/categories", headers=ALICE).json()["categories"]) == 7
        assert len(client.get("/api/pricing/scales", headers=ALICE).json()["scales"]) == 6
        assert len(client.get("/api/pricing/complexity", headers=ALICE).json()["tiers"]) == 10
        assert len(client.get("/api/pricing/base", headers=ALICE).json()["pricing"]) == 252

    def test_base_pricing_rows_name_their_category_and_scale(self, client):
        client.post("/api/pricing/seed", json={}, headers=ALICE)
        rows = client.get("/api/pricing/base", headers=ALICE).json()["pricing"]
        row = next(
            r for r in rows
            if r["bundle_id"] == "bundle_saas_starter"
            and r["revenue_category"]["code"] == "saas"
            and r["company_scale"]["code"] == "medium_10m"
        )
        assert row["revenue_category"]["name"] == "SaaS"
        assert row["company_scale"]["id"] == row["company_scale_id"]
        assert row["base_price"] == 7500.0
