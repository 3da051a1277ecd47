"""
Integration tests for FastAPI endpoints.
Runs the app against an in-memory SQLite database; background research and
rescoring are patched out.
"""
import csv
import io
import pytest
from unittest.mock import patch, AsyncMock
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from hvac_research.core.database import get_db
from hvac_research.reporting.csv_export import STANDARD_HEADERS
from hvac_research.web.app import app

pytestmark = pytest.mark.integration


@pytest.fixture
def api_client():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    with patch("hvac_research.web.app.engine", engine), \
            patch("hvac_research.web.app.start_scheduler"), \
            patch("hvac_research.web.app.stop_scheduler", new_callable=AsyncMock):
        with TestClient(app) as client:
            yield client
    app.dependency_overrides.clear()


def _create(client, **overrides):
    body = {"name": "Lone Star Cooling", "city": "Austin", "county": "Travis", **overrides}
    response = client.post("/api/prospects", json=body)
    assert response.status_code == 200
    return response.json()["data"]["business_id"]


class TestProspectEndpoints:

    def test_create_and_detail(self, api_client):
        business_id = _create(api_client, phone="512-555-0100", ownership_type="FAMILY_OWNED")

        response = api_client.get(f"/api/prospects/{business_id}")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Lone Star Cooling"
        assert data["ownership_type"] == "FAMILY_OWNED"
        assert data["status"] == "DISCOVERED"
        assert data["discovery_source"] == "manual"
        assert data["score"] is None
        assert data["licenses"] == []

    def test_create_rejects_blank_county(self, api_client):
        response = api_client.post("/api/prospects", json={"name": "A", "city": "Austin", "county": ""})
        assert response.status_code == 400

    def test_detail_not_found(self, api_client):
        assert api_client.get("/api/prospects/999").status_code == 404

    def test_list(self, api_client):
        _create(api_client, name="Alpha Air")
        _create(api_client, name="Bravo Heating", county="Harris", city="Houston")

        response = api_client.get("/api/prospects", params={"county": "Harris"})
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["data"][0]["name"] == "Bravo Heating"
        assert body["data"][0]["overall_score"] is None

    def test_list_invalid_filters(self, api_client):
        response = api_client.get("/api/prospects", params={"sort_by": "revenue"})
        assert response.status_code == 400
        assert "Invalid filters" in response.json()["detail"]

    def test_patch_clears_field(self, api_client):
        business_id = _create(api_client, phone="512-555-0100")
        response = api_client.patch(f"/api/prospects/{business_id}", json={"phone": None, "founded_year": 1995})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["phone"] is None
        assert data["founded_year"] == 1995

    def test_patch_rejects_blank_name(self, api_client):
        business_id = _create(api_client)
        assert api_client.patch(f"/api/prospects/{business_id}", json={"name": ""}).status_code == 400

    def test_status_and_notes(self, api_client):
        business_id = _create(api_client)
        response = api_client.patch(
            f"/api/prospects/{business_id}/status",
            json={"status": "DISQUALIFIED", "reason": "Owned by PE roll-up"},
        )
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "DISQUALIFIED"

        response = api_client.post(f"/api/prospects/{business_id}/notes", json={"content": "Left voicemail"})
        assert response.status_code == 200

        notes = api_client.get(f"/api/prospects/{business_id}/notes").json()["data"]
        assert [n["note_type"] for n in notes] == ["GENERAL", "DISQUALIFICATION"]

    def test_invalid_status(self, api_client):
        business_id = _create(api_client)
        response = api_client.patch(f"/api/prospects/{business_id}/status", json={"status": "SOLD"})
        assert response.status_code == 422

    def test_score(self, api_client):
        business_id = _create(api_client)
        response = api_client.post(f"/api/prospects/{business_id}/score")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["overall_score"] == 51
        assert data["recommendation"] == "MEDIUM_PRIORITY"
        assert data["config_version"] == "1.0"

        detail = api_client.get(f"/api/prospects/{business_id}").json()["data"]
        assert detail["score"]["overall_score"] == 51
        assert set(detail["score"]["breakdown"]) == {
            "revenue_proxy", "online_weakness", "acquisition_fit", "growth_signals",
        }

    def test_score_missing(self, api_client):
        assert api_client.post("/api/prospects/999/score").status_code == 404


class TestResearchEndpoints:

    def test_create_requires_county(self, api_client):
        response = api_client.post("/api/research/jobs", json={"job_type": "REGION_DISCOVERY"})
        assert response.status_code == 400

    @patch("hvac_research.web.routers.research.run_research_job", new_callable=AsyncMock)
    def test_create_starts_job(self, mock_run, api_client):
        response = api_client.post("/api/research/jobs", json={"county": "Travis", "city": "Austin"})
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "accepted"
        job = body["data"]
        assert job["name"] == "Discovery - Austin - Travis"
        assert job["parameters"] == {"region": {"county": "Travis", "city": "Austin"}}
        assert job["status"] == "PENDING"
        mock_run.assert_awaited_once_with(job["id"])

    @patch("hvac_research.web.routers.research.run_research_job", new_callable=AsyncMock)
    def test_create_without_start(self, mock_run, api_client):
        response = api_client.post("/api/research/jobs", json={"county": "Travis", "start": False})
        assert response.json()["status"] == "success"
        mock_run.assert_not_awaited()

    @patch("hvac_research.web.routers.research.run_research_job", new_callable=AsyncMock)
    def test_list_detail_and_cancel(self, mock_run, api_client):
        job_id = api_client.post(
            "/api/research/jobs", json={"county": "Travis", "start": False}
        ).json()["data"]["id"]

        jobs = api_client.get("/api/research/jobs").json()["data"]
        assert [j["id"] for j in jobs] == [job_id]
        assert api_client.get(f"/api/research/jobs/{job_id}").status_code == 200

        response = api_client.post(f"/api/research/jobs/{job_id}/cancel")
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "CANCELLED"

        # Terminal jobs cannot be cancelled or started again
        assert api_client.post(f"/api/research/jobs/{job_id}/cancel").status_code == 409
        assert api_client.post(f"/api/research/jobs/{job_id}/start").status_code == 409

    def test_job_not_found(self, api_client):
        assert api_client.get("/api/research/jobs/404").status_code == 404
        assert api_client.post("/api/research/jobs/404/cancel").status_code == 404

    def test_render_prompt(self, api_client):
        response = api_client.post(
            "/api/research/prompt/render", json={"kind": "region_discovery", "params": {"county": "Bexar"}}
        )
        assert response.status_code == 200
        assert "Bexar" in response.json()["data"]["prompt"]

        response = api_client.post("/api/research/prompt/render", json={"kind": "horoscope"})
        assert response.status_code == 404


class TestScoringEndpoints:

    def test_active_config(self, api_client):
        response = api_client.get("/api/scoring/config")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["active"]["version"] == "1.0"
        assert data["defaults"]["weights"]["revenue_proxy"] == 0.30

    def test_register_config(self, api_client):
        response = api_client.post("/api/scoring/config", json={"version": "2.0", "description": "Tuned"})
        assert response.status_code == 200
        assert api_client.get("/api/scoring/config").json()["data"]["active"]["version"] == "2.0"

        conflict = api_client.post("/api/scoring/config", json={"version": "2.0", "description": "Other"})
        assert conflict.status_code == 409

        versions = [c["version"] for c in api_client.get("/api/scoring/configs").json()["data"]]
        assert versions == ["2.0"]

    def test_register_invalid_weights(self, api_client):
        response = api_client.post("/api/scoring/config", json={
            "version": "3.0",
            "weights": {"revenue_proxy": 0.9, "online_weakness": 0.9, "acquisition_fit": 0.9, "growth_signals": 0.9},
        })
        assert response.status_code == 422

    def test_preview(self, api_client):
        response = api_client.post("/api/scoring/preview", json={})
        assert response.status_code == 200
        assert response.json()["data"]["overall_score"] == 51

        response = api_client.post("/api/scoring/preview", json={
            "employee_count": 25, "as_of": "2026-06-30",
        })
        # Revenue: 100*0.30 + 50*0.20 = 40 -> 12 + 23 + 12.5 + 12 = 59.5
        assert response.json()["data"]["overall_score"] == 60

    @patch("hvac_research.web.routers.scoring.rescore_in_background", new_callable=AsyncMock)
    def test_rescore(self, mock_rescore, api_client):
        response = api_client.post("/api/scoring/rescore")
        assert response.status_code == 200
        assert response.json()["status"] == "accepted"
        mock_rescore.assert_awaited_once()


class TestReportAndDashboardEndpoints:

    def test_export_standard(self, api_client):
        _create(api_client, name="Smith, Jones & Sons")
        response = api_client.get("/api/reports/export")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "hvac_prospects_standard_" in response.headers["content-disposition"]

        rows = list(csv.reader(io.StringIO(response.text)))
        assert rows[0] == STANDARD_HEADERS
        assert rows[1][0] == "Smith, Jones & Sons"

    def test_export_detailed(self, api_client):
        _create(api_client)
        response = api_client.get("/api/reports/export", params={"format": "detailed"})
        rows = list(csv.reader(io.StringIO(response.text)))
        assert len(rows[0]) == 61
        assert len(rows) == 2

    def test_export_bad_format(self, api_client):
        assert api_client.get("/api/reports/export", params={"format": "xlsx"}).status_code == 400

    @patch("hvac_research.web.routers.research.run_research_job", new_callable=AsyncMock)
    def test_dashboard_stats(self, mock_run, api_client):
        business_id = _create(api_client)
        _create(api_client, name="Bravo Heating")
        api_client.post(f"/api/prospects/{business_id}/score")
        api_client.post("/api/research/jobs", json={"county": "Travis"})

        response = api_client.get("/api/dashboard/stats")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total_businesses"] == 2
        assert data["scored_businesses"] == 1
        assert data["average_score"] == 51.0
        assert data["by_status"]["DISCOVERED"] == 2
        assert len(data["recent_jobs"]) == 1
