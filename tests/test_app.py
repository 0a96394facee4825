"""
Tests for the application shell and the smaller API routers.
"""
from fastapi.testclient import TestClient

from core.channel_health import channel_health
from core.models.channel import ChannelId
from core.service_manager import service_manager
from core.services.telemetry_poller import telemetry_poller
import main
from main import app

client = TestClient(app)


class TestMeta:

    def test_root(self) -> None:
        response = client.get("/")
        assert response.status_code == 200
        assert response.json() == {"message": "Soil Health Dashboard API"}

    def test_health(self) -> None:
        assert client.get("/health").json() == {"status": "ok", "app": "Soil Health Dashboard API"}

    def test_cors_preflight(self) -> None:
        response = client.options("/api/soil/health", headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "GET",
        })
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"

    def test_lifespan_starts_and_stops_polling(self, monkeypatch) -> None:
        monkeypatch.setattr(main.settings, "emulation_mode", True)
        with TestClient(app) as live:
            assert service_manager.running
            assert telemetry_poller.running
            assert live.get("/api/soil/latest").json()["source"] == "mock"
        assert not service_manager.running
        assert not telemetry_poller.running


class TestTelemetryStatus:

    def test_status_lists_both_channels(self) -> None:
        data = client.get("/api/telemetry/status").json()
        assert data["emulation"] is True
        assert [c["channel"] for c in data["channels"]] == ["soil", "environment"]
        assert all(c["state"] == "live" for c in data["channels"])

    def test_status_reports_fallback(self) -> None:
        channel_health.get(ChannelId.SOIL).record_failure("returned status 500")
        soil = client.get("/api/telemetry/status").json()["channels"][0]
        assert soil["state"] == "fallback"
        assert soil["consecutive_failures"] == 1
        assert soil["last_error"] == "returned status 500"
        assert soil["next_retry_in"] > 0


class TestRecommendations:

    def test_resolve_ml_only(self) -> None:
        response = client.post("/api/recommendations/resolve", json={
            "ml_predictions": {"Primary_Fertilizer": "Urea", "N_Status": "Low"},
        })
        assert response.status_code == 200
        data = response.json()
        assert data["schema_version"] == "ml_only"
        assert data["ml_prediction"]["primary_fertilizer"] == "Urea"
        assert data["ml_prediction"]["n_status"] == "Low"

    def test_resolve_llm_enhanced(self) -> None:
        response = client.post("/api/recommendations/resolve", json={
            "ml_predictions": {"Primary_Fertilizer": "Urea"},
            "primary_fertilizer": {"name": "Urea", "npk": "46-0-0"},
            "_meta": {"region": "Punjab"},
        })
        assert response.status_code == 200
        data = response.json()
        assert data["schema_version"] == "llm_enhanced"
        assert data["primary_fertilizer"]["npk"] == "46-0-0"
        assert data["secondary_fertilizer"]["name"] == "None"
        assert data["meta"]["region"] == "Punjab"

    def test_unrecognised_payload(self) -> None:
        response = client.post("/api/recommendations/resolve", json={"foo": "bar"})
        assert response.status_code == 422
        assert "Unrecognised" in response.json()["detail"]


class TestFarms:

    def test_stats(self) -> None:
        response = client.post("/api/farms/stats", json=[
            {"name": "North field", "size": 1.0},
            {"name": "River plot", "size": 10.0, "unit": "acres"},
            {"name": "Village plot", "size": 10.0, "unit": "bigha", "crop_type": "wheat"},
        ])
        assert response.status_code == 200
        assert response.json() == {"total_farms": 3, "total_size_hectares": 6.38}

    def test_empty(self) -> None:
        assert client.post("/api/farms/stats", json=[]).json() == {"total_farms": 0, "total_size_hectares": 0.0}

    def test_unknown_unit(self) -> None:
        response = client.post("/api/farms/stats", json=[{"name": "Plot", "size": 1.0, "unit": "sq ft"}])
        assert response.status_code == 422


class TestLocale:

    def test_get_default(self) -> None:
        assert client.get("/api/locale").json() == {"language": "en", "available": ["en", "hi", "pa"]}

    def test_put_and_get(self, saved_languages) -> None:
        assert client.put("/api/locale", json={"language": "hi"}).status_code == 204
        assert client.get("/api/locale").json()["language"] == "hi"
        assert saved_languages == ["hi"]

    def test_put_invalid(self, saved_languages) -> None:
        response = client.put("/api/locale", json={"language": "fr"})
        assert response.status_code == 400
        assert saved_languages == []
