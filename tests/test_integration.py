import pytest
from fastapi.testclient import TestClient

from src.tourplan.main import create_app
from src.tourplan.services.routing.cost_model import GeometricCostModel


@pytest.fixture
def api_client(monkeypatch: pytest.MonkeyPatch) -> TestClient:
    from src.tourplan.services.routing import service as routing_service

    monkeypatch.setattr(routing_service, "build_cost_model", lambda config: GeometricCostModel())
    return TestClient(create_app())


def _point(lat: float, lng: float, **extra) -> dict:
    return {"lat": lat, "lng": lng, **extra}


def test_health_endpoint(api_client: TestClient):
    response = api_client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_optimize_endpoint_orders_waypoints(api_client: TestClient):
    payload = {
        "start": _point(35.0, 139.0, name="Start"),
        "end": _point(35.0, 139.10, name="End"),
        "waypoints": [
            _point(35.0, 138.97, name="west", memo="back door", stay_minutes=20, desired_time="10:30"),
            _point(35.001, 139.02, name="near"),
        ],
    }

    response = api_client.post("/api/routes/optimize", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert [wp["name"] for wp in body["ordered_waypoints"]] == ["west", "near"]
    assert body["ordered_waypoints"][0]["memo"] == "back door"
    assert body["ordered_waypoints"][0]["stay_minutes"] == 20
    assert body["ordered_waypoints"][0]["desired_time"] == "10:30"
    assert len(body["legs"]) == 3
    assert body["legs"][0]["origin"]["name"] == "Start"
    assert body["legs"][-1]["destination"]["name"] == "End"
    assert body["total_distance_km"] > 0
    assert isinstance(body["total_time_min"], int)
    assert body["metadata"]["cost_source"] == "geometric"

    geometry = body["route_geojson"]["geometry"]
    assert geometry["type"] == "LineString"
    assert geometry["coordinates"][0] == [139.0, 35.0]
    assert geometry["coordinates"][1] == [138.97, 35.0]
    assert len(geometry["coordinates"]) == 4


def test_optimize_endpoint_without_waypoints(api_client: TestClient):
    payload = {"start": _point(35.0, 139.0), "end": _point(35.1, 139.1), "waypoints": []}

    response = api_client.post("/api/routes/optimize", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["ordered_waypoints"] == []
    assert body["legs"] == []
    assert body["total_distance_km"] == 0
    assert body["total_time_min"] == 0
    assert body["route_geojson"] is None


def test_optimize_endpoint_rejects_too_many_waypoints(api_client: TestClient):
    waypoints = [_point(35.0 + i * 0.001, 139.0) for i in range(51)]
    payload = {"start": _point(35.0, 139.0), "end": _point(35.1, 139.1), "waypoints": waypoints}

    response = api_client.post("/api/routes/optimize", json=payload)

    assert response.status_code == 400
    assert "Maximum 50" in response.json()["detail"]


def test_optimize_endpoint_validates_coordinates(api_client: TestClient):
    payload = {"start": _point(95.0, 139.0), "end": _point(35.1, 139.1), "waypoints": []}

    response = api_client.post("/api/routes/optimize", json=payload)

    assert response.status_code == 422


def test_optimize_endpoint_requires_start(api_client: TestClient):
    response = api_client.post("/api/routes/optimize", json={"end": _point(35.1, 139.1)})

    assert response.status_code == 422


def test_osrm_health_endpoint(api_client: TestClient, monkeypatch: pytest.MonkeyPatch):
    from src.tourplan.api.routes import health

    monkeypatch.setattr(health, "check_health", lambda client: True)

    response = api_client.get("/api/health/osrm")

    assert response.status_code == 200
    assert response.json()["healthy"] is True


def test_osrm_health_endpoint_without_base_url(api_client: TestClient, monkeypatch: pytest.MonkeyPatch):
    from src.tourplan.api.routes import health
    from src.tourplan.config import Settings

    monkeypatch.setattr(health, "settings", Settings(osrm_base_url=""))

    response = api_client.get("/api/health/osrm")

    assert response.status_code == 200
    body = response.json()
    assert body["healthy"] is False
    assert "not configured" in body["error"]


def test_start_server_runs_uvicorn(monkeypatch: pytest.MonkeyPatch):
    import start_server

    calls: list[tuple] = []
    monkeypatch.setattr(start_server.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
    monkeypatch.setenv("PORT", "9100")

    assert start_server.main() == 0
    assert calls[0][0] == "src.tourplan.main:app"
    assert calls[0][1]["port"] == 9100
