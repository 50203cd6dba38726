import fakeredis
import pytest
from fastapi.testclient import TestClient

from city_map.main import app
from city_map.models.health import ServiceStatus
from city_map.redis_cache.storage import RegistryStore


@pytest.fixture
def fake_redis():
    client = fakeredis.FakeRedis(decode_responses=True)
    client.flushall()
    return client


@pytest.fixture
def client(monkeypatch, fake_redis):
    monkeypatch.setattr("city_map.main.registry_store", lambda: RegistryStore(fake_redis))
    with TestClient(app) as test_client:
        yield test_client


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Hello World"}


def test_startup_loads_sample_cities(client):
    response = client.get("/cities")
    assert response.status_code == 200
    cities = response.json()
    assert len(cities) == 7
    assert cities[0] == {
        "city": "Nashville",
        "state": "TN",
        "latitude": 36.17,
        "longitude": -86.78,
    }


@pytest.mark.parametrize(
    "direction, expected",
    [("north", "Seattle"), ("east", "New York"), ("south", "Atlanta"), ("west", "Seattle")],
)
def test_farthest_city(client, direction, expected):
    response = client.get(f"/cities/farthest/{direction}")
    assert response.status_code == 200
    assert response.json() == {"direction": direction, "city": expected}


def test_farthest_city_invalid_direction(client):
    response = client.get("/cities/farthest/northeast")
    assert response.status_code == 400
    assert "Wrong cardinal direction" in response.json()["detail"]


def test_closest_city(client):
    response = client.get("/cities/closest", params={"latitude": 33, "longitude": -132.32})
    assert response.status_code == 200
    assert response.json()["city"] == "Los Angeles"


@pytest.mark.parametrize(
    "params",
    [
        {"latitude": 999, "longitude": 0},
        {"latitude": "abc", "longitude": 0},
        {"latitude": 0, "longitude": "nan"},
    ],
)
def test_closest_city_invalid_coordinates(client, params):
    response = client.get("/cities/closest", params=params)
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid latitude or longitude."


def test_states(client):
    response = client.get("/states")
    assert response.json() == {"states": ["TN", "NY", "GA", "CO", "WA", "CA"]}


def test_cities_of_state(client):
    assert client.get("/states/TN/cities").json() == {
        "state": "TN",
        "cities": ["Nashville", "Memphis"],
    }
    assert client.get("/states/ZZ/cities").json() == {"state": "ZZ", "cities": []}


def test_cities_of_state_invalid_code(client):
    response = client.get("/states/tn/cities")
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid state name."


def test_add_city(client):
    response = client.post(
        "/cities",
        json={"city": "Winston-Salem", "state": "NC", "latitude": "36.1", "longitude": "-80.24"},
    )
    assert response.status_code == 201
    assert response.json() == {
        "city": "Winston-Salem",
        "state": "NC",
        "latitude": 36.1,
        "longitude": -80.24,
    }
    assert client.get("/states/NC/cities").json()["cities"] == ["Winston-Salem"]
    assert client.get("/states").json()["states"][-1] == "NC"


def test_add_city_invalid_form(client):
    response = client.post(
        "/cities",
        json={"city": "Winston  Salem", "state": "NC", "latitude": "36.1", "longitude": "-80.24"},
    )
    assert response.status_code == 400
    assert response.json() == {"detail": "Invalid data in form"}
    assert len(client.get("/cities").json()) == 7


def test_export(client):
    response = client.get("/export")
    assert response.status_code == 200
    assert response.text.splitlines()[1] == '"New York, NY", 40.71, -74.0;'


def test_shutdown_saves_registry(monkeypatch, fake_redis):
    monkeypatch.setattr("city_map.main.registry_store", lambda: RegistryStore(fake_redis))
    with TestClient(app) as test_client:
        test_client.post(
            "/cities",
            json={"city": "Boise", "state": "ID", "latitude": "43.62", "longitude": "-116.2"},
        )
    saved = fake_redis.get("cities")
    assert saved.splitlines()[-1] == '"Boise, ID", 43.62, -116.2;'
    assert len(saved.splitlines()) == 8


def test_empty_registry_queries(monkeypatch, fake_redis):
    fake_redis.set("cities", "no valid rows here")
    monkeypatch.setattr("city_map.main.registry_store", lambda: RegistryStore(fake_redis))
    with TestClient(app) as test_client:
        assert test_client.get("/cities/farthest/north").status_code == 404
        response = test_client.get("/cities/closest", params={"latitude": 0, "longitude": 0})
        assert response.status_code == 404
        assert test_client.get("/states").json() == {"states": []}


def test_health(client, monkeypatch):
    monkeypatch.setattr("city_map.main.is_redis_available", lambda: ServiceStatus.available)
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "dependencies": {"redis": "available"},
        "cities": 7,
    }


def test_metrics(client):
    client.get("/states")
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "http_requests_total" in response.text


def test_add_city_with_line_break_is_rejected(monkeypatch, fake_redis):
    monkeypatch.setattr("city_map.main.registry_store", lambda: RegistryStore(fake_redis))
    with TestClient(app) as test_client:
        response = test_client.post(
            "/cities",
            json={"city": "New\nYork", "state": "NY", "latitude": "40.71", "longitude": "-74.0"},
        )
        assert response.status_code == 400
    assert len(RegistryStore(fake_redis).load()) == 7
