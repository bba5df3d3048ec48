"""Shared fixtures: fake clock, fake carstat upstream, and a wired test app."""

import json

import httpx
import pytest
from fastapi import Request
from fastapi.testclient import TestClient

from config import UpstreamConfig
from services.cache import ExpiringKeyValueCache
from services.carstat import CarstatClient, carstat_client_factory, get_carstat_client
from services.session_store import MemoryStore
from services.sessions import SessionRegistry, session_cache

UPSTREAM_URL = "https://carstat.test/api"
API_KEY = "test-key"


class FakeClock:
    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeUpstream:
    """httpx transport handler that records requests and serves canned JSON."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.routes: dict[str, tuple[int, object]] = {}

    def reply(self, path: str, body, status_code: int = 200) -> None:
        self.routes[path] = (status_code, body)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status_code, body = self.routes.get(request.url.path, (404, {"message": "Not Found"}))
        if isinstance(body, str):
            return httpx.Response(status_code, text=body)
        return httpx.Response(status_code, content=json.dumps(body), headers={"content-type": "application/json"})

    def calls_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]


def make_car(lot: str = "123", domain: str = "copart_com", **overrides) -> dict:
    car = {
        "id": 1,
        "year": 2019,
        "title": "2019 BMW X5",
        "vin": "ABC",
        "manufacturer": {"id": 16, "name": "BMW"},
        "model": {"id": 5, "name": "X5", "manufacturer_id": 16},
        "engine": {"id": 1, "name": "3.0L I6"},
        "lots": [
            {
                "id": 10,
                "lot": lot,
                "domain": {"id": 3, "name": domain},
                "odometer": {"km": 80467, "mi": 50000, "status": {"id": 1, "name": "actual"}},
                "bid": 4200,
                "status": {"id": 1, "name": "sale"},
                "seller": {"id": 2, "name": "State Farm", "is_insurance": True, "is_rental": False, "is_credit_company": False},
                "damage": {"main": {"id": 1, "name": "Front End"}},
                "condition": {"id": 1, "name": "run_and_drive"},
                "location": {
                    "country": {"iso": "US", "name": "USA"},
                    "state": {"id": 5, "code": "ca", "name": "California"},
                    "city": {"id": 9, "name": "Fresno"},
                },
                "images": {"normal": ["https://img.test/1.jpg", "https://img.test/2.jpg"]},
            }
        ],
    }
    car.update(overrides)
    return car


def make_listing(cars: list[dict], current_page: int = 1, last_page: int = 1, per_page: int = 20, total: int | None = None) -> dict:
    return {
        "data": cars,
        "meta": {
            "current_page": current_page,
            "last_page": last_page,
            "per_page": per_page,
            "total": len(cars) if total is None else total,
        },
    }


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def cache(store, clock):
    return ExpiringKeyValueCache(store, clock=clock)


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def upstream_config():
    return UpstreamConfig(base_url=UPSTREAM_URL, api_key=API_KEY)


@pytest.fixture
def carstat(upstream, upstream_config):
    return CarstatClient(upstream_config, transport=httpx.MockTransport(upstream))


@pytest.fixture
def registry(clock):
    return SessionRegistry(enabled=True, ttl_seconds=600, clock=clock)


@pytest.fixture
def app(carstat, registry):
    from app import create_app

    application = create_app()
    application.dependency_overrides[get_carstat_client] = lambda: carstat
    application.dependency_overrides[carstat_client_factory] = lambda: lambda: carstat
    def _session_cache(request: Request):
        return registry.cache_for(request.state.session_id)

    application.dependency_overrides[session_cache] = _session_cache
    return application


@pytest.fixture
def client(app):
    return TestClient(app)
