import copy
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from property_service.adapters.attom.client import AttomClient
from property_service.api.dependencies import get_cache_service, get_property_provider
from property_service.core.config import Settings, get_settings
from property_service.infrastructure.cache import MemoryCache
from property_service.main import create_application

BASE_URL = "https://attom.test/propertyapi/v1.0.0"

ATTOM_ID = "184713191"

IDENTIFIER_RESPONSE = {
    "status": {"code": 0, "msg": "SuccessWithResult"},
    "property": [
        {"identifier": {"attomId": 184713191, "fips": "48113"}, "buildingPermits": []}
    ],
}

DETAIL_RECORD = {
    "identifier": {"attomId": 184713191},
    "address": {
        "line1": "2901 INDIANA ST",
        "line2": "DALLAS, TX 75226",
        "oneLine": "2901 INDIANA ST, DALLAS, TX 75226",
    },
    "owner": {"owner1": {"fullname": "JANE Q HOMEOWNER"}},
    "building": {
        "size": {"universalsize": 1850, "livingsize": 1700},
        "rooms": {"beds": 3, "bathstotal": 2.5, "bathsfull": 2},
    },
    "lot": {"lotsize1": 0.1722},
    "summary": {
        "yearbuilt": 1925,
        "propclass": "Single Family Residence / Townhouse",
        "absenteeInd": "OWNER OCCUPIED",
    },
}

DETAIL_RESPONSE = {"status": {"code": 0, "msg": "SuccessWithResult"}, "property": [DETAIL_RECORD]}


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubAttom:
    """MockTransport handler that serves canned ATTOM responses and records every request."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.identifier_response: Callable[[httpx.Request], httpx.Response] = (
            lambda request: httpx.Response(200, json=copy.deepcopy(IDENTIFIER_RESPONSE))
        )
        self.detail_response: Callable[[httpx.Request], httpx.Response] = (
            lambda request: httpx.Response(200, json=copy.deepcopy(DETAIL_RESPONSE))
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/property/buildingpermits"):
            return self.identifier_response(request)
        if request.url.path.endswith("/property/detailowner"):
            return self.detail_response(request)
        return httpx.Response(404, json={"status": {"msg": "Unknown endpoint"}})

    def paths(self) -> List[str]:
        return [request.url.path.rsplit("/", 1)[-1] for request in self.requests]

    def calls_to(self, endpoint: str) -> int:
        return self.paths().count(endpoint)


@pytest.fixture
def stub_attom() -> StubAttom:
    return StubAttom()


@pytest.fixture
def attom_client(stub_attom) -> AttomClient:
    # MockTransport holds no connections, so the client needs no closing
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(stub_attom))
    return AttomClient(api_key="test-key", base_url=BASE_URL, http_client=http_client)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_cache(fake_clock):
    cache = MemoryCache(default_ttl=3600, cleanup_interval=0, clock=fake_clock)
    yield cache
    cache.close()


@pytest.fixture
def settings_env(monkeypatch):
    """Set environment variables and reset the cached settings around the test."""
    def apply(**values: str) -> None:
        for key, value in values.items():
            monkeypatch.setenv(key, value)
        get_settings.cache_clear()

    yield apply
    get_settings.cache_clear()


@pytest.fixture
def make_app(attom_client, memory_cache):
    """Build an application wired to the stub provider and the test cache."""
    def build(settings: Optional[Settings] = None):
        application = create_application(settings)
        application.dependency_overrides[get_property_provider] = lambda: attom_client
        application.dependency_overrides[get_cache_service] = lambda: memory_cache
        return application

    return build


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def detail_with(**overrides: Any) -> Dict[str, Any]:
    """A copy of DETAIL_RECORD with top-level blocks replaced (None removes the block)."""
    record = copy.deepcopy(DETAIL_RECORD)
    for key, value in overrides.items():
        if value is None:
            record.pop(key, None)
        else:
            record[key] = value
    return record
