import threading

import pytest
import requests

from clubboard.cache import FlightCache
from clubboard.ingestion import FlightScope, ScopeKind
from clubboard.models import FlightRecord


def flight_payload(flight_id, distance=None, year="2024", pilot="A", aircraft=None):
    payload = {
        "id": flight_id,
        "scoring_date": f"{year}-06-15",
        "user": {"id": pilot, "name": f"Pilot {pilot}"},
        "contest": {"distance": distance} if distance is not None else None,
        "aircraft": {"name": aircraft} if aircraft is not None else None,
    }
    return payload


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    """Serves `total` flights in pages; can fail from a given page on."""

    def __init__(self, total, fail_from_page=None, failure=None):
        self.total = total
        self.fail_from_page = fail_from_page
        self.failure = failure
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": dict(params), "timeout": timeout})
        page_index = len(self.calls) - 1
        if self.fail_from_page is not None and page_index >= self.fail_from_page:
            if isinstance(self.failure, FakeResponse):
                return self.failure
            raise self.failure
        skip, limit = params["skip"], params["limit"]
        end = min(skip + limit, self.total)
        return FakeResponse([flight_payload(i, distance=float(i)) for i in range(skip, end)])


class FakeClient:
    """Stands in for WeGlideClient.fetch_all with canned datasets."""

    def __init__(self, club=(), airport=(), failures=None):
        self.club = list(club)
        self.airport = list(airport)
        self.failures = failures or {}
        self.calls = []
        self.stats = {"pages_fetched": 0, "page_errors": 0, "last_error": None}

    def fetch_all(self, scope):
        self.calls.append(scope)
        if scope.kind in self.failures:
            raise self.failures[scope.kind]
        if scope.kind == ScopeKind.CLUB:
            return list(self.club)
        return list(self.airport)


class BlockingClient(FakeClient):
    """FakeClient whose fetches wait until the test releases them."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.started = threading.Event()
        self.release = threading.Event()

    def fetch_all(self, scope):
        self.started.set()
        self.release.wait(timeout=5)
        return super().fetch_all(scope)


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def make_flight():
    def _make(flight_id, distance=None, year="2024", pilot="A", aircraft=None):
        return FlightRecord.from_dict(flight_payload(flight_id, distance, year, pilot, aircraft))
    return _make


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_cache(clock):
    def _make(client, ttl_seconds=3600):
        return FlightCache(
            client=client,
            club_scope=FlightScope.club("526"),
            airport_scope=FlightScope.airport("154611"),
            ttl_seconds=ttl_seconds,
            clock=clock,
        )
    return _make
