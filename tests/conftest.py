"""
Test Configuration and Fixtures

Shared configuration and fixtures for the location engine test suite.
No test touches the network: HTTP providers are patched at _get_json and
the resolver is wired with in-memory fakes where it matters.
"""
import asyncio
from typing import List, Optional

import pytest

from location_engine.credentials import COMMERCIAL_GEOCODER, COMMERCIAL_PLACES, InMemoryCredentialStore
from location_engine.models import Category, Coordinate, LocationCandidate, Source
from location_engine.providers.base import LocationProvider

CREDENTIAL_ENV_VARS = ("GOOGLE_PLACES_API_KEY", "MAPBOX_ACCESS_TOKEN")


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Keep real keys from leaking into tests"""
    for key in CREDENTIAL_ENV_VARS:
        monkeypatch.delenv(key, raising=False)


class RecordingDiagnostics:
    """Diagnostics sink that just remembers what it was told."""

    def __init__(self):
        self.events = []

    def report(self, provider, operation, error):
        self.events.append((provider, operation, error))

    def errors_for(self, provider):
        return [e for p, _, e in self.events if p == provider]


class StaticProvider(LocationProvider):
    """Provider returning canned results, with call counting."""

    def __init__(
        self,
        name: str,
        source: Source,
        results: Optional[List[LocationCandidate]] = None,
        configured: bool = True,
        error: Optional[Exception] = None,
        delay: float = 0.0,
        reverse_result: Optional[LocationCandidate] = None,
        nearby_results: Optional[List[LocationCandidate]] = None,
        diagnostics=None,
    ):
        self.name = name
        self.source = source
        super().__init__(diagnostics or RecordingDiagnostics())
        self.results = results or []
        self.configured = configured
        self.error = error
        self.delay = delay
        self.reverse_result = reverse_result
        self.nearby_results = nearby_results or []
        self.supports_reverse = reverse_result is not None or error is not None
        self.supports_nearby = nearby_results is not None
        self.search_calls = 0
        self.reverse_calls = 0
        self.nearby_calls = []

    def is_configured(self) -> bool:
        return self.configured

    async def _pause(self):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error

    async def _search(self, text, origin_hint):
        self.search_calls += 1
        await self._pause()
        return list(self.results)

    async def _reverse_geocode(self, coordinate):
        self.reverse_calls += 1
        await self._pause()
        return self.reverse_result

    async def _nearby(self, coordinate, categories):
        self.nearby_calls.append(tuple(categories))
        await self._pause()
        return list(self.nearby_results)


def make_candidate(
    name: str,
    address: Optional[str] = None,
    source: Source = Source.BUILTIN,
    country_tag: Optional[str] = None,
    lat: float = 24.86,
    lon: float = 67.0,
    category: Category = Category.PLACE,
) -> LocationCandidate:
    return LocationCandidate(
        id=f"{source.value}_{name}".replace(" ", "_").lower(),
        name=name,
        address=address if address is not None else f"{name}, Somewhere",
        coordinate=Coordinate(lat, lon),
        source=source,
        category=category,
        country_tag=country_tag,
    )


@pytest.fixture
def candidate_factory():
    return make_candidate


@pytest.fixture
def provider_factory():
    return StaticProvider


@pytest.fixture
def diagnostics():
    return RecordingDiagnostics()


@pytest.fixture
def karachi():
    """City centre coordinate used across reverse/nearby tests"""
    return Coordinate(24.8607, 67.0011)


@pytest.fixture
def empty_store():
    return InMemoryCredentialStore()


@pytest.fixture
def full_store():
    return InMemoryCredentialStore({
        COMMERCIAL_PLACES: "test-places-key",
        COMMERCIAL_GEOCODER: "test-geocoder-token",
    })
