"""
Tests for the HTTP surface, with the resolver wired to in-memory providers.
"""

import pytest
from fastapi.testclient import TestClient

from location_engine.api import create_app
from location_engine.models import Category, Source
from location_engine.resolver import LocationResolver


@pytest.fixture
def resolver(full_store, provider_factory, candidate_factory, diagnostics):
    return LocationResolver(
        full_store,
        home_region="PK",
        branch_timeout_seconds=1.0,
        diagnostics=diagnostics,
        builtin=provider_factory(
            "builtin", Source.BUILTIN,
            [candidate_factory("Karachi", "Karachi, Sindh, Pakistan", country_tag="PK", category=Category.CITY)],
        ),
        commercial_places=provider_factory(
            "google_places", Source.COMMERCIAL_PLACES,
            [candidate_factory("Karachi Port", source=Source.COMMERCIAL_PLACES, country_tag="PK")],
            reverse_result=candidate_factory("Saddar", "Saddar, Karachi", Source.COMMERCIAL_PLACES),
            nearby_results=[
                candidate_factory("HBL Clifton", source=Source.COMMERCIAL_PLACES, category=Category.BANK),
            ],
        ),
        commercial_geocoder=provider_factory("mapbox", Source.COMMERCIAL_GEOCODER),
        community_geocoder=provider_factory("nominatim", Source.COMMUNITY_GEOCODER),
    )


@pytest.fixture
def client(resolver):
    return TestClient(create_app(resolver))


def test_search_returns_ranked_candidates(client):
    response = client.get("/api/locations/search", params={"q": " karachi ", "lat": 24.86, "lon": 67.0})

    assert response.status_code == 200
    body = response.json()
    assert body["query"] == "karachi"
    assert body["count"] == 2
    assert [r["name"] for r in body["results"]] == ["Karachi", "Karachi Port"]
    first = body["results"][0]
    assert first["source"] == "builtin"
    assert first["category"] == "city"
    assert first["coordinate"] == {"latitude": 24.86, "longitude": 67.0}


def test_short_search_is_empty(client, resolver):
    response = client.get("/api/locations/search", params={"q": "k"})

    assert response.status_code == 200
    assert response.json() == {"query": "k", "count": 0, "results": []}
    assert resolver.builtin.search_calls == 0


def test_reverse_geocode(client):
    response = client.get("/api/locations/reverse", params={"lat": 24.8607, "lon": 67.0011})

    assert response.status_code == 200
    assert response.json()["name"] == "Saddar"


def test_reverse_rejects_out_of_range_latitude(client):
    response = client.get("/api/locations/reverse", params={"lat": 95.0, "lon": 67.0})
    assert response.status_code == 400


def test_nearby_with_category(client, resolver):
    response = client.get(
        "/api/locations/nearby",
        params=[("lat", "24.8607"), ("lon", "67.0011"), ("category", "bank"), ("category", "Medical")],
    )

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 1
    assert body["results"][0]["name"] == "HBL Clifton"
    assert resolver.commercial_places.nearby_calls == [(Category.BANK, Category.MEDICAL)]


def test_nearby_unknown_category_is_rejected(client):
    response = client.get(
        "/api/locations/nearby",
        params={"lat": 24.8607, "lon": 67.0011, "category": "spaceport"},
    )
    assert response.status_code == 400


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["home_region"] == "PK"
    assert set(body["services"]) == {"builtin", "google_places", "mapbox", "nominatim"}
    assert body["services"]["google_places"]["configured"] is True
