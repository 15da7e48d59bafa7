# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Multi-Source Location Resolver
------------------------------
Orchestrates the provider adapters for the three caller-facing operations:

- resolve(text, origin_hint): concurrent fan-out to every usable provider,
  then merge, deduplicate by exact (name, address), rank and truncate.
- reverse_geocode(coordinate): sequential fallback chain that degrades to
  the raw coordinate, never failing the caller.
- nearby(coordinate, categories): commercial radius search, falling back to
  synthetic placeholders so the result is never empty.

Ranking (stable sort):
1. candidates tagged with the home region first
2. source priority: builtin < commercial_places < commercial_geocoder < community_geocoder
3. original relative order
"""

import asyncio
import logging
import time
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .config import settings
from .credentials import CredentialsCache, CredentialStore
from .diagnostics import DiagnosticsChannel, LoggingDiagnostics, ResolverMetrics
from .exceptions import ProviderTransportError
from .models import Category, Coordinate, LocationCandidate, ResolvedSet, Source
from .providers.base import LocationProvider
from .providers.builtin import BuiltinGazetteer, synthetic_nearby_places
from .providers.google_places import GooglePlacesProvider
from .providers.mapbox import MapboxGeocoderProvider
from .providers.nominatim import NominatimProvider

DEFAULT_NEARBY_CATEGORIES = (
    Category.RESTAURANT,
    Category.GAS_STATION,
    Category.MEDICAL,
    Category.BANK,
)


def dedupe_candidates(candidates: Iterable[LocationCandidate]) -> List[LocationCandidate]:
    """Drop later candidates whose exact (name, address) was already seen."""
    seen = set()
    unique = []
    for candidate in candidates:
        if candidate.identity in seen:
            continue
        seen.add(candidate.identity)
        unique.append(candidate)
    return unique


def rank_candidates(
    candidates: Sequence[LocationCandidate],
    home_region: Optional[str] = None,
) -> List[LocationCandidate]:
    """Home region first, then source priority; sorted() keeps ties in input order."""
    home = home_region.upper() if home_region else None

    def sort_key(candidate: LocationCandidate):
        in_home = bool(home) and (candidate.country_tag or "").upper() == home
        return (0 if in_home else 1, candidate.source.priority)

    return sorted(candidates, key=sort_key)


def coordinate_candidate(coordinate: Coordinate) -> LocationCandidate:
    """Placeholder used when no provider can name a coordinate."""
    label = coordinate.format(4)
    return LocationCandidate(
        id=f"coordinate_{coordinate.latitude:.4f}_{coordinate.longitude:.4f}",
        name=label,
        address=label,
        coordinate=coordinate,
        source=Source.BUILTIN,
        category=Category.CUSTOM,
        synthetic=True,
    )


class LocationResolver:
    """
    🌍 MULTI-SOURCE LOCATION RESOLVER

    Holds no state between calls beyond its credential handle, the provider
    adapters and telemetry, so concurrent calls need no coordination.
    """

    def __init__(
        self,
        credential_store: CredentialStore,
        home_region: Optional[str] = None,
        max_results: Optional[int] = None,
        min_query_length: Optional[int] = None,
        branch_timeout_seconds: Optional[float] = None,
        diagnostics: Optional[DiagnosticsChannel] = None,
        builtin: Optional[LocationProvider] = None,
        commercial_places: Optional[LocationProvider] = None,
        commercial_geocoder: Optional[LocationProvider] = None,
        community_geocoder: Optional[LocationProvider] = None,
    ):
        self.logger = logging.getLogger(__name__)
        self.credentials = CredentialsCache(credential_store)
        self.diagnostics = diagnostics or LoggingDiagnostics()
        self.metrics = ResolverMetrics()

        self.home_region = (home_region if home_region is not None else settings.home_region) or None
        self.max_results = max_results if max_results is not None else settings.max_results
        self.min_query_length = min_query_length if min_query_length is not None else settings.min_query_length
        self.branch_timeout = (
            branch_timeout_seconds if branch_timeout_seconds is not None else settings.provider_timeout_seconds
        )

        self.builtin = builtin or BuiltinGazetteer(diagnostics=self.diagnostics)
        self.commercial_places = commercial_places or GooglePlacesProvider(
            self.credentials, diagnostics=self.diagnostics, timeout_seconds=self.branch_timeout
        )
        self.commercial_geocoder = commercial_geocoder or MapboxGeocoderProvider(
            self.credentials, diagnostics=self.diagnostics, timeout_seconds=self.branch_timeout
        )
        self.community_geocoder = community_geocoder or NominatimProvider(
            user_agent=settings.nominatim_user_agent,
            referer=settings.nominatim_referer,
            diagnostics=self.diagnostics,
            timeout_seconds=self.branch_timeout,
        )

        # Fan-out order doubles as dedup precedence: earlier branch wins
        self.search_providers: List[LocationProvider] = [
            self.builtin,
            self.commercial_places,
            self.commercial_geocoder,
            self.community_geocoder,
        ]
        self.reverse_chain: List[LocationProvider] = [
            self.commercial_places,
            self.community_geocoder,
        ]

        self.logger.info(
            f"✅ Location Resolver initialized (home region: {self.home_region or 'none'}, "
            f"max results: {self.max_results}, branch timeout: {self.branch_timeout}s)"
        )

    # ================================================================================
    # FORWARD SEARCH
    # ================================================================================

    async def resolve(self, text: str, origin_hint: Optional[Coordinate] = None) -> ResolvedSet:
        query = (text or "").strip()
        if len(query) < self.min_query_length:
            self.metrics.record_query(short_circuited=True)
            return ResolvedSet(query=query)

        self.metrics.record_query()
        providers = [p for p in self.search_providers if p.supports_search and p.is_configured()]
        self.logger.info(
            f"🔄 Resolving '{query}' across {len(providers)} providers: "
            f"{', '.join(p.name for p in providers)}"
        )

        start = time.time()
        results = await asyncio.gather(
            *[self._search_branch(p, query, origin_hint) for p in providers],
            return_exceptions=True,
        )

        merged: List[LocationCandidate] = []
        for provider, result in zip(providers, results):
            if isinstance(result, BaseException):
                self.metrics.record_failure(provider.name)
                self.diagnostics.report(provider.name, "search", result)
                continue
            merged.extend(result)

        unique = dedupe_candidates(merged)
        ranked = rank_candidates(unique, self.home_region)[: self.max_results]

        latency = (time.time() - start) * 1000
        self.logger.info(
            f"📍 '{query}': {len(merged)} raw, {len(unique)} unique, returning {len(ranked)} ({latency:.0f}ms)"
        )
        return ResolvedSet(candidates=tuple(ranked), query=query)

    async def _search_branch(
        self,
        provider: LocationProvider,
        query: str,
        origin_hint: Optional[Coordinate],
    ) -> List[LocationCandidate]:
        """One provider's share of the fan-out; a timeout contributes nothing."""
        start = time.time()
        try:
            candidates = await asyncio.wait_for(provider.search(query, origin_hint), timeout=self.branch_timeout)
        except asyncio.TimeoutError:
            self.metrics.record_failure(provider.name)
            self.diagnostics.report(
                provider.name,
                "search",
                ProviderTransportError(provider.name, f"branch timed out after {self.branch_timeout}s"),
            )
            return []

        self.metrics.record_success(provider.name, (time.time() - start) * 1000)
        return list(candidates)

    # ================================================================================
    # REVERSE GEOCODING
    # ================================================================================

    async def reverse_geocode(self, coordinate: Coordinate) -> LocationCandidate:
        """Name a coordinate; falls back to the coordinate itself, never raises."""
        self.metrics.reverse_lookups += 1

        for provider in self.reverse_chain:
            if not (provider.supports_reverse and provider.is_configured()):
                continue
            try:
                result = await asyncio.wait_for(provider.reverse_geocode(coordinate), timeout=self.branch_timeout)
            except asyncio.TimeoutError:
                self.metrics.record_failure(provider.name)
                self.diagnostics.report(
                    provider.name,
                    "reverse_geocode",
                    ProviderTransportError(provider.name, f"timed out after {self.branch_timeout}s"),
                )
                continue

            if result is not None:
                self.logger.info(f"📍 Reverse geocoded {coordinate.format()} via {provider.name}")
                return result

        self.metrics.reverse_fallbacks += 1
        self.logger.warning(f"⚠️ No provider could reverse geocode {coordinate.format()}, using raw coordinates")
        return coordinate_candidate(coordinate)

    # ================================================================================
    # NEARBY PLACES
    # ================================================================================

    async def nearby(
        self,
        coordinate: Coordinate,
        category_filter: Optional[Sequence[Category]] = None,
    ) -> ResolvedSet:
        self.metrics.nearby_lookups += 1
        categories = tuple(category_filter) if category_filter else DEFAULT_NEARBY_CATEGORIES

        places: List[LocationCandidate] = []
        provider = self.commercial_places
        if provider.supports_nearby and provider.is_configured():
            try:
                places = await asyncio.wait_for(provider.nearby(coordinate, categories), timeout=self.branch_timeout)
            except asyncio.TimeoutError:
                self.metrics.record_failure(provider.name)
                self.diagnostics.report(
                    provider.name,
                    "nearby",
                    ProviderTransportError(provider.name, f"timed out after {self.branch_timeout}s"),
                )
                places = []

        if not places:
            self.metrics.synthetic_nearby += 1
            self.logger.info(f"🧭 No nearby results for {coordinate.format()}, using generic places")
            places = synthetic_nearby_places(coordinate, category_filter)

        return ResolvedSet(candidates=tuple(places[: self.max_results]))

    # ================================================================================
    # HEALTH CHECK & METRICS
    # ================================================================================

    def check_health(self) -> Dict[str, Any]:
        recent = []
        if hasattr(self.diagnostics, "recent_events"):
            recent = self.diagnostics.recent_events(limit=20)
        return {
            'services': {
                p.name: {'source': p.source.value, 'configured': p.is_configured()}
                for p in self.search_providers
            },
            'home_region': self.home_region,
            'metrics': self.metrics.get_summary(),
            'recent_errors': recent,
            'timestamp': time.time(),
        }

    def get_metrics(self) -> Dict[str, Any]:
        return self.metrics.get_summary()

    def close(self) -> None:
        self.credentials.close()
