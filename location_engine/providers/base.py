# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Provider capability interface and shared HTTP transport.

Public methods (search / reverse_geocode / nearby) never raise: subclasses
implement the underscored variants, which may raise ProviderError, and the
base class turns every failure into an empty result plus a diagnostics
report.
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional, Sequence

import aiohttp

from ..diagnostics import DiagnosticsChannel, LoggingDiagnostics
from ..exceptions import (
    ProviderError,
    ProviderParseError,
    ProviderTransportError,
    ProviderUnavailable,
)
from ..models import Category, Coordinate, LocationCandidate, Source

DEFAULT_TIMEOUT_SECONDS = 6.0


class LocationProvider:
    """Base adapter. Capability flags tell the resolver what to call."""

    name: str = "provider"
    source: Source = Source.BUILTIN
    supports_search: bool = True
    supports_reverse: bool = False
    supports_nearby: bool = False

    def __init__(self, diagnostics: Optional[DiagnosticsChannel] = None):
        self.diagnostics = diagnostics or LoggingDiagnostics()
        self.logger = logging.getLogger(f"{__name__}.{self.name}")

    def is_configured(self) -> bool:
        """True when the credential this provider needs (if any) is present."""
        return True

    # ------------------------------------------------------------------
    # Public, never-failing entry points
    # ------------------------------------------------------------------

    async def search(self, text: str, origin_hint: Optional[Coordinate] = None) -> List[LocationCandidate]:
        try:
            return await self._search(text, origin_hint)
        except ProviderError as e:
            self.diagnostics.report(self.name, "search", e)
        except Exception as e:
            self.logger.error(f"❌ {self.name} search error: {e}", exc_info=True)
            self.diagnostics.report(self.name, "search", ProviderTransportError(self.name, str(e)))
        return []

    async def reverse_geocode(self, coordinate: Coordinate) -> Optional[LocationCandidate]:
        """Returns None (NotFound) on any failure."""
        try:
            return await self._reverse_geocode(coordinate)
        except ProviderError as e:
            self.diagnostics.report(self.name, "reverse_geocode", e)
        except Exception as e:
            self.logger.error(f"❌ {self.name} reverse geocode error: {e}", exc_info=True)
            self.diagnostics.report(self.name, "reverse_geocode", ProviderTransportError(self.name, str(e)))
        return None

    async def nearby(
        self,
        coordinate: Coordinate,
        categories: Sequence[Category],
    ) -> List[LocationCandidate]:
        try:
            return await self._nearby(coordinate, categories)
        except ProviderError as e:
            self.diagnostics.report(self.name, "nearby", e)
        except Exception as e:
            self.logger.error(f"❌ {self.name} nearby error: {e}", exc_info=True)
            self.diagnostics.report(self.name, "nearby", ProviderTransportError(self.name, str(e)))
        return []

    # ------------------------------------------------------------------
    # Subclass hooks
    # ------------------------------------------------------------------

    async def _search(self, text: str, origin_hint: Optional[Coordinate]) -> List[LocationCandidate]:
        raise ProviderUnavailable(self.name, "search not supported")

    async def _reverse_geocode(self, coordinate: Coordinate) -> Optional[LocationCandidate]:
        raise ProviderUnavailable(self.name, "reverse geocoding not supported")

    async def _nearby(self, coordinate: Coordinate, categories: Sequence[Category]) -> List[LocationCandidate]:
        raise ProviderUnavailable(self.name, "nearby search not supported")


class HttpLocationProvider(LocationProvider):
    """Adapter backed by an HTTP GET/JSON API."""

    def __init__(
        self,
        diagnostics: Optional[DiagnosticsChannel] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        super().__init__(diagnostics)
        self.timeout_seconds = timeout_seconds

    def _headers(self) -> Dict[str, str]:
        return {}

    async def _get_json(self, url: str, params: Dict[str, str]) -> Any:
        """
        GET a URL and decode its JSON body.

        Raises ProviderTransportError for network errors, timeouts and
        non-200 responses, ProviderParseError for undecodable bodies.
        Params must already be strings (aiohttp/yarl rejects bools and floats).
        """
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        start = time.time()
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url, params=params, headers=self._headers()) as response:
                    if response.status != 200:
                        response_text = await response.text()
                        raise ProviderTransportError(
                            self.name, f"HTTP {response.status}: {response_text[:200]}"
                        )
                    try:
                        data = await response.json(content_type=None)
                    except ValueError as e:
                        raise ProviderParseError(self.name, f"invalid JSON: {e}")
        except asyncio.TimeoutError:
            raise ProviderTransportError(self.name, f"timed out after {self.timeout_seconds}s")
        except aiohttp.ClientError as e:
            raise ProviderTransportError(self.name, f"{type(e).__name__}: {e}")

        latency = (time.time() - start) * 1000
        self.logger.debug(f"[{self.name.upper()}] GET {url} ({latency:.0f}ms)")
        return data


def require_list(provider: str, value: Any, what: str) -> list:
    """Validate that a payload field is a list, else raise ProviderParseError."""
    if value is None:
        return []
    if not isinstance(value, list):
        raise ProviderParseError(provider, f"expected list for {what}, got {type(value).__name__}")
    return value


def require_dict(provider: str, value: Any, what: str = "response") -> dict:
    if not isinstance(value, dict):
        raise ProviderParseError(provider, f"expected object for {what}, got {type(value).__name__}")
    return value


def parse_items(provider: LocationProvider, operation: str, items: list, parse_one) -> List[LocationCandidate]:
    """
    Parse each raw item, skipping malformed ones.

    Skipped items are reported once per call as a ProviderParseError.
    """
    candidates: List[LocationCandidate] = []
    skipped = 0
    for item in items:
        try:
            candidates.append(parse_one(item))
        except (KeyError, TypeError, ValueError, IndexError, AttributeError) as e:
            skipped += 1
            provider.logger.debug(f"[{provider.name.upper()}] skipping malformed item: {e}")
    if skipped:
        provider.diagnostics.report(
            provider.name,
            operation,
            ProviderParseError(provider.name, f"skipped {skipped} malformed result(s)"),
        )
    return candidates
