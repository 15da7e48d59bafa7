# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Mapbox geocoding adapter (commercial geocoder, forward search only)."""

from typing import Any, Dict, List, Optional
from urllib.parse import quote

from ..credentials import CredentialsCache
from ..exceptions import ProviderUnavailable
from ..models import Category, Coordinate, LocationCandidate, Source
from .base import HttpLocationProvider, parse_items, require_dict, require_list

MAPBOX_BASE_URL = "https://api.mapbox.com/geocoding/v5/mapbox.places"
MAX_RESULTS = 20
FEATURE_TYPES = "poi,address,place"


def mapbox_place_category(place_types: Optional[List[str]]) -> Category:
    if not place_types:
        return Category.PLACE
    if "poi" in place_types:
        return Category.LANDMARK
    if "place" in place_types:
        return Category.CITY
    return Category.PLACE


def mapbox_country_tag(feature: Dict[str, Any]) -> Optional[str]:
    """Country code from the feature's context (or the feature itself)."""
    entries = list(feature.get("context") or [])
    entries.append(feature)
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        if str(entry.get("id", "")).startswith("country"):
            code = (entry.get("short_code") or (entry.get("properties") or {}).get("short_code"))
            if code:
                return code.upper()
    return None


class MapboxGeocoderProvider(HttpLocationProvider):
    """Forward geocoding, proximity-biased when an origin hint is given."""

    name = "mapbox"
    source = Source.COMMERCIAL_GEOCODER

    def __init__(self, credentials: CredentialsCache, diagnostics=None, timeout_seconds: float = 6.0):
        super().__init__(diagnostics, timeout_seconds)
        self.credentials = credentials

    @property
    def access_token(self) -> Optional[str]:
        return self.credentials.current().commercial_geocoder_token

    def is_configured(self) -> bool:
        return bool(self.access_token)

    async def _search(self, text: str, origin_hint: Optional[Coordinate]) -> List[LocationCandidate]:
        token = self.access_token
        if not token:
            raise ProviderUnavailable(self.name, "no commercial geocoder token configured")

        url = f"{MAPBOX_BASE_URL}/{quote(text.strip(), safe='')}.json"
        params = {
            "access_token": token,
            "limit": str(MAX_RESULTS),
            "types": FEATURE_TYPES,
        }
        if origin_hint is not None:
            params["proximity"] = f"{origin_hint.longitude},{origin_hint.latitude}"

        self.logger.info(f"[MAPBOX] Querying: '{text.strip()}'")
        data = require_dict(self.name, await self._get_json(url, params))
        features = require_list(self.name, data.get("features"), "features")
        self.logger.info(f"[MAPBOX] Found {len(features)} features")
        return parse_items(self, "search", features, self._to_candidate)

    def _to_candidate(self, feature: Dict[str, Any]) -> LocationCandidate:
        lon, lat = feature["center"][0], feature["center"][1]
        return LocationCandidate(
            id=str(feature["id"]),
            name=feature["text"],
            address=feature.get("place_name") or feature["text"],
            coordinate=Coordinate(float(lat), float(lon)),
            source=self.source,
            category=mapbox_place_category(feature.get("place_type")),
            country_tag=mapbox_country_tag(feature),
        )
