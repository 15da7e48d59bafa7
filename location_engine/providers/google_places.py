# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Google Places adapter (commercial places search).

Covers text search, radius search around a coordinate, and the Google
Geocoding reverse endpoint, all keyed by the commercial places credential.
"""

from typing import Any, Dict, List, Optional, Sequence

from ..credentials import CredentialsCache
from ..exceptions import NoResults, ProviderTransportError, ProviderUnavailable
from ..models import Category, Coordinate, LocationCandidate, Source
from .base import HttpLocationProvider, parse_items, require_dict, require_list

GOOGLE_PLACES_BASE_URL = "https://maps.googleapis.com/maps/api/place"
GOOGLE_GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"

TEXT_SEARCH_RADIUS_M = 50000
NEARBY_RADIUS_M = 10000
MAX_TEXT_RESULTS = 20
MAX_NEARBY_RESULTS = 10

# Category -> Google place type used in the nearby request mask
NEARBY_TYPE_FOR_CATEGORY = {
    Category.RESTAURANT: "restaurant",
    Category.GAS_STATION: "gas_station",
    Category.MEDICAL: "hospital",
    Category.BANK: "atm",
    Category.EDUCATION: "school",
    Category.SHOPPING: "shopping_mall",
    Category.LANDMARK: "tourist_attraction",
    Category.TRANSIT: "transit_station",
    Category.AIRPORT: "airport",
    Category.CITY: "locality",
}


def google_place_category(types: Optional[List[str]]) -> Category:
    """Map Google place types onto the closed category set."""
    if not types:
        return Category.PLACE

    types = set(types)
    if "airport" in types:
        return Category.AIRPORT
    if types & {"transit_station", "subway_station", "train_station"}:
        return Category.TRANSIT
    if types & {"hospital", "pharmacy"}:
        return Category.MEDICAL
    if types & {"restaurant", "food"}:
        return Category.RESTAURANT
    if "gas_station" in types:
        return Category.GAS_STATION
    if types & {"bank", "atm"}:
        return Category.BANK
    if types & {"school", "university"}:
        return Category.EDUCATION
    if types & {"tourist_attraction", "museum"}:
        return Category.LANDMARK
    if types & {"shopping_mall", "store"}:
        return Category.SHOPPING
    if types & {"locality", "administrative_area_level_1"}:
        return Category.CITY
    return Category.PLACE


class GooglePlacesProvider(HttpLocationProvider):
    """Commercial places search. Skipped entirely without an API key."""

    name = "google_places"
    source = Source.COMMERCIAL_PLACES
    supports_reverse = True
    supports_nearby = True

    def __init__(self, credentials: CredentialsCache, diagnostics=None, timeout_seconds: float = 6.0):
        super().__init__(diagnostics, timeout_seconds)
        self.credentials = credentials
        self.last_status: Optional[str] = None

    @property
    def api_key(self) -> Optional[str]:
        # Read at call time so a newly saved key applies without restart
        return self.credentials.current().commercial_places_key

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _require_key(self) -> str:
        key = self.api_key
        if not key:
            raise ProviderUnavailable(self.name, "no commercial places key configured")
        return key

    def _check_status(self, data: Dict[str, Any], what: str) -> None:
        """Raise for any status other than OK, remembering it for diagnostics."""
        status = data.get("status")
        self.last_status = status
        if status == "OK":
            return
        if status == "ZERO_RESULTS":
            raise NoResults(self.name, f"ZERO_RESULTS for {what}")
        message = data.get("error_message") or ""
        raise ProviderTransportError(self.name, f"status {status} for {what} {message}".strip())

    # ------------------------------------------------------------------

    async def _search(self, text: str, origin_hint: Optional[Coordinate]) -> List[LocationCandidate]:
        params = {"query": text.strip(), "key": self._require_key()}
        if origin_hint is not None:
            params["location"] = f"{origin_hint.latitude},{origin_hint.longitude}"
            params["radius"] = str(TEXT_SEARCH_RADIUS_M)

        self.logger.info(f"[GOOGLE PLACES] Text search: '{text.strip()}' (origin hint: {'yes' if origin_hint else 'no'})")
        data = require_dict(self.name, await self._get_json(f"{GOOGLE_PLACES_BASE_URL}/textsearch/json", params))
        self._check_status(data, f"'{text.strip()}'")

        results = require_list(self.name, data.get("results"), "results")[:MAX_TEXT_RESULTS]
        self.logger.info(f"[GOOGLE PLACES] Found {len(results)} results")
        return parse_items(self, "search", results, lambda place: self._to_candidate(place, "formatted_address"))

    async def _nearby(self, coordinate: Coordinate, categories: Sequence[Category]) -> List[LocationCandidate]:
        types = []
        for category in categories:
            place_type = NEARBY_TYPE_FOR_CATEGORY.get(category)
            if place_type and place_type not in types:
                types.append(place_type)

        params = {
            "location": f"{coordinate.latitude},{coordinate.longitude}",
            "radius": str(NEARBY_RADIUS_M),
            "key": self._require_key(),
        }
        if types:
            params["type"] = "|".join(types)

        self.logger.info(f"[GOOGLE PLACES] Nearby search at {coordinate.format()} types={params.get('type', '*')}")
        data = require_dict(self.name, await self._get_json(f"{GOOGLE_PLACES_BASE_URL}/nearbysearch/json", params))
        self._check_status(data, f"nearby {coordinate.format()}")

        results = require_list(self.name, data.get("results"), "results")[:MAX_NEARBY_RESULTS]
        return parse_items(self, "nearby", results, lambda place: self._to_candidate(place, "vicinity"))

    async def _reverse_geocode(self, coordinate: Coordinate) -> Optional[LocationCandidate]:
        params = {
            "latlng": f"{coordinate.latitude},{coordinate.longitude}",
            "key": self._require_key(),
        }
        data = require_dict(self.name, await self._get_json(GOOGLE_GEOCODE_URL, params))
        self._check_status(data, f"reverse {coordinate.format()}")

        results = require_list(self.name, data.get("results"), "results")
        if not results:
            raise NoResults(self.name, f"no address for {coordinate.format()}")

        result = require_dict(self.name, results[0], "result")
        components = result.get("address_components") or []
        name = (components[0].get("long_name") if components else None) or "Selected Location"
        address = result.get("formatted_address") or coordinate.format()

        return LocationCandidate(
            id=str(result.get("place_id") or f"google_reverse_{coordinate.format()}"),
            name=name,
            address=address,
            coordinate=coordinate,
            source=self.source,
            category=google_place_category(result.get("types")),
        )

    def _to_candidate(self, place: Dict[str, Any], address_field: str) -> LocationCandidate:
        location = place["geometry"]["location"]
        opening_hours = place.get("opening_hours")
        if not isinstance(opening_hours, dict):
            opening_hours = {}
        rating = place.get("rating")
        price_level = place.get("price_level")
        return LocationCandidate(
            id=str(place["place_id"]),
            name=place["name"],
            address=place.get(address_field) or place.get("vicinity") or place.get("formatted_address") or "",
            coordinate=Coordinate(float(location["lat"]), float(location["lng"])),
            source=self.source,
            category=google_place_category(place.get("types")),
            rating=float(rating) if rating is not None else None,
            is_open=opening_hours.get("open_now"),
            price_level=int(price_level) if price_level is not None else None,
        )
