# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
OpenStreetMap Nominatim adapter (community geocoder).

No credentials needed, so this is the guaranteed-available fallback for both
forward search and reverse geocoding. Nominatim's usage policy asks every
client to identify itself; requests carry the configured User-Agent.
"""

from typing import Any, Dict, List, Optional

from ..config import DEFAULT_USER_AGENT
from ..exceptions import NoResults
from ..models import Category, Coordinate, LocationCandidate, Source
from .base import HttpLocationProvider, parse_items, require_dict, require_list

NOMINATIM_BASE_URL = "https://nominatim.openstreetmap.org"
MAX_RESULTS = 20
VIEWBOX_HALF_SPAN_DEGREES = 2.0


def nominatim_place_category(place_type: Optional[str], place_class: Optional[str]) -> Category:
    if place_class == "amenity":
        if place_type in ("restaurant", "cafe", "fast_food"):
            return Category.RESTAURANT
        if place_type in ("hospital", "pharmacy"):
            return Category.MEDICAL
        if place_type == "fuel":
            return Category.GAS_STATION
        if place_type in ("bank", "atm"):
            return Category.BANK
        if place_type in ("school", "university"):
            return Category.EDUCATION

    if place_class == "tourism":
        return Category.LANDMARK
    if place_class == "shop":
        return Category.SHOPPING
    if place_class in ("railway", "public_transport"):
        return Category.TRANSIT
    if place_class == "aeroway":
        return Category.AIRPORT
    if place_class == "place":
        return Category.CITY

    return Category.PLACE


def _first_part(display_name: Optional[str]) -> Optional[str]:
    if not display_name:
        return None
    head = display_name.split(",")[0].strip()
    return head or None


class NominatimProvider(HttpLocationProvider):
    """Community geocoder: forward search and reverse geocoding."""

    name = "nominatim"
    source = Source.COMMUNITY_GEOCODER
    supports_reverse = True

    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        referer: Optional[str] = None,
        base_url: str = NOMINATIM_BASE_URL,
        diagnostics=None,
        timeout_seconds: float = 6.0,
    ):
        super().__init__(diagnostics, timeout_seconds)
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self.referer = referer
        self.base_url = base_url.rstrip("/")

    def _headers(self) -> Dict[str, str]:
        headers = {"User-Agent": self.user_agent}
        if self.referer:
            headers["Referer"] = self.referer
        return headers

    async def _search(self, text: str, origin_hint: Optional[Coordinate]) -> List[LocationCandidate]:
        params = {
            "q": text.strip(),
            "format": "json",
            "limit": str(MAX_RESULTS),
            "addressdetails": "1",
            "extratags": "1",
        }
        if origin_hint is not None:
            span = VIEWBOX_HALF_SPAN_DEGREES
            params["viewbox"] = (
                f"{origin_hint.longitude - span},{origin_hint.latitude + span},"
                f"{origin_hint.longitude + span},{origin_hint.latitude - span}"
            )
            params["bounded"] = "0"

        self.logger.info(f"[NOMINATIM] Searching: '{text.strip()}'")
        data = require_list(self.name, await self._get_json(f"{self.base_url}/search", params), "response")
        self.logger.info(f"[NOMINATIM] Found {len(data)} results")
        return parse_items(self, "search", data, self._to_candidate)

    async def _reverse_geocode(self, coordinate: Coordinate) -> Optional[LocationCandidate]:
        params = {
            "lat": str(coordinate.latitude),
            "lon": str(coordinate.longitude),
            "format": "json",
        }
        data = require_dict(self.name, await self._get_json(f"{self.base_url}/reverse", params))
        if data.get("error"):
            raise NoResults(self.name, f"{data['error']} at {coordinate.format()}")

        display_name = data.get("display_name")
        name = data.get("name") or _first_part(display_name) or "Selected Location"
        address = display_name or coordinate.format()
        country_code = (data.get("address") or {}).get("country_code")

        return LocationCandidate(
            id=str(data.get("place_id") or f"nominatim_reverse_{coordinate.format()}"),
            name=name,
            address=address,
            coordinate=coordinate,
            source=self.source,
            category=nominatim_place_category(data.get("type"), data.get("class")),
            country_tag=country_code.upper() if country_code else None,
        )

    def _to_candidate(self, place: Dict[str, Any]) -> LocationCandidate:
        display_name = place["display_name"]
        country_code = (place.get("address") or {}).get("country_code")
        return LocationCandidate(
            id=str(place["place_id"]),
            name=_first_part(display_name) or display_name,
            address=display_name,
            coordinate=Coordinate(float(place["lat"]), float(place["lon"])),
            source=self.source,
            category=nominatim_place_category(place.get("type"), place.get("class")),
            country_tag=country_code.upper() if country_code else None,
        )
