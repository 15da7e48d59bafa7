# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Built-in gazetteer and synthetic nearby-places generator.

Both are in-memory and always available: the gazetteer is the zero-latency
baseline for forward search, the generator keeps the nearby panel from ever
being empty when no real provider answers.
"""

import random
import re
from typing import List, Optional, Sequence, Tuple

from ..models import Category, Coordinate, LocationCandidate, Source
from .base import LocationProvider

# (name, address, lat, lon, country, category)
WORLDWIDE_PLACES: Tuple[Tuple[str, str, float, float, str, Category], ...] = (
    # Pakistan
    ("Karachi", "Karachi, Sindh, Pakistan", 24.8607, 67.0011, "PK", Category.CITY),
    ("Lahore", "Lahore, Punjab, Pakistan", 31.5204, 74.3587, "PK", Category.CITY),
    ("Islamabad", "Islamabad, Pakistan", 33.6844, 73.0479, "PK", Category.CITY),
    ("Karachi Airport", "Jinnah International Airport, Karachi", 24.9056, 67.1608, "PK", Category.AIRPORT),
    ("Lahore Airport", "Allama Iqbal International Airport, Lahore", 31.5217, 74.4036, "PK", Category.AIRPORT),
    ("Islamabad Airport", "Islamabad International Airport, Islamabad", 33.5491, 72.8254, "PK", Category.AIRPORT),
    ("Karachi Cantonment Station", "Saddar, Karachi, Pakistan", 24.8469, 67.0364, "PK", Category.TRANSIT),
    ("Badshahi Mosque", "Walled City, Lahore, Pakistan", 31.5881, 74.3142, "PK", Category.LANDMARK),
    ("Faisal Mosque", "Islamabad, Pakistan", 33.7294, 73.0367, "PK", Category.LANDMARK),

    # India
    ("Mumbai", "Mumbai, Maharashtra, India", 19.076, 72.8777, "IN", Category.CITY),
    ("Delhi", "New Delhi, India", 28.6139, 77.209, "IN", Category.CITY),
    ("Bangalore", "Bengaluru, Karnataka, India", 12.9716, 77.5946, "IN", Category.CITY),
    ("Taj Mahal", "Agra, Uttar Pradesh, India", 27.1751, 78.0421, "IN", Category.LANDMARK),

    # UAE
    ("Dubai", "Dubai, United Arab Emirates", 25.2048, 55.2708, "AE", Category.CITY),
    ("Abu Dhabi", "Abu Dhabi, United Arab Emirates", 24.4539, 54.3773, "AE", Category.CITY),
    ("Burj Khalifa", "Dubai, UAE", 25.1972, 55.2744, "AE", Category.LANDMARK),

    # Saudi Arabia
    ("Riyadh", "Riyadh, Saudi Arabia", 24.7136, 46.6753, "SA", Category.CITY),
    ("Jeddah", "Jeddah, Saudi Arabia", 21.4858, 39.1925, "SA", Category.CITY),
    ("Mecca", "Makkah, Saudi Arabia", 21.3891, 39.8579, "SA", Category.LANDMARK),

    # USA
    ("New York", "New York, NY, USA", 40.7128, -74.006, "US", Category.CITY),
    ("Los Angeles", "Los Angeles, CA, USA", 34.0522, -118.2437, "US", Category.CITY),
    ("Times Square", "Times Square, New York, NY", 40.758, -73.9855, "US", Category.LANDMARK),

    # UK
    ("London", "London, United Kingdom", 51.5074, -0.1278, "GB", Category.CITY),
    ("Manchester", "Manchester, United Kingdom", 53.4808, -2.2426, "GB", Category.CITY),
    ("Big Ben", "Westminster, London, UK", 51.4994, -0.1245, "GB", Category.LANDMARK),

    # Other major cities
    ("Tokyo", "Tokyo, Japan", 35.6762, 139.6503, "JP", Category.CITY),
    ("Paris", "Paris, France", 48.8566, 2.3522, "FR", Category.CITY),
    ("Sydney", "Sydney, Australia", -33.8688, 151.2093, "AU", Category.CITY),
    ("Singapore", "Singapore", 1.3521, 103.8198, "SG", Category.CITY),
    ("Hong Kong", "Hong Kong", 22.3193, 114.1694, "HK", Category.CITY),
)

# (name, category, distance label)
GENERIC_NEARBY_PLACES: Tuple[Tuple[str, Category, str], ...] = (
    ("Hospital", Category.MEDICAL, "2.5 km"),
    ("Gas Station", Category.GAS_STATION, "1.8 km"),
    ("ATM", Category.BANK, "0.5 km"),
    ("Restaurant", Category.RESTAURANT, "1.2 km"),
    ("Pharmacy", Category.MEDICAL, "0.8 km"),
    ("Shopping Center", Category.SHOPPING, "1.5 km"),
    ("School", Category.EDUCATION, "2.0 km"),
    ("Park", Category.LANDMARK, "1.0 km"),
)

# Max offset applied to synthetic places, per axis, in degrees
SYNTHETIC_JITTER_DEGREES = 0.005


def _slug(name: str) -> str:
    return re.sub(r"\s+", "_", name.strip()).lower()


class BuiltinGazetteer(LocationProvider):
    """Fixed table of worldwide cities and landmarks, searched by substring."""

    name = "builtin"
    source = Source.BUILTIN

    def __init__(self, places=WORLDWIDE_PLACES, diagnostics=None):
        super().__init__(diagnostics)
        self._candidates = tuple(
            LocationCandidate(
                id=f"builtin_{_slug(name)}",
                name=name,
                address=address,
                coordinate=Coordinate(lat, lon),
                source=Source.BUILTIN,
                category=category,
                country_tag=country,
            )
            for name, address, lat, lon, country, category in places
        )

    async def _search(self, text: str, origin_hint: Optional[Coordinate]) -> List[LocationCandidate]:
        needle = text.strip().lower()
        if not needle:
            return []
        return [
            c for c in self._candidates
            if needle in c.name.lower() or needle in c.address.lower()
        ]


def synthetic_nearby_places(
    coordinate: Coordinate,
    categories: Optional[Sequence[Category]] = None,
) -> List[LocationCandidate]:
    """
    Generic placeholders scattered around a coordinate.

    Jitter is seeded by the coordinate, so the same point always yields the
    same placeholders. They carry no positional truth and are flagged
    synthetic.
    """
    catalogue = list(enumerate(GENERIC_NEARBY_PLACES))
    if categories:
        wanted = set(categories)
        narrowed = [(i, p) for i, p in catalogue if p[1] in wanted]
        if narrowed:
            catalogue = narrowed

    rng = random.Random(f"{coordinate.latitude:.4f},{coordinate.longitude:.4f}")
    offsets = [
        (rng.uniform(-SYNTHETIC_JITTER_DEGREES, SYNTHETIC_JITTER_DEGREES),
         rng.uniform(-SYNTHETIC_JITTER_DEGREES, SYNTHETIC_JITTER_DEGREES))
        for _ in GENERIC_NEARBY_PLACES
    ]

    places = []
    for index, (name, category, distance) in catalogue:
        d_lat, d_lon = offsets[index]
        places.append(LocationCandidate(
            id=f"nearby_{index}",
            name=name,
            address=f"{distance} from your location",
            coordinate=Coordinate(
                max(-90.0, min(90.0, coordinate.latitude + d_lat)),
                max(-180.0, min(180.0, coordinate.longitude + d_lon)),
            ),
            source=Source.BUILTIN,
            category=category,
            synthetic=True,
        ))
    return places
