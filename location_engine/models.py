# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Value objects exchanged between the providers, the resolver and its callers.

Every provider result is normalized into a LocationCandidate. All types here
are frozen; nothing is mutated after construction.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple


class Category(str, Enum):
    """Closed set of place categories. Unknown provider types map to PLACE."""
    CITY = "city"
    AIRPORT = "airport"
    TRANSIT = "transit"
    MEDICAL = "medical"
    RESTAURANT = "restaurant"
    GAS_STATION = "gas_station"
    BANK = "bank"
    EDUCATION = "education"
    LANDMARK = "landmark"
    SHOPPING = "shopping"
    CUSTOM = "custom"
    PLACE = "place"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Category":
        if not value:
            return cls.PLACE
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.PLACE


class Source(str, Enum):
    """Provider a candidate came from, declared in tie-break priority order."""
    BUILTIN = "builtin"
    COMMERCIAL_PLACES = "commercial_places"
    COMMERCIAL_GEOCODER = "commercial_geocoder"
    COMMUNITY_GEOCODER = "community_geocoder"

    @property
    def priority(self) -> int:
        return SOURCE_PRIORITY[self]


SOURCE_PRIORITY = {source: index for index, source in enumerate(Source)}


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float

    def __post_init__(self):
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude out of range [-90, 90]: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"longitude out of range [-180, 180]: {self.longitude}")

    def format(self, decimals: int = 4) -> str:
        """Render as 'lat, lon' with a fixed number of decimals."""
        return f"{self.latitude:.{decimals}f}, {self.longitude:.{decimals}f}"


@dataclass(frozen=True)
class LocationCandidate:
    """One normalized place result from any provider."""
    id: str
    name: str
    address: str
    coordinate: Coordinate
    source: Source
    category: Category = Category.PLACE
    country_tag: Optional[str] = None
    rating: Optional[float] = None
    is_open: Optional[bool] = None
    price_level: Optional[int] = None
    synthetic: bool = False

    @property
    def identity(self) -> Tuple[str, str]:
        """Duplicate key: exact, case-sensitive (name, address)."""
        return (self.name, self.address)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["source"] = self.source.value
        data["category"] = self.category.value
        return data


@dataclass(frozen=True)
class ProviderCredentials:
    commercial_places_key: Optional[str] = None
    commercial_geocoder_token: Optional[str] = None


@dataclass(frozen=True)
class SearchQuery:
    text: str
    generation: int
    origin_hint: Optional[Coordinate] = None


@dataclass(frozen=True)
class ResolvedSet:
    """Terminal output of one resolution round."""
    candidates: Tuple[LocationCandidate, ...] = field(default_factory=tuple)
    query: str = ""
    generation: Optional[int] = None

    def __len__(self) -> int:
        return len(self.candidates)

    def __iter__(self) -> Iterator[LocationCandidate]:
        return iter(self.candidates)

    def __getitem__(self, index):
        return self.candidates[index]
