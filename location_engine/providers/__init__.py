# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Location provider adapters.
"""

from .base import HttpLocationProvider, LocationProvider
from .builtin import BuiltinGazetteer, synthetic_nearby_places
from .google_places import GooglePlacesProvider
from .mapbox import MapboxGeocoderProvider
from .nominatim import NominatimProvider

__all__ = [
    "LocationProvider",
    "HttpLocationProvider",
    "BuiltinGazetteer",
    "GooglePlacesProvider",
    "MapboxGeocoderProvider",
    "NominatimProvider",
    "synthetic_nearby_places",
]
