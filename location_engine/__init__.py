# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Multi-source location resolution engine for ride booking.
"""

from .app_logging import setup_logging
from .config import settings
from .credentials import CredentialsCache, CredentialStore, EnvCredentialStore, InMemoryCredentialStore
from .models import (
    Category,
    Coordinate,
    LocationCandidate,
    ProviderCredentials,
    ResolvedSet,
    SearchQuery,
    Source,
)
from .resolver import LocationResolver
from .sequencer import QuerySequencer, QueryState

__all__ = [
    "settings",
    "setup_logging",
    "CredentialStore",
    "CredentialsCache",
    "EnvCredentialStore",
    "InMemoryCredentialStore",
    "Category",
    "Coordinate",
    "LocationCandidate",
    "ProviderCredentials",
    "ResolvedSet",
    "SearchQuery",
    "Source",
    "LocationResolver",
    "QuerySequencer",
    "QueryState",
]
