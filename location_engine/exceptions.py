# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Provider error taxonomy.

These never cross a provider's public boundary: adapters raise them
internally, report them to the diagnostics channel and return an empty
result instead.
"""


class ProviderError(Exception):
    """Base class for every provider-side failure."""

    def __init__(self, provider: str, detail: str = ""):
        self.provider = provider
        self.detail = detail
        super().__init__(f"{provider}: {detail}" if detail else provider)


class ProviderUnavailable(ProviderError):
    """No credential configured; the provider is skipped."""


class ProviderTransportError(ProviderError):
    """Network, timeout, HTTP status or provider status failure."""


class ProviderParseError(ProviderError):
    """Response could not be decoded into candidates."""


class NoResults(ProviderError):
    """Valid response with nothing in it."""
