# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Credential store collaborators.

The engine never reads API keys from ambient globals. It is handed a
CredentialStore at construction and reads keys through a CredentialsCache,
which loads lazily and drops its snapshot whenever the store announces a
change. A key saved at runtime therefore takes effect on the next call.
"""

import logging
import os
from typing import Callable, Dict, List, Optional

from .models import ProviderCredentials

COMMERCIAL_PLACES = "commercial_places"
COMMERCIAL_GEOCODER = "commercial_geocoder"

CREDENTIAL_KEYS = (COMMERCIAL_PLACES, COMMERCIAL_GEOCODER)

ChangeListener = Callable[[str], None]


class CredentialStore:
    """Key-value store of optional provider credentials with change notification."""

    def __init__(self):
        self._listeners: List[ChangeListener] = []

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def poll(self) -> None:
        """Check the backing source for changes. Push-based stores do nothing."""

    def on_change(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, key: str) -> None:
        for listener in list(self._listeners):
            listener(key)


class InMemoryCredentialStore(CredentialStore):
    """Dictionary-backed store, used by tests and embedded callers."""

    def __init__(self, values: Optional[Dict[str, str]] = None):
        super().__init__()
        self._values: Dict[str, str] = {}
        for key, value in (values or {}).items():
            if value:
                self._values[key] = value

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: Optional[str]) -> None:
        value = value.strip() if value else None
        if self._values.get(key) == value:
            return
        if value:
            self._values[key] = value
        else:
            self._values.pop(key, None)
        self._notify(key)

    def delete(self, key: str) -> None:
        self.set(key, None)


class EnvCredentialStore(CredentialStore):
    """
    Reads keys from environment variables.

    get() answers from a snapshot. poll() re-reads the environment and
    notifies listeners for every key whose value changed, so a
    CredentialsCache in front of this store sees new keys on its next use.
    """

    ENV_VARS = {
        COMMERCIAL_PLACES: "GOOGLE_PLACES_API_KEY",
        COMMERCIAL_GEOCODER: "MAPBOX_ACCESS_TOKEN",
    }

    def __init__(self, environ=None):
        super().__init__()
        self._environ = environ if environ is not None else os.environ
        self._snapshot: Dict[str, Optional[str]] = self._read()

    def _read(self) -> Dict[str, Optional[str]]:
        return {key: (self._environ.get(var) or None) for key, var in self.ENV_VARS.items()}

    def get(self, key: str) -> Optional[str]:
        return self._snapshot.get(key)

    def poll(self) -> None:
        current = self._read()
        changed = [key for key in CREDENTIAL_KEYS if current.get(key) != self._snapshot.get(key)]
        self._snapshot = current
        for key in changed:
            self._notify(key)


class CredentialsCache:
    """Lazily loaded ProviderCredentials, invalidated on store change."""

    def __init__(self, store: CredentialStore):
        self.store = store
        self._credentials: Optional[ProviderCredentials] = None
        self.logger = logging.getLogger(__name__)
        self._unsubscribe = store.on_change(self._invalidate)

    def _invalidate(self, key: str) -> None:
        self.logger.info(f"🔑 Credential '{key}' changed, reloading on next use")
        self._credentials = None

    def current(self) -> ProviderCredentials:
        self.store.poll()
        if self._credentials is None:
            self._credentials = ProviderCredentials(
                commercial_places_key=self.store.get(COMMERCIAL_PLACES),
                commercial_geocoder_token=self.store.get(COMMERCIAL_GEOCODER),
            )
        return self._credentials

    def close(self) -> None:
        self._unsubscribe()
