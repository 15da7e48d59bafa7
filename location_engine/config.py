# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Core configuration for the location engine.
"""
import os

from .env_loader import load_root_env

# Ensure environment is loaded
load_root_env()

DEFAULT_USER_AGENT = "ride-location-engine/1.0 (contact: ops@example.com)"


class Settings:
    """Application settings using simple environment variable access."""

    def __init__(self):
        # App Configuration
        self.app_name = "Ride Location Engine"
        self.app_version = "1.0.0"
        self.debug = os.getenv("DEBUG", "false").lower() in ("1", "true", "yes")
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        self.port = int(os.getenv("PORT", "8080"))
        self.host = os.getenv("HOST", "0.0.0.0")

        # Ranking and result shaping
        self.home_region = os.getenv("HOME_REGION", "PK").strip().upper() or None
        self.max_results = int(os.getenv("MAX_RESULTS", "25"))
        self.min_query_length = int(os.getenv("MIN_QUERY_LENGTH", "2"))

        # Provider timing
        self.provider_timeout_seconds = float(os.getenv("PROVIDER_TIMEOUT_SECONDS", "6.0"))
        self.search_debounce_ms = int(os.getenv("SEARCH_DEBOUNCE_MS", "300"))

        # Community geocoder etiquette
        self.nominatim_user_agent = os.getenv("NOMINATIM_USER_AGENT", DEFAULT_USER_AGENT)
        self.nominatim_referer = os.getenv("NOMINATIM_REFERER")

        # CORS Settings
        self.allow_cors = os.getenv("ALLOW_CORS", "1").lower() in ("1", "true", "yes")

    @property
    def debounce_seconds(self) -> float:
        return self.search_debounce_ms / 1000.0

    @property
    def cors_origins_list(self) -> list:
        """Get CORS origins as a list."""
        cors_env = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173")
        return [origin.strip() for origin in cors_env.split(",") if origin.strip()]


# Global settings instance
settings = Settings()
