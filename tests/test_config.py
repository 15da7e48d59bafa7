"""
Tests for settings and .env loading.
"""

import logging
import os

from location_engine.app_logging import setup_logging
from location_engine.config import DEFAULT_USER_AGENT, Settings, settings
from location_engine.env_loader import load_root_env


def test_defaults(monkeypatch):
    for key in ("HOME_REGION", "MAX_RESULTS", "MIN_QUERY_LENGTH", "PROVIDER_TIMEOUT_SECONDS",
                "SEARCH_DEBOUNCE_MS", "NOMINATIM_USER_AGENT"):
        monkeypatch.delenv(key, raising=False)

    settings = Settings()

    assert settings.home_region == "PK"
    assert settings.max_results == 25
    assert settings.min_query_length == 2
    assert settings.provider_timeout_seconds == 6.0
    assert settings.debounce_seconds == 0.3
    assert settings.nominatim_user_agent == DEFAULT_USER_AGENT


def test_overrides(monkeypatch):
    monkeypatch.setenv("HOME_REGION", " ae ")
    monkeypatch.setenv("SEARCH_DEBOUNCE_MS", "150")
    monkeypatch.setenv("CORS_ORIGINS", "https://rider.example.com, ,https://ops.example.com")

    settings = Settings()

    assert settings.home_region == "AE"
    assert settings.debounce_seconds == 0.15
    assert settings.cors_origins_list == ["https://rider.example.com", "https://ops.example.com"]


def test_blank_home_region_disables_boost(monkeypatch):
    monkeypatch.setenv("HOME_REGION", "")
    assert Settings().home_region is None


def test_env_file_does_not_override_process(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("LOCATION_ENGINE_TEST_A=from-file\nLOCATION_ENGINE_TEST_B=from-file\n")
    monkeypatch.setenv("LOCATION_ENGINE_TEST_A", "from-process")
    monkeypatch.delenv("LOCATION_ENGINE_TEST_B", raising=False)

    assert load_root_env(env_file) is True
    assert os.environ["LOCATION_ENGINE_TEST_A"] == "from-process"
    assert os.environ["LOCATION_ENGINE_TEST_B"] == "from-file"
    monkeypatch.delenv("LOCATION_ENGINE_TEST_B")


def test_missing_env_file(tmp_path):
    assert load_root_env(tmp_path / "nope.env") is False


def test_setup_logging_installs_one_handler():
    engine_logger = logging.getLogger("location_engine")
    previous_level = engine_logger.level
    try:
        setup_logging("warning")
        setup_logging("DEBUG")

        ours = [h for h in engine_logger.handlers if getattr(h, "_location_engine", False)]
        assert len(ours) == 1
        assert engine_logger.level == logging.DEBUG

        setup_logging("INFO")
        assert engine_logger.level == logging.INFO
        assert logging.getLogger("aiohttp.client").level == logging.WARNING
    finally:
        engine_logger.setLevel(previous_level)


def test_setup_logging_defaults_to_settings(monkeypatch):
    monkeypatch.setattr(settings, "log_level", "ERROR")
    engine_logger = logging.getLogger("location_engine")
    previous_level = engine_logger.level
    try:
        assert setup_logging() is engine_logger
        assert engine_logger.level == logging.ERROR
    finally:
        engine_logger.setLevel(previous_level)
