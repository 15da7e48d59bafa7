# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Logging setup for the location engine service.

Only the engine's own logger tree gets a handler. Provider adapters log under
``location_engine.providers.base.<provider>`` so a single level covers the
resolver, the sequencer and every adapter.
"""
import logging
import sys
from typing import Optional

from .config import settings

ENGINE_LOGGER = "location_engine"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = {
    "aiohttp.client": logging.WARNING,
    "aiohttp.access": logging.WARNING,
    "uvicorn.access": logging.WARNING,
}


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Attach a stdout handler to the engine logger and return it.

    Defaults to LOG_LEVEL from settings. Calling it again only updates the
    level; the handler is installed once.
    """
    level_name = (level or settings.log_level).upper()
    numeric_level = getattr(logging, level_name, logging.INFO)

    engine_logger = logging.getLogger(ENGINE_LOGGER)
    engine_logger.setLevel(numeric_level)

    if not any(getattr(h, "_location_engine", False) for h in engine_logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._location_engine = True
        engine_logger.addHandler(handler)

    if numeric_level > logging.DEBUG:
        for logger_name, logger_level in QUIET_LOGGERS.items():
            logging.getLogger(logger_name).setLevel(logger_level)

    engine_logger.debug(f"🔧 Logging configured at {level_name}")
    return engine_logger
