# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Environment loader for the location engine.
Every entry point loads the same root .env file through this module.
"""

import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def load_root_env(env_path: Optional[Path] = None) -> bool:
    """
    Load environment variables from the project's root .env file.

    Existing process variables win, so a deployment can always override
    what is checked into a local .env.
    """
    if env_path is None:
        env_path = Path(__file__).resolve().parent.parent / ".env"

    if env_path.exists():
        logger.info(f"Loading environment from: {env_path}")
        load_dotenv(env_path, override=False)
        return True

    logger.debug(f"No .env file at {env_path}, using system environment variables")
    return False
