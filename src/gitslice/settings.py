"""Application-wide settings and environment loading."""

import logging
import os
from functools import lru_cache

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv()
logger.debug("Environment variables loaded from .env if present")

DEFAULT_MAX_WORKERS = 8
DEFAULT_OUTPUT_PATH = "git-diff-xml-output.xml"


@lru_cache(maxsize=1)
def get_default_max_workers() -> int:
    """Return the per-file fan-out width from GITSLICE_MAX_WORKERS."""
    raw = os.getenv("GITSLICE_MAX_WORKERS")
    if not raw:
        return DEFAULT_MAX_WORKERS

    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value <= 0:
        logger.warning(
            "Ignoring invalid GITSLICE_MAX_WORKERS",
            extra={"value": raw, "fallback": DEFAULT_MAX_WORKERS},
        )
        return DEFAULT_MAX_WORKERS

    logger.debug("Max workers configured from environment", extra={"max_workers": value})
    return value


def get_default_output_path() -> str:
    """Return the output path from GITSLICE_OUTPUT, falling back to the default."""
    return os.getenv("GITSLICE_OUTPUT") or DEFAULT_OUTPUT_PATH
