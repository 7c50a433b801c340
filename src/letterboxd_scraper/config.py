"""
Configuration constants for the Letterboxd scraper.

This module centralizes all magic numbers and configurable parameters.
Values can be overridden via environment variables.
"""
import os
import logging

logger = logging.getLogger(__name__)


def _get_float_env(key: str, default: float, min_val: float = 0) -> float:
    """
    Safely parse float from environment variable with validation.

    Args:
        key: Environment variable name
        default: Default value if not set or invalid
        min_val: Minimum allowed value

    Returns:
        Validated float value
    """
    try:
        val = float(os.environ.get(key, default))
        if val < min_val:
            logger.warning(f"{key}={val} is below minimum {min_val}, using {min_val}")
            return min_val
        return val
    except ValueError:
        logger.warning(f"Invalid {key}='{os.environ.get(key)}', using default {default}")
        return default


def _get_int_env(key: str, default: int, min_val: int = 1) -> int:
    """
    Safely parse integer from environment variable with validation.

    Args:
        key: Environment variable name
        default: Default value if not set or invalid
        min_val: Minimum allowed value

    Returns:
        Validated integer value
    """
    try:
        val = int(os.environ.get(key, default))
        if val < min_val:
            logger.warning(f"{key}={val} is below minimum {min_val}, using {min_val}")
            return min_val
        return val
    except ValueError:
        logger.warning(f"Invalid {key}='{os.environ.get(key)}', using default {default}")
        return default


def _get_bool_env(key: str, default: bool) -> bool:
    raw = os.environ.get(key)
    if raw is None:
        return default
    lowered = raw.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    logger.warning(f"Invalid {key}='{raw}', using default {default}")
    return default


# Site
BASE_URL = os.environ.get("LETTERBOXD_BASE_URL", "https://letterboxd.com").rstrip("/")
USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) letterboxd-scraper/0.1"

# HTTP
HTTP_TIMEOUT = _get_float_env("LETTERBOXD_HTTP_TIMEOUT", 30.0, min_val=1.0)  # seconds
MAX_HTTP_RETRIES = _get_int_env("LETTERBOXD_MAX_RETRIES", 3, min_val=1)
SCRAPER_HTTP2 = _get_bool_env("LETTERBOXD_HTTP2", False)

# Full-page sizes per rendering shape; a shorter page is the last one
GRID_PAGE_SIZE = _get_int_env("LETTERBOXD_GRID_PAGE_SIZE", 72)
LIST_PAGE_SIZE = _get_int_env("LETTERBOXD_LIST_PAGE_SIZE", 20)
SEARCH_PAGE_SIZE = _get_int_env("LETTERBOXD_SEARCH_PAGE_SIZE", 20)
DIARY_PAGE_SIZE = _get_int_env("LETTERBOXD_DIARY_PAGE_SIZE", 50)

# Hard cap on records collected by one pagination run
SAFETY_CEILING = _get_int_env("LETTERBOXD_SAFETY_CEILING", 1000)

MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

VALID_RATINGS = (0.5, 1.0, 1.5, 2.0, 2.5, 3.0, 3.5, 4.0, 4.5, 5.0)

GENRES = (
    "action", "adventure", "animation", "comedy", "crime",
    "documentary", "drama", "family", "fantasy", "history",
    "horror", "music", "mystery", "romance", "science-fiction",
    "tv-movie", "thriller", "war", "western",
)

SEARCH_FILTERS = (
    "films", "reviews", "lists", "original-lists",
    "stories", "cast-crew", "members", "tags",
    "articles", "episodes", "full-text",
)

EARLIEST_FILM_YEAR = 1888
