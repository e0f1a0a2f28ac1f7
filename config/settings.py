"""
Configuration Settings for the SocialBu Client

This module centralizes all configuration settings, read from environment
variables (optionally through a .env file at the application root).
"""

import os
from pathlib import Path
from typing import List, Tuple
from dotenv import load_dotenv

# Determine the application root directory
APP_ROOT = Path(__file__).resolve().parent.parent

# Load environment variables from .env file
load_dotenv(dotenv_path=os.path.join(APP_ROOT, '.env'))


def _env_bool(name: str, default: bool = False) -> bool:
    """Read a boolean flag from the environment."""
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_number(name: str, default: float) -> float:
    """Read a number from the environment; unparseable values become 0 so validation reports them."""
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        return 0


def parse_account_ids(raw: str) -> Tuple[List[int], List[str]]:
    """
    Split a comma-separated account id list.

    Args:
        raw: Value such as "123, 456,789"

    Returns:
        Tuple of (parsed ids, invalid segments). Empty segments are skipped.
    """
    ids: List[int] = []
    invalid: List[str] = []
    for segment in (raw or "").split(","):
        segment = segment.strip()
        if not segment:
            continue
        try:
            ids.append(int(segment))
        except ValueError:
            invalid.append(segment)
    return ids, invalid


# =============================================================================
# API Authentication
# =============================================================================

SOCIALBU_TOKEN = os.getenv("SOCIALBU_TOKEN")

# Default account ids used when a post does not name its targets
SOCIALBU_ACCOUNT_IDS_RAW = os.getenv("SOCIALBU_ACCOUNT_IDS", "")
SOCIALBU_ACCOUNT_IDS, SOCIALBU_INVALID_ACCOUNT_IDS = parse_account_ids(SOCIALBU_ACCOUNT_IDS_RAW)

# =============================================================================
# HTTP Settings
# =============================================================================

DEFAULT_BASE_URL = "https://socialbu.com/api/v1"
SOCIALBU_BASE_URL = os.getenv("SOCIALBU_BASE_URL") or DEFAULT_BASE_URL

SOCIALBU_TIMEOUT = _env_number("SOCIALBU_TIMEOUT", 30)                  # Seconds to wait for response data
SOCIALBU_CONNECT_TIMEOUT = _env_number("SOCIALBU_CONNECT_TIMEOUT", 10)  # Seconds to establish a connection

# Chunk size used when streaming remote media to a temp file
DOWNLOAD_CHUNK_SIZE = 64 * 1024
TEMP_FILE_PREFIX = "socialbu_"

# =============================================================================
# Pagination Settings
# =============================================================================

DEFAULT_PER_PAGE = 15
DEFAULT_ALL_PER_PAGE = 50

# =============================================================================
# Webhook Settings
# =============================================================================

SOCIALBU_WEBHOOKS_ENABLED = _env_bool("SOCIALBU_WEBHOOKS_ENABLED", False)
SOCIALBU_WEBHOOKS_PREFIX = os.getenv("SOCIALBU_WEBHOOKS_PREFIX", "webhooks/socialbu")
SOCIALBU_WEBHOOK_SECRET = os.getenv("SOCIALBU_WEBHOOK_SECRET") or None
SOCIALBU_WEBHOOK_HOST = os.getenv("SOCIALBU_WEBHOOK_HOST", "127.0.0.1")
SOCIALBU_WEBHOOK_PORT = int(_env_number("SOCIALBU_WEBHOOK_PORT", 8000))
WEBHOOK_SIGNATURE_HEADER = "X-SocialBu-Signature"
