"""
Configuration Validation for the SocialBu Client

This module contains configuration validation logic. Problems are collected
and reported together rather than one at a time.
"""

import logging

from utils.exceptions import ConfigurationError
from utils.helpers import is_valid_url


def validate_settings():
    """
    Validate that all required settings are properly configured.

    Raises:
        ConfigurationError: If required settings are missing or invalid.
    """
    # Import settings here to avoid circular imports
    from config import settings

    errors = []
    logger = logging.getLogger(__name__)

    if not settings.SOCIALBU_TOKEN:
        errors.append("Missing required environment variable: SOCIALBU_TOKEN")

    if settings.SOCIALBU_INVALID_ACCOUNT_IDS:
        invalid = ", ".join(settings.SOCIALBU_INVALID_ACCOUNT_IDS)
        errors.append(f"SOCIALBU_ACCOUNT_IDS contains non-numeric values: {invalid}")

    if not settings.SOCIALBU_ACCOUNT_IDS:
        logger.warning("SOCIALBU_ACCOUNT_IDS is empty. Every post must name its target accounts.")

    if not is_valid_url(settings.SOCIALBU_BASE_URL):
        errors.append(f"SOCIALBU_BASE_URL is not a valid http(s) URL: {settings.SOCIALBU_BASE_URL}")

    # Validate timeout values are positive
    timeout_settings = [
        ("SOCIALBU_TIMEOUT", settings.SOCIALBU_TIMEOUT),
        ("SOCIALBU_CONNECT_TIMEOUT", settings.SOCIALBU_CONNECT_TIMEOUT),
    ]

    for name, value in timeout_settings:
        if value <= 0:
            errors.append(f"{name} must be positive, got {value}")

    if 0 < settings.SOCIALBU_TIMEOUT < settings.SOCIALBU_CONNECT_TIMEOUT:
        errors.append(
            f"SOCIALBU_CONNECT_TIMEOUT ({settings.SOCIALBU_CONNECT_TIMEOUT}) must not exceed "
            f"SOCIALBU_TIMEOUT ({settings.SOCIALBU_TIMEOUT})"
        )

    if settings.SOCIALBU_WEBHOOKS_ENABLED and not settings.SOCIALBU_WEBHOOKS_PREFIX.strip("/ "):
        errors.append("SOCIALBU_WEBHOOKS_ENABLED is true but SOCIALBU_WEBHOOKS_PREFIX is empty.")

    # Raise all errors at once
    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ConfigurationError(error_msg)

    return True


def get_config_summary() -> dict:
    """
    Returns a summary of current configuration (without sensitive values).
    Useful for logging startup state.
    """
    # Import settings here to avoid circular imports
    from config import settings

    return {
        "api": {
            "base_url": settings.SOCIALBU_BASE_URL,
            "token_configured": bool(settings.SOCIALBU_TOKEN),
            "default_account_ids": list(settings.SOCIALBU_ACCOUNT_IDS),
        },
        "http": {
            "timeout": settings.SOCIALBU_TIMEOUT,
            "connect_timeout": settings.SOCIALBU_CONNECT_TIMEOUT,
        },
        "webhooks": {
            "enabled": settings.SOCIALBU_WEBHOOKS_ENABLED,
            "prefix": settings.SOCIALBU_WEBHOOKS_PREFIX,
            "signed": bool(settings.SOCIALBU_WEBHOOK_SECRET),
        },
    }
