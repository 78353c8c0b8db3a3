"""Core API builder utilities.

This module exports core utilities for use throughout the application.
"""

from apibuilder.core.config import Settings, get_settings
from apibuilder.core.logging import (
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
)

__all__ = [
    "Settings",
    "bind_correlation_id",
    "clear_context",
    "configure_logging",
    "get_logger",
    "get_settings",
]
