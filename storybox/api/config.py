"""API configuration constants.

Single source of truth for settings used across the API layer.
"""

import logging
import os

from storybox.config.functions import MEDIA_DIR

# CORS origins, comma separated ("*" for any)
CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

# Logging
JSON_LOGS = os.getenv("LOG_FORMAT", "json").lower() == "json"
LOG_LEVEL = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)

__all__ = ["CORS_ORIGINS", "JSON_LOGS", "LOG_LEVEL", "MEDIA_DIR"]
