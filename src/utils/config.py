"""Configuration loading and validation for the fal image adapter."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Get the project root directory (parent of src)
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Load environment variables from .env file in project root
load_dotenv(PROJECT_ROOT / ".env")

DEFAULT_FAL_QUEUE_URL = "https://queue.fal.run"


def load_config() -> dict:
    """Load configuration from environment variables."""
    config = {
        # Provider credential (FAL_KEY is the name the fal tooling uses)
        "fal_api_key": os.getenv("FAL_KEY") or os.getenv("FAL_API_KEY", ""),
        # Queue transport settings
        "fal_queue_url": os.getenv("FAL_QUEUE_URL", DEFAULT_FAL_QUEUE_URL).rstrip("/"),
        "fal_poll_interval": float(os.getenv("FAL_POLL_INTERVAL", "1.0")),
        "fal_max_poll_attempts": int(os.getenv("FAL_MAX_POLL_ATTEMPTS", "600")),
        "fal_request_timeout": float(os.getenv("FAL_REQUEST_TIMEOUT", "120")),
        # Logging
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
        "log_json": os.getenv("LOG_JSON", "false").lower() == "true",
    }

    return config


def validate_config(config: dict) -> list[str]:
    """Validate configuration and return list of errors."""
    errors = []

    if not config.get("fal_api_key"):
        errors.append("FAL_KEY is required")

    if config.get("fal_poll_interval", 0) <= 0:
        errors.append("FAL_POLL_INTERVAL must be greater than 0")

    if config.get("fal_max_poll_attempts", 0) < 1:
        errors.append("FAL_MAX_POLL_ATTEMPTS must be at least 1")

    if not str(config.get("fal_queue_url", "")).startswith(("http://", "https://")):
        errors.append("FAL_QUEUE_URL must be an http(s) URL")

    return errors
