"""
Configuration loading for OncoReader.

Settings are read from a JSON file next to this module and merged over the
built-in defaults. Secrets are taken from environment variables.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULTS: Dict[str, Any] = {
    "relay_url": "https://api.allorigins.win/raw",
    "relay_param": "url",
    "request_delay_seconds": 0.2,
    "timeout_seconds": 10,
    "user_agent": "OncoReaderBot/1.0",
    "gemini_model": "gemini-2.0-flash",
    "preferences_file": "~/.oncoreader/preferences.json",
    "default_keywords": "immunotherapy, pembrolizumab, kras, egfr, nsclc",
}


def load_config(config_filename: str = "config.json") -> Dict[str, Any]:
    """Loads configuration from a JSON file, falling back to defaults."""
    # Build absolute path relative to this module
    base_dir = os.path.dirname(os.path.abspath(__file__))
    config_path = os.path.join(base_dir, config_filename)

    config = dict(DEFAULTS)
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config.update(json.load(f))
    except FileNotFoundError:
        logger.warning("Config file not found at %s. Using defaults.", config_path)
    return config


def gemini_api_key() -> Optional[str]:
    """Returns the Gemini API key from the environment, if set."""
    return os.environ.get("GEMINI_KEY")


def gcp_project_id() -> Optional[str]:
    """Returns the GCP project used for Firestore preferences, if set."""
    return os.environ.get("GCP_PROJECT_ID")
