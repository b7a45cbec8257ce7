"""Environment configuration shared by every Copper Lambda.

Values are read once at import. Store and secret settings that tests
need to vary are read again at call time by their factories.
"""

import logging
import os


def log_level(name):
    """Return name as a logging level name, or INFO when logging does not know it."""
    name = (name or "").strip().upper()
    return name if isinstance(logging.getLevelName(name), int) else "INFO"


LOG_LEVEL = log_level(os.environ.get("LOG_LEVEL", "INFO"))

IDENTITY_HEADER = os.environ.get("IDENTITY_HEADER", "x-ms-client-principal").lower()

CORS_ORIGIN = os.environ.get("CORS_ORIGIN", "")
CORS_HEADERS = {
    "Access-Control-Allow-Origin": CORS_ORIGIN,
    "Access-Control-Allow-Headers": f"Content-Type,Authorization,{IDENTITY_HEADER}",
    "Access-Control-Allow-Methods": "GET,POST,PUT,DELETE,OPTIONS",
}

DEFAULT_TABLE_NAME = "pcb-designs"
DEFAULT_OWNER_INDEX = "userId-index"

DEFAULT_COMPLETION_SECRET = "COMPLETION-API-KEY"
DEFAULT_COMPLETION_ENDPOINT = "https://api.openai.com"
DEFAULT_COMPLETION_MODEL = "gpt-3.5-turbo-instruct"
DEFAULT_COMPLETION_MAX_TOKENS = 100
DEFAULT_COMPLETION_TIMEOUT_SECONDS = 30


def env_int(name, default):
    raw = os.environ.get(name, "")
    try:
        return int(raw)
    except ValueError:
        return default
