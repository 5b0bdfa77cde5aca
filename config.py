import os
import logging

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _env_float(key, default):
    """Read a float from env, falling back to default on invalid values."""
    try:
        return float(os.environ.get(key, default))
    except (ValueError, TypeError):
        logger.warning("Invalid value for %s, using default %s", key, default)
        return float(default)


def _env_int(key, default):
    """Read an int from env, falling back to default on invalid values."""
    try:
        return int(os.environ.get(key, default))
    except (ValueError, TypeError):
        logger.warning("Invalid value for %s, using default %s", key, default)
        return int(default)


def _env_list(key, default):
    """Read a comma-separated list from env, dropping empty items."""
    return [item.strip() for item in os.environ.get(key, default).split(",") if item.strip()]


def get_api_key():
    """Provider credential, read on every call so the relay sees env changes."""
    return os.environ.get("OPENAI_API_KEY", "")


LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# --- Provider (used by the relay, or in-process when RELAY_URL is unset) ---
DEFAULT_OPENAI_MODEL = os.environ.get("OPENAI_MODEL", "gpt-4o-mini")
DEFAULT_OPENAI_URL = os.environ.get("OPENAI_URL", "https://api.openai.com/v1")
DEFAULT_LLM_TEMPERATURE = _env_float("LLM_TEMPERATURE", "0.9")
DEFAULT_LLM_TIMEOUT = _env_int("LLM_TIMEOUT", "120")

# --- Relay ---
# When set, the front-end talks to the relay instead of the provider directly.
RELAY_URL = os.environ.get("RELAY_URL", "")
RELAY_HOST = os.environ.get("RELAY_HOST", "127.0.0.1")
RELAY_PORT = _env_int("RELAY_PORT", "8787")
RELAY_CORS_ORIGINS = _env_list("RELAY_CORS_ORIGINS", "http://localhost:7860,http://127.0.0.1:7860")

# --- Front-end ---
SERVER_HOST = os.environ.get("SERVER_HOST", "127.0.0.1")
SERVER_PORT = _env_int("SERVER_PORT", "7860")
