"""Configuration loading and environment setup."""
import os
from pathlib import Path
from typing import Any, Dict, List

from dotenv import load_dotenv

from .exceptions import ConfigurationError
from .utils.logging import get_logger

logger = get_logger(__name__)

# Load environment variables from .env file with explicit path
load_dotenv(dotenv_path=Path.cwd() / '.env')

# Also try loading from the project root in case we're running from a subdirectory
load_dotenv(dotenv_path=Path(__file__).parent.parent / '.env')

REQUIRED_SECRETS: List[str] = [
    "GOOGLEAI_API_KEY",
    "UNSPLASH_ACCESS_KEY",
]

DEFAULT_LLM_API_BASE = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_LLM_MODEL = "gemini-2.5-flash"
DEFAULT_UNSPLASH_API_BASE = "https://api.unsplash.com"


def validate_required_env() -> None:
    """
    Validate that every required secret is present.

    Raises:
        ConfigurationError: naming all missing variables at once.
    """
    missing_vars = [var for var in REQUIRED_SECRETS if not _clean_env_value(os.getenv(var))]

    if missing_vars:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing_vars)}. Check your .env file"
        )

    logger.debug("✅ Required secrets present", extra={"subsys": "config", "event": "secrets_ok"})


def _clean_env_value(value: str | None) -> str | None:
    """Strip inline comments and whitespace from an environment value."""
    if not value:
        return value
    return value.split('#')[0].strip()


def _safe_int(value: str | None, default: str, var_name: str) -> int:
    """Safely convert environment variable to int, handling malformed values."""
    try:
        clean_value = _clean_env_value(value) or default
        return int(clean_value)
    except ValueError:
        logger.warning(f"Invalid {var_name} value '{value}', using default {default}")
        return int(default)


def _safe_float(value: str | None, default: str, var_name: str) -> float:
    """Safely convert environment variable to float, handling malformed values."""
    try:
        clean_value = _clean_env_value(value) or default
        return float(clean_value)
    except ValueError:
        logger.warning(f"Invalid {var_name} value '{value}', using default {default}")
        return float(default)


def load_config() -> Dict[str, Any]:
    """Load configuration from environment variables."""
    return {
        # LANGUAGE MODEL SETTINGS
        "GOOGLEAI_API_KEY": _clean_env_value(os.getenv("GOOGLEAI_API_KEY")),
        "LLM_API_BASE": _clean_env_value(os.getenv("LLM_API_BASE")) or DEFAULT_LLM_API_BASE,
        "LLM_MODEL": _clean_env_value(os.getenv("LLM_MODEL")) or DEFAULT_LLM_MODEL,
        "LLM_TIMEOUT_SECONDS": _safe_float(os.getenv("LLM_TIMEOUT_SECONDS"), "45", "LLM_TIMEOUT_SECONDS"),

        # IMAGE SEARCH SETTINGS
        "UNSPLASH_ACCESS_KEY": _clean_env_value(os.getenv("UNSPLASH_ACCESS_KEY")),
        "UNSPLASH_API_BASE": _clean_env_value(os.getenv("UNSPLASH_API_BASE")) or DEFAULT_UNSPLASH_API_BASE,
        "IMAGE_SEARCH_PER_PAGE": _safe_int(os.getenv("IMAGE_SEARCH_PER_PAGE"), "5", "IMAGE_SEARCH_PER_PAGE"),
        "IMAGE_SEARCH_TIMEOUT_SECONDS": _safe_float(
            os.getenv("IMAGE_SEARCH_TIMEOUT_SECONDS"), "10", "IMAGE_SEARCH_TIMEOUT_SECONDS"
        ),

        # TRANSPORT SETTINGS
        "AUTH_DIR": Path(_clean_env_value(os.getenv("AUTH_DIR")) or "auth"),
        "DISCORD_TOKEN": _clean_env_value(os.getenv("DISCORD_TOKEN")),
        "RECONNECT_DELAY_SECONDS": _safe_float(os.getenv("RECONNECT_DELAY_SECONDS"), "0", "RECONNECT_DELAY_SECONDS"),
        "RECONNECT_MAX_DELAY_SECONDS": _safe_float(
            os.getenv("RECONNECT_MAX_DELAY_SECONDS"), "30", "RECONNECT_MAX_DELAY_SECONDS"
        ),

        # LOGGING
        "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO").upper(),
        "LOG_JSONL_PATH": os.getenv("LOG_JSONL_PATH", "logs/relay.jsonl"),
    }
