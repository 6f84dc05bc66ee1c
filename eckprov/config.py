"""Configuration management for the eckprov application."""
import os
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Application configuration with sensible defaults."""

    # ECK API credentials (ECK_HOST, ECK_USERNAME, ECK_PASSWORD, ECK_PROJECT)
    # are read by the provider when it is configured.
    ECK_INSECURE: bool = _env_bool("ECK_INSECURE")

    # Timeouts (in seconds)
    API_TIMEOUT: int = int(os.getenv("API_TIMEOUT", "30"))
    WAIT_INTERVAL: float = float(os.getenv("ECK_WAIT_INTERVAL", "30"))
    WAIT_TIMEOUT: float = float(os.getenv("ECK_WAIT_TIMEOUT", "600"))  # 10 minutes

    # Local state written by the CLI
    STATE_FILE: str = os.getenv("ECK_STATE_FILE", "clusters/eck-state.json")

    # HTTP service
    API_KEY: str = os.getenv("ECK_API_KEY", "eckprov-secret")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_FORMAT: str = os.getenv(
        "LOG_FORMAT",
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # Security
    REDACT_KEYS: tuple = ("password", "secret", "token", "kubeconfig", "api_key")
