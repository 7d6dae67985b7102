"""
Configuration module for the attendance tracker.
Handles environment variables and application settings.
"""
import os
from typing import Optional
from dotenv import load_dotenv

# Load .env from current working directory
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Application configuration class."""

    # Flask Configuration
    SECRET_KEY: str = os.getenv("SECRET_KEY", os.urandom(32).hex())
    DEBUG: bool = _env_bool("DEBUG", "False")
    HOST: str = os.getenv("HOST", "127.0.0.1")
    PORT: int = int(os.getenv("PORT", "5000"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_DIR: str = os.getenv("LOG_DIR", "logs")

    # Webhook Configuration
    WEBHOOK_URL: Optional[str] = os.getenv("WEBHOOK_URL")
    REQUEST_TIMEOUT: float = float(os.getenv("REQUEST_TIMEOUT", "10"))
    # When set, a roster fetch needs a concrete teacher and level (not "all")
    REQUIRE_CONCRETE_FILTERS: bool = _env_bool("REQUIRE_CONCRETE_FILTERS", "True")

    # AI Search Configuration
    GEMINI_API_KEY: Optional[str] = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
    SEARCH_MODEL: str = os.getenv("SEARCH_MODEL", "gemini-2.5-flash")

    @staticmethod
    def validate() -> None:
        """Validate configuration settings."""
        required_vars = [
            ("WEBHOOK_URL", Config.WEBHOOK_URL),
        ]

        missing_vars = [var_name for var_name, var_value in required_vars if not var_value]
        if missing_vars:
            raise ValueError(f"Missing required environment variables: {', '.join(missing_vars)}")

        if Config.REQUEST_TIMEOUT <= 0:
            raise ValueError("REQUEST_TIMEOUT must be positive")

        if Config.PORT < 1 or Config.PORT > 65535:
            raise ValueError("PORT must be between 1 and 65535")
