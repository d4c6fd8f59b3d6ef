"""Application settings loaded from environment variables / .env file."""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Runtime settings for the web client.

    Every field can be overridden with a ``CARSHARE_``-prefixed environment
    variable, e.g. ``CARSHARE_API_BASE_URL=http://backend:8080``.
    """

    # Backend
    api_base_url: str = Field(
        default="http://localhost:8080",
        description="Base URL of the rental backend (no trailing slash)",
    )
    request_timeout: float = Field(
        default=10.0,
        description="Seconds to wait for the backend before giving up",
    )

    # Flask
    secret_key: str = Field(
        default="dev-secret-change-me",
        description="Signs the session cookie that carries the bearer token",
    )

    # Presentation
    display_timezone: str = "Asia/Singapore"
    currency_label: str = "SGD"

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {"env_prefix": "CARSHARE_", "env_file": ".env", "extra": "ignore"}

    def to_flask_config(self) -> dict:
        return {
            "SECRET_KEY": self.secret_key,
            "API_BASE_URL": self.api_base_url.rstrip("/"),
            "REQUEST_TIMEOUT": self.request_timeout,
            "DISPLAY_TIMEZONE": self.display_timezone,
            "CURRENCY_LABEL": self.currency_label,
            "LOG_LEVEL": self.log_level.upper(),
        }
