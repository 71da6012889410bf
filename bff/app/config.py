"""
Configuration module for the marketplace BFF.

This module uses Pydantic Settings to load and validate environment variables
for backend communication, the payment processor, CORS and logging.

One backend address is configured here; every proxied route resolves its
target against it. Environment variables are loaded from .env file or
system environment.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_BACKEND_API_URL = "http://localhost:5000/api"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    """

    # =========================================================================
    # Backend Service Configuration
    # =========================================================================

    BACKEND_API_URL: str = Field(
        default=DEFAULT_BACKEND_API_URL,
        description="Backend API base URL including the /api prefix (e.g., http://backend:5000/api)",
        min_length=1,
    )

    BACKEND_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        description="Total timeout for a single backend call in seconds",
        gt=0,
        le=300,
    )

    BACKEND_CONNECT_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        description="Connect timeout for backend calls in seconds",
        gt=0,
        le=300,
    )

    # =========================================================================
    # Payment Processor Configuration
    # =========================================================================

    STRIPE_SECRET_KEY: Optional[str] = Field(
        None,
        description="Stripe secret API key (server-side only)",
    )

    STRIPE_API_VERSION: str = Field(
        default="2024-06-20",
        description="Pinned Stripe API version",
    )

    PAYMENT_CURRENCY: str = Field(
        default="aud",
        description="ISO 4217 currency code used for payment intents",
    )

    # =========================================================================
    # Server Configuration
    # =========================================================================

    BFF_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the BFF server",
    )

    BFF_PORT: int = Field(
        default=3000,
        description="Port to bind the BFF server",
        ge=1,
        le=65535,
    )

    ALLOWED_ORIGINS: Optional[str] = Field(
        None,
        description="Comma-separated list of allowed CORS origins (leave empty for no CORS)",
    )

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def allowed_origins_list(self) -> List[str]:
        """
        Parse and return ALLOWED_ORIGINS as a list.

        Returns:
            List of allowed origin URLs, or empty list if not configured.
        """
        if not self.ALLOWED_ORIGINS:
            return []

        return [
            origin.strip()
            for origin in self.ALLOWED_ORIGINS.split(",")
            if origin.strip()
        ]

    @property
    def backend_api_url_str(self) -> str:
        """Backend URL without trailing slash."""
        return self.BACKEND_API_URL.rstrip("/")

    @property
    def payment_configured(self) -> bool:
        return bool(self.STRIPE_SECRET_KEY)

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("BACKEND_API_URL")
    @classmethod
    def validate_backend_url(cls, v: str) -> str:
        """
        Validate that the backend URL is an absolute http(s) URL.

        Raises:
            ValueError: If the scheme is missing or unsupported
        """
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(
                f"BACKEND_API_URL must start with http:// or https://, got: {v}"
            )
        return v.rstrip("/")

    @field_validator("PAYMENT_CURRENCY")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        v = v.strip().lower()
        if len(v) != 3 or not v.isalpha():
            raise ValueError(f"PAYMENT_CURRENCY must be a 3-letter ISO code, got: {v}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

        v = v.upper()
        if v not in allowed_levels:
            raise ValueError(f"LOG_LEVEL must be one of {allowed_levels}, got: {v}")
        return v

    @model_validator(mode="after")
    def validate_timeouts(self) -> "Settings":
        if self.BACKEND_CONNECT_TIMEOUT_SECONDS > self.BACKEND_TIMEOUT_SECONDS:
            raise ValueError(
                "BACKEND_CONNECT_TIMEOUT_SECONDS cannot exceed BACKEND_TIMEOUT_SECONDS"
            )
        return self


# =============================================================================
# Settings Singleton
# =============================================================================

@lru_cache()
def get_settings() -> Settings:
    """
    Get or create a singleton Settings instance.

    This function is cached so that the settings are loaded only once
    during the application lifecycle.

    Returns:
        Settings instance with all configuration loaded and validated.

    Raises:
        ValidationError: If environment variables are invalid.
    """
    return Settings()


# =============================================================================
# Configuration Helpers
# =============================================================================

def validate_configuration(settings: Optional[Settings] = None) -> dict:
    """
    Validate configuration settings and return a status report.

    Called during application startup so that misconfiguration shows up
    in the logs before the first request.

    Returns:
        Dictionary with validation status, errors and warnings.

    Example:
        >>> status = validate_configuration()
        >>> if not status["valid"]:
        ...     print(status["errors"])
    """
    settings = settings or get_settings()
    errors = []
    warnings = []

    if not settings.payment_configured:
        warnings.append("STRIPE_SECRET_KEY is not set (payment intents will fail)")
    elif not settings.STRIPE_SECRET_KEY.startswith(("sk_", "rk_")):
        errors.append("STRIPE_SECRET_KEY does not look like a Stripe secret key")

    backend_url = settings.backend_api_url_str
    if "localhost" in backend_url or "127.0.0.1" in backend_url:
        warnings.append("Backend URL points to localhost (may cause issues in containers)")

    if not settings.allowed_origins_list:
        warnings.append("ALLOWED_ORIGINS is not set (browser cross-origin calls will be rejected)")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
        "backend_url": backend_url,
        "backend_timeout_seconds": settings.BACKEND_TIMEOUT_SECONDS,
    }
