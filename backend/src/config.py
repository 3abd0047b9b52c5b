"""
FastAPI application configuration using Pydantic Settings.

Provides centralized configuration for:
- OMDb API access (key, host and sub hosts, timeouts, retries)
- API settings (CORS, rate limiting)
- Security settings
- Logging, metrics and tracing

All settings support environment variable overrides and .env file loading.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import List, Optional
from functools import lru_cache


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables with the
    prefix "PMOVIES_" (e.g., PMOVIES_OMDB_API_KEY).

    Environment variables are loaded from:
    1. System environment
    2. .env file in the current directory
    3. Default values defined below
    """

    # =========================================================================
    # API Settings
    # =========================================================================

    app_name: str = Field(
        default="PMovies Backend",
        description="Application name"
    )
    app_version: str = Field(
        default="0.0.1",
        description="API version"
    )

    debug: bool = Field(
        default=False,
        description="Debug mode - enables auto-reload and verbose error traces"
    )
    environment: str = Field(
        default="production",
        description="Environment: development|staging|production"
    )

    host: str = Field(
        default="0.0.0.0",
        description="API bind host"
    )
    port: int = Field(
        default=8080,
        description="API bind port",
        gt=0,
        lt=65536
    )

    # =========================================================================
    # OMDb API Settings
    # =========================================================================

    omdb_api_key: Optional[str] = Field(
        default=None,
        description="OMDb API access key (sent as the 'apikey' query param)"
    )
    omdb_host: str = Field(
        default="omdbapi.com",
        description="OMDb API base host, without sub domain"
    )
    omdb_sub_host_data: str = Field(
        default="www",
        description="Sub domain serving the data API"
    )
    omdb_sub_host_poster: str = Field(
        default="img",
        description="Sub domain serving the poster API"
    )
    omdb_timeout: float = Field(
        default=10.0,
        description="Total timeout for one OMDb request (seconds)",
        gt=0
    )
    omdb_retry_attempts: int = Field(
        default=3,
        description="Attempts per OMDb request, including the first one",
        ge=1,
        le=10
    )
    omdb_retry_delay: float = Field(
        default=0.5,
        description="Initial delay between OMDb retry attempts (seconds)",
        gt=0
    )
    omdb_retry_max_delay: float = Field(
        default=5.0,
        description="Upper bound for the OMDb retry delay (seconds)",
        gt=0
    )

    # =========================================================================
    # CORS Settings
    # =========================================================================

    cors_enabled: bool = Field(
        default=True,
        description="Enable CORS middleware"
    )
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins"
    )
    cors_allow_credentials: bool = Field(
        default=False,
        description="Allow credentials (cookies, authorization headers) in CORS"
    )
    cors_allow_methods: List[str] = Field(
        default=["GET", "OPTIONS"],
        description="Allowed HTTP methods"
    )
    cors_allow_headers: List[str] = Field(
        default=["*"],
        description="Allowed HTTP headers"
    )

    # =========================================================================
    # Rate Limiting Settings
    # =========================================================================

    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable rate limiting on the search routes"
    )
    rate_limit_requests: int = Field(
        default=60,
        description="Max requests per window",
        gt=0,
        le=10000
    )
    rate_limit_window: int = Field(
        default=60,
        description="Rate limit window (seconds)",
        gt=0,
        le=3600
    )
    rate_limit_storage_url: Optional[str] = Field(
        default=None,
        description="Redis URL for distributed rate limiting (optional)"
    )

    # =========================================================================
    # Security Settings
    # =========================================================================

    security_headers_enabled: bool = Field(
        default=True,
        description="Enable security headers (X-Frame-Options, etc.)"
    )
    security_require_https: bool = Field(
        default=False,
        description="Send HSTS header (enable behind TLS in production)"
    )
    security_hsts_max_age: int = Field(
        default=31536000,  # 1 year
        description="HSTS max age (seconds)"
    )

    # =========================================================================
    # Monitoring and Observability
    # =========================================================================

    metrics_enabled: bool = Field(
        default=True,
        description="Enable Prometheus metrics endpoint"
    )

    tracing_enabled: bool = Field(
        default=False,
        description="Enable OpenTelemetry tracing"
    )
    tracing_otlp_endpoint: str = Field(
        default="http://jaeger:4318/v1/traces",
        description="OTLP/HTTP traces endpoint"
    )
    tracing_sample_rate: float = Field(
        default=0.1,
        description="Trace sampling rate (0.0-1.0, where 1.0 = 100%)",
        ge=0.0,
        le=1.0
    )

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level: DEBUG|INFO|WARNING|ERROR|CRITICAL"
    )
    log_format: str = Field(
        default="json",
        description="Log format: json|text"
    )

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"log_level must be one of {allowed}, got: {v}")
        return v_upper

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is one of the allowed values."""
        allowed = ["development", "staging", "production"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"environment must be one of {allowed}, got: {v}")
        return v_lower

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        allowed = ["json", "text"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"log_format must be one of {allowed}, got: {v}")
        return v_lower

    @field_validator("omdb_host", "omdb_sub_host_data", "omdb_sub_host_poster")
    @classmethod
    def validate_omdb_hosts(cls, v: str) -> str:
        """Hosts are joined into URLs, so they cannot be blank."""
        v = v.strip().strip(".")
        if not v:
            raise ValueError("OMDb host and sub hosts cannot be empty")
        return v

    @field_validator("omdb_api_key")
    @classmethod
    def validate_omdb_api_key(cls, v: Optional[str]) -> Optional[str]:
        """Treat a blank key as no key at all."""
        if v is not None and not v.strip():
            return None
        return v

    @field_validator("cors_origins")
    @classmethod
    def validate_cors_origins(cls, v: List[str]) -> List[str]:
        """Validate CORS origins are not empty."""
        if not v:
            return ["*"]
        return v

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def omdb_data_url(self) -> str:
        """Base URL of the OMDb data API."""
        return f"https://{self.omdb_sub_host_data}.{self.omdb_host}"

    @property
    def omdb_poster_url(self) -> str:
        """Base URL of the OMDb poster API."""
        return f"https://{self.omdb_sub_host_poster}.{self.omdb_host}"

    @property
    def rate_limit(self) -> str:
        """Rate limit in the "<count>/<window> seconds" notation of slowapi."""
        return f"{self.rate_limit_requests}/{self.rate_limit_window} seconds"

    # =========================================================================
    # Model Config
    # =========================================================================

    model_config = SettingsConfigDict(
        env_prefix="PMOVIES_",   # Environment variable prefix
        env_file=".env",         # Load from .env file
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",          # Ignore extra environment variables
        validate_default=True,   # Validate default values
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once and shared
    across the application. Settings are loaded from:
    1. Environment variables with PMOVIES_ prefix
    2. .env file in the current directory
    3. Default values

    Returns:
        Settings: Cached settings instance

    Example:
        >>> from backend.src.config import get_settings
        >>> settings = get_settings()
        >>> print(settings.omdb_data_url)
        https://www.omdbapi.com
    """
    return Settings()


def clear_settings_cache():
    """
    Clear the settings cache.

    Useful for testing when you need to reload settings with different
    environment variables.
    """
    get_settings.cache_clear()
