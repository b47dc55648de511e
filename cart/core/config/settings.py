#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

This module provides type-safe, environment-based configuration for the cart
service. Values are read from environment variables or a `.env` file.

Configuration keys map to environment variables:
- cart.points-sink-url -> CART_POINTS_SINK_URL
- cart.coffees         -> CART_COFFEES

Resilience tunables (rate limiter, circuit breaker, retry) default to the
values the points sink integration was sized for.
"""

from typing import Literal

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cart.core.exceptions import ConfigurationError


class CartSettings(BaseSettings):
    """
    Cart domain configuration.

    CART_COFFEES is re-read on every refresh event; a missing value aborts
    the refresh and keeps the current menu.
    """

    CART_POINTS_SINK_URL: str = Field(..., description="Absolute URL of the points sink")
    CART_COFFEES: str | None = Field(default=None, description="Semicolon-delimited coffee names")
    POINTS_SINK_TIMEOUT: float = Field(default=10.0, description="Points sink request timeout in seconds")
    MENU_PERSISTENCE_ENABLED: bool = Field(default=True, description="Mirror the menu into the cafe table")
    AWAIT_POINTS_SYNC: bool = Field(default=True, description="Order handler waits for the points pipeline")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class RateLimiterSettings(BaseSettings):
    """
    Outbound rate limiter configuration.

    At most RL_LIMIT_FOR_PERIOD calls per RL_REFRESH_PERIOD; a caller waits at
    most RL_TIMEOUT for the next window before being refused.
    """

    RL_ENABLED: bool = Field(default=True, description="Enable the outbound rate limiter")
    RL_LIMIT_FOR_PERIOD: int = Field(default=10, description="Permits per refresh period")
    RL_REFRESH_PERIOD: float = Field(default=1.0, description="Refresh period in seconds")
    RL_TIMEOUT: float = Field(default=0.025, description="Max wait for a permit in seconds")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class CircuitBreakerSettings(BaseSettings):
    """
    Circuit breaker configuration for the points sink.

    Count-based sliding window; failure rate is a percentage.
    """

    CB_ENABLED: bool = Field(default=True, description="Enable the outbound circuit breaker")
    CB_FAILURE_RATE_THRESHOLD: float = Field(default=50.0, description="Failure rate (%) that opens the circuit")
    CB_SLIDING_WINDOW_SIZE: int = Field(default=5, description="Number of calls in the sliding window")
    CB_WAIT_DURATION_IN_OPEN_STATE: float = Field(default=1.0, description="Seconds to stay open")
    CB_PERMITTED_CALLS_IN_HALF_OPEN_STATE: int = Field(default=2, description="Trial calls in half-open")
    CB_RECORD_TRANSPORT_ERRORS: bool = Field(
        default=True, description="Count connection failures and timeouts as failures"
    )

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class RetrySettings(BaseSettings):
    """Retry-with-backoff configuration for points sink calls."""

    RETRY_ENABLED: bool = Field(default=True, description="Retry failed points sink calls")
    RETRY_MAX_ATTEMPTS: int = Field(default=5, description="Total attempts including the first")
    RETRY_INITIAL_DELAY: float = Field(default=1.0, description="Delay before the first retry in seconds")
    RETRY_MAX_DELAY: float = Field(default=30.0, description="Upper bound for a single backoff delay")
    RETRY_JITTER: float = Field(default=0.0, description="Random jitter added to each delay (seconds)")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class DatabaseSettings(BaseSettings):
    """Relational store configuration (SQLAlchemy async URL)."""

    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./cart.db", description="Database URL")
    DATABASE_ECHO: bool = Field(default=False, description="Echo SQL statements")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class LoggingSettings(BaseSettings):
    """Logging configuration for structured logging."""

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class ApplicationSettings(BaseSettings):
    """General application settings."""

    ENVIRONMENT: Literal["development", "staging", "production", "test"] = Field(
        default="development",
        description="Application environment"
    )
    APP_NAME: str = Field(default="Cart Service", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8080, description="API port")
    API_BASE_PATH: str = Field(default="/cart", description="Prefix for all routes")
    SHUTDOWN_DRAIN_TIMEOUT: float = Field(
        default=10.0, description="Seconds to wait for background tasks on shutdown"
    )

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    Usage:
        from cart.core.config import get_settings

        settings = get_settings()
        sink_url = settings.cart.CART_POINTS_SINK_URL
        limit = settings.rate_limiter.RL_LIMIT_FOR_PERIOD
    """

    # Cart settings
    CART_POINTS_SINK_URL: str = Field(..., description="Absolute URL of the points sink")
    CART_COFFEES: str | None = Field(default=None, description="Semicolon-delimited coffee names")
    POINTS_SINK_TIMEOUT: float = Field(default=10.0, description="Points sink request timeout in seconds")
    MENU_PERSISTENCE_ENABLED: bool = Field(default=True, description="Mirror the menu into the cafe table")
    AWAIT_POINTS_SYNC: bool = Field(default=True, description="Order handler waits for the points pipeline")

    # Rate limiter settings
    RL_ENABLED: bool = Field(default=True, description="Enable the outbound rate limiter")
    RL_LIMIT_FOR_PERIOD: int = Field(default=10, gt=0, description="Permits per refresh period")
    RL_REFRESH_PERIOD: float = Field(default=1.0, gt=0, description="Refresh period in seconds")
    RL_TIMEOUT: float = Field(default=0.025, ge=0, description="Max wait for a permit in seconds")

    # Circuit breaker settings
    CB_ENABLED: bool = Field(default=True, description="Enable the outbound circuit breaker")
    CB_FAILURE_RATE_THRESHOLD: float = Field(
        default=50.0, gt=0, le=100, description="Failure rate (%) that opens the circuit"
    )
    CB_SLIDING_WINDOW_SIZE: int = Field(default=5, gt=0, description="Number of calls in the sliding window")
    CB_WAIT_DURATION_IN_OPEN_STATE: float = Field(default=1.0, ge=0, description="Seconds to stay open")
    CB_PERMITTED_CALLS_IN_HALF_OPEN_STATE: int = Field(default=2, gt=0, description="Trial calls in half-open")
    CB_RECORD_TRANSPORT_ERRORS: bool = Field(
        default=True, description="Count connection failures and timeouts as failures"
    )

    # Retry settings
    RETRY_ENABLED: bool = Field(default=True, description="Retry failed points sink calls")
    RETRY_MAX_ATTEMPTS: int = Field(default=5, gt=0, description="Total attempts including the first")
    RETRY_INITIAL_DELAY: float = Field(default=1.0, ge=0, description="Delay before the first retry in seconds")
    RETRY_MAX_DELAY: float = Field(default=30.0, ge=0, description="Upper bound for a single backoff delay")
    RETRY_JITTER: float = Field(default=0.0, ge=0, description="Random jitter added to each delay (seconds)")

    # Database settings
    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./cart.db", description="Database URL")
    DATABASE_ECHO: bool = Field(default=False, description="Echo SQL statements")

    # Logging settings
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    # Application settings
    ENVIRONMENT: Literal["development", "staging", "production", "test"] = Field(
        default="development",
        description="Application environment"
    )
    APP_NAME: str = Field(default="Cart Service", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8080, description="API port")
    API_BASE_PATH: str = Field(default="/cart", description="Prefix for all routes")
    SHUTDOWN_DRAIN_TIMEOUT: float = Field(
        default=10.0, ge=0, description="Seconds to wait for background tasks on shutdown"
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @field_validator("CART_POINTS_SINK_URL")
    @classmethod
    def validate_points_sink_url(cls, v):
        """The sink URL must be absolute."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("CART_POINTS_SINK_URL must be an absolute http(s) URL")
        return v

    @model_validator(mode="after")
    def check_retry_delays(self):
        """A delay cap below the initial delay would flatten the backoff."""
        if self.RETRY_MAX_DELAY < self.RETRY_INITIAL_DELAY:
            raise ValueError("RETRY_MAX_DELAY must be >= RETRY_INITIAL_DELAY")
        return self

    # Grouped views
    @property
    def cart(self) -> 'CartSettings':
        """Get cart domain settings."""
        return CartSettings(
            CART_POINTS_SINK_URL=self.CART_POINTS_SINK_URL,
            CART_COFFEES=self.CART_COFFEES,
            POINTS_SINK_TIMEOUT=self.POINTS_SINK_TIMEOUT,
            MENU_PERSISTENCE_ENABLED=self.MENU_PERSISTENCE_ENABLED,
            AWAIT_POINTS_SYNC=self.AWAIT_POINTS_SYNC,
        )

    @property
    def rate_limiter(self) -> 'RateLimiterSettings':
        """Get rate limiter settings."""
        return RateLimiterSettings(
            RL_ENABLED=self.RL_ENABLED,
            RL_LIMIT_FOR_PERIOD=self.RL_LIMIT_FOR_PERIOD,
            RL_REFRESH_PERIOD=self.RL_REFRESH_PERIOD,
            RL_TIMEOUT=self.RL_TIMEOUT,
        )

    @property
    def circuit_breaker(self) -> 'CircuitBreakerSettings':
        """Get circuit breaker settings."""
        return CircuitBreakerSettings(
            CB_ENABLED=self.CB_ENABLED,
            CB_FAILURE_RATE_THRESHOLD=self.CB_FAILURE_RATE_THRESHOLD,
            CB_SLIDING_WINDOW_SIZE=self.CB_SLIDING_WINDOW_SIZE,
            CB_WAIT_DURATION_IN_OPEN_STATE=self.CB_WAIT_DURATION_IN_OPEN_STATE,
            CB_PERMITTED_CALLS_IN_HALF_OPEN_STATE=self.CB_PERMITTED_CALLS_IN_HALF_OPEN_STATE,
            CB_RECORD_TRANSPORT_ERRORS=self.CB_RECORD_TRANSPORT_ERRORS,
        )

    @property
    def retry(self) -> 'RetrySettings':
        """Get retry settings."""
        return RetrySettings(
            RETRY_ENABLED=self.RETRY_ENABLED,
            RETRY_MAX_ATTEMPTS=self.RETRY_MAX_ATTEMPTS,
            RETRY_INITIAL_DELAY=self.RETRY_INITIAL_DELAY,
            RETRY_MAX_DELAY=self.RETRY_MAX_DELAY,
            RETRY_JITTER=self.RETRY_JITTER,
        )

    @property
    def database(self) -> 'DatabaseSettings':
        """Get database settings."""
        return DatabaseSettings(
            DATABASE_URL=self.DATABASE_URL,
            DATABASE_ECHO=self.DATABASE_ECHO,
        )

    @property
    def logging(self) -> 'LoggingSettings':
        """Get logging settings."""
        return LoggingSettings(
            LOG_LEVEL=self.LOG_LEVEL,
            LOG_FORMAT=self.LOG_FORMAT,
        )

    @property
    def app(self) -> 'ApplicationSettings':
        """Get application settings."""
        return ApplicationSettings(
            ENVIRONMENT=self.ENVIRONMENT,
            APP_NAME=self.APP_NAME,
            APP_VERSION=self.APP_VERSION,
            API_HOST=self.API_HOST,
            API_PORT=self.API_PORT,
            API_BASE_PATH=self.API_BASE_PATH,
            SHUTDOWN_DRAIN_TIMEOUT=self.SHUTDOWN_DRAIN_TIMEOUT,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # Ignore extra environment variables
    )


# Global settings instance (singleton pattern)
_settings: Settings | None = None


def _load_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigurationError(
            "Invalid configuration",
            details={"errors": [
                {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
                for err in e.errors()
            ]},
        ) from e


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    Returns:
        Settings: Global settings instance

    Raises:
        ConfigurationError: if the environment does not validate
    """
    global _settings

    if _settings is None:
        _settings = _load_settings()

    return _settings


def reload_settings() -> Settings:
    """
    Re-read configuration from the environment.

    Called before a CONFIG_REFRESHED event is published so listeners observe
    the new values.

    Returns:
        Settings: New settings instance

    Raises:
        ConfigurationError: if the environment does not validate; the
            previous settings stay in effect
    """
    global _settings
    _settings = _load_settings()
    return _settings
