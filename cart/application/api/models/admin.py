"""
Admin API Response Models
"""

from typing import Any

from pydantic import BaseModel, Field


class RefreshResponse(BaseModel):
    """Result of a configuration refresh."""

    menu_version: int = Field(..., ge=0, description="Number of menu installs so far")
    coffees: list[str] = Field(default_factory=list, description="Published coffee names")


class ResilienceResponse(BaseModel):
    """State of the outbound resilience gates; None when a gate is disabled."""

    circuit_breaker: dict[str, Any] | None = None
    rate_limiter: dict[str, Any] | None = None
    retry_max_attempts: int = Field(..., ge=1)
    pending_background_tasks: int = Field(..., ge=0)
