"""
System Constants and Enumerations

This module defines system-wide constants and enumerations used across
the cart service.
"""

from enum import Enum

# ============================================================================
# Stage Identifiers (for structured logging)
# ============================================================================


class Stage(str, Enum):
    """
    Order processing stages used in log records.

    Format: {SEQUENCE}_{DESCRIPTIVE_NAME}
    - SEQUENCE: Numeric order (1.0, 2.0) or alphabetic prefix (CB, RL, R)
    - DESCRIPTIVE_NAME: Uppercase description with underscores
    """

    # Order lifecycle
    PERSIST_ORDER = "1.0_PERSIST_ORDER"
    BUILD_PAYLOAD = "2.0_BUILD_PAYLOAD"
    POINTS_POST = "3.0_POINTS_POST"
    ERROR_SWALLOW = "4.0_ERROR_SWALLOW"

    # Cross-cutting concerns
    RETRY = "R_RETRY_BACKOFF"
    RATE_LIMITER = "RL_RATE_LIMITER"
    CIRCUIT_BREAKER = "CB_CIRCUIT_BREAKER"

    # Menu
    MENU_REFRESH = "M_MENU_REFRESH"
    MENU_STORE_SYNC = "M_MENU_STORE_SYNC"


# ============================================================================
# Circuit Breaker States
# ============================================================================


class CircuitState(str, Enum):
    """
    Circuit breaker states.

    CLOSED: Normal operation, calls allowed
    OPEN: Failing fast, calls rejected
    HALF_OPEN: Testing recovery, limited trial calls
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


# ============================================================================
# Points Sync Outcomes
# ============================================================================


class SyncOutcome(str, Enum):
    """Terminal outcome of one order's points notification."""

    DELIVERED = "delivered"
    CIRCUIT_OPEN = "circuit_open"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    CLIENT_ERROR = "client_error"
    TRANSPORT_ERROR = "transport_error"
    UNEXPECTED_ERROR = "unexpected_error"


# ============================================================================
# Names and Headers
# ============================================================================

POINTS_SINK_NAME = "points-sink"
RATE_LIMITER_NAME = "points-sink-rl"
CIRCUIT_BREAKER_NAME = "points-sink-cb"

COFFEE_DELIMITER = ";"

HEADER_REQUEST_ID = "X-Request-ID"
