"""
Circuit Breaker for the Points Sink

In-process, count-based circuit breaker shared by every outbound points call.

MECHANISM OF ACTION:
-------------------
1.  **CLOSED**: Calls are allowed. The outcome of each call is pushed into a
    sliding window of the last `sliding_window_size` outcomes. Once the window
    is full and the failure rate reaches `failure_rate_threshold`, the breaker
    transitions to OPEN.

2.  **OPEN**: Calls are rejected immediately with `CircuitBreakerOpenError`
    (fail fast, no network I/O). After `wait_duration_in_open_state` the
    breaker is HALF_OPEN; the transition is evaluated on the next access.

3.  **HALF_OPEN**: At most `permitted_calls_in_half_open_state` trial calls are
    admitted; further attempts are rejected. When every trial has reported,
    the same failure-rate rule decides:
      - rate >= threshold -> OPEN again (the wait timer restarts)
      - otherwise         -> CLOSED with an empty window

Which outcomes count as failures is decided by `record_failure_predicate`.
Everything else, including non-5xx errors, is recorded as a success.

Every transition starts a new generation. `acquire_permission` returns the
generation it admitted the call in; an outcome reported with a permission
from an earlier generation is dropped, so a slow call admitted while CLOSED
never counts as a half-open trial.

All transitions happen under one lock, so concurrent callers always get a
consistent admit/reject decision.
"""

import threading
import time
from collections import deque
from collections.abc import Callable
from typing import Any

from cart.core.config.constants import CIRCUIT_BREAKER_NAME, CircuitState, Stage
from cart.core.config.settings import Settings
from cart.core.exceptions import (
    CircuitBreakerOpenError,
    DownstreamServerError,
    DownstreamTransportError,
)
from cart.core.logging.logger import get_logger, log_stage

logger = get_logger(__name__)

StateListener = Callable[[str, CircuitState, CircuitState], None]


def downstream_failure_predicate(record_transport_errors: bool = True) -> Callable[[BaseException], bool]:
    """Build the failure classifier: 5xx always, transport errors optionally."""
    failure_types: tuple[type[BaseException], ...] = (DownstreamServerError,)
    if record_transport_errors:
        failure_types += (DownstreamTransportError,)

    def is_failure(exc: BaseException) -> bool:
        return isinstance(exc, failure_types)

    return is_failure


class CircuitBreaker:
    """
    Count-based circuit breaker.

    Usage:
        breaker = CircuitBreaker("points-sink-cb")

        permission = breaker.acquire_permission()   # raises CircuitBreakerOpenError
        try:
            result = await call()
        except Exception as exc:
            breaker.on_error(exc, permission)
            raise
        breaker.on_success(permission)
    """

    def __init__(
        self,
        name: str,
        failure_rate_threshold: float = 50.0,
        sliding_window_size: int = 5,
        wait_duration_in_open_state: float = 1.0,
        permitted_calls_in_half_open_state: int = 2,
        record_failure_predicate: Callable[[BaseException], bool] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if sliding_window_size <= 0:
            raise ValueError("sliding_window_size must be positive")
        if permitted_calls_in_half_open_state <= 0:
            raise ValueError("permitted_calls_in_half_open_state must be positive")

        self.name = name
        self._threshold = failure_rate_threshold
        self._window_size = sliding_window_size
        self._wait_duration = wait_duration_in_open_state
        self._permitted_half_open = permitted_calls_in_half_open_state
        self._is_failure = record_failure_predicate or downstream_failure_predicate()
        self._clock = clock

        self._lock = threading.Lock()
        self._state = CircuitState.CLOSED
        self._generation = 0
        # True = failure, False = success
        self._window: deque[bool] = deque(maxlen=sliding_window_size)
        self._trials: list[bool] = []
        self._half_open_permits = 0
        self._opened_at = 0.0
        self._not_permitted = 0
        self._listeners: list[StateListener] = []

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "CircuitBreaker":
        cb = settings.circuit_breaker
        kwargs.setdefault(
            "record_failure_predicate",
            downstream_failure_predicate(cb.CB_RECORD_TRANSPORT_ERRORS),
        )
        return cls(
            CIRCUIT_BREAKER_NAME,
            failure_rate_threshold=cb.CB_FAILURE_RATE_THRESHOLD,
            sliding_window_size=cb.CB_SLIDING_WINDOW_SIZE,
            wait_duration_in_open_state=cb.CB_WAIT_DURATION_IN_OPEN_STATE,
            permitted_calls_in_half_open_state=cb.CB_PERMITTED_CALLS_IN_HALF_OPEN_STATE,
            **kwargs,
        )

    def add_state_listener(self, listener: StateListener) -> None:
        """Register `listener(name, from_state, to_state)` for transitions."""
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # State handling (caller holds the lock)
    # ------------------------------------------------------------------

    def _transition(self, new_state: CircuitState) -> list[tuple[CircuitState, CircuitState]]:
        old_state = self._state
        if old_state == new_state:
            return []

        self._state = new_state
        self._generation += 1
        if new_state == CircuitState.OPEN:
            self._opened_at = self._clock()
            self._trials.clear()
        elif new_state == CircuitState.HALF_OPEN:
            self._half_open_permits = self._permitted_half_open
            self._trials.clear()
        else:
            self._window.clear()
            self._trials.clear()
        return [(old_state, new_state)]

    def _current_state(self) -> list[tuple[CircuitState, CircuitState]]:
        if (
            self._state == CircuitState.OPEN
            and self._clock() - self._opened_at >= self._wait_duration
        ):
            return self._transition(CircuitState.HALF_OPEN)
        return []

    @staticmethod
    def _failure_rate(outcomes) -> float:
        if not outcomes:
            return 0.0
        return sum(1 for failed in outcomes if failed) * 100.0 / len(outcomes)

    def _notify(self, transitions: list[tuple[CircuitState, CircuitState]]) -> None:
        for old_state, new_state in transitions:
            log_stage(
                logger,
                Stage.CIRCUIT_BREAKER,
                "circuit_breaker_state_changed",
                level="error" if new_state == CircuitState.OPEN else "info",
                circuit_breaker=self.name,
                from_state=old_state.value,
                to_state=new_state.value,
            )
            for listener in self._listeners:
                listener(self.name, old_state, new_state)

    # ------------------------------------------------------------------
    # Admission
    # ------------------------------------------------------------------

    @property
    def state(self) -> CircuitState:
        with self._lock:
            transitions = self._current_state()
            state = self._state
        self._notify(transitions)
        return state

    def _admit(self) -> int | None:
        """Admit one call; return its generation, or None when rejected."""
        with self._lock:
            transitions = self._current_state()
            if self._state == CircuitState.CLOSED:
                permission = self._generation
            elif self._state == CircuitState.HALF_OPEN and self._half_open_permits > 0:
                self._half_open_permits -= 1
                permission = self._generation
            else:
                self._not_permitted += 1
                permission = None
        self._notify(transitions)
        return permission

    def try_acquire_permission(self) -> bool:
        """Return True when a call may proceed; never raises."""
        return self._admit() is not None

    def acquire_permission(self) -> int:
        """
        Admit one call or raise.

        Returns:
            The permission to pass back with the call's outcome

        Raises:
            CircuitBreakerOpenError: while OPEN, or HALF_OPEN with no trial left
        """
        permission = self._admit()
        if permission is None:
            raise CircuitBreakerOpenError(
                message=f"Circuit '{self.name}' is {self._state.value} and does not permit further calls",
                details={"circuit_breaker": self.name, "state": self._state.value},
            )
        return permission

    def release_permission(self, permission: int | None = None) -> None:
        """Give back a permission that was acquired but never used for a call."""
        with self._lock:
            if self._is_stale(permission):
                return
            if self._state == CircuitState.HALF_OPEN:
                self._half_open_permits = min(
                    self._half_open_permits + 1, self._permitted_half_open
                )

    # ------------------------------------------------------------------
    # Outcome recording
    # ------------------------------------------------------------------

    def _is_stale(self, permission: int | None) -> bool:
        return permission is not None and permission != self._generation

    def _record(self, failed: bool, permission: int | None) -> None:
        with self._lock:
            transitions = self._current_state()

            if self._is_stale(permission):
                # Admitted before the last transition; that state's decision is made
                log_stage(
                    logger,
                    Stage.CIRCUIT_BREAKER,
                    "circuit_breaker_stale_outcome_dropped",
                    level="debug",
                    circuit_breaker=self.name,
                    failed=failed,
                    state=self._state.value,
                )

            elif self._state == CircuitState.CLOSED:
                self._window.append(failed)
                if (
                    len(self._window) == self._window_size
                    and self._failure_rate(self._window) >= self._threshold
                ):
                    log_stage(
                        logger,
                        Stage.CIRCUIT_BREAKER,
                        "circuit_breaker_threshold_reached",
                        level="warning",
                        circuit_breaker=self.name,
                        failure_rate=self._failure_rate(self._window),
                        window_size=self._window_size,
                    )
                    transitions += self._transition(CircuitState.OPEN)

            elif self._state == CircuitState.HALF_OPEN:
                self._trials.append(failed)
                if len(self._trials) >= self._permitted_half_open:
                    if self._failure_rate(self._trials) >= self._threshold:
                        transitions += self._transition(CircuitState.OPEN)
                    else:
                        transitions += self._transition(CircuitState.CLOSED)

            # Results arriving while OPEN belong to calls admitted earlier; ignored

        self._notify(transitions)

    def on_success(self, permission: int | None = None) -> None:
        self._record(False, permission)

    def on_error(self, exc: BaseException, permission: int | None = None) -> None:
        """Record a failed call; non-failures per the predicate count as successes."""
        failed = self._is_failure(exc)
        if failed:
            log_stage(
                logger,
                Stage.CIRCUIT_BREAKER,
                "circuit_breaker_recorded_failure",
                level="warning",
                circuit_breaker=self.name,
                error_type=type(exc).__name__,
            )
        self._record(failed, permission)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def metrics(self) -> dict[str, Any]:
        with self._lock:
            transitions = self._current_state()
            outcomes = list(self._window if self._state == CircuitState.CLOSED else self._trials)
            stats = {
                "name": self.name,
                "state": self._state.value,
                "failure_rate": self._failure_rate(outcomes),
                "buffered_calls": len(outcomes),
                "failed_calls": sum(1 for failed in outcomes if failed),
                "not_permitted_calls": self._not_permitted,
                "sliding_window_size": self._window_size,
                "failure_rate_threshold": self._threshold,
            }
        self._notify(transitions)
        return stats

    def reset(self) -> None:
        """Force CLOSED with an empty window; outstanding permissions go stale."""
        with self._lock:
            transitions = self._transition(CircuitState.CLOSED)
            self._generation += 1
            self._window.clear()
            self._trials.clear()
            self._not_permitted = 0
        self._notify(transitions)
