"""Retry and circuit-breaker policies for upstream calls.

Both are plain objects composed explicitly by :func:`resilient`; the breaker
sits outside the retry loop, so one logical call records one outcome no
matter how many attempts it took.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
import functools
import logging
import time
from threading import Lock
from typing import Any, Callable, Deque, Optional, TypeVar

from tenacity import RetryCallState, Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from aviation_wrapper.errors import ServiceUnavailableError, TransientUpstreamError


logger = logging.getLogger(__name__)

R = TypeVar("R")


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    initial_backoff_seconds: float = 0.5
    multiplier: float = 2.0
    max_backoff_seconds: float = 10.0

    def retrying(self, sleep: Callable[[float], None] = time.sleep) -> Retrying:
        """Fresh tenacity controller: retries TransientUpstreamError only, re-raising the last one."""
        return Retrying(
            stop=stop_after_attempt(max(1, self.max_attempts)),
            wait=wait_exponential(
                multiplier=self.initial_backoff_seconds,
                exp_base=self.multiplier,
                max=self.max_backoff_seconds,
            ),
            retry=retry_if_exception_type(TransientUpstreamError),
            before_sleep=self._log_retry,
            sleep=sleep,
            reraise=True,
        )

    def call(
        self,
        fn: Callable[..., R],
        *args: Any,
        sleep: Callable[[float], None] = time.sleep,
        **kwargs: Any,
    ) -> R:
        return self.retrying(sleep)(fn, *args, **kwargs)

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.warning(
            "Transient upstream failure (attempt %d/%d), retrying in %.2fs: %s",
            retry_state.attempt_number,
            self.max_attempts,
            delay,
            getattr(error, "message", error),
            extra={"attempt": retry_state.attempt_number},
        )


class CircuitState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """Count-based sliding-window breaker shared by every caller of one upstream.

    ``acquire`` hands out the current generation, which changes on every state
    transition. Outcomes reported against an older generation are dropped, so a
    call admitted before the breaker opened cannot count as a half-open trial.
    """

    def __init__(
        self,
        *,
        name: str = "aviation-api",
        window_size: int = 10,
        minimum_calls: int = 5,
        failure_rate_threshold: float = 0.5,
        open_seconds: float = 30.0,
        half_open_max_calls: int = 1,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.name = name
        self.window_size = max(1, window_size)
        self.minimum_calls = max(1, min(minimum_calls, self.window_size))
        self.failure_rate_threshold = failure_rate_threshold
        self.open_seconds = open_seconds
        self.half_open_max_calls = max(1, half_open_max_calls)
        self._clock = clock

        self._lock = Lock()
        self._state = CircuitState.CLOSED
        self._generation = 0
        # True = failure
        self._window: Deque[bool] = deque(maxlen=self.window_size)
        self._opened_at = 0.0
        self._half_open_in_flight = 0

    @property
    def state(self) -> CircuitState:
        with self._lock:
            self._maybe_half_open_locked()
            return self._state

    def acquire(self) -> Optional[int]:
        """Reserve permission for one call.

        Returns the generation to report the outcome against, or None when the
        call must be rejected without touching upstream.
        """
        with self._lock:
            self._maybe_half_open_locked()
            if self._state is CircuitState.OPEN:
                return None
            if self._state is CircuitState.HALF_OPEN:
                if self._half_open_in_flight >= self.half_open_max_calls:
                    return None
                self._half_open_in_flight += 1
            return self._generation

    def record_success(self, generation: Optional[int] = None) -> None:
        with self._lock:
            if not self._current_locked(generation):
                return
            if self._state is CircuitState.HALF_OPEN:
                self._close_locked()
            elif self._state is CircuitState.CLOSED:
                self._window.append(False)

    def record_failure(self, generation: Optional[int] = None) -> None:
        with self._lock:
            if not self._current_locked(generation):
                return
            if self._state is CircuitState.HALF_OPEN:
                self._open_locked()
            elif self._state is CircuitState.CLOSED:
                self._window.append(True)
                if len(self._window) >= self.minimum_calls and self._failure_rate_locked() >= self.failure_rate_threshold:
                    self._open_locked()

    def release(self, generation: Optional[int] = None) -> None:
        """Give back a half-open permit whose call recorded no outcome."""
        with self._lock:
            if self._current_locked(generation) and self._state is CircuitState.HALF_OPEN:
                self._half_open_in_flight -= 1

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            self._maybe_half_open_locked()
            return {
                "name": self.name,
                "state": self._state.value,
                "calls": len(self._window),
                "failures": sum(self._window),
                "failure_rate": round(self._failure_rate_locked(), 3),
            }

    def _current_locked(self, generation: Optional[int]) -> bool:
        # None reports against whatever state is current.
        self._maybe_half_open_locked()
        if generation is None or generation == self._generation:
            return True
        logger.debug("Circuit breaker %s ignoring outcome from generation %d", self.name, generation)
        return False

    def _failure_rate_locked(self) -> float:
        if not self._window:
            return 0.0
        return sum(self._window) / len(self._window)

    def _transition_locked(self, state: CircuitState) -> None:
        self._state = state
        self._generation += 1
        self._half_open_in_flight = 0

    def _maybe_half_open_locked(self) -> None:
        if self._state is CircuitState.OPEN and self._clock() - self._opened_at >= self.open_seconds:
            self._transition_locked(CircuitState.HALF_OPEN)
            logger.info("Circuit breaker %s half-open", self.name, extra={"breaker_state": "half_open"})

    def _open_locked(self) -> None:
        self._transition_locked(CircuitState.OPEN)
        self._opened_at = self._clock()
        logger.warning(
            "Circuit breaker %s opened (failure rate %.2f)",
            self.name,
            self._failure_rate_locked(),
            extra={"breaker_state": "open"},
        )

    def _close_locked(self) -> None:
        self._transition_locked(CircuitState.CLOSED)
        self._window.clear()
        logger.info("Circuit breaker %s closed", self.name, extra={"breaker_state": "closed"})


def resilient(
    *,
    breaker: CircuitBreaker,
    retry: RetryPolicy,
    sleep: Callable[[float], None] = time.sleep,
) -> Callable[[Callable[..., R]], Callable[..., R]]:
    """Wrap a single-attempt upstream call with retry inside a circuit breaker.

    - breaker rejects -> ServiceUnavailableError, the call is never made
    - retries exhausted -> failure recorded, ServiceUnavailableError raised
    - any other error (ProtocolError included) -> propagated, no outcome recorded
    - anything else returned -> success recorded
    """

    def decorator(fn: Callable[..., R]) -> Callable[..., R]:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> R:
            generation = breaker.acquire()
            if generation is None:
                logger.warning(
                    "Circuit breaker %s rejected call",
                    breaker.name,
                    extra={"breaker_state": breaker.state.value},
                )
                raise ServiceUnavailableError()
            try:
                result = retry.retrying(sleep)(fn, *args, **kwargs)
            except TransientUpstreamError as e:
                breaker.record_failure(generation)
                raise ServiceUnavailableError() from e
            except BaseException:
                breaker.release(generation)
                raise
            breaker.record_success(generation)
            return result

        return wrapper

    return decorator
