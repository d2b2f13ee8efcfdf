"""
Retry helpers for the I/O edges of the scoring engine.

The scoring functions themselves are pure and never retried. Matching
record writes and media store lookups go through these helpers so that
transient store or network failures reach the caller as RetryError.
"""

import time
import functools
from typing import Callable, Type, Tuple, Optional
from datetime import datetime

import requests
from sqlalchemy.exc import OperationalError, DisconnectionError


class RetryError(Exception):
    """Raised when all retry attempts are exhausted.

    The failure is retryable from the caller's point of view: the
    operation may succeed if attempted again later.
    """

    retryable = True

    def __init__(self, message: str, attempts: int = 0, last_exception: Optional[BaseException] = None):
        super().__init__(message)
        self.attempts = attempts
        self.last_exception = last_exception


class CircuitOpenError(Exception):
    """Raised when a call is rejected because the circuit is open."""

    retryable = True


def exponential_backoff(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    on_retry: Optional[Callable] = None,
):
    """
    Decorator for retrying functions with exponential backoff.

    Args:
        max_retries: Maximum number of retry attempts (0 = no retries)
        base_delay: Initial delay in seconds
        max_delay: Maximum delay between retries in seconds
        exponential_base: Base for exponential calculation (delay *= base)
        exceptions: Tuple of exceptions to catch and retry
        on_retry: Optional callback function(attempt, exception, delay)

    Exceptions outside ``exceptions`` propagate unchanged on first failure.

    Example:
        @exponential_backoff(max_retries=3, exceptions=(OperationalError,))
        def write(session, record):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            delay = base_delay

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt >= max_retries:
                        raise RetryError(
                            f"Failed after {max_retries + 1} attempts: {e}",
                            attempts=attempt + 1,
                            last_exception=e,
                        ) from e

                    current_delay = min(delay, max_delay)
                    if on_retry:
                        on_retry(attempt + 1, e, current_delay)
                    time.sleep(current_delay)
                    delay *= exponential_base

        return wrapper
    return decorator


def retry_call(
    func: Callable,
    *args,
    max_retries: int = 3,
    base_delay: float = 0.1,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    on_retry: Optional[Callable] = None,
    **kwargs,
):
    """Call ``func`` under exponential_backoff with per-call settings."""
    wrapped = exponential_backoff(
        max_retries=max_retries,
        base_delay=base_delay,
        exceptions=exceptions,
        on_retry=on_retry,
    )(func)
    return wrapped(*args, **kwargs)


class CircuitBreaker:
    """
    Circuit breaker guarding calls to an external store.

    States:
    - CLOSED: Normal operation, requests pass through
    - OPEN: Too many failures, requests are blocked
    - HALF_OPEN: Testing if service has recovered
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 60,
        expected_exception: Type[Exception] = Exception,
    ):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.expected_exception = expected_exception

        self.failure_count = 0
        self.last_failure_time: Optional[datetime] = None
        self.state = self.CLOSED

    def call(self, func: Callable, *args, **kwargs):
        """
        Execute function with circuit breaker protection.

        Raises:
            CircuitOpenError: If circuit is OPEN
            Original exception: If function fails in CLOSED/HALF_OPEN state
        """
        if self.state == self.OPEN:
            if self._should_attempt_reset():
                self.state = self.HALF_OPEN
            else:
                raise CircuitOpenError(
                    f"Circuit breaker is OPEN. Retry after {self._time_until_reset():.0f}s"
                )

        try:
            result = func(*args, **kwargs)
        except self.expected_exception:
            self._on_failure()
            raise
        self._on_success()
        return result

    def _elapsed(self) -> float:
        return (datetime.now() - self.last_failure_time).total_seconds()

    def _should_attempt_reset(self) -> bool:
        if self.last_failure_time is None:
            return True
        return self._elapsed() >= self.recovery_timeout

    def _time_until_reset(self) -> float:
        if self.last_failure_time is None:
            return 0
        return max(0, self.recovery_timeout - self._elapsed())

    def _on_success(self):
        self.failure_count = 0
        self.state = self.CLOSED

    def _on_failure(self):
        self.failure_count += 1
        self.last_failure_time = datetime.now()
        if self.state == self.HALF_OPEN or self.failure_count >= self.failure_threshold:
            self.state = self.OPEN

    def reset(self):
        """Manually reset the circuit breaker."""
        self.failure_count = 0
        self.last_failure_time = None
        self.state = self.CLOSED


TRANSIENT_STORE_MESSAGES = (
    "database is locked",
    "database is busy",
    "disk i/o error",
    "timeout",
    "connection",
)


def is_transient_error(exception: BaseException) -> bool:
    """
    Determine if an exception is likely transient and worth retrying.

    Network timeouts and connection errors are always transient. Store
    errors are transient when the driver reports locking, I/O or
    connectivity problems.
    """
    if isinstance(exception, (requests.exceptions.Timeout, requests.exceptions.ConnectionError)):
        return True
    if isinstance(exception, DisconnectionError):
        return True
    if isinstance(exception, (RetryError, CircuitOpenError)):
        return True

    error_str = str(exception).lower()
    if isinstance(exception, OperationalError):
        return any(keyword in error_str for keyword in TRANSIENT_STORE_MESSAGES)

    return any(
        keyword in error_str
        for keyword in ("timed out", "connection reset", "service unavailable", "temporary failure")
    )


def should_retry_http_status(status_code: int) -> bool:
    """Check if HTTP status code indicates a retryable error."""
    retryable_codes = {
        408,  # Request Timeout
        429,  # Too Many Requests
        500,
        502,
        503,
        504,
    }

    return status_code in retryable_codes
