"""
Tests for retry logic and circuit breaker.
"""

import pytest
import requests
from sqlalchemy.exc import OperationalError

from jobmatch.retry import (
    exponential_backoff,
    retry_call,
    CircuitBreaker,
    CircuitOpenError,
    is_transient_error,
    should_retry_http_status,
    RetryError,
)


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr("jobmatch.retry.time.sleep", lambda seconds: None)


class TestExponentialBackoff:
    """Test exponential backoff decorator."""

    def test_success_on_first_try(self):
        """Function that succeeds immediately should not retry."""
        call_count = [0]

        @exponential_backoff(max_retries=3, base_delay=0.1)
        def succeeds():
            call_count[0] += 1
            return "success"

        assert succeeds() == "success"
        assert call_count[0] == 1

    def test_retry_then_succeed(self):
        """Function that fails then succeeds should retry."""
        call_count = [0]

        @exponential_backoff(max_retries=3, base_delay=0.01)
        def fails_twice():
            call_count[0] += 1
            if call_count[0] < 3:
                raise ConnectionError("Temporary failure")
            return "success"

        assert fails_twice() == "success"
        assert call_count[0] == 3

    def test_all_retries_exhausted(self):
        """Should raise RetryError carrying the last failure."""
        call_count = [0]

        @exponential_backoff(max_retries=2, base_delay=0.01)
        def always_fails():
            call_count[0] += 1
            raise ValueError("Always fails")

        with pytest.raises(RetryError) as exc_info:
            always_fails()

        assert call_count[0] == 3  # Initial + 2 retries
        assert exc_info.value.attempts == 3
        assert isinstance(exc_info.value.last_exception, ValueError)
        assert exc_info.value.__cause__ is exc_info.value.last_exception
        assert exc_info.value.retryable is True

    def test_only_catches_specified_exceptions(self):
        """Should only retry on specified exception types."""
        call_count = [0]

        @exponential_backoff(max_retries=3, base_delay=0.01, exceptions=(ConnectionError,))
        def raises_value_error():
            call_count[0] += 1
            raise ValueError("Not retryable")

        with pytest.raises(ValueError):
            raises_value_error()

        assert call_count[0] == 1

    def test_exponential_delay(self):
        """Delay should increase exponentially."""
        delays = []

        @exponential_backoff(
            max_retries=3,
            base_delay=0.01,
            exponential_base=2.0,
            on_retry=lambda attempt, exc, delay: delays.append(delay),
        )
        def always_fails():
            raise ConnectionError("Test")

        with pytest.raises(RetryError):
            always_fails()

        assert delays == [0.01, 0.02, 0.04]

    def test_max_delay_cap(self):
        """Delay should not exceed max_delay."""
        delays = []

        @exponential_backoff(
            max_retries=5,
            base_delay=1.0,
            max_delay=2.0,
            exponential_base=3.0,
            on_retry=lambda attempt, exc, delay: delays.append(delay),
        )
        def always_fails():
            raise ConnectionError("Test")

        with pytest.raises(RetryError):
            always_fails()

        assert all(d <= 2.0 for d in delays)

    def test_zero_retries(self):
        """max_retries=0 should try exactly once."""
        call_count = [0]

        @exponential_backoff(max_retries=0)
        def fails():
            call_count[0] += 1
            raise ConnectionError("Test")

        with pytest.raises(RetryError):
            fails()

        assert call_count[0] == 1


class TestRetryCall:
    """Test the per-call retry wrapper."""

    def test_passes_arguments(self):
        def add(a, b, scale=1):
            return (a + b) * scale

        assert retry_call(add, 1, 2, scale=3) == 9

    def test_retries_with_callback(self):
        attempts = []
        call_count = [0]

        def flaky():
            call_count[0] += 1
            if call_count[0] == 1:
                raise ConnectionError("blip")
            return "ok"

        result = retry_call(
            flaky,
            max_retries=2,
            base_delay=0,
            exceptions=(ConnectionError,),
            on_retry=lambda attempt, exc, delay: attempts.append(attempt),
        )

        assert result == "ok"
        assert attempts == [1]


class TestCircuitBreaker:
    """Test circuit breaker pattern."""

    def test_closed_state_allows_calls(self):
        """Circuit starts closed and allows calls."""
        breaker = CircuitBreaker(failure_threshold=3, recovery_timeout=1)

        assert breaker.call(lambda: "success") == "success"
        assert breaker.state == CircuitBreaker.CLOSED

    def test_opens_after_threshold(self):
        """Circuit opens after failure threshold."""
        breaker = CircuitBreaker(failure_threshold=3, recovery_timeout=60)

        def failing_func():
            raise ConnectionError("Test failure")

        for _ in range(3):
            with pytest.raises(ConnectionError):
                breaker.call(failing_func)

        assert breaker.state == CircuitBreaker.OPEN

        with pytest.raises(CircuitOpenError, match="Circuit breaker is OPEN"):
            breaker.call(failing_func)

    def test_unexpected_exceptions_not_counted(self):
        """Only expected_exception failures move the breaker."""
        breaker = CircuitBreaker(failure_threshold=1, expected_exception=RetryError)

        def bad_input():
            raise ValueError("bad")

        with pytest.raises(ValueError):
            breaker.call(bad_input)

        assert breaker.state == CircuitBreaker.CLOSED
        assert breaker.failure_count == 0

    def test_closes_on_success_in_half_open(self):
        """Successful call after the recovery timeout closes the circuit."""
        breaker = CircuitBreaker(failure_threshold=2, recovery_timeout=0)
        call_count = [0]

        def sometimes_fails():
            call_count[0] += 1
            if call_count[0] <= 2:
                raise ConnectionError("Fail")
            return "success"

        for _ in range(2):
            with pytest.raises(ConnectionError):
                breaker.call(sometimes_fails)

        assert breaker.state == CircuitBreaker.OPEN

        assert breaker.call(sometimes_fails) == "success"
        assert breaker.state == CircuitBreaker.CLOSED

    def test_failure_in_half_open_reopens(self):
        breaker = CircuitBreaker(failure_threshold=2, recovery_timeout=0)

        def failing_func():
            raise ConnectionError("Fail")

        for _ in range(2):
            with pytest.raises(ConnectionError):
                breaker.call(failing_func)

        breaker.failure_count = 0
        with pytest.raises(ConnectionError):
            breaker.call(failing_func)

        assert breaker.state == CircuitBreaker.OPEN

    def test_manual_reset(self):
        """Manual reset should close the circuit."""
        breaker = CircuitBreaker(failure_threshold=2)

        def failing_func():
            raise ConnectionError("Test")

        for _ in range(2):
            with pytest.raises(ConnectionError):
                breaker.call(failing_func)

        assert breaker.state == CircuitBreaker.OPEN

        breaker.reset()
        assert breaker.state == CircuitBreaker.CLOSED
        assert breaker.failure_count == 0


class TestTransientErrorDetection:
    """Test transient error detection utilities."""

    def test_locked_database_is_transient(self):
        error = OperationalError("INSERT", {}, Exception("database is locked"))
        assert is_transient_error(error)

    def test_missing_table_is_not_transient(self):
        error = OperationalError("INSERT", {}, Exception("no such table: matching_records"))
        assert not is_transient_error(error)

    def test_network_errors_are_transient(self):
        assert is_transient_error(requests.exceptions.Timeout("read"))
        assert is_transient_error(requests.exceptions.ConnectionError("refused"))

    def test_exhausted_retries_are_transient(self):
        assert is_transient_error(RetryError("gave up", attempts=4))
        assert is_transient_error(CircuitOpenError("open"))

    def test_message_based_detection(self):
        assert is_transient_error(Exception("Connection reset by peer"))
        assert is_transient_error(Exception("503 Service Unavailable"))
        assert is_transient_error(Exception("request timed out"))

    def test_non_transient_errors(self):
        """Should not detect permanent errors as transient."""
        errors = [
            Exception("404 Not Found"),
            ValueError("Invalid data"),
            Exception("401 Unauthorized"),
        ]
        for error in errors:
            assert not is_transient_error(error)

    def test_http_status_retry_logic(self):
        """Should correctly identify retryable HTTP status codes."""
        for code in (408, 429, 500, 502, 503, 504):
            assert should_retry_http_status(code)

        for code in (200, 401, 403, 404):
            assert not should_retry_http_status(code)
