# core/circuit_breaker.py
import time
from enum import Enum
from functools import wraps
from django.core.cache import cache
import logging

logger = logging.getLogger(__name__)


class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitOpenError(Exception):
    """Raised instead of calling the wrapped function while its circuit is open."""


class CircuitBreaker:
    """Cache-backed circuit breaker shared by every worker process.

    Failures are counted per wrapped function; once ``failure_threshold`` is
    reached the circuit opens and calls fail fast with ``CircuitOpenError``
    until ``recovery_timeout`` seconds have passed. The next call is then let
    through (half-open) and closes the circuit again if it succeeds.
    """

    def __init__(self, failure_threshold=5, recovery_timeout=60, expected_exception=Exception):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.expected_exception = expected_exception

    def _get_cache_key(self, func_name):
        return f"circuit_breaker:{func_name}"

    def _get_state(self, func_name):
        data = cache.get(self._get_cache_key(func_name), {
            'state': CircuitState.CLOSED.value,
            'failure_count': 0,
            'last_failure_time': None
        })
        return data

    def _set_state(self, func_name, state_data):
        cache.set(self._get_cache_key(func_name), state_data, max(self.recovery_timeout * 5, 300))

    def _should_attempt_reset(self, state_data):
        if state_data['state'] != CircuitState.OPEN.value:
            return False
        return time.time() - state_data['last_failure_time'] >= self.recovery_timeout

    def __call__(self, func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            func_name = f"{func.__module__}.{func.__name__}"
            state_data = self._get_state(func_name)

            # Circuit OPEN - fail fast
            if state_data['state'] == CircuitState.OPEN.value:
                if not self._should_attempt_reset(state_data):
                    logger.warning(f"Circuit breaker OPEN for {func_name}")
                    raise CircuitOpenError(f"{func_name} is temporarily unavailable")
                state_data['state'] = CircuitState.HALF_OPEN.value
                self._set_state(func_name, state_data)

            try:
                result = func(*args, **kwargs)
            except self.expected_exception as e:
                logger.error(f"Circuit breaker failure in {func_name}: {e}")
                self._record_failure(func_name, state_data)
                raise

            if state_data['state'] != CircuitState.CLOSED.value or state_data['failure_count']:
                self._reset_circuit(func_name)
                logger.info(f"Circuit breaker CLOSED for {func_name}")
            return result

        wrapper.circuit_key = lambda: self._get_cache_key(f"{func.__module__}.{func.__name__}")
        return wrapper

    def _record_failure(self, func_name, state_data):
        state_data['failure_count'] += 1
        state_data['last_failure_time'] = time.time()

        if state_data['state'] == CircuitState.HALF_OPEN.value or state_data['failure_count'] >= self.failure_threshold:
            state_data['state'] = CircuitState.OPEN.value
            logger.error(f"Circuit breaker OPENED for {func_name}")

        self._set_state(func_name, state_data)

    def _reset_circuit(self, func_name):
        self._set_state(func_name, {
            'state': CircuitState.CLOSED.value,
            'failure_count': 0,
            'last_failure_time': None
        })
