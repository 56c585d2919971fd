# apps/analytics/repositories/performance.py
from functools import wraps
import time
import logging

logger = logging.getLogger(__name__)

SLOW_QUERY_THRESHOLD = 1.0


def monitor_query_performance(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            execution_time = time.perf_counter() - start_time
            if execution_time > SLOW_QUERY_THRESHOLD:  # Log slow aggregations
                logger.warning(f"Slow query: {func.__module__}.{func.__name__} took {execution_time:.2f}s")
            else:
                logger.debug(f"{func.__name__} took {execution_time * 1000:.0f}ms")
    return wrapper
