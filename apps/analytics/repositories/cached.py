# apps/analytics/repositories/cached.py
import hashlib
from functools import wraps

from core.cache import get_cache, set_cache


def cache_heavy_query(timeout=300, prefix='analytics'):
    """Cache a function's result under a key built from its name and arguments.

    Callers pass ``skip_cache=True`` to force a recomputation; the fresh
    result still replaces the cached one.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, skip_cache=False, **kwargs):
            digest = hashlib.md5((repr(args) + repr(sorted(kwargs.items()))).encode()).hexdigest()
            cache_key = f"{prefix}:{func.__name__}:{digest}"
            if not skip_cache:
                result = get_cache(cache_key)
                if result is not None:
                    return result
            result = func(*args, **kwargs)
            set_cache(cache_key, result, timeout)
            return result
        return wrapper
    return decorator
