# core/cache.py
import logging

from django.core.cache import cache

logger = logging.getLogger(__name__)


def get_cache_key(prefix, identifier):
    return f"{prefix}:{identifier}"


def get_cache(key):
    try:
        return cache.get(key)
    except Exception as e:
        logger.error(f"Cache get failed for {key}: {e}")
        return None


def set_cache(key, value, timeout=None):
    """Store a value; timeout=None keeps it until it is deleted."""
    try:
        cache.set(key, value, timeout)
    except Exception as e:
        logger.error(f"Cache set failed for {key}: {e}")
    return None


def delete_cache(key):
    try:
        cache.delete(key)
    except Exception as e:
        logger.error(f"Cache delete failed for {key}: {e}")
    return None


def delete_cache_pattern(pattern):
    """Delete every key matching a glob pattern.

    django-redis exposes ``delete_pattern``; other backends cannot enumerate
    keys, so the whole cache is cleared instead.
    """
    try:
        if hasattr(cache, 'delete_pattern'):
            cache.delete_pattern(pattern)
        else:
            logger.warning(f"Cache backend has no pattern support, clearing cache for {pattern}")
            cache.clear()
    except Exception as e:
        logger.error(f"Cache pattern delete failed for {pattern}: {e}")
    return None
