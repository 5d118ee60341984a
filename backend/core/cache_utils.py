"""
Caching utilities for expensive queries
Uses the default Django cache (Redis through django-redis when configured)
"""
from django.core.cache import cache
from functools import wraps
import hashlib
import logging

logger = logging.getLogger(__name__)


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    # Convert args and kwargs to a stable string representation
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    # Hash it to keep key length reasonable
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def cached_query(cache_ttl=60, key_prefix="query"):
    """
    Decorator to cache expensive queries

    Usage:
        @cached_query(cache_ttl=60, key_prefix="item_state_summary")
        def get_expensive_data(location_id=None):
            # expensive query here
            return data

        get_expensive_data.invalidate(location_id=3)
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            cache_key = make_cache_key(key_prefix, *args, **kwargs)

            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"Cache HIT for {key_prefix}: {cache_key}")
                return cached_data

            logger.debug(f"Cache MISS for {key_prefix}: {cache_key}")
            result = func(*args, **kwargs)
            cache.set(cache_key, result, cache_ttl)
            return result

        def invalidate(*args, **kwargs):
            """Drop the cached result for these arguments"""
            cache_key = make_cache_key(key_prefix, *args, **kwargs)
            cache.delete(cache_key)
            logger.debug(f"Cache invalidated for {key_prefix}: {cache_key}")

        wrapper.invalidate = invalidate
        return wrapper
    return decorator
