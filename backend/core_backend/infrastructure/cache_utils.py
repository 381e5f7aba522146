from django.conf import settings
from django.core.cache import cache
from functools import wraps
import hashlib
import time
import logging

logger = logging.getLogger(__name__)


def make_cache_key(key_prefix, func_name, *args, **kwargs):
    """
    Build a deterministic cache key for a function call.

    Positional arguments that are plain scalars (ids, strings) are kept readable
    so callers can invalidate a single entry with invalidate_cache_keys().
    """
    readable = ":".join(str(arg) for arg in args)
    key = f"{key_prefix}:{func_name}:{readable}" if readable else f"{key_prefix}:{func_name}"
    if kwargs:
        kwargs_hash = hashlib.md5(str(sorted(kwargs.items())).encode()).hexdigest()[:8]
        key = f"{key}:{kwargs_hash}"
    return key


def simple_cache(timeout=300, key_prefix='', log_performance=True, timeout_setting=None):
    """
    Caching decorator with graceful degradation on cache errors.

    Args:
        timeout: Cache lifetime in seconds.
        key_prefix: Namespace for keys produced by this decorator.
        log_performance: Emit debug timings for hits and misses.
        timeout_setting: Name of a Django setting that overrides ``timeout``,
            read at call time so tests can use override_settings.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.time()
            effective_timeout = getattr(settings, timeout_setting, timeout) if timeout_setting else timeout
            cache_key = make_cache_key(key_prefix, func.__name__, *args, **kwargs)

            try:
                result = cache.get(cache_key)
            except Exception as e:
                # Graceful degradation on cache errors
                logger.error(f"Cache error in {func.__name__}: {e}")
                return func(*args, **kwargs)

            if result is None:
                result = func(*args, **kwargs)
                try:
                    cache.set(cache_key, result, effective_timeout)
                except Exception as e:
                    logger.error(f"Cache write failed for {cache_key}: {e}")
                hit = False
            else:
                hit = True

            if log_performance:
                execution_time = (time.time() - start_time) * 1000
                logger.debug(
                    f"Cache {'HIT' if hit else 'MISS'} {cache_key} ({execution_time:.2f}ms)"
                )
            return result

        wrapper.cache_key_for = lambda *args, **kwargs: make_cache_key(
            key_prefix, func.__name__, *args, **kwargs
        )
        return wrapper
    return decorator


def invalidate_cache_keys(*keys):
    """Delete specific cache keys, logging instead of raising on backend errors."""
    if not keys:
        return False
    try:
        cache.delete_many(list(keys))
        logger.debug(f"Invalidated cache keys: {', '.join(keys)}")
        return True
    except Exception as e:
        logger.error(f"Failed to invalidate cache keys {keys}: {e}")
        return False



def cache_dynamic_data(timeout=300, timeout_setting=None):
    """Decorator for dynamic data (5 minutes default)"""
    return simple_cache(timeout=timeout, key_prefix='dynamic', timeout_setting=timeout_setting)
