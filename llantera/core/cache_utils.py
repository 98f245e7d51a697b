"""
Caching utilities for expensive catalog queries
Uses Redis (django-redis) when configured, the local-memory cache otherwise
"""
from django.conf import settings
from django.core.cache import cache
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
CATALOG_LIST_CACHE_TTL = 120  # 2 minutes
CATALOG_ITEM_CACHE_TTL = 300  # 5 minutes

CATALOG_LIST_PREFIX = "catalog_list"
CATALOG_ITEM_PREFIX = "catalog_item"


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    # Hash it to keep key length reasonable
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def _uses_redis():
    backend = settings.CACHES.get('default', {}).get('BACKEND', '')
    return backend.startswith('django_redis')


def invalidate_cache_pattern(pattern):
    """
    Invalidate all cache keys matching a pattern
    Note: pattern deletion requires Redis SCAN; other backends are cleared entirely
    """
    try:
        if not _uses_redis():
            cache.clear()
            logger.debug(f"Cleared local cache for pattern: {pattern}")
            return

        from django_redis import get_redis_connection
        redis_conn = get_redis_connection("default")

        keys = []
        cursor = 0
        while True:
            cursor, partial_keys = redis_conn.scan(cursor, match=f"*{pattern}*", count=100)
            keys.extend(partial_keys)
            if cursor == 0:
                break

        if keys:
            redis_conn.delete(*keys)
            logger.info(f"Invalidated {len(keys)} cache keys matching pattern: {pattern}")
    except Exception as e:
        logger.warning(f"Could not invalidate cache pattern {pattern}: {str(e)}")


def get_cached_catalog(prefix, params):
    """
    Get cached catalog data for a set of request parameters
    Returns tuple: (cached_data, cache_key)
    """
    cache_key = make_cache_key(prefix, **params)
    return cache.get(cache_key), cache_key


def cache_catalog(cache_key, data, ttl=CATALOG_LIST_CACHE_TTL):
    """Cache catalog data"""
    cache.set(cache_key, data, ttl)
    logger.debug(f"Cached catalog data: {cache_key}")


def invalidate_catalog_cache():
    """Invalidate all catalog-related cache"""
    invalidate_cache_pattern(CATALOG_LIST_PREFIX)
    invalidate_cache_pattern(CATALOG_ITEM_PREFIX)
