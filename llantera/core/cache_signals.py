"""
Cache invalidation signals
Automatically invalidate the catalog cache when prices, stock or tires change
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging
import threading
from contextlib import contextmanager

from .cache_utils import invalidate_catalog_cache

logger = logging.getLogger(__name__)

# Thread-local storage to track signal suspension
_thread_locals = threading.local()

CATALOG_MODELS = {'Tire', 'TirePrice', 'Inventory', 'PriceColumn', 'PriceLevel', 'Brand'}


@contextmanager
def suspend_cache_signals():
    """
    Context manager to temporarily suspend cache invalidation signals.
    Useful for bulk operations to prevent excessive cache clearing.
    The catalog cache is invalidated once when the block exits.
    """
    previous = is_suspended()
    _thread_locals.suspended = True
    try:
        yield
    finally:
        _thread_locals.suspended = previous
        if not previous:
            invalidate_catalog_cache()


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


@receiver([post_save, post_delete])
def invalidate_catalog_on_change(sender, instance, **kwargs):
    """Invalidate catalog listings when anything that feeds them changes"""
    if is_suspended():
        return

    if sender.__name__ not in CATALOG_MODELS:
        return

    try:
        invalidate_catalog_cache()
    except Exception as e:
        logger.warning(f"Error in invalidate_catalog_on_change signal: {e}")
