"""
Cache invalidation signals
Drop the cached item-state summary whenever a record that feeds it changes
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging
import threading
from contextlib import contextmanager
from functools import wraps

logger = logging.getLogger(__name__)

# Thread-local storage to track signal suspension
_thread_locals = threading.local()

# Models whose rows take part in item state resolution
ITEM_STATE_MODELS = {
    'Item',
    'PurchaseIndent',
    'PurchaseIndentItem',
    'PurchaseOrder',
    'PurchaseOrderItem',
    'Movement',
    'JobWork',
}


@contextmanager
def suspend_cache_signals():
    """
    Context manager to temporarily suspend cache invalidation signals.
    Useful for bulk operations to prevent excessive cache clearing.
    Remember to manually invalidate cache after the block!
    """
    try:
        _thread_locals.suspended = True
        yield
    finally:
        _thread_locals.suspended = False


def suspend_cache_signals_decorator(func):
    """Decorator to suspend cache signals during function execution"""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            _thread_locals.suspended = True
            return func(*args, **kwargs)
        finally:
            _thread_locals.suspended = False
    return wrapper


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


def invalidate_item_state_cache_manual():
    """Manually invalidate the item state summary cache"""
    try:
        from backend.reports.summary import invalidate_item_state_summary
        invalidate_item_state_summary()
    except Exception as e:
        logger.warning(f"Error invalidating item state cache: {e}")


@receiver([post_save, post_delete])
def invalidate_item_state_cache(sender, instance, **kwargs):
    """Invalidate item state summary when pipeline records change"""
    if is_suspended():
        return

    if sender.__name__ in ITEM_STATE_MODELS:
        invalidate_item_state_cache_manual()
