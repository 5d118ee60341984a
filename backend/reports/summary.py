"""
Item state reports
Per-state counts for the dashboard and a per-item status listing
"""
import logging

from django.conf import settings

from backend.catalog.models import Item
from backend.core.cache_utils import cached_query
from backend.inventory.item_state import ItemProcessState, resolve_state

logger = logging.getLogger(__name__)


@cached_query(cache_ttl=getattr(settings, 'ITEM_STATE_SUMMARY_CACHE_TTL', 60), key_prefix='item_state_summary')
def item_state_summary():
    """Count active items per process state; every state is present, plus a total"""
    counts = {state.value: 0 for state in ItemProcessState}
    for item_id in Item.objects.filter(is_active=True).values_list('id', flat=True):
        counts[resolve_state(item_id).value] += 1
    counts['total'] = sum(counts.values())
    logger.debug(f"Item state summary computed: {counts}")
    return counts


def invalidate_item_state_summary():
    item_state_summary.invalidate()


def inventory_status(state=None, exclude_purchase_indent_id=None):
    """
    Current status of every active item with whoever holds it.
    Pass state (an ItemProcessState value) to keep only items in that state.
    """
    items = Item.objects.filter(is_active=True).select_related(
        'item_type', 'material', 'current_location', 'current_party'
    ).order_by('current_name', 'id')

    rows = []
    for item in items:
        resolved = resolve_state(item.id, exclude_purchase_indent_id)
        if state is not None and resolved != state:
            continue
        rows.append({
            'item_id': item.id,
            'main_part_name': item.main_part_name,
            'current_name': item.current_name,
            'item_type_name': item.item_type.name,
            'material_name': item.material.name if item.material else None,
            'drawing_no': item.drawing_no,
            'holder_type': item.current_holder_type,
            'holder_name': item.holder_name,
            'status': resolved.value,
            'status_display': resolved.label,
        })
    return rows
