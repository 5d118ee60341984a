"""
Item process-state resolution

Answers "what lifecycle stage is this die/pattern in" by looking at the
purchasing pipeline, pending QC, job-work and finally the item's stored
holder type. Checks run in a fixed order and the first match wins:

    PO issued > PI issued > in QC > in job-work > holder type

Nothing here writes to the database.
"""
import logging

from django.db import models

from backend.catalog.models import Item, HolderType
from backend.purchasing.models import PurchaseIndent, PurchaseIndentItem, PurchaseOrderItem
from .models import Movement, JobWork

logger = logging.getLogger(__name__)


class ItemProcessState(models.TextChoices):
    NOT_IN_STOCK = 'NotInStock', 'Not in stock'
    IN_PO = 'InPO', 'PO Issued'
    IN_PI = 'InPI', 'PI Issued'
    IN_QC = 'InQC', 'In QC'
    IN_JOBWORK = 'InJobwork', 'In Job work'
    OUTWARD = 'Outward', 'Outward'
    IN_STOCK = 'InStock', 'In Stock'


HOLDER_STATE_MAP = {
    HolderType.NOT_IN_STOCK: ItemProcessState.NOT_IN_STOCK,
    HolderType.VENDOR: ItemProcessState.OUTWARD,
    HolderType.LOCATION: ItemProcessState.IN_STOCK,
}


def _in_purchase_order(item_id):
    return PurchaseOrderItem.objects.filter(
        purchase_order__is_active=True,
        purchase_indent_item__item_id=item_id,
    ).exists()


def _in_purchase_indent(item_id, exclude_purchase_indent_id=None):
    lines = PurchaseIndentItem.objects.filter(
        item_id=item_id,
        purchase_indent__is_active=True,
        purchase_indent__status__in=PurchaseIndent.OPEN_STATUSES,
        is_received=False,
    )
    if exclude_purchase_indent_id is not None:
        lines = lines.exclude(purchase_indent_id=exclude_purchase_indent_id)
    # Never true once the PO check above has failed; kept so this check stands on its own
    lines = lines.exclude(po_items__purchase_order__is_active=True)
    return lines.exists()


def _in_quality_control(item_id):
    return Movement.objects.filter(item_id=item_id, is_qc_pending=True).exists()


def _in_job_work(item_id):
    return JobWork.objects.filter(item_id=item_id).exists()


def resolve_state(item_id, exclude_purchase_indent_id=None):
    """
    Resolve the current process state of an item.

    Args:
        item_id: Primary key of the item
        exclude_purchase_indent_id: Indent to ignore in the PI check, used when
            editing that indent so its own lines don't block re-selection

    Returns an ItemProcessState. An unknown item resolves to NotInStock.
    Database errors propagate.
    """
    holder_type = Item.objects.filter(pk=item_id).values_list('current_holder_type', flat=True).first()
    if holder_type is None:
        logger.debug(f"Item {item_id} not found, treating as not in stock")
        return ItemProcessState.NOT_IN_STOCK

    if _in_purchase_order(item_id):
        state = ItemProcessState.IN_PO
    elif _in_purchase_indent(item_id, exclude_purchase_indent_id):
        state = ItemProcessState.IN_PI
    elif _in_quality_control(item_id):
        state = ItemProcessState.IN_QC
    elif _in_job_work(item_id):
        state = ItemProcessState.IN_JOBWORK
    else:
        state = HOLDER_STATE_MAP.get(holder_type, ItemProcessState.NOT_IN_STOCK)

    logger.debug(f"Item {item_id} resolved to {state.value} (holder={holder_type}, exclude_pi={exclude_purchase_indent_id})")
    return state


def can_add_to_purchase_indent(item_id, exclude_purchase_indent_id=None):
    """Only items that are not in stock and not in any pipeline can be indented"""
    return resolve_state(item_id, exclude_purchase_indent_id) == ItemProcessState.NOT_IN_STOCK


def is_in_stock(item_id):
    return resolve_state(item_id) == ItemProcessState.IN_STOCK


def get_state_display(state):
    """Human-readable label for a state; unknown values come back as-is"""
    try:
        return ItemProcessState(state).label
    except ValueError:
        return str(state)


def items_with_state(items=None, exclude_purchase_indent_id=None):
    """
    Resolve the state of each item in a queryset (active items by default).
    Used to list which items may be picked for a purchase indent.
    """
    if items is None:
        items = Item.objects.filter(is_active=True)
    items = items.select_related('item_type').order_by('current_name', 'id')

    rows = []
    for item in items:
        state = resolve_state(item.id, exclude_purchase_indent_id)
        rows.append({
            'item_id': item.id,
            'current_name': item.current_name,
            'main_part_name': item.main_part_name,
            'item_type_name': item.item_type.name if item.item_type else None,
            'status': state.value,
            'status_display': state.label,
            'can_add': state == ItemProcessState.NOT_IN_STOCK,
        })
    return rows
