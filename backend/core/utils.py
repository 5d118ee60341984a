"""Utility functions for audit logging and document numbering"""
import logging
import uuid

from django.utils import timezone

from .models import AuditLog

logger = logging.getLogger(__name__)


def create_audit_log(action=None, model_name=None, object_id=None, changes=None,
                     user=None, object_name=None, object_reference=None):
    """
    Create an audit log entry

    Args:
        action: Action type (indent_create, qc_approve, outward, etc.)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: User performing the action, if known
        object_name: Human-readable name of the object (e.g., item name, PI number)
        object_reference: Reference identifier (e.g., PI number, PO number)
    """
    # Validate required fields
    if not action or not model_name or object_id in (None, ''):
        logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
        return None

    try:
        return AuditLog.objects.create(
            user=user if user is not None and user.is_authenticated else None,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            object_reference=object_reference,
            changes=changes or {},
        )
    except Exception as e:
        # Don't fail the main operation if audit logging fails
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def generate_document_number(prefix, model, field):
    """Generate a unique document number such as PI-20260301-1A2B3C4D"""
    number = f"{prefix}-{timezone.now().strftime('%Y%m%d')}-{str(uuid.uuid4())[:8].upper()}"
    # Ensure uniqueness
    while model.objects.filter(**{field: number}).exists():
        number = f"{prefix}-{timezone.now().strftime('%Y%m%d')}-{str(uuid.uuid4())[:8].upper()}"
    return number


def get_context_user(context):
    """Acting user from a serializer context (request.user, or an explicit 'user')"""
    request = context.get('request')
    user = getattr(request, 'user', None) if request is not None else context.get('user')
    if user is not None and user.is_authenticated:
        return user
    return None
