import logging

from django.db import transaction
from rest_framework import serializers

from .models import PurchaseIndent, PurchaseIndentItem, PurchaseOrder, PurchaseOrderItem
from backend.catalog.models import Item
from backend.core.cache_signals import suspend_cache_signals_decorator, invalidate_item_state_cache_manual
from backend.core.utils import create_audit_log, generate_document_number, get_context_user
from backend.inventory.item_state import can_add_to_purchase_indent, resolve_state

logger = logging.getLogger(__name__)


def _check_unique_ids(value, label):
    if not value:
        raise serializers.ValidationError(f'At least one {label} is required.')
    if len(set(value)) != len(value):
        raise serializers.ValidationError(f'Duplicate {label}s are not allowed.')


class PurchaseIndentItemSerializer(serializers.ModelSerializer):
    item_name = serializers.CharField(source='item.current_name', read_only=True)
    main_part_name = serializers.CharField(source='item.main_part_name', read_only=True)

    class Meta:
        model = PurchaseIndentItem
        fields = ['id', 'item', 'item_name', 'main_part_name', 'remarks']


class PurchaseIndentSerializer(serializers.ModelSerializer):
    items = PurchaseIndentItemSerializer(many=True, read_only=True)
    item_ids = serializers.ListField(child=serializers.IntegerField(), write_only=True, required=False)
    created_by_name = serializers.CharField(source='created_by.username', read_only=True, default=None)

    class Meta:
        model = PurchaseIndent
        fields = [
            'id', 'pi_no', 'pi_date', 'indent_type', 'status', 'remarks', 'is_active',
            'created_by', 'created_by_name', 'approved_by', 'approved_at',
            'created_at', 'updated_at', 'items', 'item_ids'
        ]
        read_only_fields = ['pi_no', 'status', 'is_active', 'created_by', 'approved_by', 'approved_at', 'created_at', 'updated_at']

    def validate_item_ids(self, value):
        _check_unique_ids(value, 'item')

        items = Item.objects.in_bulk(value)
        missing = [item_id for item_id in value if item_id not in items or not items[item_id].is_active]
        if missing:
            raise serializers.ValidationError(f"Item(s) not found: {', '.join(str(i) for i in missing)}")

        # When editing, the indent's own lines must not block re-selection
        exclude_id = self.instance.id if self.instance else None
        errors = []
        for item_id in value:
            if not can_add_to_purchase_indent(item_id, exclude_purchase_indent_id=exclude_id):
                state = resolve_state(item_id, exclude_purchase_indent_id=exclude_id)
                errors.append(
                    f"Item '{items[item_id].current_name}' cannot be added to a purchase indent "
                    f"(current status: {state.label})."
                )
        if errors:
            logger.info(f"Purchase indent rejected, ineligible items: {errors}")
            raise serializers.ValidationError(errors)
        return value

    def validate(self, attrs):
        if self.instance is None:
            if 'item_ids' not in attrs:
                raise serializers.ValidationError({'item_ids': 'This field is required.'})
        else:
            if not self.instance.is_active or self.instance.status != PurchaseIndent.STATUS_PENDING:
                raise serializers.ValidationError('Only active, pending purchase indents can be edited.')
        return attrs

    @suspend_cache_signals_decorator
    def create(self, validated_data):
        item_ids = validated_data.pop('item_ids')
        user = get_context_user(self.context)

        with transaction.atomic():
            indent = PurchaseIndent.objects.create(
                pi_no=generate_document_number('PI', PurchaseIndent, 'pi_no'),
                created_by=user,
                **validated_data
            )
            for item_id in item_ids:
                PurchaseIndentItem.objects.create(purchase_indent=indent, item_id=item_id)

        create_audit_log(
            action='indent_create',
            model_name='PurchaseIndent',
            object_id=indent.id,
            user=user,
            object_name=f"Purchase Indent {indent.pi_no}",
            object_reference=indent.pi_no,
            changes={
                'indent_type': indent.indent_type,
                'items_count': len(item_ids),
                'item_ids': item_ids,
            }
        )
        logger.info(f"Created purchase indent {indent.pi_no} with {len(item_ids)} item(s)")

        # Manually invalidate cache once after all operations
        invalidate_item_state_cache_manual()
        return indent

    @suspend_cache_signals_decorator
    def update(self, instance, validated_data):
        item_ids = validated_data.pop('item_ids', None)
        user = get_context_user(self.context)
        changes = {}

        with transaction.atomic():
            for attr, value in validated_data.items():
                old_value = getattr(instance, attr)
                if old_value != value:
                    changes[attr] = {'old': str(old_value), 'new': str(value)}
                setattr(instance, attr, value)
            instance.save()

            if item_ids is not None:
                current = set(instance.items.values_list('item_id', flat=True))
                wanted = set(item_ids)
                removed = current - wanted
                added = [item_id for item_id in item_ids if item_id not in current]
                instance.items.filter(item_id__in=removed).delete()
                for item_id in added:
                    PurchaseIndentItem.objects.create(purchase_indent=instance, item_id=item_id)
                if removed or added:
                    changes['items'] = {'removed': sorted(removed), 'added': added}

        if changes:
            create_audit_log(
                action='indent_update',
                model_name='PurchaseIndent',
                object_id=instance.id,
                user=user,
                object_name=f"Purchase Indent {instance.pi_no}",
                object_reference=instance.pi_no,
                changes=changes,
            )

        invalidate_item_state_cache_manual()
        return instance


class PurchaseOrderItemSerializer(serializers.ModelSerializer):
    item_id = serializers.IntegerField(source='purchase_indent_item.item_id', read_only=True)
    item_name = serializers.CharField(source='purchase_indent_item.item.current_name', read_only=True)
    pi_no = serializers.CharField(source='purchase_indent_item.purchase_indent.pi_no', read_only=True)

    class Meta:
        model = PurchaseOrderItem
        fields = ['id', 'purchase_indent_item', 'item_id', 'item_name', 'pi_no', 'rate']


class PurchaseOrderSerializer(serializers.ModelSerializer):
    items = PurchaseOrderItemSerializer(many=True, read_only=True)
    vendor_name = serializers.CharField(source='vendor.name', read_only=True)
    purchase_indent_item_ids = serializers.ListField(child=serializers.IntegerField(), write_only=True, required=False)
    rates = serializers.DictField(
        child=serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0),
        write_only=True, required=False
    )
    total = serializers.SerializerMethodField()

    class Meta:
        model = PurchaseOrder
        fields = [
            'id', 'po_no', 'po_date', 'vendor', 'vendor_name', 'delivery_date', 'remarks', 'is_active',
            'created_by', 'created_at', 'updated_at', 'items', 'purchase_indent_item_ids', 'rates', 'total'
        ]
        read_only_fields = ['po_no', 'is_active', 'created_by', 'created_at', 'updated_at']

    def get_total(self, obj):
        return float(obj.get_total())

    def validate_vendor(self, value):
        if not value.is_active:
            raise serializers.ValidationError(f"Vendor '{value.name}' is inactive.")
        return value

    def validate_purchase_indent_item_ids(self, value):
        if self.instance is not None:
            raise serializers.ValidationError('Lines of an existing purchase order cannot be changed.')
        _check_unique_ids(value, 'indent line')

        lines = PurchaseIndentItem.objects.select_related('purchase_indent', 'item').in_bulk(value)
        missing = [line_id for line_id in value if line_id not in lines]
        if missing:
            raise serializers.ValidationError(f"Indent line(s) not found: {', '.join(str(i) for i in missing)}")

        errors = []
        for line_id in value:
            line = lines[line_id]
            indent = line.purchase_indent
            if not indent.is_active or indent.status != PurchaseIndent.STATUS_APPROVED:
                errors.append(f"Indent line {line_id} ({indent.pi_no}) is not on an active, approved purchase indent.")
                continue
            if line.is_received:
                errors.append(f"Item '{line.item.current_name}' on {indent.pi_no} has already been received.")
                continue
            existing = line.po_items.filter(purchase_order__is_active=True).select_related('purchase_order').first()
            if existing:
                errors.append(f"Item '{line.item.current_name}' is already on purchase order {existing.purchase_order.po_no}.")
        if errors:
            logger.info(f"Purchase order rejected: {errors}")
            raise serializers.ValidationError(errors)
        return value

    def validate(self, attrs):
        if self.instance is None and 'purchase_indent_item_ids' not in attrs:
            raise serializers.ValidationError({'purchase_indent_item_ids': 'This field is required.'})

        rates = attrs.get('rates') or {}
        line_ids = {str(line_id) for line_id in attrs.get('purchase_indent_item_ids', [])}
        unknown = [key for key in rates if key not in line_ids]
        if unknown:
            raise serializers.ValidationError({'rates': f"Rates given for lines not on this order: {', '.join(unknown)}"})
        return attrs

    @suspend_cache_signals_decorator
    def create(self, validated_data):
        line_ids = validated_data.pop('purchase_indent_item_ids')
        rates = validated_data.pop('rates', None) or {}
        user = get_context_user(self.context)

        with transaction.atomic():
            order = PurchaseOrder.objects.create(
                po_no=generate_document_number('PO', PurchaseOrder, 'po_no'),
                created_by=user,
                **validated_data
            )
            for line_id in line_ids:
                PurchaseOrderItem.objects.create(
                    purchase_order=order,
                    purchase_indent_item_id=line_id,
                    rate=rates.get(str(line_id)),
                )

        create_audit_log(
            action='po_create',
            model_name='PurchaseOrder',
            object_id=order.id,
            user=user,
            object_name=f"Purchase Order {order.po_no}",
            object_reference=order.po_no,
            changes={
                'vendor': order.vendor.name,
                'lines': line_ids,
                'total': str(order.get_total()),
            }
        )
        logger.info(f"Created purchase order {order.po_no} for {order.vendor.name} with {len(line_ids)} line(s)")

        invalidate_item_state_cache_manual()
        return order

    def update(self, instance, validated_data):
        validated_data.pop('rates', None)
        if not instance.is_active:
            raise serializers.ValidationError('Cancelled or closed purchase orders cannot be edited.')
        return super().update(instance, validated_data)
