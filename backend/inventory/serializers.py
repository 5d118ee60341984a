import logging

from django.db import transaction
from django.utils import timezone
from rest_framework import serializers

from .item_state import is_in_stock, resolve_state
from .models import Movement, QualityControl, JobWork, Outward, OutwardLine
from backend.catalog.models import HolderType
from backend.core.cache_signals import suspend_cache_signals_decorator, invalidate_item_state_cache_manual
from backend.core.utils import create_audit_log, generate_document_number, get_context_user
from backend.purchasing.models import PurchaseOrder

logger = logging.getLogger(__name__)


class InwardSerializer(serializers.ModelSerializer):
    """Receive an item into a location; the movement waits for QC"""

    class Meta:
        model = Movement
        fields = [
            'id', 'movement_no', 'item', 'from_party', 'to_location', 'purchase_order',
            'reason', 'remarks', 'is_qc_pending', 'created_at'
        ]
        read_only_fields = ['movement_no', 'is_qc_pending', 'created_at']
        extra_kwargs = {'to_location': {'required': True, 'allow_null': False}}

    def validate_item(self, value):
        if not value.is_active:
            raise serializers.ValidationError(f"Item '{value.current_name}' is inactive.")
        if value.movements.filter(is_qc_pending=True).exists():
            raise serializers.ValidationError(f"Item '{value.current_name}' already has an inward pending QC.")
        return value

    def validate(self, attrs):
        order = attrs.get('purchase_order')
        item = attrs['item']
        if order is None:
            # Receipts of ordered items always count against their open order
            order = PurchaseOrder.objects.filter(is_active=True, items__purchase_indent_item__item=item).first()
            if order is not None:
                attrs['purchase_order'] = order
        if order is not None:
            if not order.is_active:
                raise serializers.ValidationError({'purchase_order': f"Purchase order {order.po_no} is not active."})
            if not order.items.filter(purchase_indent_item__item=item).exists():
                raise serializers.ValidationError({'purchase_order': f"Item '{item.current_name}' is not on purchase order {order.po_no}."})
            if not attrs.get('from_party'):
                attrs['from_party'] = order.vendor
        return attrs

    @suspend_cache_signals_decorator
    def create(self, validated_data):
        user = get_context_user(self.context)
        item = validated_data['item']
        order = validated_data.get('purchase_order')
        from_party = validated_data.get('from_party')

        with transaction.atomic():
            movement = Movement.objects.create(
                movement_no=generate_document_number('MOV', Movement, 'movement_no'),
                movement_type=Movement.TYPE_INWARD,
                from_type=HolderType.VENDOR if from_party else item.current_holder_type,
                to_type=HolderType.LOCATION,
                is_qc_pending=True,
                created_by=user,
                **validated_data
            )
            if order is not None and order.is_fully_received():
                order.close(user)
                logger.info(f"Purchase order {order.po_no} fully received and closed")

        create_audit_log(
            action='inward',
            model_name='Movement',
            object_id=movement.id,
            user=user,
            object_name=item.current_name,
            object_reference=movement.movement_no,
            changes={
                'item_id': item.id,
                'from_party': from_party.name if from_party else None,
                'to_location': movement.to_location.name,
                'purchase_order': order.po_no if order else None,
            }
        )

        invalidate_item_state_cache_manual()
        return movement


class QualityControlSerializer(serializers.ModelSerializer):
    # Declared explicitly so the duplicate check below reports its own message
    movement = serializers.PrimaryKeyRelatedField(queryset=Movement.objects.all())

    class Meta:
        model = QualityControl
        fields = ['id', 'movement', 'is_approved', 'remarks', 'checked_by', 'checked_at']
        read_only_fields = ['checked_by', 'checked_at']

    def validate_movement(self, value):
        if not value.is_qc_pending:
            raise serializers.ValidationError('This movement is not pending QC or has already been processed.')
        if QualityControl.objects.filter(movement=value).exists():
            raise serializers.ValidationError('QC entry already exists for this movement (duplicate not allowed).')
        return value

    @suspend_cache_signals_decorator
    def create(self, validated_data):
        user = get_context_user(self.context)
        movement = validated_data['movement']
        is_approved = validated_data.get('is_approved', False)

        with transaction.atomic():
            qc = QualityControl.objects.create(
                checked_by=user,
                checked_at=timezone.now(),
                **validated_data
            )
            movement.is_qc_pending = False
            movement.is_qc_approved = is_approved
            movement.save(update_fields=['is_qc_pending', 'is_qc_approved'])

            # Custody only changes on approval
            if is_approved:
                item = movement.item
                if movement.to_type == HolderType.LOCATION:
                    item.place_at_location(movement.to_location)
                elif movement.to_type == HolderType.VENDOR:
                    item.send_to_party(movement.to_party)

        create_audit_log(
            action='qc_approve' if is_approved else 'qc_reject',
            model_name='QualityControl',
            object_id=qc.id,
            user=user,
            object_name=movement.item.current_name,
            object_reference=movement.movement_no,
            changes={'is_approved': is_approved, 'remarks': qc.remarks},
        )
        logger.info(f"QC {'approved' if is_approved else 'rejected'} for movement {movement.movement_no}")

        invalidate_item_state_cache_manual()
        return qc


class JobWorkSerializer(serializers.ModelSerializer):
    item_name = serializers.CharField(source='item.current_name', read_only=True)

    class Meta:
        model = JobWork
        fields = ['id', 'job_work_no', 'item', 'item_name', 'party', 'description', 'status', 'created_by', 'created_at', 'updated_at']
        read_only_fields = ['job_work_no', 'created_by', 'created_at', 'updated_at']

    def validate_item(self, value):
        if self.instance is not None:
            if value != self.instance.item:
                raise serializers.ValidationError('The item of a job work cannot be changed.')
            return value
        if not is_in_stock(value.id):
            state = resolve_state(value.id)
            raise serializers.ValidationError(
                f"Item '{value.current_name}' is not in stock and cannot be sent for job work (current status: {state.label})."
            )
        return value

    def create(self, validated_data):
        user = get_context_user(self.context)
        validated_data['status'] = 'pending'
        job_work = JobWork.objects.create(
            job_work_no=generate_document_number('JW', JobWork, 'job_work_no'),
            created_by=user,
            **validated_data
        )
        create_audit_log(
            action='jobwork_create',
            model_name='JobWork',
            object_id=job_work.id,
            user=user,
            object_name=job_work.item.current_name,
            object_reference=job_work.job_work_no,
            changes={'description': job_work.description},
        )
        return job_work


class OutwardLineSerializer(serializers.ModelSerializer):
    item_name = serializers.CharField(source='item.current_name', read_only=True)

    class Meta:
        model = OutwardLine
        fields = ['id', 'item', 'item_name', 'quantity', 'remarks']


class OutwardSerializer(serializers.ModelSerializer):
    lines = OutwardLineSerializer(many=True)
    party_name = serializers.CharField(source='party.name', read_only=True)

    class Meta:
        model = Outward
        fields = ['id', 'outward_no', 'outward_date', 'party', 'party_name', 'remarks', 'is_active', 'created_by', 'created_at', 'lines']
        read_only_fields = ['outward_no', 'is_active', 'created_by', 'created_at']

    def validate_party(self, value):
        if not value.is_active:
            raise serializers.ValidationError(f"Party '{value.name}' is inactive.")
        return value

    def validate_lines(self, value):
        if not value:
            raise serializers.ValidationError('At least one item is required for outward.')
        item_ids = [line['item'].id for line in value]
        if len(set(item_ids)) != len(item_ids):
            raise serializers.ValidationError('The same item cannot appear twice on an outward.')
        for line in value:
            item = line['item']
            if not is_in_stock(item.id):
                raise serializers.ValidationError(f"Item '{item.current_name}' is not in stock and cannot be sent outward.")
        return value

    @suspend_cache_signals_decorator
    def create(self, validated_data):
        lines_data = validated_data.pop('lines')
        user = get_context_user(self.context)
        party = validated_data['party']

        with transaction.atomic():
            outward = Outward.objects.create(
                outward_no=generate_document_number('OUT', Outward, 'outward_no'),
                created_by=user,
                **validated_data
            )
            for line_data in lines_data:
                item = line_data['item']
                OutwardLine.objects.create(outward=outward, **line_data)
                Movement.objects.create(
                    movement_no=generate_document_number('MOV', Movement, 'movement_no'),
                    item=item,
                    movement_type=Movement.TYPE_OUTWARD,
                    from_type=item.current_holder_type,
                    from_location=item.current_location,
                    to_type=HolderType.VENDOR,
                    to_party=party,
                    reason=f"Outward {outward.outward_no}",
                    created_by=user,
                )
                item.send_to_party(party)

        create_audit_log(
            action='outward',
            model_name='Outward',
            object_id=outward.id,
            user=user,
            object_name=f"Outward {outward.outward_no}",
            object_reference=outward.outward_no,
            changes={
                'party': party.name,
                'items': [line['item'].current_name for line in lines_data],
            }
        )
        logger.info(f"Outward {outward.outward_no} sent {len(lines_data)} item(s) to {party.name}")

        invalidate_item_state_cache_manual()
        return outward
