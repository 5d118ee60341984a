"""
Test suite for Purchasing module
Tests: indent approval workflow, indent / order serializers, item eligibility and edge cases
"""
from decimal import Decimal
from django.core.exceptions import ValidationError
from django.test import TestCase
from backend.core.test_utils import TestDataFactory
from backend.core.models import AuditLog
from backend.catalog.models import HolderType
from backend.purchasing.models import PurchaseIndent, PurchaseOrder
from backend.purchasing.serializers import PurchaseIndentSerializer, PurchaseOrderSerializer
from backend.inventory.item_state import ItemProcessState, resolve_state


class PurchaseIndentModelTests(TestCase):
    """Test PurchaseIndent and PurchaseOrder model methods"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.item = TestDataFactory.create_item()

    def test_indent_str(self):
        indent = TestDataFactory.create_purchase_indent(items=[self.item])
        indent.pi_no = 'PI-001'
        indent.save()
        self.assertEqual(str(indent), 'PI-001')

    def test_approve_pending_indent(self):
        indent = TestDataFactory.create_purchase_indent(items=[self.item])
        indent.approve(self.user)
        indent.refresh_from_db()
        self.assertEqual(indent.status, PurchaseIndent.STATUS_APPROVED)
        self.assertEqual(indent.approved_by, self.user)
        self.assertIsNotNone(indent.approved_at)
        self.assertTrue(AuditLog.objects.filter(action='indent_approve', object_id=str(indent.id)).exists())
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.IN_PI)

    def test_reject_releases_item(self):
        indent = TestDataFactory.create_purchase_indent(items=[self.item])
        indent.reject(self.user)
        self.assertEqual(indent.status, PurchaseIndent.STATUS_REJECTED)
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.NOT_IN_STOCK)

    def test_only_pending_indent_can_be_decided(self):
        indent = TestDataFactory.create_purchase_indent(items=[self.item], status=PurchaseIndent.STATUS_APPROVED)
        with self.assertRaises(ValidationError):
            indent.reject(self.user)
        with self.assertRaises(ValidationError):
            indent.approve(self.user)

    def test_deactivate_releases_item(self):
        indent = TestDataFactory.create_purchase_indent(items=[self.item])
        indent.deactivate()
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.NOT_IN_STOCK)

    def test_cancel_order_falls_back_to_indent(self):
        indent = TestDataFactory.create_purchase_indent(items=[self.item], status=PurchaseIndent.STATUS_APPROVED)
        order = TestDataFactory.create_purchase_order(indent.items.all())
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.IN_PO)
        order.cancel(self.user)
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.IN_PI)
        self.assertTrue(AuditLog.objects.filter(action='po_cancel', object_id=str(order.id)).exists())

    def test_close_keeps_indents_with_unordered_lines(self):
        other = TestDataFactory.create_item()
        indent = TestDataFactory.create_purchase_indent(items=[self.item, other], status=PurchaseIndent.STATUS_APPROVED)
        order = TestDataFactory.create_purchase_order(indent.items.filter(item=self.item))
        order.close()
        indent.refresh_from_db()
        self.assertFalse(order.is_active)
        self.assertTrue(indent.is_active)
        self.assertEqual(resolve_state(other.id), ItemProcessState.IN_PI)
        self.assertTrue(indent.items.get(item=self.item).is_received)
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.NOT_IN_STOCK)
        self.assertTrue(AuditLog.objects.filter(action='po_close', object_reference=order.po_no).exists())

    def test_order_total(self):
        indent = TestDataFactory.create_purchase_indent(items=[self.item, TestDataFactory.create_item()], status=PurchaseIndent.STATUS_APPROVED)
        order = TestDataFactory.create_purchase_order(indent.items.all())
        order.items.update(rate=Decimal('1250.50'))
        self.assertEqual(order.get_total(), Decimal('2501.00'))


class PurchaseIndentSerializerTests(TestCase):
    """Indent creation and editing gated by item eligibility"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.location = TestDataFactory.create_location()
        self.item = TestDataFactory.create_item(name='Gear Die')
        self.other = TestDataFactory.create_item(name='Cover Pattern')

    def test_create_indent(self):
        serializer = PurchaseIndentSerializer(
            data={'indent_type': 'new', 'item_ids': [self.item.id, self.other.id], 'remarks': 'New dies'},
            context={'user': self.user}
        )
        self.assertTrue(serializer.is_valid(), serializer.errors)
        indent = serializer.save()

        self.assertTrue(indent.pi_no.startswith('PI-'))
        self.assertEqual(indent.status, PurchaseIndent.STATUS_PENDING)
        self.assertEqual(indent.created_by, self.user)
        self.assertEqual(set(indent.items.values_list('item_id', flat=True)), {self.item.id, self.other.id})
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.IN_PI)
        self.assertTrue(AuditLog.objects.filter(action='indent_create', object_reference=indent.pi_no).exists())
        self.assertEqual(len(PurchaseIndentSerializer(indent).data['items']), 2)

    def test_create_requires_items(self):
        serializer = PurchaseIndentSerializer(data={'indent_type': 'new'})
        self.assertFalse(serializer.is_valid())
        self.assertIn('item_ids', serializer.errors)

        serializer = PurchaseIndentSerializer(data={'item_ids': []})
        self.assertFalse(serializer.is_valid())
        self.assertIn('item_ids', serializer.errors)

    def test_duplicate_items_rejected(self):
        serializer = PurchaseIndentSerializer(data={'item_ids': [self.item.id, self.item.id]})
        self.assertFalse(serializer.is_valid())
        self.assertIn('Duplicate', str(serializer.errors['item_ids'][0]))

    def test_unknown_item_rejected(self):
        serializer = PurchaseIndentSerializer(data={'item_ids': [999999]})
        self.assertFalse(serializer.is_valid())
        self.assertIn('999999', str(serializer.errors['item_ids'][0]))

    def test_item_already_indented_rejected(self):
        TestDataFactory.create_purchase_indent(items=[self.item])
        serializer = PurchaseIndentSerializer(data={'item_ids': [self.item.id]})
        self.assertFalse(serializer.is_valid())
        self.assertIn('PI Issued', str(serializer.errors['item_ids'][0]))

    def test_in_stock_item_rejected(self):
        stocked = TestDataFactory.create_item(holder_type=HolderType.LOCATION, location=self.location)
        serializer = PurchaseIndentSerializer(data={'item_ids': [stocked.id]})
        self.assertFalse(serializer.is_valid())
        self.assertIn('In Stock', str(serializer.errors['item_ids'][0]))

    def test_rejected_indent_item_can_be_indented_again(self):
        indent = TestDataFactory.create_purchase_indent(items=[self.item])
        indent.reject()
        serializer = PurchaseIndentSerializer(data={'item_ids': [self.item.id]})
        self.assertTrue(serializer.is_valid(), serializer.errors)

    def test_update_keeps_own_items_eligible(self):
        indent = TestDataFactory.create_purchase_indent(items=[self.item])
        serializer = PurchaseIndentSerializer(
            indent, data={'item_ids': [self.item.id, self.other.id], 'remarks': 'Added cover'},
            partial=True, context={'user': self.user}
        )
        self.assertTrue(serializer.is_valid(), serializer.errors)
        serializer.save()

        self.assertEqual(set(indent.items.values_list('item_id', flat=True)), {self.item.id, self.other.id})
        log = AuditLog.objects.get(action='indent_update', object_id=str(indent.id))
        self.assertEqual(log.changes['items']['added'], [self.other.id])

    def test_update_removes_dropped_items(self):
        indent = TestDataFactory.create_purchase_indent(items=[self.item, self.other])
        serializer = PurchaseIndentSerializer(indent, data={'item_ids': [self.other.id]}, partial=True)
        self.assertTrue(serializer.is_valid(), serializer.errors)
        serializer.save()
        self.assertEqual(list(indent.items.values_list('item_id', flat=True)), [self.other.id])
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.NOT_IN_STOCK)

    def test_update_rejects_item_on_another_indent(self):
        indent = TestDataFactory.create_purchase_indent(items=[self.item])
        TestDataFactory.create_purchase_indent(items=[self.other])
        serializer = PurchaseIndentSerializer(indent, data={'item_ids': [self.item.id, self.other.id]}, partial=True)
        self.assertFalse(serializer.is_valid())
        self.assertIn("Cover Pattern", str(serializer.errors['item_ids'][0]))

    def test_approved_indent_cannot_be_edited(self):
        indent = TestDataFactory.create_purchase_indent(items=[self.item], status=PurchaseIndent.STATUS_APPROVED)
        serializer = PurchaseIndentSerializer(indent, data={'remarks': 'late change'}, partial=True)
        self.assertFalse(serializer.is_valid())
        self.assertIn('non_field_errors', serializer.errors)


class PurchaseOrderSerializerTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.vendor = TestDataFactory.create_party(name='Shree Tools')
        self.item = TestDataFactory.create_item(name='Gear Die')
        self.indent = TestDataFactory.create_purchase_indent(items=[self.item], status=PurchaseIndent.STATUS_APPROVED)
        self.line = self.indent.items.get()

    def test_create_order(self):
        serializer = PurchaseOrderSerializer(
            data={
                'vendor': self.vendor.id,
                'purchase_indent_item_ids': [self.line.id],
                'rates': {str(self.line.id): '1500.00'},
            },
            context={'user': self.user}
        )
        self.assertTrue(serializer.is_valid(), serializer.errors)
        order = serializer.save()

        self.assertTrue(order.po_no.startswith('PO-'))
        self.assertEqual(order.created_by, self.user)
        self.assertEqual(order.items.get().rate, Decimal('1500.00'))
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.IN_PO)
        self.assertTrue(AuditLog.objects.filter(action='po_create', object_reference=order.po_no).exists())
        data = PurchaseOrderSerializer(order).data
        self.assertEqual(data['total'], 1500.0)
        self.assertEqual(data['items'][0]['item_id'], self.item.id)

    def test_pending_indent_line_rejected(self):
        pending = TestDataFactory.create_purchase_indent(items=[TestDataFactory.create_item()])
        serializer = PurchaseOrderSerializer(data={'vendor': self.vendor.id, 'purchase_indent_item_ids': [pending.items.get().id]})
        self.assertFalse(serializer.is_valid())
        self.assertIn('approved', str(serializer.errors['purchase_indent_item_ids'][0]))

    def test_line_already_on_active_order_rejected(self):
        existing = TestDataFactory.create_purchase_order([self.line])
        serializer = PurchaseOrderSerializer(data={'vendor': self.vendor.id, 'purchase_indent_item_ids': [self.line.id]})
        self.assertFalse(serializer.is_valid())
        self.assertIn(existing.po_no, str(serializer.errors['purchase_indent_item_ids'][0]))

    def test_line_from_cancelled_order_can_be_reordered(self):
        existing = TestDataFactory.create_purchase_order([self.line])
        existing.cancel()
        serializer = PurchaseOrderSerializer(data={'vendor': self.vendor.id, 'purchase_indent_item_ids': [self.line.id]})
        self.assertTrue(serializer.is_valid(), serializer.errors)
        serializer.save()
        self.assertEqual(PurchaseOrder.objects.filter(is_active=True).count(), 1)

    def test_rate_for_unknown_line_rejected(self):
        serializer = PurchaseOrderSerializer(data={
            'vendor': self.vendor.id,
            'purchase_indent_item_ids': [self.line.id],
            'rates': {'999999': '10.00'},
        })
        self.assertFalse(serializer.is_valid())
        self.assertIn('rates', serializer.errors)

    def test_inactive_vendor_rejected(self):
        self.vendor.is_active = False
        self.vendor.save()
        serializer = PurchaseOrderSerializer(data={'vendor': self.vendor.id, 'purchase_indent_item_ids': [self.line.id]})
        self.assertFalse(serializer.is_valid())
        self.assertIn('vendor', serializer.errors)

    def test_received_line_cannot_be_reordered(self):
        indent = TestDataFactory.create_purchase_indent(
            items=[TestDataFactory.create_item(), TestDataFactory.create_item()], status=PurchaseIndent.STATUS_APPROVED
        )
        line = indent.items.first()
        TestDataFactory.create_purchase_order([line]).close()
        serializer = PurchaseOrderSerializer(data={'vendor': self.vendor.id, 'purchase_indent_item_ids': [line.id]})
        self.assertFalse(serializer.is_valid())
        self.assertIn('already been received', str(serializer.errors['purchase_indent_item_ids'][0]))
