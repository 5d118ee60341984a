"""
Test suite for Inventory module
Tests: item process-state resolution, precedence, eligibility helpers,
inward / QC / job work / outward serializers
"""
from django.test import TestCase
from backend.core.test_utils import TestDataFactory
from backend.core.models import AuditLog
from backend.catalog.models import Item, HolderType
from backend.purchasing.models import PurchaseIndent
from backend.inventory.models import Movement, QualityControl, JobWork, Outward
from backend.inventory.item_state import (
    ItemProcessState,
    resolve_state,
    can_add_to_purchase_indent,
    is_in_stock,
    get_state_display,
    items_with_state,
    _in_purchase_indent,
)
from backend.inventory.serializers import (
    InwardSerializer,
    QualityControlSerializer,
    JobWorkSerializer,
    OutwardSerializer,
)


class ResolveStateTests(TestCase):
    """Precedence order: PO > PI > QC > job work > holder type"""

    def setUp(self):
        self.location = TestDataFactory.create_location()
        self.item = TestDataFactory.create_item()

    def test_missing_item_is_not_in_stock(self):
        self.assertEqual(resolve_state(999999), ItemProcessState.NOT_IN_STOCK)
        self.assertTrue(can_add_to_purchase_indent(999999))
        self.assertFalse(is_in_stock(999999))

    def test_item_with_no_rows_is_not_in_stock(self):
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.NOT_IN_STOCK)

    def test_active_po_line_is_in_po(self):
        indent = TestDataFactory.create_purchase_indent(items=[self.item], status=PurchaseIndent.STATUS_APPROVED)
        TestDataFactory.create_purchase_order(indent.items.all())
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.IN_PO)

    def test_in_po_wins_over_everything_else(self):
        item = TestDataFactory.create_item(holder_type=HolderType.LOCATION, location=self.location)
        indent = TestDataFactory.create_purchase_indent(items=[item], status=PurchaseIndent.STATUS_APPROVED)
        TestDataFactory.create_purchase_indent(items=[item])
        TestDataFactory.create_purchase_order(indent.items.all())
        TestDataFactory.create_movement(item, is_qc_pending=True)
        TestDataFactory.create_job_work(item)
        self.assertEqual(resolve_state(item.id), ItemProcessState.IN_PO)

    def test_inactive_po_does_not_count(self):
        indent = TestDataFactory.create_purchase_indent(items=[self.item], status=PurchaseIndent.STATUS_APPROVED)
        TestDataFactory.create_purchase_order(indent.items.all(), is_active=False)
        # The approved indent still holds the item
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.IN_PI)

    def test_pending_and_approved_indents_are_in_pi(self):
        pending_item = TestDataFactory.create_item()
        approved_item = TestDataFactory.create_item()
        TestDataFactory.create_purchase_indent(items=[pending_item])
        TestDataFactory.create_purchase_indent(items=[approved_item], status=PurchaseIndent.STATUS_APPROVED)
        self.assertEqual(resolve_state(pending_item.id), ItemProcessState.IN_PI)
        self.assertEqual(resolve_state(approved_item.id), ItemProcessState.IN_PI)

    def test_rejected_indent_falls_through_to_holder_type(self):
        TestDataFactory.create_purchase_indent(items=[self.item], status=PurchaseIndent.STATUS_REJECTED)
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.NOT_IN_STOCK)

        stocked = TestDataFactory.create_item(holder_type=HolderType.LOCATION, location=self.location)
        TestDataFactory.create_purchase_indent(items=[stocked], status=PurchaseIndent.STATUS_REJECTED)
        self.assertEqual(resolve_state(stocked.id), ItemProcessState.IN_STOCK)

    def test_inactive_indent_does_not_count(self):
        TestDataFactory.create_purchase_indent(items=[self.item], is_active=False)
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.NOT_IN_STOCK)

    def test_excluded_indent_falls_through(self):
        indent = TestDataFactory.create_purchase_indent(items=[self.item])
        self.assertEqual(resolve_state(self.item.id, exclude_purchase_indent_id=indent.id), ItemProcessState.NOT_IN_STOCK)

    def test_excluded_indent_falls_through_to_lower_checks(self):
        indent = TestDataFactory.create_purchase_indent(items=[self.item])
        TestDataFactory.create_job_work(self.item)
        self.assertEqual(resolve_state(self.item.id, exclude_purchase_indent_id=indent.id), ItemProcessState.IN_JOBWORK)

    def test_exclusion_only_skips_that_indent(self):
        indent = TestDataFactory.create_purchase_indent(items=[self.item])
        TestDataFactory.create_purchase_indent(items=[self.item], status=PurchaseIndent.STATUS_APPROVED)
        self.assertEqual(resolve_state(self.item.id, exclude_purchase_indent_id=indent.id), ItemProcessState.IN_PI)

    def test_pi_check_ignores_lines_on_active_po(self):
        indent = TestDataFactory.create_purchase_indent(items=[self.item], status=PurchaseIndent.STATUS_APPROVED)
        TestDataFactory.create_purchase_order(indent.items.all())
        self.assertFalse(_in_purchase_indent(self.item.id))

    def test_received_indent_line_does_not_count(self):
        indent = TestDataFactory.create_purchase_indent(items=[self.item], status=PurchaseIndent.STATUS_APPROVED)
        indent.items.update(is_received=True)
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.NOT_IN_STOCK)

    def test_qc_pending_wins_over_location_holder(self):
        item = TestDataFactory.create_item(holder_type=HolderType.LOCATION, location=self.location)
        TestDataFactory.create_movement(item, is_qc_pending=True)
        self.assertEqual(resolve_state(item.id), ItemProcessState.IN_QC)

    def test_qc_pending_counts_for_any_movement_type(self):
        TestDataFactory.create_movement(self.item, movement_type=Movement.TYPE_SYSTEM_RETURN, is_qc_pending=True)
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.IN_QC)

    def test_processed_movement_does_not_count(self):
        item = TestDataFactory.create_item(holder_type=HolderType.LOCATION, location=self.location)
        TestDataFactory.create_movement(item, is_qc_pending=False)
        self.assertEqual(resolve_state(item.id), ItemProcessState.IN_STOCK)

    def test_qc_wins_over_job_work(self):
        TestDataFactory.create_movement(self.item, is_qc_pending=True)
        TestDataFactory.create_job_work(self.item)
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.IN_QC)

    def test_any_job_work_row_counts(self):
        item = TestDataFactory.create_item(holder_type=HolderType.LOCATION, location=self.location)
        TestDataFactory.create_job_work(item, status='completed')
        self.assertEqual(resolve_state(item.id), ItemProcessState.IN_JOBWORK)

    def test_holder_type_fallback(self):
        party = TestDataFactory.create_party()
        at_vendor = TestDataFactory.create_item(holder_type=HolderType.VENDOR, party=party)
        at_location = TestDataFactory.create_item(holder_type=HolderType.LOCATION, location=self.location)
        self.assertEqual(resolve_state(at_vendor.id), ItemProcessState.OUTWARD)
        self.assertEqual(resolve_state(at_location.id), ItemProcessState.IN_STOCK)
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.NOT_IN_STOCK)

    def test_unrecognized_holder_type_is_not_in_stock(self):
        Item.objects.filter(pk=self.item.pk).update(current_holder_type='Scrapped')
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.NOT_IN_STOCK)

    def test_resolver_does_not_write(self):
        TestDataFactory.create_purchase_indent(items=[self.item])
        before = Item.objects.get(pk=self.item.pk).updated_at
        with self.assertNumQueries(3):
            resolve_state(self.item.id)
        self.assertEqual(Item.objects.get(pk=self.item.pk).updated_at, before)


class EligibilityTests(TestCase):
    """can_add_to_purchase_indent / is_in_stock mirror resolve_state"""

    def setUp(self):
        self.location = TestDataFactory.create_location()

    def test_helpers_agree_with_resolver_for_every_state(self):
        party = TestDataFactory.create_party()
        items = [
            TestDataFactory.create_item(),
            TestDataFactory.create_item(holder_type=HolderType.VENDOR, party=party),
            TestDataFactory.create_item(holder_type=HolderType.LOCATION, location=self.location),
        ]
        in_pi = TestDataFactory.create_item()
        TestDataFactory.create_purchase_indent(items=[in_pi])
        in_qc = TestDataFactory.create_item()
        TestDataFactory.create_movement(in_qc, is_qc_pending=True)
        in_jw = TestDataFactory.create_item(holder_type=HolderType.LOCATION, location=self.location)
        TestDataFactory.create_job_work(in_jw)
        items += [in_pi, in_qc, in_jw]

        for item in items:
            state = resolve_state(item.id)
            self.assertEqual(can_add_to_purchase_indent(item.id), state == ItemProcessState.NOT_IN_STOCK)
            self.assertEqual(is_in_stock(item.id), state == ItemProcessState.IN_STOCK)

    def test_item_42_lifecycle(self):
        """Untouched item, then pending indent 7, then indent 7's line on an active PO"""
        item = TestDataFactory.create_item(name='Die 42')
        self.assertEqual(resolve_state(item.id), ItemProcessState.NOT_IN_STOCK)
        self.assertTrue(can_add_to_purchase_indent(item.id))

        indent = TestDataFactory.create_purchase_indent(items=[item])
        self.assertEqual(resolve_state(item.id), ItemProcessState.IN_PI)
        self.assertTrue(can_add_to_purchase_indent(item.id, exclude_purchase_indent_id=indent.id))
        self.assertFalse(can_add_to_purchase_indent(item.id))

        indent.approve()
        TestDataFactory.create_purchase_order(indent.items.all())
        self.assertEqual(resolve_state(item.id, exclude_purchase_indent_id=indent.id), ItemProcessState.IN_PO)
        self.assertFalse(can_add_to_purchase_indent(item.id, exclude_purchase_indent_id=indent.id))


class StateDisplayTests(TestCase):

    def test_labels(self):
        self.assertEqual(get_state_display(ItemProcessState.NOT_IN_STOCK), 'Not in stock')
        self.assertEqual(get_state_display('InPI'), 'PI Issued')
        self.assertEqual(get_state_display('InPO'), 'PO Issued')
        self.assertEqual(get_state_display('InQC'), 'In QC')
        self.assertEqual(get_state_display('InJobwork'), 'In Job work')
        self.assertEqual(get_state_display('Outward'), 'Outward')
        self.assertEqual(get_state_display('InStock'), 'In Stock')

    def test_unknown_value_returned_as_text(self):
        self.assertEqual(get_state_display('Scrapped'), 'Scrapped')
        self.assertEqual(get_state_display(7), '7')

    def test_items_with_state(self):
        location = TestDataFactory.create_location()
        free = TestDataFactory.create_item(name='Alpha')
        stocked = TestDataFactory.create_item(name='Beta', holder_type=HolderType.LOCATION, location=location)
        TestDataFactory.create_item(name='Gamma', is_active=False)

        rows = items_with_state()
        self.assertEqual([row['item_id'] for row in rows], [free.id, stocked.id])
        self.assertEqual(rows[0]['status'], 'NotInStock')
        self.assertTrue(rows[0]['can_add'])
        self.assertEqual(rows[1]['status_display'], 'In Stock')
        self.assertFalse(rows[1]['can_add'])
        self.assertEqual(rows[1]['item_type_name'], stocked.item_type.name)

    def test_items_with_state_honours_exclusion(self):
        item = TestDataFactory.create_item()
        indent = TestDataFactory.create_purchase_indent(items=[item])
        rows = items_with_state(Item.objects.filter(pk=item.pk), exclude_purchase_indent_id=indent.id)
        self.assertTrue(rows[0]['can_add'])
        rows = items_with_state(Item.objects.filter(pk=item.pk))
        self.assertEqual(rows[0]['status'], 'InPI')


class InwardAndQCTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.location = TestDataFactory.create_location()
        self.vendor = TestDataFactory.create_party()
        self.item = TestDataFactory.create_item()

    def _inward(self, **extra):
        data = {'item': self.item.id, 'to_location': self.location.id, 'from_party': self.vendor.id}
        data.update(extra)
        serializer = InwardSerializer(data=data, context={'user': self.user})
        self.assertTrue(serializer.is_valid(), serializer.errors)
        return serializer.save()

    def test_inward_puts_item_in_qc(self):
        movement = self._inward()
        self.assertTrue(movement.is_qc_pending)
        self.assertEqual(movement.movement_type, Movement.TYPE_INWARD)
        self.assertTrue(movement.movement_no.startswith('MOV-'))
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.IN_QC)
        self.assertTrue(AuditLog.objects.filter(action='inward', object_id=str(movement.id)).exists())

    def test_inward_requires_location(self):
        serializer = InwardSerializer(data={'item': self.item.id}, context={'user': self.user})
        self.assertFalse(serializer.is_valid())
        self.assertIn('to_location', serializer.errors)

    def test_second_inward_while_qc_pending_rejected(self):
        self._inward()
        serializer = InwardSerializer(data={'item': self.item.id, 'to_location': self.location.id})
        self.assertFalse(serializer.is_valid())
        self.assertIn('item', serializer.errors)

    def test_qc_approval_places_item_at_location(self):
        movement = self._inward()
        serializer = QualityControlSerializer(data={'movement': movement.id, 'is_approved': True}, context={'user': self.user})
        self.assertTrue(serializer.is_valid(), serializer.errors)
        qc = serializer.save()

        movement.refresh_from_db()
        self.item.refresh_from_db()
        self.assertFalse(movement.is_qc_pending)
        self.assertTrue(movement.is_qc_approved)
        self.assertEqual(qc.checked_by, self.user)
        self.assertEqual(self.item.current_holder_type, HolderType.LOCATION)
        self.assertEqual(self.item.current_location, self.location)
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.IN_STOCK)

    def test_qc_rejection_leaves_holder_unchanged(self):
        movement = self._inward()
        serializer = QualityControlSerializer(data={'movement': movement.id, 'is_approved': False})
        self.assertTrue(serializer.is_valid(), serializer.errors)
        serializer.save()

        movement.refresh_from_db()
        self.item.refresh_from_db()
        self.assertFalse(movement.is_qc_pending)
        self.assertFalse(movement.is_qc_approved)
        self.assertEqual(self.item.current_holder_type, HolderType.NOT_IN_STOCK)
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.NOT_IN_STOCK)

    def test_qc_on_processed_movement_rejected(self):
        movement = TestDataFactory.create_movement(self.item, is_qc_pending=False)
        serializer = QualityControlSerializer(data={'movement': movement.id, 'is_approved': True})
        self.assertFalse(serializer.is_valid())
        self.assertIn('not pending QC', str(serializer.errors['movement'][0]))

    def test_duplicate_qc_rejected(self):
        movement = TestDataFactory.create_movement(self.item, is_qc_pending=True)
        QualityControl.objects.create(movement=movement, is_approved=False)
        serializer = QualityControlSerializer(data={'movement': movement.id, 'is_approved': True})
        self.assertFalse(serializer.is_valid())
        self.assertIn('duplicate not allowed', str(serializer.errors['movement'][0]))

    def test_inward_against_po_closes_fully_received_order(self):
        indent = TestDataFactory.create_purchase_indent(items=[self.item], status=PurchaseIndent.STATUS_APPROVED)
        order = TestDataFactory.create_purchase_order(indent.items.all(), vendor=self.vendor)
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.IN_PO)

        serializer = InwardSerializer(
            data={'item': self.item.id, 'to_location': self.location.id, 'purchase_order': order.id},
            context={'user': self.user}
        )
        self.assertTrue(serializer.is_valid(), serializer.errors)
        movement = serializer.save()

        order.refresh_from_db()
        indent.refresh_from_db()
        self.assertEqual(movement.from_party, self.vendor)
        self.assertFalse(order.is_active)
        self.assertFalse(indent.is_active)
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.IN_QC)

    def test_partial_receipt_keeps_order_open(self):
        other = TestDataFactory.create_item()
        indent = TestDataFactory.create_purchase_indent(items=[self.item, other], status=PurchaseIndent.STATUS_APPROVED)
        order = TestDataFactory.create_purchase_order(indent.items.all(), vendor=self.vendor)

        self._inward(purchase_order=order.id)
        order.refresh_from_db()
        self.assertTrue(order.is_active)
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.IN_PO)

    def test_inward_item_not_on_order_rejected(self):
        other = TestDataFactory.create_item()
        indent = TestDataFactory.create_purchase_indent(items=[other], status=PurchaseIndent.STATUS_APPROVED)
        order = TestDataFactory.create_purchase_order(indent.items.all())
        serializer = InwardSerializer(data={'item': self.item.id, 'to_location': self.location.id, 'purchase_order': order.id})
        self.assertFalse(serializer.is_valid())
        self.assertIn('purchase_order', serializer.errors)

    def _approve_qc(self, movement):
        serializer = QualityControlSerializer(data={'movement': movement.id, 'is_approved': True}, context={'user': self.user})
        self.assertTrue(serializer.is_valid(), serializer.errors)
        return serializer.save()

    def test_received_item_reaches_stock_while_rest_of_indent_stays_open(self):
        other = TestDataFactory.create_item()
        indent = TestDataFactory.create_purchase_indent(items=[self.item, other], status=PurchaseIndent.STATUS_APPROVED)
        order = TestDataFactory.create_purchase_order(indent.items.filter(item=self.item), vendor=self.vendor)

        movement = self._inward(purchase_order=order.id)
        order.refresh_from_db()
        indent.refresh_from_db()
        self.assertFalse(order.is_active)
        self.assertTrue(indent.is_active)
        self.assertTrue(indent.items.get(item=self.item).is_received)
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.IN_QC)

        self._approve_qc(movement)
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.IN_STOCK)
        self.assertEqual(resolve_state(other.id), ItemProcessState.IN_PI)

    def test_inward_without_order_counts_against_open_order(self):
        indent = TestDataFactory.create_purchase_indent(items=[self.item], status=PurchaseIndent.STATUS_APPROVED)
        order = TestDataFactory.create_purchase_order(indent.items.all(), vendor=self.vendor)

        movement = self._inward()
        self.assertEqual(movement.purchase_order, order)
        order.refresh_from_db()
        self.assertFalse(order.is_active)

        self._approve_qc(movement)
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.IN_STOCK)
        self.assertTrue(AuditLog.objects.filter(action='po_close', object_id=str(order.id)).exists())

    def test_job_work_item_stays_in_job_work_after_new_inward(self):
        TestDataFactory.create_job_work(self.item, status='completed')
        self._approve_qc(self._inward())
        self.item.refresh_from_db()
        self.assertEqual(self.item.current_holder_type, HolderType.LOCATION)
        self.assertEqual(resolve_state(self.item.id), ItemProcessState.IN_JOBWORK)


class JobWorkSerializerTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.location = TestDataFactory.create_location()

    def test_job_work_for_in_stock_item(self):
        item = TestDataFactory.create_item(holder_type=HolderType.LOCATION, location=self.location)
        serializer = JobWorkSerializer(data={'item': item.id, 'description': 'Re-machine cavity', 'status': 'completed'}, context={'user': self.user})
        self.assertTrue(serializer.is_valid(), serializer.errors)
        job_work = serializer.save()

        self.assertEqual(job_work.status, 'pending')
        self.assertEqual(job_work.created_by, self.user)
        self.assertTrue(job_work.job_work_no.startswith('JW-'))
        self.assertEqual(resolve_state(item.id), ItemProcessState.IN_JOBWORK)
        self.assertTrue(AuditLog.objects.filter(action='jobwork_create').exists())

    def test_job_work_rejected_for_item_not_in_stock(self):
        item = TestDataFactory.create_item()
        serializer = JobWorkSerializer(data={'item': item.id})
        self.assertFalse(serializer.is_valid())
        self.assertIn('not in stock', str(serializer.errors['item'][0]))
        self.assertFalse(JobWork.objects.exists())

    def test_job_work_status_update(self):
        item = TestDataFactory.create_item(holder_type=HolderType.LOCATION, location=self.location)
        job_work = TestDataFactory.create_job_work(item)
        serializer = JobWorkSerializer(job_work, data={'status': 'in_progress'}, partial=True)
        self.assertTrue(serializer.is_valid(), serializer.errors)
        serializer.save()
        job_work.refresh_from_db()
        self.assertEqual(job_work.status, 'in_progress')


class OutwardSerializerTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.location = TestDataFactory.create_location()
        self.party = TestDataFactory.create_party()

    def test_outward_sends_items_to_party(self):
        first = TestDataFactory.create_item(holder_type=HolderType.LOCATION, location=self.location)
        second = TestDataFactory.create_item(holder_type=HolderType.LOCATION, location=self.location)
        data = {'party': self.party.id, 'lines': [{'item': first.id}, {'item': second.id, 'quantity': 1}]}
        serializer = OutwardSerializer(data=data, context={'user': self.user})
        self.assertTrue(serializer.is_valid(), serializer.errors)
        outward = serializer.save()

        self.assertEqual(outward.lines.count(), 2)
        for item in (first, second):
            item.refresh_from_db()
            self.assertEqual(item.current_holder_type, HolderType.VENDOR)
            self.assertEqual(item.current_party, self.party)
            self.assertIsNone(item.current_location)
            self.assertEqual(resolve_state(item.id), ItemProcessState.OUTWARD)
            movement = item.movements.get(movement_type=Movement.TYPE_OUTWARD)
            self.assertEqual(movement.from_location, self.location)
            self.assertEqual(movement.to_party, self.party)
            self.assertFalse(movement.is_qc_pending)
        self.assertTrue(AuditLog.objects.filter(action='outward', object_id=str(outward.id)).exists())

    def test_outward_rejects_item_not_in_stock(self):
        item = TestDataFactory.create_item(name='Crank Die')
        serializer = OutwardSerializer(data={'party': self.party.id, 'lines': [{'item': item.id}]})
        self.assertFalse(serializer.is_valid())
        self.assertEqual(
            str(serializer.errors['lines'][0]),
            "Item 'Crank Die' is not in stock and cannot be sent outward."
        )
        self.assertFalse(Outward.objects.exists())

    def test_outward_rejects_item_in_job_work(self):
        item = TestDataFactory.create_item(holder_type=HolderType.LOCATION, location=self.location)
        TestDataFactory.create_job_work(item)
        serializer = OutwardSerializer(data={'party': self.party.id, 'lines': [{'item': item.id}]})
        self.assertFalse(serializer.is_valid())

    def test_outward_requires_lines(self):
        serializer = OutwardSerializer(data={'party': self.party.id, 'lines': []})
        self.assertFalse(serializer.is_valid())
        self.assertIn('At least one item', str(serializer.errors['lines'][0]))
