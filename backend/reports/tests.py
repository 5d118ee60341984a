"""
Test suite for Reports module
Tests: item state summary (cached), inventory status listing, item_state_report command
"""
from io import StringIO
from django.core.cache import cache
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from backend.core.test_utils import TestDataFactory
from backend.catalog.models import HolderType
from backend.inventory.item_state import ItemProcessState
from backend.purchasing.models import PurchaseIndent
from backend.reports.summary import item_state_summary, invalidate_item_state_summary, inventory_status


class ItemStateSummaryTests(TestCase):

    def setUp(self):
        cache.clear()
        self.location = TestDataFactory.create_location()
        self.party = TestDataFactory.create_party()

    def test_counts_are_zero_filled(self):
        counts = item_state_summary()
        for state in ItemProcessState:
            self.assertEqual(counts[state.value], 0)
        self.assertEqual(counts['total'], 0)

    def test_counts_per_state(self):
        TestDataFactory.create_item()
        TestDataFactory.create_item(holder_type=HolderType.LOCATION, location=self.location)
        TestDataFactory.create_item(holder_type=HolderType.VENDOR, party=self.party)
        TestDataFactory.create_purchase_indent(items=[TestDataFactory.create_item()])
        TestDataFactory.create_item(is_active=False)

        counts = item_state_summary()
        self.assertEqual(counts['NotInStock'], 1)
        self.assertEqual(counts['InStock'], 1)
        self.assertEqual(counts['Outward'], 1)
        self.assertEqual(counts['InPI'], 1)
        self.assertEqual(counts['total'], 4)

    def test_summary_is_invalidated_on_changes(self):
        item = TestDataFactory.create_item()
        self.assertEqual(item_state_summary()['NotInStock'], 1)

        # Creating the indent line fires the invalidation signal
        TestDataFactory.create_purchase_indent(items=[item])
        counts = item_state_summary()
        self.assertEqual(counts['NotInStock'], 0)
        self.assertEqual(counts['InPI'], 1)

    def test_summary_is_cached_until_invalidated(self):
        item = TestDataFactory.create_item()
        self.assertEqual(item_state_summary()['NotInStock'], 1)

        # queryset.update() bypasses post_save, so the cached counts stay
        type(item).objects.filter(pk=item.pk).update(current_holder_type=HolderType.LOCATION)
        self.assertEqual(item_state_summary()['NotInStock'], 1)

        invalidate_item_state_summary()
        self.assertEqual(item_state_summary()['InStock'], 1)


class InventoryStatusTests(TestCase):

    def setUp(self):
        cache.clear()
        self.location = TestDataFactory.create_location(name='Tool Room')

    def test_rows_carry_holder_and_state(self):
        item = TestDataFactory.create_item(name='Gear Die', holder_type=HolderType.LOCATION, location=self.location)
        rows = inventory_status()
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]['item_id'], item.id)
        self.assertEqual(rows[0]['holder_name'], 'Tool Room')
        self.assertEqual(rows[0]['status'], 'InStock')
        self.assertEqual(rows[0]['status_display'], 'In Stock')

    def test_filter_by_state(self):
        TestDataFactory.create_item(holder_type=HolderType.LOCATION, location=self.location)
        in_jw = TestDataFactory.create_item(holder_type=HolderType.LOCATION, location=self.location)
        TestDataFactory.create_job_work(in_jw)
        rows = inventory_status(state=ItemProcessState.IN_JOBWORK)
        self.assertEqual([row['item_id'] for row in rows], [in_jw.id])


class ItemStateReportCommandTests(TestCase):

    def setUp(self):
        cache.clear()
        self.item = TestDataFactory.create_item(name='Gear Die')

    def call(self, *args):
        out = StringIO()
        call_command('item_state_report', *args, stdout=out)
        return out.getvalue()

    def test_single_item(self):
        indent = TestDataFactory.create_purchase_indent(items=[self.item], status=PurchaseIndent.STATUS_APPROVED)
        output = self.call('--item-id', str(self.item.id))
        self.assertIn('Gear Die', output)
        self.assertIn('InPI - PI Issued', output)

        output = self.call('--item-id', str(self.item.id), '--exclude-indent', str(indent.id))
        self.assertIn('NotInStock - Not in stock', output)

    def test_missing_item(self):
        with self.assertRaises(CommandError):
            self.call('--item-id', '999999')

    def test_listing_and_filter(self):
        location = TestDataFactory.create_location()
        TestDataFactory.create_item(name='Cover Pattern', holder_type=HolderType.LOCATION, location=location)
        output = self.call()
        self.assertIn('Gear Die', output)
        self.assertIn('Cover Pattern', output)
        self.assertIn('Items listed: 2', output)

        output = self.call('--only-state', 'InStock')
        self.assertNotIn('Gear Die', output)
        self.assertIn('Items listed: 1', output)

    def test_summary(self):
        output = self.call('--summary')
        self.assertIn('ITEM STATE SUMMARY', output)
        self.assertIn('Not in stock', output)
        self.assertIn('Total', output)
