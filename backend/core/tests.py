"""
Test suite for Core module
Tests: audit logging, document numbers, query caching and signal suspension
"""
from unittest import mock
from django.contrib.auth.models import AnonymousUser
from django.core.cache import cache
from django.test import TestCase
from backend.core.test_utils import TestDataFactory
from backend.core.models import AuditLog
from backend.core.utils import create_audit_log, generate_document_number, get_context_user
from backend.core.cache_utils import cached_query
from backend.core.cache_signals import suspend_cache_signals, is_suspended
from backend.purchasing.models import PurchaseIndent


class AuditLogTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()

    def test_create_audit_log(self):
        log = create_audit_log(
            action='indent_create',
            model_name='PurchaseIndent',
            object_id=12,
            user=self.user,
            object_reference='PI-001',
            changes={'items_count': 2}
        )
        self.assertEqual(log.object_id, '12')
        self.assertEqual(log.user, self.user)
        self.assertEqual(log.changes, {'items_count': 2})

    def test_anonymous_user_not_recorded(self):
        log = create_audit_log(action='inward', model_name='Movement', object_id=1, user=AnonymousUser())
        self.assertIsNone(log.user)

    def test_missing_fields_skipped(self):
        self.assertIsNone(create_audit_log(action='inward', model_name='Movement'))
        self.assertFalse(AuditLog.objects.exists())

    def test_failure_does_not_raise(self):
        with mock.patch.object(AuditLog.objects, 'create', side_effect=Exception('db down')):
            self.assertIsNone(create_audit_log(action='inward', model_name='Movement', object_id=1))

    def test_context_user(self):
        self.assertEqual(get_context_user({'user': self.user}), self.user)
        self.assertEqual(get_context_user({'request': mock.Mock(user=self.user)}), self.user)
        self.assertIsNone(get_context_user({'user': AnonymousUser()}))
        self.assertIsNone(get_context_user({}))


class DocumentNumberTests(TestCase):

    def test_format_and_uniqueness(self):
        number = generate_document_number('PI', PurchaseIndent, 'pi_no')
        prefix, date_part, suffix = number.split('-')
        self.assertEqual(prefix, 'PI')
        self.assertEqual(len(date_part), 8)
        self.assertEqual(len(suffix), 8)
        self.assertEqual(suffix, suffix.upper())


class CacheTests(TestCase):

    def setUp(self):
        cache.clear()

    def test_cached_query_and_invalidate(self):
        calls = []

        @cached_query(cache_ttl=60, key_prefix='test_counter')
        def counter(value):
            calls.append(value)
            return {'value': value}

        self.assertEqual(counter(1), {'value': 1})
        self.assertEqual(counter(1), {'value': 1})
        self.assertEqual(calls, [1])

        counter.invalidate(1)
        counter(1)
        self.assertEqual(calls, [1, 1])

    def test_suspend_cache_signals(self):
        self.assertFalse(is_suspended())
        with suspend_cache_signals():
            self.assertTrue(is_suspended())
        self.assertFalse(is_suspended())

    def test_suspended_signals_skip_invalidation(self):
        with mock.patch('backend.core.cache_signals.invalidate_item_state_cache_manual') as invalidate:
            with suspend_cache_signals():
                TestDataFactory.create_item()
            invalidate.assert_not_called()
            TestDataFactory.create_item()
            self.assertTrue(invalidate.called)
