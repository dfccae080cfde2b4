"""
Tests for AccountService.
"""

from datetime import timedelta
from unittest.mock import patch

from django.test import TestCase
from django.utils import timezone

from accounts.services import AccountService
from core.exceptions import NotFound, ValidationFailed
from .factories import (
    AdminFactory,
    BannedUserFactory,
    StaffFactory,
    SuspendedUserFactory,
    UserFactory,
)


class SearchUsersTest(TestCase):

    def setUp(self):
        self.service = AccountService()
        self.alice = UserFactory(first_name='Alice', last_name='Martin')
        self.bob = UserFactory(first_name='Bob', last_name='Durand', is_active=False)
        self.staff = StaffFactory(first_name='Claire')

    def test_search_by_name(self):
        result = self.service.search_users(query='alice')
        self.assertEqual([u.id for u in result['items']], [self.alice.id])

    def test_filter_by_role_and_status(self):
        result = self.service.search_users(role='staff')
        self.assertEqual([u.id for u in result['items']], [self.staff.id])

        result = self.service.search_users(is_active=False)
        self.assertEqual([u.id for u in result['items']], [self.bob.id])

    def test_pagination_envelope(self):
        result = self.service.search_users(page=1, limit=2)
        self.assertEqual(result['pagination'], {'page': 1, 'limit': 2, 'total': 3, 'pages': 2})
        self.assertEqual(len(result['items']), 2)

    def test_unknown_role_filter(self):
        with self.assertRaises(ValidationFailed):
            self.service.search_users(role='mayor')


class RoleAndStatusTest(TestCase):

    def setUp(self):
        self.service = AccountService()
        self.admin = AdminFactory()
        self.user = UserFactory()

    @patch('accounts.services.log_business_event')
    def test_update_role(self, mock_log):
        user = self.service.update_role(self.user.id, 'staff', actor=self.admin)

        self.assertEqual(user.role, 'staff')
        mock_log.assert_called_once()
        self.assertEqual(mock_log.call_args[0][0], 'user_role_changed')

    def test_update_role_rejects_unknown_role(self):
        with self.assertRaises(ValidationFailed):
            self.service.update_role(self.user.id, 'mayor', actor=self.admin)

    def test_update_role_unknown_user(self):
        with self.assertRaises(NotFound):
            self.service.update_role('00000000-0000-0000-0000-000000000000', 'staff')

    def test_malformed_user_id(self):
        with self.assertRaises(NotFound):
            self.service.get_user('not-a-uuid')

    def test_deactivate_and_reactivate(self):
        user = self.service.set_active(self.user.id, False, actor=self.admin)
        self.assertFalse(user.is_active)

        user.ban()
        user = self.service.set_active(self.user.id, True, actor=self.admin)
        self.assertTrue(user.is_active)
        self.assertIsNone(user.banned_at)


class LiftExpiredSuspensionsTest(TestCase):

    def setUp(self):
        self.service = AccountService()

    def test_only_expired_suspensions_are_lifted(self):
        expired = SuspendedUserFactory(suspended_until=timezone.now() - timedelta(minutes=5))
        running = SuspendedUserFactory()
        banned = BannedUserFactory()

        lifted = self.service.lift_expired_suspensions()

        self.assertEqual(lifted, 1)
        expired.refresh_from_db()
        running.refresh_from_db()
        banned.refresh_from_db()
        self.assertTrue(expired.is_active)
        self.assertIsNone(expired.suspended_until)
        self.assertFalse(running.is_active)
        self.assertFalse(banned.is_active)

    def test_banned_user_with_past_suspension_stays_banned(self):
        banned = BannedUserFactory(suspended_until=timezone.now() - timedelta(days=1))

        self.assertEqual(self.service.lift_expired_suspensions(), 0)
        banned.refresh_from_db()
        self.assertFalse(banned.is_active)


class LiftExpiredSuspensionsTaskTest(TestCase):

    def test_task_reports_count(self):
        from accounts.tasks import lift_expired_suspensions

        SuspendedUserFactory(suspended_until=timezone.now() - timedelta(minutes=5))

        result = lift_expired_suspensions.apply().get()

        self.assertEqual(result, {'lifted': 1, 'status': 'success'})
