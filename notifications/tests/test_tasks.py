"""
Tests for notification Celery tasks.
"""

from datetime import timedelta
from smtplib import SMTPException
from unittest.mock import patch

from celery.exceptions import Retry
from django.core import mail
from django.test import TestCase
from django.utils import timezone

from accounts.tests.factories import UserFactory
from notifications.models import Notification, NotificationDelivery
from notifications.tasks import deliver_email_notification, purge_expired_notifications
from .factories import NotificationFactory


class DeliverEmailNotificationTest(TestCase):

    def setUp(self):
        self.notification = NotificationFactory(url='/posts/42')
        self.delivery = NotificationDelivery.objects.create(
            notification=self.notification, method=NotificationDelivery.EMAIL)

    def test_sends_email_and_marks_delivery(self):
        result = deliver_email_notification.apply(args=[str(self.notification.id)]).get()

        self.assertEqual(result, {'status': 'sent'})
        self.assertEqual(len(mail.outbox), 1)
        message = mail.outbox[0]
        self.assertEqual(message.subject, f'[Civic Platform] {self.notification.title}')
        self.assertEqual(message.to, [self.notification.recipient.email])
        self.assertIn('/posts/42', message.body)

        self.delivery.refresh_from_db()
        self.assertEqual(self.delivery.status, NotificationDelivery.SENT)

    def test_retries_on_smtp_error(self):
        with patch('notifications.tasks.send_mail', side_effect=SMTPException('timeout')), \
                patch.object(deliver_email_notification, 'retry', side_effect=Retry()) as retry:
            with self.assertRaises(Retry):
                deliver_email_notification.run(str(self.notification.id))

        self.assertEqual(retry.call_args.kwargs['countdown'], 300)
        self.delivery.refresh_from_db()
        self.assertEqual(self.delivery.status, NotificationDelivery.PENDING)

    def test_marks_failed_after_last_retry(self):
        with patch('notifications.tasks.send_mail', side_effect=SMTPException('timeout')):
            result = deliver_email_notification.apply(
                args=[str(self.notification.id)], retries=3).get()

        self.assertEqual(result, {'status': 'failed'})
        self.delivery.refresh_from_db()
        self.assertEqual(self.delivery.status, NotificationDelivery.FAILED)
        self.assertEqual(self.delivery.error, 'timeout')

    def test_recipient_without_email(self):
        notification = NotificationFactory(recipient=UserFactory(email=''))
        delivery = NotificationDelivery.objects.create(
            notification=notification, method=NotificationDelivery.EMAIL)

        result = deliver_email_notification.apply(args=[str(notification.id)]).get()

        self.assertEqual(result, {'status': 'failed'})
        self.assertEqual(len(mail.outbox), 0)
        delivery.refresh_from_db()
        self.assertEqual(delivery.status, NotificationDelivery.FAILED)

    def test_deleted_notification_is_skipped(self):
        notification_id = str(self.notification.id)
        self.notification.delete()

        result = deliver_email_notification.apply(args=[notification_id]).get()
        self.assertEqual(result, {'status': 'skipped'})


class PurgeExpiredNotificationsTest(TestCase):

    def test_purge(self):
        NotificationFactory(expires_at=timezone.now() - timedelta(days=1))
        NotificationFactory(expires_at=timezone.now() + timedelta(days=1))

        result = purge_expired_notifications.apply().get()

        self.assertEqual(result, {'deleted': 1, 'status': 'success'})
        self.assertEqual(Notification.objects.count(), 1)
