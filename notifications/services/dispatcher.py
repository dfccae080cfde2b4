"""
Notification Dispatcher.

Creates notifications, decides which delivery channels apply to each
recipient, and drives delivery:
- in-app: pushed through the injected real-time PushBackend once the
  notification is committed; a failed push is logged and the delivery
  stays pending
- email: handed to a Celery task after commit
- SMS: left pending until an SMS gateway reports back through
  update_delivery_status()

Recipient-facing operations (listing, read state, deletion) and the expiry
sweep live here too.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import DatabaseError, transaction
from django.utils import timezone
import structlog

from core.exceptions import NotFound, ProblemDetailException, ValidationFailed
from core.pagination import paginate
from core.utils import parse_uuid
from ..models import (
    CategorySubscription,
    Notification,
    NotificationDelivery,
    NotificationPreference,
)

User = get_user_model()
logger = structlog.get_logger(__name__)

NOTIFICATION_TYPES = {choice for choice, _ in Notification.TYPE_CHOICES}
PRIORITIES = {choice for choice, _ in Notification.PRIORITY_CHOICES}
ENTITY_TYPES = {choice for choice, _ in Notification.ENTITY_TYPE_CHOICES}
DELIVERY_METHODS = {choice for choice, _ in NotificationDelivery.METHOD_CHOICES}
DELIVERY_STATUSES = {choice for choice, _ in NotificationDelivery.STATUS_CHOICES}


@dataclass
class NotificationData:
    """What to tell a recipient."""
    type: str
    title: str
    message: str
    entity_type: Optional[str] = None
    entity_id: Any = None
    url: str = ''
    priority: str = Notification.NORMAL
    metadata: Dict[str, Any] = field(default_factory=dict)
    expires_at: Optional[datetime] = None

    def validate(self):
        """
        Raises:
            ValidationFailed: On an unknown enum value or over-long text
        """
        if self.type not in NOTIFICATION_TYPES:
            raise ValidationFailed(f'Unknown notification type: {self.type}', field='type')
        if self.priority not in PRIORITIES:
            raise ValidationFailed(f'Unknown priority: {self.priority}', field='priority')
        if self.entity_type and self.entity_type not in ENTITY_TYPES:
            raise ValidationFailed(f'Unknown entity type: {self.entity_type}', field='entity_type')
        if not self.title or len(self.title) > 200:
            raise ValidationFailed('title must be 1-200 characters.', field='title')
        if not self.message or len(self.message) > 1000:
            raise ValidationFailed('message must be 1-1000 characters.', field='message')


class NotificationDispatcher:
    """
    Service creating and delivering notifications.
    """

    def __init__(self, push_backend):
        self.push_backend = push_backend

    # -------------------------------------------------------------------------
    # Channel selection
    # -------------------------------------------------------------------------

    def preference_for(self, user) -> Dict[str, bool]:
        """The user's channel switches, falling back to the defaults."""
        try:
            preference = user.notification_preference
        except NotificationPreference.DoesNotExist:
            return dict(NotificationPreference.DEFAULTS)
        return {
            'in_app_enabled': preference.in_app_enabled,
            'email_enabled': preference.email_enabled,
            'sms_enabled': preference.sms_enabled,
        }

    def select_methods(self, preference: Dict[str, bool]) -> List[str]:
        """
        In-app unless explicitly disabled; email and SMS only when enabled.
        """
        methods = []
        if preference.get('in_app_enabled', True) is not False:
            methods.append(NotificationDelivery.IN_APP)
        if preference.get('email_enabled'):
            methods.append(NotificationDelivery.EMAIL)
        if preference.get('sms_enabled'):
            methods.append(NotificationDelivery.SMS)
        return methods

    # -------------------------------------------------------------------------
    # Creation and fan-out
    # -------------------------------------------------------------------------

    def notify(self, recipient_id, data: NotificationData) -> Notification:
        """
        Create a notification for one recipient and start its delivery.

        Args:
            recipient_id: Id of the receiving user
            data: Notification content

        Returns:
            Notification

        Raises:
            NotFound: Unknown or malformed recipient id
            ValidationFailed: Invalid notification data
        """
        data.validate()
        pk = parse_uuid(recipient_id, 'Recipient')
        expires_at = data.expires_at or timezone.now() + timedelta(
            days=settings.NOTIFICATIONS['DEFAULT_EXPIRY_DAYS'])

        # Every query runs in the savepoint so a failure here leaves an
        # enclosing transaction usable
        with transaction.atomic():
            try:
                recipient = User.objects.select_related('notification_preference').get(pk=pk)
            except User.DoesNotExist:
                raise NotFound('Recipient not found.')

            methods = self.select_methods(self.preference_for(recipient))
            notification = Notification.objects.create(
                recipient=recipient,
                type=data.type,
                title=data.title,
                message=data.message,
                entity_type=data.entity_type or '',
                entity_id=data.entity_id,
                url=data.url or '',
                metadata=data.metadata or {},
                priority=data.priority,
                expires_at=expires_at,
            )
            NotificationDelivery.objects.bulk_create([
                NotificationDelivery(notification=notification, method=method)
                for method in methods
            ])

        if NotificationDelivery.IN_APP in methods:
            transaction.on_commit(lambda: self._push_in_app(notification))
        if NotificationDelivery.EMAIL in methods:
            transaction.on_commit(lambda: self._enqueue_email(notification))

        logger.info(
            "Notification created",
            notification_id=str(notification.id),
            recipient_id=str(recipient.id),
            notification_type=data.type,
            methods=methods,
        )
        return notification

    def _push_in_app(self, notification):
        payload = {
            'id': str(notification.id),
            'type': notification.type,
            'title': notification.title,
            'message': notification.message,
            'priority': notification.priority,
            'entity_type': notification.entity_type or None,
            'entity_id': str(notification.entity_id) if notification.entity_id else None,
            'url': notification.url,
            'created_at': notification.created_at.isoformat(),
        }
        try:
            self.push_backend.push_to_user(notification.recipient_id, 'notification', payload)
        except Exception as exc:
            # Push is best-effort: the in-app delivery stays pending
            logger.warning(
                "Real-time push failed",
                notification_id=str(notification.id),
                error=str(exc),
            )
            return

        NotificationDelivery.objects.filter(
            notification=notification,
            method=NotificationDelivery.IN_APP,
        ).update(status=NotificationDelivery.SENT, sent_at=timezone.now())

    def _enqueue_email(self, notification):
        from ..tasks import deliver_email_notification

        try:
            deliver_email_notification.delay(str(notification.id))
        except Exception as exc:
            # Broker unavailable: the email delivery stays pending
            logger.error(
                "Could not queue email delivery",
                notification_id=str(notification.id),
                error=str(exc),
            )

    def bulk_notify(self, recipient_ids: Iterable, data: NotificationData) -> List[Notification]:
        """
        Notify each recipient independently.

        A recipient that cannot be notified (unknown id, database error) is
        skipped; the others still get their notification.

        Returns:
            list: The notifications that were created
        """
        data.validate()

        created = []
        failed = 0
        for recipient_id in recipient_ids:
            try:
                created.append(self.notify(recipient_id, data))
            except (ProblemDetailException, DatabaseError) as exc:
                failed += 1
                logger.info(
                    "Skipped bulk notification recipient",
                    recipient_id=str(recipient_id),
                    error=type(exc).__name__,
                )

        logger.info(
            "Bulk notification sent",
            notification_type=data.type,
            sent=len(created),
            skipped=failed,
        )
        return created

    def notify_subscribers(self, category: str, data: NotificationData,
                           exclude: Iterable = ()) -> List[Notification]:
        """
        Notify every active user subscribed to a category.

        Subscribers are resolved once, at call time.
        """
        if category not in CategorySubscription.CATEGORIES:
            raise ValidationFailed(f'Unknown category: {category}', field='category')

        recipient_ids = list(
            User.objects.filter(
                is_active=True,
                category_subscriptions__category=category,
            ).exclude(pk__in=list(exclude)).values_list('pk', flat=True).distinct()
        )
        return self.bulk_notify(recipient_ids, data)

    # -------------------------------------------------------------------------
    # Recipient operations
    # -------------------------------------------------------------------------

    def _get_for_recipient(self, notification_id, user) -> Notification:
        try:
            return Notification.objects.get(
                pk=parse_uuid(notification_id, 'Notification'), recipient=user)
        except Notification.DoesNotExist:
            raise NotFound('Notification not found.')

    def list_for_user(self, user, page=1, limit=20, unread_only=False) -> Dict[str, Any]:
        """
        Returns:
            dict: {'items': [...], 'unread_count': int, 'pagination': {...}}
        """
        notifications = Notification.objects.filter(recipient=user).prefetch_related('deliveries')
        if unread_only:
            notifications = notifications.filter(is_read=False)

        result = paginate(notifications.order_by('-created_at'), page, limit)
        result['unread_count'] = self.unread_count(user)
        return result

    def unread_count(self, user) -> int:
        return Notification.objects.filter(recipient=user, is_read=False).count()

    def mark_as_read(self, notification_id, user) -> Notification:
        notification = self._get_for_recipient(notification_id, user)
        notification.mark_as_read()
        return notification

    def mark_all_as_read(self, user) -> int:
        """Returns the number of notifications marked read."""
        return Notification.objects.filter(recipient=user, is_read=False).update(
            is_read=True, read_at=timezone.now())

    def delete(self, notification_id, user) -> None:
        notification = self._get_for_recipient(notification_id, user)
        notification.delete()

    # -------------------------------------------------------------------------
    # Delivery subsystem
    # -------------------------------------------------------------------------

    def update_delivery_status(self, notification_id, method, status, error='') -> NotificationDelivery:
        """
        Record a delivery outcome reported by a channel.

        Raises:
            ValidationFailed: Unknown method or status
            NotFound: No such delivery
        """
        if method not in DELIVERY_METHODS:
            raise ValidationFailed(f'Unknown delivery method: {method}', field='method')
        if status not in DELIVERY_STATUSES:
            raise ValidationFailed(f'Unknown delivery status: {status}', field='status')

        try:
            delivery = NotificationDelivery.objects.get(
                notification_id=parse_uuid(notification_id, 'Notification'), method=method)
        except NotificationDelivery.DoesNotExist:
            raise NotFound('Delivery not found.')

        delivery.status = status
        delivery.error = error or ''
        if status in (NotificationDelivery.SENT, NotificationDelivery.DELIVERED) and delivery.sent_at is None:
            delivery.sent_at = timezone.now()
        delivery.save(update_fields=['status', 'error', 'sent_at', 'updated_at'])
        return delivery

    def purge_expired(self, now=None) -> int:
        """
        Delete notifications whose expiry has passed.

        Returns:
            int: Number of deleted notifications
        """
        now = now or timezone.now()
        expired = Notification.objects.filter(expires_at__isnull=False, expires_at__lte=now)
        count = expired.count()
        expired.delete()
        if count:
            logger.info("Purged expired notifications", count=count)
        return count
