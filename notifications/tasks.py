"""
Celery tasks for the notifications app.

Background tasks for:
- Sending email deliveries asynchronously
- Purging expired notifications
"""

from smtplib import SMTPException

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail
import logging

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3)
def deliver_email_notification(self, notification_id):
    """
    Send the email delivery of a notification.

    Retries every 5 minutes on mail server errors; the delivery is marked
    failed once the retries are exhausted.

    Returns:
        dict: Delivery outcome
    """
    from core.container import get_services
    from .models import Notification, NotificationDelivery

    dispatcher = get_services().dispatcher

    notification = Notification.objects.select_related('recipient').filter(pk=notification_id).first()
    if notification is None:
        logger.info(f"Notification {notification_id} no longer exists, skipping email")
        return {'status': 'skipped'}

    recipient = notification.recipient
    if not recipient.email:
        dispatcher.update_delivery_status(
            notification_id, NotificationDelivery.EMAIL, NotificationDelivery.FAILED,
            error='Recipient has no email address')
        return {'status': 'failed'}

    subject = f"{settings.NOTIFICATIONS['EMAIL_SUBJECT_PREFIX']}{notification.title}"
    body = notification.message
    if notification.url:
        body = f"{body}\n\n{settings.FRONTEND_URL.rstrip('/')}{notification.url}"

    try:
        send_mail(
            subject=subject,
            message=body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient.email],
            fail_silently=False,
        )
    except (SMTPException, OSError) as exc:
        if self.request.retries >= self.max_retries:
            logger.error(f"Email delivery failed for notification {notification_id}: {exc}")
            dispatcher.update_delivery_status(
                notification_id, NotificationDelivery.EMAIL, NotificationDelivery.FAILED,
                error=str(exc))
            return {'status': 'failed'}
        # Retry in 5 minutes (300 seconds)
        raise self.retry(exc=exc, countdown=300)

    dispatcher.update_delivery_status(
        notification_id, NotificationDelivery.EMAIL, NotificationDelivery.SENT)
    logger.info(f"Email delivery sent for notification {notification_id}")
    return {'status': 'sent'}


@shared_task(bind=True, max_retries=3)
def purge_expired_notifications(self):
    """
    Delete notifications past their expiry date.

    Runs daily at 2am via Celery Beat.

    Returns:
        dict: Number of deleted notifications
    """
    try:
        from core.container import get_services

        deleted = get_services().dispatcher.purge_expired()

        logger.info(f"Purged {deleted} expired notifications")
        return {'deleted': deleted, 'status': 'success'}

    except Exception as exc:
        logger.error(f"Notification purge failed: {exc}", exc_info=True)
        raise self.retry(exc=exc, countdown=300)
