"""
Celery tasks for the content app.
"""

from celery import shared_task
import logging

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3)
def send_event_reminders(self):
    """
    Remind attendees of events starting in the next 24 hours.

    Runs hourly via Celery Beat.

    Returns:
        dict: Number of reminded events
    """
    try:
        from core.container import get_services

        reminded = get_services().publishing.send_event_reminders()

        logger.info(f"Sent reminders for {reminded} events")
        return {'events': reminded, 'status': 'success'}

    except Exception as exc:
        logger.error(f"Error sending event reminders: {exc}", exc_info=True)
        raise self.retry(exc=exc, countdown=300)
