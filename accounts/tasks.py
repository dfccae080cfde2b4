"""
Celery tasks for the accounts app.
"""

from celery import shared_task
import logging

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3)
def lift_expired_suspensions(self):
    """
    Reactivate users whose suspension period has passed.

    Runs hourly via Celery Beat.

    Returns:
        dict: Number of reactivated accounts
    """
    try:
        from core.container import get_services

        lifted = get_services().account_service.lift_expired_suspensions()

        logger.info(f"Lifted {lifted} expired suspensions")
        return {'lifted': lifted, 'status': 'success'}

    except Exception as exc:
        logger.error(f"Error lifting expired suspensions: {exc}")
        raise self.retry(exc=exc, countdown=300)
