"""
Celery configuration for the Civic Platform.

This module configures Celery for background task processing including:
- Async email delivery of notifications
- Periodic cleanup of expired notifications
- Lifting of expired account suspensions
- Event reminders for registered attendees
"""

import os
from celery import Celery
from celery.schedules import crontab

# Set default Django settings module
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'civic_platform.settings')

# Create Celery app
app = Celery('civic_platform')

# Load config from Django settings with CELERY namespace
app.config_from_object('django.conf:settings', namespace='CELERY')

# Auto-discover tasks in all installed apps
app.autodiscover_tasks()


# Celery Beat schedule for periodic tasks
app.conf.beat_schedule = {
    # Daily purge of expired notifications (2am)
    'purge-expired-notifications': {
        'task': 'notifications.tasks.purge_expired_notifications',
        'schedule': crontab(hour=2, minute=0),
        # Task expires after 1 hour if not executed
        'options': {'expires': 3600},
    },

    # Hourly reactivation of users whose suspension has ended
    'lift-expired-suspensions': {
        'task': 'accounts.tasks.lift_expired_suspensions',
        'schedule': crontab(minute=5),
        'options': {'expires': 1800},
    },

    # Hourly reminders for events starting within a day
    'send-event-reminders': {
        'task': 'content.tasks.send_event_reminders',
        'schedule': crontab(minute=15),
        'options': {'expires': 1800},
    },
}

# Celery configuration
app.conf.update(
    # Task settings
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,

    # Task execution settings
    task_track_started=True,
    task_time_limit=30 * 60,  # 30 minutes hard limit
    task_soft_time_limit=25 * 60,  # 25 minutes soft limit

    # Result backend settings
    result_expires=3600,  # Results expire after 1 hour

    # Worker settings
    worker_prefetch_multiplier=4,
    worker_max_tasks_per_child=1000,

    # Retry settings
    task_acks_late=True,  # Acknowledge tasks after completion
    task_reject_on_worker_lost=True,  # Reject lost tasks
)
