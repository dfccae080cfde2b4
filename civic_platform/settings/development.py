"""
Development settings for civic_platform project.

This file contains settings specific to local development.
"""

from .base import *

# ============================================================================
# DEBUG & DEVELOPMENT
# ============================================================================

DEBUG = True
ALLOWED_HOSTS = ['localhost', '127.0.0.1', '0.0.0.0']

# ============================================================================
# EMAIL BACKEND - Development
# ============================================================================

if config('USE_MAILHOG', default=False, cast=bool):
    # Use MailHog for local email testing
    EMAIL_BACKEND = 'django.core.mail.backends.smtp.EmailBackend'
    EMAIL_HOST = 'localhost'
    EMAIL_PORT = 1025
    EMAIL_USE_TLS = False
else:
    # Default: Print emails to console (no external service needed)
    EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

# ============================================================================
# REAL-TIME PUSH - Development
# ============================================================================

# Without a Redis server, keep pushes in memory so notifications still work
if not config('USE_REDIS_PUSH', default=False, cast=bool):
    REALTIME_PUSH = {
        'BACKEND': 'notifications.realtime.InMemoryPushBackend',
        'OPTIONS': {},
    }

# ============================================================================
# CORS - Development
# ============================================================================

CORS_ALLOWED_ORIGINS = [
    'http://localhost:3000',
    'http://localhost:5173',
    'http://127.0.0.1:3000',
    'http://127.0.0.1:5173',
]

# ============================================================================
# CELERY - Development
# ============================================================================

CELERY_TASK_ALWAYS_EAGER = config('CELERY_TASK_ALWAYS_EAGER', default=True, cast=bool)

LOGGING['loggers']['civic_platform']['handlers'] = ['console']
