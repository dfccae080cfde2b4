"""
Testing settings for civic_platform project.

This file contains settings specific to running tests.
Optimized for speed and isolation.
"""

from .base import *

# ============================================================================
# DEBUG & TESTING
# ============================================================================

DEBUG = False
TESTING = True

# ============================================================================
# DATABASE - Testing
# ============================================================================

# Use in-memory SQLite for faster tests
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

# ============================================================================
# EMAIL BACKEND - Testing
# ============================================================================

# Use in-memory email backend for testing (no actual emails sent)
EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
DEFAULT_FROM_EMAIL = 'test@civic-platform.test'

# ============================================================================
# PASSWORD HASHING - Testing
# ============================================================================

# Use faster password hasher for tests (speeds up user creation)
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

# ============================================================================
# CACHING - Testing
# ============================================================================

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
    }
}

# ============================================================================
# REAL-TIME PUSH & CELERY - Testing
# ============================================================================

REALTIME_PUSH = {
    'BACKEND': 'notifications.realtime.InMemoryPushBackend',
    'OPTIONS': {},
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

# ============================================================================
# LOGGING - Testing
# ============================================================================

# Minimize logging during tests (set to DEBUG to troubleshoot)
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
}

# ============================================================================
# THROTTLING - Testing
# ============================================================================

# Disable throttling in tests (or it will slow down test suite)
REST_FRAMEWORK['DEFAULT_THROTTLE_RATES'] = {
    'anon': '10000/hour',
    'user': '10000/hour',
    'content_report': '10000/hour',
    'vote': '10000/hour',
    'content_create': '10000/hour',
}

# ============================================================================
# SECURITY - Testing
# ============================================================================

SECRET_KEY = 'test-secret-key-not-for-production'  # nosec - test environment only
ALLOWED_HOSTS = ['*']
