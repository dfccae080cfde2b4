"""
Production settings for civic_platform project.

This file contains settings specific to production deployment.
Security and performance optimized.
"""

import logging

from .base import *
import sentry_sdk
from sentry_sdk.integrations.celery import CeleryIntegration
from sentry_sdk.integrations.django import DjangoIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

# ============================================================================
# SECRET KEY VALIDATION
# ============================================================================

if SECRET_KEY.startswith('django-insecure-'):
    raise ValueError(
        "Production SECRET_KEY must not use the default insecure key. "
        "Please set a proper SECRET_KEY environment variable."
    )

if len(SECRET_KEY) < 32:
    raise ValueError(
        "Production SECRET_KEY must be at least 32 characters long for security. "
        f"Current length: {len(SECRET_KEY)}"
    )

# ============================================================================
# MIDDLEWARE - Production
# ============================================================================

# Insert WhiteNoise middleware after SecurityMiddleware for production
MIDDLEWARE.insert(
    MIDDLEWARE.index('django.middleware.security.SecurityMiddleware') + 1,
    'whitenoise.middleware.WhiteNoiseMiddleware',
)

# ============================================================================
# DEBUG & HOSTS
# ============================================================================

DEBUG = False

# ============================================================================
# DATABASE - Production
# ============================================================================

DATABASE_URL = config('DATABASE_URL', default='')

if DATABASE_URL:
    import dj_database_url
    DATABASES = {
        'default': dj_database_url.parse(
            DATABASE_URL,
            conn_max_age=60,
        )
    }
    DATABASES['default']['OPTIONS'] = {
        'sslmode': 'require',
    }

# ============================================================================
# SECURITY HEADERS
# ============================================================================

SECURE_SSL_REDIRECT = config('SECURE_SSL_REDIRECT', default=False, cast=bool)
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')
SECURE_HSTS_SECONDS = 31536000  # 1 year
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_HSTS_PRELOAD = True
SECURE_CONTENT_TYPE_NOSNIFF = True
SECURE_REFERRER_POLICY = 'strict-origin-when-cross-origin'
X_FRAME_OPTIONS = 'DENY'

CSRF_COOKIE_SECURE = True
SESSION_COOKIE_SECURE = True

CORS_ALLOWED_ORIGINS = [
    origin for origin in config('CORS_ALLOWED_ORIGINS', default=FRONTEND_URL, cast=Csv())
    if origin
]
CSRF_TRUSTED_ORIGINS = CORS_ALLOWED_ORIGINS.copy()

# ============================================================================
# STATIC FILES - Production
# ============================================================================

STORAGES = {
    'default': {
        'BACKEND': 'django.core.files.storage.FileSystemStorage',
    },
    'staticfiles': {
        'BACKEND': 'whitenoise.storage.CompressedManifestStaticFilesStorage',
    },
}

# ============================================================================
# LOGGING - Production
# ============================================================================

LOGGING['root']['level'] = 'WARNING'
LOGGING['loggers']['civic_platform']['level'] = 'INFO'
LOGGING['loggers']['django']['level'] = 'WARNING'

# ============================================================================
# SENTRY ERROR TRACKING
# ============================================================================

SENTRY_DSN = config('SENTRY_DSN', default=None)

if SENTRY_DSN:
    sentry_logging = LoggingIntegration(
        level=logging.INFO,
        event_level=logging.ERROR
    )

    sentry_sdk.init(
        dsn=SENTRY_DSN,
        integrations=[
            DjangoIntegration(
                transaction_style='url',
                middleware_spans=True,
                signals_spans=True,
            ),
            CeleryIntegration(),
            sentry_logging,
        ],
        traces_sample_rate=0.1,
        send_default_pii=False,
        environment=config('SENTRY_ENVIRONMENT', default='production'),
    )

# ============================================================================
# THROTTLING - Production
# ============================================================================

REST_FRAMEWORK['DEFAULT_THROTTLE_RATES'] = {
    'anon': '100/hour',
    'user': '1000/hour',
    'content_report': '20/hour',
    'vote': '300/hour',
    'content_create': '60/hour',
}
