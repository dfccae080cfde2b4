"""
Base Django settings for civic_platform project.

This file contains settings common to all environments.
Environment-specific settings should be in development.py, production.py, etc.
"""

import os
from pathlib import Path
from datetime import timedelta
from decouple import config, Csv

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# ============================================================================
# ENVIRONMENT CONFIGURATION
# ============================================================================

DJANGO_ENVIRONMENT = config('DJANGO_ENVIRONMENT', default='development')

# ============================================================================
# SECURITY
# ============================================================================

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = config('SECRET_KEY', default='django-insecure-civic-platform-dev-key')

ALLOWED_HOSTS = config('ALLOWED_HOSTS', default='localhost,127.0.0.1', cast=Csv())

# ============================================================================
# APPLICATION DEFINITION
# ============================================================================

INSTALLED_APPS = [
    # Django Core Apps
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    # Third-party Apps
    'rest_framework',
    'rest_framework_simplejwt',
    'corsheaders',
    'django_filters',
    'drf_spectacular',  # OpenAPI documentation

    # Local Apps
    'core',
    'accounts',
    'content',
    'moderation',
    'notifications',
    'analytics',
]

# ============================================================================
# MIDDLEWARE
# ============================================================================

MIDDLEWARE = [
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

# ============================================================================
# URL & WSGI
# ============================================================================

ROOT_URLCONF = 'civic_platform.urls'
WSGI_APPLICATION = 'civic_platform.wsgi.application'

# ============================================================================
# TEMPLATES
# ============================================================================

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [BASE_DIR / 'templates'],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

# ============================================================================
# DATABASE
# ============================================================================

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': config('DB_NAME', default='civic_platform'),
        'USER': config('DB_USER', default='civic'),
        'PASSWORD': config('DB_PASSWORD', default=''),
        'HOST': config('DB_HOST', default='localhost'),
        'PORT': config('DB_PORT', default=5432, cast=int),
        'CONN_MAX_AGE': 600,  # Persistent connections
        'OPTIONS': {
            'connect_timeout': 60,
        },
    }
}

# ============================================================================
# PASSWORD VALIDATION & SECURITY
# ============================================================================

# Custom User model with UUID primary key and civic role
AUTH_USER_MODEL = 'accounts.User'

PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.Argon2PasswordHasher",
    "django.contrib.auth.hashers.PBKDF2PasswordHasher",
]

AUTH_PASSWORD_VALIDATORS = [
    {
        'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator',
        'OPTIONS': {
            'min_length': 8,
        }
    },
    {
        'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator',
    },
]

# ============================================================================
# INTERNATIONALIZATION
# ============================================================================

LANGUAGE_CODE = config('LANGUAGE_CODE', default='en-us')
TIME_ZONE = config('TIME_ZONE', default='UTC')
USE_I18N = True
USE_TZ = True

LANGUAGES = [
    ('en', 'English'),
    ('fr', 'French'),
]

# ============================================================================
# STATIC FILES
# ============================================================================

STATIC_URL = '/static/'
STATIC_ROOT = os.path.join(BASE_DIR, 'staticfiles')

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# ============================================================================
# DJANGO REST FRAMEWORK
# ============================================================================

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': (
        'rest_framework_simplejwt.authentication.JWTAuthentication',
    ),
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
    'DEFAULT_PAGINATION_CLASS': 'core.pagination.CivicPagination',
    'PAGE_SIZE': 20,
    'DEFAULT_FILTER_BACKENDS': [
        'django_filters.rest_framework.DjangoFilterBackend',
    ],
    'DEFAULT_THROTTLE_CLASSES': [
        'rest_framework.throttling.AnonRateThrottle',
        'rest_framework.throttling.UserRateThrottle',
    ],
    'DEFAULT_THROTTLE_RATES': {
        'anon': '100/hour',
        'user': '1000/hour',
        'content_report': '30/hour',
        'vote': '300/hour',
        'content_create': '60/hour',
    },
    'DEFAULT_SCHEMA_CLASS': 'drf_spectacular.openapi.AutoSchema',
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    # Custom exception handler enabled
    'EXCEPTION_HANDLER': 'core.exceptions.problem_exception_handler',
}

# ============================================================================
# JWT CONFIGURATION
# ============================================================================

# Tokens are issued by the identity service; this API only verifies them.
SIMPLE_JWT = {
    'ACCESS_TOKEN_LIFETIME': timedelta(minutes=15),
    'REFRESH_TOKEN_LIFETIME': timedelta(days=14),
    'ALGORITHM': 'HS256',
    'SIGNING_KEY': config('JWT_SIGNING_KEY', default=SECRET_KEY),
    'ISSUER': 'civic_platform',
    'AUTH_HEADER_TYPES': ('Bearer',),
    'AUTH_HEADER_NAME': 'HTTP_AUTHORIZATION',
    'USER_ID_FIELD': 'id',
    'USER_ID_CLAIM': 'user_id',
}

# ============================================================================
# DRF SPECTACULAR (OpenAPI Documentation)
# ============================================================================

SPECTACULAR_SETTINGS = {
    'TITLE': 'Civic Platform API',
    'DESCRIPTION': 'REST API for the municipal civic-engagement platform',
    'VERSION': '1.0.0',
    'SERVE_INCLUDE_SCHEMA': False,
    'COMPONENT_SPLIT_REQUEST': True,
    'SCHEMA_PATH_PREFIX': '/api/v1/',
}

# ============================================================================
# CORS CONFIGURATION
# ============================================================================

FRONTEND_URL = config('FRONTEND_URL', default='http://localhost:3000')

CORS_ALLOWED_ORIGINS = [FRONTEND_URL]
CORS_ALLOW_CREDENTIALS = True

# ============================================================================
# CACHE CONFIGURATION
# ============================================================================

REDIS_URL = config('REDIS_URL', default='redis://127.0.0.1:6379/1')

CACHES = {
    'default': {
        'BACKEND': 'django_redis.cache.RedisCache',
        'LOCATION': REDIS_URL,
        'OPTIONS': {
            'CLIENT_CLASS': 'django_redis.client.DefaultClient',
        },
        'KEY_PREFIX': 'civic_platform',
        'TIMEOUT': 300,  # 5 minutes default
    }
}

# ============================================================================
# EMAIL
# ============================================================================

EMAIL_BACKEND = config(
    'EMAIL_BACKEND', default='django.core.mail.backends.console.EmailBackend')
DEFAULT_FROM_EMAIL = config(
    'DEFAULT_FROM_EMAIL', default='Civic Platform <noreply@civic-platform.local>')

# ============================================================================
# CELERY
# ============================================================================

CELERY_BROKER_URL = config('CELERY_BROKER_URL', default=REDIS_URL)
CELERY_RESULT_BACKEND = config('CELERY_RESULT_BACKEND', default=REDIS_URL)
CELERY_TASK_ALWAYS_EAGER = config('CELERY_TASK_ALWAYS_EAGER', default=False, cast=bool)

# ============================================================================
# CIVIC PLATFORM FEATURES
# ============================================================================

VOTING = {
    # Whether authors may vote on their own posts and comments
    'ALLOW_SELF_VOTE': config('VOTING_ALLOW_SELF_VOTE', default=True, cast=bool),
}

MODERATION = {
    'SUSPENSION_DAYS': config('MODERATION_SUSPENSION_DAYS', default=7, cast=int),
    'NOTIFY_REPORTER_ON_CLOSE': True,
}

NOTIFICATIONS = {
    'DEFAULT_EXPIRY_DAYS': config('NOTIFICATION_EXPIRY_DAYS', default=90, cast=int),
    'EMAIL_SUBJECT_PREFIX': '[Civic Platform] ',
}

REALTIME_PUSH = {
    'BACKEND': config(
        'REALTIME_PUSH_BACKEND',
        default='notifications.realtime.RedisPushBackend'),
    'OPTIONS': {
        'url': config('REALTIME_PUSH_REDIS_URL', default=REDIS_URL),
        'channel_prefix': 'civic',
    },
}

# ============================================================================
# LOGGING CONFIGURATION
# ============================================================================

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'filters': {
        'sensitive_data_filter': {
            '()': 'core.logging.structured.SensitiveDataFilter',
        },
    },
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {module} {process:d} {thread:d} {message}',
            'style': '{',
        },
        'structured': {
            '()': 'core.logging.structured.StructuredFormatter',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
            'filters': ['sensitive_data_filter'],
        },
        'structured_console': {
            'class': 'logging.StreamHandler',
            'formatter': 'structured',
            'filters': ['sensitive_data_filter'],
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'INFO',
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
        'civic_platform': {
            'handlers': ['structured_console'],
            'level': 'DEBUG',
            'propagate': False,
        },
        'business': {
            'handlers': ['structured_console'],
            'level': 'INFO',
            'propagate': False,
        },
        'security': {
            'handlers': ['structured_console'],
            'level': 'INFO',
            'propagate': False,
        },
    },
}
