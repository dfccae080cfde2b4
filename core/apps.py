"""
Core application configuration for the Civic Platform.

This app holds shared utilities (exception handling, logging, pagination,
permissions) and builds the service container once per process.
"""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'core'
    verbose_name = 'Core'

    services = None

    def ready(self):
        from .container import build_container
        from .logging.structured import configure_structlog

        configure_structlog()
        self.services = build_container()
