"""
Service container for the Civic Platform.

Services are plain objects built once when Django starts (see CoreConfig.ready)
and handed to views through ServiceMixin. Tests construct the services they
need directly, passing in fakes where useful.
"""

from dataclasses import dataclass

from django.apps import apps
from django.conf import settings
from django.utils.module_loading import import_string


@dataclass
class ServiceContainer:
    push_backend: object
    dispatcher: object
    vote_ledger: object
    event_registrar: object
    report_registry: object
    moderation_engine: object
    publishing: object
    preferences: object
    account_service: object
    analytics: object


def build_push_backend(config=None):
    """Instantiate the real-time push backend named in settings.REALTIME_PUSH."""
    config = config or settings.REALTIME_PUSH
    backend_class = import_string(config['BACKEND'])
    return backend_class(**config.get('OPTIONS', {}))


def build_container(push_backend=None):
    """
    Wire every service together.

    Args:
        push_backend: Optional backend override; defaults to settings.REALTIME_PUSH

    Returns:
        ServiceContainer
    """
    from accounts.services import AccountService
    from analytics.services import AnalyticsAggregator
    from content.services.events import EventRegistrar
    from content.services.publishing import PublishingService
    from content.services.votes import VoteLedger
    from moderation.services.engine import ModerationEngine
    from moderation.services.reports import ReportRegistry
    from notifications.services.dispatcher import NotificationDispatcher
    from notifications.services.preferences import PreferenceService

    push_backend = push_backend or build_push_backend()
    dispatcher = NotificationDispatcher(push_backend=push_backend)

    return ServiceContainer(
        push_backend=push_backend,
        dispatcher=dispatcher,
        vote_ledger=VoteLedger(),
        event_registrar=EventRegistrar(),
        report_registry=ReportRegistry(),
        moderation_engine=ModerationEngine(dispatcher=dispatcher),
        publishing=PublishingService(dispatcher=dispatcher),
        preferences=PreferenceService(),
        account_service=AccountService(),
        analytics=AnalyticsAggregator(),
    )


def get_services() -> ServiceContainer:
    """Return the process-wide container built at startup."""
    return apps.get_app_config('core').services


class ServiceMixin:
    """View mixin exposing the service container as `self.services`."""

    @property
    def services(self) -> ServiceContainer:
        return get_services()
