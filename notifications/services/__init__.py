"""
Services for the notifications app.
"""

from .dispatcher import NotificationData, NotificationDispatcher
from .preferences import PreferenceService

__all__ = [
    'NotificationData',
    'NotificationDispatcher',
    'PreferenceService',
]
