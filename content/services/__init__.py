"""
Services for the content app.
"""

from .votes import VoteLedger, VoteTally
from .events import EventRegistrar
from .publishing import PublishingService

__all__ = [
    'VoteLedger',
    'VoteTally',
    'EventRegistrar',
    'PublishingService',
]
