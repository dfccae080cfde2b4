"""
Services for the moderation app.
"""

from .reports import ReportRegistry, ReportDetail
from .engine import ModerationEngine

__all__ = [
    'ReportRegistry',
    'ReportDetail',
    'ModerationEngine',
]
