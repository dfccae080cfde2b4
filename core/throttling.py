"""
Throttling classes for the Civic Platform.

Rates are configured per scope in REST_FRAMEWORK['DEFAULT_THROTTLE_RATES']
so each environment can tune them.
"""

from rest_framework.throttling import UserRateThrottle


class ContentReportThrottle(UserRateThrottle):
    """
    Throttle for filing reports.

    Prevents report flooding against a single user or post.
    """
    scope = 'content_report'


class VoteThrottle(UserRateThrottle):
    """
    Throttle for casting votes.
    """
    scope = 'vote'


class ContentCreateThrottle(UserRateThrottle):
    """
    Throttle for creating posts, comments and events.
    """
    scope = 'content_create'
