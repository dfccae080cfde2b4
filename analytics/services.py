"""
Analytics Aggregator.

Read-only engagement metrics for the staff dashboard. Nothing here writes
to the database; the dashboard summary is cached briefly since it is
polled by every open admin screen.
"""

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.db.models import Avg, Count, F, FloatField, Q, Sum
from django.db.models.functions import TruncDay, TruncMonth
import structlog

from content.models import Comment, Event, EventAttendee, Post
from core.exceptions import ValidationFailed
from moderation.models import Report

User = get_user_model()
logger = structlog.get_logger(__name__)

DASHBOARD_CACHE_KEY = 'analytics:dashboard'
DASHBOARD_TIMEOUT = 60  # 1 minute

INTERVALS = {
    'day': TruncDay,
    'month': TruncMonth,
}

MAX_CONTRIBUTORS = 100


def _check_range(start, end):
    if start is not None and end is not None and start > end:
        raise ValidationFailed('start must not be after end.', field='start')


def _in_range(field, start, end):
    q = Q()
    if start is not None:
        q &= Q(**{f'{field}__gte': start})
    if end is not None:
        q &= Q(**{f'{field}__lte': end})
    return q


def _score_expression():
    return F('upvote_count') - F('downvote_count')


class AnalyticsAggregator:
    """
    Service computing platform-wide statistics.
    """

    def dashboard_summary(self, use_cache=True):
        """
        Headline numbers for the admin dashboard.

        Returns:
            dict: users (total, active), content (posts, comments, events),
                  moderation (pending_reports)
        """
        if use_cache:
            cached = cache.get(DASHBOARD_CACHE_KEY)
            if cached is not None:
                return cached

        users = User.objects.aggregate(
            total=Count('id'),
            active=Count('id', filter=Q(is_active=True)),
        )
        summary = {
            'users': users,
            'content': {
                'posts': Post.objects.filter(status=Post.PUBLISHED).count(),
                'comments': Comment.objects.filter(status=Comment.ACTIVE).count(),
                'events': Event.objects.filter(status=Event.PUBLISHED).count(),
            },
            'moderation': {
                'pending_reports': Report.objects.filter(status=Report.PENDING).count(),
            },
        }

        cache.set(DASHBOARD_CACHE_KEY, summary, DASHBOARD_TIMEOUT)
        return summary

    def user_growth(self, start=None, end=None, interval='day'):
        """
        New sign-ups per day or month.

        Returns:
            list: [{'period': datetime, 'count': int}, ...] oldest first
        """
        if interval not in INTERVALS:
            raise ValidationFailed(
                f'interval must be one of: {", ".join(INTERVALS)}', field='interval')
        _check_range(start, end)

        rows = (
            User.objects.filter(_in_range('created_at', start, end))
            .annotate(period=INTERVALS[interval]('created_at'))
            .values('period')
            .annotate(count=Count('id'))
            .order_by('period')
        )
        return [{'period': row['period'], 'count': row['count']} for row in rows]

    def content_engagement(self, start=None, end=None):
        """
        Views, comments and vote scores of posts published in a window.

        Args:
            start: Earliest published_at (inclusive), or None
            end: Latest published_at (inclusive), or None

        Returns:
            dict: {'overall': {...}, 'by_category': [...]} with categories
                  ordered by post count, largest first
        """
        _check_range(start, end)
        posts = Post.objects.filter(
            _in_range('published_at', start, end),
            status=Post.PUBLISHED,
        )

        overall = posts.aggregate(
            total_posts=Count('id'),
            total_views=Sum('view_count'),
            total_comments=Sum('comment_count'),
            avg_views=Avg('view_count', output_field=FloatField()),
            avg_comments=Avg('comment_count', output_field=FloatField()),
            avg_score=Avg(_score_expression(), output_field=FloatField()),
        )
        overall['total_views'] = overall['total_views'] or 0
        overall['total_comments'] = overall['total_comments'] or 0

        by_category = [
            {
                'category': row['category'],
                'count': row['count'],
                'total_views': row['total_views'] or 0,
                'total_comments': row['total_comments'] or 0,
                'avg_score': row['avg_score'],
            }
            for row in posts.values('category').annotate(
                count=Count('id'),
                total_views=Sum('view_count'),
                total_comments=Sum('comment_count'),
                avg_score=Avg(_score_expression(), output_field=FloatField()),
            ).order_by('-count', 'category')
        ]

        return {'overall': overall, 'by_category': by_category}

    def event_engagement(self, start=None, end=None):
        """
        Registration numbers of events starting in a window.

        Cancelled registrations are not counted.
        """
        _check_range(start, end)
        events = Event.objects.filter(_in_range('start_at', start, end))
        active_registration = Q(
            attendees__status__in=[EventAttendee.REGISTERED, EventAttendee.ATTENDED])

        total_events = events.count()
        total_registrations = EventAttendee.objects.filter(
            event__in=events,
        ).exclude(status=EventAttendee.CANCELLED).count()

        by_category = [
            {
                'category': row['category'],
                'count': row['count'],
                'total_registrations': row['registrations'],
            }
            for row in events.values('category').annotate(
                count=Count('id', distinct=True),
                registrations=Count('attendees', filter=active_registration),
            ).order_by('-count', 'category')
        ]

        return {
            'overall': {
                'total_events': total_events,
                'total_registrations': total_registrations,
                'avg_registrations': (
                    total_registrations / total_events if total_events else None
                ),
            },
            'by_category': by_category,
        }

    def top_contributors(self, limit=10):
        """
        Authors with the most published posts and active comments.

        Returns:
            dict: {'top_posters': [...], 'top_commenters': [...]}
        """
        try:
            limit = int(limit)
        except (TypeError, ValueError):
            raise ValidationFailed('limit must be an integer.', field='limit')
        if not 1 <= limit <= MAX_CONTRIBUTORS:
            raise ValidationFailed(
                f'limit must be between 1 and {MAX_CONTRIBUTORS}.', field='limit')

        posters = (
            Post.objects.filter(status=Post.PUBLISHED)
            .values('author')
            .annotate(post_count=Count('id'))
            .order_by('-post_count', 'author')[:limit]
        )
        commenters = (
            Comment.objects.filter(status=Comment.ACTIVE)
            .values('author')
            .annotate(comment_count=Count('id'))
            .order_by('-comment_count', 'author')[:limit]
        )

        return {
            'top_posters': self._with_users(posters, 'post_count'),
            'top_commenters': self._with_users(commenters, 'comment_count'),
        }

    def _with_users(self, rows, count_key):
        rows = list(rows)
        users = User.objects.in_bulk([row['author'] for row in rows])
        result = []
        for row in rows:
            user = users.get(row['author'])
            if user is None:
                continue
            result.append({
                'user_id': str(user.id),
                'username': user.username,
                'first_name': user.first_name,
                'last_name': user.last_name,
                count_key: row[count_key],
            })
        return result

    def activity_by_role(self):
        """
        Users, published posts and active comments per role.

        Every role appears, with zeros where there is no activity.
        """
        activity = {
            role: {'users': 0, 'posts': 0, 'comments': 0}
            for role in User.ROLES
        }

        for row in User.objects.values('role').annotate(count=Count('id')):
            activity[row['role']]['users'] = row['count']
        for row in Post.objects.filter(status=Post.PUBLISHED).values(
                'author__role').annotate(count=Count('id')):
            activity[row['author__role']]['posts'] = row['count']
        for row in Comment.objects.filter(status=Comment.ACTIVE).values(
                'author__role').annotate(count=Count('id')):
            activity[row['author__role']]['comments'] = row['count']

        return activity
