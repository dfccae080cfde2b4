"""
Tests for the analytics aggregator.
"""

from datetime import timedelta

from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone

from accounts.tests.factories import StaffFactory, UserFactory
from analytics.services import AnalyticsAggregator
from content.models import Comment, EventAttendee, Post
from content.tests.factories import (
    CommentFactory,
    EventAttendeeFactory,
    EventFactory,
    PostFactory,
)
from core.exceptions import ValidationFailed
from moderation.tests.factories import ReportFactory


class AnalyticsTestCase(TestCase):

    def setUp(self):
        cache.clear()
        self.analytics = AnalyticsAggregator()


class DashboardSummaryTest(AnalyticsTestCase):

    def test_summary(self):
        PostFactory()
        PostFactory(status=Post.DRAFT)
        CommentFactory(status=Comment.HIDDEN)
        EventFactory()
        ReportFactory()
        UserFactory(is_active=False)

        summary = self.analytics.dashboard_summary()

        # Every factory above creates its own author or reporter
        self.assertEqual(summary['users']['total'], 8)
        self.assertEqual(summary['users']['active'], 7)
        self.assertEqual(summary['content'], {'posts': 3, 'comments': 0, 'events': 1})
        self.assertEqual(summary['moderation'], {'pending_reports': 1})

    def test_summary_is_cached(self):
        first = self.analytics.dashboard_summary()
        PostFactory()

        self.assertEqual(self.analytics.dashboard_summary(), first)
        self.assertEqual(
            self.analytics.dashboard_summary(use_cache=False)['content']['posts'], 1)


class UserGrowthTest(AnalyticsTestCase):

    def test_daily_growth(self):
        UserFactory.create_batch(3)

        growth = self.analytics.user_growth(interval='day')

        self.assertEqual(len(growth), 1)
        self.assertEqual(growth[0]['count'], 3)

    def test_window(self):
        UserFactory()
        growth = self.analytics.user_growth(
            start=timezone.now() + timedelta(days=1), end=timezone.now() + timedelta(days=2))
        self.assertEqual(growth, [])

    def test_invalid_arguments(self):
        with self.assertRaises(ValidationFailed):
            self.analytics.user_growth(interval='week')
        with self.assertRaises(ValidationFailed):
            self.analytics.user_growth(
                start=timezone.now(), end=timezone.now() - timedelta(days=1))


class EngagementTest(AnalyticsTestCase):

    def test_content_engagement(self):
        PostFactory(view_count=10, comment_count=1, upvote_count=2)
        PostFactory(view_count=30, comment_count=3)
        PostFactory(category=Post.NEWS, view_count=5, downvote_count=1)
        PostFactory(status=Post.DRAFT, view_count=1000)

        engagement = self.analytics.content_engagement()

        overall = engagement['overall']
        self.assertEqual(overall['total_posts'], 3)
        self.assertEqual(overall['total_views'], 45)
        self.assertEqual(overall['total_comments'], 4)
        self.assertAlmostEqual(overall['avg_views'], 15.0)
        self.assertAlmostEqual(overall['avg_score'], 1 / 3)

        by_category = engagement['by_category']
        self.assertEqual([row['category'] for row in by_category], ['discussion', 'news'])
        self.assertEqual(by_category[0]['count'], 2)
        self.assertEqual(by_category[0]['total_views'], 40)
        self.assertAlmostEqual(by_category[0]['avg_score'], 1.0)

    def test_empty_window(self):
        engagement = self.analytics.content_engagement()
        self.assertEqual(engagement['overall']['total_posts'], 0)
        self.assertEqual(engagement['overall']['total_views'], 0)
        self.assertIsNone(engagement['overall']['avg_views'])
        self.assertEqual(engagement['by_category'], [])

    def test_event_engagement(self):
        meeting = EventFactory()
        EventAttendeeFactory.create_batch(2, event=meeting)
        EventAttendeeFactory(event=meeting, status=EventAttendee.CANCELLED)
        EventFactory()
        EventFactory(category='sports')

        engagement = self.analytics.event_engagement()

        self.assertEqual(engagement['overall'], {
            'total_events': 3,
            'total_registrations': 2,
            'avg_registrations': 2 / 3,
        })
        self.assertEqual(engagement['by_category'], [
            {'category': 'community', 'count': 2, 'total_registrations': 2},
            {'category': 'sports', 'count': 1, 'total_registrations': 0},
        ])


class ContributorsTest(AnalyticsTestCase):

    def test_top_contributors(self):
        prolific = UserFactory()
        PostFactory.create_batch(2, author=prolific)
        PostFactory()
        PostFactory(author=prolific, status=Post.DRAFT)
        chatty = UserFactory()
        CommentFactory.create_batch(3, author=chatty)

        result = self.analytics.top_contributors(limit=1)

        self.assertEqual(result['top_posters'], [{
            'user_id': str(prolific.id),
            'username': prolific.username,
            'first_name': prolific.first_name,
            'last_name': prolific.last_name,
            'post_count': 2,
        }])
        self.assertEqual(result['top_commenters'][0]['user_id'], str(chatty.id))
        self.assertEqual(result['top_commenters'][0]['comment_count'], 3)

    def test_limit_bounds(self):
        for limit in (0, 101, 'ten'):
            with self.assertRaises(ValidationFailed):
                self.analytics.top_contributors(limit=limit)

    def test_activity_by_role(self):
        staff = StaffFactory()
        PostFactory(author=staff, is_official=True)
        CommentFactory()

        activity = self.analytics.activity_by_role()

        self.assertEqual(set(activity), {'citizen', 'staff', 'admin'})
        self.assertEqual(activity['staff'], {'users': 1, 'posts': 1, 'comments': 0})
        self.assertEqual(activity['admin'], {'users': 0, 'posts': 0, 'comments': 0})
        # the comment's author and its post's author
        self.assertEqual(activity['citizen'], {'users': 2, 'posts': 1, 'comments': 1})
