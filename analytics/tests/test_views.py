"""
API tests for the analytics endpoints.
"""

from django.core.cache import cache
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.tests.factories import StaffFactory, UserFactory
from content.tests.factories import EventFactory, PostFactory


class AnalyticsAPITest(APITestCase):

    def setUp(self):
        cache.clear()
        self.client.force_authenticate(user=StaffFactory())

    def test_citizens_are_forbidden(self):
        self.client.force_authenticate(user=UserFactory())
        for name in ('dashboard', 'user-growth', 'engagement', 'top-contributors', 'activity'):
            response = self.client.get(reverse(f'analytics:{name}'))
            self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, name)

    def test_dashboard(self):
        PostFactory()
        response = self.client.get(reverse('analytics:dashboard'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['content']['posts'], 1)

    def test_user_growth(self):
        response = self.client.get(reverse('analytics:user-growth'), {'interval': 'month'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['interval'], 'month')
        self.assertEqual(response.data['items'][0]['count'], 1)

    def test_user_growth_invalid_interval(self):
        response = self.client.get(reverse('analytics:user-growth'), {'interval': 'week'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['invalid_params'][0]['name'], 'interval')

    def test_engagement(self):
        PostFactory(view_count=7)
        EventFactory()

        response = self.client.get(reverse('analytics:engagement'))

        self.assertEqual(response.data['posts']['overall']['total_views'], 7)
        self.assertEqual(response.data['events']['overall']['total_events'], 1)

    def test_engagement_rejects_reversed_window(self):
        response = self.client.get(reverse('analytics:engagement'), {
            'start': '2026-02-01T00:00:00Z',
            'end': '2026-01-01T00:00:00Z',
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_top_contributors_limit(self):
        response = self.client.get(reverse('analytics:top-contributors'), {'limit': 0})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        PostFactory()
        response = self.client.get(reverse('analytics:top-contributors'), {'limit': 5})
        self.assertEqual(len(response.data['top_posters']), 1)

    def test_activity(self):
        response = self.client.get(reverse('analytics:activity'))
        self.assertEqual(response.data['staff']['users'], 1)
