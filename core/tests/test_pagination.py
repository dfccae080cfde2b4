"""
Tests for the shared pagination helpers.
"""

from django.contrib.auth import get_user_model
from django.test import TestCase

from accounts.tests.factories import UserFactory
from core.exceptions import ValidationFailed
from core.pagination import paginate, page_info, validate_page_params

User = get_user_model()


class PageParamsTest(TestCase):

    def test_coerces_strings(self):
        self.assertEqual(validate_page_params('2', '50'), (2, 50))

    def test_rejects_out_of_range(self):
        for page, limit in ((0, 20), (1, 0), (1, 101), ('x', 20), (1, 'y')):
            with self.assertRaises(ValidationFailed):
                validate_page_params(page, limit)

    def test_page_info(self):
        self.assertEqual(page_info(1, 20, 0), {'page': 1, 'limit': 20, 'total': 0, 'pages': 0})
        self.assertEqual(page_info(3, 10, 21)['pages'], 3)


class PaginateTest(TestCase):

    def test_slices_queryset(self):
        UserFactory.create_batch(5)

        result = paginate(User.objects.order_by('username'), page=2, limit=2)

        self.assertEqual(len(result['items']), 2)
        self.assertEqual(result['pagination'], {'page': 2, 'limit': 2, 'total': 5, 'pages': 3})

    def test_page_past_the_end_is_empty(self):
        UserFactory()
        result = paginate(User.objects.all(), page=4, limit=10)
        self.assertEqual(result['items'], [])
        self.assertEqual(result['pagination']['total'], 1)
