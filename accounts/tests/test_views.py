"""
API tests for user accounts and their administration.
"""

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from .factories import AdminFactory, StaffFactory, UserFactory


class AdminUserAPITest(APITestCase):

    def setUp(self):
        self.citizen = UserFactory()
        self.staff = StaffFactory()
        self.admin = AdminFactory()

    def test_citizen_cannot_list_users(self):
        self.client.force_authenticate(user=self.citizen)
        response = self.client.get(reverse('accounts:admin-user-list'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_staff_lists_users_with_pagination(self):
        self.client.force_authenticate(user=self.staff)
        response = self.client.get(reverse('accounts:admin-user-list'), {'limit': 2})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['items']), 2)
        self.assertEqual(response.data['pagination']['total'], 3)
        self.assertEqual(response.data['pagination']['pages'], 2)

    def test_invalid_limit_is_problem_json(self):
        self.client.force_authenticate(user=self.staff)
        response = self.client.get(reverse('accounts:admin-user-list'), {'limit': 500})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response['Content-Type'], 'application/problem+json')
        self.assertEqual(response.data['invalid_params'][0]['name'], 'limit')

    def test_only_admin_changes_roles(self):
        url = reverse('accounts:admin-user-role', args=[self.citizen.id])

        self.client.force_authenticate(user=self.staff)
        response = self.client.put(url, {'role': 'staff'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.admin)
        response = self.client.put(url, {'role': 'staff'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['role'], 'staff')

    def test_staff_deactivates_user(self):
        self.client.force_authenticate(user=self.staff)
        response = self.client.put(
            reverse('accounts:admin-user-set-status', args=[self.citizen.id]),
            {'is_active': False},
            format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.citizen.refresh_from_db()
        self.assertFalse(self.citizen.is_active)


class UserAPITest(APITestCase):

    def setUp(self):
        self.user = UserFactory()
        self.other = UserFactory()
        self.client.force_authenticate(user=self.user)

    def test_me(self):
        response = self.client.get(reverse('accounts:user-me'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['email'], self.user.email)

    def test_requires_authentication(self):
        self.client.force_authenticate(user=None)
        response = self.client.get(reverse('accounts:user-me'))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_report_user_twice(self):
        url = reverse('accounts:user-report', args=[self.other.id])

        response = self.client.post(url, {'reason': 'harassment'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['content_type'], 'user')
        self.assertEqual(response.data['priority'], 'high')

        response = self.client.post(url, {'reason': 'spam'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'duplicate_report')
