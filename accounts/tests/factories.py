"""
Factory Boy factories for account testing.
"""

import factory
from factory.django import DjangoModelFactory
from django.contrib.auth import get_user_model
from django.utils import timezone
from datetime import timedelta

User = get_user_model()


class UserFactory(DjangoModelFactory):
    """Factory for a citizen user."""

    class Meta:
        model = User

    username = factory.Sequence(lambda n: f"user{n}")
    email = factory.LazyAttribute(lambda obj: f"{obj.username}@example.com")
    first_name = factory.Faker('first_name')
    last_name = factory.Faker('last_name')
    role = User.CITIZEN
    is_active = True

    @factory.post_generation
    def password(self, create, extracted, **kwargs):
        """Set user password."""
        if not create:
            return

        password = extracted or 'TestPassword123!'
        self.set_password(password)
        self.save()


class StaffFactory(UserFactory):
    """Factory for a municipal staff member."""

    username = factory.Sequence(lambda n: f"staff{n}")
    role = User.STAFF


class AdminFactory(UserFactory):
    """Factory for an administrator."""

    username = factory.Sequence(lambda n: f"admin{n}")
    role = User.ADMIN


class SuspendedUserFactory(UserFactory):
    """Factory for a user whose suspension is still running."""

    is_active = False
    suspended_until = factory.LazyFunction(lambda: timezone.now() + timedelta(days=3))


class BannedUserFactory(UserFactory):
    """Factory for a permanently banned user."""

    is_active = False
    banned_at = factory.LazyFunction(timezone.now)
