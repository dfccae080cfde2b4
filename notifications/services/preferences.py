"""
Notification preferences and category subscriptions.
"""

from typing import Dict, Iterable, List

from django.db import transaction

from core.exceptions import ValidationFailed
from ..models import CategorySubscription, NotificationPreference


class PreferenceService:
    """
    Read and update a user's channel switches and subscriptions.
    """

    CHANNEL_FIELDS = ('in_app_enabled', 'email_enabled', 'sms_enabled')

    def get_preferences(self, user) -> Dict[str, object]:
        preference = NotificationPreference.objects.filter(user=user).first()
        channels = {
            name: getattr(preference, name) if preference else NotificationPreference.DEFAULTS[name]
            for name in self.CHANNEL_FIELDS
        }
        channels['categories'] = self.get_subscriptions(user)
        return channels

    def update_preferences(self, user, **channels) -> Dict[str, object]:
        """
        Update one or more channel switches.

        Raises:
            ValidationFailed: Unknown switch or non-boolean value
        """
        for name, value in channels.items():
            if name not in self.CHANNEL_FIELDS:
                raise ValidationFailed(f'Unknown preference: {name}', field=name)
            if not isinstance(value, bool):
                raise ValidationFailed(f'{name} must be a boolean.', field=name)

        preference, _ = NotificationPreference.objects.get_or_create(user=user)
        for name, value in channels.items():
            setattr(preference, name, value)
        preference.save()
        return self.get_preferences(user)

    def get_subscriptions(self, user) -> List[str]:
        return sorted(
            CategorySubscription.objects.filter(user=user).values_list('category', flat=True))

    def set_subscriptions(self, user, categories: Iterable[str]) -> List[str]:
        """
        Replace the user's subscribed categories.

        Raises:
            ValidationFailed: Unknown category
        """
        categories = set(categories)
        unknown = categories - set(CategorySubscription.CATEGORIES)
        if unknown:
            raise ValidationFailed(
                f'Unknown categories: {", ".join(sorted(unknown))}', field='categories')

        with transaction.atomic():
            CategorySubscription.objects.filter(user=user).exclude(category__in=categories).delete()
            existing = set(
                CategorySubscription.objects.filter(user=user).values_list('category', flat=True))
            CategorySubscription.objects.bulk_create([
                CategorySubscription(user=user, category=category)
                for category in categories - existing
            ])
        return self.get_subscriptions(user)
