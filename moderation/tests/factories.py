"""
Factory Boy factories for moderation testing.
"""

import factory
from factory.django import DjangoModelFactory
from django.contrib.contenttypes.models import ContentType

from accounts.tests.factories import UserFactory
from content.tests.factories import PostFactory
from ..models import Report


class ReportFactory(DjangoModelFactory):
    """Factory for a pending spam report against a post."""

    class Meta:
        model = Report
        exclude = ['target']

    target = factory.SubFactory(PostFactory)
    reporter = factory.SubFactory(UserFactory)
    content_type = factory.LazyAttribute(lambda obj: ContentType.objects.get_for_model(obj.target))
    object_id = factory.LazyAttribute(lambda obj: obj.target.pk)
    reason = Report.SPAM
    description = 'Looks like spam'
    status = Report.PENDING
    priority = Report.MEDIUM
