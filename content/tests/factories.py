"""
Factory Boy factories for content testing.
"""

import factory
from factory.django import DjangoModelFactory
from django.utils import timezone
from datetime import timedelta

from accounts.tests.factories import UserFactory
from ..models import Comment, Event, EventAttendee, Post


class PostFactory(DjangoModelFactory):
    """Factory for a published discussion post."""

    class Meta:
        model = Post

    author = factory.SubFactory(UserFactory)
    title = factory.Sequence(lambda n: f"Neighbourhood topic {n}")
    content = factory.Faker('paragraph', nb_sentences=4)
    category = Post.DISCUSSION
    status = Post.PUBLISHED
    visibility = Post.PUBLIC


class CommentFactory(DjangoModelFactory):
    """Factory for an active top-level comment."""

    class Meta:
        model = Comment

    post = factory.SubFactory(PostFactory)
    author = factory.SubFactory(UserFactory)
    content = factory.Faker('sentence')
    status = Comment.ACTIVE


class EventFactory(DjangoModelFactory):
    """Factory for a published event a week from now."""

    class Meta:
        model = Event

    organizer = factory.SubFactory(UserFactory)
    title = factory.Sequence(lambda n: f"Community meeting {n}")
    description = factory.Faker('paragraph')
    category = 'community'
    start_at = factory.LazyFunction(lambda: timezone.now() + timedelta(days=7))
    end_at = factory.LazyAttribute(lambda obj: obj.start_at + timedelta(hours=2))
    location_name = 'Town Hall'
    status = Event.PUBLISHED


class EventAttendeeFactory(DjangoModelFactory):

    class Meta:
        model = EventAttendee

    event = factory.SubFactory(EventFactory)
    user = factory.SubFactory(UserFactory)
    status = EventAttendee.REGISTERED
