"""
Tests for event registration.
"""

import uuid
from datetime import timedelta

from django.test import TestCase
from django.utils import timezone

from accounts.tests.factories import UserFactory
from core.exceptions import (
    CapacityExceeded,
    DuplicateRegistration,
    InvalidTransition,
    NotFound,
    ValidationFailed,
)
from content.models import Event, EventAttendee
from content.services.events import EventRegistrar
from content.services.publishing import PublishingService
from notifications.realtime import InMemoryPushBackend
from notifications.services.dispatcher import NotificationDispatcher
from .factories import EventAttendeeFactory, EventFactory


class EventRegistrarTest(TestCase):

    def setUp(self):
        self.registrar = EventRegistrar()
        self.user = UserFactory()

    def test_register(self):
        event = EventFactory()
        attendee = self.registrar.register(event.id, self.user)

        self.assertEqual(attendee.status, EventAttendee.REGISTERED)
        self.assertEqual(self.registrar.attendee_count(event), 1)

    def test_capacity_is_never_exceeded(self):
        event = EventFactory(capacity=2)
        self.registrar.register(event.id, UserFactory())
        self.registrar.register(event.id, UserFactory())

        with self.assertRaises(CapacityExceeded):
            self.registrar.register(event.id, self.user)
        self.assertEqual(self.registrar.attendee_count(event), 2)
        self.assertTrue(Event.objects.get(pk=event.pk).is_full)

    def test_cancelled_registrations_free_capacity(self):
        event = EventFactory(capacity=1)
        other = UserFactory()
        self.registrar.register(event.id, other)
        self.registrar.cancel(event.id, other)

        attendee = self.registrar.register(event.id, self.user)
        self.assertEqual(attendee.user, self.user)

    def test_duplicate_registration(self):
        event = EventFactory()
        self.registrar.register(event.id, self.user)

        with self.assertRaises(DuplicateRegistration):
            self.registrar.register(event.id, self.user)

    def test_reregister_reuses_cancelled_row(self):
        event = EventFactory()
        first = self.registrar.register(event.id, self.user)
        self.registrar.cancel(event.id, self.user)

        second = self.registrar.register(event.id, self.user)

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(second.status, EventAttendee.REGISTERED)
        self.assertEqual(EventAttendee.objects.filter(event=event).count(), 1)

    def test_deadline_passed(self):
        event = EventFactory(registration_deadline=timezone.now() - timedelta(hours=1))

        with self.assertRaises(ValidationFailed):
            self.registrar.register(event.id, self.user)

    def test_only_published_events_accept_registrations(self):
        for status in (Event.DRAFT, Event.CANCELLED, Event.COMPLETED):
            event = EventFactory(status=status)
            with self.assertRaises(InvalidTransition):
                self.registrar.register(event.id, self.user)

    def test_unknown_event(self):
        with self.assertRaises(NotFound):
            self.registrar.register(uuid.uuid4(), self.user)

    def test_cancel(self):
        attendee = EventAttendeeFactory(user=self.user)

        cancelled = self.registrar.cancel(attendee.event_id, self.user)

        self.assertEqual(cancelled.status, EventAttendee.CANCELLED)
        self.assertEqual(self.registrar.attendee_count(attendee.event), 0)

    def test_cancel_without_registration(self):
        event = EventFactory()
        with self.assertRaises(NotFound):
            self.registrar.cancel(event.id, self.user)


class EventCapacityChangeTest(TestCase):

    def setUp(self):
        self.registrar = EventRegistrar()
        self.publishing = PublishingService(
            dispatcher=NotificationDispatcher(push_backend=InMemoryPushBackend()))

    def test_capacity_cannot_drop_below_registrations(self):
        event = EventFactory(capacity=3)
        for _ in range(3):
            self.registrar.register(event.id, UserFactory())

        with self.assertRaises(ValidationFailed) as ctx:
            self.publishing.update_event(event, capacity=1)

        self.assertEqual(ctx.exception.field, 'capacity')
        event.refresh_from_db()
        self.assertEqual(event.capacity, 3)
        self.assertEqual(self.registrar.attendee_count(event), 3)

    def test_cancelled_registrations_do_not_hold_capacity(self):
        event = EventFactory(capacity=3)
        users = [UserFactory() for _ in range(3)]
        for user in users:
            self.registrar.register(event.id, user)
        self.registrar.cancel(event.id, users[0])

        self.publishing.update_event(event, capacity=2)

        event.refresh_from_db()
        self.assertEqual(event.capacity, 2)
        self.assertTrue(event.is_full)

    def test_capacity_can_be_removed(self):
        event = EventFactory(capacity=1)
        self.registrar.register(event.id, UserFactory())

        self.publishing.update_event(event, capacity=None)

        event.refresh_from_db()
        self.assertIsNone(event.capacity)
