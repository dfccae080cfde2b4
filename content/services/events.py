"""
Event registration.

Registrations are checked and written under a row lock on the event so the
number of non-cancelled attendees never exceeds the event's capacity.
"""

from django.db import transaction
from django.utils import timezone
import structlog

from core.exceptions import (
    CapacityExceeded,
    DuplicateRegistration,
    InvalidTransition,
    NotFound,
    ValidationFailed,
)
from core.utils import parse_uuid
from ..models import Event, EventAttendee

logger = structlog.get_logger(__name__)


class EventRegistrar:
    """
    Registers and unregisters users for events.
    """

    def _lock_event(self, event_id):
        try:
            return Event.objects.select_for_update().get(pk=parse_uuid(event_id, 'Event'))
        except Event.DoesNotExist:
            raise NotFound('Event not found.')

    def attendee_count(self, event) -> int:
        """Number of attendees whose registration is not cancelled."""
        return EventAttendee.objects.filter(event=event).exclude(
            status=EventAttendee.CANCELLED).count()

    def register(self, event_id, user) -> EventAttendee:
        """
        Register a user for a published event.

        A previously cancelled registration is reactivated rather than
        duplicated.

        Raises:
            NotFound: Event does not exist
            InvalidTransition: Event is not open (draft, cancelled, completed)
            ValidationFailed: Registration deadline has passed
            DuplicateRegistration: User already holds a registration
            CapacityExceeded: Event is full
        """
        with transaction.atomic():
            event = self._lock_event(event_id)

            if event.status != Event.PUBLISHED:
                raise InvalidTransition('Event is not available for registration.')

            now = timezone.now()
            if event.registration_deadline and now > event.registration_deadline:
                raise ValidationFailed('Registration deadline has passed.')

            attendee = EventAttendee.objects.filter(event=event, user=user).first()
            if attendee and attendee.status != EventAttendee.CANCELLED:
                raise DuplicateRegistration()

            if event.capacity is not None and self.attendee_count(event) >= event.capacity:
                raise CapacityExceeded()

            if attendee:
                attendee.status = EventAttendee.REGISTERED
                attendee.registered_at = now
                attendee.save(update_fields=['status', 'registered_at'])
            else:
                attendee = EventAttendee.objects.create(
                    event=event, user=user, registered_at=now)

        logger.info(
            "Registered for event",
            event_id=str(event.pk),
            user_id=str(user.pk),
        )
        return attendee

    def cancel(self, event_id, user) -> EventAttendee:
        """
        Cancel a user's registration.

        Raises:
            NotFound: Event does not exist or the user is not registered
        """
        with transaction.atomic():
            event = self._lock_event(event_id)
            attendee = EventAttendee.objects.filter(
                event=event, user=user).exclude(status=EventAttendee.CANCELLED).first()
            if attendee is None:
                raise NotFound('Not registered for this event.')

            attendee.status = EventAttendee.CANCELLED
            attendee.save(update_fields=['status'])

        logger.info(
            "Cancelled event registration",
            event_id=str(event.pk),
            user_id=str(user.pk),
        )
        return attendee
