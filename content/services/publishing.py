"""
Publishing of posts, comments and events.

Creates content on behalf of authors and fans out the notifications that go
with it. Category subscribers hear about official posts and new events,
post authors hear about new comments and comment authors about replies.
Event attendees are told about schedule changes and reminded a day ahead.
"""

from datetime import timedelta

from django.db import transaction
from django.db.models import ExpressionWrapper, F, FloatField
from django.utils import timezone
import structlog

from core.exceptions import InvalidTarget, InvalidTransition, Unauthorized, ValidationFailed
from core.utils import make_excerpt
from ..models import Comment, Event, EventAttendee, Post
from .events import EventRegistrar

logger = structlog.get_logger(__name__)

# Post category -> notification subscription category
SUBSCRIPTION_CATEGORIES = {
    Post.NEWS: 'news',
    Post.ANNOUNCEMENT: 'announcements',
    Post.DISCUSSION: 'discussions',
    Post.ALERT: 'alerts',
    Post.EVENT: 'events',
}

DELETED_COMMENT_TEXT = '[Comment deleted]'

# Event fields attendees are told about when they change
EVENT_UPDATE_FIELDS = {'start_at', 'end_at', 'location_name', 'is_online', 'online_url', 'status'}


class PublishingService:
    """
    Service for creating posts, comments and events.
    """

    def __init__(self, dispatcher):
        self.dispatcher = dispatcher

    def create_post(self, author, **fields) -> Post:
        """
        Create a post.

        Only staff and admins may publish official posts; an official
        published post is announced to the subscribers of its category.

        Raises:
            Unauthorized: A citizen asked for an official post
        """
        if fields.get('is_official') and not author.is_moderator:
            raise Unauthorized('Only staff can create official posts.')

        post = Post.objects.create(author=author, **fields)

        logger.info(
            "Post created",
            post_id=str(post.id),
            author_id=str(author.id),
            category=post.category,
            status=post.status,
        )

        if post.is_official and post.status == Post.PUBLISHED:
            transaction.on_commit(lambda: self._announce(post))
        return post

    def _announce(self, post):
        from notifications.services.dispatcher import NotificationData

        self.dispatcher.notify_subscribers(
            SUBSCRIPTION_CATEGORIES[post.category],
            NotificationData(
                type='announcement' if post.category == Post.ANNOUNCEMENT else 'new_post',
                title=post.title,
                message=post.excerpt,
                entity_type='post',
                entity_id=post.id,
                url=f'/posts/{post.id}',
                priority='high' if post.category == Post.ALERT else 'normal',
            ),
            exclude=[post.author_id],
        )

    def create_comment(self, author, post, content, parent=None) -> Comment:
        """
        Add a comment to a published post.

        Raises:
            InvalidTransition: The post is not published
            InvalidTarget: The parent comment belongs to another post
        """
        from notifications.services.dispatcher import NotificationData

        if post.status != Post.PUBLISHED:
            raise InvalidTransition('Comments are only allowed on published posts.')
        if parent is not None and parent.post_id != post.id:
            raise InvalidTarget('Parent comment belongs to a different post.', field='parent')

        with transaction.atomic():
            comment = Comment.objects.create(
                post=post, author=author, parent=parent, content=content)
            post.recount_comments()

        if post.author_id != author.id:
            self.dispatcher.notify(post.author_id, NotificationData(
                type='new_comment',
                title='New comment on your post',
                message=f'{author.get_full_name() or author.username} commented on "{post.title}"',
                entity_type='comment',
                entity_id=comment.id,
                url=f'/posts/{post.id}',
                metadata={'post_id': str(post.id)},
            ))

        if comment.parent_id and comment.parent.author_id not in (author.id, post.author_id):
            self.dispatcher.notify(comment.parent.author_id, NotificationData(
                type='comment_reply',
                title='New reply to your comment',
                message=f'{author.get_full_name() or author.username} replied to your comment',
                entity_type='comment',
                entity_id=comment.id,
                url=f'/posts/{post.id}',
                metadata={'post_id': str(post.id)},
            ))

        return comment

    def edit_comment(self, comment, content) -> Comment:
        """Replace a comment's text and mark it edited."""
        comment.content = content
        comment.is_edited = True
        comment.edited_at = timezone.now()
        comment.save(update_fields=['content', 'is_edited', 'edited_at', 'updated_at'])
        return comment

    def delete_comment(self, comment) -> Comment:
        """Soft-delete a comment and update the post's comment count."""
        with transaction.atomic():
            comment.status = Comment.DELETED
            comment.content = DELETED_COMMENT_TEXT
            comment.save(update_fields=['status', 'content', 'updated_at'])
            comment.post.recount_comments()
        return comment

    def trending_posts(self, limit=10):
        """
        Published posts ranked by votes, discussion and views.

        Net votes count double; every hundred views counts as one comment.
        """
        return list(
            Post.objects.filter(status=Post.PUBLISHED)
            .select_related('author')
            .annotate(trending_score=ExpressionWrapper(
                (F('upvote_count') - F('downvote_count')) * 2
                + F('comment_count')
                + F('view_count') / 100.0,
                output_field=FloatField(),
            ))
            .order_by('-trending_score', '-published_at')[:limit]
        )

    # =========================================================================
    # EVENTS
    # =========================================================================

    def create_event(self, organizer, **fields) -> Event:
        """
        Create an event; published events are announced to `events` subscribers.

        Raises:
            Unauthorized: A citizen asked for an official event
        """
        if fields.get('is_official') and not organizer.is_moderator:
            raise Unauthorized('Only staff can create official events.')

        event = Event.objects.create(organizer=organizer, **fields)

        logger.info(
            "Event created",
            event_id=str(event.id),
            organizer_id=str(organizer.id),
            category=event.category,
        )

        if event.status == Event.PUBLISHED:
            transaction.on_commit(lambda: self._announce_event(event))
        return event

    def _announce_event(self, event):
        from notifications.services.dispatcher import NotificationData

        self.dispatcher.notify_subscribers('events', NotificationData(
            type='new_post',
            title=f'New event: {event.title}',
            message=make_excerpt(event.description),
            entity_type='event',
            entity_id=event.id,
            url=f'/events/{event.id}',
            metadata={'start_at': event.start_at.isoformat()},
        ), exclude=[event.organizer_id])

    def update_event(self, event, **fields) -> Event:
        """
        Apply changes to an event.

        Registered attendees are told when the schedule, place or status
        changes.

        Raises:
            ValidationFailed: capacity below the current number of attendees
        """
        with transaction.atomic():
            locked = Event.objects.select_for_update().get(pk=event.pk)
            capacity = fields.get('capacity')
            if capacity is not None:
                attendees = EventRegistrar().attendee_count(locked)
                if capacity < attendees:
                    raise ValidationFailed(
                        f'Capacity cannot be lower than the {attendees} current registrations.',
                        field='capacity',
                    )

            changed = [
                key for key, value in fields.items()
                if getattr(event, key) != value
            ]
            for key, value in fields.items():
                setattr(event, key, value)
            event.save()

        notable = [key for key in changed if key in EVENT_UPDATE_FIELDS]
        if notable:
            transaction.on_commit(lambda: self._notify_attendees(event, notable))
        return event

    def _notify_attendees(self, event, changed):
        from notifications.services.dispatcher import NotificationData

        attendee_ids = list(
            EventAttendee.objects.filter(event=event)
            .exclude(status=EventAttendee.CANCELLED)
            .exclude(user_id=event.organizer_id)
            .values_list('user_id', flat=True)
        )
        if not attendee_ids:
            return

        cancelled = event.status == Event.CANCELLED
        self.dispatcher.bulk_notify(attendee_ids, NotificationData(
            type='event_update',
            title=f'Event cancelled: {event.title}' if cancelled else f'Event updated: {event.title}',
            message=(
                'This event has been cancelled.' if cancelled
                else 'Details of an event you registered for have changed.'
            ),
            entity_type='event',
            entity_id=event.id,
            url=f'/events/{event.id}',
            priority='high' if cancelled else 'normal',
            metadata={'changed': sorted(changed)},
        ))

    def send_event_reminders(self, now=None, lead_time=timedelta(hours=24)) -> int:
        """
        Remind attendees of published events starting within `lead_time`.

        Each event is reminded about once.

        Returns:
            int: Number of events whose attendees were reminded
        """
        from notifications.services.dispatcher import NotificationData

        now = now or timezone.now()
        events = Event.objects.filter(
            status=Event.PUBLISHED,
            reminder_sent_at__isnull=True,
            start_at__gt=now,
            start_at__lte=now + lead_time,
        )

        reminded = 0
        for event in events:
            with transaction.atomic():
                # Claim the event so concurrent sweeps skip it
                claimed = Event.objects.filter(
                    pk=event.pk, reminder_sent_at__isnull=True,
                ).update(reminder_sent_at=now)
            if not claimed:
                continue

            attendee_ids = list(
                EventAttendee.objects.filter(event=event)
                .exclude(status=EventAttendee.CANCELLED)
                .values_list('user_id', flat=True)
            )
            self.dispatcher.bulk_notify(attendee_ids, NotificationData(
                type='event_reminder',
                title=f'Reminder: {event.title}',
                message=f'"{event.title}" starts on {event.start_at:%Y-%m-%d at %H:%M} UTC.',
                entity_type='event',
                entity_id=event.id,
                url=f'/events/{event.id}',
                metadata={'start_at': event.start_at.isoformat()},
            ))
            reminded += 1

        if reminded:
            logger.info("Event reminders sent", events=reminded)
        return reminded
