"""
Tests for the publishing service and the notifications it sends.
"""

from datetime import timedelta
from unittest.mock import patch

from django.test import TestCase
from django.utils import timezone

from accounts.tests.factories import StaffFactory, UserFactory
from core.exceptions import InvalidTarget, InvalidTransition, Unauthorized
from content.models import Comment, Event, EventAttendee, Post
from content.services.publishing import DELETED_COMMENT_TEXT, PublishingService
from notifications.models import Notification
from notifications.realtime import InMemoryPushBackend
from notifications.services.dispatcher import NotificationDispatcher
from notifications.tests.factories import CategorySubscriptionFactory
from .factories import CommentFactory, EventAttendeeFactory, EventFactory, PostFactory


class PublishingTestCase(TestCase):

    def setUp(self):
        self.push = InMemoryPushBackend()
        self.dispatcher = NotificationDispatcher(push_backend=self.push)
        self.publishing = PublishingService(dispatcher=self.dispatcher)


class PostPublishingTest(PublishingTestCase):

    def test_citizen_cannot_publish_official_post(self):
        with self.assertRaises(Unauthorized):
            self.publishing.create_post(
                UserFactory(), title='Road closure', content='Main St closed',
                category=Post.NEWS, is_official=True)
        self.assertFalse(Post.objects.exists())

    def test_official_post_is_announced_to_subscribers(self):
        staff = StaffFactory()
        subscriber = CategorySubscriptionFactory(category='news').user
        CategorySubscriptionFactory(category='events')
        CategorySubscriptionFactory(user=staff, category='news')

        with self.captureOnCommitCallbacks(execute=True):
            post = self.publishing.create_post(
                staff, title='New library hours', content='Open until 8pm.',
                category=Post.NEWS, is_official=True)

        notifications = Notification.objects.filter(type=Notification.NEW_POST)
        self.assertEqual([n.recipient_id for n in notifications], [subscriber.id])
        self.assertEqual(notifications[0].entity_id, post.id)
        self.assertEqual(len(self.push.pushes_for(subscriber.id)), 1)

    def test_unofficial_post_is_not_announced(self):
        CategorySubscriptionFactory(category='discussions')

        with self.captureOnCommitCallbacks(execute=True):
            self.publishing.create_post(
                UserFactory(), title='Park benches', content='We need more.',
                category=Post.DISCUSSION)

        self.assertFalse(Notification.objects.exists())

    def test_excerpt_and_published_at_are_derived(self):
        post = self.publishing.create_post(
            UserFactory(), title='Bike lanes', content='word ' * 100,
            category=Post.DISCUSSION)

        self.assertTrue(post.excerpt.endswith('...'))
        self.assertIsNotNone(post.published_at)

    def test_trending_ranks_by_votes_comments_and_views(self):
        quiet = PostFactory()
        busy = PostFactory(upvote_count=5, comment_count=3)
        viewed = PostFactory(view_count=500)
        PostFactory(status=Post.DRAFT, upvote_count=50)

        trending = self.publishing.trending_posts(limit=10)

        self.assertEqual([p.id for p in trending], [busy.id, viewed.id, quiet.id])


class CommentPublishingTest(PublishingTestCase):

    def setUp(self):
        super().setUp()
        self.post = PostFactory()

    def test_comment_notifies_post_author_and_counts(self):
        commenter = UserFactory()
        comment = self.publishing.create_comment(commenter, self.post, 'Agreed!')

        self.post.refresh_from_db()
        self.assertEqual(self.post.comment_count, 1)
        notification = Notification.objects.get(recipient=self.post.author)
        self.assertEqual(notification.type, Notification.NEW_COMMENT)
        self.assertEqual(notification.entity_id, comment.id)

    def test_own_comment_does_not_notify(self):
        self.publishing.create_comment(self.post.author, self.post, 'Update: fixed.')
        self.assertFalse(Notification.objects.exists())

    def test_reply_notifies_parent_author(self):
        parent = CommentFactory(post=self.post)
        replier = UserFactory()

        reply = self.publishing.create_comment(replier, self.post, 'Me too', parent=parent)

        self.assertEqual(reply.parent_id, parent.id)
        self.assertTrue(Notification.objects.filter(
            recipient=parent.author, type=Notification.COMMENT_REPLY).exists())

    def test_reply_to_reply_attaches_to_top_level(self):
        parent = CommentFactory(post=self.post)
        child = CommentFactory(post=self.post, parent=parent)

        reply = self.publishing.create_comment(UserFactory(), self.post, 'Nested', parent=child)

        self.assertEqual(reply.parent_id, parent.id)

    def test_parent_from_another_post(self):
        other_parent = CommentFactory()
        with self.assertRaises(InvalidTarget):
            self.publishing.create_comment(UserFactory(), self.post, 'Hi', parent=other_parent)

    def test_cannot_comment_on_draft(self):
        draft = PostFactory(status=Post.DRAFT)
        with self.assertRaises(InvalidTransition):
            self.publishing.create_comment(UserFactory(), draft, 'Hello')

    def test_edit_comment(self):
        comment = CommentFactory(post=self.post)
        self.publishing.edit_comment(comment, 'Edited text')

        comment.refresh_from_db()
        self.assertEqual(comment.content, 'Edited text')
        self.assertTrue(comment.is_edited)
        self.assertIsNotNone(comment.edited_at)

    def test_delete_comment_is_soft_and_recounts(self):
        comment = self.publishing.create_comment(UserFactory(), self.post, 'Oops')
        self.publishing.delete_comment(comment)

        comment.refresh_from_db()
        self.post.refresh_from_db()
        self.assertEqual(comment.status, Comment.DELETED)
        self.assertEqual(comment.content, DELETED_COMMENT_TEXT)
        self.assertEqual(self.post.comment_count, 0)


class EventPublishingTest(PublishingTestCase):

    def test_citizen_cannot_create_official_event(self):
        with self.assertRaises(Unauthorized):
            self.publishing.create_event(
                UserFactory(),
                title='Council session',
                description='Budget vote',
                start_at=timezone.now() + timedelta(days=2),
                end_at=timezone.now() + timedelta(days=2, hours=2),
                is_official=True,
            )

    def test_published_event_is_announced(self):
        subscriber = CategorySubscriptionFactory(category='events').user
        organizer = UserFactory()

        with self.captureOnCommitCallbacks(execute=True):
            self.publishing.create_event(
                organizer,
                title='Clean-up day',
                description='Bring gloves.',
                start_at=timezone.now() + timedelta(days=2),
                end_at=timezone.now() + timedelta(days=2, hours=3),
            )

        self.assertEqual(
            list(Notification.objects.values_list('recipient_id', flat=True)), [subscriber.id])

    def test_schedule_change_notifies_attendees(self):
        event = EventFactory()
        attendee = EventAttendeeFactory(event=event)
        EventAttendeeFactory(event=event, status=EventAttendee.CANCELLED)

        with self.captureOnCommitCallbacks(execute=True):
            self.publishing.update_event(event, location_name='Library')

        notification = Notification.objects.get()
        self.assertEqual(notification.recipient_id, attendee.user_id)
        self.assertEqual(notification.type, Notification.EVENT_UPDATE)
        self.assertEqual(notification.metadata, {'changed': ['location_name']})

    def test_cancellation_is_high_priority(self):
        event = EventFactory()
        EventAttendeeFactory(event=event)

        with self.captureOnCommitCallbacks(execute=True):
            self.publishing.update_event(event, status=Event.CANCELLED)

        self.assertEqual(Notification.objects.get().priority, Notification.HIGH)

    def test_title_change_is_silent(self):
        event = EventFactory()
        EventAttendeeFactory(event=event)

        with self.captureOnCommitCallbacks(execute=True):
            self.publishing.update_event(event, title='Renamed meeting')

        self.assertFalse(Notification.objects.exists())


class EventReminderTest(PublishingTestCase):

    def test_reminders_are_sent_once(self):
        soon = EventFactory(
            start_at=timezone.now() + timedelta(hours=12),
            end_at=timezone.now() + timedelta(hours=14),
        )
        attendee = EventAttendeeFactory(event=soon)
        EventAttendeeFactory(event=soon, status=EventAttendee.CANCELLED)
        later = EventFactory()
        EventAttendeeFactory(event=later)

        self.assertEqual(self.publishing.send_event_reminders(), 1)
        self.assertEqual(self.publishing.send_event_reminders(), 0)

        reminders = Notification.objects.filter(type=Notification.EVENT_REMINDER)
        self.assertEqual([n.recipient_id for n in reminders], [attendee.user_id])
        soon.refresh_from_db()
        self.assertIsNotNone(soon.reminder_sent_at)

    def test_reminder_task(self):
        from content.tasks import send_event_reminders

        with patch('core.container.get_services') as get_services:
            get_services.return_value.publishing.send_event_reminders.return_value = 2
            result = send_event_reminders.apply().get()

        self.assertEqual(result, {'events': 2, 'status': 'success'})
