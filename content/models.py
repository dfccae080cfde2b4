"""
Content models for the Civic Platform.

This module contains the moderatable content of the platform:
- Post (news, announcements, discussions, alerts)
- Comment (one level of threading on posts)
- Event and EventAttendee (registrations with optional capacity)
- Vote (one up/down vote per voter per post or comment)

Posts and comments keep denormalized vote counters that are recomputed
from the Vote rows inside the same transaction that changes them.
"""

import uuid
from django.conf import settings
from django.contrib.contenttypes.fields import GenericForeignKey, GenericRelation
from django.contrib.contenttypes.models import ContentType
from django.db import models
from django.db.models import F, Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core.utils import make_excerpt

User = settings.AUTH_USER_MODEL


class ModeratedContent(models.Model):
    """Moderation stamp shared by posts, comments and events."""

    moderation_notes = models.TextField(
        blank=True,
        help_text=_('Notes left by the moderator')
    )
    moderated_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        help_text=_('Staff member who last moderated this content')
    )
    moderated_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text=_('When the content was last moderated')
    )

    class Meta:
        abstract = True


class VotableContent(models.Model):
    """Denormalized vote counters, kept in sync by VoteLedger."""

    upvote_count = models.PositiveIntegerField(default=0)
    downvote_count = models.PositiveIntegerField(default=0)

    votes = GenericRelation('content.Vote')

    class Meta:
        abstract = True

    @property
    def score(self):
        return self.upvote_count - self.downvote_count


# =============================================================================
# POSTS
# =============================================================================

class PostQuerySet(models.QuerySet):

    def visible_to(self, user):
        """
        Posts a user may read.

        Staff and admins see everything; everyone else sees published public
        and registered-only posts plus their own.
        """
        if getattr(user, 'is_moderator', False):
            return self
        visible = Q(status=Post.PUBLISHED, visibility__in=[Post.PUBLIC, Post.REGISTERED])
        if user is not None and user.is_authenticated:
            visible |= Q(author=user)
        return self.filter(visible)


class Post(ModeratedContent, VotableContent):
    """
    News, announcements, discussions and alerts.

    Citizens create discussions; staff publish official posts.
    """

    NEWS = 'news'
    ANNOUNCEMENT = 'announcement'
    DISCUSSION = 'discussion'
    ALERT = 'alert'
    EVENT = 'event'

    CATEGORY_CHOICES = [
        (NEWS, _('News')),
        (ANNOUNCEMENT, _('Announcement')),
        (DISCUSSION, _('Discussion')),
        (ALERT, _('Alert')),
        (EVENT, _('Event')),
    ]

    DRAFT = 'draft'
    PENDING = 'pending'
    PUBLISHED = 'published'
    ARCHIVED = 'archived'
    REJECTED = 'rejected'

    STATUS_CHOICES = [
        (DRAFT, _('Draft')),
        (PENDING, _('Pending approval')),
        (PUBLISHED, _('Published')),
        (ARCHIVED, _('Archived')),
        (REJECTED, _('Rejected by moderation')),
    ]

    PUBLIC = 'public'
    REGISTERED = 'registered'
    STAFF_ONLY = 'staff'

    VISIBILITY_CHOICES = [
        (PUBLIC, _('Everyone')),
        (REGISTERED, _('Registered users')),
        (STAFF_ONLY, _('Staff only')),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    author = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='posts',
        help_text=_('User who wrote this post')
    )

    # Content
    title = models.CharField(max_length=200)
    content = models.TextField(max_length=10000)
    excerpt = models.CharField(
        max_length=500,
        blank=True,
        help_text=_('Short summary, derived from content when left blank')
    )
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=PUBLISHED
    )
    visibility = models.CharField(
        max_length=20,
        choices=VISIBILITY_CHOICES,
        default=PUBLIC
    )

    # Flags
    is_official = models.BooleanField(
        default=False,
        help_text=_('Published by the municipality')
    )
    is_pinned = models.BooleanField(default=False)

    # Denormalized counts (for performance)
    view_count = models.PositiveIntegerField(default=0)
    comment_count = models.PositiveIntegerField(
        default=0,
        help_text=_('Number of active comments')
    )

    published_at = models.DateTimeField(null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PostQuerySet.as_manager()

    class Meta:
        db_table = 'content_post'
        ordering = ['-is_pinned', '-published_at', '-created_at']
        indexes = [
            models.Index(fields=['category', 'status', '-published_at']),
            models.Index(fields=['author', '-created_at']),
            models.Index(fields=['status', '-created_at']),
        ]

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        if not self.excerpt and self.content:
            self.excerpt = make_excerpt(self.content)
        if self.status == self.PUBLISHED and self.published_at is None:
            self.published_at = timezone.now()
        super().save(*args, **kwargs)

    def increment_view_count(self):
        """Atomically increment view count."""
        Post.objects.filter(pk=self.pk).update(view_count=F('view_count') + 1)
        self.refresh_from_db(fields=['view_count'])

    def recount_comments(self):
        """Recompute comment_count from active comments."""
        count = self.comments.filter(status=Comment.ACTIVE).count()
        Post.objects.filter(pk=self.pk).update(comment_count=count)
        self.comment_count = count


# =============================================================================
# COMMENTS
# =============================================================================

class Comment(ModeratedContent, VotableContent):
    """
    Comments on posts.

    One level of threading: a reply to a reply is attached to the
    top-level parent.
    """

    ACTIVE = 'active'
    HIDDEN = 'hidden'
    DELETED = 'deleted'
    FLAGGED = 'flagged'

    STATUS_CHOICES = [
        (ACTIVE, _('Active')),
        (HIDDEN, _('Hidden by moderation')),
        (DELETED, _('Deleted')),
        (FLAGGED, _('Flagged for review')),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    post = models.ForeignKey(
        Post,
        on_delete=models.CASCADE,
        related_name='comments',
        help_text=_('Post this comment belongs to')
    )
    author = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='comments',
    )
    parent = models.ForeignKey(
        'self',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='replies',
        help_text=_('Top-level comment this is a reply to')
    )
    content = models.TextField(max_length=2000)
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=ACTIVE
    )

    # Edit tracking
    is_edited = models.BooleanField(default=False)
    edited_at = models.DateTimeField(null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'content_comment'
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['post', 'status', 'created_at']),
            models.Index(fields=['author', '-created_at']),
            models.Index(fields=['parent', 'created_at']),
        ]

    def __str__(self):
        return f"Comment by {self.author_id} on {self.post_id}"

    def save(self, *args, **kwargs):
        # Collapse reply-to-reply onto the top-level comment
        if self.parent is not None and self.parent.parent_id is not None:
            self.parent_id = self.parent.parent_id
        super().save(*args, **kwargs)


# =============================================================================
# EVENTS
# =============================================================================

class Event(ModeratedContent):
    """
    Community events with optional registration and capacity.
    """

    CATEGORY_CHOICES = [
        ('community', _('Community')),
        ('sports', _('Sports')),
        ('culture', _('Culture')),
        ('education', _('Education')),
        ('health', _('Health')),
        ('government', _('Government')),
        ('environment', _('Environment')),
        ('other', _('Other')),
    ]

    DRAFT = 'draft'
    PUBLISHED = 'published'
    CANCELLED = 'cancelled'
    COMPLETED = 'completed'

    STATUS_CHOICES = [
        (DRAFT, _('Draft')),
        (PUBLISHED, _('Published')),
        (CANCELLED, _('Cancelled')),
        (COMPLETED, _('Completed')),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organizer = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='organized_events',
    )
    title = models.CharField(max_length=200)
    description = models.TextField(max_length=5000)
    category = models.CharField(
        max_length=20,
        choices=CATEGORY_CHOICES,
        default='community'
    )

    # Schedule and place
    start_at = models.DateTimeField()
    end_at = models.DateTimeField()
    location_name = models.CharField(max_length=200, blank=True)
    is_online = models.BooleanField(default=False)
    online_url = models.URLField(blank=True)

    # Registration
    capacity = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text=_('Maximum number of attendees; empty means unlimited')
    )
    registration_required = models.BooleanField(default=False)
    registration_deadline = models.DateTimeField(null=True, blank=True)

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=PUBLISHED
    )
    is_official = models.BooleanField(default=False)
    reminder_sent_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text=_('When attendees were reminded of the event')
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'content_event'
        ordering = ['start_at']
        indexes = [
            models.Index(fields=['status', 'start_at']),
            models.Index(fields=['category', 'start_at']),
            models.Index(fields=['organizer', '-created_at']),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_at__gt=F('start_at')),
                name='event_end_after_start'
            ),
        ]

    def __str__(self):
        return self.title

    @property
    def author(self):
        """Organizer, under the name shared with posts and comments."""
        return self.organizer

    @property
    def author_id(self):
        return self.organizer_id

    @property
    def attendee_count(self):
        return self.attendees.exclude(status=EventAttendee.CANCELLED).count()

    @property
    def is_full(self):
        return self.capacity is not None and self.attendee_count >= self.capacity


class EventAttendee(models.Model):
    """
    A user's registration for an event.
    """

    REGISTERED = 'registered'
    ATTENDED = 'attended'
    CANCELLED = 'cancelled'

    STATUS_CHOICES = [
        (REGISTERED, _('Registered')),
        (ATTENDED, _('Attended')),
        (CANCELLED, _('Cancelled')),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(
        Event,
        on_delete=models.CASCADE,
        related_name='attendees',
    )
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='event_registrations',
    )
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=REGISTERED
    )
    registered_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'content_event_attendee'
        ordering = ['registered_at']
        constraints = [
            models.UniqueConstraint(
                fields=['event', 'user'],
                name='unique_attendee_per_event'
            )
        ]

    def __str__(self):
        return f"{self.user_id} -> {self.event_id} ({self.status})"


# =============================================================================
# VOTES
# =============================================================================

class Vote(models.Model):
    """
    A single up or down vote on a post or comment.

    At most one row exists per (voter, content), so a voter is never in
    both the up and the down set of an item.
    """

    UP = 'up'
    DOWN = 'down'

    DIRECTION_CHOICES = [
        (UP, _('Upvote')),
        (DOWN, _('Downvote')),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    voter = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='votes',
    )
    content_type = models.ForeignKey(
        ContentType,
        on_delete=models.CASCADE,
        limit_choices_to={'app_label': 'content', 'model__in': ['post', 'comment']},
    )
    object_id = models.UUIDField()
    content_object = GenericForeignKey('content_type', 'object_id')
    direction = models.CharField(max_length=4, choices=DIRECTION_CHOICES)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'content_vote'
        indexes = [
            models.Index(fields=['content_type', 'object_id', 'direction']),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['voter', 'content_type', 'object_id'],
                name='unique_vote_per_voter_per_content'
            ),
            models.CheckConstraint(
                condition=Q(direction__in=['up', 'down']),
                name='vote_direction_valid'
            ),
        ]

    def __str__(self):
        return f"{self.voter_id} {self.direction} {self.content_type_id}:{self.object_id}"
