"""
Moderation models for the Civic Platform.

A Report flags a post, comment, event or user for staff review. Reports
move from pending (optionally through reviewing) to resolved or dismissed
and are never deleted, so they double as the moderation audit trail.
"""

import uuid
from django.conf import settings
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType
from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _

User = settings.AUTH_USER_MODEL


class ReportTarget(models.TextChoices):
    """Kinds of entity that can be reported."""
    POST = 'post', _('Post')
    COMMENT = 'comment', _('Comment')
    EVENT = 'event', _('Event')
    USER = 'user', _('User')


class ModerationAction(models.TextChoices):
    """Outcome applied when a report is closed."""
    NONE = 'none', _('No action')
    WARNING = 'warning', _('Warning sent')
    CONTENT_REMOVED = 'content_removed', _('Content removed')
    USER_SUSPENDED = 'user_suspended', _('User suspended')
    USER_BANNED = 'user_banned', _('User banned')


class Report(models.Model):
    """
    A user's report of content or of another user.

    One report per (reporter, target) for all time, whatever its status.
    """

    # Report reasons
    SPAM = 'spam'
    HARASSMENT = 'harassment'
    HATE_SPEECH = 'hate_speech'
    MISINFORMATION = 'misinformation'
    INAPPROPRIATE = 'inappropriate'
    COPYRIGHT = 'copyright'
    PRIVACY_VIOLATION = 'privacy_violation'
    OTHER = 'other'

    REASON_CHOICES = [
        (SPAM, _('Spam or advertising')),
        (HARASSMENT, _('Harassment or bullying')),
        (HATE_SPEECH, _('Hate speech')),
        (MISINFORMATION, _('False or misleading information')),
        (INAPPROPRIATE, _('Inappropriate content')),
        (COPYRIGHT, _('Copyright infringement')),
        (PRIVACY_VIOLATION, _('Privacy violation')),
        (OTHER, _('Other (see description)')),
    ]
    REASONS = [choice for choice, _label in REASON_CHOICES]

    # Report status
    PENDING = 'pending'
    REVIEWING = 'reviewing'
    RESOLVED = 'resolved'
    DISMISSED = 'dismissed'

    STATUS_CHOICES = [
        (PENDING, _('Pending review')),
        (REVIEWING, _('Under review')),
        (RESOLVED, _('Resolved (action taken)')),
        (DISMISSED, _('Dismissed (no action needed)')),
    ]
    STATUSES = [PENDING, REVIEWING, RESOLVED, DISMISSED]
    OPEN_STATUSES = [PENDING, REVIEWING]
    TERMINAL_STATUSES = [RESOLVED, DISMISSED]

    # Priority
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'
    CRITICAL = 'critical'

    PRIORITY_CHOICES = [
        (LOW, _('Low')),
        (MEDIUM, _('Medium')),
        (HIGH, _('High')),
        (CRITICAL, _('Critical')),
    ]
    PRIORITIES = [LOW, MEDIUM, HIGH, CRITICAL]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Reporter
    reporter = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='reports_filed',
        help_text=_('User who filed the report')
    )

    # Reported entity
    content_type = models.ForeignKey(
        ContentType,
        on_delete=models.CASCADE,
        limit_choices_to=(
            Q(app_label='content', model__in=['post', 'comment', 'event'])
            | Q(app_label='accounts', model='user')
        ),
        help_text=_('Type of entity being reported')
    )
    object_id = models.UUIDField(
        help_text=_('ID of the reported entity')
    )
    content_object = GenericForeignKey('content_type', 'object_id')

    # Report details
    reason = models.CharField(
        max_length=20,
        choices=REASON_CHOICES,
        help_text=_('Reason for reporting')
    )
    description = models.TextField(
        blank=True,
        max_length=1000,
        help_text=_('Additional details about the report')
    )
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=PENDING,
        help_text=_('Current status of the report')
    )
    priority = models.CharField(
        max_length=10,
        choices=PRIORITY_CHOICES,
        default=MEDIUM,
    )

    # Review tracking
    reviewing_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reports_in_review',
        help_text=_('Moderator who picked up the report')
    )
    reviewing_at = models.DateTimeField(null=True, blank=True)

    # Resolution
    resolution_action = models.CharField(
        max_length=20,
        choices=ModerationAction.choices,
        blank=True,
        help_text=_('Action taken; empty while the report is open')
    )
    resolution_notes = models.TextField(
        blank=True,
        max_length=1000,
        help_text=_('Notes from the moderator')
    )
    resolved_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reports_resolved',
        help_text=_('Moderator who closed the report')
    )
    resolved_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text=_('When the report was closed')
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'moderation_report'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'priority', 'created_at']),
            models.Index(fields=['content_type', 'object_id']),
            models.Index(fields=['reporter', '-created_at']),
            models.Index(fields=['reason']),
        ]
        constraints = [
            # Prevent duplicate reports from same user on same entity
            models.UniqueConstraint(
                fields=['reporter', 'content_type', 'object_id'],
                name='unique_report_per_user_per_target'
            ),
            # A resolution timestamp exists exactly when the report is closed
            models.CheckConstraint(
                condition=(
                    Q(status__in=['resolved', 'dismissed'], resolved_at__isnull=False)
                    | Q(status__in=['pending', 'reviewing'], resolved_at__isnull=True)
                ),
                name='report_resolved_at_matches_status'
            ),
        ]

    def __str__(self):
        return f"Report {self.id} ({self.reason}, {self.status})"

    @property
    def target_type(self):
        """'post', 'comment', 'event' or 'user'."""
        return self.content_type.model

    @property
    def is_open(self):
        return self.status in self.OPEN_STATUSES

    @property
    def is_terminal(self):
        return self.status in self.TERMINAL_STATUSES

    @property
    def resolution(self):
        """Resolution record, or None while the report is open."""
        if not self.is_terminal:
            return None
        return {
            'action': self.resolution_action,
            'notes': self.resolution_notes,
            'resolved_by': self.resolved_by_id,
            'resolved_at': self.resolved_at,
        }
