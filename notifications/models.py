"""
Notification models for the Civic Platform.

This module contains:
- Notification (one message to one recipient)
- NotificationDelivery (per-channel delivery state of a notification)
- NotificationPreference (per-user channel switches)
- CategorySubscription (categories a user wants to hear about)
"""

import uuid
from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

User = settings.AUTH_USER_MODEL


class Notification(models.Model):
    """
    A notification addressed to a single recipient.

    Created as a side effect of moderation and content activity; read and
    deleted by the recipient, or removed by the expiry sweep.
    """

    NEW_POST = 'new_post'
    NEW_COMMENT = 'new_comment'
    COMMENT_REPLY = 'comment_reply'
    POST_VOTE = 'post_vote'
    EVENT_REMINDER = 'event_reminder'
    EVENT_UPDATE = 'event_update'
    SYSTEM_ALERT = 'system_alert'
    MODERATION_ACTION = 'moderation_action'
    WELCOME = 'welcome'
    ANNOUNCEMENT = 'announcement'

    TYPE_CHOICES = [
        (NEW_POST, _('New post')),
        (NEW_COMMENT, _('New comment')),
        (COMMENT_REPLY, _('Comment reply')),
        (POST_VOTE, _('Post vote')),
        (EVENT_REMINDER, _('Event reminder')),
        (EVENT_UPDATE, _('Event update')),
        (SYSTEM_ALERT, _('System alert')),
        (MODERATION_ACTION, _('Moderation action')),
        (WELCOME, _('Welcome')),
        (ANNOUNCEMENT, _('Announcement')),
    ]

    LOW = 'low'
    NORMAL = 'normal'
    HIGH = 'high'
    URGENT = 'urgent'

    PRIORITY_CHOICES = [
        (LOW, _('Low')),
        (NORMAL, _('Normal')),
        (HIGH, _('High')),
        (URGENT, _('Urgent')),
    ]

    ENTITY_TYPE_CHOICES = [
        ('post', _('Post')),
        ('comment', _('Comment')),
        ('event', _('Event')),
        ('user', _('User')),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    recipient = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='notifications',
        help_text=_('User receiving this notification')
    )
    type = models.CharField(max_length=30, choices=TYPE_CHOICES)
    title = models.CharField(max_length=200)
    message = models.TextField(max_length=1000)

    # Related entity
    entity_type = models.CharField(
        max_length=10,
        choices=ENTITY_TYPE_CHOICES,
        blank=True,
    )
    entity_id = models.UUIDField(null=True, blank=True)
    url = models.CharField(max_length=500, blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    priority = models.CharField(
        max_length=10,
        choices=PRIORITY_CHOICES,
        default=NORMAL
    )

    # Read tracking
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)

    expires_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text=_('Removed by the expiry sweep after this time')
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'notifications_notification'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['recipient', '-created_at']),
            models.Index(fields=['recipient', 'is_read']),
            models.Index(fields=['expires_at']),
        ]

    def __str__(self):
        return f"{self.type} for {self.recipient_id}: {self.title}"

    def mark_as_read(self):
        if not self.is_read:
            self.is_read = True
            self.read_at = timezone.now()
            self.save(update_fields=['is_read', 'read_at', 'updated_at'])

    def delivery_for(self, method):
        return next((d for d in self.deliveries.all() if d.method == method), None)


class NotificationDelivery(models.Model):
    """
    Delivery state of a notification on one channel.
    """

    IN_APP = 'in_app'
    EMAIL = 'email'
    SMS = 'sms'

    METHOD_CHOICES = [
        (IN_APP, _('In-app')),
        (EMAIL, _('Email')),
        (SMS, _('SMS')),
    ]

    PENDING = 'pending'
    SENT = 'sent'
    DELIVERED = 'delivered'
    FAILED = 'failed'

    STATUS_CHOICES = [
        (PENDING, _('Pending')),
        (SENT, _('Sent')),
        (DELIVERED, _('Delivered')),
        (FAILED, _('Failed')),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    notification = models.ForeignKey(
        Notification,
        on_delete=models.CASCADE,
        related_name='deliveries',
    )
    method = models.CharField(max_length=10, choices=METHOD_CHOICES)
    status = models.CharField(
        max_length=10,
        choices=STATUS_CHOICES,
        default=PENDING
    )
    sent_at = models.DateTimeField(null=True, blank=True)
    error = models.TextField(blank=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'notifications_delivery'
        ordering = ['method']
        constraints = [
            models.UniqueConstraint(
                fields=['notification', 'method'],
                name='unique_delivery_per_method'
            )
        ]

    def __str__(self):
        return f"{self.method}: {self.status}"


class NotificationPreference(models.Model):
    """
    Per-user delivery channel switches.

    Users without a row get the class defaults: in-app on, email and
    SMS off.
    """

    DEFAULTS = {
        'in_app_enabled': True,
        'email_enabled': False,
        'sms_enabled': False,
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name='notification_preference',
        help_text=_('User these preferences belong to')
    )
    in_app_enabled = models.BooleanField(
        default=True,
        help_text=_('Show notifications in the application')
    )
    email_enabled = models.BooleanField(
        default=False,
        help_text=_('Also send notifications by email')
    )
    sms_enabled = models.BooleanField(
        default=False,
        help_text=_('Also send notifications by SMS')
    )

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'notifications_preference'

    def __str__(self):
        return f"Notification preferences for {self.user_id}"


class CategorySubscription(models.Model):
    """
    A user's subscription to a content category.
    """

    NEWS = 'news'
    EVENTS = 'events'
    DISCUSSIONS = 'discussions'
    ALERTS = 'alerts'
    ANNOUNCEMENTS = 'announcements'

    CATEGORY_CHOICES = [
        (NEWS, _('News')),
        (EVENTS, _('Events')),
        (DISCUSSIONS, _('Discussions')),
        (ALERTS, _('Alerts')),
        (ANNOUNCEMENTS, _('Announcements')),
    ]
    CATEGORIES = [NEWS, EVENTS, DISCUSSIONS, ALERTS, ANNOUNCEMENTS]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='category_subscriptions',
    )
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'notifications_category_subscription'
        constraints = [
            models.UniqueConstraint(
                fields=['user', 'category'],
                name='unique_subscription_per_category'
            )
        ]
        indexes = [
            models.Index(fields=['category']),
        ]

    def __str__(self):
        return f"{self.user_id} -> {self.category}"
