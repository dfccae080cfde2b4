"""
Account models for the Civic Platform.

The User model carries the civic role (citizen, staff, admin) together with
the moderation state a user can be put in: suspended until a point in time,
or banned permanently. Users are deactivated, never deleted, by moderation.
"""

import uuid
from datetime import timedelta
from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
import structlog

logger = structlog.get_logger(__name__)


class User(AbstractUser):
    """
    Custom User model extending Django's AbstractUser.

    Uses email as the login field. Exactly one civic role applies to
    each user, enforced by a database check constraint.
    """

    CITIZEN = 'citizen'
    STAFF = 'staff'
    ADMIN = 'admin'

    ROLE_CHOICES = [
        (CITIZEN, _('Citizen')),
        (STAFF, _('Municipal staff')),
        (ADMIN, _('Administrator')),
    ]
    ROLES = [CITIZEN, STAFF, ADMIN]
    MODERATOR_ROLES = [STAFF, ADMIN]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(
        unique=True,
        help_text=_('Required. Used to sign in.')
    )
    username = models.CharField(
        max_length=150,
        unique=True,
        help_text=_('Required. 150 characters or fewer.')
    )
    role = models.CharField(
        max_length=10,
        choices=ROLE_CHOICES,
        default=CITIZEN,
        help_text=_('Civic role of the user')
    )
    phone = models.CharField(
        max_length=20,
        blank=True,
        help_text=_('Phone number used for SMS notifications')
    )

    # Moderation state
    suspended_until = models.DateTimeField(
        null=True,
        blank=True,
        help_text=_('Account is suspended until this timestamp')
    )
    banned_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text=_('When the account was permanently banned')
    )

    # Metadata
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username']

    class Meta:
        db_table = 'accounts_user'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['role']),
            models.Index(fields=['is_active', 'suspended_until']),
            models.Index(fields=['created_at']),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(role__in=['citizen', 'staff', 'admin']),
                name='user_role_valid'
            ),
        ]

    def __str__(self):
        return self.email

    @property
    def is_moderator(self):
        """Staff and admins may moderate reports."""
        return self.role in self.MODERATOR_ROLES

    @property
    def is_banned(self):
        return self.banned_at is not None

    @property
    def is_suspended(self):
        """Suspended users are inactive until `suspended_until` passes."""
        if self.is_banned or self.suspended_until is None:
            return False
        return timezone.now() < self.suspended_until

    def suspend(self, days):
        """Deactivate the account for a number of days."""
        self.is_active = False
        self.suspended_until = timezone.now() + timedelta(days=days)
        self.save(update_fields=['is_active', 'suspended_until', 'updated_at'])

        logger.info(
            "Account suspended",
            user_id=str(self.id),
            suspended_until=self.suspended_until.isoformat()
        )

    def ban(self):
        """Deactivate the account permanently."""
        self.is_active = False
        self.banned_at = timezone.now()
        self.suspended_until = None
        self.save(update_fields=['is_active', 'banned_at', 'suspended_until', 'updated_at'])

        logger.info("Account banned", user_id=str(self.id))

    def reactivate(self):
        """Clear suspension and ban state and reactivate the account."""
        self.is_active = True
        self.suspended_until = None
        self.banned_at = None
        self.save(update_fields=['is_active', 'suspended_until', 'banned_at', 'updated_at'])

        logger.info("Account reactivated", user_id=str(self.id))
