"""
Account administration services.

Role assignment, activation status and the sweep that lifts expired
suspensions. Authorization is checked by the calling view.
"""

from django.contrib.auth import get_user_model
from django.db.models import Q
from django.utils import timezone
import structlog

from core.exceptions import NotFound, ValidationFailed
from core.logging.structured import log_business_event
from core.pagination import paginate
from core.utils import parse_uuid

User = get_user_model()
logger = structlog.get_logger(__name__)


class AccountService:
    """
    Service for staff/admin management of user accounts.
    """

    def get_user(self, user_id):
        try:
            return User.objects.get(pk=parse_uuid(user_id, 'User'))
        except User.DoesNotExist:
            raise NotFound('User not found.')

    def search_users(self, query=None, role=None, is_active=None, page=1, limit=20):
        """
        Search users by name or email.

        Args:
            query: Case-insensitive match on first name, last name or email
            role: Restrict to one role
            is_active: Restrict by activation flag
            page: 1-based page number
            limit: Page size

        Returns:
            dict: {'items': [...], 'pagination': {...}}
        """
        users = User.objects.all().order_by('-created_at')

        if query:
            users = users.filter(
                Q(first_name__icontains=query)
                | Q(last_name__icontains=query)
                | Q(email__icontains=query)
            )
        if role:
            if role not in User.ROLES:
                raise ValidationFailed(f'Unknown role: {role}', field='role')
            users = users.filter(role=role)
        if is_active is not None:
            users = users.filter(is_active=is_active)

        return paginate(users, page, limit)

    def update_role(self, user_id, role, actor=None):
        """
        Assign a new role.

        Raises:
            ValidationFailed: If role is not citizen, staff or admin
            NotFound: If the user does not exist
        """
        if role not in User.ROLES:
            raise ValidationFailed(f'Invalid role: {role}', field='role')

        user = self.get_user(user_id)
        previous = user.role
        user.role = role
        user.save(update_fields=['role', 'updated_at'])

        log_business_event('user_role_changed', user=actor, details={
            'target_user_id': str(user.id),
            'previous_role': previous,
            'new_role': role,
        })
        return user

    def set_active(self, user_id, is_active, actor=None):
        """
        Activate or deactivate an account.

        Reactivating clears any suspension or ban.
        """
        if not isinstance(is_active, bool):
            raise ValidationFailed('is_active must be a boolean.', field='is_active')

        user = self.get_user(user_id)
        if is_active:
            user.reactivate()
        else:
            user.is_active = False
            user.save(update_fields=['is_active', 'updated_at'])

        log_business_event('user_status_changed', user=actor, details={
            'target_user_id': str(user.id),
            'is_active': is_active,
        })
        return user

    def lift_expired_suspensions(self, now=None):
        """
        Reactivate users whose suspension has ended.

        Banned users are never reactivated by this sweep.

        Returns:
            int: Number of reactivated users
        """
        now = now or timezone.now()
        lifted = User.objects.filter(
            is_active=False,
            banned_at__isnull=True,
            suspended_until__isnull=False,
            suspended_until__lte=now,
        ).update(is_active=True, suspended_until=None, updated_at=now)

        if lifted:
            logger.info("Lifted expired suspensions", count=lifted)
        return lifted
