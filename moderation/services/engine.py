"""
Moderation Engine.

Drives reports through their lifecycle:

    pending -> reviewing (optional) -> resolved | dismissed

Resolved and dismissed are terminal. Resolving applies a ModerationAction
to the reported entity. The report row is locked, the action's side effect
runs first and the report is stamped afterwards, all in one transaction:
either both happen or neither does.

Authorization is the caller's job; the engine trusts the moderator it is
given.
"""

from typing import Dict

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.db import DatabaseError, transaction
from django.db.models import Count
from django.utils import timezone
import structlog

from content.models import Post, Comment, Event
from core.exceptions import InvalidTransition, NotFound, PartialFailure, ValidationFailed
from core.logging.structured import log_business_event
from core.utils import parse_uuid
from ..models import ModerationAction, Report, ReportTarget
from .targets import author_of, fetch_target

logger = structlog.get_logger(__name__)


# =============================================================================
# ACTION HANDLERS
# =============================================================================

# Status a removed entity is moved to; users have no removal semantics
REMOVAL_STATUS = {
    ReportTarget.POST: Post.REJECTED,
    ReportTarget.COMMENT: Comment.HIDDEN,
    ReportTarget.EVENT: Event.CANCELLED,
    ReportTarget.USER: None,
}


def apply_no_action(engine, target, entity, moderator, report):
    pass


def apply_warning(engine, target, entity, moderator, report):
    """Send a high-priority warning to the author (or the reported user)."""
    from notifications.services.dispatcher import NotificationData

    user = author_of(target, entity)
    if user is None:
        return
    engine.dispatcher.notify(user.pk, NotificationData(
        type='moderation_action',
        title='Content Warning',
        message=(
            'Your content has been flagged for review. '
            'Please review our community guidelines.'
        ),
        entity_type=target.value,
        entity_id=entity.pk,
        priority='high',
        metadata={'report_id': str(report.pk), 'action': ModerationAction.WARNING.value},
    ))


def apply_content_removed(engine, target, entity, moderator, report):
    """Move the entity to its removed status and stamp the moderator."""
    removed_status = REMOVAL_STATUS[target]
    if entity is None or removed_status is None:
        return

    entity.status = removed_status
    entity.moderated_by = moderator
    entity.moderated_at = timezone.now()
    entity.save(update_fields=['status', 'moderated_by', 'moderated_at'])

    if target is ReportTarget.COMMENT:
        entity.post.recount_comments()


def apply_user_suspended(engine, target, entity, moderator, report):
    user = author_of(target, entity)
    if user is None or user.is_banned:
        return
    user.suspend(days=settings.MODERATION['SUSPENSION_DAYS'])


def apply_user_banned(engine, target, entity, moderator, report):
    user = author_of(target, entity)
    if user is None:
        return
    user.ban()


ACTION_HANDLERS = {
    ModerationAction.NONE: apply_no_action,
    ModerationAction.WARNING: apply_warning,
    ModerationAction.CONTENT_REMOVED: apply_content_removed,
    ModerationAction.USER_SUSPENDED: apply_user_suspended,
    ModerationAction.USER_BANNED: apply_user_banned,
}

_missing_handlers = set(ModerationAction) - set(ACTION_HANDLERS)
if _missing_handlers:
    raise ImproperlyConfigured(
        f'No handler for moderation actions: {sorted(_missing_handlers)}')

_missing_targets = set(ReportTarget) - set(REMOVAL_STATUS)
if _missing_targets:
    raise ImproperlyConfigured(
        f'No removal status for report targets: {sorted(_missing_targets)}')


# =============================================================================
# ENGINE
# =============================================================================

class ModerationEngine:
    """
    Service applying moderator decisions to reports.
    """

    def __init__(self, dispatcher):
        self.dispatcher = dispatcher

    def _lock_report(self, report_id) -> Report:
        try:
            return Report.objects.select_for_update().get(pk=parse_uuid(report_id, 'Report'))
        except Report.DoesNotExist:
            raise NotFound('Report not found.')

    def _ensure_open(self, report):
        if report.is_terminal:
            raise InvalidTransition(f'Report is already {report.status}.')

    def start_review(self, report_id, moderator) -> Report:
        """
        Mark a pending report as being reviewed.

        A report already under review is returned unchanged.

        Raises:
            NotFound: Unknown report
            InvalidTransition: Report is resolved or dismissed
        """
        with transaction.atomic():
            report = self._lock_report(report_id)
            self._ensure_open(report)
            if report.status == Report.REVIEWING:
                return report

            report.status = Report.REVIEWING
            report.reviewing_by = moderator
            report.reviewing_at = timezone.now()
            report.save(update_fields=['status', 'reviewing_by', 'reviewing_at', 'updated_at'])

        logger.info(
            "Report review started",
            report_id=str(report.id),
            moderator_id=str(moderator.pk),
        )
        return report

    def resolve(self, report_id, moderator, action, notes='') -> Report:
        """
        Resolve a report and apply the moderation action.

        Args:
            report_id: Report to resolve
            moderator: Staff/admin user taking the decision
            action: A ModerationAction value
            notes: Optional moderator notes

        Returns:
            Report: The resolved report

        Raises:
            ValidationFailed: Unknown action
            NotFound: Unknown report
            InvalidTransition: Report is already resolved or dismissed
            PartialFailure: The side effect failed; nothing was changed
        """
        try:
            action = ModerationAction(action)
        except ValueError:
            raise ValidationFailed(f'Invalid moderation action: {action}', field='action')

        with transaction.atomic():
            report = self._lock_report(report_id)
            self._ensure_open(report)

            target = ReportTarget(report.target_type)
            entity = fetch_target(target, report.object_id, for_update=True)
            try:
                ACTION_HANDLERS[action](self, target, entity, moderator, report)
                self._close(report, Report.RESOLVED, action, moderator, notes)
            except Exception as exc:
                # Leaving the atomic block with an error rolls back both writes
                logger.error(
                    "Moderation action failed, report left open",
                    report_id=str(report.id),
                    action=action.value,
                    error=str(exc),
                    exc_info=True,
                )
                raise PartialFailure() from exc

        self._after_close(report, moderator, entity)
        return report

    def dismiss(self, report_id, moderator, notes='') -> Report:
        """
        Dismiss a report without touching the reported entity.

        Raises:
            NotFound: Unknown report
            InvalidTransition: Report is already resolved or dismissed
        """
        with transaction.atomic():
            report = self._lock_report(report_id)
            self._ensure_open(report)
            self._close(report, Report.DISMISSED, ModerationAction.NONE, moderator, notes)

        self._after_close(report, moderator, None)
        return report

    def _close(self, report, status, action, moderator, notes):
        report.status = status
        report.resolution_action = action.value
        report.resolution_notes = notes or ''
        report.resolved_by = moderator
        report.resolved_at = timezone.now()
        report.save(update_fields=[
            'status', 'resolution_action', 'resolution_notes',
            'resolved_by', 'resolved_at', 'updated_at',
        ])

    def _after_close(self, report, moderator, entity):
        log_business_event(f'report_{report.status}', user=moderator, details={
            'report_id': str(report.id),
            'target_type': report.target_type,
            'target_id': str(report.object_id),
            'action': report.resolution_action,
            'target_missing': entity is None and report.status == Report.RESOLVED,
        })

        if settings.MODERATION.get('NOTIFY_REPORTER_ON_CLOSE', True):
            self._notify_reporter(report)

    def _notify_reporter(self, report):
        """Tell the reporter their report was handled; never fails the caller."""
        from notifications.services.dispatcher import NotificationData

        outcome = 'action was taken' if report.status == Report.RESOLVED else 'no action was needed'
        try:
            self.dispatcher.notify(report.reporter_id, NotificationData(
                type='system_alert',
                title='Your report has been reviewed',
                message=f'Thank you for your report. After review, {outcome}.',
                metadata={'report_id': str(report.id), 'status': report.status},
            ))
        except (NotFound, ValidationFailed, DatabaseError) as exc:
            logger.warning(
                "Could not notify reporter",
                report_id=str(report.id),
                error=str(exc),
            )

    def stats(self) -> Dict[str, object]:
        """
        Report counts by status, reason and target type.

        The status totals always sum to `total`.
        """
        totals = {status: 0 for status in Report.STATUSES}
        for row in Report.objects.values('status').annotate(count=Count('id')):
            totals[row['status']] = row['count']

        by_reason = {
            row['reason']: row['count']
            for row in Report.objects.values('reason').annotate(count=Count('id')).order_by('reason')
        }
        by_content_type = {
            row['content_type__model']: row['count']
            for row in Report.objects.values('content_type__model').annotate(
                count=Count('id')).order_by('content_type__model')
        }

        return {
            'total': sum(totals.values()),
            'totals': totals,
            'by_reason': by_reason,
            'by_content_type': by_content_type,
        }
