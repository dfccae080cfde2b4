"""
Report Registry.

Files reports against posts, comments, events and users, and serves the
moderator read side (filtered listing and detail with the reported entity).
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from django.db import IntegrityError, transaction
import structlog

from core.exceptions import DuplicateReport, InvalidTarget, NotFound, ValidationFailed
from core.pagination import paginate
from core.utils import parse_uuid, sanitize_user_input
from ..models import Report, ReportTarget
from .targets import content_type_for, fetch_target, parse_target

logger = structlog.get_logger(__name__)

# Reasons that jump the moderation queue
HIGH_PRIORITY_REASONS = {
    Report.HATE_SPEECH,
    Report.HARASSMENT,
    Report.PRIVACY_VIOLATION,
}

ORDERING_FIELDS = {'created_at', 'updated_at', 'priority', 'status'}


@dataclass
class ReportDetail:
    report: Report
    content: Optional[Any]


class ReportRegistry:
    """
    Service for filing and browsing reports.
    """

    def default_priority(self, reason: str) -> str:
        return Report.HIGH if reason in HIGH_PRIORITY_REASONS else Report.MEDIUM

    def file_report(self, reporter, content_type, content_id, reason, description='') -> Report:
        """
        File a report.

        Args:
            reporter: Authenticated user filing the report
            content_type: 'post', 'comment', 'event' or 'user'
            content_id: Id of the reported entity
            reason: One of Report.REASONS
            description: Optional details (max 1000 characters)

        Returns:
            Report: The new pending report

        Raises:
            InvalidTarget: Unknown type, or no such entity
            ValidationFailed: Unknown reason or over-long description
            DuplicateReport: The reporter already reported this entity
        """
        target = parse_target(content_type)
        if reason not in Report.REASONS:
            raise ValidationFailed(f'Invalid reason: {reason}', field='reason')
        description = description or ''
        if len(description) > 1000:
            raise ValidationFailed('description cannot exceed 1000 characters.', field='description')

        try:
            object_id = parse_uuid(content_id, target.label)
        except NotFound:
            raise InvalidTarget(f'{target.label} not found.', field='content_id')
        if fetch_target(target, object_id) is None:
            raise InvalidTarget(f'{target.label} not found.', field='content_id')

        ct = content_type_for(target)
        if Report.objects.filter(reporter=reporter, content_type=ct, object_id=object_id).exists():
            raise DuplicateReport()

        try:
            with transaction.atomic():
                report = Report.objects.create(
                    reporter=reporter,
                    content_type=ct,
                    object_id=object_id,
                    reason=reason,
                    description=sanitize_user_input(description),
                    priority=self.default_priority(reason),
                )
        except IntegrityError:
            # Concurrent duplicate caught by the unique constraint
            raise DuplicateReport()

        logger.info(
            "Report filed",
            report_id=str(report.id),
            reporter_id=str(reporter.pk),
            target_type=target.value,
            target_id=str(object_id),
            reason=reason,
        )
        return report

    def list_reports(self, filters: Optional[Dict[str, str]] = None, page=1, limit=20,
                     ordering='-created_at') -> Dict[str, Any]:
        """
        List reports, newest first by default.

        Args:
            filters: Optional status, content_type, priority and reason
            page: 1-based page number
            limit: Page size (1-100)
            ordering: Field name, '-' prefix for descending

        Returns:
            dict: {'items': [...], 'pagination': {...}}

        Raises:
            ValidationFailed: Unknown filter value or ordering
        """
        filters = {key: value for key, value in (filters or {}).items() if value}
        reports = Report.objects.select_related(
            'reporter', 'resolved_by', 'reviewing_by', 'content_type')

        status = filters.get('status')
        if status:
            if status not in Report.STATUSES:
                raise ValidationFailed(f'Unknown status: {status}', field='status')
            reports = reports.filter(status=status)

        content_type = filters.get('content_type')
        if content_type:
            reports = reports.filter(content_type=content_type_for(parse_target(content_type)))

        priority = filters.get('priority')
        if priority:
            if priority not in Report.PRIORITIES:
                raise ValidationFailed(f'Unknown priority: {priority}', field='priority')
            reports = reports.filter(priority=priority)

        reason = filters.get('reason')
        if reason:
            if reason not in Report.REASONS:
                raise ValidationFailed(f'Unknown reason: {reason}', field='reason')
            reports = reports.filter(reason=reason)

        if ordering.lstrip('-') not in ORDERING_FIELDS:
            raise ValidationFailed(f'Cannot order by: {ordering}', field='ordering')

        return paginate(reports.order_by(ordering, '-id'), page, limit)

    def get_report(self, report_id) -> Report:
        try:
            return Report.objects.select_related(
                'reporter', 'resolved_by', 'reviewing_by', 'content_type',
            ).get(pk=parse_uuid(report_id, 'Report'))
        except Report.DoesNotExist:
            raise NotFound('Report not found.')

    def get_report_detail(self, report_id) -> ReportDetail:
        """
        Load a report together with the entity it points at.

        The entity is None when it has been deleted since the report was filed.

        Raises:
            NotFound: Unknown report id
        """
        report = self.get_report(report_id)
        target = ReportTarget(report.target_type)
        return ReportDetail(report=report, content=fetch_target(target, report.object_id))
