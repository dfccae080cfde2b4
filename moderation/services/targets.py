"""
Resolution of report targets to model classes and rows.
"""

from django.contrib.auth import get_user_model
from django.contrib.contenttypes.models import ContentType
from django.core.exceptions import ImproperlyConfigured

from content.models import Post, Comment, Event
from core.exceptions import InvalidTarget
from ..models import ReportTarget

TARGET_MODELS = {
    ReportTarget.POST: Post,
    ReportTarget.COMMENT: Comment,
    ReportTarget.EVENT: Event,
    ReportTarget.USER: get_user_model(),
}


def parse_target(content_type) -> ReportTarget:
    """
    Raises:
        InvalidTarget: If content_type is not a reportable kind
    """
    try:
        return ReportTarget(content_type)
    except ValueError:
        raise InvalidTarget(f'Invalid content type: {content_type}', field='content_type')


def model_for(target: ReportTarget):
    return TARGET_MODELS[target]


def content_type_for(target: ReportTarget) -> ContentType:
    return ContentType.objects.get_for_model(TARGET_MODELS[target])


def fetch_target(target: ReportTarget, object_id, for_update=False):
    """
    Load the reported row, or None when it no longer exists.
    """
    queryset = TARGET_MODELS[target].objects.all()
    if for_update:
        queryset = queryset.select_for_update()
    return queryset.filter(pk=object_id).first()


def author_of(target: ReportTarget, entity):
    """
    The user accountable for a reported entity: its author, organizer,
    or the reported user.
    """
    if entity is None:
        return None
    if target is ReportTarget.USER:
        return entity
    if target is ReportTarget.EVENT:
        return entity.organizer
    return entity.author


# Every target kind must be resolvable
_unmapped = set(ReportTarget) - set(TARGET_MODELS)
if _unmapped:
    raise ImproperlyConfigured(f'No model registered for report targets: {sorted(_unmapped)}')
