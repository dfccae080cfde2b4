"""
Serializers for reports and moderation decisions.
"""

from rest_framework import serializers

from accounts.serializers import UserMinimalSerializer
from .models import ModerationAction, Report, ReportTarget


class ReportCreateSerializer(serializers.Serializer):
    """
    Body of POST /<content>/{id}/report/.

    The reported entity comes from the URL.
    """
    reason = serializers.ChoiceField(choices=Report.REASON_CHOICES)
    description = serializers.CharField(
        max_length=1000, required=False, allow_blank=True, default='')


class ReportSerializer(serializers.ModelSerializer):
    """
    Report as seen by its reporter and by moderators.
    """
    reporter = UserMinimalSerializer(read_only=True)
    reviewing_by = UserMinimalSerializer(read_only=True)
    content_type = serializers.CharField(source='target_type', read_only=True)
    resolution = serializers.SerializerMethodField()

    class Meta:
        model = Report
        fields = [
            'id',
            'reporter',
            'content_type',
            'object_id',
            'reason',
            'description',
            'status',
            'priority',
            'reviewing_by',
            'reviewing_at',
            'resolution',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_resolution(self, obj):
        resolution = obj.resolution
        if resolution is None:
            return None
        return {
            'action': resolution['action'],
            'notes': resolution['notes'],
            'resolved_by': str(resolution['resolved_by']) if resolution['resolved_by'] else None,
            'resolved_at': serializers.DateTimeField().to_representation(resolution['resolved_at']),
        }


def serialize_target(target_type, entity):
    """Compact view of a reported entity for the moderation screen."""
    if entity is None:
        return None

    if target_type == ReportTarget.USER:
        data = UserMinimalSerializer(entity).data
        data['is_active'] = entity.is_active
        return data

    data = {
        'id': str(entity.id),
        'status': entity.status,
        'author': UserMinimalSerializer(entity.author).data,
        'created_at': serializers.DateTimeField().to_representation(entity.created_at),
    }
    if target_type == ReportTarget.COMMENT:
        data['content'] = entity.content
        data['post_id'] = str(entity.post_id)
    elif target_type == ReportTarget.POST:
        data['title'] = entity.title
        data['content'] = entity.content
    else:
        data['title'] = entity.title
        data['description'] = entity.description
    return data


class ReportDetailSerializer(serializers.Serializer):
    """Report together with the reported entity (null once deleted)."""
    report = ReportSerializer()
    content = serializers.SerializerMethodField()

    def get_content(self, obj):
        return serialize_target(obj.report.target_type, obj.content)


class ResolveReportSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=ModerationAction.choices)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True, default='')


class DismissReportSerializer(serializers.Serializer):
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True, default='')
