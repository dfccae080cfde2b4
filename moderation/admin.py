"""
Admin interface for the moderation app.

Reports are read-only here; decisions go through the moderation API so
the side effects and notifications run.
"""

from django.contrib import admin
from .models import Report


@admin.register(Report)
class ReportAdmin(admin.ModelAdmin):
    list_display = [
        'id',
        'reason',
        'content_type',
        'object_id',
        'status',
        'priority',
        'reporter',
        'resolution_action',
        'created_at',
    ]
    list_filter = [
        'status',
        'priority',
        'reason',
        'content_type',
        'created_at',
    ]
    search_fields = [
        'reporter__email',
        'description',
        'resolution_notes',
    ]
    readonly_fields = [
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
        'resolution_action',
        'resolution_notes',
        'resolved_by',
        'resolved_at',
        'created_at',
        'updated_at',
    ]
    fieldsets = (
        ('Report', {
            'fields': ('id', 'reporter', 'content_type', 'object_id', 'reason', 'description')
        }),
        ('Status', {
            'fields': ('status', 'priority', 'reviewing_by', 'reviewing_at')
        }),
        ('Resolution', {
            'fields': ('resolution_action', 'resolution_notes', 'resolved_by', 'resolved_at')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def has_add_permission(self, request):
        return False
