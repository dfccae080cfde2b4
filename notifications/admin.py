"""
Admin interface for the notifications app.
"""

from django.contrib import admin
from .models import CategorySubscription, Notification, NotificationDelivery, NotificationPreference


class NotificationDeliveryInline(admin.TabularInline):
    model = NotificationDelivery
    extra = 0
    readonly_fields = ['method', 'status', 'sent_at', 'error', 'updated_at']
    can_delete = False


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['title', 'recipient', 'type', 'priority', 'is_read', 'created_at', 'expires_at']
    list_filter = ['type', 'priority', 'is_read', 'created_at']
    search_fields = ['title', 'message', 'recipient__email']
    readonly_fields = ['id', 'created_at', 'updated_at', 'read_at']
    inlines = [NotificationDeliveryInline]


@admin.register(NotificationPreference)
class NotificationPreferenceAdmin(admin.ModelAdmin):
    list_display = ['user', 'in_app_enabled', 'email_enabled', 'sms_enabled', 'updated_at']
    list_filter = ['in_app_enabled', 'email_enabled', 'sms_enabled']
    search_fields = ['user__email', 'user__username']


@admin.register(CategorySubscription)
class CategorySubscriptionAdmin(admin.ModelAdmin):
    list_display = ['user', 'category', 'created_at']
    list_filter = ['category']
    search_fields = ['user__email']
