"""
Serializers for notifications and notification settings.
"""

from rest_framework import serializers

from .models import CategorySubscription, Notification, NotificationDelivery


class NotificationDeliverySerializer(serializers.ModelSerializer):

    class Meta:
        model = NotificationDelivery
        fields = ['method', 'status', 'sent_at']
        read_only_fields = fields


class NotificationSerializer(serializers.ModelSerializer):
    """
    A notification as shown to its recipient.
    """
    deliveries = NotificationDeliverySerializer(many=True, read_only=True)

    class Meta:
        model = Notification
        fields = [
            'id',
            'type',
            'title',
            'message',
            'entity_type',
            'entity_id',
            'url',
            'metadata',
            'priority',
            'is_read',
            'read_at',
            'expires_at',
            'deliveries',
            'created_at',
        ]
        read_only_fields = fields


class NotificationPreferenceSerializer(serializers.Serializer):
    """
    Channel switches; every field optional on PATCH.
    """
    in_app_enabled = serializers.BooleanField(required=False)
    email_enabled = serializers.BooleanField(required=False)
    sms_enabled = serializers.BooleanField(required=False)


class SubscriptionSerializer(serializers.Serializer):
    categories = serializers.ListField(
        child=serializers.ChoiceField(choices=CategorySubscription.CATEGORY_CHOICES),
        allow_empty=True,
    )


class BroadcastSerializer(serializers.Serializer):
    """
    Staff broadcast to the subscribers of a category.
    """
    category = serializers.ChoiceField(choices=CategorySubscription.CATEGORY_CHOICES)
    type = serializers.ChoiceField(
        choices=[Notification.SYSTEM_ALERT, Notification.ANNOUNCEMENT],
        default=Notification.ANNOUNCEMENT,
    )
    title = serializers.CharField(max_length=200)
    message = serializers.CharField(max_length=1000)
    url = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')
    priority = serializers.ChoiceField(
        choices=Notification.PRIORITY_CHOICES, default=Notification.NORMAL)
