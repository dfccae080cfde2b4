"""
Serializers for the accounts app.
"""

from rest_framework import serializers
from django.contrib.auth import get_user_model

User = get_user_model()


class UserMinimalSerializer(serializers.ModelSerializer):
    """Minimal user info for nested serialization."""

    class Meta:
        model = User
        fields = ['id', 'username', 'first_name', 'last_name', 'role']
        read_only_fields = fields


class UserSerializer(serializers.ModelSerializer):
    """Full account view for the user themselves and for administrators."""
    is_suspended = serializers.BooleanField(read_only=True)
    is_banned = serializers.BooleanField(read_only=True)

    class Meta:
        model = User
        fields = [
            'id',
            'username',
            'email',
            'first_name',
            'last_name',
            'phone',
            'role',
            'is_active',
            'is_suspended',
            'is_banned',
            'suspended_until',
            'banned_at',
            'created_at',
        ]
        read_only_fields = fields


class UserRoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=User.ROLE_CHOICES)


class UserStatusSerializer(serializers.Serializer):
    is_active = serializers.BooleanField()
