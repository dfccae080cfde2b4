"""
Serializers for posts, comments and events.
"""

from django.utils import timezone
from rest_framework import serializers

from accounts.serializers import UserMinimalSerializer
from .models import Comment, Event, EventAttendee, Post


def _is_moderator(serializer):
    request = serializer.context.get('request')
    return bool(request and request.user.is_authenticated and request.user.is_moderator)


class ContentPermissionsMixin(serializers.Serializer):
    can_edit = serializers.SerializerMethodField()

    def get_can_edit(self, obj):
        """Check if current user can edit this item."""
        request = self.context.get('request')
        if not request or not request.user.is_authenticated:
            return False
        return obj.author_id == request.user.id or request.user.is_moderator


# =============================================================================
# POSTS
# =============================================================================

class PostListSerializer(ContentPermissionsMixin, serializers.ModelSerializer):
    """
    List serializer for posts (lightweight for feed).
    """
    author = UserMinimalSerializer(read_only=True)
    score = serializers.IntegerField(read_only=True)

    class Meta:
        model = Post
        fields = [
            'id',
            'author',
            'title',
            'excerpt',
            'category',
            'status',
            'visibility',
            'is_official',
            'is_pinned',
            'view_count',
            'comment_count',
            'upvote_count',
            'downvote_count',
            'score',
            'published_at',
            'created_at',
            'can_edit',
        ]
        read_only_fields = fields


class PostDetailSerializer(PostListSerializer):
    """
    Detail serializer for posts, including the caller's own vote.
    """
    user_vote = serializers.SerializerMethodField()

    class Meta(PostListSerializer.Meta):
        fields = PostListSerializer.Meta.fields + [
            'content',
            'updated_at',
            'user_vote',
        ]
        read_only_fields = fields

    def get_user_vote(self, obj):
        ledger = self.context.get('vote_ledger')
        request = self.context.get('request')
        if ledger is None or not request or not request.user.is_authenticated:
            return None
        return ledger.user_vote('post', obj.pk, request.user)


class PostWriteSerializer(serializers.ModelSerializer):
    """
    Serializer for creating and updating posts.
    """

    class Meta:
        model = Post
        fields = [
            'title',
            'content',
            'excerpt',
            'category',
            'status',
            'visibility',
            'is_official',
            'is_pinned',
        ]
        extra_kwargs = {
            'excerpt': {'required': False},
        }

    def validate_title(self, value):
        if len(value.strip()) < 3:
            raise serializers.ValidationError("Title must be at least 3 characters long.")
        return value.strip()

    def validate_content(self, value):
        if not value.strip():
            raise serializers.ValidationError("Content cannot be empty.")
        return value.strip()

    def validate(self, data):
        if data.get('is_pinned') and not _is_moderator(self):
            raise serializers.ValidationError({'is_pinned': 'Only staff can pin posts.'})
        if self.instance is not None and 'is_official' in data and not _is_moderator(self):
            raise serializers.ValidationError({'is_official': 'Only staff can change official status.'})

        new_status = data.get('status')
        if new_status is not None and not _is_moderator(self):
            current = getattr(self.instance, 'status', None)
            if Post.REJECTED in (new_status, current) and new_status != current:
                raise serializers.ValidationError(
                    {'status': 'Only staff can change the status of moderated posts.'})
        return data


# =============================================================================
# COMMENTS
# =============================================================================

class CommentSerializer(ContentPermissionsMixin, serializers.ModelSerializer):
    author = UserMinimalSerializer(read_only=True)
    score = serializers.IntegerField(read_only=True)
    reply_count = serializers.SerializerMethodField()

    class Meta:
        model = Comment
        fields = [
            'id',
            'post',
            'author',
            'parent',
            'content',
            'status',
            'is_edited',
            'edited_at',
            'upvote_count',
            'downvote_count',
            'score',
            'reply_count',
            'created_at',
            'updated_at',
            'can_edit',
        ]
        read_only_fields = fields

    def get_reply_count(self, obj):
        return obj.replies.filter(status=Comment.ACTIVE).count()


class CommentCreateSerializer(serializers.Serializer):
    post = serializers.PrimaryKeyRelatedField(queryset=Post.objects.all())
    parent = serializers.PrimaryKeyRelatedField(
        queryset=Comment.objects.exclude(status=Comment.DELETED),
        required=False,
        allow_null=True,
    )
    content = serializers.CharField(max_length=2000)

    def validate_content(self, value):
        if not value.strip():
            raise serializers.ValidationError("Comment cannot be empty.")
        return value.strip()


class CommentUpdateSerializer(serializers.Serializer):
    content = serializers.CharField(max_length=2000)

    def validate_content(self, value):
        if not value.strip():
            raise serializers.ValidationError("Comment cannot be empty.")
        return value.strip()


# =============================================================================
# EVENTS
# =============================================================================

class EventSerializer(ContentPermissionsMixin, serializers.ModelSerializer):
    organizer = UserMinimalSerializer(read_only=True)
    attendee_count = serializers.IntegerField(read_only=True)
    is_full = serializers.BooleanField(read_only=True)
    is_registered = serializers.SerializerMethodField()

    class Meta:
        model = Event
        fields = [
            'id',
            'organizer',
            'title',
            'description',
            'category',
            'start_at',
            'end_at',
            'location_name',
            'is_online',
            'online_url',
            'capacity',
            'registration_required',
            'registration_deadline',
            'status',
            'is_official',
            'attendee_count',
            'is_full',
            'is_registered',
            'created_at',
            'updated_at',
            'can_edit',
        ]
        read_only_fields = fields

    def get_is_registered(self, obj):
        request = self.context.get('request')
        if not request or not request.user.is_authenticated:
            return False
        return obj.attendees.filter(user=request.user).exclude(
            status=EventAttendee.CANCELLED).exists()


class EventWriteSerializer(serializers.ModelSerializer):

    class Meta:
        model = Event
        fields = [
            'title',
            'description',
            'category',
            'start_at',
            'end_at',
            'location_name',
            'is_online',
            'online_url',
            'capacity',
            'registration_required',
            'registration_deadline',
            'status',
            'is_official',
        ]

    def validate(self, data):
        start_at = data.get('start_at', getattr(self.instance, 'start_at', None))
        end_at = data.get('end_at', getattr(self.instance, 'end_at', None))
        if start_at and end_at and end_at <= start_at:
            raise serializers.ValidationError({'end_at': 'End date must be after start date.'})

        deadline = data.get('registration_deadline')
        if deadline and start_at and deadline > start_at:
            raise serializers.ValidationError(
                {'registration_deadline': 'Registration must close before the event starts.'})

        if self.instance is None and start_at and start_at < timezone.now():
            raise serializers.ValidationError({'start_at': 'Events cannot start in the past.'})

        if self.instance is not None and 'is_official' in data and not _is_moderator(self):
            raise serializers.ValidationError({'is_official': 'Only staff can change official status.'})

        # An event cancelled by a moderator stays cancelled for its organizer
        new_status = data.get('status')
        if (self.instance is not None
                and new_status is not None
                and new_status != self.instance.status
                and self.instance.status == Event.CANCELLED
                and self.instance.moderated_by_id is not None
                and not _is_moderator(self)):
            raise serializers.ValidationError(
                {'status': 'Only staff can reopen an event cancelled by moderation.'})
        return data


class EventAttendeeSerializer(serializers.ModelSerializer):
    user = UserMinimalSerializer(read_only=True)

    class Meta:
        model = EventAttendee
        fields = ['id', 'event', 'user', 'status', 'registered_at']
        read_only_fields = fields


class VoteSerializer(serializers.Serializer):
    direction = serializers.ChoiceField(choices=['up', 'down', 'none'])
