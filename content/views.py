"""
Views for posts, comments and events.

Writes go through the publishing service so notifications fan out the same
way regardless of the entry point; votes go through the vote ledger and
registrations through the event registrar.
"""

from django_filters.rest_framework import DjangoFilterBackend
from django.db.models import Q
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from core.exceptions import NotFound, Unauthorized
from core.permissions import IsAuthorOrModerator
from core.throttling import ContentCreateThrottle, VoteThrottle
from moderation.views import ReportableMixin
from .filters import CommentFilter, EventFilter, PostFilter
from .models import Comment, Event, EventAttendee, Post
from .serializers import (
    CommentCreateSerializer,
    CommentSerializer,
    CommentUpdateSerializer,
    EventAttendeeSerializer,
    EventSerializer,
    EventWriteSerializer,
    PostDetailSerializer,
    PostListSerializer,
    PostWriteSerializer,
    VoteSerializer,
)


class VotableMixin:
    """
    Adds POST {id}/vote/ to a viewset of posts or comments.
    """
    vote_content_type = None

    @extend_schema(request=VoteSerializer)
    @action(
        detail=True,
        methods=['post'],
        permission_classes=[IsAuthenticated],
        throttle_classes=[VoteThrottle],
    )
    def vote(self, request, pk=None):
        """
        Cast, change or withdraw a vote.

        Request body: {"direction": "up" | "down" | "none"}
        """
        serializer = VoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        direction = serializer.validated_data['direction']

        # Only items the caller can see are votable
        self.get_object()

        tally = self.services.vote_ledger.cast_vote(
            self.vote_content_type, pk, request.user, direction)
        return Response({
            **tally.as_dict(),
            'user_vote': None if direction == 'none' else direction,
        })


# =============================================================================
# POSTS
# =============================================================================

class PostViewSet(VotableMixin, ReportableMixin, viewsets.ModelViewSet):
    """
    ViewSet for posts.

    Endpoints:
    - GET /posts/ - List visible posts (filters + ordering)
    - POST /posts/ - Create post
    - GET /posts/{id}/ - Post detail (counts a view)
    - PUT/PATCH /posts/{id}/ - Update post (author or staff)
    - DELETE /posts/{id}/ - Delete post (author or staff)
    - GET /posts/trending/ - Top posts by votes, comments and views
    - POST /posts/{id}/vote/ - Vote
    - POST /posts/{id}/report/ - Report to moderators
    """
    permission_classes = [IsAuthenticated, IsAuthorOrModerator]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = PostFilter
    ordering_fields = ['published_at', 'created_at', 'view_count', 'comment_count', 'upvote_count']
    ordering = ['-is_pinned', '-published_at', '-created_at']
    report_content_type = 'post'
    vote_content_type = 'post'

    def get_queryset(self):
        return Post.objects.visible_to(self.request.user).select_related('author')

    def get_serializer_class(self):
        """Return appropriate serializer based on action."""
        if self.action == 'list':
            return PostListSerializer
        if self.action in ('create', 'update', 'partial_update'):
            return PostWriteSerializer
        return PostDetailSerializer

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['vote_ledger'] = self.services.vote_ledger
        return context

    def get_throttles(self):
        if self.action == 'create':
            return [ContentCreateThrottle()]
        return super().get_throttles()

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        post = self.services.publishing.create_post(request.user, **serializer.validated_data)
        return Response(
            PostDetailSerializer(post, context=self.get_serializer_context()).data,
            status=status.HTTP_201_CREATED,
        )

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        post = self.get_object()
        serializer = self.get_serializer(post, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        post = serializer.save()
        return Response(PostDetailSerializer(post, context=self.get_serializer_context()).data)

    def retrieve(self, request, *args, **kwargs):
        post = self.get_object()
        post.increment_view_count()
        return Response(self.get_serializer(post).data)

    @extend_schema(parameters=[OpenApiParameter('limit', int)])
    @action(detail=False, methods=['get'])
    def trending(self, request):
        try:
            limit = min(max(int(request.query_params.get('limit', 10)), 1), 50)
        except ValueError:
            limit = 10
        posts = [
            post for post in self.services.publishing.trending_posts(limit=limit)
            if post.visibility != Post.STAFF_ONLY or request.user.is_moderator
        ]
        return Response(PostListSerializer(posts, many=True, context={'request': request}).data)


# =============================================================================
# COMMENTS
# =============================================================================

class CommentViewSet(VotableMixin, ReportableMixin, viewsets.ModelViewSet):
    """
    ViewSet for comments.

    Endpoints:
    - GET /comments/?post=<id> - List comments
    - POST /comments/ - Comment on a post, optionally replying to a comment
    - PUT/PATCH /comments/{id}/ - Edit (author or staff)
    - DELETE /comments/{id}/ - Soft delete
    - POST /comments/{id}/vote/ - Vote
    - POST /comments/{id}/report/ - Report to moderators
    """
    permission_classes = [IsAuthenticated, IsAuthorOrModerator]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = CommentFilter
    ordering_fields = ['created_at', 'upvote_count']
    ordering = ['created_at']
    report_content_type = 'comment'
    vote_content_type = 'comment'

    def get_queryset(self):
        user = self.request.user
        queryset = Comment.objects.select_related('author', 'post').filter(
            post__in=Post.objects.visible_to(user))
        if getattr(user, 'is_moderator', False):
            return queryset
        return queryset.filter(
            Q(status=Comment.ACTIVE) | Q(author=user, status=Comment.FLAGGED))

    def get_serializer_class(self):
        if self.action == 'create':
            return CommentCreateSerializer
        if self.action in ('update', 'partial_update'):
            return CommentUpdateSerializer
        return CommentSerializer

    def get_throttles(self):
        if self.action == 'create':
            return [ContentCreateThrottle()]
        return super().get_throttles()

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if not Post.objects.visible_to(request.user).filter(pk=data['post'].pk).exists():
            raise NotFound('Post not found.')

        comment = self.services.publishing.create_comment(
            request.user, data['post'], data['content'], parent=data.get('parent'))
        return Response(
            CommentSerializer(comment, context=self.get_serializer_context()).data,
            status=status.HTTP_201_CREATED,
        )

    def update(self, request, *args, **kwargs):
        comment = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        comment = self.services.publishing.edit_comment(
            comment, serializer.validated_data['content'])
        return Response(CommentSerializer(comment, context=self.get_serializer_context()).data)

    def perform_destroy(self, instance):
        """Soft delete instead of hard delete."""
        self.services.publishing.delete_comment(instance)


# =============================================================================
# EVENTS
# =============================================================================

class EventViewSet(ReportableMixin, viewsets.ModelViewSet):
    """
    ViewSet for community events.

    Endpoints:
    - GET /events/ - List events (filters: category, status, upcoming, ...)
    - POST /events/ - Create event
    - GET/PUT/PATCH/DELETE /events/{id}/ - Detail and changes (organizer or staff)
    - POST /events/{id}/register/ - Register the current user
    - POST /events/{id}/cancel-registration/ - Cancel the current user's registration
    - GET /events/{id}/attendees/ - Attendee list (organizer or staff)
    - POST /events/{id}/report/ - Report to moderators
    """
    permission_classes = [IsAuthenticated, IsAuthorOrModerator]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = EventFilter
    ordering_fields = ['start_at', 'created_at']
    ordering = ['start_at']
    report_content_type = 'event'

    def get_queryset(self):
        user = self.request.user
        queryset = Event.objects.select_related('organizer')
        if getattr(user, 'is_moderator', False):
            return queryset
        return queryset.filter(~Q(status=Event.DRAFT) | Q(organizer=user))

    def get_serializer_class(self):
        if self.action in ('create', 'update', 'partial_update'):
            return EventWriteSerializer
        return EventSerializer

    def get_throttles(self):
        if self.action == 'create':
            return [ContentCreateThrottle()]
        return super().get_throttles()

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        event = self.services.publishing.create_event(request.user, **serializer.validated_data)
        return Response(
            EventSerializer(event, context=self.get_serializer_context()).data,
            status=status.HTTP_201_CREATED,
        )

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        event = self.get_object()
        serializer = self.get_serializer(event, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        event = self.services.publishing.update_event(event, **serializer.validated_data)
        return Response(EventSerializer(event, context=self.get_serializer_context()).data)

    @extend_schema(request=None, responses={201: EventAttendeeSerializer})
    @action(detail=True, methods=['post'], permission_classes=[IsAuthenticated])
    def register(self, request, pk=None):
        self.get_object()
        attendee = self.services.event_registrar.register(pk, request.user)
        return Response(EventAttendeeSerializer(attendee).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses=EventAttendeeSerializer)
    @action(
        detail=True,
        methods=['post'],
        url_path='cancel-registration',
        permission_classes=[IsAuthenticated],
    )
    def cancel_registration(self, request, pk=None):
        self.get_object()
        attendee = self.services.event_registrar.cancel(pk, request.user)
        return Response(EventAttendeeSerializer(attendee).data)

    @action(detail=True, methods=['get'])
    def attendees(self, request, pk=None):
        event = self.get_object()
        if event.organizer_id != request.user.id and not request.user.is_moderator:
            raise Unauthorized('Only the organizer can see the attendee list.')

        attendees = event.attendees.select_related('user').exclude(
            status=EventAttendee.CANCELLED)
        return Response(EventAttendeeSerializer(attendees, many=True).data)

    @action(detail=False, methods=['get'], url_path='my')
    def mine(self, request):
        """Events the current user organizes or is registered for."""
        events = self.filter_queryset(self.get_queryset()).filter(
            Q(organizer=request.user)
            | Q(attendees__user=request.user, attendees__status=EventAttendee.REGISTERED)
        ).distinct()

        page = self.paginate_queryset(events)
        serializer = EventSerializer(page, many=True, context=self.get_serializer_context())
        return self.get_paginated_response(serializer.data)
