"""
Filters for the content endpoints.
"""

import django_filters
from django.db.models import Q
from django.utils import timezone

from .models import Comment, Event, Post


class PostFilter(django_filters.FilterSet):
    """
    Filter posts by:
    - category, status, visibility, is_official, author
    - search (title or content, case-insensitive)
    - published_after / published_before
    """

    search = django_filters.CharFilter(method='filter_search', label='Search')
    published_after = django_filters.IsoDateTimeFilter(field_name='published_at', lookup_expr='gte')
    published_before = django_filters.IsoDateTimeFilter(field_name='published_at', lookup_expr='lte')

    class Meta:
        model = Post
        fields = ['category', 'status', 'visibility', 'is_official', 'author']

    def filter_search(self, queryset, name, value):
        return queryset.filter(Q(title__icontains=value) | Q(content__icontains=value))


class CommentFilter(django_filters.FilterSet):
    """
    Filter comments by post, parent comment or author.

    `top_level=true` returns only comments that are not replies.
    """

    top_level = django_filters.BooleanFilter(field_name='parent', lookup_expr='isnull')

    class Meta:
        model = Comment
        fields = ['post', 'parent', 'author', 'status']


class EventFilter(django_filters.FilterSet):
    """
    Filter events by category, status, organizer and date window.

    `upcoming=true` returns events that have not ended yet.
    """

    starts_after = django_filters.IsoDateTimeFilter(field_name='start_at', lookup_expr='gte')
    starts_before = django_filters.IsoDateTimeFilter(field_name='start_at', lookup_expr='lte')
    upcoming = django_filters.BooleanFilter(method='filter_upcoming')

    class Meta:
        model = Event
        fields = ['category', 'status', 'is_official', 'is_online', 'organizer']

    def filter_upcoming(self, queryset, name, value):
        now = timezone.now()
        if value:
            return queryset.filter(end_at__gte=now)
        return queryset.filter(end_at__lt=now)
