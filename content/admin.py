"""
Admin interface for the content app.
"""

from django.contrib import admin
from .models import Comment, Event, EventAttendee, Post, Vote


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    list_display = [
        'title',
        'author',
        'category',
        'status',
        'visibility',
        'is_official',
        'is_pinned',
        'comment_count',
        'upvote_count',
        'downvote_count',
        'published_at',
    ]
    list_filter = [
        'category',
        'status',
        'visibility',
        'is_official',
        'is_pinned',
        'created_at',
    ]
    search_fields = [
        'title',
        'content',
        'author__username',
        'author__email',
    ]
    readonly_fields = [
        'id',
        'view_count',
        'comment_count',
        'upvote_count',
        'downvote_count',
        'published_at',
        'created_at',
        'updated_at',
    ]
    fieldsets = (
        ('Basic Information', {
            'fields': ('id', 'author', 'category', 'status', 'visibility')
        }),
        ('Content', {
            'fields': ('title', 'content', 'excerpt')
        }),
        ('Flags', {
            'fields': ('is_official', 'is_pinned')
        }),
        ('Moderation', {
            'fields': ('moderation_notes', 'moderated_by', 'moderated_at')
        }),
        ('Statistics', {
            'fields': ('view_count', 'comment_count', 'upvote_count', 'downvote_count'),
            'classes': ('collapse',)
        }),
        ('Timestamps', {
            'fields': ('published_at', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ['id', 'post', 'author', 'status', 'is_edited', 'upvote_count', 'created_at']
    list_filter = ['status', 'is_edited', 'created_at']
    search_fields = ['content', 'author__username', 'author__email', 'post__title']
    readonly_fields = ['id', 'upvote_count', 'downvote_count', 'created_at', 'updated_at', 'edited_at']
    raw_id_fields = ['post', 'parent', 'author']


class EventAttendeeInline(admin.TabularInline):
    model = EventAttendee
    extra = 0
    readonly_fields = ['registered_at']
    raw_id_fields = ['user']


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ['title', 'organizer', 'category', 'status', 'start_at', 'capacity', 'is_official']
    list_filter = ['category', 'status', 'is_official', 'is_online', 'start_at']
    search_fields = ['title', 'description', 'location_name', 'organizer__email']
    readonly_fields = ['id', 'created_at', 'updated_at']
    inlines = [EventAttendeeInline]


@admin.register(Vote)
class VoteAdmin(admin.ModelAdmin):
    list_display = ['voter', 'content_type', 'object_id', 'direction', 'created_at']
    list_filter = ['direction', 'content_type']
    readonly_fields = ['id', 'created_at', 'updated_at']
