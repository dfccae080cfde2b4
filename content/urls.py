"""
URL configuration for the content app.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import CommentViewSet, EventViewSet, PostViewSet

app_name = 'content'

router = DefaultRouter()
router.register(r'posts', PostViewSet, basename='post')
router.register(r'comments', CommentViewSet, basename='comment')
router.register(r'events', EventViewSet, basename='event')

urlpatterns = [
    path('', include(router.urls)),
]
