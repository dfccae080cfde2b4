"""
URL configuration for the moderation queue (mounted under /api/v1/admin/).
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import AdminReportViewSet

app_name = 'moderation'

router = DefaultRouter()
router.register(r'reports', AdminReportViewSet, basename='admin-report')

urlpatterns = [
    path('', include(router.urls)),
]
