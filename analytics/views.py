"""
Staff analytics endpoints.

All endpoints are read-only and restricted to staff and admin roles.
"""

from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema

from core.container import ServiceMixin
from core.permissions import IsStaffOrAdmin
from .serializers import DateRangeSerializer, TopContributorsSerializer, UserGrowthSerializer


class AnalyticsView(ServiceMixin, APIView):
    permission_classes = [IsAuthenticated, IsStaffOrAdmin]
    query_serializer_class = None

    def get_query_params(self, request):
        if self.query_serializer_class is None:
            return {}
        serializer = self.query_serializer_class(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data


class DashboardView(AnalyticsView):
    """
    GET /analytics/dashboard/

    Headline user, content and moderation counts.
    """

    @extend_schema(tags=['Analytics'])
    def get(self, request):
        return Response(self.services.analytics.dashboard_summary())


class UserGrowthView(AnalyticsView):
    """GET /analytics/user-growth/?start=&end=&interval=day|month"""
    query_serializer_class = UserGrowthSerializer

    @extend_schema(tags=['Analytics'], parameters=[UserGrowthSerializer])
    def get(self, request):
        params = self.get_query_params(request)
        return Response({
            'interval': params['interval'],
            'items': self.services.analytics.user_growth(
                params.get('start'), params.get('end'), params['interval']),
        })


class EngagementView(AnalyticsView):
    """
    GET /analytics/engagement/?start=&end=

    Post engagement by category plus event registrations for the window.
    """
    query_serializer_class = DateRangeSerializer

    @extend_schema(tags=['Analytics'], parameters=[DateRangeSerializer])
    def get(self, request):
        params = self.get_query_params(request)
        analytics = self.services.analytics
        return Response({
            'posts': analytics.content_engagement(params.get('start'), params.get('end')),
            'events': analytics.event_engagement(params.get('start'), params.get('end')),
        })


class TopContributorsView(AnalyticsView):
    """GET /analytics/top-contributors/?limit=10"""
    query_serializer_class = TopContributorsSerializer

    @extend_schema(tags=['Analytics'], parameters=[TopContributorsSerializer])
    def get(self, request):
        params = self.get_query_params(request)
        return Response(self.services.analytics.top_contributors(params['limit']))


class ActivityByRoleView(AnalyticsView):
    """GET /analytics/activity/"""

    @extend_schema(tags=['Analytics'])
    def get(self, request):
        return Response(self.services.analytics.activity_by_role())
