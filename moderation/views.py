"""
Views for filing reports and for the moderation queue.
"""

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from core.container import ServiceMixin
from core.permissions import IsStaffOrAdmin
from core.throttling import ContentReportThrottle
from .serializers import (
    DismissReportSerializer,
    ReportCreateSerializer,
    ReportDetailSerializer,
    ReportSerializer,
    ResolveReportSerializer,
)


class ReportableMixin(ServiceMixin):
    """
    Adds POST {id}/report/ to a viewset.

    Subclasses set `report_content_type` to the kind of entity they serve.
    """
    report_content_type = None

    @extend_schema(request=ReportCreateSerializer, responses={201: ReportSerializer})
    @action(
        detail=True,
        methods=['post'],
        permission_classes=[IsAuthenticated],
        throttle_classes=[ContentReportThrottle],
    )
    def report(self, request, pk=None):
        """Report this entity to the moderators."""
        serializer = ReportCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        report = self.services.report_registry.file_report(
            request.user,
            self.report_content_type,
            pk,
            serializer.validated_data['reason'],
            serializer.validated_data['description'],
        )
        return Response(ReportSerializer(report).data, status=status.HTTP_201_CREATED)


class AdminReportViewSet(ServiceMixin, viewsets.GenericViewSet):
    """
    Moderation queue for staff and admins.

    Endpoints:
    - GET  /admin/reports/           - List reports (filters + pagination)
    - GET  /admin/reports/{id}/      - Report with the reported entity
    - POST /admin/reports/{id}/review/  - Pick up a pending report
    - POST /admin/reports/{id}/resolve/ - Resolve with a moderation action
    - POST /admin/reports/{id}/dismiss/ - Dismiss without action
    - GET  /admin/reports/stats/     - Counts by status, reason and type
    """
    serializer_class = ReportSerializer
    permission_classes = [IsAuthenticated, IsStaffOrAdmin]

    @extend_schema(parameters=[
        OpenApiParameter('status', str),
        OpenApiParameter('content_type', str),
        OpenApiParameter('priority', str),
        OpenApiParameter('reason', str),
        OpenApiParameter('ordering', str),
        OpenApiParameter('page', int),
        OpenApiParameter('limit', int),
    ])
    def list(self, request):
        params = request.query_params
        result = self.services.report_registry.list_reports(
            filters={
                'status': params.get('status'),
                'content_type': params.get('content_type'),
                'priority': params.get('priority'),
                'reason': params.get('reason'),
            },
            page=params.get('page', 1),
            limit=params.get('limit', 20),
            ordering=params.get('ordering', '-created_at'),
        )
        return Response({
            'items': ReportSerializer(result['items'], many=True).data,
            'pagination': result['pagination'],
        })

    @extend_schema(responses=ReportDetailSerializer)
    def retrieve(self, request, pk=None):
        detail = self.services.report_registry.get_report_detail(pk)
        return Response(ReportDetailSerializer(detail).data)

    @extend_schema(request=None)
    @action(detail=True, methods=['post'])
    def review(self, request, pk=None):
        """Mark the report as under review by the current moderator."""
        report = self.services.moderation_engine.start_review(pk, request.user)
        return Response(ReportSerializer(report).data)

    @extend_schema(request=ResolveReportSerializer)
    @action(detail=True, methods=['post'])
    def resolve(self, request, pk=None):
        """
        Resolve the report and apply a moderation action.

        Request body:
        {
            "action": "none|warning|content_removed|user_suspended|user_banned",
            "notes": "Optional notes about the decision"
        }
        """
        serializer = ResolveReportSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        report = self.services.moderation_engine.resolve(
            pk,
            request.user,
            serializer.validated_data['action'],
            serializer.validated_data['notes'],
        )
        return Response(ReportSerializer(report).data)

    @extend_schema(request=DismissReportSerializer)
    @action(detail=True, methods=['post'])
    def dismiss(self, request, pk=None):
        serializer = DismissReportSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        report = self.services.moderation_engine.dismiss(
            pk, request.user, serializer.validated_data['notes'])
        return Response(ReportSerializer(report).data)

    @action(detail=False, methods=['get'])
    def stats(self, request):
        return Response(self.services.moderation_engine.stats())
