"""
Views for user accounts and their administration.
"""

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from django.contrib.auth import get_user_model
from drf_spectacular.utils import extend_schema, OpenApiParameter

from core.container import ServiceMixin
from core.permissions import IsStaffOrAdmin, IsAdminRole
from moderation.views import ReportableMixin
from .serializers import (
    UserMinimalSerializer,
    UserSerializer,
    UserRoleSerializer,
    UserStatusSerializer,
)

User = get_user_model()


class UserViewSet(ReportableMixin, viewsets.ReadOnlyModelViewSet):
    """
    Public user lookups, the current user's account, and user reports.
    """
    serializer_class = UserMinimalSerializer
    permission_classes = [IsAuthenticated]
    queryset = User.objects.filter(is_active=True)
    report_content_type = 'user'

    @action(detail=False, methods=['get'])
    def me(self, request):
        """Return the authenticated user's own account."""
        return Response(UserSerializer(request.user).data)


class AdminUserViewSet(ServiceMixin, viewsets.GenericViewSet):
    """
    Staff/admin management of user accounts.

    list:   GET  /admin/users/?query=&role=&is_active=&page=&limit=
    role:   PUT  /admin/users/{id}/role/    (admin only)
    status: PUT  /admin/users/{id}/status/
    """
    serializer_class = UserSerializer
    permission_classes = [IsAuthenticated, IsStaffOrAdmin]
    queryset = User.objects.all()

    @extend_schema(parameters=[
        OpenApiParameter('query', str),
        OpenApiParameter('role', str),
        OpenApiParameter('is_active', bool),
        OpenApiParameter('page', int),
        OpenApiParameter('limit', int),
    ])
    def list(self, request):
        params = request.query_params
        is_active = params.get('is_active')
        result = self.services.account_service.search_users(
            query=params.get('query'),
            role=params.get('role'),
            is_active={'true': True, 'false': False}.get(is_active),
            page=params.get('page', 1),
            limit=params.get('limit', 20),
        )
        return Response({
            'items': UserSerializer(result['items'], many=True).data,
            'pagination': result['pagination'],
        })

    @extend_schema(request=UserRoleSerializer, responses=UserSerializer)
    @action(detail=True, methods=['put'], permission_classes=[IsAuthenticated, IsAdminRole])
    def role(self, request, pk=None):
        """Change a user's role (admins only)."""
        serializer = UserRoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = self.services.account_service.update_role(
            pk, serializer.validated_data['role'], actor=request.user)
        return Response(UserSerializer(user).data)

    @extend_schema(request=UserStatusSerializer, responses=UserSerializer)
    @action(detail=True, methods=['put'], url_path='status')
    def set_status(self, request, pk=None):
        """Activate or deactivate a user."""
        serializer = UserStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = self.services.account_service.set_active(
            pk, serializer.validated_data['is_active'], actor=request.user)
        return Response(UserSerializer(user).data, status=status.HTTP_200_OK)
