"""
Views for the current user's notifications and notification settings.

Endpoints (under /api/v1/notifications/):
- GET    /                  - List (?unread_only=true&page=&limit=)
- GET    /unread-count/     - Number of unread notifications
- POST   /{id}/read/        - Mark one as read
- POST   /read-all/         - Mark all as read
- DELETE /{id}/             - Delete one
- GET|PATCH /preferences/   - Channel switches and subscribed categories
- GET|PUT   /subscriptions/ - Subscribed categories
- POST   /broadcast/        - Staff announcement to a category's subscribers
"""

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from core.container import ServiceMixin
from core.logging.structured import log_business_event
from core.permissions import IsStaffOrAdmin
from .serializers import (
    BroadcastSerializer,
    NotificationPreferenceSerializer,
    NotificationSerializer,
    SubscriptionSerializer,
)


class NotificationViewSet(ServiceMixin, viewsets.GenericViewSet):
    serializer_class = NotificationSerializer
    permission_classes = [IsAuthenticated]

    @property
    def dispatcher(self):
        return self.services.dispatcher

    @extend_schema(parameters=[
        OpenApiParameter('unread_only', bool),
        OpenApiParameter('page', int),
        OpenApiParameter('limit', int),
    ])
    def list(self, request):
        params = request.query_params
        result = self.dispatcher.list_for_user(
            request.user,
            page=params.get('page', 1),
            limit=params.get('limit', 20),
            unread_only=params.get('unread_only') == 'true',
        )
        return Response({
            'items': NotificationSerializer(result['items'], many=True).data,
            'unread_count': result['unread_count'],
            'pagination': result['pagination'],
        })

    def destroy(self, request, pk=None):
        self.dispatcher.delete(pk, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=['get'], url_path='unread-count')
    def unread_count(self, request):
        return Response({'unread_count': self.dispatcher.unread_count(request.user)})

    @extend_schema(request=None)
    @action(detail=True, methods=['post', 'put'])
    def read(self, request, pk=None):
        notification = self.dispatcher.mark_as_read(pk, request.user)
        return Response(NotificationSerializer(notification).data)

    @extend_schema(request=None)
    @action(detail=False, methods=['post', 'put'], url_path='read-all')
    def read_all(self, request):
        updated = self.dispatcher.mark_all_as_read(request.user)
        return Response({'updated': updated})

    @extend_schema(request=NotificationPreferenceSerializer)
    @action(detail=False, methods=['get', 'patch'])
    def preferences(self, request):
        preference_service = self.services.preferences
        if request.method == 'GET':
            return Response(preference_service.get_preferences(request.user))

        serializer = NotificationPreferenceSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        return Response(
            preference_service.update_preferences(request.user, **serializer.validated_data))

    @extend_schema(request=SubscriptionSerializer, responses=SubscriptionSerializer)
    @action(detail=False, methods=['get', 'put'])
    def subscriptions(self, request):
        preference_service = self.services.preferences
        if request.method == 'GET':
            return Response({'categories': preference_service.get_subscriptions(request.user)})

        serializer = SubscriptionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        categories = preference_service.set_subscriptions(
            request.user, serializer.validated_data['categories'])
        return Response({'categories': categories})

    @extend_schema(request=BroadcastSerializer)
    @action(detail=False, methods=['post'], permission_classes=[IsAuthenticated, IsStaffOrAdmin])
    def broadcast(self, request):
        from .services.dispatcher import NotificationData

        serializer = BroadcastSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        sent = self.dispatcher.notify_subscribers(data['category'], NotificationData(
            type=data['type'],
            title=data['title'],
            message=data['message'],
            url=data['url'],
            priority=data['priority'],
            metadata={'sender_id': str(request.user.id)},
        ))

        log_business_event('notification_broadcast', user=request.user, details={
            'category': data['category'],
            'recipients': len(sent),
        })
        return Response({'sent': len(sent)}, status=status.HTTP_202_ACCEPTED)
