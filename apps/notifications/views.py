"""Notification inbox API"""

from rest_framework import filters, mixins, permissions, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from apps.core.tenant_guards import OrganizationViewSetMixin

from .filters import NotificationFilter
from .models import Notification
from .permissions import NotificationsTenantPermission
from .serializers import NotificationSerializer
from .services import NotificationService


class NotificationViewSet(OrganizationViewSetMixin, mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    queryset = Notification.objects.select_related('recipient')
    serializer_class = NotificationSerializer
    permission_classes = [permissions.IsAuthenticated, NotificationsTenantPermission]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = NotificationFilter
    search_fields = ['subject', 'body']
    ordering_fields = ['status', 'priority', 'created_at']
    ordering = ['-created_at']

    def get_queryset(self):
        return super().get_queryset().filter(recipient=self.request.user)

    @action(detail=True, methods=['post'], url_path='read')
    def mark_read(self, request, pk=None):
        if not NotificationService.mark_as_read(pk, request.user):
            raise NotFound('Notification not found.')
        return Response({'status': 'read'})

    @action(detail=False, methods=['post'], url_path='read-all')
    def mark_all_read(self, request):
        return Response({'updated': NotificationService.mark_all_as_read(request.user)})

    @action(detail=False, methods=['get'], url_path='unread-count')
    def unread_count(self, request):
        return Response({'unread_count': NotificationService.unread_count(request.user)})
