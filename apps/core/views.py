"""
Core ViewSets
"""

from rest_framework import filters, permissions, viewsets
from rest_framework.exceptions import PermissionDenied
from django_filters.rest_framework import DjangoFilterBackend

from .models import Company
from .serializers import CompanySerializer
from .tenant_guards import OrganizationViewSetMixin, resolve_request_organization


class IsOrgAdminOrReadOnly(permissions.BasePermission):
    """Read for any member, write for org admins and superusers."""

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return bool(user.is_superuser or getattr(user, 'is_org_admin', False))


class CompanyViewSet(OrganizationViewSetMixin, viewsets.ModelViewSet):
    queryset = Company.objects.all()
    serializer_class = CompanySerializer
    permission_classes = [permissions.IsAuthenticated, IsOrgAdminOrReadOnly]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['is_active', 'base_currency']
    search_fields = ['name', 'code']
    ordering_fields = ['name', 'code', 'created_at']
    ordering = ['name']

    def perform_create(self, serializer):
        organization = resolve_request_organization(self.request)
        if organization is None:
            raise PermissionDenied("Organization context required")
        serializer.save(
            organization=organization,
            created_by=self.request.user,
        )

    def perform_update(self, serializer):
        serializer.save(updated_by=self.request.user)

    def perform_destroy(self, instance):
        instance.delete(deleted_by=self.request.user)
