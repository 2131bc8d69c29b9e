"""Notification permissions"""
from __future__ import annotations

from rest_framework.permissions import BasePermission

from apps.core.tenant_guards import resolve_request_organization


class NotificationsTenantPermission(BasePermission):
    """Ensures request is scoped to an organization."""
    message = 'Organization context required for notification operations.'

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        return resolve_request_organization(request) is not None

    def has_object_permission(self, request, view, obj):
        organization = resolve_request_organization(request)
        if not organization:
            return False
        return obj.organization_id == organization.id and obj.recipient_id == request.user.id
