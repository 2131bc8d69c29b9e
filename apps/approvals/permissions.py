"""Approval permissions"""
from __future__ import annotations

from rest_framework import permissions
from rest_framework.permissions import BasePermission

from apps.core.tenant_guards import resolve_request_organization


class ApprovalsTenantPermission(BasePermission):
    """Ensures request is scoped to an organization."""
    message = 'Organization context required for approval operations.'

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        return resolve_request_organization(request) is not None

    def has_object_permission(self, request, view, obj):
        organization = resolve_request_organization(request)
        if not organization:
            return False
        return obj.organization_id == organization.id


class IsApprovalAdminOrReadOnly(BasePermission):
    """Allow read for authenticated users, workflow changes only for org admins/superusers."""
    message = 'Only organization admins can manage approval workflows.'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return can_manage_approvals(request.user)


def can_manage_approvals(user) -> bool:
    return bool(user.is_superuser or getattr(user, 'is_org_admin', False))


def can_act_for_assignee(user, assignee) -> bool:
    """Only the assigned user acts on an assignee row, unless the caller administers approvals."""
    return assignee.user_id == user.id or can_manage_approvals(user)
