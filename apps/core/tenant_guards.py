"""
Organization Safety Guards - Prevent cross-organization data leakage
"""

from rest_framework.exceptions import PermissionDenied

from .context import get_current_organization, set_current_organization


def resolve_request_organization(request):
    """
    Organization for an API request.

    Order: middleware/JWT-bound ``request.organization``, then the context var,
    then the authenticated user's own organization. The result is cached on
    the request and pushed into the context for the rest of the call.
    """
    org = getattr(request, 'organization', None) or get_current_organization()
    if org is None:
        user = getattr(request, 'user', None)
        if user is not None and getattr(user, 'is_authenticated', False):
            getter = getattr(user, 'get_organization', None)
            org = getter() if callable(getter) else None
    if org is not None:
        request.organization = org
        set_current_organization(org)
    return org


class OrganizationViewSetMixin:
    """
    ViewSet safety net for organization filtering.
    FAIL-CLOSED: returns empty queryset when no organization context.
    """

    def get_queryset(self):
        queryset = super().get_queryset()

        org = resolve_request_organization(self.request)

        if not org:
            # FAIL-CLOSED: no organization context → no data
            return queryset.none()

        if hasattr(queryset.model, 'organization_id'):
            queryset = queryset.filter(organization_id=org.id)

        return queryset


def validate_organization_access(obj, request=None):
    """
    Validate object belongs to current organization.
    FAIL-CLOSED: denies access when no org context is available.
    """
    org = resolve_request_organization(request) if request is not None else get_current_organization()
    if not org:
        raise PermissionDenied(
            "Access denied: no organization context available"
        )

    if hasattr(obj, 'organization_id') and obj.organization_id != org.id:
        raise PermissionDenied(
            "Access denied: resource belongs to different organization"
        )

    return True
