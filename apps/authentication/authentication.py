"""
Custom JWT Authentication with Tenant Validation
SECURITY: Validates organization_id claim in JWT matches request organization
"""

import logging
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework.exceptions import AuthenticationFailed
from django.utils.translation import gettext_lazy as _

from apps.core.context import set_current_organization, set_current_user

logger = logging.getLogger(__name__)


class OrganizationAwareJWTAuthentication(JWTAuthentication):
    """
    - JWT must be tenant-bound
    - Token org must match the user's org and any request org
    """

    def authenticate(self, request):
        result = super().authenticate(request)

        if result is None:
            return None

        user, token = result

        self._validate_org_binding(request, user, token)
        set_current_user(user)

        return user, token

    def _validate_org_binding(self, request, user, token):
        token_org_id = token.get('organization_id')

        # Token MUST contain org for non-superusers
        if not token_org_id:
            if user.is_superuser:
                return
            logger.error("JWT rejected: missing organization_id claim")
            raise AuthenticationFailed(_('Organization binding missing in token'))

        if str(user.organization_id) != str(token_org_id):
            logger.error(
                "SECURITY VIOLATION: token organization does not match user",
                extra={'user': user.email, 'token_org': token_org_id},
            )
            raise AuthenticationFailed(_('Your credentials do not belong to this organization'))

        request_org = getattr(request, 'organization', None)
        if request_org is not None:
            if str(request_org.id) != str(token_org_id):
                logger.error(
                    "SECURITY VIOLATION: Cross-tenant token usage",
                    extra={
                        'user': user.email,
                        'token_org': token_org_id,
                        'request_org': str(request_org.id),
                    }
                )
                raise AuthenticationFailed(
                    _('Your credentials do not belong to this organization')
                )
            return

        from apps.core.models import Organization

        org = Organization.objects.filter(id=token_org_id, is_active=True).first()
        if org is None:
            raise AuthenticationFailed(_('Invalid organization in token'))
        request.organization = org
        set_current_organization(org)
