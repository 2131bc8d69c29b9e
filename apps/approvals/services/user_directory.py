"""User lookups used by approver resolution and escalation"""
import uuid

from django.contrib.auth import get_user_model


class DjangoUserDirectory:
    """Tenant-scoped lookups over active users of the auth user model."""

    def _users(self, organization_id):
        return get_user_model().objects.active_in_organization(organization_id)

    def find_user_by_id(self, organization_id, user_id):
        try:
            user_uuid = uuid.UUID(str(user_id))
        except (TypeError, ValueError, AttributeError):
            return None
        return self._users(organization_id).filter(id=user_uuid).first()

    def find_users_by_role(self, organization_id, roles):
        if isinstance(roles, str):
            roles = [roles]
        return list(self._users(organization_id).filter(role__in=list(roles)).order_by('email'))
