"""
Base Celery Tasks
SECURITY: Enforces tenant isolation for background jobs
"""

import logging

from apps.core.context import organization_context
from apps.core.models import Organization

logger = logging.getLogger(__name__)


class TenantTaskError(Exception):
    pass


class TenantAwareTask:
    """
    Base mixin for tenant-safe Celery tasks
    """

    @staticmethod
    def get_organization(organization_id):
        if not organization_id:
            raise TenantTaskError("organization_id is required")

        try:
            return Organization.objects.get(id=organization_id, is_active=True)
        except (Organization.DoesNotExist, ValueError):
            raise TenantTaskError(f"Invalid organization_id: {organization_id}")

    @staticmethod
    def for_each_organization(callback):
        """Run ``callback(organization)`` once per active tenant with its context set."""
        results = {}
        for organization in Organization.objects.filter(is_active=True).order_by('id'):
            with organization_context(organization):
                try:
                    results[str(organization.id)] = callback(organization)
                except Exception:
                    logger.exception("Tenant task failed for organization %s", organization.id)
                    results[str(organization.id)] = None
        return results
