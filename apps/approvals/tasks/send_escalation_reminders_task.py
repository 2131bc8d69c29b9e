"""Celery task to remind escalation targets about stalled approval steps"""
from __future__ import annotations

from celery import shared_task

from apps.approvals.services import ApprovalEngine, EscalationReminderService
from apps.core.celery_tasks import TenantAwareTask


@shared_task(bind=True, name='approvals.send_escalation_reminders')
def send_escalation_reminders_task(self, organization_id: str | None = None):
    """Send escalation-due notifications; runs for one tenant or all active tenants."""
    service = EscalationReminderService(ApprovalEngine())
    if organization_id:
        organization = TenantAwareTask.get_organization(organization_id)
        return {str(organization.id): service.send_reminders(organization)}
    return TenantAwareTask.for_each_organization(service.send_reminders)
