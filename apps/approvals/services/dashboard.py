"""Approval dashboard aggregates"""
from __future__ import annotations

from decimal import Decimal

from django.db.models import Count

from apps.approvals.models import ApprovalRequest

PROCESSING_SAMPLE_SIZE = 500
RECENT_LIMIT = 10


class ApprovalDashboardService:
    """Summary numbers for the approvals dashboard of one organization."""

    @classmethod
    def summary(cls, organization, company=None, date_from=None, date_to=None):
        queryset = ApprovalRequest.objects.filter(organization_id=getattr(organization, 'pk', organization))
        if company:
            queryset = queryset.filter(company_id=getattr(company, 'pk', company))
        if date_from:
            queryset = queryset.filter(requested_at__date__gte=date_from)
        if date_to:
            queryset = queryset.filter(requested_at__date__lte=date_to)

        by_status = dict(queryset.values_list('status').annotate(total=Count('id')).order_by())
        approved = by_status.get(ApprovalRequest.STATUS_APPROVED, 0)
        rejected = by_status.get(ApprovalRequest.STATUS_REJECTED, 0)
        decided = approved + rejected

        return {
            'total': sum(by_status.values()),
            'pending': by_status.get(ApprovalRequest.STATUS_PENDING, 0),
            'approved': approved,
            'rejected': rejected,
            'approval_rate': round(approved * 100 / decided, 2) if decided else 0,
            'average_processing_hours': cls._average_processing_hours(queryset),
            'by_entity_type': {
                row['entity_type']: row['total']
                for row in queryset.values('entity_type').annotate(total=Count('id')).order_by('entity_type')
            },
            'recent': list(
                queryset.select_related('requested_by').order_by('-requested_at')[:RECENT_LIMIT]
            ),
        }

    @staticmethod
    def _average_processing_hours(queryset):
        durations = []
        finished = queryset.exclude(status=ApprovalRequest.STATUS_PENDING).values_list(
            'requested_at', 'approved_at', 'rejected_at'
        ).order_by('-requested_at')[:PROCESSING_SAMPLE_SIZE]
        for requested_at, approved_at, rejected_at in finished:
            decided_at = approved_at or rejected_at
            if decided_at and requested_at:
                durations.append(Decimal((decided_at - requested_at).total_seconds()) / Decimal(3600))
        if not durations:
            return 0
        return float(round(sum(durations) / len(durations), 2))
