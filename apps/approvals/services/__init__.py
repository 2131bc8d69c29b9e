"""Approval service layer exports"""
from .approval_engine import ApprovalEngine, ACTIONS
from .approver_resolver import ApproverResolver, ResolvedApprover
from .conditions import ConditionEvaluator
from .dashboard import ApprovalDashboardService
from .entity_status import EntityStatusRegistry, ModelStatusHandler, default_registry
from .escalation import EscalationReminderService
from .notifier import ApprovalNotifier, NotificationServiceNotifier
from .user_directory import DjangoUserDirectory

__all__ = [
    'ApprovalEngine',
    'ACTIONS',
    'ApproverResolver',
    'ResolvedApprover',
    'ConditionEvaluator',
    'ApprovalDashboardService',
    'EntityStatusRegistry',
    'ModelStatusHandler',
    'default_registry',
    'EscalationReminderService',
    'ApprovalNotifier',
    'NotificationServiceNotifier',
    'DjangoUserDirectory',
]
