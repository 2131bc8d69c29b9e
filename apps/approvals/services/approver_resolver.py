"""Approver resolution logic for approval steps"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from django.conf import settings

from apps.approvals.definitions import (
    APPROVER_AMOUNT,
    APPROVER_ROLE,
    APPROVER_USER,
    StepDefinition,
    parse_decimal,
)
from apps.approvals.exceptions import InvalidConfiguration, NotFound

DEFAULT_ELEVATED_ROLES = ('admin', 'ceo', 'cfo')


@dataclass(frozen=True)
class ResolvedApprover:
    user_id: str
    name: str
    email: str

    @classmethod
    def from_user(cls, user) -> 'ResolvedApprover':
        return cls(user_id=str(user.id), name=user.get_full_name(), email=user.email)


class ApproverResolver:
    """Determine the users responsible for a workflow step."""

    def __init__(self, user_directory, elevated_roles=None):
        self.user_directory = user_directory
        self._elevated_roles = tuple(elevated_roles) if elevated_roles else None

    @property
    def elevated_roles(self):
        if self._elevated_roles:
            return self._elevated_roles
        return tuple(getattr(settings, 'APPROVAL_ELEVATED_ROLES', None) or DEFAULT_ELEVATED_ROLES)

    def resolve(
        self,
        *,
        step: StepDefinition,
        organization_id,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> List[ResolvedApprover]:
        handler = {
            APPROVER_USER: self._specific_user,
            APPROVER_ROLE: self._role_based,
            APPROVER_AMOUNT: self._amount_based,
        }.get(step.approver_type)
        if not handler:
            raise InvalidConfiguration(f"Unsupported approver type: {step.approver_type}")
        users = handler(step=step, organization_id=organization_id, metadata=metadata or {})

        approvers, seen = [], set()
        for user in users:
            if user.id in seen:
                continue
            seen.add(user.id)
            approvers.append(ResolvedApprover.from_user(user))
        return approvers

    def _specific_user(self, step, organization_id, **_):
        if not step.approver_id:
            raise InvalidConfiguration(f"Step '{step.id}' requires approver_id for user approval")
        user = self.user_directory.find_user_by_id(organization_id, step.approver_id)
        if user is None:
            raise NotFound('User', step.approver_id)
        return [user]

    def _role_based(self, step, organization_id, **_):
        if not step.role:
            raise InvalidConfiguration(f"Step '{step.id}' requires role for role approval")
        return self.user_directory.find_users_by_role(organization_id, [step.role])

    def _amount_based(self, step, organization_id, metadata, **_):
        if step.amount_threshold is None:
            raise InvalidConfiguration(f"Step '{step.id}' requires amount_threshold for amount based approval")
        amount = parse_decimal(metadata.get('amount'), 'metadata.amount')
        if amount is None:
            raise InvalidConfiguration(f"Step '{step.id}' requires metadata.amount for amount based approval")
        if amount <= step.amount_threshold:
            return []
        return self.user_directory.find_users_by_role(organization_id, list(self.elevated_roles))
