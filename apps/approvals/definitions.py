"""Typed workflow configuration and its JSON codec.

Workflow ``steps``, ``conditions`` and ``escalation_rules`` are persisted as
JSON documents but only ever read and written through the dataclasses below.
Decoding validates the document and raises ``InvalidConfiguration``; encoding
emits snake_case keys and decimal strings so a decode/encode cycle is stable.
Decoding also accepts the camelCase keys used by older API clients.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional, Tuple

from apps.approvals.exceptions import InvalidConfiguration

APPROVER_USER = 'user'
APPROVER_ROLE = 'role'
APPROVER_AMOUNT = 'amount_based'
APPROVER_TYPES = (APPROVER_USER, APPROVER_ROLE, APPROVER_AMOUNT)

CONDITION_OPERATORS = ('equals', 'not_equals', 'greater_than', 'less_than', 'contains', 'in')
LOGICAL_OPERATORS = ('AND', 'OR')

ESCALATE_TO_SPECIFIC_USER = 'specific_user'
ESCALATION_TARGETS = ('manager', 'director', 'ceo', ESCALATE_TO_SPECIFIC_USER)
NOTIFICATION_CHANNELS = ('email', 'sms', 'slack', 'teams')

ENTITY_TYPES = (
    'journal_entry',
    'invoice',
    'purchase_order',
    'expense',
    'bill',
    'document',
    'recurring_invoice',
)
ENTITY_TYPE_CHOICES = tuple((key, key.replace('_', ' ').title()) for key in ENTITY_TYPES)

PRIORITY_RANK = {'low': 0, 'medium': 1, 'high': 2, 'critical': 3}
PRIORITY_CHOICES = tuple((key, key.title()) for key in PRIORITY_RANK)


def _pick(data: Dict[str, Any], key: str, alias: Optional[str] = None, default: Any = None) -> Any:
    if key in data:
        return data[key]
    if alias and alias in data:
        return data[alias]
    return default


def _require_mapping(data: Any, label: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise InvalidConfiguration(f"{label} must be an object")
    return data


def _require_list(data: Any, label: str) -> List[Any]:
    if data is None:
        return []
    if not isinstance(data, (list, tuple)):
        raise InvalidConfiguration(f"{label} must be a list")
    return list(data)


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def parse_decimal(value: Any, label: str) -> Optional[Decimal]:
    """Parse a JSON number or numeric string; ``None`` stays ``None``."""
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        raise InvalidConfiguration(f"{label} must be numeric")
    try:
        parsed = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidConfiguration(f"{label} must be numeric")
    if not parsed.is_finite():
        raise InvalidConfiguration(f"{label} must be finite")
    return parsed


def _positive_int(value: Any, label: str) -> Optional[int]:
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        raise InvalidConfiguration(f"{label} must be a positive integer")
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise InvalidConfiguration(f"{label} must be a positive integer")
    if parsed < 1 or parsed != Decimal(str(value)):
        raise InvalidConfiguration(f"{label} must be a positive integer")
    return parsed


@dataclass(frozen=True)
class WorkflowCondition:
    field: str
    operator: str
    value: Any
    logical_operator: str = 'AND'

    @classmethod
    def from_dict(cls, data: Any) -> 'WorkflowCondition':
        data = _require_mapping(data, 'Condition')
        field_name = _text(data.get('field'))
        if not field_name:
            raise InvalidConfiguration('Condition field is required')
        operator = data.get('operator')
        if operator not in CONDITION_OPERATORS:
            raise InvalidConfiguration(f"Unsupported condition operator: {operator}")
        if 'value' not in data:
            raise InvalidConfiguration(f"Condition on '{field_name}' requires a value")
        value = data['value']
        if operator == 'in' and not isinstance(value, (list, tuple)):
            raise InvalidConfiguration(f"Condition on '{field_name}' with 'in' requires a list value")
        logical = (_pick(data, 'logical_operator', 'logicalOperator') or 'AND').upper()
        if logical not in LOGICAL_OPERATORS:
            raise InvalidConfiguration(f"Unsupported logical operator: {logical}")
        if isinstance(value, tuple):
            value = list(value)
        return cls(field=field_name, operator=operator, value=value, logical_operator=logical)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'field': self.field,
            'operator': self.operator,
            'value': self.value,
            'logical_operator': self.logical_operator,
        }


@dataclass(frozen=True)
class StepDefinition:
    id: str
    name: str
    order: int
    approver_type: str
    approver_id: Optional[str] = None
    role: Optional[str] = None
    amount_threshold: Optional[Decimal] = None
    auto_approve: bool = False
    escalation_hours: Optional[int] = None
    conditions: Tuple[WorkflowCondition, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Any) -> 'StepDefinition':
        data = _require_mapping(data, 'Step')
        step_id = _text(data.get('id'))
        if not step_id:
            raise InvalidConfiguration('Step id is required')
        name = _text(data.get('name'))
        if not name:
            raise InvalidConfiguration(f"Step '{step_id}' requires a name")
        order = _positive_int(data.get('order'), f"Step '{step_id}' order")
        if order is None:
            raise InvalidConfiguration(f"Step '{step_id}' requires an order")
        approver_type = _pick(data, 'approver_type', 'approverType')
        if approver_type not in APPROVER_TYPES:
            raise InvalidConfiguration(f"Unsupported approver type: {approver_type}")

        step = cls(
            id=step_id,
            name=name,
            order=order,
            approver_type=approver_type,
            approver_id=_text(_pick(data, 'approver_id', 'approverId')),
            role=_text(data.get('role')),
            amount_threshold=parse_decimal(
                _pick(data, 'amount_threshold', 'amountThreshold'), f"Step '{step_id}' amount threshold"
            ),
            auto_approve=bool(_pick(data, 'auto_approve', 'autoApprove', False)),
            escalation_hours=_positive_int(
                _pick(data, 'escalation_hours', 'escalationHours'), f"Step '{step_id}' escalation hours"
            ),
            conditions=decode_conditions(data.get('conditions')),
        )
        step.validate()
        return step

    def validate(self) -> None:
        if self.approver_type == APPROVER_USER and not self.approver_id:
            raise InvalidConfiguration(f"Step '{self.id}' requires approver_id for user approval")
        if self.approver_type == APPROVER_ROLE and not self.role:
            raise InvalidConfiguration(f"Step '{self.id}' requires role for role approval")
        if self.approver_type == APPROVER_AMOUNT and self.amount_threshold is None:
            raise InvalidConfiguration(f"Step '{self.id}' requires amount_threshold for amount based approval")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'order': self.order,
            'approver_type': self.approver_type,
            'approver_id': self.approver_id,
            'role': self.role,
            'amount_threshold': str(self.amount_threshold) if self.amount_threshold is not None else None,
            'auto_approve': self.auto_approve,
            'escalation_hours': self.escalation_hours,
            'conditions': encode_conditions(self.conditions),
        }


@dataclass(frozen=True)
class EscalationRule:
    step_id: str
    escalate_to: str
    escalation_hours: Optional[int] = None
    escalate_to_user_id: Optional[str] = None
    notification_channels: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Any) -> 'EscalationRule':
        data = _require_mapping(data, 'Escalation rule')
        step_id = _text(_pick(data, 'step_id', 'stepId'))
        if not step_id:
            raise InvalidConfiguration('Escalation rule step_id is required')
        escalate_to = _pick(data, 'escalate_to', 'escalateTo')
        if escalate_to not in ESCALATION_TARGETS:
            raise InvalidConfiguration(f"Unsupported escalation target: {escalate_to}")
        user_id = _text(_pick(data, 'escalate_to_user_id', 'escalateToUserId'))
        if escalate_to == ESCALATE_TO_SPECIFIC_USER and not user_id:
            raise InvalidConfiguration(f"Escalation rule for step '{step_id}' requires escalate_to_user_id")
        channels = tuple(_require_list(_pick(data, 'notification_channels', 'notificationChannels'), 'notification_channels'))
        unknown = [channel for channel in channels if channel not in NOTIFICATION_CHANNELS]
        if unknown:
            raise InvalidConfiguration(f"Unsupported notification channels: {', '.join(map(str, unknown))}")
        return cls(
            step_id=step_id,
            escalate_to=escalate_to,
            escalation_hours=_positive_int(
                _pick(data, 'escalation_hours', 'escalationHours'), f"Escalation rule '{step_id}' escalation hours"
            ),
            escalate_to_user_id=user_id if escalate_to == ESCALATE_TO_SPECIFIC_USER else None,
            notification_channels=channels,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'step_id': self.step_id,
            'escalate_to': self.escalate_to,
            'escalation_hours': self.escalation_hours,
            'escalate_to_user_id': self.escalate_to_user_id,
            'notification_channels': list(self.notification_channels),
        }


# ---------------------------------------------------------------------- codec
def decode_conditions(raw: Any) -> Tuple[WorkflowCondition, ...]:
    return tuple(WorkflowCondition.from_dict(item) for item in _require_list(raw, 'conditions'))


def encode_conditions(conditions: Iterable[WorkflowCondition]) -> List[Dict[str, Any]]:
    return [condition.to_dict() for condition in conditions]


def decode_steps(raw: Any) -> Tuple[StepDefinition, ...]:
    """Decode and validate the ordered step list (sorted by ``order``)."""
    items = _require_list(raw, 'steps')
    if not items:
        raise InvalidConfiguration('Workflow requires at least one step')
    steps = sorted((StepDefinition.from_dict(item) for item in items), key=lambda step: step.order)

    seen_ids = set()
    for step in steps:
        if step.id in seen_ids:
            raise InvalidConfiguration(f"Duplicate step id: {step.id}")
        seen_ids.add(step.id)

    orders = [step.order for step in steps]
    if len(set(orders)) != len(orders):
        raise InvalidConfiguration('Step order values must be unique')
    if orders[0] != 1:
        raise InvalidConfiguration('Step order must start at 1')
    return tuple(steps)


def encode_steps(steps: Iterable[StepDefinition]) -> List[Dict[str, Any]]:
    return [step.to_dict() for step in sorted(steps, key=lambda step: step.order)]


def decode_escalation_rules(raw: Any, steps: Optional[Iterable[StepDefinition]] = None) -> Tuple[EscalationRule, ...]:
    rules = tuple(EscalationRule.from_dict(item) for item in _require_list(raw, 'escalation_rules'))
    if steps is not None:
        step_ids = {step.id for step in steps}
        for rule in rules:
            if rule.step_id not in step_ids:
                raise InvalidConfiguration(f"Escalation rule references unknown step: {rule.step_id}")
    seen = set()
    for rule in rules:
        if rule.step_id in seen:
            raise InvalidConfiguration(f"Duplicate escalation rule for step: {rule.step_id}")
        seen.add(rule.step_id)
    return rules


def encode_escalation_rules(rules: Iterable[EscalationRule]) -> List[Dict[str, Any]]:
    return [rule.to_dict() for rule in rules]


def normalize_workflow_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Validate a workflow configuration and return model-ready field values."""
    config = _require_mapping(config, 'Workflow configuration')
    name = _text(config.get('name'))
    if not name:
        raise InvalidConfiguration('Workflow name is required')
    entity_type = _pick(config, 'entity_type', 'entityType')
    if entity_type not in ENTITY_TYPES:
        raise InvalidConfiguration(f"Unsupported entity type: {entity_type}")
    priority = config.get('priority') or 'medium'
    if priority not in PRIORITY_RANK:
        raise InvalidConfiguration(f"Unsupported priority: {priority}")

    steps = decode_steps(config.get('steps'))
    conditions = decode_conditions(config.get('conditions'))
    rules = decode_escalation_rules(_pick(config, 'escalation_rules', 'escalationRules'), steps)

    return {
        'name': name,
        'description': config.get('description') or '',
        'entity_type': entity_type,
        'entity_sub_type': _text(_pick(config, 'entity_sub_type', 'entitySubType')) or '',
        'steps': encode_steps(steps),
        'conditions': encode_conditions(conditions),
        'escalation_rules': encode_escalation_rules(rules),
        'auto_approval': bool(_pick(config, 'auto_approval', 'autoApproval', False)),
        'priority': priority,
        'is_active': bool(_pick(config, 'is_active', 'isActive', True)),
    }
