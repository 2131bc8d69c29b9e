"""Condition evaluation against a request context"""
from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping

from apps.approvals.definitions import WorkflowCondition

logger = logging.getLogger(__name__)

_MISSING = object()


def lookup(context: Mapping[str, Any], path: str) -> Any:
    """Resolve a dotted path (``customer.tier``) inside nested mappings."""
    current: Any = context
    for part in path.split('.'):
        if isinstance(current, Mapping) and part in current:
            current = current[part]
        else:
            return _MISSING
    return current


def _as_decimal(value: Any):
    if isinstance(value, bool) or value is None:
        return None
    try:
        parsed = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return parsed if parsed.is_finite() else None


class ConditionEvaluator:
    """
    Evaluate workflow/step conditions.

    Conditions are folded left to right; each condition's ``logical_operator``
    joins it to the result of the conditions before it. An empty list holds.
    """

    def evaluate(self, conditions: Iterable[WorkflowCondition], context: Mapping[str, Any]) -> bool:
        result = None
        for condition in conditions:
            outcome = self.check(condition, context)
            if result is None:
                result = outcome
            elif condition.logical_operator == 'OR':
                result = result or outcome
            else:
                result = result and outcome
        return True if result is None else result

    def check(self, condition: WorkflowCondition, context: Mapping[str, Any]) -> bool:
        actual = lookup(context, condition.field)
        if actual is _MISSING:
            return False
        handler = {
            'equals': self._equals,
            'not_equals': lambda a, e: not self._equals(a, e),
            'greater_than': lambda a, e: self._compare(a, e, 1),
            'less_than': lambda a, e: self._compare(a, e, -1),
            'contains': self._contains,
            'in': self._in,
        }.get(condition.operator)
        if handler is None:
            logger.warning("Unsupported condition operator %s on %s", condition.operator, condition.field)
            return False
        return handler(actual, condition.value)

    @staticmethod
    def _equals(actual, expected) -> bool:
        left, right = _as_decimal(actual), _as_decimal(expected)
        if left is not None and right is not None:
            return left == right
        return actual == expected

    @staticmethod
    def _compare(actual, expected, sign) -> bool:
        left, right = _as_decimal(actual), _as_decimal(expected)
        if left is None or right is None:
            return False
        return left > right if sign > 0 else left < right

    @staticmethod
    def _contains(actual, expected) -> bool:
        if isinstance(actual, str):
            return str(expected) in actual
        if isinstance(actual, (list, tuple, set)):
            return expected in actual
        return False

    @classmethod
    def _in(cls, actual, expected) -> bool:
        if not isinstance(expected, (list, tuple)):
            return False
        return any(cls._equals(actual, candidate) for candidate in expected)
