"""Write approval verdicts back onto the approved business documents"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Dict

from django.apps import apps

logger = logging.getLogger(__name__)

APPROVED = 'approved'
REJECTED = 'rejected'
VERDICTS = (APPROVED, REJECTED)


@dataclass(frozen=True)
class ModelStatusHandler:
    """Sets ``status`` on a tenant-scoped model row according to the verdict."""

    app_label: str
    model: str
    approved_status: str
    rejected_status: str
    field: str = 'status'

    def __call__(self, *, entity_id, verdict, organization_id) -> bool:
        try:
            pk = uuid.UUID(str(entity_id))
        except (TypeError, ValueError):
            logger.warning("Entity id %s is not a valid %s key", entity_id, self.model)
            return False
        ModelClass = apps.get_model(self.app_label, self.model)
        new_status = self.approved_status if verdict == APPROVED else self.rejected_status
        updated = ModelClass.objects.filter(id=pk, organization_id=organization_id).update(**{self.field: new_status})
        if not updated:
            logger.warning(
                "No %s.%s row %s in organization %s to mark %s",
                self.app_label, self.model, entity_id, organization_id, new_status,
            )
        return bool(updated)


class EntityStatusRegistry:
    """Maps entity types to status handlers; unknown types are ignored."""

    def __init__(self, handlers=None):
        self._handlers: Dict[str, object] = dict(handlers or {})

    def register(self, entity_type, handler):
        self._handlers[entity_type] = handler

    def unregister(self, entity_type):
        self._handlers.pop(entity_type, None)

    def handler_for(self, entity_type):
        return self._handlers.get(entity_type)

    def update(self, entity_type, entity_id, verdict, *, organization_id) -> bool:
        if verdict not in VERDICTS:
            raise ValueError(f"Unknown approval verdict: {verdict}")
        handler = self.handler_for(entity_type)
        if handler is None:
            logger.info("No status handler registered for %s; %s left untouched", entity_type, entity_id)
            return False
        return handler(entity_id=entity_id, verdict=verdict, organization_id=organization_id)


def build_default_registry() -> EntityStatusRegistry:
    return EntityStatusRegistry({
        'journal_entry': ModelStatusHandler('accounting', 'JournalEntry', 'POSTED', 'DRAFT'),
        'invoice': ModelStatusHandler('accounting', 'Invoice', 'APPROVED', 'DRAFT'),
        'purchase_order': ModelStatusHandler('accounting', 'PurchaseOrder', 'approved', 'draft'),
    })


default_registry = build_default_registry()
