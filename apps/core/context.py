"""
Per-request and per-task context.

Held in contextvars so ASGI workers and Celery tasks see their own tenant,
acting user and correlation id.
"""

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Optional

_organization: ContextVar = ContextVar('current_organization', default=None)
_user: ContextVar = ContextVar('current_user', default=None)
_correlation_id: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)


def get_current_organization():
    return _organization.get()


def set_current_organization(organization) -> None:
    _organization.set(organization)


def get_current_user():
    return _user.get()


def set_current_user(user) -> None:
    _user.set(user)


def get_correlation_id() -> Optional[str]:
    return _correlation_id.get()


def set_correlation_id(correlation_id: Optional[str]) -> None:
    _correlation_id.set(correlation_id)


def new_correlation_id() -> str:
    return uuid.uuid4().hex


@contextmanager
def organization_context(organization):
    """Bind `organization` for the duration of a background job."""
    token = _organization.set(organization)
    try:
        yield organization
    finally:
        _organization.reset(token)


def clear_context() -> None:
    """Reset tenant, user and correlation id once a request is done."""
    _organization.set(None)
    _user.set(None)
    _correlation_id.set(None)
