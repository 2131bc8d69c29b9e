"""
Tenant-aware DRF throttle classes.

Rates are controlled from `REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"]`.
"""

from __future__ import annotations

import hashlib
from typing import Optional

from rest_framework.request import Request
from rest_framework.throttling import SimpleRateThrottle


def client_ip(request: Request) -> str:
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
    return forwarded.split(",")[0].strip() or request.META.get("REMOTE_ADDR", "unknown")


def _digest(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:16]


class TenantScopedThrottle(SimpleRateThrottle):
    """Base class building `throttle:<scope>:<parts>` cache keys."""

    def key(self, *parts) -> str:
        return ":".join(["throttle", self.scope, *[str(part) for part in parts]])

    @staticmethod
    def authenticated_user(request: Request):
        user = getattr(request, "user", None)
        if user is not None and user.is_authenticated:
            return user
        return None


class OrganizationRateThrottle(TenantScopedThrottle):
    """One shared budget per tenant."""
    scope = "organization"

    def get_cache_key(self, request: Request, view=None) -> Optional[str]:
        user = self.authenticated_user(request)
        if user is not None and user.organization_id:
            return self.key(user.organization_id)
        return self.key("ip", client_ip(request))


class OrganizationUserRateThrottle(TenantScopedThrottle):
    scope = "org_user"

    def get_cache_key(self, request: Request, view=None) -> Optional[str]:
        user = self.authenticated_user(request)
        if user is None:
            return None
        return self.key(user.organization_id or "global", user.id)


class BurstRateThrottle(TenantScopedThrottle):
    scope = "burst"

    def get_cache_key(self, request: Request, view=None) -> str:
        user = self.authenticated_user(request)
        if user is not None:
            return self.key("user", user.id)
        return self.key("ip", client_ip(request))


class ApprovalActionRateThrottle(TenantScopedThrottle):
    """Caps approve/reject/escalate calls per approver."""
    scope = "approval_action"

    def get_cache_key(self, request: Request, view=None) -> Optional[str]:
        user = self.authenticated_user(request)
        if user is None:
            return None
        return self.key(user.organization_id or "global", user.id)


class LoginRateThrottle(TenantScopedThrottle):
    scope = "login"

    def get_cache_key(self, request: Request, view=None) -> str:
        email = str(request.data.get("email", "")).strip().lower()
        return self.key(client_ip(request), _digest(email) if email else "no-email")
