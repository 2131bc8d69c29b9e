from .context import get_correlation_id, get_current_organization, get_current_user


class CorrelationIdFilter:
    """Stamp every record with the correlation id, tenant and acting user."""

    def filter(self, record):
        record.correlation_id = get_correlation_id() or 'unknown'
        organization = get_current_organization()
        record.organization_id = str(organization.id) if organization else '-'
        user = get_current_user()
        record.user_id = str(user.id) if user is not None and getattr(user, 'is_authenticated', False) else '-'
        return True
