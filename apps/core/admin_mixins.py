"""
Admin Mixins for Multi-Tenancy Support
"""


class OrganizationAwareAdminMixin:
    """
    Mixin for ModelAdmin classes to implement organization-level data isolation.

    Usage:
        class MyModelAdmin(OrganizationAwareAdminMixin, admin.ModelAdmin):
            pass
    """

    def _user_organization(self, request):
        if request.user.is_superuser:
            return None
        return request.user.get_organization()

    def get_queryset(self, request):
        """Filter queryset based on user's organization"""
        qs = super().get_queryset(request)

        # Superusers see everything
        if request.user.is_superuser:
            return qs

        user_org = self._user_organization(request)
        if not user_org:
            return qs.none()

        if hasattr(self.model, 'organization'):
            return qs.filter(organization=user_org)

        return qs

    def formfield_for_foreignkey(self, db_field, request, **kwargs):
        """Limit related choices to user's organization"""
        user_org = self._user_organization(request)
        if user_org is not None:
            related = db_field.related_model
            if db_field.name == "organization":
                kwargs["queryset"] = related.objects.filter(id=user_org.id)
            elif hasattr(related, 'organization_id'):
                kwargs["queryset"] = related.objects.filter(organization_id=user_org.id)

        return super().formfield_for_foreignkey(db_field, request, **kwargs)

    def has_change_permission(self, request, obj=None):
        if not super().has_change_permission(request, obj):
            return False
        if obj is None or request.user.is_superuser:
            return True
        return getattr(obj, 'organization_id', None) == getattr(self._user_organization(request), 'id', None)

    def save_model(self, request, obj, form, change):
        user_org = self._user_organization(request)
        if user_org is not None and hasattr(obj, 'organization_id'):
            obj.organization = user_org

        if hasattr(obj, "created_by") and not obj.created_by_id:
            obj.created_by = request.user
        if hasattr(obj, "updated_by"):
            obj.updated_by = request.user

        super().save_model(request, obj, form, change)
