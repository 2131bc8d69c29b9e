"""
Core Admin - tenants and companies
"""

from django.contrib import admin

from .admin_mixins import OrganizationAwareAdminMixin
from .models import Company, Organization


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'currency', 'is_active', 'created_at']
    list_filter = ['is_active', 'currency']
    search_fields = ['name', 'email']
    readonly_fields = ['id', 'created_at', 'updated_at']

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        if request.user.is_superuser:
            return qs
        org = request.user.get_organization()
        return qs.filter(id=org.id) if org else qs.none()


@admin.register(Company)
class CompanyAdmin(OrganizationAwareAdminMixin, admin.ModelAdmin):
    list_display = ['name', 'code', 'organization', 'base_currency', 'is_active']
    list_filter = ['organization', 'is_active']
    search_fields = ['name', 'code']
