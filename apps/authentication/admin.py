"""
Authentication Admin
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .forms import CustomUserChangeForm, CustomUserCreationForm
from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    add_form = CustomUserCreationForm
    form = CustomUserChangeForm
    list_display = ['email', 'full_name', 'organization_id', 'role', 'is_org_admin', 'is_active', 'last_login']
    list_filter = ['role', 'is_org_admin', 'is_active', 'is_staff', 'is_superuser']
    search_fields = ['email', 'first_name', 'last_name']
    ordering = ['organization_id', 'email']

    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        ('Organization', {'fields': ('organization_id', 'role', 'is_org_admin')}),
        ('Permissions', {'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions')}),
        ('Personal Info', {'fields': ('first_name', 'last_name')}),
        ('Important dates', {'fields': ('last_login', 'date_joined')}),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'first_name', 'last_name', 'organization', 'role',
                       'password1', 'password2', 'is_org_admin', 'is_staff'),
        }),
    )

    readonly_fields = ['last_login', 'date_joined']

    def get_queryset(self, request):
        """
        Superusers see every user; org admins only their own tenant (never superusers).
        """
        qs = super().get_queryset(request)
        if request.user.is_superuser:
            return qs
        if request.user.is_org_admin and request.user.organization_id:
            return qs.filter(organization_id=request.user.organization_id, is_superuser=False)
        return qs.none()

    def get_readonly_fields(self, request, obj=None):
        readonly = list(super().get_readonly_fields(request, obj))
        if not request.user.is_superuser:
            readonly += ['organization_id', 'is_superuser', 'is_org_admin']
        return readonly

    def save_model(self, request, obj, form, change):
        if not request.user.is_superuser and not change:
            obj.organization_id = request.user.organization_id
        super().save_model(request, obj, form, change)
