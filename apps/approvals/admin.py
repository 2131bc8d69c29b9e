from django.contrib import admin
from apps.core.admin_mixins import OrganizationAwareAdminMixin
from .models import ApprovalAssignee, ApprovalAudit, ApprovalRequest, ApprovalWorkflow


@admin.register(ApprovalWorkflow)
class ApprovalWorkflowAdmin(OrganizationAwareAdminMixin, admin.ModelAdmin):
    list_display = ['name', 'company', 'entity_type', 'entity_sub_type', 'priority', 'auto_approval', 'is_active']
    list_filter = ['entity_type', 'priority', 'auto_approval', 'is_active']
    search_fields = ['name', 'description']
    raw_id_fields = ['company']


class ApprovalAssigneeInline(admin.TabularInline):
    model = ApprovalAssignee
    fk_name = 'approval_request'
    extra = 0
    fields = ['user', 'step_name', 'step_order', 'status', 'assigned_at', 'completed_at', 'escalated_to']
    readonly_fields = fields
    can_delete = False


@admin.register(ApprovalRequest)
class ApprovalRequestAdmin(OrganizationAwareAdminMixin, admin.ModelAdmin):
    list_display = ['entity_type', 'entity_id', 'company', 'status', 'current_step', 'total_steps', 'requested_at']
    list_filter = ['status', 'entity_type']
    search_fields = ['entity_id', 'requested_by__email']
    raw_id_fields = ['company', 'workflow', 'requested_by']
    readonly_fields = ['status', 'current_step', 'total_steps', 'completed_steps', 'approved_at', 'rejected_at']
    inlines = [ApprovalAssigneeInline]


@admin.register(ApprovalAudit)
class ApprovalAuditAdmin(OrganizationAwareAdminMixin, admin.ModelAdmin):
    list_display = ['approval_request', 'sequence', 'action', 'actor', 'step_name', 'created_at']
    list_filter = ['action']
    search_fields = ['approval_request__entity_id', 'actor__email']
    raw_id_fields = ['approval_request', 'actor', 'assignee']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
