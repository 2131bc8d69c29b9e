import uuid
from django.conf import settings
import django.core.serializers.json
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='ApprovalWorkflow',
            fields=[
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('is_deleted', models.BooleanField(db_index=True, default=False)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('is_active', models.BooleanField(db_index=True, default=True)),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('entity_type', models.CharField(choices=[('journal_entry', 'Journal Entry'), ('invoice', 'Invoice'), ('purchase_order', 'Purchase Order'), ('expense', 'Expense'), ('bill', 'Bill'), ('document', 'Document'), ('recurring_invoice', 'Recurring Invoice')], db_index=True, max_length=30)),
                ('entity_sub_type', models.CharField(blank=True, default='', max_length=100)),
                ('steps', models.JSONField(default=list)),
                ('conditions', models.JSONField(blank=True, default=list)),
                ('escalation_rules', models.JSONField(blank=True, default=list)),
                ('auto_approval', models.BooleanField(default=False)),
                ('priority', models.CharField(choices=[('low', 'Low'), ('medium', 'Medium'), ('high', 'High'), ('critical', 'Critical')], default='medium', max_length=10)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='approval_workflows', to='core.company')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='approvalworkflow_created', to=settings.AUTH_USER_MODEL)),
                ('deleted_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='approvalworkflow_deleted', to=settings.AUTH_USER_MODEL)),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='approvalworkflow_updated', to=settings.AUTH_USER_MODEL)),
                ('organization', models.ForeignKey(help_text='Organization this record belongs to (primary isolation key)', on_delete=django.db.models.deletion.CASCADE, related_name='approvals_approvalworkflow_set', to='core.organization')),
            ],
            options={
                'db_table': 'approval_workflows',
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['organization', 'company', 'entity_type'], name='apwf_org_company_type_idx'),
                    models.Index(fields=['organization', 'created_at'], name='apwf_org_created_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ApprovalRequest',
            fields=[
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('is_deleted', models.BooleanField(db_index=True, default=False)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('is_active', models.BooleanField(db_index=True, default=True)),
                ('metadata', models.JSONField(blank=True, default=dict, encoder=django.core.serializers.json.DjangoJSONEncoder)),
                ('entity_type', models.CharField(choices=[('journal_entry', 'Journal Entry'), ('invoice', 'Invoice'), ('purchase_order', 'Purchase Order'), ('expense', 'Expense'), ('bill', 'Bill'), ('document', 'Document'), ('recurring_invoice', 'Recurring Invoice')], max_length=30)),
                ('entity_id', models.CharField(max_length=64)),
                ('entity_sub_type', models.CharField(blank=True, default='', max_length=100)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')], db_index=True, default='pending', max_length=20)),
                ('current_step', models.PositiveSmallIntegerField(default=1)),
                ('total_steps', models.PositiveSmallIntegerField(default=0)),
                ('completed_steps', models.PositiveSmallIntegerField(default=0)),
                ('requested_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('rejected_at', models.DateTimeField(blank=True, null=True)),
                ('comments', models.TextField(blank=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='approval_requests', to='core.company')),
                ('workflow', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='requests', to='approvals.approvalworkflow')),
                ('requested_by', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='approval_requests', to=settings.AUTH_USER_MODEL)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='approvalrequest_created', to=settings.AUTH_USER_MODEL)),
                ('deleted_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='approvalrequest_deleted', to=settings.AUTH_USER_MODEL)),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='approvalrequest_updated', to=settings.AUTH_USER_MODEL)),
                ('organization', models.ForeignKey(help_text='Organization this record belongs to (primary isolation key)', on_delete=django.db.models.deletion.CASCADE, related_name='approvals_approvalrequest_set', to='core.organization')),
            ],
            options={
                'db_table': 'approval_requests',
                'ordering': ['-requested_at'],
                'indexes': [
                    models.Index(fields=['organization', 'entity_id'], name='apreq_org_entity_idx'),
                    models.Index(fields=['organization', 'status'], name='apreq_org_status_idx'),
                    models.Index(fields=['organization', 'company'], name='apreq_org_company_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('approved_at__isnull', False), ('rejected_at__isnull', False), _negated=True), name='approval_request_single_verdict'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ApprovalAssignee',
            fields=[
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('is_deleted', models.BooleanField(db_index=True, default=False)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('is_active', models.BooleanField(db_index=True, default=True)),
                ('step_id', models.CharField(max_length=100)),
                ('step_name', models.CharField(max_length=200)),
                ('step_order', models.PositiveSmallIntegerField()),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected'), ('escalated', 'Escalated')], db_index=True, default='pending', max_length=20)),
                ('assigned_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('comments', models.TextField(blank=True)),
                ('escalation_reason', models.TextField(blank=True)),
                ('escalation_notified_at', models.DateTimeField(blank=True, null=True)),
                ('approval_request', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='assignees', to='approvals.approvalrequest')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='approval_assignments', to=settings.AUTH_USER_MODEL)),
                ('escalated_to', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='approval_escalations_received', to=settings.AUTH_USER_MODEL)),
                ('escalated_from', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='escalated_assignees', to='approvals.approvalassignee')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='approvalassignee_created', to=settings.AUTH_USER_MODEL)),
                ('deleted_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='approvalassignee_deleted', to=settings.AUTH_USER_MODEL)),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='approvalassignee_updated', to=settings.AUTH_USER_MODEL)),
                ('organization', models.ForeignKey(help_text='Organization this record belongs to (primary isolation key)', on_delete=django.db.models.deletion.CASCADE, related_name='approvals_approvalassignee_set', to='core.organization')),
            ],
            options={
                'db_table': 'approval_assignees',
                'ordering': ['step_order', 'assigned_at'],
                'indexes': [
                    models.Index(fields=['organization', 'user', 'status'], name='apasg_org_user_status_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('approval_request', 'step_id', 'user'), name='uniq_assignee_per_request_step'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ApprovalAudit',
            fields=[
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('is_deleted', models.BooleanField(db_index=True, default=False)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('is_active', models.BooleanField(db_index=True, default=True)),
                ('sequence', models.PositiveIntegerField()),
                ('action', models.CharField(choices=[('created', 'Created'), ('step_assigned', 'Step Assigned'), ('step_skipped', 'Step Skipped'), ('step_completed', 'Step Completed'), ('approved', 'Approved'), ('rejected', 'Rejected'), ('escalated', 'Escalated'), ('completed', 'Completed'), ('auto_approved', 'Auto Approved')], max_length=20)),
                ('step_id', models.CharField(blank=True, max_length=100)),
                ('step_name', models.CharField(blank=True, max_length=200)),
                ('step_order', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('comments', models.TextField(blank=True)),
                ('metadata', models.JSONField(blank=True, default=dict, encoder=django.core.serializers.json.DjangoJSONEncoder)),
                ('approval_request', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='audit_trail', to='approvals.approvalrequest')),
                ('actor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='approval_audit_entries', to=settings.AUTH_USER_MODEL)),
                ('assignee', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_entries', to='approvals.approvalassignee')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='approvalaudit_created', to=settings.AUTH_USER_MODEL)),
                ('deleted_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='approvalaudit_deleted', to=settings.AUTH_USER_MODEL)),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='approvalaudit_updated', to=settings.AUTH_USER_MODEL)),
                ('organization', models.ForeignKey(help_text='Organization this record belongs to (primary isolation key)', on_delete=django.db.models.deletion.CASCADE, related_name='approvals_approvalaudit_set', to='core.organization')),
            ],
            options={
                'db_table': 'approval_audit',
                'ordering': ['approval_request', 'sequence'],
                'constraints': [
                    models.UniqueConstraint(fields=('approval_request', 'sequence'), name='uniq_audit_sequence_per_request'),
                ],
            },
        ),
    ]
