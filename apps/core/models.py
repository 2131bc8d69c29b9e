"""
Core Models - Base classes for all ledger models
Multi-Tenancy: Organization → Company → business records
"""

import uuid
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.conf import settings
from django.utils import timezone
from django.core.exceptions import ValidationError
import logging

logger = logging.getLogger(__name__)


class TimeStampedModel(models.Model):
    """Abstract base model with timestamps"""

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


# ============================================================================
# ORGANIZATION MODEL - Core Multi-Tenancy
# ============================================================================

class Organization(models.Model):
    """Core tenant entity representing a customer organization."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="UUID - the ONLY key used for data isolation",
    )
    name = models.CharField(max_length=255, db_index=True)
    email = models.EmailField(blank=True)
    timezone = models.CharField(max_length=100, default='UTC')
    currency = models.CharField(max_length=3, default='USD')
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'organizations'
        ordering = ['name']

    def __str__(self):
        return self.name

    def clean(self):
        if not self.name or not self.name.strip():
            raise ValidationError("Organization name is required")


# ============================================================================
# ORGANIZATION ENTITY - Base class for all organization-scoped models
# ============================================================================

class SoftDeleteManager(models.Manager):
    """Manager that filters out soft-deleted objects"""

    def get_queryset(self):
        return super().get_queryset().filter(is_deleted=False)

    def all_with_deleted(self):
        return super().get_queryset()

    def deleted_only(self):
        return super().get_queryset().filter(is_deleted=True)


class SoftDeleteModel(models.Model):
    """Abstract model with soft delete capability"""

    is_deleted = models.BooleanField(default=False, db_index=True)
    deleted_at = models.DateTimeField(null=True, blank=True)
    deleted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='%(class)s_deleted'
    )

    objects = SoftDeleteManager()
    all_objects = models.Manager()

    class Meta:
        abstract = True

    def delete(self, using=None, keep_parents=False, hard_delete=False, deleted_by=None):
        if hard_delete:
            return super().delete(using=using, keep_parents=keep_parents)
        self.is_deleted = True
        self.deleted_at = timezone.now()
        self.deleted_by = deleted_by
        self.save(update_fields=['is_deleted', 'deleted_at', 'deleted_by'])

    def restore(self):
        self.is_deleted = False
        self.deleted_at = None
        self.deleted_by = None
        self.save(update_fields=['is_deleted', 'deleted_at', 'deleted_by'])


class AuditModel(models.Model):
    """Abstract model with audit fields"""

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='%(class)s_created'
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='%(class)s_updated'
    )

    class Meta:
        abstract = True


class OrganizationEntity(TimeStampedModel, SoftDeleteModel, AuditModel):
    """
    Tenant-scoped base with organization isolation.

    Provides UUID PK, timestamps, soft-delete, audit fields, and the
    ``organization`` FK for tenant scoping.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    is_active = models.BooleanField(default=True, db_index=True)
    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        null=False,
        blank=False,
        db_index=True,
        related_name='%(app_label)s_%(class)s_set',
        help_text="Organization this record belongs to (primary isolation key)",
    )

    class Meta:
        abstract = True


class MetadataModel(models.Model):
    """Abstract mixin that adds a generic JSON metadata field."""

    metadata = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)

    class Meta:
        abstract = True


# ============================================================================
# COMPANY - legal entity keeping its own books inside an organization
# ============================================================================

class Company(OrganizationEntity):
    """A set of books owned by a tenant. Workflows and requests are keyed by it."""

    name = models.CharField(max_length=255)
    code = models.CharField(max_length=30)
    base_currency = models.CharField(max_length=3, default='USD')
    fiscal_year_start_month = models.PositiveSmallIntegerField(default=1)

    class Meta:
        db_table = 'companies'
        ordering = ['name']
        verbose_name_plural = 'Companies'
        constraints = [
            models.UniqueConstraint(
                fields=['organization', 'code'],
                condition=models.Q(is_deleted=False),
                name='uniq_company_code_per_org',
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.code})"

    def clean(self):
        if not 1 <= (self.fiscal_year_start_month or 0) <= 12:
            raise ValidationError({'fiscal_year_start_month': 'Month must be between 1 and 12'})
