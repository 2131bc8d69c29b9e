"""
Accounting Models - business documents routed through approvals.

Only the fields approval routing reads or writes live here: the owning
company, a human document number, the amount used by amount-based steps,
and the document status the approval verdict is written back to.
"""
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from apps.core.models import MetadataModel, OrganizationEntity


class AccountingDocument(OrganizationEntity, MetadataModel):
    company = models.ForeignKey('core.Company', on_delete=models.PROTECT, related_name='%(class)s_set')
    number = models.CharField(max_length=50)
    description = models.TextField(blank=True)
    amount = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
    )
    currency = models.CharField(max_length=3, default='USD')

    class Meta:
        abstract = True

    def __str__(self):
        return f"{self.number} ({self.status})"


class JournalEntry(AccountingDocument):
    """Manual journal entry; posted once approved"""
    STATUS_CHOICES = [
        ('DRAFT', 'Draft'),
        ('PENDING_APPROVAL', 'Pending Approval'),
        ('POSTED', 'Posted'),
        ('REVERSED', 'Reversed'),
    ]

    entry_date = models.DateField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='DRAFT', db_index=True)

    class Meta:
        db_table = 'journal_entries'
        ordering = ['-entry_date', '-created_at']
        verbose_name_plural = 'Journal entries'
        indexes = [
            models.Index(fields=['organization', 'company', 'status'], name='je_org_company_status_idx'),
        ]


class Invoice(AccountingDocument):
    """Customer invoice"""
    STATUS_CHOICES = [
        ('DRAFT', 'Draft'),
        ('PENDING_APPROVAL', 'Pending Approval'),
        ('APPROVED', 'Approved'),
        ('SENT', 'Sent'),
        ('PAID', 'Paid'),
        ('VOID', 'Void'),
    ]

    customer_name = models.CharField(max_length=255)
    issue_date = models.DateField()
    due_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='DRAFT', db_index=True)

    class Meta:
        db_table = 'invoices'
        ordering = ['-issue_date', '-created_at']
        indexes = [
            models.Index(fields=['organization', 'company', 'status'], name='inv_org_company_status_idx'),
        ]


class PurchaseOrder(AccountingDocument):
    """Supplier purchase order"""
    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('pending_approval', 'Pending Approval'),
        ('approved', 'Approved'),
        ('ordered', 'Ordered'),
        ('received', 'Received'),
        ('cancelled', 'Cancelled'),
    ]

    supplier_name = models.CharField(max_length=255)
    order_date = models.DateField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft', db_index=True)

    class Meta:
        db_table = 'purchase_orders'
        ordering = ['-order_date', '-created_at']
        indexes = [
            models.Index(fields=['organization', 'company', 'status'], name='po_org_company_status_idx'),
        ]
