"""Accounting Admin"""
from django.contrib import admin

from apps.core.admin_mixins import OrganizationAwareAdminMixin
from .models import Invoice, JournalEntry, PurchaseOrder


@admin.register(JournalEntry)
class JournalEntryAdmin(OrganizationAwareAdminMixin, admin.ModelAdmin):
    list_display = ['number', 'company', 'entry_date', 'amount', 'status']
    list_filter = ['status', 'company']
    search_fields = ['number', 'description']


@admin.register(Invoice)
class InvoiceAdmin(OrganizationAwareAdminMixin, admin.ModelAdmin):
    list_display = ['number', 'company', 'customer_name', 'issue_date', 'amount', 'status']
    list_filter = ['status', 'company']
    search_fields = ['number', 'customer_name']


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(OrganizationAwareAdminMixin, admin.ModelAdmin):
    list_display = ['number', 'company', 'supplier_name', 'order_date', 'amount', 'status']
    list_filter = ['status', 'company']
    search_fields = ['number', 'supplier_name']
