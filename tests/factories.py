import datetime
from decimal import Decimal

import factory

from apps.accounting.models import Invoice, JournalEntry, PurchaseOrder
from apps.approvals.models import ApprovalWorkflow
from apps.authentication.models import User, UserRole
from apps.core.models import Company, Organization


class OrganizationFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Organization
    name = factory.Sequence(lambda n: f'Organization {n}')
    email = factory.Sequence(lambda n: f'books{n}@example.com')


class CompanyFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Company
    organization = factory.SubFactory(OrganizationFactory)
    name = factory.Sequence(lambda n: f'Company {n}')
    code = factory.Sequence(lambda n: f'CO{n:04d}')


class UserFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = User
    email = factory.Sequence(lambda n: f'user{n}@example.com')
    password = 'testpass123'
    first_name = factory.Sequence(lambda n: f'User{n}')
    last_name = 'Tester'
    role = UserRole.VIEWER
    organization = factory.SubFactory(OrganizationFactory)

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        return model_class.objects.create_user(*args, **kwargs)


def single_step(role='manager', **overrides):
    step = {'id': 'review', 'name': 'Review', 'order': 1, 'approver_type': 'role', 'role': role}
    step.update(overrides)
    return step


class ApprovalWorkflowFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = ApprovalWorkflow
    company = factory.SubFactory(CompanyFactory)
    organization = factory.SelfAttribute('company.organization')
    name = factory.Sequence(lambda n: f'Workflow {n}')
    entity_type = 'invoice'
    steps = factory.LazyFunction(lambda: [single_step()])


class JournalEntryFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = JournalEntry
    company = factory.SubFactory(CompanyFactory)
    organization = factory.SelfAttribute('company.organization')
    number = factory.Sequence(lambda n: f'JE-{n:05d}')
    amount = Decimal('100.00')
    entry_date = factory.LazyFunction(datetime.date.today)
    status = 'PENDING_APPROVAL'


class InvoiceFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Invoice
    company = factory.SubFactory(CompanyFactory)
    organization = factory.SelfAttribute('company.organization')
    number = factory.Sequence(lambda n: f'INV-{n:05d}')
    customer_name = 'Acme Ltd'
    amount = Decimal('250.00')
    issue_date = factory.LazyFunction(datetime.date.today)
    status = 'PENDING_APPROVAL'


class PurchaseOrderFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = PurchaseOrder
    company = factory.SubFactory(CompanyFactory)
    organization = factory.SelfAttribute('company.organization')
    number = factory.Sequence(lambda n: f'PO-{n:05d}')
    supplier_name = 'Paper Supplies Co'
    amount = Decimal('900.00')
    order_date = factory.LazyFunction(datetime.date.today)
    status = 'pending_approval'
