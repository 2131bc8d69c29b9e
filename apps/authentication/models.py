"""
Authentication Models - Custom User Model
Multi-Tenancy: Organization → User (one accounting role per user)
"""

import uuid
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin, BaseUserManager
from django.db import models
from django.utils import timezone


class UserRole(models.TextChoices):
    ADMIN = 'admin', 'Administrator'
    CEO = 'ceo', 'Chief Executive Officer'
    CFO = 'cfo', 'Chief Financial Officer'
    DIRECTOR = 'director', 'Director'
    MANAGER = 'manager', 'Manager'
    ACCOUNTANT = 'accountant', 'Accountant'
    CLERK = 'clerk', 'Clerk'
    VIEWER = 'viewer', 'Viewer'


class UserManager(BaseUserManager):
    """Custom user manager"""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('Email is required')
        organization = extra_fields.pop('organization', None)
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        if organization is not None:
            user.organization = organization
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', UserRole.ADMIN)

        return self.create_user(email, password, **extra_fields)

    def active_in_organization(self, organization_id):
        return self.filter(
            organization_id=organization_id,
            is_active=True,
            is_deleted=False,
        )


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom User model.

    A user belongs to exactly one organization (``organization_id``) and
    holds one accounting ``role`` used by approval routing.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization_id = models.UUIDField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Organization ID (denormalized tenant key)",
    )

    @property
    def organization(self):
        """Lazy accessor for the organization object"""
        if not self.organization_id:
            return None
        cached = getattr(self, '_organization_cache', None)
        if cached is not None and cached.id == self.organization_id:
            return cached
        from apps.core.models import Organization
        self._organization_cache = Organization.objects.filter(id=self.organization_id).first()
        return self._organization_cache

    @organization.setter
    def organization(self, value):
        if hasattr(value, 'id'):
            self.organization_id = value.id
            self._organization_cache = value
        else:
            self.organization_id = value
            self._organization_cache = None

    email = models.EmailField(unique=True, db_index=True)
    first_name = models.CharField(max_length=50)
    last_name = models.CharField(max_length=50)

    role = models.CharField(
        max_length=30,
        choices=UserRole.choices,
        default=UserRole.VIEWER,
        db_index=True,
    )

    # Status flags
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)
    is_org_admin = models.BooleanField(
        default=False,
        db_index=True,
        help_text="User is an admin of their organization",
    )

    date_joined = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    # Soft delete
    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['first_name', 'last_name']

    class Meta:
        ordering = ['first_name', 'last_name']
        indexes = [
            models.Index(fields=['organization_id', 'role'], name='user_org_role_idx'),
            models.Index(fields=['organization_id', 'is_active', 'is_deleted'], name='user_org_active_idx'),
        ]

    def __str__(self):
        return f"{self.full_name} ({self.email})"

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def get_full_name(self):
        return self.full_name

    def get_short_name(self):
        return self.first_name

    def get_organization(self):
        return self.organization

    def has_role(self, *roles):
        return self.role in roles
