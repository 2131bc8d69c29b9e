from django import forms
from django.contrib.auth.forms import UserChangeForm, UserCreationForm

from apps.core.models import Organization
from .models import User


class CustomUserCreationForm(UserCreationForm):
    """Admin sign-up form keyed by email; picks the tenant from a list."""
    organization = forms.ModelChoiceField(
        queryset=Organization.objects.filter(is_active=True),
        required=False,
    )

    class Meta:
        model = User
        fields = ('email', 'first_name', 'last_name', 'role', 'is_org_admin', 'is_staff')
        field_classes = {'email': forms.EmailField}

    def clean(self):
        cleaned_data = super().clean()
        if cleaned_data.get('is_org_admin') and not cleaned_data.get('organization'):
            self.add_error('organization', 'Organization admins need an organization.')
        return cleaned_data

    def save(self, commit=True):
        user = super().save(commit=False)
        organization = self.cleaned_data.get('organization')
        user.organization_id = organization.id if organization else None
        if commit:
            user.save()
        return user


class CustomUserChangeForm(UserChangeForm):
    class Meta:
        model = User
        fields = '__all__'
