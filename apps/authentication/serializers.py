"""
Authentication Serializers
"""

from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import User


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    JWT token serializer with tenant binding.
    SECURITY: Includes organization_id claim to prevent cross-tenant token reuse.
    """

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)

        # SECURITY: Non-superusers MUST belong to an organization
        if not user.is_superuser and not user.organization_id:
            raise AuthenticationFailed('User is not assigned to any organization')

        token['organization_id'] = str(user.organization_id) if user.organization_id else None
        token['email'] = user.email
        token['full_name'] = user.full_name
        token['role'] = user.role
        token['is_org_admin'] = user.is_org_admin
        return token


class UserSerializer(serializers.ModelSerializer):
    full_name = serializers.ReadOnlyField()

    class Meta:
        model = User
        fields = [
            'id', 'email', 'first_name', 'last_name', 'full_name',
            'organization_id', 'role', 'is_org_admin', 'is_active', 'date_joined',
        ]
        read_only_fields = ['id', 'organization_id', 'is_org_admin', 'date_joined']


class UserSummarySerializer(serializers.ModelSerializer):
    """Compact user representation for nested payloads"""
    full_name = serializers.ReadOnlyField()

    class Meta:
        model = User
        fields = ['id', 'email', 'full_name', 'role']
        read_only_fields = fields
