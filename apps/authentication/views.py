"""
Authentication Views
"""

import logging

from rest_framework import generics, permissions
from rest_framework_simplejwt.views import TokenObtainPairView

from apps.core.throttling import LoginRateThrottle

from .serializers import CustomTokenObtainPairSerializer, UserSerializer

logger = logging.getLogger(__name__)


class CustomTokenObtainPairView(TokenObtainPairView):
    permission_classes = [permissions.AllowAny]
    throttle_classes = [LoginRateThrottle]
    serializer_class = CustomTokenObtainPairSerializer

    def post(self, request, *args, **kwargs):
        response = super().post(request, *args, **kwargs)
        logger.info("Token issued for %s", str(request.data.get("email", "")).strip().lower())
        return response


class ProfileView(generics.RetrieveAPIView):
    """Current user's profile including organization and role."""
    serializer_class = UserSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_object(self):
        return self.request.user
