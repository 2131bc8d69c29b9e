"""Approvals URLs"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import ApprovalRequestViewSet, ApprovalWorkflowViewSet

router = DefaultRouter()
router.register(r'workflows', ApprovalWorkflowViewSet, basename='approval-workflow')
router.register(r'requests', ApprovalRequestViewSet, basename='approval-request')

urlpatterns = [path('', include(router.urls))]
