"""Approval engine errors.

Every error is caller-facing and non-retryable; the DRF exception handler
renders them with their ``code`` and HTTP status.
"""
from rest_framework import status

from apps.core.exceptions import APIException


class ApprovalError(APIException):
    default_code = 'approval_error'
    default_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, message, details=None):
        super().__init__(message, code=self.default_code, status_code=self.default_status, details=details)


class NoWorkflowFound(ApprovalError):
    default_code = 'no_workflow_found'
    default_status = status.HTTP_404_NOT_FOUND


class ConditionsNotMet(ApprovalError):
    default_code = 'conditions_not_met'
    default_status = status.HTTP_422_UNPROCESSABLE_ENTITY


class InvalidConfiguration(ApprovalError):
    default_code = 'invalid_configuration'


class NotFound(ApprovalError):
    default_code = 'not_found'
    default_status = status.HTTP_404_NOT_FOUND

    def __init__(self, resource_type, resource_id=None):
        message = f"{resource_type} not found"
        if resource_id:
            message = f"{resource_type} with ID {resource_id} not found"
        super().__init__(message)
        self.resource_type = resource_type
        self.resource_id = resource_id


class AlreadyProcessed(ApprovalError):
    default_code = 'already_processed'
    default_status = status.HTTP_409_CONFLICT


class WorkflowInUse(AlreadyProcessed):
    """Workflow is referenced by requests and cannot change shape or be removed."""
