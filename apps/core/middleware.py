"""
Request middleware: correlation ids and per-request context hygiene
"""

from .context import clear_context, new_correlation_id, set_correlation_id

CORRELATION_HEADER = 'HTTP_X_CORRELATION_ID'
CORRELATION_RESPONSE_HEADER = 'X-Correlation-ID'


class CorrelationIdMiddleware:
    """Propagate X-Correlation-ID (or mint one) into logs and the response."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        correlation_id = request.META.get(CORRELATION_HEADER) or new_correlation_id()
        request.correlation_id = correlation_id
        set_correlation_id(correlation_id)
        try:
            response = self.get_response(request)
        finally:
            clear_context()
        response[CORRELATION_RESPONSE_HEADER] = correlation_id
        return response
