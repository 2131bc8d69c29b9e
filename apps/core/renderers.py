"""
Standard JSON renderer that wraps all DRF responses in a consistent envelope.

Success:  {"success": true,  "data": ..., "message": "OK"}
Error:    {"success": false, "error": {"code": ..., "message": ..., "details": ...}}

Pagination and exception-handler responses are already wrapped and passed through unchanged.
"""

from rest_framework.renderers import JSONRenderer

METHOD_MESSAGES = {
    'POST': 'Created successfully.',
    'PUT': 'Updated successfully.',
    'PATCH': 'Updated successfully.',
    'DELETE': 'Deleted successfully.',
}


class StandardJSONRenderer(JSONRenderer):
    """Wraps raw DRF payloads; leaves pre-wrapped ones alone."""

    def render(self, data, accepted_media_type=None, renderer_context=None):
        renderer_context = renderer_context or {}
        response = renderer_context.get('response')
        request = renderer_context.get('request')

        if isinstance(data, dict) and 'success' in data:
            envelope = data
        elif response is not None and response.status_code >= 400:
            envelope = self._error(response.status_code, data)
        else:
            method = getattr(request, 'method', 'GET')
            envelope = {
                'success': True,
                'data': data,
                'message': METHOD_MESSAGES.get(method, 'OK'),
            }

        return super().render(envelope, accepted_media_type, renderer_context)

    @staticmethod
    def _error(status_code, data):
        if isinstance(data, dict):
            message = data.get('detail', data.get('message', 'Error'))
        elif isinstance(data, list) and data:
            message = data[0]
        else:
            message = data or 'Error'
        return {
            'success': False,
            'error': {
                'code': status_code,
                'message': str(message),
                'details': data if isinstance(data, dict) else {'detail': data},
            },
        }
