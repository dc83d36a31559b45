"""
Django views for the operation result API.

Every view answers with an OperationResult envelope; see api/response.py
for the wire format.
"""
from django.views.decorators.http import require_http_methods

from .decorators import result_view
from .response import OperationResult

SERVICE_NAME = 'opresult-api'
SERVICE_VERSION = '1.0.0'


@require_http_methods(["GET"])
@result_view
def health_check(request):
    """Health check endpoint."""
    return OperationResult.success({
        'status': 'ok',
        'service': SERVICE_NAME,
        'version': SERVICE_VERSION,
    })
