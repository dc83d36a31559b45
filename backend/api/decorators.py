"""
View decorator that lets handlers return an OperationResult directly.

    @require_http_methods(["GET"])
    @result_view
    def order_detail(request, order_id):
        ...
        return OperationResult.success({"id": order_id})

Anything that is not an OperationResult (an HttpResponse built by the view
itself, a 404 helper, a streaming response) is returned untouched.
"""
from functools import wraps

from .response import OperationResult


def result_view(view):
    """Render an OperationResult returned by ``view`` as a JSON response."""

    @wraps(view)
    def wrapper(request, *args, **kwargs):
        result = view(request, *args, **kwargs)
        if isinstance(result, OperationResult):
            return result.as_response(request)
        return result

    return wrapper
