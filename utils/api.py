"""
Helpers shared by the API views.
"""

from rest_framework.response import Response

from utils.service_base import ServiceResult, http_status_for


def error_response(result: ServiceResult) -> Response:
    """Render a failed ServiceResult as ``{"detail", "code"}`` with the mapped HTTP status."""
    return Response({"detail": result.error_detail, "code": result.error}, status=http_status_for(result.error))


def query_int(request, name: str, default: int, maximum: int = None) -> int:
    """Read a positive integer query parameter, falling back to ``default`` on bad input."""
    try:
        value = int(request.query_params.get(name, default))
    except (TypeError, ValueError):
        return default
    if value < 1:
        return default
    if maximum is not None:
        value = min(value, maximum)
    return value
