"""
Core views - health check.
"""

from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_GET

from apps.web.core.responses import json_response


@require_GET
def healthz(_request: HttpRequest) -> JsonResponse:
    """
    GET /healthz

    JSON health endpoint for load balancer probes.
    """
    return json_response({"status": "ok"})
