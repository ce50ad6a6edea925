"""
JSON response helpers shared by the API views.
"""

from typing import Any

from django.conf import settings
from django.http import JsonResponse

from pydantic import ValidationError as PydanticValidationError


def cors_headers() -> dict[str, str]:
    """CORS headers for the frontend (cookie-authenticated)."""
    return {
        "Access-Control-Allow-Origin": settings.FRONTEND_URL,
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Methods": "GET, POST, PATCH, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type, Idempotency-Key",
    }


def json_response(data: dict[str, Any], status: int = 200) -> JsonResponse:
    """Create a JSON response with CORS headers."""
    response = JsonResponse(data, status=status)
    for key, value in cors_headers().items():
        response[key] = value
    return response


def error_response(
    message: str,
    status: int,
    errors: list[dict[str, str]] | None = None,
) -> JsonResponse:
    """Create a ``{success: false, message}`` error response."""
    data: dict[str, Any] = {"success": False, "message": message}
    if errors:
        data["errors"] = errors
    return json_response(data, status=status)


def validation_error_response(exc: PydanticValidationError) -> JsonResponse:
    """Turn a pydantic ValidationError into a 400 with per-field errors."""
    errors = [
        {
            "field": ".".join(str(loc) for loc in err["loc"]),
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    return error_response("Invalid request", status=400, errors=errors)
