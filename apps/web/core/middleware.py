"""
Request middleware - current restaurant and CORS preflight.
"""

from collections.abc import Callable
from typing import TYPE_CHECKING

from django.http import HttpRequest, HttpResponse

from apps.web.core.responses import json_response

if TYPE_CHECKING:
    from apps.web.restaurant.models import Restaurant


class RestaurantMiddleware:
    """
    Middleware that attaches the current restaurant to the request.

    An owner has at most one active restaurant (enforced by a unique
    constraint), so the restaurant is resolved from the authenticated user.

    Sets request.restaurant, or None for anonymous users and customers.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        # Skip for admin and provider callbacks
        if request.path.startswith(("/admin/", "/api/v1/order/webhook")):
            request.restaurant = None  # type: ignore[attr-defined]
            return self.get_response(request)

        request.restaurant = self._get_restaurant(request)  # type: ignore[attr-defined]
        return self.get_response(request)

    def _get_restaurant(self, request: HttpRequest) -> "Restaurant | None":
        """Resolve the owner's active restaurant."""
        # Lazy import to avoid circular dependency
        from apps.web.restaurant.models import Restaurant  # noqa: PLC0415

        if not request.user.is_authenticated:
            return None
        return Restaurant.objects.active_for(request.user)


class CorsPreflightMiddleware:
    """
    Middleware that answers CORS preflight (OPTIONS) requests for the API.

    Regular API responses add the same headers via core.responses.json_response.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        if request.method == "OPTIONS" and request.path.startswith("/api/"):
            return json_response({})
        return self.get_response(request)
