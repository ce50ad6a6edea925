"""
Decorators for request handling and validation.
"""

import json
from collections.abc import Callable
from functools import wraps
from typing import Any

from django.core.cache import cache
from django.http import HttpRequest

from apps.web.core.responses import json_response

IDEMPOTENCY_TTL = 86400  # 24 hours


def login_required_json(view_func: Callable[..., Any]) -> Callable[..., Any]:
    """
    Decorator that rejects anonymous requests with a 401 JSON body.

    django.contrib.auth's login_required redirects to a login page, which
    API clients can't follow.

    Usage:
        @login_required_json
        def get_orders(request):
            ...
    """

    @wraps(view_func)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> Any:
        if not request.user.is_authenticated:
            return json_response(
                {"success": False, "message": "User must be logged in"},
                status=401,
            )
        return view_func(request, *args, **kwargs)

    return wrapper


def idempotency_key_supported(view_func: Callable[..., Any]) -> Callable[..., Any]:
    """
    Decorator that honours an optional Idempotency-Key header on POST requests.

    If the same user sends the same key twice, the cached response from the
    first request is returned. Cached responses are stored for 24 hours.
    Requests without the header are processed normally.

    Usage:
        @idempotency_key_supported
        def create_checkout_session(request):
            ...
    """

    @wraps(view_func)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> Any:
        key = request.headers.get("Idempotency-Key")
        if not key:
            return view_func(request, *args, **kwargs)

        user_id = request.user.pk if request.user.is_authenticated else "anon"
        cache_key = f"idempotency:{user_id}:{request.path}:{key}"
        cached = cache.get(cache_key)

        if cached:
            # Return cached response
            return json_response(cached["data"], status=cached["status"])

        # Call the actual view
        response = view_func(request, *args, **kwargs)

        # Cache successful responses only
        if response.status_code < 400:
            cache.set(
                cache_key,
                {
                    "data": json.loads(response.content),
                    "status": response.status_code,
                },
                timeout=IDEMPOTENCY_TTL,
            )

        return response

    return wrapper
