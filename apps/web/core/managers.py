"""
Custom managers for user-owned data.

UserScopedManager filters queries by the authenticated user.
"""

from typing import TYPE_CHECKING, Any, TypeVar

from django.db import models

if TYPE_CHECKING:
    from django.http import HttpRequest

_T = TypeVar("_T", bound=models.Model)


class UserScopedManager(models.Manager[_T]):
    """
    Manager that filters by the requesting user.

    Usage in views:
        # Automatically scoped to request.user
        orders = Order.objects.for_user(request).all()

    SECURITY: Always use for_user() in customer-facing views, never raw querysets.
    """

    user_field = "user"

    def for_user(self, request: "HttpRequest") -> models.QuerySet[_T]:
        """
        Filter queryset by the user attached to the request.

        Args:
            request: HttpRequest with an authenticated user

        Returns:
            QuerySet filtered to the request's user

        Raises:
            ValueError: If the request is not authenticated
        """
        user: Any = getattr(request, "user", None)
        if user is None or not user.is_authenticated:
            msg = "Request has no authenticated user. Is login_required_json applied?"
            raise ValueError(msg)
        return self.filter(**{self.user_field: user})
