"""Tests for request middleware and the health check."""

from django.contrib.auth.models import AnonymousUser
from django.http import HttpResponse
from django.test import Client as DjangoClient
from django.test import RequestFactory

import pytest

from apps.web.core.middleware import RestaurantMiddleware
from apps.web.restaurant.tests.factories import RestaurantFactory


def _run(request):
    middleware = RestaurantMiddleware(lambda r: HttpResponse())
    middleware(request)
    return request.restaurant


@pytest.mark.django_db
class TestRestaurantMiddleware:
    """Tests for RestaurantMiddleware."""

    def test_owner_gets_active_restaurant(self, owner, restaurant):
        """Owners have their active restaurant attached."""
        request = RequestFactory().get("/api/v1/restaurant/orders")
        request.user = owner

        assert _run(request) == restaurant

    def test_customer_gets_none(self, user):
        """Users without a restaurant get None."""
        request = RequestFactory().get("/api/v1/order/")
        request.user = user

        assert _run(request) is None

    def test_anonymous_gets_none(self):
        """Anonymous users get None."""
        request = RequestFactory().get("/api/v1/order/")
        request.user = AnonymousUser()

        assert _run(request) is None

    def test_inactive_restaurant_ignored(self, user):
        """Inactive restaurants are not attached."""
        RestaurantFactory(owner=user, is_active=False)
        request = RequestFactory().get("/api/v1/restaurant/orders")
        request.user = user

        assert _run(request) is None

    def test_webhook_skipped(self, owner, restaurant):
        """Provider callbacks never resolve a restaurant."""
        request = RequestFactory().post("/api/v1/order/webhook")
        request.user = owner

        assert _run(request) is None


@pytest.mark.django_db
class TestHealthz:
    """Tests for GET /healthz."""

    def test_healthz(self):
        response = DjangoClient().get("/healthz")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_healthz_has_cors_headers(self, settings):
        response = DjangoClient().get("/healthz")

        assert response["Access-Control-Allow-Origin"] == settings.FRONTEND_URL
