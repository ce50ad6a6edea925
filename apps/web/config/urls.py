"""
URL configuration for Food Hub.
"""

from django.contrib import admin
from django.urls import include, path

from apps.web.core.views import healthz
from apps.web.payments.webhooks import stripe_webhook

urlpatterns = [
    path("admin/", admin.site.urls),
    path("healthz", healthz, name="healthz"),
    # Stripe webhook (signature-verified, no session auth)
    path("api/v1/order/webhook", stripe_webhook, name="stripe-webhook"),
    # Public API endpoints
    path("api/payment/", include("apps.web.payments.urls")),
    path("api/v1/", include("apps.web.restaurant.urls")),
]
