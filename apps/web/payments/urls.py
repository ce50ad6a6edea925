"""
URL routing for payment endpoints.

The Stripe webhook is routed separately under /api/v1/order/webhook.
"""

from django.urls import path

from apps.web.payments import views

app_name = "payments"

urlpatterns = [
    path(
        "create-checkout-session",
        views.create_checkout_session,
        name="create-checkout-session",
    ),
    path("verify-order", views.verify_order, name="verify-order"),
]
