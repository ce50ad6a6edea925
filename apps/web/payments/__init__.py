"""Payments module - Stripe Checkout and order creation."""

from apps.web.payments.services import (
    PaymentError,
    construct_webhook_event,
    create_checkout_session,
    retrieve_checkout_session,
    to_provider_session,
)

__all__ = [
    "PaymentError",
    "construct_webhook_event",
    "create_checkout_session",
    "retrieve_checkout_session",
    "to_provider_session",
]
