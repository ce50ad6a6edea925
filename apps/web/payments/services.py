"""
Payment services - Stripe integration.

Provides functions for creating and retrieving Stripe Checkout Sessions and
verifying webhook payloads. Every Stripe error is converted to PaymentError.
"""

from typing import Any

from django.conf import settings

import stripe
from foodhub_schemas import ProviderCheckoutSession

# Configure Stripe API key
stripe.api_key = settings.STRIPE_SECRET_KEY
stripe.max_network_retries = settings.STRIPE_MAX_NETWORK_RETRIES


class PaymentError(Exception):
    """Error during payment processing."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    @property
    def is_not_found(self) -> bool:
        """Check if Stripe reported the requested object as missing."""
        return self.code == "resource_missing"


def _payment_error(e: stripe.StripeError) -> PaymentError:
    return PaymentError(
        message=str(e.user_message or e),
        code=getattr(e, "code", None),
    )


def create_checkout_session(
    line_items: list[dict[str, Any]],
    metadata: dict[str, str],
    success_url: str,
    cancel_url: str,
    allowed_countries: list[str],
    customer_email: str | None = None,
) -> stripe.checkout.Session:
    """
    Create a hosted Stripe Checkout Session.

    Args:
        line_items: Stripe line items with price_data and quantity
        metadata: Order-defining data read back when the session is paid
        success_url: Redirect after payment (should carry {CHECKOUT_SESSION_ID})
        cancel_url: Redirect when the customer abandons checkout
        allowed_countries: Shipping-address country allow-list
        customer_email: Prefills the email field on the payment page

    Returns:
        stripe.checkout.Session with id and url for the redirect

    Raises:
        PaymentError: If Stripe API call fails
    """
    params: dict[str, Any] = {
        "mode": "payment",
        "line_items": line_items,
        "metadata": metadata,
        "success_url": success_url,
        "cancel_url": cancel_url,
        "shipping_address_collection": {"allowed_countries": allowed_countries},
    }
    if customer_email:
        params["customer_email"] = customer_email

    try:
        return stripe.checkout.Session.create(**params)
    except stripe.StripeError as e:
        raise _payment_error(e) from e


def retrieve_checkout_session(session_id: str) -> stripe.checkout.Session:
    """
    Retrieve a Checkout Session from Stripe.

    Args:
        session_id: The Stripe Checkout Session ID (cs_xxx)

    Returns:
        stripe.checkout.Session with current payment_status

    Raises:
        PaymentError: If session not found or API call fails
    """
    try:
        return stripe.checkout.Session.retrieve(session_id)
    except stripe.StripeError as e:
        raise _payment_error(e) from e


def to_provider_session(session: Any) -> ProviderCheckoutSession:
    """
    Read the fields we use from a Stripe session object or webhook payload.

    Raises:
        ValueError: If the object lacks an id or payment status
    """
    if "id" not in session or "payment_status" not in session:
        raise ValueError("Checkout session is missing id or payment_status")

    return ProviderCheckoutSession.model_validate(
        {
            "id": session["id"],
            "payment_status": session["payment_status"],
            "amount_total": session.get("amount_total"),
            "currency": session.get("currency"),
            "url": session.get("url"),
            "metadata": dict(session.get("metadata") or {}),
        }
    )


def construct_webhook_event(payload: bytes, sig_header: str) -> stripe.Event:
    """
    Verify a webhook signature and parse the event.

    Raises:
        ValueError: If the payload is not valid JSON
        stripe.SignatureVerificationError: If the signature doesn't match
    """
    return stripe.Webhook.construct_event(
        payload,
        sig_header,
        settings.STRIPE_WEBHOOK_SECRET,
    )
