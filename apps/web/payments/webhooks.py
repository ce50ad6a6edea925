"""
Stripe webhook handlers.

Handles Checkout Session events from Stripe:
- checkout.session.completed: Payment finished, create the order
- checkout.session.async_payment_succeeded: Delayed payment cleared, create the order
- checkout.session.async_payment_failed: Delayed payment failed, flag any order

Stripe retries deliveries that don't get a 2xx. Events that can never succeed
(unpaid or corrupt sessions) are acknowledged so they aren't redelivered
forever; transient failures return 500 so Stripe tries again.
"""

import logging
from typing import Any

from django.db import DatabaseError, IntegrityError
from django.http import HttpRequest, HttpResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

import stripe

from apps.web.payments.exceptions import CorruptSessionError, PaymentNotCompletedError
from apps.web.payments.models import StripeWebhookEvent, WebhookOutcome
from apps.web.payments.reconciliation import (
    materialize_order,
    record_async_payment_failure,
)
from apps.web.payments.services import PaymentError, construct_webhook_event

logger = logging.getLogger(__name__)

ORDER_CREATING_EVENTS = (
    "checkout.session.completed",
    "checkout.session.async_payment_succeeded",
)


@csrf_exempt
@require_POST
def stripe_webhook(request: HttpRequest) -> HttpResponse:
    """
    Handle Stripe webhook events.

    POST /api/v1/order/webhook

    Events handled:
    - checkout.session.completed: Order created
    - checkout.session.async_payment_succeeded: Order created
    - checkout.session.async_payment_failed: Existing order flagged for review
    """
    payload = request.body
    sig_header = request.headers.get("Stripe-Signature", "")

    # Verify webhook signature
    try:
        event = construct_webhook_event(payload, sig_header)
    except ValueError as e:
        logger.warning("Invalid Stripe webhook payload: %s", e)
        return HttpResponse("Invalid payload", status=400)
    except stripe.SignatureVerificationError as e:
        logger.warning("Invalid Stripe webhook signature: %s", e)
        return HttpResponse("Invalid signature", status=400)

    event_id = str(event.get("id") or "")
    event_type = event["type"]
    session = event["data"]["object"]
    session_id = str(session.get("id") or "")

    # Log event for debugging
    logger.info("Received Stripe event: %s (%s)", event_type, event_id)

    if event_id and StripeWebhookEvent.objects.filter(
        event_id=event_id, outcome=WebhookOutcome.PROCESSED
    ).exists():
        logger.info("Stripe event already processed, skipping: %s", event_id)
        return HttpResponse(status=200)

    try:
        outcome, detail = _dispatch(event_type, session)
    except (PaymentNotCompletedError, CorruptSessionError) as e:
        # Non-retryable: acknowledge so Stripe stops redelivering
        logger.warning(
            "Acknowledging unprocessable Stripe event %s (%s): %s",
            event_id,
            event_type,
            e.message,
        )
        outcome, detail = WebhookOutcome.REJECTED, e.message
    except (PaymentError, DatabaseError):
        # Transient: withhold the ack so Stripe retries
        logger.exception(
            "Transient failure handling Stripe event %s (%s)", event_id, event_type
        )
        return HttpResponse(status=500)

    _record_event(event_id, event_type, session_id, outcome, detail)
    return HttpResponse(status=200)


def _dispatch(event_type: str, session: Any) -> tuple[str, str]:
    """
    Route an event to its handler.

    Returns:
        Tuple of (outcome, detail) for the audit trail
    """
    match event_type:
        case t if t in ORDER_CREATING_EVENTS:
            session_id = str(session.get("id") or "")
            order, created = materialize_order(session_id, session=session)
            verb = "created" if created else "already existed"
            return WebhookOutcome.PROCESSED, f"Order {order.pk} {verb}"
        case "checkout.session.async_payment_failed":
            order = record_async_payment_failure(session)
            if order is None:
                return WebhookOutcome.PROCESSED, "No order for session"
            return WebhookOutcome.PROCESSED, f"Order {order.pk} flagged for review"
        case _:
            logger.debug("Ignoring unhandled Stripe event: %s", event_type)
            return WebhookOutcome.IGNORED, ""


def _record_event(
    event_id: str, event_type: str, session_id: str, outcome: str, detail: str
) -> None:
    """Write the audit record. Never fails the webhook response."""
    if not event_id:
        return
    try:
        StripeWebhookEvent.objects.update_or_create(
            event_id=event_id,
            defaults={
                "event_type": event_type,
                "session_id": session_id,
                "outcome": outcome,
                "detail": detail,
            },
        )
    except IntegrityError:
        # Concurrent delivery of the same event recorded it first
        logger.info("Stripe event %s recorded concurrently", event_id)
