"""
Order materialization - turns a paid Checkout Session into exactly one Order.

Two independent triggers call materialize_order() for the same session:
1. The Stripe webhook (checkout.session.completed)
2. The verify-on-return call made by the frontend success page

Either may arrive first, both may arrive, or only one. The existing-order
lookup collapses repeats into a no-op, and the unique constraint on
Order.stripe_session_id resolves concurrent inserts: the loser re-fetches
and returns the winner's order.
"""

import logging
from typing import Any

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from foodhub_schemas import CheckoutMetadata, ProviderCheckoutSession

from apps.web.payments.exceptions import CorruptSessionError, PaymentNotCompletedError
from apps.web.payments.services import retrieve_checkout_session, to_provider_session
from apps.web.restaurant.models import Order, OrderStatus, PaymentStatus, Restaurant

logger = logging.getLogger(__name__)


def get_order_for_session(session_id: str) -> Order | None:
    """Return the order created for a checkout session, if any."""
    return Order.objects.filter(stripe_session_id=session_id).first()


def _parse_session(session: Any) -> ProviderCheckoutSession:
    try:
        return to_provider_session(session)
    except ValueError as e:
        raise CorruptSessionError(f"Unreadable checkout session: {e}") from e


def _parse_metadata(provider_session: ProviderCheckoutSession) -> CheckoutMetadata:
    """
    Read order data from session metadata.

    Raises:
        CorruptSessionError: If the metadata can't produce a valid order
    """
    session_id = provider_session.id
    try:
        metadata = CheckoutMetadata.from_stripe_metadata(provider_session.metadata)
    except ValueError as e:
        raise CorruptSessionError(
            f"Invalid order metadata: {e}", session_id=session_id
        ) from e

    if provider_session.amount_total is None:
        raise CorruptSessionError("Session has no amount_total", session_id=session_id)

    if not get_user_model().objects.filter(pk=metadata.user_id).exists():
        raise CorruptSessionError(
            f"User {metadata.user_id} not found", session_id=session_id
        )
    if not Restaurant.objects.filter(pk=metadata.restaurant_id).exists():
        raise CorruptSessionError(
            f"Restaurant {metadata.restaurant_id} not found", session_id=session_id
        )

    return metadata


def materialize_order(session_id: str, session: Any = None) -> tuple[Order, bool]:
    """
    Create the Order for a paid checkout session, or return the existing one.

    Args:
        session_id: Stripe Checkout Session ID (the idempotency key)
        session: An already verified session object (e.g., from a signed
            webhook). Fetched from Stripe when omitted.

    Returns:
        Tuple of (order, created)

    Raises:
        PaymentNotCompletedError: If Stripe does not report the session as paid
        CorruptSessionError: If the paid session's metadata is unusable
        PaymentError: If the session can't be fetched from Stripe
    """
    # Idempotency guard: must run before any provider call or write
    existing = get_order_for_session(session_id)
    if existing is not None:
        logger.info(
            "Order already exists for session %s: order_id=%s",
            session_id,
            existing.pk,
        )
        return existing, False

    if session is None:
        session = retrieve_checkout_session(session_id)
    provider_session = _parse_session(session)

    if provider_session.id != session_id:
        raise CorruptSessionError(
            f"Session id mismatch: {provider_session.id}", session_id=session_id
        )

    if not provider_session.is_paid:
        raise PaymentNotCompletedError(
            "Payment not completed",
            session_id=session_id,
            payment_status=provider_session.payment_status,
        )

    try:
        metadata = _parse_metadata(provider_session)
    except CorruptSessionError as e:
        logger.error(
            "Paid checkout session %s has corrupt order data: %s",
            session_id,
            e.message,
        )
        raise

    try:
        with transaction.atomic():
            order = Order.objects.create(
                user_id=metadata.user_id,
                restaurant_id=metadata.restaurant_id,
                stripe_session_id=session_id,
                cart_items=[
                    item.model_dump(mode="json", by_alias=True)
                    for item in metadata.cart_items
                ],
                delivery_details=metadata.delivery_details.model_dump(
                    mode="json", by_alias=True
                ),
                total_amount=provider_session.amount_total,
                currency=provider_session.currency or "",
                status=OrderStatus.PENDING,
                payment_status=PaymentStatus.COMPLETED,
            )
    except IntegrityError:
        # Another trigger inserted the order between our lookup and insert
        existing = get_order_for_session(session_id)
        if existing is None:
            raise
        logger.info(
            "Lost order creation race for session %s, using order_id=%s",
            session_id,
            existing.pk,
        )
        return existing, False

    logger.info(
        "Order created for session %s: order_id=%s user=%s restaurant=%s total=%s",
        session_id,
        order.pk,
        order.user_id,
        order.restaurant_id,
        order.total_amount,
    )
    return order, True


def record_async_payment_failure(session: Any) -> Order | None:
    """
    Handle a payment that failed after checkout completed.

    Orders are only created for paid sessions, so normally there is nothing
    to update. If an order does exist it is never deleted: it is marked as
    failed and flagged for manual review.

    Returns:
        The flagged order, or None if no order exists for the session
    """
    session_id = _parse_session(session).id

    order = get_order_for_session(session_id)
    if order is None:
        logger.info("Async payment failed for session %s (no order)", session_id)
        return None

    if order.payment_status == PaymentStatus.FAILED and order.needs_review:
        logger.info(
            "Order %s already flagged for failed payment, skipping", order.pk
        )
        return order

    order.payment_status = PaymentStatus.FAILED
    order.needs_review = True
    order.review_reason = (
        f"Stripe reported an asynchronous payment failure for session {session_id} "
        "after the order was created."
    )
    order.save(
        update_fields=["payment_status", "needs_review", "review_reason", "updated_at"]
    )

    logger.error(
        "Payment failed for existing order %s (session %s) - flagged for review",
        order.pk,
        session_id,
    )
    return order
