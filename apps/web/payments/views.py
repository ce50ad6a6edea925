"""
Payment API views - Checkout session creation and verify-on-return.

Flow:
1. Frontend posts the cart to create-checkout-session and redirects to Stripe
2. Customer pays on Stripe's hosted page
3. Stripe redirects back with ?session_id=cs_xxx; the success page calls
   verify-order, which creates the order if the webhook hasn't already
"""

import json
import logging
import uuid

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from pydantic import ValidationError as PydanticValidationError

from foodhub_schemas import CheckoutSessionRequest, VerifyOrderRequest

from apps.web.core.decorators import idempotency_key_supported, login_required_json
from apps.web.core.responses import (
    error_response,
    json_response,
    validation_error_response,
)
from apps.web.payments.checkout import create_checkout_session as build_session
from apps.web.payments.exceptions import (
    CorruptSessionError,
    EmptyMenuError,
    InvalidCartError,
    PaymentNotCompletedError,
    RestaurantNotFoundError,
)
from apps.web.payments.reconciliation import materialize_order
from apps.web.payments.services import PaymentError
from apps.web.restaurant.serializers import serialize_order

logger = logging.getLogger(__name__)


@csrf_exempt
@require_POST
@login_required_json
@idempotency_key_supported
def create_checkout_session(request: HttpRequest) -> JsonResponse:
    """
    POST /api/payment/create-checkout-session

    Create a Stripe Checkout Session for the cart. No order is created here.

    Request body: CheckoutSessionRequest schema
    Response: {session: {id, url, payment_status}} (200)
    """
    try:
        body = json.loads(request.body)
        checkout_request = CheckoutSessionRequest.model_validate(body)
    except json.JSONDecodeError:
        return error_response("Invalid JSON in request body", status=400)
    except PydanticValidationError as e:
        return validation_error_response(e)

    try:
        session = build_session(request.user, checkout_request)
    except RestaurantNotFoundError as e:
        return error_response(e.message, status=404)
    except (EmptyMenuError, InvalidCartError) as e:
        return error_response(e.message, status=400)
    except PaymentError as e:
        logger.error("Stripe checkout session creation failed: %s", e.message)
        return error_response("Error while creating session", status=502)

    return json_response(
        {
            "session": {
                "id": session.id,
                "url": session.url,
                "payment_status": session.payment_status,
            }
        }
    )


@csrf_exempt
@require_POST
@login_required_json
def verify_order(request: HttpRequest) -> JsonResponse:
    """
    POST /api/payment/verify-order

    Confirm payment with Stripe and create the order if it doesn't exist yet.
    Safe to call any number of times for the same session.

    Request body: {sessionId}
    Response: {success, message, order} (200)
    """
    try:
        body = json.loads(request.body)
        verify_request = VerifyOrderRequest.model_validate(body)
    except json.JSONDecodeError:
        return error_response("Invalid JSON in request body", status=400)
    except PydanticValidationError:
        return error_response("Session ID is required", status=400)

    session_id = verify_request.session_id

    try:
        order, created = materialize_order(session_id)
    except PaymentNotCompletedError as e:
        return error_response(e.message, status=400)
    except CorruptSessionError:
        reference = uuid.uuid4().hex[:12]
        logger.error(
            "Verify failed on corrupt session %s (support reference %s)",
            session_id,
            reference,
        )
        return error_response(
            "Your payment was received but the order could not be created. "
            f"Please contact support with reference {reference}.",
            status=422,
        )
    except PaymentError as e:
        if e.is_not_found:
            return error_response("Checkout session not found", status=404)
        logger.error("Stripe session lookup failed for %s: %s", session_id, e.message)
        return error_response("Payment provider unavailable, try again", status=502)

    if order.user_id != request.user.pk:
        logger.warning(
            "User %s tried to verify session %s owned by user %s",
            request.user.pk,
            session_id,
            order.user_id,
        )
        return error_response("This order belongs to another account", status=403)

    message = "Order created successfully" if created else "Order already exists"
    return json_response(
        {"success": True, "message": message, "order": serialize_order(order)}
    )
