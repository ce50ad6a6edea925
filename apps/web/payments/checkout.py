"""
Checkout session builder - turns a cart into a Stripe Checkout Session.

Handles:
1. Resolving every cart line against the restaurant's current menu
2. Building Stripe line items from catalog prices (client prices are ignored)
3. Embedding everything needed to create the order later in session metadata

No Order is created here. Orders are created by payments.reconciliation once
Stripe reports the session as paid.
"""

import logging
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from django.conf import settings

from foodhub_schemas import (
    CartItem,
    CartItemSnapshot,
    CheckoutMetadata,
    CheckoutSessionRequest,
    ProviderCheckoutSession,
)

from apps.web.core.models import User
from apps.web.payments.exceptions import (
    EmptyMenuError,
    InvalidCartError,
    InvalidMenuItemError,
    RestaurantNotFoundError,
)
from apps.web.payments.services import (
    PaymentError,
    create_checkout_session as create_stripe_session,
    to_provider_session,
)
from apps.web.restaurant.models import MenuItem, Restaurant

logger = logging.getLogger(__name__)

# Stripe substitutes the real session id into this placeholder on redirect
SESSION_ID_PLACEHOLDER = "{CHECKOUT_SESSION_ID}"

# https://docs.stripe.com/currencies#zero-decimal
ZERO_DECIMAL_CURRENCIES = frozenset(
    {
        "bif", "clp", "djf", "gnf", "jpy", "kmf", "krw", "mga",
        "pyg", "rwf", "ugx", "vnd", "vuv", "xaf", "xof", "xpf",
    }
)
THREE_DECIMAL_CURRENCIES = frozenset({"bhd", "jod", "kwd", "omr", "tnd"})


def currency_exponent(currency: str) -> int:
    """Number of minor-unit digits Stripe uses for ``currency``."""
    currency = currency.lower()
    if currency in ZERO_DECIMAL_CURRENCIES:
        return 0
    if currency in THREE_DECIMAL_CURRENCIES:
        return 3
    return 2


def to_minor_units(amount: Decimal, currency: str = "inr") -> int:
    """Convert a major-unit decimal price to Stripe's integer minor units."""
    scaled = amount.scaleb(currency_exponent(currency))
    return int(scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def success_url() -> str:
    """Frontend page the customer returns to after paying."""
    return (
        f"{settings.FRONTEND_URL}/checkout/success?session_id={SESSION_ID_PLACEHOLDER}"
    )


def cancel_url() -> str:
    """Frontend page the customer returns to after abandoning checkout."""
    return f"{settings.FRONTEND_URL}/checkout/cancel"


def resolve_cart(
    cart_items: list[CartItem], menu_items: Iterable[MenuItem]
) -> list[tuple[MenuItem, CartItem]]:
    """
    Match each cart line to a menu item of the restaurant.

    Fails on the first line that can't be ordered so that no partial
    session is ever created.

    Raises:
        InvalidMenuItemError: If a line references an unknown or unavailable item
    """
    menu = {item.pk: item for item in menu_items}
    resolved: list[tuple[MenuItem, CartItem]] = []

    for cart_item in cart_items:
        menu_item = menu.get(cart_item.menu_id)
        if menu_item is None:
            raise InvalidMenuItemError(
                f"Menu item id not found: {cart_item.menu_id}",
                menu_id=cart_item.menu_id,
            )
        if not menu_item.is_available:
            raise InvalidMenuItemError(
                f"'{menu_item.name}' is currently unavailable",
                menu_id=cart_item.menu_id,
            )
        resolved.append((menu_item, cart_item))

    return resolved


def build_line_items(
    resolved: list[tuple[MenuItem, CartItem]], currency: str
) -> list[dict[str, Any]]:
    """Build Stripe line items using catalog name, image and price."""
    line_items: list[dict[str, Any]] = []
    for menu_item, cart_item in resolved:
        product_data: dict[str, Any] = {"name": menu_item.name}
        if menu_item.image_url:
            product_data["images"] = [menu_item.image_url]

        line_items.append(
            {
                "price_data": {
                    "currency": currency,
                    "product_data": product_data,
                    "unit_amount": to_minor_units(menu_item.price, currency),
                },
                "quantity": cart_item.quantity,
            }
        )
    return line_items


def build_cart_snapshot(
    resolved: list[tuple[MenuItem, CartItem]],
) -> list[CartItemSnapshot]:
    """Snapshot the submitted lines with the values that are being charged."""
    return [
        CartItemSnapshot(
            menu_id=menu_item.pk,
            name=menu_item.name,
            image=menu_item.image_url,
            price=menu_item.price,
            quantity=cart_item.quantity,
        )
        for menu_item, cart_item in resolved
    ]


def create_checkout_session(
    user: User, checkout_request: CheckoutSessionRequest
) -> ProviderCheckoutSession:
    """
    Create a Stripe Checkout Session for a cart.

    Args:
        user: The authenticated customer
        checkout_request: Validated cart, delivery details and restaurant id

    Returns:
        ProviderCheckoutSession with id, url and payment_status

    Raises:
        RestaurantNotFoundError: If the restaurant doesn't exist or is inactive
        EmptyMenuError: If the restaurant has no menu items
        InvalidCartError: If a cart line can't be ordered or the cart is too large
        PaymentError: If Stripe rejects the request or is unreachable
    """
    restaurant = (
        Restaurant.objects.filter(pk=checkout_request.restaurant_id, is_active=True)
        .prefetch_related("menu_items")
        .first()
    )
    if restaurant is None:
        raise RestaurantNotFoundError("Restaurant not found.")

    menu_items = list(restaurant.menu_items.all())
    if not menu_items:
        raise EmptyMenuError("Restaurant has no menu items.")

    try:
        resolved = resolve_cart(checkout_request.cart_items, menu_items)
    except InvalidMenuItemError as e:
        logger.warning(
            "Rejected checkout for restaurant %s: %s", restaurant.pk, e.message
        )
        raise

    metadata = CheckoutMetadata(
        user_id=user.pk,
        restaurant_id=restaurant.pk,
        delivery_details=checkout_request.delivery_details,
        cart_items=build_cart_snapshot(resolved),
    )
    try:
        stripe_metadata = metadata.to_stripe_metadata()
    except ValueError as e:
        raise InvalidCartError("Cart is too large to check out.") from e

    session = create_stripe_session(
        line_items=build_line_items(resolved, settings.STRIPE_CURRENCY),
        metadata=stripe_metadata,
        success_url=success_url(),
        cancel_url=cancel_url(),
        allowed_countries=settings.STRIPE_ALLOWED_COUNTRIES,
        customer_email=checkout_request.delivery_details.email,
    )

    try:
        provider_session = to_provider_session(session)
    except ValueError as e:
        raise PaymentError("Unexpected checkout session from Stripe") from e
    if not provider_session.url:
        raise PaymentError("Error while creating session")

    logger.info(
        "Created checkout session %s for user %s at restaurant %s (%d items)",
        provider_session.id,
        user.pk,
        restaurant.pk,
        len(resolved),
    )
    return provider_session
