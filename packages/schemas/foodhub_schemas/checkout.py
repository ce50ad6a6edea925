"""Checkout schemas - the contract between session creation and order creation.

Everything needed to create an Order is written into the Stripe Checkout
Session metadata when the session is created and read back, unchanged, once
the session is paid. Stripe metadata is a flat string map limited to 50 keys
of up to 500 characters each, so long values are split across continuation
keys (``cartItems``, ``cartItems_1``, ...).
"""

import json
from collections.abc import Mapping
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

METADATA_VALUE_LIMIT = 500
METADATA_KEY_LIMIT = 50


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Enums
# =============================================================================


class SessionPaymentStatus(str, Enum):
    """Payment status reported by Stripe for a Checkout Session."""

    PAID = "paid"
    UNPAID = "unpaid"
    NO_PAYMENT_REQUIRED = "no_payment_required"


# =============================================================================
# Request payloads
# =============================================================================


class CartItem(CamelModel):
    """A cart line as submitted by the client.

    Only ``menu_id`` and ``quantity`` are trusted. Name, image and price are
    echoed by the client for display and replaced with catalog values.
    """

    menu_id: int
    name: str = ""
    image: str = ""
    price: Decimal = Decimal("0")
    quantity: int = Field(..., ge=1, le=99)


class DeliveryDetails(CamelModel):
    """Where and to whom the order is delivered."""

    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    contact: str = Field(..., min_length=1, max_length=20)
    address: str = Field(..., min_length=1, max_length=500)
    city: str = Field(..., min_length=1, max_length=100)
    country: str = Field(..., min_length=1, max_length=100)


class CheckoutSessionRequest(CamelModel):
    """Request body for POST /api/payment/create-checkout-session."""

    cart_items: list[CartItem] = Field(..., min_length=1)
    delivery_details: DeliveryDetails
    restaurant_id: int


class VerifyOrderRequest(CamelModel):
    """Request body for POST /api/payment/verify-order."""

    session_id: str = Field(..., min_length=1)


# =============================================================================
# Session metadata
# =============================================================================


class CartItemSnapshot(CamelModel):
    """A cart line frozen at checkout time with the price that was charged."""

    menu_id: int
    name: str
    image: str = ""
    price: Decimal
    quantity: int = Field(..., ge=1)


class CheckoutMetadata(CamelModel):
    """Order-defining data carried by the Checkout Session metadata."""

    user_id: int
    restaurant_id: int
    delivery_details: DeliveryDetails
    cart_items: list[CartItemSnapshot] = Field(..., min_length=1)

    def to_stripe_metadata(self) -> dict[str, str]:
        """
        Serialize to a Stripe metadata map.

        Raises:
            ValueError: If the data needs more keys than Stripe allows.
        """
        delivery = self.delivery_details.model_dump_json(by_alias=True)
        cart = json.dumps(
            [item.model_dump(mode="json", by_alias=True) for item in self.cart_items],
            separators=(",", ":"),
        )

        metadata = {
            "userId": str(self.user_id),
            "restaurantId": str(self.restaurant_id),
        }
        metadata.update(_pack("deliveryDetails", delivery))
        metadata.update(_pack("cartItems", cart))

        if len(metadata) > METADATA_KEY_LIMIT:
            msg = f"Checkout metadata needs {len(metadata)} keys (limit {METADATA_KEY_LIMIT})"
            raise ValueError(msg)
        return metadata

    @classmethod
    def from_stripe_metadata(cls, metadata: Mapping[str, str]) -> "CheckoutMetadata":
        """
        Parse a Stripe metadata map written by ``to_stripe_metadata``.

        Raises:
            ValueError: If a field is missing or unparsable (pydantic's
                ValidationError is a ValueError).
        """
        delivery = _unpack(metadata, "deliveryDetails")
        cart = _unpack(metadata, "cartItems")
        if delivery is None or cart is None:
            raise ValueError("deliveryDetails and cartItems are required")

        return cls.model_validate(
            {
                "userId": metadata.get("userId"),
                "restaurantId": metadata.get("restaurantId"),
                "deliveryDetails": json.loads(delivery),
                "cartItems": json.loads(cart),
            }
        )


def _pack(key: str, value: str) -> dict[str, str]:
    """Split a value across ``key``, ``key_1``, ``key_2``... in 500-char chunks."""
    chunks = [
        value[i : i + METADATA_VALUE_LIMIT]
        for i in range(0, len(value), METADATA_VALUE_LIMIT)
    ] or [""]
    packed = {key: chunks[0]}
    for index, chunk in enumerate(chunks[1:], start=1):
        packed[f"{key}_{index}"] = chunk
    return packed


def _unpack(metadata: Mapping[str, str], key: str) -> str | None:
    """Re-join a value written by ``_pack``. Returns None if the key is absent."""
    if not metadata.get(key):
        return None
    parts = [metadata[key]]
    index = 1
    while f"{key}_{index}" in metadata:
        parts.append(metadata[f"{key}_{index}"])
        index += 1
    return "".join(parts)


# =============================================================================
# Provider session
# =============================================================================


class ProviderCheckoutSession(BaseModel):
    """The fields of a Stripe Checkout Session this system reads."""

    model_config = ConfigDict(extra="ignore")

    id: str
    payment_status: str
    amount_total: int | None = None
    currency: str | None = None
    url: str | None = None
    metadata: dict[str, str] = Field(default_factory=dict)

    @property
    def is_paid(self) -> bool:
        """Check if Stripe reports the money as captured."""
        return self.payment_status == SessionPaymentStatus.PAID.value
