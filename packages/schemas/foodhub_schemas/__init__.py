"""Food Hub Schemas - Pydantic models for data contracts."""

from foodhub_schemas.checkout import (
    METADATA_KEY_LIMIT,
    METADATA_VALUE_LIMIT,
    CamelModel,
    CartItem,
    CartItemSnapshot,
    CheckoutMetadata,
    CheckoutSessionRequest,
    DeliveryDetails,
    ProviderCheckoutSession,
    SessionPaymentStatus,
    VerifyOrderRequest,
)

__all__ = [
    "METADATA_KEY_LIMIT",
    "METADATA_VALUE_LIMIT",
    "CamelModel",
    # Requests
    "CartItem",
    "CheckoutSessionRequest",
    "DeliveryDetails",
    "VerifyOrderRequest",
    # Session
    "CartItemSnapshot",
    "CheckoutMetadata",
    "ProviderCheckoutSession",
    "SessionPaymentStatus",
]
