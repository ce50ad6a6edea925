"""
Pydantic schemas for restaurant and order API responses.

These schemas define the public API contract. Keys are camelCase to match
the frontend.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import Field

from foodhub_schemas import CamelModel

from apps.web.restaurant.models import MenuItem, Order, OrderStatus, Restaurant

# =============================================================================
# Restaurant and menu
# =============================================================================


class OptionSchema(CamelModel):
    """An add-on option for a menu item."""

    id: int
    name: str
    price: Decimal
    is_required: bool


class MenuItemSchema(CamelModel):
    """A menu item as shown to customers building a cart."""

    id: int
    name: str
    description: str
    price: Decimal
    category: str
    image: str
    options: list[OptionSchema] = Field(default_factory=list)


class RestaurantSchema(CamelModel):
    """Public restaurant detail with its orderable menu."""

    id: int
    restaurant_name: str
    description: str
    address: str
    city: str
    country: str
    delivery_time: int
    cuisines: list[str]
    image: str
    menus: list[MenuItemSchema] = Field(default_factory=list)


# =============================================================================
# Orders
# =============================================================================


class OrderSchema(CamelModel):
    """An order as returned by the order and verify endpoints."""

    id: int
    user_id: int
    restaurant_id: int
    cart_items: list[dict[str, Any]]
    delivery_details: dict[str, Any]
    total_amount: int
    currency: str
    status: str
    payment_status: str
    stripe_session_id: str
    created_at: datetime
    updated_at: datetime


class OrderStatusUpdateRequest(CamelModel):
    """Request body for PATCH /api/v1/restaurant/order/{order_id}/status."""

    status: OrderStatus


# =============================================================================
# Serialization helpers
# =============================================================================


def serialize_menu_item(item: MenuItem) -> MenuItemSchema:
    """Serialize a MenuItem with its options."""
    return MenuItemSchema(
        id=item.pk,
        name=item.name,
        description=item.description,
        price=item.price,
        category=item.category,
        image=item.image_url,
        options=[
            OptionSchema(
                id=option.pk,
                name=option.name,
                price=option.price,
                is_required=option.is_required,
            )
            for option in item.options.all()
        ],
    )


def serialize_restaurant(restaurant: Restaurant) -> RestaurantSchema:
    """Serialize a Restaurant with its available menu items."""
    return RestaurantSchema(
        id=restaurant.pk,
        restaurant_name=restaurant.restaurant_name,
        description=restaurant.description,
        address=restaurant.address,
        city=restaurant.city,
        country=restaurant.country,
        delivery_time=restaurant.delivery_time,
        cuisines=restaurant.cuisines,
        image=restaurant.image_url,
        menus=[
            serialize_menu_item(item)
            for item in restaurant.menu_items.all()
            if item.is_available
        ],
    )


def serialize_order(order: Order) -> dict[str, Any]:
    """Serialize an Order to its camelCase JSON representation."""
    return OrderSchema(
        id=order.pk,
        user_id=order.user_id,
        restaurant_id=order.restaurant_id,
        cart_items=order.cart_items,
        delivery_details=order.delivery_details,
        total_amount=order.total_amount,
        currency=order.currency,
        status=order.status,
        payment_status=order.payment_status,
        stripe_session_id=order.stripe_session_id,
        created_at=order.created_at,
        updated_at=order.updated_at,
    ).model_dump(mode="json", by_alias=True)
