"""
Restaurant models - Restaurants, menu items, options, and orders.

Prices on catalog models are decimals in major currency units. Orders store
the amount Stripe actually charged, in minor units, plus JSON snapshots of
the cart and delivery details taken at checkout time.
"""

from django.conf import settings
from django.db import models
from django.db.models import Q

from apps.web.core.managers import UserScopedManager
from apps.web.core.models import TimeStampedModel


class RestaurantManager(UserScopedManager):
    """Restaurant manager scoped by owner."""

    user_field = "owner"

    def active_for(self, user: object) -> "Restaurant | None":
        """Return the owner's active restaurant, if any."""
        return self.filter(owner=user, is_active=True).first()


class Restaurant(TimeStampedModel):
    """
    A restaurant listed on the marketplace.

    An owner has at most one active restaurant (enforced by a partial
    unique constraint).
    """

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="restaurants",
    )
    restaurant_name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    address = models.CharField(max_length=500)
    city = models.CharField(max_length=100)
    country = models.CharField(max_length=100)
    delivery_time = models.PositiveIntegerField(
        default=30,
        help_text="Estimated delivery time in minutes",
    )
    cuisines = models.JSONField(
        default=list,
        blank=True,
        help_text='List of cuisines (e.g., ["italian", "pizza"])',
    )
    image_url = models.URLField(blank=True)
    is_active = models.BooleanField(default=True)

    objects = RestaurantManager()

    class Meta:
        ordering = ["restaurant_name"]
        constraints = [
            models.UniqueConstraint(
                fields=["owner"],
                condition=Q(is_active=True),
                name="unique_active_restaurant_per_owner",
            ),
        ]
        indexes = [
            models.Index(fields=["city", "is_active"]),
        ]

    def __str__(self) -> str:
        return self.restaurant_name


class MenuItem(TimeStampedModel):
    """
    Individual menu item.

    The price here is authoritative for checkout; client-sent prices are
    never charged.
    """

    restaurant = models.ForeignKey(
        Restaurant,
        on_delete=models.CASCADE,
        related_name="menu_items",
    )
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    category = models.CharField(max_length=100, blank=True)
    image_url = models.URLField(blank=True)

    # Unavailable items can't be checked out
    is_available = models.BooleanField(default=True)

    class Meta:
        ordering = ["category", "name"]
        indexes = [
            models.Index(fields=["restaurant", "is_available"]),
        ]

    def __str__(self) -> str:
        return self.name


class Option(TimeStampedModel):
    """
    Add-on option for a menu item (e.g., "Extra cheese").
    """

    menu_item = models.ForeignKey(
        MenuItem,
        on_delete=models.CASCADE,
        related_name="options",
    )
    name = models.CharField(max_length=200)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=0,
    )
    is_required = models.BooleanField(default=False)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        if self.price:
            return f"{self.name} (+{self.price})"
        return self.name


class OrderStatus(models.TextChoices):
    """Order fulfillment status."""

    PENDING = "pending", "Pending"
    CONFIRMED = "confirmed", "Confirmed"
    PREPARING = "preparing", "Preparing"
    OUT_FOR_DELIVERY = "outfordelivery", "Out for delivery"
    DELIVERED = "delivered", "Delivered"


# Lifecycle order, used to spot backward moves
ORDER_STATUS_SEQUENCE = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
]


class PaymentStatus(models.TextChoices):
    """Payment status of an order."""

    PENDING = "pending", "Pending"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"


class Order(TimeStampedModel):
    """
    Customer order, created once per paid Stripe Checkout Session.

    stripe_session_id is unique: it is the idempotency key that keeps the
    webhook and the verify-on-return call from creating two orders.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    restaurant = models.ForeignKey(
        Restaurant,
        on_delete=models.PROTECT,
        related_name="orders",
    )

    stripe_session_id = models.CharField(
        max_length=255,
        help_text="Stripe Checkout Session ID (cs_xxx)",
    )

    # Snapshots taken at checkout; never re-derived from the catalog
    cart_items = models.JSONField(
        default=list,
        help_text="Cart lines: menuId, name, image, price, quantity",
    )
    delivery_details = models.JSONField(
        default=dict,
        help_text="name, email, contact, address, city, country",
    )

    # Amount captured by Stripe, in minor units (not recomputed from cart_items)
    total_amount = models.PositiveIntegerField()
    currency = models.CharField(max_length=3, blank=True)

    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )

    # Financial discrepancies are flagged, never deleted
    needs_review = models.BooleanField(default=False)
    review_reason = models.TextField(blank=True)

    objects = UserScopedManager()

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["stripe_session_id"],
                name="unique_order_per_checkout_session",
            ),
        ]
        indexes = [
            models.Index(fields=["user", "created_at"]),
            models.Index(fields=["restaurant", "status"]),
            models.Index(fields=["needs_review"]),
        ]

    def __str__(self) -> str:
        return f"Order {self.pk} - {self.delivery_details.get('name', self.user)}"
