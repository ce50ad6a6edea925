"""Admin registration for restaurant models."""

from django.contrib import admin

from apps.web.restaurant.models import MenuItem, Option, Order, Restaurant


class MenuItemInline(admin.TabularInline):
    """Inline for menu items within a restaurant."""

    model = MenuItem
    extra = 0
    fields = ["name", "category", "price", "is_available"]


class OptionInline(admin.TabularInline):
    """Inline for options within a menu item."""

    model = Option
    extra = 0
    fields = ["name", "price", "is_required"]


@admin.register(Restaurant)
class RestaurantAdmin(admin.ModelAdmin):
    """Admin for restaurants."""

    list_display = ["restaurant_name", "owner", "city", "country", "is_active"]
    list_filter = ["is_active", "country", "city"]
    search_fields = ["restaurant_name", "owner__username", "owner__email"]
    inlines = [MenuItemInline]
    readonly_fields = ["created_at", "updated_at"]

    fieldsets = [
        (None, {"fields": ["owner", "restaurant_name", "description", "is_active"]}),
        ("Location", {"fields": ["address", "city", "country"]}),
        ("Display", {"fields": ["cuisines", "delivery_time", "image_url"]}),
        ("Timestamps", {"fields": ["created_at", "updated_at"]}),
    ]


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    """Admin for menu items."""

    list_display = ["name", "restaurant", "category", "price", "is_available"]
    list_filter = ["is_available", "restaurant"]
    search_fields = ["name", "description"]
    inlines = [OptionInline]
    readonly_fields = ["created_at", "updated_at"]


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Admin for orders.

    Orders mirror what Stripe charged, so payment fields are read-only.
    Use the needs_review filter to find orders with payment discrepancies.
    """

    list_display = [
        "pk",
        "user",
        "restaurant",
        "status",
        "total_amount",
        "currency",
        "payment_status",
        "needs_review",
        "created_at",
    ]
    list_filter = ["status", "payment_status", "needs_review", "restaurant"]
    search_fields = ["stripe_session_id", "user__username", "user__email"]
    readonly_fields = [
        "stripe_session_id",
        "cart_items",
        "delivery_details",
        "total_amount",
        "currency",
        "payment_status",
        "created_at",
        "updated_at",
    ]
    date_hierarchy = "created_at"

    fieldsets = [
        (None, {"fields": ["user", "restaurant", "status"]}),
        (
            "Order Details",
            {"fields": ["cart_items", "delivery_details"]},
        ),
        (
            "Payment",
            {
                "fields": [
                    "stripe_session_id",
                    "total_amount",
                    "currency",
                    "payment_status",
                ]
            },
        ),
        ("Review", {"fields": ["needs_review", "review_reason"]}),
        ("Timestamps", {"fields": ["created_at", "updated_at"]}),
    ]
