"""Admin registration for payment models."""

from django.contrib import admin

from apps.web.payments.models import StripeWebhookEvent


@admin.register(StripeWebhookEvent)
class StripeWebhookEventAdmin(admin.ModelAdmin):
    """Admin for Stripe webhook events (read-only audit trail)."""

    list_display = ["event_id", "event_type", "session_id", "outcome", "created_at"]
    list_filter = ["outcome", "event_type"]
    search_fields = ["event_id", "session_id"]
    readonly_fields = [
        "event_id",
        "event_type",
        "session_id",
        "outcome",
        "detail",
        "created_at",
        "updated_at",
    ]
    date_hierarchy = "created_at"
