"""Stripe webhook models - audit trail for Stripe webhook events."""

from django.db import models

from apps.web.core.models import TimeStampedModel


class WebhookOutcome(models.TextChoices):
    """How a webhook event was handled."""

    PROCESSED = "processed", "Processed"
    IGNORED = "ignored", "Ignored"  # e.g., unhandled event type
    REJECTED = "rejected", "Rejected"  # non-retryable, acknowledged anyway


class StripeWebhookEvent(TimeStampedModel):
    """
    Audit trail for Stripe webhook events.

    Only events that were handled or deemed non-retryable are recorded.
    Events that hit a transient failure are left unrecorded so Stripe's
    retry is processed again.
    """

    event_id = models.CharField(
        max_length=255,
        unique=True,
        help_text="Stripe event ID (evt_xxx)",
    )
    event_type = models.CharField(max_length=100)
    session_id = models.CharField(
        max_length=255,
        blank=True,
        help_text="Checkout Session ID from the event, if any",
    )
    outcome = models.CharField(
        max_length=20,
        choices=WebhookOutcome.choices,
    )
    detail = models.TextField(blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["session_id"]),
            models.Index(fields=["outcome", "created_at"]),
        ]

    def __str__(self) -> str:
        return f"{self.event_type} {self.event_id} ({self.outcome})"
