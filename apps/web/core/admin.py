"""Admin registrations for core models."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):  # type: ignore[type-arg]
    list_display = ["username", "email", "contact", "city", "is_staff", "is_active"]
    list_filter = ["is_staff", "is_active", "country"]
    search_fields = ["username", "email", "contact"]
    fieldsets = (
        *BaseUserAdmin.fieldsets,  # type: ignore[misc]
        ("Contact Info", {"fields": ("contact", "address", "city", "country")}),
    )
    add_fieldsets = (
        *BaseUserAdmin.add_fieldsets,
        ("Contact Info", {"fields": ("contact", "address", "city", "country")}),
    )
