"""
Pytest configuration for Django app tests.
"""

from decimal import Decimal

from django.core.cache import cache
from django.test import Client as DjangoClient

import pytest

from apps.web.core.models import User
from apps.web.restaurant.models import MenuItem, Restaurant
from apps.web.restaurant.tests.factories import (
    MenuItemFactory,
    RestaurantFactory,
    UserFactory,
)


@pytest.fixture(autouse=True)
def clear_cache():
    """Idempotency responses live in the cache; start each test empty."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def user(db) -> User:
    """Create a test customer."""
    return UserFactory(username="testuser", email="testuser@example.com")


@pytest.fixture
def other_user(db) -> User:
    """Create a second customer."""
    return UserFactory(username="otheruser", email="otheruser@example.com")


@pytest.fixture
def owner(db) -> User:
    """Create a restaurant owner."""
    return UserFactory(username="owner", email="owner@example.com")


@pytest.fixture
def restaurant(owner: User) -> Restaurant:
    """Create an active restaurant owned by ``owner``."""
    return RestaurantFactory(owner=owner, restaurant_name="Spice Route")


@pytest.fixture
def menu_items(restaurant: Restaurant) -> list[MenuItem]:
    """Two orderable items on the restaurant's menu."""
    return [
        MenuItemFactory(
            restaurant=restaurant, name="Paneer Tikka", price=Decimal("249.00")
        ),
        MenuItemFactory(
            restaurant=restaurant, name="Garlic Naan", price=Decimal("59.50")
        ),
    ]


@pytest.fixture
def api_client() -> DjangoClient:
    """Anonymous Django test client for API requests."""
    return DjangoClient()


@pytest.fixture
def auth_client(user: User) -> DjangoClient:
    """Django test client logged in as ``user``."""
    client = DjangoClient()
    client.force_login(user)
    return client


@pytest.fixture
def owner_client(owner: User) -> DjangoClient:
    """Django test client logged in as the restaurant owner."""
    client = DjangoClient()
    client.force_login(owner)
    return client
