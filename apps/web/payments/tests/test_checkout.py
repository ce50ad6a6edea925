"""Tests for the checkout session builder."""

from decimal import Decimal
from unittest.mock import patch

import pytest
import stripe

from foodhub_schemas import CheckoutMetadata, CheckoutSessionRequest

from apps.web.payments.checkout import (
    build_line_items,
    create_checkout_session,
    resolve_cart,
    to_minor_units,
)
from apps.web.payments.exceptions import (
    EmptyMenuError,
    InvalidCartError,
    InvalidMenuItemError,
    RestaurantNotFoundError,
)
from apps.web.payments.services import PaymentError
from apps.web.restaurant.tests.factories import MenuItemFactory, RestaurantFactory

STRIPE_CREATE = "apps.web.payments.services.stripe.checkout.Session.create"

DELIVERY = {
    "name": "Asha Rao",
    "email": "asha@example.com",
    "contact": "9876543210",
    "address": "12 MG Road",
    "city": "Bengaluru",
    "country": "India",
}


def _request(restaurant_id: int, cart_items: list[dict]) -> CheckoutSessionRequest:
    return CheckoutSessionRequest.model_validate(
        {
            "cartItems": cart_items,
            "deliveryDetails": DELIVERY,
            "restaurantId": restaurant_id,
        }
    )


def _single(restaurant_id: int, item) -> CheckoutSessionRequest:
    return _request(restaurant_id, [{"menuId": item.pk, "quantity": 1}])


def _stripe_session(**overrides) -> dict:
    session = {
        "id": "cs_test_123",
        "url": "https://checkout.stripe.com/c/pay/cs_test_123",
        "payment_status": "unpaid",
    }
    session.update(overrides)
    return session


class TestToMinorUnits:
    """Tests for to_minor_units."""

    def test_whole_amount(self):
        assert to_minor_units(Decimal("249.00")) == 24900

    def test_fractional_amount(self):
        assert to_minor_units(Decimal("59.50")) == 5950

    def test_rounds_half_up(self):
        assert to_minor_units(Decimal("12.995")) == 1300

    def test_zero_decimal_currency(self):
        assert to_minor_units(Decimal("1200"), "jpy") == 1200

    def test_three_decimal_currency(self):
        assert to_minor_units(Decimal("1.250"), "KWD") == 1250


@pytest.mark.django_db
class TestResolveCart:
    """Tests for resolve_cart."""

    def test_unknown_item_rejected(self, menu_items):
        """A menu id not on the restaurant's menu is rejected."""
        cart = _request(1, [{"menuId": 99999, "quantity": 1}]).cart_items

        with pytest.raises(InvalidMenuItemError) as exc_info:
            resolve_cart(cart, menu_items)

        assert exc_info.value.message == "Menu item id not found: 99999"
        assert exc_info.value.menu_id == 99999

    def test_unavailable_item_rejected(self, restaurant):
        """Items marked unavailable can't be checked out."""
        item = MenuItemFactory(
            restaurant=restaurant, name="Biryani", is_available=False
        )
        cart = _request(1, [{"menuId": item.pk, "quantity": 1}]).cart_items

        with pytest.raises(InvalidMenuItemError) as exc_info:
            resolve_cart(cart, [item])

        assert "Biryani" in exc_info.value.message

    def test_images_only_when_set(self, restaurant):
        """Line items carry an image only if the menu item has one."""
        with_image = MenuItemFactory(restaurant=restaurant)
        without_image = MenuItemFactory(restaurant=restaurant, image_url="")
        cart = _request(
            1,
            [
                {"menuId": with_image.pk, "quantity": 1},
                {"menuId": without_image.pk, "quantity": 1},
            ],
        ).cart_items

        line_items = build_line_items(
            resolve_cart(cart, [with_image, without_image]), "inr"
        )

        assert line_items[0]["price_data"]["product_data"]["images"] == [
            with_image.image_url
        ]
        assert "images" not in line_items[1]["price_data"]["product_data"]


@pytest.mark.django_db
class TestCreateCheckoutSession:
    """Tests for create_checkout_session."""

    @patch(STRIPE_CREATE)
    def test_charges_catalog_price(self, mock_create, user, restaurant, menu_items):
        """Client-sent prices and names are ignored in favour of the catalog."""
        mock_create.return_value = _stripe_session()
        tikka, naan = menu_items

        session = create_checkout_session(
            user,
            _request(
                restaurant.pk,
                [
                    {
                        "menuId": tikka.pk,
                        "name": "Free",
                        "price": "0.01",
                        "quantity": 2,
                    },
                    {"menuId": naan.pk, "quantity": 3},
                ],
            ),
        )

        assert session.id == "cs_test_123"
        assert session.url == "https://checkout.stripe.com/c/pay/cs_test_123"

        kwargs = mock_create.call_args[1]
        line_items = kwargs["line_items"]
        assert line_items[0]["price_data"]["unit_amount"] == 24900
        assert line_items[0]["price_data"]["product_data"]["name"] == "Paneer Tikka"
        assert line_items[0]["quantity"] == 2
        assert line_items[1]["price_data"]["unit_amount"] == 5950
        assert line_items[1]["quantity"] == 3
        assert all(li["price_data"]["currency"] == "inr" for li in line_items)

    @patch(STRIPE_CREATE)
    def test_zero_decimal_currency_not_scaled(
        self, mock_create, user, restaurant, settings
    ):
        """Zero-decimal currencies are charged in whole units."""
        settings.STRIPE_CURRENCY = "jpy"
        mock_create.return_value = _stripe_session()
        item = MenuItemFactory(restaurant=restaurant, price=Decimal("1200"))

        create_checkout_session(user, _single(restaurant.pk, item))

        price_data = mock_create.call_args[1]["line_items"][0]["price_data"]
        assert price_data["currency"] == "jpy"
        assert price_data["unit_amount"] == 1200

    @patch(STRIPE_CREATE)
    def test_session_parameters(
        self, mock_create, user, restaurant, menu_items, settings
    ):
        """Session uses payment mode, redirect urls and the country allow-list."""
        mock_create.return_value = _stripe_session()

        create_checkout_session(user, _single(restaurant.pk, menu_items[0]))

        kwargs = mock_create.call_args[1]
        assert kwargs["mode"] == "payment"
        assert kwargs["success_url"] == (
            f"{settings.FRONTEND_URL}/checkout/success"
            "?session_id={CHECKOUT_SESSION_ID}"
        )
        assert kwargs["cancel_url"] == f"{settings.FRONTEND_URL}/checkout/cancel"
        assert kwargs["shipping_address_collection"] == {
            "allowed_countries": ["GB", "US", "CA", "IN"]
        }
        assert kwargs["customer_email"] == "asha@example.com"

    @patch(STRIPE_CREATE)
    def test_metadata_carries_order_data(
        self, mock_create, user, restaurant, menu_items
    ):
        """Everything needed to create the order is stored in metadata."""
        mock_create.return_value = _stripe_session()
        tikka = menu_items[0]

        create_checkout_session(
            user,
            _request(
                restaurant.pk,
                [{"menuId": tikka.pk, "price": "1.00", "quantity": 2}],
            ),
        )

        metadata = CheckoutMetadata.from_stripe_metadata(
            mock_create.call_args[1]["metadata"]
        )
        assert metadata.user_id == user.pk
        assert metadata.restaurant_id == restaurant.pk
        assert metadata.delivery_details.city == "Bengaluru"
        assert len(metadata.cart_items) == 1
        snapshot = metadata.cart_items[0]
        assert snapshot.menu_id == tikka.pk
        assert snapshot.name == "Paneer Tikka"
        assert snapshot.price == Decimal("249.00")
        assert snapshot.quantity == 2

    @patch(STRIPE_CREATE)
    def test_metadata_values_within_stripe_limits(
        self, mock_create, user, restaurant
    ):
        """Large carts are split across metadata keys of at most 500 chars."""
        mock_create.return_value = _stripe_session()
        items = [
            MenuItemFactory(restaurant=restaurant, name=f"Thali number {n} " * 3)
            for n in range(12)
        ]

        create_checkout_session(
            user,
            _request(
                restaurant.pk, [{"menuId": i.pk, "quantity": 1} for i in items]
            ),
        )

        metadata = mock_create.call_args[1]["metadata"]
        assert "cartItems_1" in metadata
        assert all(len(value) <= 500 for value in metadata.values())
        assert len(metadata) <= 50
        parsed = CheckoutMetadata.from_stripe_metadata(metadata)
        assert [c.menu_id for c in parsed.cart_items] == [i.pk for i in items]

    @patch(STRIPE_CREATE)
    def test_unknown_item_creates_no_session(
        self, mock_create, user, restaurant, menu_items
    ):
        """An unresolvable cart line fails before Stripe is called."""
        with pytest.raises(InvalidMenuItemError):
            create_checkout_session(
                user,
                _request(
                    restaurant.pk,
                    [
                        {"menuId": menu_items[0].pk, "quantity": 1},
                        {"menuId": 99999, "quantity": 1},
                    ],
                ),
            )

        mock_create.assert_not_called()

    @patch(STRIPE_CREATE)
    def test_item_from_other_restaurant_rejected(
        self, mock_create, user, restaurant, menu_items
    ):
        """Items of a different restaurant are not on this menu."""
        foreign = MenuItemFactory(restaurant=RestaurantFactory())

        with pytest.raises(InvalidMenuItemError):
            create_checkout_session(user, _single(restaurant.pk, foreign))

        mock_create.assert_not_called()

    @patch(STRIPE_CREATE)
    def test_unknown_restaurant(self, mock_create, user):
        """A missing restaurant raises RestaurantNotFoundError."""
        with pytest.raises(RestaurantNotFoundError):
            create_checkout_session(
                user, _request(99999, [{"menuId": 1, "quantity": 1}])
            )

        mock_create.assert_not_called()

    @patch(STRIPE_CREATE)
    def test_inactive_restaurant(self, mock_create, user):
        """Inactive restaurants can't take orders."""
        restaurant = RestaurantFactory(is_active=False)
        item = MenuItemFactory(restaurant=restaurant)

        with pytest.raises(RestaurantNotFoundError):
            create_checkout_session(user, _single(restaurant.pk, item))

    @patch(STRIPE_CREATE)
    def test_empty_menu(self, mock_create, user, restaurant):
        """A restaurant without menu items raises EmptyMenuError."""
        with pytest.raises(EmptyMenuError):
            create_checkout_session(
                user, _request(restaurant.pk, [{"menuId": 1, "quantity": 1}])
            )

        mock_create.assert_not_called()

    @patch(STRIPE_CREATE)
    def test_cart_too_large(self, mock_create, user, restaurant):
        """Carts that can't fit in session metadata are rejected."""
        items = [
            MenuItemFactory(restaurant=restaurant, name="x" * 190) for _ in range(120)
        ]

        with pytest.raises(InvalidCartError) as exc_info:
            create_checkout_session(
                user,
                _request(
                    restaurant.pk, [{"menuId": i.pk, "quantity": 1} for i in items]
                ),
            )

        assert exc_info.value.message == "Cart is too large to check out."
        mock_create.assert_not_called()

    @patch(STRIPE_CREATE)
    def test_stripe_failure_raises_payment_error(
        self, mock_create, user, restaurant, menu_items
    ):
        """Stripe errors surface as PaymentError."""
        mock_create.side_effect = stripe.APIConnectionError("Network down")

        with pytest.raises(PaymentError):
            create_checkout_session(user, _single(restaurant.pk, menu_items[0]))

    @patch(STRIPE_CREATE)
    def test_session_without_url(self, mock_create, user, restaurant, menu_items):
        """A session Stripe returns without a redirect url is an error."""
        mock_create.return_value = _stripe_session(url=None)

        with pytest.raises(PaymentError) as exc_info:
            create_checkout_session(user, _single(restaurant.pk, menu_items[0]))

        assert exc_info.value.message == "Error while creating session"
