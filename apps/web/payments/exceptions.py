"""Checkout and order materialization exceptions."""


class CheckoutError(Exception):
    """Base exception for checkout session creation errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class RestaurantNotFoundError(CheckoutError):
    """Restaurant does not exist or is not active."""


class EmptyMenuError(CheckoutError):
    """Restaurant has no menu items to order from."""


class InvalidCartError(CheckoutError):
    """Cart can't be checked out as submitted."""


class InvalidMenuItemError(InvalidCartError):
    """A cart line references a menu item that can't be ordered."""

    def __init__(self, message: str, menu_id: int | None = None) -> None:
        super().__init__(message)
        self.menu_id = menu_id


class OrderMaterializationError(Exception):
    """Base exception for turning a checkout session into an order."""

    def __init__(self, message: str, session_id: str | None = None) -> None:
        self.message = message
        self.session_id = session_id
        super().__init__(message)


class PaymentNotCompletedError(OrderMaterializationError):
    """Stripe does not report the session as paid."""

    def __init__(
        self,
        message: str,
        session_id: str | None = None,
        payment_status: str | None = None,
    ) -> None:
        super().__init__(message, session_id)
        self.payment_status = payment_status


class CorruptSessionError(OrderMaterializationError):
    """A paid session's metadata can't be turned into an order."""
