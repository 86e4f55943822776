"""Domain exceptions for the storefront.

Services raise these; ``app.main`` maps them to HTTP responses.
"""


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(StorefrontError):
    """Raised when a request is well-formed JSON but breaks a business rule."""

    pass


class OutOfStockError(ValidationError):
    """Raised when a line item asks for more units than are in stock."""

    def __init__(self, product_name: str, requested: int):
        self.product_name = product_name
        self.requested = requested
        super().__init__(f"Insufficient stock for {product_name} (requested {requested})")


class AuthError(StorefrontError):
    """Raised when the caller cannot be identified."""

    def __init__(self, message: str = "Not authorized, token failed"):
        super().__init__(message)


class ForbiddenError(StorefrontError):
    """Raised on an ownership or role violation."""

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message)


class NotFoundError(StorefrontError):
    """Raised when an entity doesn't exist."""

    def __init__(self, entity: str, ref=None):
        self.entity = entity
        self.ref = ref
        msg = f"{entity} not found"
        if ref is not None:
            msg = f"{entity} not found: {ref}"
        super().__init__(msg)


class ConflictError(StorefrontError):
    """Raised on duplicates and on concurrent modification of the same record."""

    pass


class InvalidCoupon(StorefrontError):
    """Raised when a coupon is inactive, exhausted or unknown."""

    def __init__(self, message: str = "Coupon is expired or not valid"):
        super().__init__(message)


class CouponExpired(InvalidCoupon):
    """Raised when a coupon's validity window has passed."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Coupon {code} has expired")


class MinimumOrderNotMet(StorefrontError):
    """Raised when the order amount is below the coupon's minimum."""

    def __init__(self, min_order_value):
        self.min_order_value = min_order_value
        super().__init__(f"Minimum order value of ₹{min_order_value} required")


class InvalidTransition(StorefrontError):
    """Raised when an order status change is not allowed from its current status."""

    def __init__(self, current: str, action: str):
        self.current = current
        self.action = action
        super().__init__(f"Order cannot be {action} while {current}")


class ReturnWindowExpired(StorefrontError):
    """Raised when a return is requested after the return window."""

    def __init__(self, days: int):
        self.days = days
        super().__init__(f"Return window has expired ({days} days from delivery)")


class PaymentFailed(StorefrontError):
    """Raised when the payment gateway declines or errors."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Payment failed: {reason}")
