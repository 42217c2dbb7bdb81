"""Exceptions raised by the storefront services.

Each subclass carries the HTTP status the API answers with; the mapping to the
JSON envelope lives in ``storefront.api.errors``.
"""


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(StorefrontError):
    """Missing or malformed input, or a broken business rule."""

    status_code = 400


class UnauthorizedError(StorefrontError):
    """No principal, or a principal without the required role."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class NotFoundError(StorefrontError):
    """A referenced entity does not exist (or is not visible to the caller)."""

    status_code = 404


class ConflictError(StorefrontError):
    """An optimistic write lost against a concurrent one."""

    status_code = 409


class RateLimitedError(StorefrontError):
    status_code = 429

    def __init__(self, message: str = "Too many requests. Please try again later."):
        super().__init__(message)


class PaymentProviderError(StorefrontError):
    """The payment provider could not be reached or answered with an error."""

    status_code = 500

    def __init__(self, provider: str, reason: str):
        self.provider = provider
        super().__init__(f"Payment provider error ({provider}): {reason}")


class InsufficientStockError(ValidationError):
    def __init__(self, product_name: str):
        self.product_name = product_name
        super().__init__(f"Insufficient stock for: {product_name}")


class InvalidTransitionError(ValidationError):
    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot change order status from {current} to {target}")
