# flowershop/services/errors.py

"""
Business errors raised by the services.
Each carries a user-facing message and the HTTP status the routes answer with.
"""

from fastapi import HTTPException


class FlowerShopError(Exception):
    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_http(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=self.message)


class AuthRequired(FlowerShopError):
    status_code = 401
    default_message = "Please sign in to place your order."


class ProfileIncomplete(FlowerShopError):
    status_code = 409
    default_message = "Account setup incomplete. Please try signing out and back in."


class EmptySelection(FlowerShopError):
    status_code = 400
    default_message = "Select at least one item from your cart."


class InvalidBouquet(FlowerShopError):
    status_code = 400
    default_message = "This bouquet cannot be made."


class RemoteWriteFailed(FlowerShopError):
    status_code = 502
    default_message = "Failed to save changes. Please try again."


class PersistenceFailed(RemoteWriteFailed):
    default_message = (
        "Order saved locally but failed to persist to the server. "
        "Please try again or contact support."
    )

    def __init__(self, order, message: str | None = None, reason: str | None = None):
        super().__init__(message)
        self.order = order
        self.reason = reason


class AuthorizationSuspected(FlowerShopError):
    status_code = 403
    default_message = "Delete did not take effect. You may not have permission to remove this order."


class OrderNotFound(FlowerShopError):
    status_code = 404
    default_message = "Order not found"


class DriverNotFound(FlowerShopError):
    status_code = 404
    default_message = "Driver not found"


class DriverAssignmentLocked(FlowerShopError):
    status_code = 409
    default_message = "Accept the order before assigning a driver."


def store_message(exc: Exception, default: str) -> str:
    """Prefer the store's own message, fall back to a generic one."""
    orig = getattr(exc, "orig", None)
    text = str(orig or exc).strip()
    return text or default
