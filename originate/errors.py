"""Typed failures returned by the Originate services.

Every error carries a stable ``code`` for clients, the HTTP status it maps to,
and a message that tells the user what actually happened.
"""

from __future__ import annotations


class OriginateError(Exception):
    """Base exception for all business and storage failures."""

    code = "error"
    status_code = 400
    default_message = "The request could not be completed."
    retryable = False

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, str]:
        return {"error": self.code, "message": self.message}


class Unauthorized(OriginateError):
    """The actor lacks the role or ownership required for the action."""

    code = "unauthorized"
    status_code = 403
    default_message = "You are not allowed to perform this action."


class Forbidden(OriginateError):
    """The visibility rules hide the resource from the actor."""

    code = "forbidden"
    status_code = 403
    default_message = "You do not have access to this resource."


class ProfileRequired(OriginateError):
    """Authenticated identity that has not created a profile yet."""

    code = "profile_required"
    status_code = 403
    default_message = "Complete your profile before using this feature."


class NotFound(OriginateError):
    code = "not_found"
    status_code = 404
    default_message = "The requested resource was not found."


class ValidationError(OriginateError):
    code = "validation_error"
    status_code = 400
    default_message = "The request payload is invalid."


class AlreadyExists(OriginateError):
    code = "already_exists"
    status_code = 409
    default_message = "This record already exists."


class InvalidRelationship(OriginateError):
    """No active consumer connection (or approved supplier link) for the order."""

    code = "invalid_relationship"
    status_code = 409
    default_message = "Connect with this supplier before placing an order."


class SupplierNotApproved(OriginateError):
    code = "supplier_not_approved"
    status_code = 409
    default_message = "This supplier is not approved to sell for this company."


class EmptyOrder(OriginateError):
    code = "empty_order"
    status_code = 400
    default_message = "An order needs at least one item."


class InvalidAddress(OriginateError):
    code = "invalid_address"
    status_code = 400
    default_message = "Choose one of your saved shipping addresses."


class InvalidProduct(OriginateError):
    code = "invalid_product"
    status_code = 400
    default_message = "One of the products cannot be ordered from this company."


class ProductInUse(OriginateError):
    code = "product_in_use"
    status_code = 409
    default_message = "This product appears on existing orders; mark it unavailable instead."


class AddressInUse(OriginateError):
    code = "address_in_use"
    status_code = 409
    default_message = "This address is the destination of existing orders and cannot be deleted."


class DefaultAddressConflict(OriginateError):
    """Two requests tried to make different addresses the default at once."""

    code = "default_address_conflict"
    status_code = 409
    default_message = "Another address was made your default at the same time. Try again."


class TerminalState(OriginateError):
    code = "terminal_state"
    status_code = 409
    default_message = "This order is already complete and cannot change status."


class NotCancellable(OriginateError):
    code = "not_cancellable"
    status_code = 409
    default_message = "This order can no longer be cancelled."


class InvalidTransition(OriginateError):
    code = "invalid_transition"
    status_code = 409
    default_message = "This status change is not allowed from the current state."


class DuplicateApplication(OriginateError):
    code = "duplicate_application"
    status_code = 409
    default_message = "You have already applied to this company."


class StorageFailure(OriginateError):
    """The data store is unavailable; the caller may retry with backoff."""

    code = "storage_failure"
    status_code = 503
    default_message = "The service is temporarily unavailable. Please try again."
    retryable = True
