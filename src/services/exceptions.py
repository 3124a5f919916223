"""Sales-order and stock errors.

Every failure raised by the services derives from ``SalesOrderError`` and
carries the HTTP status and machine-readable code the API layer reports.
"""

from __future__ import annotations


class SalesOrderError(Exception):
    """Base class for all sales-order service errors."""

    status_code = 500
    error_code = "sales_order_error"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ValidationError(SalesOrderError):
    """Malformed or missing input, rejected before anything is written."""

    status_code = 400
    error_code = "validation_error"


class InvalidStatus(ValidationError):
    """Requested status is not a recognised state."""

    error_code = "invalid_status"

    def __init__(self, status: object, allowed: list[str]) -> None:
        super().__init__(f"Invalid status: {status!r} (expected one of {', '.join(allowed)})")
        self.status = status


class NotFound(SalesOrderError):
    status_code = 404
    error_code = "not_found"


class ItemNotFound(SalesOrderError):
    """A line references an item that does not exist at reconciliation time."""

    status_code = 409
    error_code = "item_not_found"

    def __init__(self, item_id: str) -> None:
        super().__init__(f"Item {item_id} not found")
        self.item_id = item_id


class InsufficientStock(SalesOrderError):
    status_code = 409
    error_code = "insufficient_stock"

    def __init__(self, item_id: str, name: str, available: int, requested: int) -> None:
        super().__init__(
            f"Insufficient stock for {name} ({item_id}): "
            f"available {available}, requested {requested}"
        )
        self.item_id = item_id
        self.available = available
        self.requested = requested


class IllegalTransition(SalesOrderError):
    status_code = 409
    error_code = "illegal_transition"

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot move sales order from {current} to {target}")
        self.current = current
        self.target = target


class NotEligibleForFulfillment(SalesOrderError):
    status_code = 409
    error_code = "not_eligible"


class DuplicateKey(SalesOrderError):
    status_code = 400
    error_code = "duplicate_key"

    def __init__(self, field: str, value: object) -> None:
        super().__init__(f"Duplicate {field}: {value}")
        self.field = field
        self.value = value
