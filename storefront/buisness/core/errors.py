"""
Domain exceptions for order and stock business logic

These exceptions represent business rule violations and persistence conflicts.
The business layer raises them; the service layer converts them into
OperationResult values for callers.

Every error carries a stable ``code``, a ``details`` dict naming the offending
entity and rule, and a ``retryable`` flag.
"""

from typing import Any, Dict, Optional


class StorefrontDomainError(Exception):
    """Base exception for all storefront domain errors"""

    code = 'domain_error'
    retryable = False

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details

    def to_dict(self) -> Dict[str, Any]:
        return {
            'code': self.code,
            'message': self.message,
            'details': self.details,
            'retryable': self.retryable,
        }


class ValidationError(StorefrontDomainError):
    """Raised for malformed input, before any unit of work opens"""
    code = 'validation_error'


class InvalidQuantityError(ValidationError):
    """Raised when an absolute stock level is negative"""
    code = 'invalid_quantity'

    def __init__(self, product_id: int, quantity: Any):
        super().__init__(
            f"Invalid stock quantity {quantity} for product {product_id}: must be a whole number from zero up to the stock limit",
            product_id=product_id,
            quantity=quantity,
        )
        self.product_id = product_id
        self.quantity = quantity


class NotFoundError(StorefrontDomainError):
    """Raised when a referenced entity does not exist"""
    code = 'not_found'
    entity = 'entity'

    def __init__(self, entity_id: Any, reason: Optional[str] = None):
        message = f"{self.entity.capitalize()} {entity_id} not found"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, **{f'{self.entity}_id': entity_id}, reason=reason or 'does not exist')
        self.entity_id = entity_id


class ProductNotFoundError(NotFoundError):
    code = 'product_not_found'
    entity = 'product'


class CustomerNotFoundError(NotFoundError):
    code = 'customer_not_found'
    entity = 'customer'


class CategoryNotFoundError(NotFoundError):
    code = 'category_not_found'
    entity = 'category'


class OrderNotFoundError(NotFoundError):
    code = 'order_not_found'
    entity = 'order'


class InsufficientStockError(StorefrontDomainError):
    """Raised when a reservation exceeds the available quantity or the product is inactive"""
    code = 'insufficient_stock'

    def __init__(self, product_id: int, requested: int, available: Optional[int], reason: str = 'insufficient stock'):
        super().__init__(
            f"Cannot reserve {requested} of product {product_id}: {reason} (available: {available})",
            product_id=product_id,
            requested=requested,
            available=available,
            reason=reason,
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class IllegalTransitionError(StorefrontDomainError):
    """Raised when an order status transition is not allowed"""
    code = 'illegal_transition'

    def __init__(self, order_ref: Any, from_status: str, to_status: str, operation: str = 'advance'):
        super().__init__(
            f"Invalid order status transition for order {order_ref} ({operation}): {from_status} → {to_status}",
            order=order_ref,
            from_status=from_status,
            to_status=to_status,
            operation=operation,
        )
        self.from_status = from_status
        self.to_status = to_status


class AlreadyCancelledError(IllegalTransitionError):
    """Raised when cancelling or returning an order that is already cancelled"""
    code = 'already_cancelled'


class DuplicateOrderNumberError(StorefrontDomainError):
    """Raised when a generated or supplied order number is already taken"""
    code = 'duplicate_order_number'

    def __init__(self, order_number: str):
        super().__init__(
            f"Order number {order_number} already exists; retry with a fresh number",
            order_number=order_number,
        )
        self.order_number = order_number


class ConflictError(StorefrontDomainError):
    """Raised on lock contention or serialization failure; safe to retry with backoff"""
    code = 'conflict'
    retryable = True
