"""
Typed operation results

Service entry points return an OperationResult instead of raising, so callers
must branch on ``ok`` and handle each error kind explicitly.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from storefront.buisness.core.errors import StorefrontDomainError


@dataclass(frozen=True)
class OperationResult:
    """Success payload or domain error, never both"""
    value: Any = None
    error: Optional[StorefrontDomainError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any = None) -> 'OperationResult':
        return cls(value=value)

    @classmethod
    def failure(cls, error: StorefrontDomainError) -> 'OperationResult':
        return cls(error=error)

    def unwrap(self) -> Any:
        """Return the value, or raise the carried error"""
        if self.error is not None:
            raise self.error
        return self.value


@dataclass(frozen=True)
class OrderReceipt:
    """Payload of a successful order creation"""
    order_id: int
    order_number: str
    status: str
    total_amount: Decimal
    lines: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'order_id': self.order_id,
            'order_number': self.order_number,
            'status': self.status,
            'total_amount': str(self.total_amount),
            'lines': self.lines,
        }


@dataclass(frozen=True)
class StatusChange:
    """Result of an order status change, with any stock restored per product"""
    order_id: int
    order_number: str
    from_status: str
    to_status: str
    restocked: Dict[int, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'order_id': self.order_id,
            'order_number': self.order_number,
            'from_status': self.from_status,
            'to_status': self.to_status,
            'restocked': {str(product_id): quantity for product_id, quantity in self.restocked.items()},
        }
