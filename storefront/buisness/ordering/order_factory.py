from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from collections.abc import Iterable, Mapping
from uuid import uuid4

from storefront.buisness.core.errors import (
    CustomerNotFoundError,
    DuplicateOrderNumberError,
    ValidationError,
)
from storefront.buisness.core.lookup import CatalogLookup, require_record_id
from storefront.buisness.core.unit_of_work import UnitOfWork
from storefront.buisness.inventory.stock_ledger import StockLedger, require_positive_quantity
from storefront.buisness.ordering.state_machine import OrderStateMachine
from storefront.data.ordering.order import Order
from storefront.data.ordering.order_line import OrderLine
from storefront.utils.logger import get_logger

logger = get_logger("storefront.buisness.ordering.factory")

CENT = Decimal('0.01')
# Largest value of the Numeric(10, 2) money columns
MAX_AMOUNT = Decimal('99999999.99')

ORDER_NUMBER_MAX_LENGTH = Order.__table__.c.order_number.type.length
NOTES_MAX_LENGTH = Order.__table__.c.notes.type.length


def to_money(value, *, field: str = 'amount') -> Decimal:
    """Coerce to a two-decimal Decimal; floats go through str() to avoid binary noise"""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a decimal amount, got {value!r}", field=field)
    try:
        amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field} must be a decimal amount, got {value!r}", field=field)
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite amount, got {value!r}", field=field)
    if abs(amount) > MAX_AMOUNT:
        raise ValidationError(f"{field} {value!r} exceeds {MAX_AMOUNT}", field=field)
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class OrderLineRequest:
    product_id: int
    quantity: int
    discount: Decimal = Decimal('0.00')


@dataclass(frozen=True)
class OrderRequest:
    """Fully resolved order, ready to be written inside a unit of work"""
    customer_id: int
    order_number: str
    lines: tuple
    notes: str | None = None


class OrderFactory:
    """
    Creates orders and their lines against the stock ledger.

    Creation is split in two steps:
    - prepare_order(): input shape, customer and order number checks, with no
      transaction open
    - create_order(): reservation and persistence inside the caller's unit of
      work; any failure rolls back every reservation already made
    """

    def __init__(self, lookup: CatalogLookup | None = None, number_prefix: str = 'PED'):
        self.lookup = lookup or CatalogLookup()
        self.number_prefix = number_prefix

    def _generate_order_number(self) -> str:
        # PEDyyyyMMddHHmmss plus a short random suffix so that
        # orders created within the same second do not collide
        return f"{self.number_prefix}{datetime.now():%Y%m%d%H%M%S}{uuid4().hex[:4].upper()}"

    @staticmethod
    def normalize_lines(lines: Iterable) -> tuple[OrderLineRequest, ...]:
        """
        Validate and normalize requested lines.

        Each line may be an OrderLineRequest, a ``(product_id, quantity)`` or
        ``(product_id, quantity, discount)`` tuple, or a mapping with those keys.

        Raises:
            ValidationError: Malformed line
        """
        if lines is None:
            return ()
        if isinstance(lines, (str, bytes, Mapping)) or not isinstance(lines, Iterable):
            raise ValidationError("Order lines must be a list", lines=repr(lines))

        normalized = []
        for position, line in enumerate(lines, start=1):
            if isinstance(line, OrderLineRequest):
                product_id, quantity, discount = line.product_id, line.quantity, line.discount
            elif isinstance(line, dict):
                product_id = line.get('product_id')
                quantity = line.get('quantity')
                discount = line.get('discount', 0)
            elif isinstance(line, (tuple, list)) and len(line) in (2, 3):
                product_id, quantity = line[0], line[1]
                discount = line[2] if len(line) == 3 else 0
            else:
                raise ValidationError(f"Order line {position} is malformed", line=position)

            if isinstance(product_id, bool) or not isinstance(product_id, int):
                raise ValidationError(
                    f"Order line {position}: product_id must be an integer, got {product_id!r}",
                    line=position,
                    product_id=product_id,
                )
            require_record_id(product_id, 'product_id')
            require_positive_quantity(quantity, product_id=product_id)

            discount = to_money(discount if discount is not None else 0, field='discount')
            if discount < 0:
                raise ValidationError(
                    f"Order line {position}: discount for product {product_id} cannot be negative",
                    line=position,
                    product_id=product_id,
                    discount=str(discount),
                )
            normalized.append(OrderLineRequest(product_id, quantity, discount))

        return tuple(normalized)

    def prepare_order(
        self,
        *,
        customer_id: int,
        lines: Iterable,
        order_number: str | None = None,
        notes: str | None = None,
    ) -> OrderRequest:
        """
        Resolve everything an order needs before any transaction opens.

        Raises:
            ValidationError: Malformed customer id, lines, notes or order number
            CustomerNotFoundError: Customer missing or inactive
            DuplicateOrderNumberError: Order number already taken
        """
        require_record_id(customer_id, 'customer_id')
        if notes is not None and not isinstance(notes, str):
            raise ValidationError(f"notes must be a string, got {type(notes).__name__}", notes=repr(notes))
        if notes is not None and len(notes) > NOTES_MAX_LENGTH:
            raise ValidationError(f"notes must be at most {NOTES_MAX_LENGTH} characters", length=len(notes))

        normalized = self.normalize_lines(lines)

        customer = self.lookup.get_customer(customer_id)
        if customer is None:
            raise CustomerNotFoundError(customer_id)
        if not customer.active:
            raise CustomerNotFoundError(customer_id, reason='customer is inactive')

        if order_number is None:
            order_number = self._generate_order_number()
        elif not isinstance(order_number, str) or not order_number.strip():
            raise ValidationError("order_number must be a non-empty string", order_number=order_number)
        order_number = order_number.strip()
        if len(order_number) > ORDER_NUMBER_MAX_LENGTH:
            raise ValidationError(
                f"order_number must be at most {ORDER_NUMBER_MAX_LENGTH} characters",
                order_number=order_number,
            )

        if self.lookup.order_number_exists(order_number):
            raise DuplicateOrderNumberError(order_number)

        return OrderRequest(
            customer_id=customer_id,
            order_number=order_number,
            lines=normalized,
            notes=notes,
        )

    def create_order(self, uow: UnitOfWork, request: OrderRequest) -> Order:
        """
        Reserve stock for every line, in the requested order, and persist the order.

        Must be called inside ``uow``; the caller's context exit commits.

        Raises:
            ProductNotFoundError: A line references a missing product
            InsufficientStockError: A line cannot be reserved
            ValidationError: A discount exceeds its line's gross amount
            DuplicateOrderNumberError: Lost a race for the order number
        """
        session = uow.session
        uow.order_number = request.order_number

        order = Order(
            order_number=request.order_number,
            order_date=datetime.utcnow(),
            status=OrderStateMachine.INITIAL_STATE,
            total_amount=Decimal('0.00'),
            notes=request.notes,
            customer_id=request.customer_id,
        )
        session.add(order)
        uow.flush()
        logger.info(f"Created order header - ID: {order.id}, Number: {order.order_number}, Customer: {order.customer_id}")

        ledger = StockLedger(uow)
        total = Decimal('0.00')
        for line_number, line_request in enumerate(request.lines, start=1):
            unit_price = ledger.reserve(
                line_request.product_id,
                line_request.quantity,
                reference_type='order',
                reference_id=order.id,
            )

            gross = unit_price * line_request.quantity
            if line_request.discount > gross:
                raise ValidationError(
                    f"Discount {line_request.discount} exceeds line amount {gross} for product {line_request.product_id}",
                    product_id=line_request.product_id,
                    discount=str(line_request.discount),
                    line_amount=str(gross),
                )

            line = OrderLine(
                product_id=line_request.product_id,
                line_number=line_number,
                quantity=line_request.quantity,
                unit_price=unit_price,
                discount=line_request.discount,
            )
            order.order_lines.append(line)
            total += line.subtotal
            logger.debug(
                f"  Order line {line_number}: Product {line.product_id}, Qty {line.quantity}, "
                f"Price {unit_price}, Discount {line.discount}"
            )

        order.total_amount = total.quantize(CENT)
        uow.flush()

        logger.info(
            f"Order {order.id} ({order.order_number}) built with {len(request.lines)} lines, "
            f"total {order.total_amount}, status {order.status}"
        )
        return order
