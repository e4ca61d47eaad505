from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update

from storefront.buisness.core.errors import ConflictError, OrderNotFoundError
from storefront.buisness.core.results import StatusChange
from storefront.buisness.core.unit_of_work import UnitOfWork
from storefront.buisness.inventory.stock_ledger import StockLedger
from storefront.buisness.ordering.state_machine import OrderStateMachine
from storefront.data.ordering.order import Order
from storefront.utils.logger import get_logger

logger = get_logger("storefront.buisness.ordering.lifecycle")


class OrderLifecycleManager:
    """
    Applies order status changes inside the caller's unit of work.

    Status writes are compare-and-set against the status read under the row
    lock, so a concurrent change (e.g. two cancels racing) makes the loser
    fail with ConflictError instead of restocking twice.
    """

    def __init__(self, uow: UnitOfWork, state_machine: type[OrderStateMachine] = OrderStateMachine):
        self.uow = uow
        self.session = uow.session
        self.state_machine = state_machine
        self.ledger = StockLedger(uow)

    def _lock_order(self, order_id: int) -> Order:
        stmt = (
            select(Order)
            .where(Order.id == order_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        order = self.session.execute(stmt).scalar_one_or_none()
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    def _set_status(self, order: Order, from_status: str, to_status: str) -> None:
        result = self.session.execute(
            update(Order)
            .where(Order.id == order.id, Order.status == from_status)
            .values(status=to_status, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ConflictError(
                f"Order {order.order_number} changed status concurrently; reload and retry",
                order=order.order_number,
                expected_status=from_status,
            )
        self.session.expire(order, ['status', 'updated_at'])

    def _restock(self, order: Order, operation: str) -> dict[int, int]:
        restocked: dict[int, int] = {}
        for line in order.order_lines:
            self.ledger.release(
                line.product_id,
                line.quantity,
                reference_type='order',
                reference_id=order.id,
                notes=f"{operation} of order {order.order_number}",
            )
            restocked[line.product_id] = restocked.get(line.product_id, 0) + line.quantity
        return restocked

    def advance_status(self, order_id: int, target_status: str) -> StatusChange:
        """
        Move an order one step forward (Pending → Confirmed → InProgress → Delivered).

        Raises:
            OrderNotFoundError: Order does not exist
            IllegalTransitionError: Target is not the next forward status
        """
        order = self._lock_order(order_id)
        current = order.status
        self.state_machine.validate_transition(current, target_status, order_ref=order.order_number)

        self._set_status(order, current, target_status)
        logger.info(f"Order {order.order_number} status: {current} → {target_status}")
        return StatusChange(order.id, order.order_number, current, target_status)

    def cancel(self, order_id: int) -> StatusChange:
        """
        Cancel a Pending or Confirmed order and release the stock of every line.

        Raises:
            OrderNotFoundError: Order does not exist
            AlreadyCancelledError: Order is already cancelled
            IllegalTransitionError: Order is InProgress or Delivered
        """
        order = self._lock_order(order_id)
        current = order.status
        self.state_machine.validate_cancel(current, order_ref=order.order_number)

        self._set_status(order, current, self.state_machine.CANCELLED)
        restocked = self._restock(order, 'Cancellation')
        logger.info(f"Order {order.order_number} cancelled from {current}, restocked {restocked}")
        return StatusChange(order.id, order.order_number, current, self.state_machine.CANCELLED, restocked)

    def return_order(self, order_id: int) -> StatusChange:
        """
        Take back a Confirmed or Delivered order and release the stock of every line.

        The order ends as Cancelled.

        Raises:
            OrderNotFoundError: Order does not exist
            AlreadyCancelledError: Order is already cancelled
            IllegalTransitionError: Order is Pending or InProgress
        """
        order = self._lock_order(order_id)
        current = order.status
        self.state_machine.validate_return(current, order_ref=order.order_number)

        self._set_status(order, current, self.state_machine.CANCELLED)
        restocked = self._restock(order, 'Return')
        logger.info(f"Order {order.order_number} returned from {current}, restocked {restocked}")
        return StatusChange(order.id, order.order_number, current, self.state_machine.CANCELLED, restocked)
