"""
Order Service
Entry points for order creation and the order status lifecycle.

Each method runs one unit of work and returns an OperationResult; domain
errors are returned, never raised. Nothing is retried here: a ConflictError
result is retryable by the caller.
"""

from typing import Any, Dict, Iterable, Optional

from flask import current_app

from storefront import db
from storefront.buisness.core.errors import OrderNotFoundError, StorefrontDomainError, ValidationError
from storefront.buisness.core.lookup import CatalogLookup, require_record_id
from storefront.buisness.core.results import OperationResult, OrderReceipt
from storefront.buisness.core.unit_of_work import UnitOfWork, persistence_errors
from storefront.buisness.ordering.order_factory import OrderFactory
from storefront.buisness.ordering.order_lifecycle import OrderLifecycleManager
from storefront.buisness.ordering.state_machine import OrderStateMachine
from storefront.data.ordering.order import Order
from storefront.utils.logger import get_logger

logger = get_logger("storefront.services.ordering")


def _failure(operation: str, error: StorefrontDomainError) -> OperationResult:
    log = logger.warning if error.retryable else logger.info
    log(f"{operation} failed [{error.code}]: {error.message}")
    return OperationResult.failure(error)


class OrderService:
    """
    Service for order writes and order reads.

    Provides methods for:
    - Creating orders with stock reservation
    - Advancing, cancelling and returning orders
    - Reading an order with its lines
    """

    @staticmethod
    def create_order(
        customer_id: int,
        lines: Iterable,
        order_number: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> OperationResult:
        """
        Create a Pending order, reserving stock for every line.

        Returns:
            OperationResult carrying an OrderReceipt
        """
        factory = OrderFactory(number_prefix=current_app.config.get('ORDER_NUMBER_PREFIX', 'PED'))
        try:
            with persistence_errors():
                request = factory.prepare_order(
                    customer_id=customer_id,
                    lines=lines,
                    order_number=order_number,
                    notes=notes,
                )
            with UnitOfWork() as uow:
                order_id = factory.create_order(uow, request).id
        except StorefrontDomainError as e:
            return _failure('create_order', e)

        order = db.session.get(Order, order_id)
        receipt = OrderReceipt(
            order_id=order.id,
            order_number=order.order_number,
            status=order.status,
            total_amount=order.total_amount,
            lines=[line.to_dict(include_audit_fields=False) for line in order.order_lines],
        )
        return OperationResult.success(receipt)

    @staticmethod
    def advance_status(order_id: int, target_status: str) -> OperationResult:
        """Move an order to the next forward status; returns a StatusChange"""
        try:
            require_record_id(order_id, 'order_id')
            target = OrderStateMachine.parse_status(target_status)
            with UnitOfWork() as uow:
                change = OrderLifecycleManager(uow).advance_status(order_id, target)
        except StorefrontDomainError as e:
            return _failure('advance_status', e)
        return OperationResult.success(change)

    @staticmethod
    def cancel_order(order_id: int) -> OperationResult:
        """Cancel an order and restock its lines; returns a StatusChange"""
        try:
            require_record_id(order_id, 'order_id')
            with UnitOfWork() as uow:
                change = OrderLifecycleManager(uow).cancel(order_id)
        except StorefrontDomainError as e:
            return _failure('cancel_order', e)
        return OperationResult.success(change)

    @staticmethod
    def return_order(order_id: int) -> OperationResult:
        """Take back a Confirmed or Delivered order and restock its lines; returns a StatusChange"""
        try:
            require_record_id(order_id, 'order_id')
            with UnitOfWork() as uow:
                change = OrderLifecycleManager(uow).return_order(order_id)
        except StorefrontDomainError as e:
            return _failure('return_order', e)
        return OperationResult.success(change)

    @staticmethod
    def return_order_by_number(order_number: str) -> OperationResult:
        """Return flow keyed on the human-readable order number"""
        order_id = CatalogLookup().find_order_id(order_number)
        if order_id is None:
            return _failure('return_order', OrderNotFoundError(order_number))
        return OrderService.return_order(order_id)

    @staticmethod
    def get_order(order_id: Optional[int] = None, order_number: Optional[str] = None) -> OperationResult:
        """
        Read an order with its lines.

        Returns:
            OperationResult carrying a dict with the order, its lines and the
            lifecycle actions currently available
        """
        if order_id is not None:
            try:
                require_record_id(order_id, 'order_id')
            except ValidationError as e:
                return _failure('get_order', e)
        elif order_number is not None:
            order_id = CatalogLookup().find_order_id(order_number)
        order = db.session.get(Order, order_id) if order_id is not None else None
        if order is None:
            return _failure('get_order', OrderNotFoundError(order_id if order_number is None else order_number))

        data: Dict[str, Any] = order.to_dict()
        data['lines'] = [line.to_dict(include_audit_fields=False) for line in order.order_lines]
        data['available_actions'] = OrderStateMachine.get_available_actions(order.status)
        data['next_statuses'] = sorted(OrderStateMachine.get_allowed_transitions(order.status))
        return OperationResult.success(data)
