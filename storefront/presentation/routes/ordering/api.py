from flask import request

from storefront.presentation.routes.ordering import ordering_bp
from storefront.presentation.routes.responses import json_body, result_response
from storefront.services.ordering.order_service import OrderService
from storefront.utils.logger import get_logger

logger = get_logger("storefront.routes.ordering")


@ordering_bp.post('/orders')
def api_create_order():
    """
    Create an order.

    Body: {"customer_id": 1, "lines": [{"product_id": 3, "quantity": 2, "discount": "5.00"}],
           "notes": "...", "order_number": "optional"}
    """
    payload = json_body()
    result = OrderService.create_order(
        customer_id=payload.get('customer_id'),
        lines=payload.get('lines', []),
        order_number=payload.get('order_number'),
        notes=payload.get('notes'),
    )
    if result.ok:
        logger.info(f"Order {result.value.order_number} created via API")
    return result_response(result, success_status=201)


@ordering_bp.get('/orders/<int:order_id>')
def api_get_order(order_id):
    return result_response(OrderService.get_order(order_id=order_id))


@ordering_bp.get('/orders/by-number/<order_number>')
def api_get_order_by_number(order_number):
    return result_response(OrderService.get_order(order_number=order_number))


@ordering_bp.post('/orders/<int:order_id>/status')
def api_advance_order_status(order_id):
    payload = json_body()
    return result_response(OrderService.advance_status(order_id, payload.get('status')))


@ordering_bp.post('/orders/<int:order_id>/cancel')
def api_cancel_order(order_id):
    return result_response(OrderService.cancel_order(order_id))


@ordering_bp.post('/orders/<int:order_id>/return')
def api_return_order(order_id):
    return result_response(OrderService.return_order(order_id))


@ordering_bp.post('/orders/by-number/<order_number>/return')
def api_return_order_by_number(order_number):
    logger.debug(f"Return requested for order number {order_number} from {request.remote_addr}")
    return result_response(OrderService.return_order_by_number(order_number))
