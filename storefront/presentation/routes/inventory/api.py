from flask import request

from storefront.presentation.routes.inventory import inventory_bp
from storefront.presentation.routes.responses import json_body, result_response
from storefront.services.inventory.stock_service import StockService


@inventory_bp.put('/categories/<int:category_id>/stock')
def api_adjust_category_stock(category_id):
    """
    Batch absolute stock correction.

    Body: {"quantities": {"1": 40, "2": 5}}
    """
    payload = json_body()
    return result_response(StockService.adjust_category_stock(category_id, payload.get('quantities')))


@inventory_bp.get('/products/<int:product_id>/stock')
def api_product_stock(product_id):
    return result_response(StockService.get_product_stock(product_id))


@inventory_bp.get('/products/<int:product_id>/movements')
def api_product_movements(product_id):
    limit = min(request.args.get('limit', 100, type=int), 500)
    return result_response(StockService.get_stock_movements(product_id, limit=limit))
