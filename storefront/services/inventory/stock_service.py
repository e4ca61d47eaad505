"""
Stock Service
Entry points for batch stock corrections and stock reads.
"""

from typing import Mapping

from sqlalchemy import select

from storefront import db
from storefront.buisness.core.errors import ProductNotFoundError, StorefrontDomainError, ValidationError
from storefront.buisness.core.lookup import CatalogLookup, require_record_id
from storefront.buisness.core.results import OperationResult
from storefront.buisness.core.unit_of_work import UnitOfWork, persistence_errors
from storefront.buisness.inventory.batch_stock_adjuster import BatchStockAdjuster
from storefront.data.inventory.stock_movement import StockMovement
from storefront.utils.logger import get_logger

logger = get_logger("storefront.services.inventory")


class StockService:
    """Service for stock corrections and stock queries"""

    @staticmethod
    def adjust_category_stock(category_id: int, quantities: Mapping) -> OperationResult:
        """
        Apply absolute stock levels to products of a category, all or nothing.

        Returns:
            OperationResult carrying ``{product_id: new_quantity}``
        """
        adjuster = BatchStockAdjuster()
        try:
            require_record_id(category_id, 'category_id')
            # Resolved before the batch shape is checked
            with persistence_errors():
                product_ids = adjuster.resolve_category(category_id)
            normalized = adjuster.normalize_quantities(quantities)
            with UnitOfWork() as uow:
                new_levels = adjuster.adjust_category_stock(uow, category_id, normalized, product_ids)
        except StorefrontDomainError as e:
            log = logger.warning if e.retryable else logger.info
            log(f"adjust_category_stock failed [{e.code}]: {e.message}")
            return OperationResult.failure(e)
        return OperationResult.success(new_levels)

    @staticmethod
    def get_product_stock(product_id: int) -> OperationResult:
        """Committed stock snapshot of one product"""
        try:
            require_record_id(product_id, 'product_id')
        except ValidationError as e:
            return OperationResult.failure(e)
        snapshot = CatalogLookup().get_product(product_id)
        if snapshot is None:
            return OperationResult.failure(ProductNotFoundError(product_id))
        return OperationResult.success({
            'product_id': snapshot.product_id,
            'price': str(snapshot.price),
            'stock_quantity': snapshot.stock,
            'is_active': snapshot.active,
            'is_available': snapshot.active and snapshot.stock > 0,
        })

    @staticmethod
    def get_stock_movements(product_id: int, limit: int = 100) -> OperationResult:
        """Most recent stock movements of a product, newest first"""
        try:
            require_record_id(product_id, 'product_id')
        except ValidationError as e:
            return OperationResult.failure(e)
        if CatalogLookup().get_product(product_id) is None:
            return OperationResult.failure(ProductNotFoundError(product_id))
        stmt = (
            select(StockMovement)
            .where(StockMovement.product_id == product_id)
            .order_by(StockMovement.id.desc())
            .limit(limit)
        )
        movements = db.session.execute(stmt).scalars().all()
        return OperationResult.success([m.to_dict(include_audit_fields=False) for m in movements])
