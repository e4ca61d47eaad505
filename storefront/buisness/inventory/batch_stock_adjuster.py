from __future__ import annotations

from typing import Mapping

from storefront.buisness.core.errors import (
    CategoryNotFoundError,
    InvalidQuantityError,
    ProductNotFoundError,
    ValidationError,
)
from storefront.buisness.core.lookup import MAX_DB_INTEGER, CatalogLookup, require_record_id
from storefront.buisness.core.unit_of_work import UnitOfWork
from storefront.buisness.inventory.stock_ledger import StockLedger
from storefront.utils.logger import get_logger

logger = get_logger("storefront.buisness.inventory.batch_stock_adjuster")


class BatchStockAdjuster:
    """
    Applies absolute stock corrections to the products of one category.

    The whole batch is one unit of work: one bad entry (negative quantity,
    unknown product, product from another category) rolls every entry back.
    """

    def __init__(self, lookup: CatalogLookup | None = None):
        self.lookup = lookup or CatalogLookup()

    @staticmethod
    def normalize_quantities(quantities: Mapping) -> dict[int, int]:
        """
        Coerce ``{product_id: new_quantity}``; numeric string keys (JSON object
        keys) are accepted.

        Values above the stock column range are rejected here. Negative values
        pass through; the ledger rejects them inside the unit of work so the
        failure is reported against its product.

        Raises:
            ValidationError: Not a non-empty mapping of integers
            InvalidQuantityError: A new level exceeds the stock column range
        """
        if not isinstance(quantities, Mapping) or not quantities:
            raise ValidationError("quantities must be a non-empty mapping of product id to new quantity")

        normalized: dict[int, int] = {}
        for raw_product_id, new_quantity in quantities.items():
            try:
                if isinstance(raw_product_id, bool):
                    raise ValueError(raw_product_id)
                product_id = int(raw_product_id)
            except (TypeError, ValueError):
                raise ValidationError(
                    f"Product id {raw_product_id!r} is not an integer",
                    product_id=raw_product_id,
                )
            require_record_id(product_id, 'product_id')
            if isinstance(new_quantity, bool) or not isinstance(new_quantity, int):
                raise ValidationError(
                    f"New quantity for product {product_id} must be an integer, got {new_quantity!r}",
                    product_id=product_id,
                    quantity=new_quantity,
                )
            if new_quantity > MAX_DB_INTEGER:
                raise InvalidQuantityError(product_id, new_quantity)
            normalized[product_id] = new_quantity
        return normalized

    def resolve_category(self, category_id: int) -> set[int]:
        """
        Ids of the products that may be adjusted through this category.

        Raises:
            CategoryNotFoundError: Category missing or without products
        """
        product_ids = self.lookup.get_category_products(category_id)
        if not product_ids:
            reason = 'category has no products' if self.lookup.category_exists(category_id) else None
            raise CategoryNotFoundError(category_id, reason=reason)
        return set(product_ids)

    def adjust_category_stock(
        self,
        uow: UnitOfWork,
        category_id: int,
        quantities: dict[int, int],
        category_product_ids: set[int],
    ) -> dict[int, int]:
        """
        Set each product's stock to its new level, in mapping order.

        Raises:
            InvalidQuantityError: A new level is negative
            ProductNotFoundError: A product is missing or outside the category
        """
        ledger = StockLedger(uow)
        new_levels: dict[int, int] = {}
        for product_id, new_quantity in quantities.items():
            if product_id not in category_product_ids:
                raise ProductNotFoundError(product_id, reason=f"not in category {category_id}")
            new_levels[product_id] = ledger.adjust_absolute(
                product_id,
                new_quantity,
                reference_type='category',
                reference_id=category_id,
                notes='Batch stock adjustment',
            )

        logger.info(f"Adjusted stock for {len(new_levels)} products in category {category_id}")
        return new_levels
