from __future__ import annotations

from decimal import Decimal

from sqlalchemy import select, update

from storefront.buisness.core.errors import (
    InsufficientStockError,
    InvalidQuantityError,
    ProductNotFoundError,
    ValidationError,
)
from storefront.buisness.core.lookup import MAX_DB_INTEGER
from storefront.buisness.core.unit_of_work import UnitOfWork
from storefront.data.catalog.product import Product
from storefront.data.inventory.stock_movement import StockMovement
from storefront.utils.logger import get_logger

logger = get_logger("storefront.buisness.inventory.stock_ledger")


def require_positive_quantity(quantity, *, product_id=None) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or not 0 < quantity <= MAX_DB_INTEGER:
        raise ValidationError(
            f"Quantity for product {product_id} must be an integer from 1 to {MAX_DB_INTEGER}, got {quantity!r}",
            product_id=product_id,
            quantity=quantity,
        )
    return quantity


class StockLedger:
    """
    Sole writer of Product.stock_quantity.

    Every operation runs inside the caller's unit of work and records a
    StockMovement row alongside the change.

    Reservation folds the availability check and the decrement into one
    conditional UPDATE, preceded by a row lock where the backend supports it
    (SELECT ... FOR UPDATE). Two concurrent reservations on the same product
    are therefore serialized and cannot both pass the check.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow
        self.session = uow.session

    def _lock_product(self, product_id: int) -> Product:
        stmt = (
            select(Product)
            .where(Product.id == product_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        product = self.session.execute(stmt).scalar_one_or_none()
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def _current_stock(self, product: Product) -> int:
        # The row was changed with a bulk UPDATE; reload the attribute
        self.session.expire(product, ['stock_quantity'])
        return product.stock_quantity

    def _record_movement(
        self,
        product_id: int,
        movement_type: str,
        quantity_delta: int,
        stock_after: int,
        *,
        reference_type: str | None = None,
        reference_id: int | None = None,
        notes: str | None = None,
    ) -> StockMovement:
        movement = StockMovement(
            product_id=product_id,
            movement_type=movement_type,
            quantity_delta=quantity_delta,
            stock_after=stock_after,
            reference_type=reference_type,
            reference_id=reference_id,
            notes=notes,
        )
        self.session.add(movement)
        return movement

    def reserve(
        self,
        product_id: int,
        quantity: int,
        *,
        reference_type: str | None = None,
        reference_id: int | None = None,
    ) -> Decimal:
        """
        Take ``quantity`` units out of stock.

        Returns:
            Decimal: Unit price read while the row was locked

        Raises:
            ProductNotFoundError: Product does not exist
            InsufficientStockError: Product inactive or stock below ``quantity``
        """
        require_positive_quantity(quantity, product_id=product_id)
        product = self._lock_product(product_id)

        if not product.is_active:
            raise InsufficientStockError(
                product_id, quantity, product.stock_quantity, reason='product is inactive'
            )

        result = self.session.execute(
            update(Product)
            .where(
                Product.id == product_id,
                Product.is_active.is_(True),
                Product.stock_quantity >= quantity,
            )
            .values(stock_quantity=Product.stock_quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            available = self._current_stock(product)
            logger.info(
                f"Reservation refused for product {product_id}: requested {quantity}, available {available}"
            )
            raise InsufficientStockError(product_id, quantity, available)

        unit_price = Decimal(product.price)
        stock_after = self._current_stock(product)
        self._record_movement(
            product_id,
            StockMovement.RESERVATION,
            -quantity,
            stock_after,
            reference_type=reference_type,
            reference_id=reference_id,
        )
        logger.debug(f"Reserved {quantity} of product {product_id}, stock now {stock_after}")
        return unit_price

    def release(
        self,
        product_id: int,
        quantity: int,
        *,
        reference_type: str | None = None,
        reference_id: int | None = None,
        notes: str | None = None,
    ) -> int:
        """
        Put ``quantity`` units back into stock, whether or not the product is active.

        Returns:
            int: Stock level after the release

        Raises:
            ProductNotFoundError: Product does not exist
        """
        require_positive_quantity(quantity, product_id=product_id)
        product = self._lock_product(product_id)

        self.session.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(stock_quantity=Product.stock_quantity + quantity)
            .execution_options(synchronize_session=False)
        )

        stock_after = self._current_stock(product)
        self._record_movement(
            product_id,
            StockMovement.RESTITUTION,
            quantity,
            stock_after,
            reference_type=reference_type,
            reference_id=reference_id,
            notes=notes,
        )
        logger.debug(f"Released {quantity} of product {product_id}, stock now {stock_after}")
        return stock_after

    def adjust_absolute(
        self,
        product_id: int,
        new_quantity: int,
        *,
        reference_type: str | None = None,
        reference_id: int | None = None,
        notes: str | None = None,
    ) -> int:
        """
        Set stock to an administrator-supplied level.

        Raises:
            InvalidQuantityError: ``new_quantity`` is negative, too large or not an integer
            ProductNotFoundError: Product does not exist
        """
        if (isinstance(new_quantity, bool) or not isinstance(new_quantity, int)
                or not 0 <= new_quantity <= MAX_DB_INTEGER):
            raise InvalidQuantityError(product_id, new_quantity)

        product = self._lock_product(product_id)
        previous = product.stock_quantity

        self.session.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(stock_quantity=new_quantity)
            .execution_options(synchronize_session=False)
        )

        stock_after = self._current_stock(product)
        self._record_movement(
            product_id,
            StockMovement.ADJUSTMENT,
            new_quantity - previous,
            stock_after,
            reference_type=reference_type,
            reference_id=reference_id,
            notes=notes,
        )
        logger.debug(f"Adjusted product {product_id} stock from {previous} to {stock_after}")
        return stock_after
