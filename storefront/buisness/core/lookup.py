"""
Catalog lookup

Read-only snapshots of products, customers, categories and orders, used to
resolve identifiers before a unit of work opens.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront import db
from storefront.buisness.core.errors import ValidationError
from storefront.data.catalog.category import Category
from storefront.data.catalog.product import Product
from storefront.data.customers.customer import Customer
from storefront.data.ordering.order import Order


# Upper bound of the INTEGER columns holding ids and stock levels
MAX_DB_INTEGER = 2**31 - 1


def require_record_id(value, name: str) -> int:
    """Integer id that fits the id columns; anything else is a ValidationError"""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer, got {value!r}", **{name: value})
    if abs(value) > MAX_DB_INTEGER:
        raise ValidationError(f"{name} {value} is out of range", **{name: value})
    return value


@dataclass(frozen=True)
class ProductSnapshot:
    product_id: int
    price: Decimal
    stock: int
    active: bool


@dataclass(frozen=True)
class CustomerSnapshot:
    customer_id: int
    active: bool


class CatalogLookup:
    """Identifier resolution for the order and stock managers"""

    def __init__(self, session: Optional[Session] = None):
        self.session = session if session is not None else db.session

    def get_product(self, product_id: int) -> Optional[ProductSnapshot]:
        product = self.session.get(Product, product_id)
        if product is None:
            return None
        return ProductSnapshot(
            product_id=product.id,
            price=product.price,
            stock=product.stock_quantity,
            active=bool(product.is_active),
        )

    def get_customer(self, customer_id: int) -> Optional[CustomerSnapshot]:
        customer = self.session.get(Customer, customer_id)
        if customer is None:
            return None
        return CustomerSnapshot(customer_id=customer.id, active=bool(customer.is_active))

    def category_exists(self, category_id: int) -> bool:
        return self.session.get(Category, category_id) is not None

    def get_category_products(self, category_id: int) -> List[int]:
        """Ids of every product in the category, active or not"""
        stmt = select(Product.id).where(Product.category_id == category_id).order_by(Product.id)
        return list(self.session.execute(stmt).scalars())

    def find_order_id(self, order_number: str) -> Optional[int]:
        stmt = select(Order.id).where(Order.order_number == order_number)
        return self.session.execute(stmt).scalar_one_or_none()

    def order_number_exists(self, order_number: str) -> bool:
        return self.find_order_id(order_number) is not None
