from storefront import db
from storefront.data.core.record_base import RecordBase


class Product(RecordBase):
    """
    Sellable product.

    ``stock_quantity`` is the quantity available for sale. It is only written
    by the stock ledger; every other code path treats it as read-only.
    """
    __tablename__ = 'products'
    __table_args__ = (
        db.CheckConstraint('stock_quantity >= 0', name='ck_products_stock_non_negative'),
        db.CheckConstraint('price >= 0', name='ck_products_price_non_negative'),
    )

    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.String(1000), nullable=True)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    stock_quantity = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    category_id = db.Column(db.Integer, db.ForeignKey('categories.id'), nullable=False, index=True)

    # Relationships
    category = db.relationship('Category', back_populates='products')

    def __repr__(self):
        return f'<Product {self.id}: {self.name}, Stock {self.stock_quantity}>'
