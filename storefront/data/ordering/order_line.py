from decimal import Decimal
from storefront import db
from storefront.data.core.record_base import RecordBase


class OrderLine(RecordBase):
    """Line item of an order with the unit price captured at the time of sale"""
    __tablename__ = 'order_lines'
    __table_args__ = (
        db.CheckConstraint('quantity > 0', name='ck_order_lines_quantity_positive'),
        db.CheckConstraint('discount >= 0', name='ck_order_lines_discount_non_negative'),
    )

    # Foreign Keys
    order_id = db.Column(db.Integer, db.ForeignKey('orders.id'), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey('products.id'), nullable=False)

    # Quantities and Prices
    line_number = db.Column(db.Integer, nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Numeric(10, 2), nullable=False)
    discount = db.Column(db.Numeric(10, 2), nullable=False, default=Decimal('0.00'))

    # Relationships
    order = db.relationship('Order', back_populates='order_lines')
    product = db.relationship('Product')

    def __repr__(self):
        return f'<OrderLine {self.id}: Product {self.product_id}, Qty {self.quantity}>'

    @property
    def gross_amount(self):
        """Quantity times unit price, before discount"""
        return Decimal(self.quantity) * Decimal(self.unit_price)

    @property
    def subtotal(self):
        """Gross amount minus the line discount"""
        return self.gross_amount - Decimal(self.discount or 0)

    def to_dict(self, include_relationships=False, include_audit_fields=True):
        data = super().to_dict(include_relationships, include_audit_fields)
        data['subtotal'] = str(self.subtotal)
        return data
