from datetime import datetime
from decimal import Decimal
from storefront import db
from storefront.data.core.record_base import RecordBase


class Order(RecordBase):
    """
    Customer order header.

    ``total_amount`` is computed once by the order factory from the line
    subtotals and stored; readers never recompute it. After creation only
    ``status`` changes, and only through the order lifecycle manager.
    """
    __tablename__ = 'orders'

    order_number = db.Column(db.String(30), unique=True, nullable=False)
    order_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    status = db.Column(db.String(20), nullable=False, default='Pending', index=True)
    total_amount = db.Column(db.Numeric(10, 2), nullable=False, default=Decimal('0.00'))
    notes = db.Column(db.String(1000), nullable=True)

    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'), nullable=False, index=True)

    # Relationships
    customer = db.relationship('Customer', back_populates='orders')
    order_lines = db.relationship(
        'OrderLine',
        back_populates='order',
        order_by='OrderLine.line_number'
    )

    def __repr__(self):
        return f'<Order {self.order_number}: {self.status}, Total {self.total_amount}>'

    @property
    def lines_total(self):
        """Sum of line subtotals, for reconciling against total_amount"""
        return sum((line.subtotal for line in self.order_lines), Decimal('0.00'))
