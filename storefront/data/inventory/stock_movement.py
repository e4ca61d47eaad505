from datetime import datetime
from storefront import db
from storefront.data.core.record_base import RecordBase


class StockMovement(RecordBase):
    """
    Append-only audit trail for product stock changes.

    Written by the stock ledger in the same unit of work as the change it
    records, so a rolled back change leaves no movement behind.
    """
    __tablename__ = 'stock_movements'

    RESERVATION = 'Reservation'
    RESTITUTION = 'Restitution'
    ADJUSTMENT = 'Adjustment'

    product_id = db.Column(db.Integer, db.ForeignKey('products.id'), nullable=False, index=True)

    # Movement Details
    movement_type = db.Column(db.String(20), nullable=False)
    quantity_delta = db.Column(db.Integer, nullable=False)
    stock_after = db.Column(db.Integer, nullable=False)
    movement_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    # Reference Fields
    reference_type = db.Column(db.String(50), nullable=True)
    reference_id = db.Column(db.Integer, nullable=True)
    notes = db.Column(db.Text, nullable=True)

    # Relationships
    product = db.relationship('Product')

    def __repr__(self):
        return f'<StockMovement {self.movement_type}: Product {self.product_id}, Delta {self.quantity_delta}>'
