from storefront import db
from storefront.data.core.record_base import RecordBase


class Customer(RecordBase):
    """Customer placing orders. Only ``is_active`` matters to order creation."""
    __tablename__ = 'customers'

    name = db.Column(db.String(150), nullable=False)
    email = db.Column(db.String(200), nullable=False, unique=True)
    phone = db.Column(db.String(20), nullable=True)
    cpf = db.Column(db.String(11), nullable=True)
    address = db.Column(db.String(300), nullable=True)
    city = db.Column(db.String(100), nullable=True)
    state = db.Column(db.String(2), nullable=True)
    postal_code = db.Column(db.String(8), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    # Relationships
    orders = db.relationship('Order', back_populates='customer', lazy='dynamic')

    def __repr__(self):
        # PII stays out of reprs since they end up in logs
        return f'<Customer {self.id}>'
