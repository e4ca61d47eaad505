from storefront import db
from storefront.data.core.record_base import RecordBase


class Category(RecordBase):
    """Product grouping used for browsing and batch stock corrections"""
    __tablename__ = 'categories'

    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(500), nullable=True)

    # Relationships
    products = db.relationship('Product', back_populates='category', lazy='dynamic')

    def __repr__(self):
        return f'<Category {self.id}: {self.name}>'
