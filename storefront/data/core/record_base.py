from storefront import db
from datetime import datetime
from sqlalchemy.orm import declared_attr
from storefront.buisness.core.data_insertion_mixin import DataInsertionMixin


class RecordBase(db.Model, DataInsertionMixin):
    """Abstract base class for all stored entities with created/updated timestamps"""

    __abstract__ = True

    @declared_attr
    def __tablename__(cls):
        return cls.__name__.lower() + 's'

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
