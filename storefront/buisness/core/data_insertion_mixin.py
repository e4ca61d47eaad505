"""
Generic data insertion mixin for SQLAlchemy models
Provides from_dict and to_dict methods for seed data and JSON responses
"""

from datetime import datetime, date
from decimal import Decimal
from sqlalchemy import inspect
from storefront import db
from storefront.utils.logger import get_logger

logger = get_logger("storefront.buisness.core.data_insertion")


class DataInsertionMixin:
    """
    Mixin that provides generic data insertion capabilities for SQLAlchemy models

    This mixin adds:
    - from_dict(): Create model instance from dictionary
    - to_dict(): Convert model instance to a JSON-friendly dictionary
    - create_from_dict(): Create and save model instance from dictionary
    - find_or_create_from_dict(): Idempotent insert keyed on lookup fields
    """

    @classmethod
    def from_dict(cls, data_dict, skip_fields=None):
        """
        Create a model instance from a dictionary

        Args:
            data_dict (dict): Dictionary containing model data
            skip_fields (list, optional): Fields to skip during creation

        Returns:
            Model instance (not saved to database)
        """
        if skip_fields is None:
            skip_fields = []

        mapper = inspect(cls)
        columns = {c.key: c for c in mapper.columns}

        # Filter data to only include valid columns
        filtered_data = {}
        for key, value in data_dict.items():
            if key not in columns or key in skip_fields:
                continue
            if key in ['created_at', 'updated_at'] and value is None:
                continue
            filtered_data[key] = value

        return cls(**filtered_data)

    def to_dict(self, include_relationships=False, include_audit_fields=True):
        """
        Convert model instance to dictionary

        Decimals are rendered as strings so money keeps its two-digit scale
        on the wire.

        Args:
            include_relationships (bool): Whether to include relationship data
            include_audit_fields (bool): Whether to include created_at/updated_at

        Returns:
            dict: Dictionary representation of the model
        """
        result = {}

        mapper = inspect(self.__class__)

        for column in mapper.columns:
            if not include_audit_fields and column.key in ['created_at', 'updated_at']:
                continue

            value = getattr(self, column.key)
            if isinstance(value, (datetime, date)):
                result[column.key] = value.isoformat()
            elif isinstance(value, Decimal):
                result[column.key] = str(value)
            else:
                result[column.key] = value

        if include_relationships:
            for relationship in mapper.relationships:
                if relationship.key in result:
                    continue
                related = getattr(self, relationship.key)
                if related is None:
                    result[relationship.key] = None
                elif relationship.uselist:
                    result[relationship.key] = [item.to_dict() for item in related]
                else:
                    result[relationship.key] = related.to_dict()

        return result

    @classmethod
    def create_from_dict(cls, data_dict, skip_fields=None, commit=True):
        """
        Create and save a model instance from dictionary

        Args:
            data_dict (dict): Dictionary containing model data
            skip_fields (list, optional): Fields to skip during creation
            commit (bool): Whether to commit the transaction

        Returns:
            Model instance (saved to database)
        """
        instance = cls.from_dict(data_dict, skip_fields)

        try:
            db.session.add(instance)
            if commit:
                db.session.commit()
                logger.info(f"Created {cls.__name__}: {instance}")
            else:
                db.session.flush()
            return instance
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error creating {cls.__name__}: {e}")
            raise

    @classmethod
    def find_or_create_from_dict(cls, data_dict, skip_fields=None, lookup_fields=None, commit=True):
        """
        Find existing instance or create new one from dictionary

        Args:
            data_dict (dict): Dictionary containing model data
            skip_fields (list, optional): Fields to skip during creation
            lookup_fields (list, optional): Fields to use for lookup (default: unique columns)
            commit (bool): Whether to commit the transaction

        Returns:
            tuple: (instance, created) where created is boolean
        """
        if lookup_fields is None:
            mapper = inspect(cls)
            lookup_fields = [c.key for c in mapper.columns if c.unique and c.key in data_dict]

        lookup_data = {field: data_dict[field] for field in lookup_fields if field in data_dict}
        if not lookup_data:
            return cls.create_from_dict(data_dict, skip_fields, commit), True

        existing = cls.query.filter_by(**lookup_data).first()
        if existing:
            logger.debug(f"Found existing {cls.__name__}: {existing}")
            return existing, False

        return cls.create_from_dict(data_dict, skip_fields, commit), True
