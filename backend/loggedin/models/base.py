"""Declarative base shared by the check-in tables."""
from datetime import datetime
from enum import Enum
from typing import Dict, Any
from loggedin import db
from loggedin.utils.helpers import utcnow

class BaseModel(db.Model):
    """Integer key, naive-UTC timestamps and JSON-ready serialization."""

    __abstract__ = True

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def save(self) -> 'BaseModel':
        """Add to the session and commit."""
        db.session.add(self)
        db.session.commit()
        return self

    def to_dict(self, exclude: list = None) -> Dict[str, Any]:
        """Column values keyed by column name.

        Datetimes become ISO strings and enums their values, so the result
        can go straight into ``jsonify``.
        """
        exclude = exclude or []
        result = {}

        for column in self.__table__.columns:
            if column.name in exclude:
                continue
            value = getattr(self, column.name)
            if isinstance(value, datetime):
                value = value.isoformat()
            elif isinstance(value, Enum):
                value = value.value
            result[column.name] = value

        return result

    @classmethod
    def get_by_id(cls, id) -> 'BaseModel':
        return db.session.get(cls, id)

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} {self.id}>'
