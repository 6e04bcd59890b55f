"""Record store over the SQLAlchemy session.

The check-in engine only needs three operations from persistence:
``insert``, ``update`` and ``query``. Filters are equality matches by
default. A list, tuple or set value matches any of its members (OR
composition), and a ``__gte`` / ``__lte`` suffix on the key turns the
filter into a range comparison::

    store.query('attendance',
                filters={'verification_status': ['failed', 'pending']},
                order_by='check_in_time', descending=True, limit=50)
"""
import logging
from typing import Any, Dict, List, Optional
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from loggedin import db
from loggedin.models import Event, AttendanceRecord, SecurityLog, AbsenceReport

logger = logging.getLogger(__name__)

TABLES = {
    'events': Event,
    'attendance': AttendanceRecord,
    'security_logs': SecurityLog,
    'attendance_reports': AbsenceReport,
}

class RecordStoreError(Exception):
    """Persistence failed; the message is safe to log, not to show."""
    pass

class RecordNotFoundError(RecordStoreError):
    """No record with the requested id."""
    pass

class RecordStore:
    """Table-name keyed access to the models."""

    def __init__(self, session=None):
        self.session = session or db.session

    @staticmethod
    def _model(table: str):
        try:
            return TABLES[table]
        except KeyError:
            raise RecordStoreError(f"Unknown table: {table}")

    def _apply_filters(self, query, model, filters: Optional[Dict[str, Any]]):
        for key, value in (filters or {}).items():
            field, _, op = key.partition('__')
            column = getattr(model, field, None)
            if column is None:
                raise RecordStoreError(f"Unknown column {field} on {model.__tablename__}")

            if op == 'gte':
                query = query.filter(column >= value)
            elif op == 'lte':
                query = query.filter(column <= value)
            elif op:
                raise RecordStoreError(f"Unsupported filter operator: {op}")
            elif isinstance(value, (list, tuple, set)):
                query = query.filter(or_(*[column == item for item in value]))
            elif value is None:
                query = query.filter(column.is_(None))
            else:
                query = query.filter(column == value)
        return query

    def insert(self, table: str, record: Dict[str, Any]):
        """Insert one record and return the persisted model."""
        model = self._model(table)
        try:
            instance = model(**record)
            self.session.add(instance)
            self.session.commit()
            return instance
        except (SQLAlchemyError, TypeError) as e:
            self.session.rollback()
            logger.error("Insert into %s failed: %s", table, e)
            raise RecordStoreError(f"Insert into {table} failed") from e

    def update(self, table: str, record_id: Any, patch: Dict[str, Any]):
        """Apply ``patch`` to the record with ``record_id``."""
        model = self._model(table)
        try:
            instance = self.session.get(model, record_id)
            if instance is None:
                raise RecordNotFoundError(f"{table} record {record_id} not found")

            for key, value in patch.items():
                if not hasattr(instance, key):
                    raise RecordStoreError(f"Unknown column {key} on {table}")
                setattr(instance, key, value)

            self.session.commit()
            return instance
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Update of %s %s failed: %s", table, record_id, e)
            raise RecordStoreError(f"Update of {table} failed") from e

    def delete(self, table: str, record_id: Any) -> None:
        model = self._model(table)
        try:
            instance = self.session.get(model, record_id)
            if instance is None:
                raise RecordNotFoundError(f"{table} record {record_id} not found")
            self.session.delete(instance)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Delete of %s %s failed: %s", table, record_id, e)
            raise RecordStoreError(f"Delete from {table} failed") from e

    def get(self, table: str, record_id: Any):
        """Fetch one record by id, or None."""
        model = self._model(table)
        try:
            return self.session.get(model, record_id)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise RecordStoreError(f"Lookup in {table} failed") from e

    def query(self, table: str, filters: Optional[Dict[str, Any]] = None,
              order_by: Optional[str] = None, descending: bool = False,
              limit: Optional[int] = None) -> List[Any]:
        """Return records matching ``filters``."""
        model = self._model(table)
        query = self._apply_filters(self.session.query(model), model, filters)

        if order_by:
            column = getattr(model, order_by, None)
            if column is None:
                raise RecordStoreError(f"Unknown column {order_by} on {table}")
            query = query.order_by(column.desc() if descending else column.asc())

        if limit:
            query = query.limit(limit)

        try:
            return query.all()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Query on %s failed: %s", table, e)
            raise RecordStoreError(f"Query on {table} failed") from e

    def count(self, table: str, filters: Optional[Dict[str, Any]] = None) -> int:
        model = self._model(table)
        query = self._apply_filters(self.session.query(model), model, filters)
        try:
            return query.count()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise RecordStoreError(f"Count on {table} failed") from e
