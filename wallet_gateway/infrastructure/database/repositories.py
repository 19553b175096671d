"""SQL-backed record store for local development and tests"""

from typing import List, Optional, Sequence

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wallet_gateway.domain.exceptions import RecordStoreError
from wallet_gateway.infrastructure.database.models import COLLECTIONS
from wallet_gateway.infrastructure.store import Filter, Order, Record


def _to_record(obj) -> Record:
    return {attr.key: getattr(obj, attr.key) for attr in inspect(obj).mapper.column_attrs}


class SqlRecordStore:
    """Record store over a SQLAlchemy session; every write commits on its own"""

    def __init__(self, db: Session):
        self.db = db

    def _model(self, collection: str):
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise RecordStoreError(f"Unknown collection: {collection}") from None

    def _column(self, model, name: str):
        column = getattr(model, name, None)
        if column is None:
            raise RecordStoreError(f"Unknown column {model.__tablename__}.{name}")
        return column

    def _criteria(self, model, filters: Sequence[Filter]):
        criteria = []
        for f in filters:
            column = self._column(model, f.column)
            if f.op == "eq":
                criteria.append(column == f.value)
            elif f.op == "neq":
                criteria.append(column != f.value)
            elif f.op == "gt":
                criteria.append(column > f.value)
            elif f.op == "gte":
                criteria.append(column >= f.value)
            elif f.op == "lt":
                criteria.append(column < f.value)
            elif f.op == "lte":
                criteria.append(column <= f.value)
            else:
                criteria.append(column.is_(f.value))
        return criteria

    def _fail(self, action: str, collection: str, error: SQLAlchemyError) -> RecordStoreError:
        self.db.rollback()
        return RecordStoreError(f"Database error on {action} {collection}: {error}")

    async def select(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order: Optional[Order] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Record]:
        model = self._model(collection)
        query = self.db.query(model).filter(*self._criteria(model, filters))
        if order is not None:
            column = self._column(model, order.column)
            query = query.order_by(column.asc() if order.ascending else column.desc())
        if limit is not None:
            query = query.limit(limit)
        if offset:
            query = query.offset(offset)
        try:
            return [_to_record(row) for row in query.all()]
        except SQLAlchemyError as e:
            raise self._fail("select", collection, e) from e

    async def insert(self, collection: str, records: Sequence[Record]) -> List[Record]:
        model = self._model(collection)
        try:
            rows = [model(**record) for record in records]
        except TypeError as e:
            raise RecordStoreError(f"Invalid {collection} record: {e}") from e
        try:
            self.db.add_all(rows)
            self.db.commit()
            for row in rows:
                self.db.refresh(row)
            return [_to_record(row) for row in rows]
        except SQLAlchemyError as e:
            raise self._fail("insert", collection, e) from e

    async def update(self, collection: str, filters: Sequence[Filter], patch: Record) -> List[Record]:
        if not filters:
            raise RecordStoreError("Refusing to update a whole collection without filters")
        model = self._model(collection)
        for key in patch:
            self._column(model, key)
        try:
            rows = self.db.query(model).filter(*self._criteria(model, filters)).all()
            for row in rows:
                for key, value in patch.items():
                    setattr(row, key, value)
            self.db.commit()
            return [_to_record(row) for row in rows]
        except SQLAlchemyError as e:
            raise self._fail("update", collection, e) from e

    async def delete(self, collection: str, filters: Sequence[Filter]) -> None:
        if not filters:
            raise RecordStoreError("Refusing to delete a whole collection without filters")
        model = self._model(collection)
        try:
            self.db.query(model).filter(*self._criteria(model, filters)).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("delete", collection, e) from e
