"""Point lookups, indexed scans and writes used by the catalog services.

The accessor never commits. Callers own the transaction boundary so that a
read-modify-write sequence (for example deactivating the current version and
inserting its successor) lands in a single commit.
"""
from __future__ import annotations

from typing import Any, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

from catalog.core.exceptions import ResourceNotFoundError
from catalog.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)

ROW_LOCK_DIALECTS = {"postgresql", "mysql", "mariadb", "oracle"}


class EntityAccessor:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_by_id(self, model: type[ModelT], record_id: str) -> ModelT | None:
        if not record_id:
            return None
        return self.db.get(model, record_id)

    def get_by_index(self, model: type[ModelT], *criteria: Any) -> ModelT | None:
        return self.db.execute(select(model).where(*criteria).limit(1)).scalars().first()

    def list_by_index(self, model: type[ModelT], *criteria: Any, order_by: Any = None) -> list[ModelT]:
        statement = select(model)
        if criteria:
            statement = statement.where(*criteria)
        if order_by is not None:
            statement = statement.order_by(order_by)
        return list(self.db.execute(statement).scalars())

    def scan_all(self, model: type[ModelT]) -> list[ModelT]:
        return list(self.db.execute(select(model)).scalars())

    def insert(self, model: type[ModelT], **fields: Any) -> str:
        record = model(**fields)
        self.db.add(record)
        self.db.flush()
        return record.id

    def patch(self, model: type[ModelT], record_id: str, **fields: Any) -> None:
        record = self.db.get(model, record_id)
        if record is None:
            raise ResourceNotFoundError(model.__name__, record_id)
        for key, value in fields.items():
            setattr(record, key, value)
        self.db.flush()

    def lock_row(self, model: type[ModelT], record_id: str) -> ModelT | None:
        statement = select(model).where(model.id == record_id)
        if self.db.get_bind().dialect.name in ROW_LOCK_DIALECTS:
            statement = statement.with_for_update()
        return self.db.execute(statement).scalars().first()
