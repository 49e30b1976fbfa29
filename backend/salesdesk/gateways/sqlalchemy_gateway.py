# Overview: Persistence gateway backed by Flask-SQLAlchemy models.

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Product, Sale
from .base import GatewayError, PersistenceGateway, PRODUCTS, SALES
from salesdesk.time_utils import to_utc_naive

_MODELS = {
    PRODUCTS: Product,
    SALES: Sale,
}

# Key in Session.info tracking nested atomic() blocks for the current session
_DEPTH_KEY = "salesdesk_atomic_depth"


def _utc_values(values: dict) -> dict:
    return {k: (to_utc_naive(v) if isinstance(v, datetime) else v) for k, v in values.items()}


def _row(obj) -> dict:
    """Column values as a dict. Timestamps leave as UTC-naive, whatever the driver returned."""
    return _utc_values({c.key: getattr(obj, c.key) for c in obj.__mapper__.columns})


class SqlAlchemyGateway(PersistenceGateway):
    """
    Each call commits on its own. Inside atomic() calls only flush, and the
    outermost block commits once or rolls everything back, which makes the
    whole sale protocol a single database transaction.
    """

    supports_transactions = True

    def _model(self, table: str):
        self._check_table(table)
        return _MODELS[table]

    def _depth(self) -> int:
        return db.session.info.get(_DEPTH_KEY, 0)

    def _finish(self) -> None:
        if self._depth():
            db.session.flush()
        else:
            db.session.commit()

    def _fail(self, exc: SQLAlchemyError, table: str, operation: str) -> GatewayError:
        # Outside atomic() the failed unit is ours to discard; inside it the
        # outermost block rolls back when the error reaches it.
        if not self._depth():
            db.session.rollback()
        return GatewayError(f"{operation} on {table} failed: {exc}", table=table, operation=operation)

    def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        *,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]:
        model = self._model(table)
        try:
            query = db.session.query(model)
            if filters:
                query = query.filter_by(**filters)
            if order_by:
                column = getattr(model, order_by)
                if descending:
                    query = query.order_by(column.desc(), model.id.desc())
                else:
                    query = query.order_by(column.asc(), model.id.asc())
            else:
                query = query.order_by(model.id.asc())
            if limit is not None:
                query = query.limit(limit)
            return [_row(obj) for obj in query.all()]
        except SQLAlchemyError as exc:
            raise self._fail(exc, table, "select") from exc

    def get(self, table: str, row_id: Any) -> dict | None:
        model = self._model(table)
        try:
            obj = db.session.get(model, row_id)
        except SQLAlchemyError as exc:
            raise self._fail(exc, table, "get") from exc
        return _row(obj) if obj is not None else None

    def insert(self, table: str, row: dict) -> dict:
        model = self._model(table)
        try:
            obj = model(**_utc_values(row))
            db.session.add(obj)
            self._finish()
            return _row(obj)
        except SQLAlchemyError as exc:
            raise self._fail(exc, table, "insert") from exc

    def update(self, table: str, row_id: Any, patch: dict) -> dict | None:
        model = self._model(table)
        try:
            obj = db.session.get(model, row_id)
            if obj is None:
                return None
            for key, value in _utc_values(patch).items():
                setattr(obj, key, value)
            self._finish()
            return _row(obj)
        except SQLAlchemyError as exc:
            raise self._fail(exc, table, "update") from exc

    def delete(self, table: str, row_id: Any) -> bool:
        model = self._model(table)
        try:
            obj = db.session.get(model, row_id)
            if obj is None:
                return False
            db.session.delete(obj)
            self._finish()
            return True
        except SQLAlchemyError as exc:
            raise self._fail(exc, table, "delete") from exc

    @contextmanager
    def atomic(self) -> Iterator["SqlAlchemyGateway"]:
        info = db.session.info
        depth = info.get(_DEPTH_KEY, 0)
        info[_DEPTH_KEY] = depth + 1
        try:
            yield self
        except BaseException:
            info[_DEPTH_KEY] = depth
            if depth == 0:
                db.session.rollback()
            raise
        info[_DEPTH_KEY] = depth
        if depth == 0:
            try:
                db.session.commit()
            except SQLAlchemyError as exc:
                db.session.rollback()
                raise GatewayError(f"commit failed: {exc}", operation="commit") from exc
