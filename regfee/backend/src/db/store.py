"""Read-only query capability over the fee reference tables."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any, Protocol

import structlog
from sqlalchemy import column, literal_column, select, table, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .session import DataStoreError, get_engine

LOGGER = structlog.get_logger(__name__)

Row = dict[str, Any]


class FeeDataStore(Protocol):
    """Minimal interface the fee services need from a data store."""

    def query(
        self,
        table_name: str,
        *,
        equals: Mapping[str, Any] | None = None,
        within: tuple[str, Sequence[Any]] | None = None,
        order_by: str | None = None,
    ) -> list[Row]:
        """Return every row of ``table_name`` matching the filters."""

    def ping(self) -> None:
        """Raise :class:`DataStoreError` when the store is unreachable."""


class SqlFeeDataStore:
    """:class:`FeeDataStore` backed by a SQLAlchemy engine."""

    def __init__(self, engine_factory: Callable[[], Engine] = get_engine) -> None:
        self._engine_factory = engine_factory

    def _engine(self) -> Engine:
        try:
            return self._engine_factory()
        except DataStoreError:
            raise
        except SQLAlchemyError as exc:
            raise DataStoreError(f"Unable to initialise data store: {exc}") from exc

    def query(
        self,
        table_name: str,
        *,
        equals: Mapping[str, Any] | None = None,
        within: tuple[str, Sequence[Any]] | None = None,
        order_by: str | None = None,
    ) -> list[Row]:
        statement = select(literal_column("*")).select_from(table(table_name))
        for column_name, value in (equals or {}).items():
            statement = statement.where(column(column_name) == value)
        if within is not None:
            column_name, values = within
            statement = statement.where(column(column_name).in_(list(values)))
        if order_by:
            statement = statement.order_by(column(order_by).asc())

        engine = self._engine()
        try:
            with engine.connect() as connection:
                result = connection.execute(statement)
                return [dict(row._mapping) for row in result]
        except SQLAlchemyError as exc:
            LOGGER.warning("data_store_query_failed", table=table_name, error=str(exc))
            raise DataStoreError(f"Query against '{table_name}' failed: {exc}") from exc

    def ping(self) -> None:
        engine = self._engine()
        try:
            with engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise DataStoreError(f"Data store is unreachable: {exc}") from exc


def get_fee_store() -> FeeDataStore:
    """FastAPI dependency returning the configured data store."""

    return SqlFeeDataStore()


__all__ = ["FeeDataStore", "Row", "SqlFeeDataStore", "get_fee_store"]
