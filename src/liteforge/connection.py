"""
Database connection handle.

This module provides:
1. The `connect()` function for opening a connection from options
2. The `Datastore` class: one open connection plus the adapter selected for it

The Datastore is owned by whoever opened it and must be released with
`close()` (or by using it as a context manager). It may be shared between
callers; no locking is added on top of the driver.
"""
import logging
from collections.abc import Mapping
from typing import Any, Self

import sqlalchemy as sa
from liteforge.dialect import DialectAdapter, get_adapter
from liteforge.metadata import require_instance
from liteforge.options import DatabaseOptions, load_options
from liteforge.result import Result
from liteforge.sql import build_insert_sql
from liteforge.transaction import Transaction

__all__ = [
    'Datastore',
    'connect',
]

logger = logging.getLogger(__name__)


class Datastore:
    """Wraps an open SQLAlchemy connection together with its dialect adapter

    Statements run directly on the driver connection
    (`dbapi_connection`) so each adapter controls placeholders, cursors and
    result retrieval for its engine.
    """

    def __init__(self, sa_connection: sa.engine.Connection, adapter: DialectAdapter,
                 options: DatabaseOptions | None = None) -> None:
        self.sa_connection = sa_connection
        self.engine = sa_connection.engine
        self.adapter = adapter
        self.options = options
        self.dbapi_connection = sa_connection.connection.driver_connection
        self.in_transaction = False

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.close()

    @property
    def dialect(self) -> str:
        """Return the dialect name ('postgresql' or 'sqlite')."""
        return self.adapter.dialect_name

    @property
    def closed(self) -> bool:
        return self.sa_connection.closed

    def close(self) -> None:
        """Close the connection and dispose of its engine.
        """
        if self.closed:
            return
        self.sa_connection.close()
        self.engine.dispose()
        logger.debug(f'Closed {self.dialect} connection')

    def execute(self, sql: str, *args: Any) -> Result:
        """Execute a statement (INSERT, UPDATE, DELETE, DDL) and return its result.
        """
        return self.adapter.execute(self, sql, *args)

    def query(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """Execute a query and return all rows as dicts.
        """
        return self.adapter.query(self, sql, *args)

    def query_row(self, sql: str, *args: Any) -> tuple:
        """Execute a query and return the first row.

        Raises NotFoundError if the query returns no rows.
        """
        return self.adapter.query_row(self, sql, *args)

    def begin_tx(self) -> Transaction:
        """Start a transaction; the caller must commit or roll it back.
        """
        return self.adapter.begin_tx(self)

    def create_table(self, model: Any) -> Result:
        """Create the model's table if it does not exist yet.
        """
        sql = self.adapter.create_table_sql(model)
        return self.execute(sql)

    def insert(self, model: Any) -> Result:
        """Insert a model instance.

        The primary-key column is left out of the statement so the database
        generates it; models without a primary key insert every column.
        """
        schema = require_instance(model)
        pk = schema.primary_key

        columns, values = [], []
        for col in schema.columns:
            if col is pk:
                continue
            columns.append(col.name)
            values.append(getattr(model, col.attribute))

        sql = build_insert_sql(self.adapter, schema.name, columns)
        return self.adapter.execute_insert(self, sql, values, pk.name if pk else None)


def connect(options: DatabaseOptions | Mapping[str, Any] | None = None,
            **kw: Any) -> Datastore:
    """Open a database connection

    Args:
        options: Can be:
                - DatabaseOptions object
                - Dictionary of options
                - None, with options specified as keyword arguments
        **kw: Keyword arguments overriding values in `options`

    Returns
        Datastore holding the open connection and its adapter

    Raises
        ConnectionFailure: If the database cannot be opened, configured or pinged
    """
    options = load_options(options, **kw)
    adapter = get_adapter(options.drivername)
    sa_connection = adapter.connect(options)
    return Datastore(sa_connection, adapter, options)
