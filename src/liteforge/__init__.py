"""
Minimal object-relational mapping over SQLite and PostgreSQL.

Operations can be called either as:
- Module functions: lf.query(ds, sql, *args)
- Datastore methods: ds.query(sql, *args)

The module functions are a facade over the Datastore methods.
"""
__version__ = '0.1.0'

from typing import Any

from liteforge.connection import Datastore, connect
from liteforge.datastore import APIDataStore, DataStore, ORMDataStore, User
from liteforge.dialect import DialectAdapter, PostgresAdapter, SQLiteAdapter
from liteforge.dialect import get_adapter
from liteforge.exceptions import ConnectionFailure, DatabaseError, ExecutionError
from liteforge.exceptions import IntegrityError, InvalidModelError
from liteforge.exceptions import NilRepositoryError, NoPrimaryKeyError
from liteforge.exceptions import NotFoundError, StoreNotImplementedError, TransactionError
from liteforge.exceptions import UnsupportedResultError
from liteforge.metadata import column, primary_key
from liteforge.options import DatabaseOptions
from liteforge.repository import ORMRepository, Repository
from liteforge.result import Result
from liteforge.transaction import Transaction


def create_table(ds: Datastore, model: Any) -> Result:
    """Create the table for a model if it does not exist.
    """
    return ds.create_table(model)


def insert(ds: Datastore, model: Any) -> Result:
    """Insert a model instance, letting the database generate its key.
    """
    return ds.insert(model)


def execute(ds: Datastore, sql: str, *args: Any) -> Result:
    """Execute a raw statement.
    """
    return ds.execute(sql, *args)


def query(ds: Datastore, sql: str, *args: Any) -> list[dict[str, Any]]:
    """Execute a raw query and return all rows.
    """
    return ds.query(sql, *args)


def query_row(ds: Datastore, sql: str, *args: Any) -> tuple:
    """Execute a raw query and return the first row.

    Raises NotFoundError if the query returns no rows.
    """
    return ds.query_row(sql, *args)


def begin_tx(ds: Datastore) -> Transaction:
    """Start a transaction on the connection.
    """
    return ds.begin_tx()


def new_repository(ds: Datastore) -> ORMRepository:
    """Create a repository over an open connection.
    """
    return ORMRepository(ds)


__all__ = [
    'connect',
    'Datastore',
    'DatabaseOptions',
    'create_table',
    'insert',
    'execute',
    'query',
    'query_row',
    'begin_tx',
    'new_repository',
    'Transaction',
    'Result',
    'Repository',
    'ORMRepository',
    'DataStore',
    'ORMDataStore',
    'APIDataStore',
    'User',
    'primary_key',
    'column',
    'DialectAdapter',
    'SQLiteAdapter',
    'PostgresAdapter',
    'get_adapter',
    'DatabaseError',
    'InvalidModelError',
    'NoPrimaryKeyError',
    'ConnectionFailure',
    'NotFoundError',
    'ExecutionError',
    'UnsupportedResultError',
    'TransactionError',
    'NilRepositoryError',
    'StoreNotImplementedError',
    'IntegrityError',
]
