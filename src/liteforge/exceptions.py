"""
Liteforge exception classes.

Every error raised by the package derives from DatabaseError. Driver errors are
never swallowed: they are chained onto one of these classes with `raise ... from`
so the original cause stays available on `__cause__`.
"""
import sqlite3

import psycopg


class DatabaseError(Exception):
    """Base class for all liteforge errors.
    """


class InvalidModelError(DatabaseError):
    """Model argument is None, not a dataclass, or not an instance where one is required.
    """


class NoPrimaryKeyError(DatabaseError):
    """Model has no field marked as primary key.
    """


class ConnectionFailure(DatabaseError):
    """Error opening, configuring or pinging a database connection.
    """


class NotFoundError(DatabaseError):
    """A lookup matched zero rows.
    """


class ExecutionError(DatabaseError):
    """Statement preparation or execution failed on an open connection.
    """


class UnsupportedResultError(ExecutionError):
    """The driver did not report the requested result value.
    """


class TransactionError(ExecutionError):
    """Transaction misuse (nested begin, double commit/rollback).
    """


class NilRepositoryError(DatabaseError):
    """A data store was used without an underlying repository.
    """

    def __init__(self, message: str = 'repository is nil') -> None:
        super().__init__(message)


class StoreNotImplementedError(DatabaseError, NotImplementedError):
    """A data store does not implement the requested operation.
    """


IntegrityError = (
    psycopg.IntegrityError,
    sqlite3.IntegrityError,
    )
