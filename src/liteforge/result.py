"""
Results of mutating statements.

Both values are exposed as methods rather than attributes because either lookup
can fail independently: PostgreSQL cursors never report a last-inserted id, and
some statements leave the row count undefined.
"""
from abc import ABC, abstractmethod
from typing import Any

from liteforge.exceptions import UnsupportedResultError

__all__ = ['Result', 'DriverResult', 'ReturningResult']


class Result(ABC):
    """Outcome of INSERT, UPDATE, DELETE or raw exec.
    """

    @abstractmethod
    def last_insert_id(self) -> int:
        """Identifier generated by the last insert.

        Raises
            UnsupportedResultError: If the driver did not report one
        """

    @abstractmethod
    def rows_affected(self) -> int:
        """Number of rows changed by the statement.

        Raises
            UnsupportedResultError: If the driver did not report one
        """


class DriverResult(Result):
    """Result values reported by the DBAPI cursor itself.
    """

    def __init__(self, lastrowid: Any = None, rowcount: int = -1) -> None:
        self._lastrowid = lastrowid
        self._rowcount = rowcount

    @classmethod
    def from_cursor(cls, cursor: Any) -> 'DriverResult':
        """Capture the values before the cursor is closed.
        """
        return cls(getattr(cursor, 'lastrowid', None), getattr(cursor, 'rowcount', -1))

    def last_insert_id(self) -> int:
        if self._lastrowid is None:
            raise UnsupportedResultError('last insert id is not supported by this driver')
        return self._lastrowid

    def rows_affected(self) -> int:
        if self._rowcount is None or self._rowcount < 0:
            raise UnsupportedResultError('rows affected is not available for this statement')
        return self._rowcount

    def __repr__(self) -> str:
        return f'DriverResult(lastrowid={self._lastrowid!r}, rowcount={self._rowcount!r})'


class ReturningResult(Result):
    """Synthetic insert result built from an INSERT ... RETURNING scan.
    """

    def __init__(self, inserted_id: Any) -> None:
        self._inserted_id = inserted_id

    def last_insert_id(self) -> int:
        return self._inserted_id

    def rows_affected(self) -> int:
        return 1

    def __repr__(self) -> str:
        return f'ReturningResult(inserted_id={self._inserted_id!r})'
