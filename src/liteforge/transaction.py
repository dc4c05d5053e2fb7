"""
Explicit transactions on a connection handle.

Outside a transaction every statement commits on its own. `begin_tx` takes the
connection out of auto-commit mode until exactly one of `commit()` or
`rollback()` is called; the caller is responsible for reaching one of them on
every path, or can use the transaction as a context manager:

    tx = ds.begin_tx()
    try:
        tx.execute('update account set balance = balance - ? where id = ?', 10, 1)
        tx.execute('update account set balance = balance + ? where id = ?', 10, 2)
    except Exception:
        tx.rollback()
        raise
    else:
        tx.commit()
"""
import logging
from typing import Any, Self

from liteforge.exceptions import ExecutionError, TransactionError
from liteforge.result import Result

logger = logging.getLogger(__name__)


class Transaction:
    """Transaction bound to one connection handle.

    Nested transactions on the same handle are not supported.
    """

    def __init__(self, cn: Any) -> None:
        if cn.in_transaction:
            raise TransactionError('a transaction is already open on this connection')

        self.cn = cn
        self.adapter = cn.adapter
        self.dbapi_connection = cn.dbapi_connection
        self.finished = False

        try:
            self.adapter.begin_transaction(self.dbapi_connection)
        except self.adapter.driver_error as err:
            raise ExecutionError(f'failed to begin transaction: {err}') from err

        cn.in_transaction = True
        logger.debug(f'Started transaction for connection {id(cn)}')

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, value: Exception | None, traceback: Any | None) -> None:
        if self.finished:
            return
        if exc_type is not None:
            logger.warning('Rolling back the current transaction')
            self.rollback()
        else:
            self.commit()

    def _check_open(self) -> None:
        if self.finished:
            raise TransactionError('transaction has already been committed or rolled back')

    def execute(self, sql: str, *args: Any) -> Result:
        """Execute a statement inside the transaction.
        """
        self._check_open()
        return self.adapter.execute(self, sql, *args)

    def query(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """Execute a query inside the transaction.
        """
        self._check_open()
        return self.adapter.query(self, sql, *args)

    def query_row(self, sql: str, *args: Any) -> tuple:
        """Execute a query inside the transaction and return its first row.
        """
        self._check_open()
        return self.adapter.query_row(self, sql, *args)

    def commit(self) -> None:
        """Commit and return the connection to auto-commit mode.

        When the driver rejects the commit (a deferred constraint, a lost
        connection) the transaction is rolled back before ExecutionError is
        raised, so the handle is usable again. Should that rollback fail too,
        the transaction stays open and `rollback()` may be retried.
        """
        self._finish('commit')

    def rollback(self) -> None:
        """Roll back and return the connection to auto-commit mode.
        """
        self._finish('rollback')

    def _finish(self, action: str) -> None:
        self._check_open()
        try:
            getattr(self.dbapi_connection, action)()
        except self.adapter.driver_error as err:
            if action == 'commit':
                self._rollback_failed_commit()
            raise ExecutionError(f'failed to {action} transaction: {err}') from err
        self._close()
        logger.debug(f'Transaction {action} complete for connection {id(self.cn)}')

    def _rollback_failed_commit(self) -> None:
        logger.warning('Commit failed, rolling back the current transaction')
        try:
            self.dbapi_connection.rollback()
        except self.adapter.driver_error as err:
            logger.warning(f'Rollback after failed commit failed, transaction left open: {err}')
            return
        self._close()

    def _close(self) -> None:
        """Mark the transaction finished once the driver has ended it."""
        self.finished = True
        self.adapter.end_transaction(self.dbapi_connection)
        self.cn.in_transaction = False
