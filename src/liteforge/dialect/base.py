"""
Base adapter interface for database dialects.

An adapter encapsulates everything that differs between engines: how a
connection is opened and configured, how CREATE TABLE types and primary keys
are spelled, which parameter placeholder the driver expects, and how the
identifier generated by an INSERT is recovered. Adapters are stateless; one
instance per dialect is shared by every connection.
"""
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from liteforge.exceptions import ConnectionFailure, ExecutionError, NotFoundError
from liteforge.metadata import get_schema
from liteforge.result import DriverResult, Result
from liteforge.transaction import Transaction
from sqlalchemy.pool import NullPool

if TYPE_CHECKING:
    from liteforge.options import DatabaseOptions

logger = logging.getLogger(__name__)


class DialectAdapter(ABC):
    """Base class for dialect-specific operations.
    """

    # DBAPI exception base class of the driver
    driver_error: type[Exception] = Exception

    float_type = 'REAL'

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the dialect identifier (e.g., 'postgresql', 'sqlite')."""

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return list of required option field names for this dialect.
        """
        return ['datasource']

    @classmethod
    def validate_options(cls, options: 'DatabaseOptions') -> None:
        """Validate options for this dialect.

        Raises
            ValueError: If any required field is None or empty
        """
        for field in cls.get_required_options():
            if not getattr(options, field):
                raise ValueError(f'field {field} cannot be None or empty')

    @abstractmethod
    def build_connection_url(self, options: 'DatabaseOptions') -> sa.URL:
        """Build the SQLAlchemy URL for this dialect.
        """

    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Return extra SQLAlchemy create_engine kwargs for this dialect.
        """
        return {}

    def prepare_datasource(self, options: 'DatabaseOptions') -> None:
        """Prepare the data source before opening it.
        """

    @abstractmethod
    def configure_connection(self, raw_conn: Any) -> None:
        """Apply dialect settings to a freshly opened driver connection.

        Connections run in auto-commit mode outside explicit transactions.
        """

    def after_connect(self, raw_conn: Any, options: 'DatabaseOptions') -> None:
        """Apply option-driven settings once the connection is configured.
        """

    @abstractmethod
    def begin_transaction(self, raw_conn: Any) -> None:
        """Leave auto-commit mode and open a transaction.
        """

    @abstractmethod
    def end_transaction(self, raw_conn: Any) -> None:
        """Return to auto-commit mode after commit or rollback.
        """

    @abstractmethod
    def get_placeholder(self, index: int) -> str:
        """Return the parameter marker for the 1-based parameter `index`.
        """

    @abstractmethod
    def primary_key_type(self, sql_type: str) -> str:
        """Return the column type of a primary key whose base type is `sql_type`.
        """

    def connect(self, options: 'DatabaseOptions') -> sa.engine.Connection:
        """Open, configure and ping a connection described by `options`.

        Raises
            ConnectionFailure: Wrapping the cause when any step fails
        """
        if options.encrypt_at_rest:
            logger.warning(f'Encryption at rest is not supported for {self.dialect_name}; '
                           'the database will not be encrypted')

        try:
            self.prepare_datasource(options)
        except OSError as err:
            raise ConnectionFailure(f'failed to create directory: {err}') from err

        try:
            engine = sa.create_engine(self.build_connection_url(options),
                                      poolclass=NullPool,
                                      **self.get_engine_kwargs(options))
            sa_connection = engine.connect()
        except (sa.exc.SQLAlchemyError, self.driver_error) as err:
            raise ConnectionFailure(f'failed to open database: {err}') from err

        raw_conn = sa_connection.connection.driver_connection
        try:
            try:
                self.configure_connection(raw_conn)
            except self.driver_error as err:
                raise ConnectionFailure(f'failed to configure connection: {err}') from err
            self.after_connect(raw_conn, options)
            try:
                self.ping(raw_conn)
            except self.driver_error as err:
                raise ConnectionFailure(f'failed to ping database: {err}') from err
        except ConnectionFailure:
            sa_connection.close()
            engine.dispose()
            raise

        logger.debug(f'Opened {self.dialect_name} connection')
        return sa_connection

    def ping(self, raw_conn: Any) -> None:
        """Round-trip a trivial statement to prove the connection is alive.
        """
        cursor = raw_conn.cursor()
        try:
            cursor.execute('SELECT 1')
            cursor.fetchone()
        finally:
            cursor.close()

    def column_type(self, python_type: Any) -> str:
        """Map a field annotation to a SQL column type.

        Unknown types fall back to TEXT.
        """
        if isinstance(python_type, type):
            if issubclass(python_type, bool):
                return 'BOOLEAN'
            if issubclass(python_type, int):
                return 'INTEGER'
            if issubclass(python_type, float):
                return self.float_type
        return 'TEXT'

    def create_table_sql(self, model: Any) -> str:
        """Generate CREATE TABLE IF NOT EXISTS for a model.

        Raises
            InvalidModelError: If model is None or not a dataclass
        """
        schema = get_schema(model)

        definitions = []
        for col in schema.columns:
            sql_type = self.column_type(col.python_type)
            if col.primary_key:
                sql_type = self.primary_key_type(sql_type)
            definitions.append(f'{col.name} {sql_type} {col.constraint.upper()}'.rstrip())

        sql = f"CREATE TABLE IF NOT EXISTS {schema.name} ({', '.join(definitions)})"
        logger.debug(f'Generated {self.dialect_name} DDL: {sql}')
        return sql

    @contextmanager
    def _cursor(self, cn: Any, sql: str, params: Sequence[Any] = (),
                action: str = 'execute statement') -> Iterator[Any]:
        """Context manager for cursor lifecycle.

        Driver errors raised while opening the cursor, executing or fetching
        are wrapped in ExecutionError; an opened cursor is always closed.
        """
        cursor = None
        try:
            cursor = cn.dbapi_connection.cursor()
            logger.debug(f'Executing with {len(params)} parameters: {sql}')
            if params:
                cursor.execute(sql, tuple(params))
            else:
                cursor.execute(sql)
            yield cursor
        except self.driver_error as err:
            raise ExecutionError(f'failed to {action}: {err}') from err
        finally:
            if cursor is not None:
                cursor.close()

    def execute(self, cn: Any, sql: str, *args: Any) -> Result:
        """Execute a statement and return its driver-reported result.
        """
        with self._cursor(cn, sql, args) as cursor:
            return DriverResult.from_cursor(cursor)

    def query(self, cn: Any, sql: str, *args: Any) -> list[dict[str, Any]]:
        """Execute a query and return all rows as dicts keyed by column name.
        """
        with self._cursor(cn, sql, args, 'execute query') as cursor:
            if cursor.description is None:
                return []
            columns = [desc[0] for desc in cursor.description]
            return [dict(zip(columns, row)) for row in cursor.fetchall()]

    def query_row(self, cn: Any, sql: str, *args: Any) -> tuple:
        """Execute a query and return its first row as a tuple.

        Raises
            NotFoundError: If the query returned no rows
        """
        with self._cursor(cn, sql, args, 'execute query') as cursor:
            row = cursor.fetchone() if cursor.description is not None else None
        if row is None:
            raise NotFoundError('no rows in result set')
        return tuple(row)

    def execute_insert(self, cn: Any, sql: str, values: Sequence[Any],
                       pk_column: str | None) -> Result:
        """Execute an INSERT and return a result carrying the generated id.

        The default relies on the driver reporting `lastrowid`.
        """
        with self._cursor(cn, sql, values, 'execute insert statement') as cursor:
            return DriverResult.from_cursor(cursor)

    def begin_tx(self, cn: Any) -> Transaction:
        """Start a transaction on the connection.
        """
        return Transaction(cn)
