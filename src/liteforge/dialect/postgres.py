"""
PostgreSQL-specific adapter implementation.

It handles PostgreSQL's unique features such as:
- Data sources given either as a URL or as a libpq keyword string
- Numbered placeholders ($1, $2, ...) through psycopg's RawCursor
- SERIAL primary keys for integer keys
- INSERT ... RETURNING to recover generated keys, since the driver does not
  report a last-inserted id
"""
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import psycopg
import sqlalchemy as sa
from liteforge.dialect.base import DialectAdapter
from liteforge.result import Result, ReturningResult

if TYPE_CHECKING:
    from liteforge.options import DatabaseOptions

logger = logging.getLogger(__name__)

DRIVERNAME = 'postgresql+psycopg'


def _is_url(datasource: str) -> bool:
    return '://' in datasource


class PostgresAdapter(DialectAdapter):
    """PostgreSQL-specific operations.
    """

    driver_error = psycopg.Error

    float_type = 'DOUBLE PRECISION'

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for PostgreSQL."""
        return 'postgresql'

    @classmethod
    def validate_options(cls, options: 'DatabaseOptions') -> None:
        super().validate_options(options)
        if options.use_wal:
            raise ValueError('use_wal is only supported for sqlite')

    def build_connection_url(self, options: 'DatabaseOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL for PostgreSQL.

        URL data sources (`postgres://...`, `postgresql://...`) are pinned to
        the psycopg driver. Keyword data sources are opened by the creator
        from get_engine_kwargs, so the URL only names the dialect.
        """
        if _is_url(options.datasource):
            return sa.make_url(options.datasource).set(drivername=DRIVERNAME)
        return sa.URL.create(drivername=DRIVERNAME)

    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for PostgreSQL."""
        if _is_url(options.datasource):
            return {}
        datasource = options.datasource
        return {'creator': lambda: psycopg.connect(datasource)}

    def configure_connection(self, raw_conn: Any) -> None:
        """Configure connection settings for PostgreSQL.
        """
        raw_conn.cursor_factory = psycopg.RawCursor
        raw_conn.autocommit = True

    def begin_transaction(self, raw_conn: Any) -> None:
        """Disable auto-commit; psycopg opens the transaction on the next statement.
        """
        raw_conn.autocommit = False

    def end_transaction(self, raw_conn: Any) -> None:
        """Enable auto-commit mode for PostgreSQL.
        """
        raw_conn.autocommit = True

    def get_placeholder(self, index: int) -> str:
        """Return the numbered placeholder for a 1-based parameter index.
        """
        if index < 1:
            raise ValueError(f'placeholder index must be >= 1, got {index}')
        return f'${index}'

    def primary_key_type(self, sql_type: str) -> str:
        """Integer keys become SERIAL so the server generates them.
        """
        if sql_type == 'INTEGER':
            return 'SERIAL PRIMARY KEY'
        return f'{sql_type} PRIMARY KEY'

    def execute_insert(self, cn: Any, sql: str, values: Sequence[Any],
                       pk_column: str | None) -> Result:
        """Execute an INSERT, recovering the generated key with RETURNING.

        Without a primary key there is nothing to return and the statement
        runs as a plain exec.
        """
        if pk_column is None:
            return self.execute(cn, sql, *values)

        sql = f'{sql} RETURNING {pk_column}'
        with self._cursor(cn, sql, values, 'execute insert query and scan id') as cursor:
            row = cursor.fetchone()
        logger.debug(f'Insert returned {pk_column}={row[0]}')
        return ReturningResult(row[0])
