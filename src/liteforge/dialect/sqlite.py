"""
SQLite-specific adapter implementation.

It handles SQLite's unique features such as:
- File databases whose containing directory may not exist yet
- Optional write-ahead logging (PRAGMA journal_mode=WAL)
- `?` placeholders regardless of parameter position
- Native last-insert-rowid reporting through `cursor.lastrowid`
"""
import logging
import pathlib
import sqlite3
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from liteforge.dialect.base import DialectAdapter
from liteforge.exceptions import ConnectionFailure

if TYPE_CHECKING:
    from liteforge.options import DatabaseOptions

logger = logging.getLogger(__name__)

DIRECTORY_MODE = 0o755


def _is_file_datasource(datasource: str) -> bool:
    return datasource != ':memory:' and not datasource.startswith('file:')


class SQLiteAdapter(DialectAdapter):
    """SQLite-specific operations.
    """

    driver_error = sqlite3.Error

    float_type = 'REAL'

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for SQLite."""
        return 'sqlite'

    def build_connection_url(self, options: 'DatabaseOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL for SQLite."""
        return sa.URL.create(drivername='sqlite', database=options.datasource)

    def prepare_datasource(self, options: 'DatabaseOptions') -> None:
        """Create the directory holding the database file if it is missing.
        """
        if not _is_file_datasource(options.datasource):
            return
        db_dir = pathlib.Path(options.datasource).parent
        if not db_dir.exists():
            db_dir.mkdir(mode=DIRECTORY_MODE, parents=True)
            logger.debug(f'Created database directory {db_dir}')

    def configure_connection(self, raw_conn: Any) -> None:
        """Configure connection settings for SQLite.
        """
        raw_conn.execute('PRAGMA foreign_keys = ON')
        raw_conn.isolation_level = None

    def after_connect(self, raw_conn: Any, options: 'DatabaseOptions') -> None:
        """Switch to write-ahead logging when requested.
        """
        if not options.use_wal:
            return
        try:
            mode = raw_conn.execute('PRAGMA journal_mode=WAL').fetchone()[0]
        except sqlite3.Error as err:
            raise ConnectionFailure(f'failed to switch to WAL mode: {err}') from err
        logger.debug(f'SQLite journal mode is now {mode}')

    def begin_transaction(self, raw_conn: Any) -> None:
        """Open a deferred transaction.

        The connection stays in isolation_level=None so the driver never
        issues an implicit BEGIN of its own.
        """
        raw_conn.execute('BEGIN')

    def end_transaction(self, raw_conn: Any) -> None:
        """Nothing to restore: SQLite returns to auto-commit after COMMIT/ROLLBACK.
        """

    def get_placeholder(self, index: int) -> str:
        """Return SQLite's placeholder marker.
        """
        return '?'

    def primary_key_type(self, sql_type: str) -> str:
        """An INTEGER PRIMARY KEY column aliases the rowid and auto-increments.
        """
        return f'{sql_type} PRIMARY KEY'
