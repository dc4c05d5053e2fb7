"""
SQL statement generation for model CRUD.

Placeholders always come from the adapter and are numbered from 1 in the order
the parameters are passed, so the same builders serve SQLite (`?`) and
PostgreSQL (`$1`, `$2`, ...).
"""
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from liteforge.dialect import DialectAdapter

logger = logging.getLogger(__name__)

__all__ = [
    'make_placeholders',
    'build_insert_sql',
    'build_select_sql',
    'build_update_sql',
    'build_delete_sql',
]


def make_placeholders(adapter: 'DialectAdapter', count: int, start: int = 1) -> list[str]:
    """Return `count` placeholders numbered from `start`.
    """
    return [adapter.get_placeholder(index) for index in range(start, start + count)]


def build_insert_sql(adapter: 'DialectAdapter', table: str, columns: list[str]) -> str:
    """Generate an INSERT statement.

    A model whose only column is an auto-generated key has nothing to bind;
    both dialects accept DEFAULT VALUES for that case.
    """
    if not columns:
        return f'INSERT INTO {table} DEFAULT VALUES'

    placeholders = make_placeholders(adapter, len(columns))
    return (f"INSERT INTO {table} ({', '.join(columns)}) "
            f"VALUES ({', '.join(placeholders)})")


def build_select_sql(adapter: 'DialectAdapter', table: str, columns: list[str],
                     key: str) -> str:
    """Generate a single-row SELECT by key.
    """
    return (f"SELECT {', '.join(columns)} FROM {table} "
            f'WHERE {key} = {adapter.get_placeholder(1)}')


def build_update_sql(adapter: 'DialectAdapter', table: str, columns: list[str],
                     key: str) -> str:
    """Generate an UPDATE by key.

    Data columns take placeholders 1..n and the key takes n+1, so parameters
    are passed as data values followed by the key value.
    """
    placeholders = make_placeholders(adapter, len(columns) + 1)
    set_clauses = [f'{col} = {ph}' for col, ph in zip(columns, placeholders)]
    return f"UPDATE {table} SET {', '.join(set_clauses)} WHERE {key} = {placeholders[-1]}"


def build_delete_sql(adapter: 'DialectAdapter', table: str, key: str) -> str:
    """Generate a DELETE by key.
    """
    return f'DELETE FROM {table} WHERE {key} = {adapter.get_placeholder(1)}'
