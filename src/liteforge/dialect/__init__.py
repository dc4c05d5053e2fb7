"""
Dialect adapter factory.

The set of dialects is closed: driver names map to one of the two adapters
below and anything else is rejected.
"""
from functools import lru_cache

from liteforge.dialect.base import DialectAdapter as DialectAdapter
from liteforge.dialect.postgres import PostgresAdapter as PostgresAdapter
from liteforge.dialect.sqlite import SQLiteAdapter as SQLiteAdapter

_ADAPTERS: dict[str, type[DialectAdapter]] = {
    'sqlite': SQLiteAdapter,
    'sqlite3': SQLiteAdapter,
    'postgresql': PostgresAdapter,
    'postgres': PostgresAdapter,
}


def _validate_driver(drivername: str) -> None:
    """Raise ValueError if drivername is not supported."""
    if drivername not in _ADAPTERS:
        raise ValueError(f'Unsupported driver: {drivername}. Available: {get_available_drivers()}')


@lru_cache(maxsize=8)
def get_adapter(drivername: str) -> DialectAdapter:
    """Get the shared adapter instance for a driver name.
    """
    _validate_driver(drivername)
    return _ADAPTERS[drivername]()


def get_adapter_class(drivername: str) -> type[DialectAdapter]:
    """Get the adapter class for a driver name without instantiating."""
    _validate_driver(drivername)
    return _ADAPTERS[drivername]


def get_available_drivers() -> list[str]:
    """Return list of accepted driver names."""
    return list(_ADAPTERS.keys())


def is_supported_driver(drivername: str) -> bool:
    """Check if a driver name is supported."""
    return drivername in _ADAPTERS
