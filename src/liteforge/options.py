from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from liteforge.dialect import get_adapter_class, get_available_drivers
from liteforge.dialect import is_supported_driver

__all__ = ['DatabaseOptions', 'load_options']


@dataclass
class DatabaseOptions:
    """Options

    supported driver names: `sqlite` (alias `sqlite3`), `postgresql` (alias `postgres`)

    - datasource: file path for SQLite (`:memory:` allowed), URL or libpq
      keyword string for PostgreSQL
    - use_wal: switch SQLite to write-ahead logging after opening
    - encrypt_at_rest / encryption_key: accepted but not implemented; a
      warning is logged at connect time
    """
    drivername: str = 'sqlite'
    datasource: str = None
    use_wal: bool = False
    encrypt_at_rest: bool = False
    encryption_key: str = field(default=None, repr=False)

    def __post_init__(self):
        if not is_supported_driver(self.drivername):
            available = get_available_drivers()
            raise ValueError(f'drivername must be one of: {available}')
        adapter_cls = get_adapter_class(self.drivername)
        adapter_cls.validate_options(self)
        if self.encrypt_at_rest and not self.encryption_key:
            raise ValueError('encryption_key is required when encrypt_at_rest is set')


def load_options(options: DatabaseOptions | Mapping[str, Any] | None = None,
                 **kw: Any) -> DatabaseOptions:
    """Build DatabaseOptions from an options object, a dict, or keyword arguments.

    Keyword arguments override values from `options`.
    """
    if isinstance(options, DatabaseOptions):
        return replace(options, **kw) if kw else options
    if options is None:
        options = {}
    if not isinstance(options, Mapping):
        raise TypeError(f'options must be DatabaseOptions or a mapping, not {type(options).__name__}')
    return DatabaseOptions(**{**options, **kw})
