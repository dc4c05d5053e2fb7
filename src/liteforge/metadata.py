"""
Table metadata derived from dataclass models.

A model is a plain dataclass. Column names are the lowercased field names in
declaration order, the table name is the lowercased class name. Field metadata
added with `primary_key()` and `column()` marks the primary key and attaches a
constraint clause that is copied verbatim (uppercased) into CREATE TABLE:

    @dataclass
    class User:
        id: int = primary_key('not null')
        username: str = column('unique not null', default='')
        age: int = 0

The schema of a class is computed once and cached, so the column order used for
writes and the order used for binding scanned rows always come from the same
TableSchema object.
"""
import dataclasses
import logging
import types
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Union, get_args, get_origin, get_type_hints

from liteforge.exceptions import ExecutionError, InvalidModelError
from liteforge.exceptions import NoPrimaryKeyError

logger = logging.getLogger(__name__)

__all__ = [
    'ColumnInfo',
    'TableSchema',
    'primary_key',
    'column',
    'get_schema',
    'table_name',
    'field_info',
    'primary_key_column',
    'primary_key_value',
    'bind_row',
    'is_zero_value',
    'require_instance',
]

PRIMARY_KEY = 'liteforge.primary_key'
CONSTRAINT = 'liteforge.constraint'

NIL_MODEL_MESSAGE = 'no model passed in. model was nil'
NOT_A_MODEL_MESSAGE = 'model must be a dataclass instance or class'


def primary_key(constraint: str | None = None, default: Any = 0, **kwargs: Any) -> Any:
    """Declare the primary-key field of a model.

    The default of 0 makes a fresh instance count as "not yet inserted" for
    `Repository.save`.
    """
    return field(default=default, metadata={PRIMARY_KEY: True, CONSTRAINT: constraint},
                 **kwargs)


def column(constraint: str | None = None, **kwargs: Any) -> Any:
    """Declare a regular field with a column constraint such as 'unique not null'.
    """
    return field(metadata={CONSTRAINT: constraint}, **kwargs)


@dataclass(frozen=True)
class ColumnInfo:
    """One column of a model table.
    """
    name: str
    attribute: str
    python_type: Any
    constraint: str = ''
    primary_key: bool = False

    def coerce(self, value: Any) -> Any:
        """Convert a scanned database value to the field's Python type.

        SQLite has no boolean storage class and hands back 0/1.
        """
        if value is None:
            return None
        if self.python_type is bool and not isinstance(value, bool):
            return bool(value)
        return value


@dataclass(frozen=True)
class TableSchema:
    """Table name, ordered columns and primary key of a model class.
    """
    name: str
    columns: tuple[ColumnInfo, ...]
    primary_key: ColumnInfo | None = None

    @property
    def column_names(self) -> list[str]:
        return [col.name for col in self.columns]

    def require_primary_key(self) -> ColumnInfo:
        """Return the primary-key column.

        Raises
            NoPrimaryKeyError: If no field is marked as primary key
        """
        if self.primary_key is None:
            raise NoPrimaryKeyError(f'no primary key field found on model {self.name}')
        return self.primary_key

    @property
    def primary_key_column(self) -> str:
        return self.require_primary_key().name


def _unwrap_optional(annotation: Any) -> Any:
    """Reduce `X | None` / `Optional[X]` to `X`."""
    if get_origin(annotation) in {Union, types.UnionType}:
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _model_class(model: Any) -> type:
    if model is None:
        raise InvalidModelError(NIL_MODEL_MESSAGE)
    cls = model if isinstance(model, type) else type(model)
    if not dataclasses.is_dataclass(cls):
        raise InvalidModelError(NOT_A_MODEL_MESSAGE)
    return cls


@lru_cache(maxsize=None)
def _build_schema(cls: type) -> TableSchema:
    hints = get_type_hints(cls)
    columns = []
    pk = None
    for f in dataclasses.fields(cls):
        is_pk = bool(f.metadata.get(PRIMARY_KEY))
        if is_pk and pk is not None:
            logger.warning(f'{cls.__name__}.{f.name} is marked as primary key but '
                           f'{pk.attribute} already is; using {pk.attribute}')
            is_pk = False
        info = ColumnInfo(
            name=f.name.lower(),
            attribute=f.name,
            python_type=_unwrap_optional(hints.get(f.name, Any)),
            constraint=f.metadata.get(CONSTRAINT) or '',
            primary_key=is_pk,
        )
        if is_pk:
            pk = info
        columns.append(info)

    schema = TableSchema(name=cls.__name__.lower(), columns=tuple(columns), primary_key=pk)
    logger.debug(f'Built schema for {cls.__name__}: {schema.column_names}')
    return schema


def get_schema(model: Any) -> TableSchema:
    """Return the cached TableSchema for a model instance or class.

    Raises
        InvalidModelError: If model is None or not a dataclass
    """
    return _build_schema(_model_class(model))


def require_instance(model: Any, message: str = NOT_A_MODEL_MESSAGE) -> TableSchema:
    """Validate that model is a dataclass instance (not the class itself).
    """
    if model is None or isinstance(model, type) or not dataclasses.is_dataclass(model):
        raise InvalidModelError(message)
    return get_schema(model)


def table_name(model: Any) -> str:
    """Return the table name for a model: the lowercased class name.
    """
    return get_schema(model).name


def field_info(model: Any) -> tuple[list[str], list[Any]]:
    """Return column names and the current field values, in declaration order.
    """
    schema = require_instance(model)
    values = [getattr(model, col.attribute) for col in schema.columns]
    return schema.column_names, values


def primary_key_column(model: Any) -> str:
    """Return the primary-key column name of a model.

    Raises
        NoPrimaryKeyError: If the model has no primary-key field
    """
    return get_schema(model).primary_key_column


def primary_key_value(model: Any) -> Any:
    """Return the current value of the model's primary-key field.
    """
    pk = require_instance(model).require_primary_key()
    return getattr(model, pk.attribute)


def bind_row(model: Any, columns: list[str], row: tuple | list) -> None:
    """Assign a scanned row onto the model's fields, position by position.
    """
    schema = require_instance(model)
    if len(row) != len(columns):
        raise ExecutionError(f'failed to scan row into model: expected {len(columns)} '
                             f'columns, got {len(row)}')

    by_name = {col.name: col for col in schema.columns}
    for name, value in zip(columns, row):
        col = by_name[name]
        try:
            setattr(model, col.attribute, col.coerce(value))
        except dataclasses.FrozenInstanceError as err:
            raise InvalidModelError(f'model {type(model).__name__} is frozen '
                                    'and cannot be bound') from err


def is_zero_value(value: Any) -> bool:
    """True for None and for the zero value of the value's own type (0, '', 0.0).
    """
    if value is None:
        return True
    try:
        return value == type(value)()
    except TypeError:
        return False
