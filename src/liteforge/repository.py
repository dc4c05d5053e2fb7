"""
Model-centric CRUD on top of a Datastore.

`save` decides between INSERT and UPDATE by looking at the primary-key value:
the zero value of its type (0 for integers) means "not inserted yet". A record
whose natural key is legitimately zero therefore cannot be created through
`save`. `Datastore.insert` skips the update branch but also leaves the key
column out, so the database generates the key; to store an explicit zero key,
issue the INSERT through `Datastore.execute`.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any

from liteforge.connection import Datastore
from liteforge.exceptions import DatabaseError, InvalidModelError, NotFoundError
from liteforge.metadata import bind_row, is_zero_value, require_instance
from liteforge.result import Result
from liteforge.sql import build_delete_sql, build_select_sql, build_update_sql

logger = logging.getLogger(__name__)

__all__ = ['Repository', 'ORMRepository']

FIND_MODEL_MESSAGE = 'model must be a non-nil pointer to a struct'


class Repository(ABC):
    """High-level, model-centric interface for CRUD operations.
    """

    @abstractmethod
    def save(self, model: Any) -> Result:
        """Insert when the primary key is unset, update otherwise."""

    @abstractmethod
    def find_by_id(self, model: Any, id: Any) -> None:
        """Populate `model` with the row whose primary key is `id`."""

    @abstractmethod
    def update(self, model: Any) -> Result:
        """Update the row matching the model's primary key."""

    @abstractmethod
    def delete(self, model: Any) -> Result:
        """Delete the row matching the model's primary key."""


class ORMRepository(Repository):
    """Repository backed by a Datastore and its dialect adapter.
    """

    def __init__(self, ds: Datastore | None) -> None:
        self.ds = ds

    def _datastore(self) -> Datastore:
        if self.ds is None:
            raise DatabaseError('datastore is nil')
        return self.ds

    def save(self, model: Any) -> Result:
        """Insert or update depending on the primary-key value.

        Models without a primary key are always inserted.
        """
        ds = self._datastore()
        schema = require_instance(model)

        if schema.primary_key is None:
            return ds.insert(model)
        if is_zero_value(getattr(model, schema.primary_key.attribute)):
            logger.debug(f'Saving new {schema.name} record')
            return ds.insert(model)
        return self.update(model)

    def find_by_id(self, model: Any, id: Any) -> None:
        """Populate the provided model instance with the row for `id`.

        The model is only modified when a row is found.

        Raises
            InvalidModelError: If model is not a dataclass instance
            NoPrimaryKeyError: If the model has no primary key
            NotFoundError: If no row has the given key
        """
        ds = self._datastore()
        schema = require_instance(model, FIND_MODEL_MESSAGE)
        if not schema.columns:
            raise InvalidModelError('model has no fields to query')

        pk_col = schema.primary_key_column
        columns = schema.column_names
        sql = build_select_sql(ds.adapter, schema.name, columns, pk_col)

        try:
            row = ds.query_row(sql, id)
        except NotFoundError as err:
            raise NotFoundError(f'no {schema.name} record found with {pk_col} {id!r}: {err}') from err

        bind_row(model, columns, row)

    def update(self, model: Any) -> Result:
        """Update every non-key column of the row matching the model's key.

        Matching no row is not an error; rows_affected() reports 0.
        """
        ds = self._datastore()
        schema = require_instance(model)
        pk = schema.require_primary_key()

        data_columns = [col for col in schema.columns if col is not pk]
        if not data_columns:
            raise InvalidModelError('no fields to update')

        sql = build_update_sql(ds.adapter, schema.name, [col.name for col in data_columns],
                               pk.name)
        values = [getattr(model, col.attribute) for col in data_columns]
        values.append(getattr(model, pk.attribute))
        return ds.execute(sql, *values)

    def delete(self, model: Any) -> Result:
        """Delete the row matching the model's current primary-key value.
        """
        ds = self._datastore()
        schema = require_instance(model)
        pk = schema.require_primary_key()

        sql = build_delete_sql(ds.adapter, schema.name, pk.name)
        return ds.execute(sql, getattr(model, pk.attribute))
