"""
Application data store for users.

Wraps a Repository behind a narrow, domain-named interface. Unlike
`Repository.find_by_id`, `get_user_by_id` reports a missing user as None
rather than raising.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from liteforge.exceptions import DatabaseError, NilRepositoryError, NotFoundError
from liteforge.exceptions import StoreNotImplementedError
from liteforge.metadata import primary_key
from liteforge.repository import Repository

logger = logging.getLogger(__name__)

__all__ = ['User', 'DataStore', 'ORMDataStore', 'APIDataStore']


@dataclass
class User:
    id: int = primary_key()
    name: str = ''
    age: int = 0


def _with_context(err: DatabaseError, message: str) -> DatabaseError:
    """Return an error of the same class with `message` prefixed."""
    return type(err)(f'{message}: {err}')


class DataStore(ABC):
    """Application-specific interface for user data access.
    """

    @abstractmethod
    def get_user_by_id(self, user_id: int) -> User | None:
        """Return the user, or None if there is none with this id."""

    @abstractmethod
    def save_user(self, user: User) -> None:
        """Insert a new user or update an existing one."""

    @abstractmethod
    def delete_user(self, user_id: int) -> None:
        """Delete the user with this id."""


class ORMDataStore(DataStore):
    """DataStore backed by a Repository.
    """

    def __init__(self, repo: Repository | None) -> None:
        self.repo = repo

    def _repository(self) -> Repository:
        if self.repo is None:
            raise NilRepositoryError()
        return self.repo

    def get_user_by_id(self, user_id: int) -> User | None:
        repo = self._repository()
        user = User()
        try:
            repo.find_by_id(user, user_id)
        except NotFoundError:
            logger.debug(f'User {user_id} not found')
            return None
        except DatabaseError as err:
            raise _with_context(err, f'failed to find user by id {user_id}') from err
        return user

    def save_user(self, user: User) -> None:
        repo = self._repository()
        try:
            repo.save(user)
        except DatabaseError as err:
            raise _with_context(err, 'failed to save user') from err

    def delete_user(self, user_id: int) -> None:
        repo = self._repository()
        try:
            repo.delete(User(id=user_id))
        except DatabaseError as err:
            raise _with_context(err, f'failed to delete user with id {user_id}') from err


class APIDataStore(DataStore):
    """Placeholder for a user store backed by a remote API.

    Only user 1 can be read; everything else raises StoreNotImplementedError,
    which is both a DatabaseError and a NotImplementedError.
    """

    def get_user_by_id(self, user_id: int) -> User | None:
        if user_id == 1:
            return User(id=1, name='Mock API User', age=30)
        raise StoreNotImplementedError('API not implemented: user not found')

    def save_user(self, user: User) -> None:
        raise StoreNotImplementedError('API not implemented: cannot save user')

    def delete_user(self, user_id: int) -> None:
        raise StoreNotImplementedError('API not implemented: cannot delete user')
