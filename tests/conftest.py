import pytest
from liteforge.metadata import _build_schema


@pytest.fixture(autouse=True)
def clear_schema_cache():
    """Clear the model schema cache so each test sees fresh class definitions."""
    _build_schema.cache_clear()
    yield
    _build_schema.cache_clear()


pytest_plugins = [
    'tests.fixtures.mocks',
    'tests.fixtures.sqlite',
    'tests.fixtures.postgres',
]
