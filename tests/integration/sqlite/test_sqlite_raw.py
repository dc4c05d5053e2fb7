import liteforge as lf
import pytest
from liteforge import ExecutionError, NotFoundError


@pytest.fixture
def item_conn(sqlite_conn):
    lf.execute(sqlite_conn, 'CREATE TABLE item (id INTEGER PRIMARY KEY, name TEXT, qty INTEGER)')
    lf.execute(sqlite_conn, "INSERT INTO item (name, qty) VALUES ('bolt', 10), ('nut', 0), ('gear', 3)")
    return sqlite_conn


def test_query_returns_dicts(item_conn):
    rows = lf.query(item_conn, 'SELECT name, qty FROM item WHERE qty > ? ORDER BY name', 0)
    assert rows == [{'name': 'bolt', 'qty': 10}, {'name': 'gear', 'qty': 3}]


def test_query_empty(item_conn):
    assert lf.query(item_conn, 'SELECT name FROM item WHERE qty > ?', 100) == []


def test_query_row(item_conn):
    assert lf.query_row(item_conn, 'SELECT id, name FROM item WHERE name = ?', 'nut') == (2, 'nut')


def test_query_row_no_rows(item_conn):
    with pytest.raises(NotFoundError, match='no rows in result set'):
        lf.query_row(item_conn, 'SELECT id FROM item WHERE name = ?', 'spring')


def test_execute_reports_rows_affected(item_conn):
    result = lf.execute(item_conn, 'UPDATE item SET qty = qty + 1 WHERE qty < ?', 5)
    assert result.rows_affected() == 2


def test_execute_reports_last_insert_id(item_conn):
    result = item_conn.execute('INSERT INTO item (name, qty) VALUES (?, ?)', 'spring', 4)
    assert result.last_insert_id() == 4


def test_syntax_error_is_wrapped(item_conn):
    with pytest.raises(ExecutionError, match='failed to execute statement'):
        lf.execute(item_conn, 'UPDATE nowhere SET x = 1')


def test_parameters_are_bound_not_interpolated(item_conn):
    name = "x'); DROP TABLE item; --"
    lf.execute(item_conn, 'INSERT INTO item (name, qty) VALUES (?, ?)', name, 1)
    assert lf.query_row(item_conn, 'SELECT name FROM item WHERE qty = ? AND name = ?', 1, name) == (name,)
    assert lf.query_row(item_conn, 'SELECT COUNT(*) FROM item') == (4,)
