import pytest
from mysql.connector import errors

from fake_mysql import FakeConnection, FakeConnFactory
from src.custody_tracker.custody_tracker.core.exceptions import StorageUnavailableError, TaskCompletedError
from src.custody_tracker.custody_tracker.database.mysql_base import db_cursor


def _lost_connection():
    return errors.OperationalError(msg="Lost connection to MySQL server during query", errno=2013)


def _run(factory, sql="SELECT 1"):
    with db_cursor(factory) as (_, cur):
        cur.execute(sql)


def test_commit_on_success():
    conn = FakeConnection([[{"one": 1}]])
    _run(FakeConnFactory(conn))
    assert conn.committed
    assert not conn.rollback_attempted
    assert conn.closed


def test_connect_failure_is_storage_unavailable():
    with pytest.raises(StorageUnavailableError):
        _run(FakeConnFactory(connect_error=errors.InterfaceError(msg="Can't connect", errno=2003)))


def test_lost_connection_with_failing_rollback_is_storage_unavailable():
    conn = FakeConnection([_lost_connection()], rollback_error=_lost_connection(), close_error=_lost_connection())

    with pytest.raises(StorageUnavailableError) as exc:
        _run(FakeConnFactory(conn))

    assert conn.rollback_attempted
    assert conn.closed
    assert exc.value.__cause__.errno == 2013


@pytest.mark.parametrize("errno", [1205, 1213])
def test_lock_wait_and_deadlock_are_storage_unavailable(errno):
    conn = FakeConnection([errors.DatabaseError(msg="lock", errno=errno)])

    with pytest.raises(StorageUnavailableError):
        _run(FakeConnFactory(conn))

    assert conn.rollback_attempted
    assert not conn.committed


def test_integrity_error_is_not_mapped():
    conn = FakeConnection([errors.IntegrityError(msg="Duplicate entry", errno=1062)])

    with pytest.raises(errors.IntegrityError):
        _run(FakeConnFactory(conn))

    assert conn.rollback_attempted


def test_domain_error_rolls_back_even_if_rollback_fails():
    conn = FakeConnection(rollback_error=_lost_connection())

    with pytest.raises(TaskCompletedError):
        with db_cursor(FakeConnFactory(conn)):
            raise TaskCompletedError("done")

    assert conn.rollback_attempted
    assert not conn.committed
