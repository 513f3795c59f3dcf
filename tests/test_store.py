from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from resume_gate import db
from resume_gate.errors import PersistenceError
from resume_gate.store import RequestStore


@pytest.fixture
def store(app):
    return RequestStore()


def test_insert_assigns_increasing_ids(store):
    ids = [store.insert("A", "a@x.com", "r") for _ in range(3)]
    assert ids == sorted(ids)
    assert len(set(ids)) == 3


def test_find_helpers(store):
    first = store.insert("A", "a@x.com", "r")
    second = store.insert("A", "a@x.com", "r2")
    assert store.find_by_id(first).reason == "r"
    assert store.find_by_id(999) is None
    assert store.find_latest_by_email("a@x.com").id == second
    assert store.find_latest_by_email("zzz@x.com") is None


def test_update_reports_missing_rows(store):
    request_id = store.insert("A", "a@x.com", "r")
    assert store.update(request_id, "approved", datetime(2024, 1, 1)) is True
    assert store.update(999, "approved", None) is False


def test_expire_if_stale_is_conditional(store):
    approved_at = datetime(2024, 1, 1, 12, 0)
    request_id = store.insert("A", "a@x.com", "r")
    store.update(request_id, "approved", approved_at)

    assert store.expire_if_stale(request_id, approved_at) is False
    assert store.expire_if_stale(request_id, approved_at + timedelta(seconds=1)) is True
    # Already expired: nothing left to do.
    assert store.expire_if_stale(request_id, approved_at + timedelta(hours=1)) is False

    req = store.find_by_id(request_id)
    assert (req.status, req.approved_at) == ("expired", None)


def test_stale_approved_ids_and_list_recent(store):
    base = datetime(2024, 1, 1, 12, 0)
    old = store.insert("A", "a@x.com", "r")
    new = store.insert("B", "b@x.com", "r")
    store.insert("C", "c@x.com", "r")
    store.update(old, "approved", base)
    store.update(new, "approved", base + timedelta(minutes=10))

    assert store.stale_approved_ids(base + timedelta(minutes=5)) == [old]
    assert [r.id for r in store.list_recent(2)] == [3, 2]


def test_sqlalchemy_errors_become_persistence_errors(store, monkeypatch):
    def broken_commit():
        raise OperationalError("INSERT", {}, Exception("database is locked"))

    monkeypatch.setattr(db.session, "commit", broken_commit)
    with pytest.raises(PersistenceError) as info:
        store.insert("A", "a@x.com", "r")
    assert info.value.message == "Server error"
