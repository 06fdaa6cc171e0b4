from __future__ import annotations

import threading

import pytest

from campus_attendance.core.exceptions import DocumentExistsError
from campus_attendance.store.base import Filter, where
from campus_attendance.store.memory import InMemoryDocumentStore


def test_create_if_absent_only_first_writer_wins():
    store = InMemoryDocumentStore()

    assert store.create_if_absent("attendance", "s1_u1", {"n": 1}) is True
    assert store.create_if_absent("attendance", "s1_u1", {"n": 2}) is False
    assert store.get("attendance", "s1_u1").data == {"n": 1}


def test_create_if_absent_under_concurrent_writers():
    store = InMemoryDocumentStore()
    wins = []
    barrier = threading.Barrier(8)

    def worker(i):
        barrier.wait()
        if store.create_if_absent("attendance", "same-key", {"writer": i}):
            wins.append(i)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(wins) == 1


def test_query_filters_and_range_on_date_strings():
    store = InMemoryDocumentStore(
        {
            "attendance": {
                "a": {"studentId": "u1", "date": "2026-01-01"},
                "b": {"studentId": "u1", "date": "2026-01-15"},
                "c": {"studentId": "u2", "date": "2026-01-20"},
            }
        }
    )

    docs = store.query(
        "attendance",
        [where("studentId", "==", "u1"), where("date", ">=", "2026-01-10")],
    )

    assert [d.id for d in docs] == ["b"]


def test_filter_rejects_unknown_operator():
    with pytest.raises(ValueError):
        Filter("x", "~=", 1)


def test_returned_documents_are_copies():
    store = InMemoryDocumentStore({"c": {"k": {"v": 1}}})

    doc = store.get("c", "k")
    doc.data["v"] = 99

    assert store.get("c", "k").data["v"] == 1


def test_increment_missing_document_returns_false():
    store = InMemoryDocumentStore()
    assert store.increment("attendance_sessions", "nope", "attendanceCount") is False


def test_batch_commit_is_all_or_nothing():
    store = InMemoryDocumentStore({"c": {"a": {"v": 1}}})

    batch = store.batch()
    batch.delete("c", "a")
    batch.update("c", "missing", {"v": 2})

    with pytest.raises(KeyError):
        batch.commit()

    assert store.get("c", "a") is not None


def test_batch_create_on_taken_id_fails_whole_commit():
    store = InMemoryDocumentStore({"attendance": {"manual_u1_c1_2026-02-02": {"status": "present"}}})

    batch = store.batch()
    batch.set("attendance", "other", {"status": "absent"})
    batch.create("attendance", "manual_u1_c1_2026-02-02", {"status": "absent"})

    with pytest.raises(DocumentExistsError):
        batch.commit()

    assert store.get("attendance", "other") is None
    assert store.get("attendance", "manual_u1_c1_2026-02-02").data == {"status": "present"}


def test_compare_and_set_only_applies_to_expected_value():
    store = InMemoryDocumentStore({"attendance_sessions": {"s1": {"attendanceCount": 3}}})

    assert store.compare_and_set("attendance_sessions", "s1", "attendanceCount", expected=2, value=5) is False
    assert store.get("attendance_sessions", "s1").data["attendanceCount"] == 3

    assert store.compare_and_set("attendance_sessions", "s1", "attendanceCount", expected=3, value=5) is True
    assert store.get("attendance_sessions", "s1").data["attendanceCount"] == 5

    assert store.compare_and_set("attendance_sessions", "nope", "attendanceCount", expected=0, value=1) is False
