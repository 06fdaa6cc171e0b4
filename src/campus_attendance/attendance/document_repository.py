from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.constants import ATTENDANCE_COLLECTION
from ..store.base import DocumentStore, where
from .model import AttendanceRecord, qr_record_key
from .repository import AttendanceRepository


class DocumentAttendanceRepository(AttendanceRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def create_qr_record(self, record: AttendanceRecord) -> bool:
        key = qr_record_key(record.session_id or "", record.student_id)
        return self._store.create_if_absent(ATTENDANCE_COLLECTION, key, record.to_document())

    def list_for_session(self, session_id: str) -> Sequence[AttendanceRecord]:
        docs = self._store.query(ATTENDANCE_COLLECTION, [where("sessionId", "==", session_id)])
        return [AttendanceRecord.from_document(d.id, d.data) for d in docs]

    def find_for_student_course_date(
        self, *, student_id: str, course_id: str, on_date: str
    ) -> Optional[AttendanceRecord]:
        docs = self._store.query(
            ATTENDANCE_COLLECTION,
            [
                where("studentId", "==", student_id),
                where("courseId", "==", course_id),
                where("date", "==", on_date),
            ],
        )
        if not docs:
            return None
        # Two sessions of one course can meet on the same day; corrections go to the oldest record.
        docs = sorted(docs, key=lambda d: (d.data.get("timestamp") or "", d.id))
        return AttendanceRecord.from_document(docs[0].id, docs[0].data)

    def save_manual_marks(
        self,
        *,
        creates: Sequence[AttendanceRecord],
        updates: Sequence[tuple[str, dict]],
    ) -> None:
        batch = self._store.batch()
        for record in creates:
            batch.create(ATTENDANCE_COLLECTION, record.record_id, record.to_document())
        for record_id, fields in updates:
            batch.update(ATTENDANCE_COLLECTION, record_id, fields)
        batch.commit()

    def search(
        self,
        *,
        student_id: Optional[str] = None,
        faculty_id: Optional[str] = None,
        course_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        filters = []
        if student_id is not None:
            filters.append(where("studentId", "==", student_id))
        if faculty_id is not None:
            filters.append(where("facultyId", "==", faculty_id))
        if course_id is not None:
            filters.append(where("courseId", "==", course_id))
        # date strings are YYYY-MM-DD so lexical order is chronological
        if start_date is not None:
            filters.append(where("date", ">=", start_date.strftime("%Y-%m-%d")))
        if end_date is not None:
            filters.append(where("date", "<=", end_date.strftime("%Y-%m-%d")))

        docs = self._store.query(ATTENDANCE_COLLECTION, filters)
        return [AttendanceRecord.from_document(d.id, d.data) for d in docs]
